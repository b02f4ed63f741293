from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field


class LicensingSettings(BaseModel):
    public_key: str | None = Field(
        default=None, description="Base64 Ed25519 public key of the vendor"
    )
    license_key: str | None = Field(default=None, description="License string")
    license_file: Path | None = Field(
        default=None, description="File holding the license string"
    )

    @classmethod
    def from_env(cls) -> LicensingSettings:
        return cls(
            public_key=os.environ.get("LICENSE_PUBLIC_KEY") or None,
            license_key=os.environ.get("LICENSE_KEY") or None,
            license_file=os.environ.get("LICENSE_FILE") or None,
        )

    def read_license_key(self) -> str | None:
        if self.license_key:
            return self.license_key
        if self.license_file is not None:
            return self.license_file.read_text(encoding="utf-8").strip()
        return None
