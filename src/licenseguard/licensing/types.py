from __future__ import annotations

import base64
import binascii
import json
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from nacl.exceptions import BadSignatureError, CryptoError
from nacl.signing import VerifyKey
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError,
    field_validator,
)

from licenseguard.licensing.errors import LicenseFormatError


class LicenseType(str, Enum):
    TRIAL = "trial"
    STANDARD = "standard"


class Customer(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str | None = None
    email: str | None = None
    company: str | None = None


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class License(BaseModel):
    """A parsed license.

    The model is frozen so a license cannot change while a validation chain
    is reading it. ``signature`` is the base64 Ed25519 signature over
    :meth:`signed_payload`.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    type: LicenseType = LicenseType.STANDARD
    quantity: int = Field(default=1, ge=1, description="Licensed seats")
    customer: Customer | None = None
    product_features: dict[str, str] = Field(default_factory=dict)
    additional_attributes: dict[str, str] = Field(default_factory=dict)
    issued_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    expiration: datetime
    signature: str | None = None

    # Exact payload bytes when the license was parsed from a license string.
    _payload_bytes: bytes | None = PrivateAttr(default=None)

    @field_validator("issued_at", "expiration")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return as_utc(value)

    def signed_payload(self) -> bytes:
        if self._payload_bytes is not None and self._matches_payload_bytes():
            return self._payload_bytes
        return self.model_dump_json(exclude={"signature"}).encode("utf-8")

    def _matches_payload_bytes(self) -> bool:
        # Copies made with model_copy(update=...) keep the parsed bytes but
        # may no longer describe them.
        parsed = type(self).model_validate_json(self._payload_bytes)
        exclude = {"signature"}
        return parsed.model_dump(exclude=exclude) == self.model_dump(exclude=exclude)

    def verify_signature(self, public_key: str) -> bool:
        if not self.signature:
            return False

        try:
            verify_key = VerifyKey(base64.b64decode(public_key, validate=True))
            signature_bytes = base64.b64decode(self.signature, validate=True)
        except (binascii.Error, ValueError, TypeError, CryptoError):
            return False

        try:
            verify_key.verify(self.signed_payload(), signature_bytes)
        except (BadSignatureError, ValueError):
            return False
        return True

    def with_signature(self, signature: str) -> License:
        return self.model_copy(update={"signature": signature})

    def to_license_string(self) -> str:
        if not self.signature:
            raise LicenseFormatError("Cannot serialize an unsigned license")
        payload_b64 = base64.b64encode(self.signed_payload()).decode()
        return f"{payload_b64}.{self.signature}"

    @classmethod
    def load(cls, license_str: str) -> License:
        """Parse ``<payload>.<signature>`` without verifying the signature."""
        parts = license_str.strip().split(".")
        if len(parts) != 2:
            raise LicenseFormatError(
                "Invalid license format: expected <payload>.<signature>"
            )

        payload_b64, signature_b64 = parts
        try:
            payload_bytes = base64.b64decode(payload_b64, validate=True)
            base64.b64decode(signature_b64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise LicenseFormatError("Invalid base64 encoding") from e

        try:
            payload_dict = json.loads(payload_bytes.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise LicenseFormatError("Invalid JSON in payload") from e

        if not isinstance(payload_dict, dict):
            raise LicenseFormatError("Invalid payload: expected a JSON object")
        payload_dict.pop("signature", None)

        try:
            license_ = cls.model_validate({**payload_dict, "signature": signature_b64})
        except ValidationError as e:
            raise LicenseFormatError(f"Invalid payload schema: {e}") from e

        license_._payload_bytes = payload_bytes
        return license_
