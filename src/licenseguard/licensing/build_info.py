"""Build timestamps declared by the units a license protects.

A build unit is anything that can report when it was built: a module stamped
with ``__build_date__`` at packaging time, a JSON manifest written by the
build, or an explicit list of timestamps.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from types import ModuleType
from typing import Any, Iterable, Protocol, runtime_checkable

from pydantic import TypeAdapter, ValidationError

from licenseguard.licensing.errors import BuildInfoError
from licenseguard.licensing.types import as_utc

logger = logging.getLogger(__name__)

BUILD_DATE_ATTRIBUTE = "__build_date__"

_timestamp_adapter: TypeAdapter[datetime] = TypeAdapter(datetime)


@runtime_checkable
class BuildUnit(Protocol):
    def build_dates(self) -> Iterable[datetime]: ...


def parse_build_dates(raw: Any, *, source: str) -> tuple[datetime, ...]:
    """Normalize a declared build date value into aware UTC datetimes.

    Accepts ``None``, a single value or a list/tuple of ISO 8601 strings,
    datetimes or unix timestamps.
    """
    if raw is None:
        return ()
    values = raw if isinstance(raw, (list, tuple)) else [raw]

    dates = []
    for value in values:
        try:
            parsed = _timestamp_adapter.validate_python(value)
        except ValidationError as e:
            raise BuildInfoError(f"Invalid build date in {source}: {value!r}") from e
        dates.append(as_utc(parsed))
    return tuple(dates)


@dataclass(frozen=True)
class StaticBuildUnit:
    name: str
    dates: tuple[datetime, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "dates", parse_build_dates(list(self.dates), source=self.name)
        )

    def build_dates(self) -> Iterable[datetime]:
        return self.dates


class ModuleBuildUnit:
    def __init__(self, module: ModuleType):
        self.module = module

    @property
    def name(self) -> str:
        return self.module.__name__

    def build_dates(self) -> Iterable[datetime]:
        raw = getattr(self.module, BUILD_DATE_ATTRIBUTE, None)
        return parse_build_dates(raw, source=f"module {self.name}")

    def __repr__(self) -> str:
        return f"ModuleBuildUnit({self.name!r})"


class ManifestBuildUnit:
    """Reads ``{"build_date": ...}`` or ``{"build_dates": [...]}`` from a file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def build_dates(self) -> Iterable[datetime]:
        if not self.path.exists():
            logger.debug("build_manifest_missing path=%s", self.path)
            return ()

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise BuildInfoError(f"Unreadable build manifest {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise BuildInfoError(f"Build manifest {self.path} must be a JSON object")

        raw = data.get("build_dates", data.get("build_date"))
        return parse_build_dates(raw, source=str(self.path))

    def __repr__(self) -> str:
        return f"ManifestBuildUnit({str(self.path)!r})"


def as_build_unit(obj: Any) -> BuildUnit:
    if isinstance(obj, ModuleType):
        return ModuleBuildUnit(obj)
    if isinstance(obj, BuildUnit):
        return obj
    raise TypeError(f"{obj!r} does not provide build_dates()")
