from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class FailureKind(str, Enum):
    EXPIRED = "expired"
    INVALID_SIGNATURE = "invalid_signature"
    CUSTOM = "custom"


EXPIRED_MESSAGE = "Licensing for this product has expired!"
EXPIRED_HOW_TO_RESOLVE = (
    "Your license is expired. Please contact your distributor/vendor to renew "
    "the license."
)

INVALID_SIGNATURE_MESSAGE = "License signature validation error!"
INVALID_SIGNATURE_HOW_TO_RESOLVE = (
    "The license signature and data does not match. This usually happens when "
    "a license file is corrupted or has been altered."
)


@dataclass(frozen=True)
class ValidationFailure:
    """One failed check: what went wrong and how the user can fix it."""

    message: str
    how_to_resolve: str
    kind: FailureKind = FailureKind.CUSTOM


@dataclass(frozen=True)
class LicenseExpiredValidationFailure(ValidationFailure):
    message: str = EXPIRED_MESSAGE
    how_to_resolve: str = EXPIRED_HOW_TO_RESOLVE
    kind: FailureKind = field(default=FailureKind.EXPIRED, init=False)


@dataclass(frozen=True)
class InvalidSignatureValidationFailure(ValidationFailure):
    message: str = INVALID_SIGNATURE_MESSAGE
    how_to_resolve: str = INVALID_SIGNATURE_HOW_TO_RESOLVE
    kind: FailureKind = field(default=FailureKind.INVALID_SIGNATURE, init=False)


@dataclass(frozen=True)
class GeneralValidationFailure(ValidationFailure):
    kind: FailureKind = field(default=FailureKind.CUSTOM, init=False)
