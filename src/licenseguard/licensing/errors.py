from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from licenseguard.licensing.failures import ValidationFailure


class LicensingError(Exception):
    pass


class LicenseFormatError(LicensingError):
    pass


class InvalidChainStateError(LicensingError):
    """Raised when a validation chain is misused by the calling code."""


class BuildInfoError(LicensingError):
    pass


class LicenseNotValidError(LicensingError):
    def __init__(self, failures: Sequence[ValidationFailure]):
        self.failures = list(failures)
        msg = "License is not valid"
        if self.failures:
            msg += ": " + "; ".join(f.message for f in self.failures)
        super().__init__(msg)
