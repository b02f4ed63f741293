from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from licenseguard.licensing.errors import InvalidChainStateError
from licenseguard.licensing.failures import ValidationFailure
from licenseguard.licensing.types import License, as_utc
from licenseguard.utils.logging import sanitize_for_log

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Predicate = Callable[[License], bool]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Validator:
    """A predicate over a license and the failure to report when it is false."""

    predicate: Predicate | None = None
    failure_result: ValidationFailure | None = None

    def is_complete(self) -> bool:
        return self.predicate is not None and self.failure_result is not None


class ValidatorChain:
    """Ordered validators for one license.

    Checks are plain functions that call :meth:`append_validator` and fill in
    the returned :class:`Validator`; see :mod:`licenseguard.licensing.checks`.
    """

    def __init__(self, license_: License, *, clock: Clock | None = None):
        self.license = license_
        self._clock = clock or utc_now
        self._validators: list[Validator] = []

    def __len__(self) -> int:
        return len(self._validators)

    @property
    def validators(self) -> tuple[Validator, ...]:
        return tuple(self._validators)

    def now(self) -> datetime:
        # Naive clock readings are taken as UTC.
        return as_utc(self._clock())

    def append_validator(self) -> Validator:
        validator = Validator()
        self._validators.append(validator)
        return validator

    def assert_valid_license(self) -> list[ValidationFailure]:
        """Run every validator in append order and return the failures.

        An empty list means the license passed every check. Predicates are
        re-evaluated on each call.
        """
        for position, validator in enumerate(self._validators):
            if not validator.is_complete():
                raise InvalidChainStateError(
                    f"Validator #{position} has no predicate or failure result"
                )

        failures: list[ValidationFailure] = []
        for validator in self._validators:
            if validator.predicate(self.license):
                continue
            failure = validator.failure_result
            logger.debug(
                "license_check_failed license_id=%s kind=%s message=%s",
                self.license.id,
                failure.kind.value,
                sanitize_for_log(failure.message),
            )
            failures.append(failure)
        return failures
