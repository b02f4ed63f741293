"""Built-in license checks.

Every check takes the chain as its first argument, appends one validator and
returns the chain. New kinds of check are written the same way and attached
with :meth:`ValidationChainBuilder.apply`.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from licenseguard.licensing.build_info import (
    BuildUnit,
    as_build_unit,
    parse_build_dates,
)
from licenseguard.licensing.errors import InvalidChainStateError
from licenseguard.licensing.failures import (
    InvalidSignatureValidationFailure,
    LicenseExpiredValidationFailure,
    ValidationFailure,
)
from licenseguard.licensing.types import License
from licenseguard.licensing.validator import ValidatorChain


def _require_chain(chain: Any) -> ValidatorChain:
    if not isinstance(chain, ValidatorChain):
        raise InvalidChainStateError(
            "Validation chain has not been started; call validate(license) first"
        )
    return chain


def expiration_date(chain: ValidatorChain) -> ValidatorChain:
    chain = _require_chain(chain)
    validator = chain.append_validator()
    # The clock is read when the chain runs, not when the check is added.
    validator.predicate = lambda license_: license_.expiration > chain.now()
    validator.failure_result = LicenseExpiredValidationFailure()
    return chain


def product_build_date(
    chain: ValidatorChain, build_units: Iterable[BuildUnit | Any]
) -> ValidatorChain:
    """Fail when any unit was built on or after the license expiration."""
    chain = _require_chain(chain)
    units = tuple(as_build_unit(unit) for unit in build_units)

    def built_before_expiration(license_: License) -> bool:
        return all(
            build_date < license_.expiration
            for unit in units
            for build_date in parse_build_dates(
                list(unit.build_dates()), source=repr(unit)
            )
        )

    validator = chain.append_validator()
    validator.predicate = built_before_expiration
    validator.failure_result = LicenseExpiredValidationFailure()
    return chain


def signature(chain: ValidatorChain, public_key: str) -> ValidatorChain:
    chain = _require_chain(chain)
    validator = chain.append_validator()
    validator.predicate = lambda license_: license_.verify_signature(public_key)
    validator.failure_result = InvalidSignatureValidationFailure()
    return chain


def assert_that(
    chain: ValidatorChain,
    predicate: Callable[[License], bool],
    failure: ValidationFailure,
) -> ValidatorChain:
    chain = _require_chain(chain)
    if not callable(predicate):
        raise InvalidChainStateError("assert_that requires a callable predicate")
    if not isinstance(failure, ValidationFailure):
        raise InvalidChainStateError(
            "assert_that requires a ValidationFailure to report"
        )

    validator = chain.append_validator()
    validator.predicate = predicate
    validator.failure_result = failure
    return chain
