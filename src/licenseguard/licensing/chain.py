from __future__ import annotations

from typing import Any, Callable, Iterable

from licenseguard.licensing import checks
from licenseguard.licensing.build_info import BuildUnit
from licenseguard.licensing.failures import ValidationFailure
from licenseguard.licensing.types import License
from licenseguard.licensing.validator import Clock, Predicate, ValidatorChain


class ValidationChainBuilder(ValidatorChain):
    """Fluent front end over :class:`ValidatorChain`.

    The shortcut methods only delegate to the functions in
    :mod:`licenseguard.licensing.checks`.
    """

    def apply(
        self,
        check: Callable[..., Any],
        *args: Any,
        **kwargs: Any,
    ) -> ValidationChainBuilder:
        check(self, *args, **kwargs)
        return self

    def expiration_date(self) -> ValidationChainBuilder:
        return self.apply(checks.expiration_date)

    def product_build_date(
        self, build_units: Iterable[BuildUnit | Any]
    ) -> ValidationChainBuilder:
        return self.apply(checks.product_build_date, build_units)

    def signature(self, public_key: str) -> ValidationChainBuilder:
        return self.apply(checks.signature, public_key)

    def assert_that(
        self, predicate: Predicate, failure: ValidationFailure
    ) -> ValidationChainBuilder:
        return self.apply(checks.assert_that, predicate, failure)


def validate(license_: License, *, clock: Clock | None = None) -> ValidationChainBuilder:
    """Start a validation chain for *license_*."""
    return ValidationChainBuilder(license_, clock=clock)
