from __future__ import annotations

import functools
import inspect
import logging
from typing import Any, Callable, Iterable, ParamSpec, TypeVar

from licenseguard.licensing.chain import validate
from licenseguard.licensing.errors import (
    BuildInfoError,
    LicenseFormatError,
    LicenseNotValidError,
)
from licenseguard.licensing.failures import GeneralValidationFailure, ValidationFailure
from licenseguard.licensing.settings import LicensingSettings
from licenseguard.licensing.types import License
from licenseguard.licensing.validator import Clock
from licenseguard.utils.logging import sanitize_for_log

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

MISSING_PUBLIC_KEY = GeneralValidationFailure(
    message="No public key configured for license validation.",
    how_to_resolve="Set LICENSE_PUBLIC_KEY to the vendor's public key.",
)
MISSING_LICENSE = GeneralValidationFailure(
    message="No license installed.",
    how_to_resolve="Set LICENSE_KEY or LICENSE_FILE to your license.",
)


class LicenseManager:
    _instance: LicenseManager | None = None
    _license: License | None = None
    _failures: list[ValidationFailure] = []

    def __new__(cls) -> LicenseManager:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def initialize(
        cls,
        public_key: str | None = None,
        license_key: str | None = None,
        *,
        build_units: Iterable[Any] = (),
        settings: LicensingSettings | None = None,
        clock: Clock | None = None,
    ) -> LicenseManager:
        instance = cls()
        cls._license = None
        cls._failures = []

        settings = settings or LicensingSettings.from_env()
        public_key = public_key or settings.public_key
        if license_key is None:
            try:
                license_key = settings.read_license_key()
            except OSError as e:
                logger.warning(
                    "license_file_unreadable path=%s error=%s",
                    sanitize_for_log(settings.license_file),
                    sanitize_for_log(e),
                )
                cls._failures = [
                    GeneralValidationFailure(
                        message="The license file could not be read.",
                        how_to_resolve="Check that LICENSE_FILE points to a readable file.",
                    )
                ]
                return instance

        if not public_key:
            cls._failures = [MISSING_PUBLIC_KEY]
            logger.info("license_not_configured reason=missing_public_key")
            return instance
        if not license_key:
            cls._failures = [MISSING_LICENSE]
            logger.info("license_not_configured reason=missing_license")
            return instance

        try:
            license_ = License.load(license_key)
        except LicenseFormatError as e:
            cls._failures = [
                GeneralValidationFailure(
                    message=f"The license could not be read: {e}",
                    how_to_resolve="Reinstall the license you received from your vendor.",
                )
            ]
            logger.warning(
                "license_validation_failed reason=unreadable error=%s",
                sanitize_for_log(e),
            )
            return instance

        try:
            failures = (
                validate(license_, clock=clock)
                .expiration_date()
                .product_build_date(build_units)
                .signature(public_key)
                .assert_valid_license()
            )
        except BuildInfoError as e:
            cls._failures = [
                GeneralValidationFailure(
                    message=f"The product build information could not be read: {e}",
                    how_to_resolve="Reinstall the product to restore its build metadata.",
                )
            ]
            logger.warning(
                "license_validation_failed reason=build_info error=%s",
                sanitize_for_log(e),
            )
            return instance

        cls._failures = failures

        if failures:
            for failure in failures:
                logger.warning(
                    "license_validation_failed license_id=%s kind=%s message=%s",
                    license_.id,
                    failure.kind.value,
                    sanitize_for_log(failure.message),
                )
            return instance

        cls._license = license_
        customer = license_.customer.name if license_.customer else None
        logger.info(
            "license_validated license_id=%s type=%s customer=%s expiration=%s",
            license_.id,
            license_.type.value,
            sanitize_for_log(customer),
            sanitize_for_log(license_.expiration),
        )
        return instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None
        cls._license = None
        cls._failures = []

    @classmethod
    def get_instance(cls) -> LicenseManager:
        if cls._instance is None:
            cls.initialize()
        return cls._instance

    @property
    def is_licensed(self) -> bool:
        return self._license is not None

    @property
    def license(self) -> License | None:
        return self._license

    @property
    def failures(self) -> list[ValidationFailure]:
        return list(self._failures)


def get_license_manager() -> LicenseManager:
    return LicenseManager.get_instance()


def is_licensed() -> bool:
    return get_license_manager().is_licensed


def _check_license() -> None:
    manager = get_license_manager()
    if not manager.is_licensed:
        raise LicenseNotValidError(manager.failures)


def require_valid_license(func: Callable[P, R]) -> Callable[P, R]:
    """Refuse to run *func* unless the installed license passed validation."""

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        _check_license()
        return func(*args, **kwargs)

    @functools.wraps(func)
    async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        _check_license()
        return await func(*args, **kwargs)

    if inspect.iscoroutinefunction(func):
        return async_wrapper  # type: ignore
    return wrapper
