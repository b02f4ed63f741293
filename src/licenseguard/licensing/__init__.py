from licenseguard.licensing.errors import (
    LicensingError,
    LicenseFormatError,
    InvalidChainStateError,
    BuildInfoError,
    LicenseNotValidError,
)
from licenseguard.licensing.failures import (
    FailureKind,
    ValidationFailure,
    LicenseExpiredValidationFailure,
    InvalidSignatureValidationFailure,
    GeneralValidationFailure,
)
from licenseguard.licensing.types import (
    Customer,
    License,
    LicenseType,
)
from licenseguard.licensing.build_info import (
    BUILD_DATE_ATTRIBUTE,
    BuildUnit,
    StaticBuildUnit,
    ModuleBuildUnit,
    ManifestBuildUnit,
    as_build_unit,
)
from licenseguard.licensing.validator import (
    Validator,
    ValidatorChain,
)
from licenseguard.licensing.chain import (
    ValidationChainBuilder,
    validate,
)
from licenseguard.licensing.checks import (
    expiration_date,
    product_build_date,
    signature,
    assert_that,
)
from licenseguard.licensing.generator import (
    KeyPair,
    generate_keypair,
    sign,
    sign_license,
)
from licenseguard.licensing.settings import LicensingSettings
from licenseguard.licensing.gating import (
    LicenseManager,
    get_license_manager,
    is_licensed,
    require_valid_license,
)

__all__ = [
    # Errors
    "LicensingError",
    "LicenseFormatError",
    "InvalidChainStateError",
    "BuildInfoError",
    "LicenseNotValidError",
    # Failures
    "FailureKind",
    "ValidationFailure",
    "LicenseExpiredValidationFailure",
    "InvalidSignatureValidationFailure",
    "GeneralValidationFailure",
    # Types
    "Customer",
    "License",
    "LicenseType",
    # Build units
    "BUILD_DATE_ATTRIBUTE",
    "BuildUnit",
    "StaticBuildUnit",
    "ModuleBuildUnit",
    "ManifestBuildUnit",
    "as_build_unit",
    # Chain
    "Validator",
    "ValidatorChain",
    "ValidationChainBuilder",
    "validate",
    "expiration_date",
    "product_build_date",
    "signature",
    "assert_that",
    # Generator
    "KeyPair",
    "generate_keypair",
    "sign",
    "sign_license",
    # Settings / gating
    "LicensingSettings",
    "LicenseManager",
    "get_license_manager",
    "is_licensed",
    "require_valid_license",
]
