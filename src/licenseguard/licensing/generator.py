"""Ed25519 license key generation and signing.

Output format: ``base64(payload_json).base64(signature)``
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from nacl.exceptions import CryptoError
from nacl.signing import SigningKey

from licenseguard.licensing.types import Customer, License, LicenseType


@dataclass(frozen=True)
class KeyPair:
    """Base64-encoded Ed25519 key pair (the private half is the 32-byte seed)."""

    public_key: str
    private_key: str


def generate_keypair() -> KeyPair:
    signing_key = SigningKey.generate()
    return KeyPair(
        public_key=base64.b64encode(signing_key.verify_key.encode()).decode(),
        private_key=base64.b64encode(signing_key.encode()).decode(),
    )


def _signing_key(private_key_b64: str) -> SigningKey:
    try:
        return SigningKey(base64.b64decode(private_key_b64, validate=True))
    except (binascii.Error, ValueError, TypeError, CryptoError) as e:
        raise ValueError(f"Invalid private key: {e}") from e


def sign(license_: License, private_key_b64: str) -> License:
    """Return a copy of *license_* carrying a signature over its payload."""
    signing_key = _signing_key(private_key_b64)
    signed = signing_key.sign(license_.signed_payload())
    return license_.with_signature(base64.b64encode(signed.signature).decode())


def sign_license(
    private_key_b64: str,
    *,
    customer_name: str | None = None,
    customer_email: str | None = None,
    company: str | None = None,
    license_type: LicenseType | str = LicenseType.STANDARD,
    quantity: int = 1,
    duration_days: int = 365,
    expiration: datetime | None = None,
    product_features: dict[str, str] | None = None,
    additional_attributes: dict[str, str] | None = None,
    license_id: UUID | None = None,
    issued_at: datetime | None = None,
) -> str:
    """Create, sign and serialize a license.

    *expiration* wins over *duration_days* when both are given. Raises
    :class:`ValueError` if *license_type* is unknown, *duration_days* is
    non-positive, or the private key cannot be decoded.
    """
    if isinstance(license_type, str):
        try:
            license_type = LicenseType(license_type.lower())
        except ValueError:
            valid = ", ".join(t.value for t in LicenseType)
            raise ValueError(
                f"Invalid license type {license_type!r}. Must be one of: {valid}"
            )

    if expiration is None and duration_days <= 0:
        raise ValueError("duration_days must be positive")

    now = issued_at if issued_at is not None else datetime.now(timezone.utc)
    customer = None
    if customer_name or customer_email or company:
        customer = Customer(name=customer_name, email=customer_email, company=company)

    license_ = License(
        id=license_id or uuid4(),
        type=license_type,
        quantity=quantity,
        customer=customer,
        product_features=product_features or {},
        additional_attributes=additional_attributes or {},
        issued_at=now,
        expiration=expiration or now + timedelta(days=duration_days),
    )

    return sign(license_, private_key_b64).to_license_string()
