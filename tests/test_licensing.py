import base64
import json
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest
from nacl.signing import SigningKey

from licenseguard.licensing import (
    Customer,
    KeyPair,
    License,
    LicenseFormatError,
    LicenseType,
    LicensingSettings,
    generate_keypair,
    sign,
    sign_license,
)


def create_test_keypair() -> tuple[str, str]:
    signing_key = SigningKey.generate()
    verify_key = signing_key.verify_key
    return (
        base64.b64encode(verify_key.encode()).decode(),
        base64.b64encode(signing_key.encode()).decode(),
    )


def generate_test_license(
    private_key_b64: str,
    *,
    customer_name: str = "Acme Ltd",
    exp_offset: timedelta = timedelta(days=365),
) -> str:
    """Hand-build a license string the way a third-party issuer might."""
    now = datetime.now(timezone.utc)
    payload = {
        "id": "7c6d3f8e-1f0b-4b8a-9a57-2f3b2a0b4c11",
        "type": "standard",
        "quantity": 5,
        "customer": {"name": customer_name, "email": "ops@acme.test"},
        "product_features": {"reports": "yes"},
        "issued_at": now.isoformat(),
        "expiration": (now + exp_offset).isoformat(),
    }
    payload_bytes = json.dumps(payload).encode()
    signing_key = SigningKey(base64.b64decode(private_key_b64))
    signature = signing_key.sign(payload_bytes).signature
    return (
        f"{base64.b64encode(payload_bytes).decode()}."
        f"{base64.b64encode(signature).decode()}"
    )


class TestLicenseModel:
    def test_naive_expiration_is_utc(self):
        lic = License(expiration=datetime(2030, 1, 1))
        assert lic.expiration.tzinfo is not None
        assert lic.expiration.utcoffset() == timedelta(0)

    def test_license_is_frozen(self):
        lic = License(expiration=datetime(2030, 1, 1, tzinfo=timezone.utc))
        with pytest.raises(Exception):
            lic.expiration = datetime(2040, 1, 1, tzinfo=timezone.utc)

    def test_quantity_must_be_positive(self):
        with pytest.raises(Exception):
            License(expiration=datetime(2030, 1, 1), quantity=0)

    def test_unsigned_license_does_not_verify(self):
        public_key, _ = create_test_keypair()
        lic = License(expiration=datetime(2030, 1, 1))
        assert lic.verify_signature(public_key) is False

    def test_unsigned_license_cannot_be_serialized(self):
        lic = License(expiration=datetime(2030, 1, 1))
        with pytest.raises(LicenseFormatError):
            lic.to_license_string()


class TestSignature:
    @pytest.fixture
    def keypair(self) -> tuple[str, str]:
        return create_test_keypair()

    def test_signed_license_verifies(self, keypair: tuple[str, str]):
        public_key, private_key = keypair
        lic = sign(License(expiration=datetime(2030, 1, 1)), private_key)

        assert lic.signature is not None
        assert lic.verify_signature(public_key) is True

    def test_wrong_key_does_not_verify(self, keypair: tuple[str, str]):
        _, private_key = keypair
        other_public, _ = create_test_keypair()
        lic = sign(License(expiration=datetime(2030, 1, 1)), private_key)

        assert lic.verify_signature(other_public) is False

    def test_malformed_public_key_does_not_raise(self, keypair: tuple[str, str]):
        _, private_key = keypair
        lic = sign(License(expiration=datetime(2030, 1, 1)), private_key)

        assert lic.verify_signature("not_a_valid_key") is False
        assert lic.verify_signature(base64.b64encode(b"short").decode()) is False

    def test_modified_field_breaks_signature(self, keypair: tuple[str, str]):
        public_key, private_key = keypair
        lic = sign(License(expiration=datetime(2030, 1, 1), quantity=5), private_key)
        tampered = lic.model_copy(update={"quantity": 500})

        assert tampered.verify_signature(public_key) is False

    def test_third_party_license_string_verifies(self, keypair: tuple[str, str]):
        public_key, private_key = keypair
        lic = License.load(generate_test_license(private_key))

        assert lic.id == UUID("7c6d3f8e-1f0b-4b8a-9a57-2f3b2a0b4c11")
        assert lic.customer == Customer(name="Acme Ltd", email="ops@acme.test")
        assert lic.verify_signature(public_key) is True

    def test_tampered_payload(self, keypair: tuple[str, str]):
        public_key, private_key = keypair
        license_str = generate_test_license(private_key)
        payload_b64, signature_b64 = license_str.split(".")

        payload_dict = json.loads(base64.b64decode(payload_b64))
        payload_dict["quantity"] = 1000
        tampered_payload = base64.b64encode(json.dumps(payload_dict).encode()).decode()
        lic = License.load(f"{tampered_payload}.{signature_b64}")

        assert lic.quantity == 1000
        assert lic.verify_signature(public_key) is False

    def test_copy_of_loaded_license_with_changes(self, keypair: tuple[str, str]):
        public_key, private_key = keypair
        lic = License.load(generate_test_license(private_key))

        assert lic.model_copy().verify_signature(public_key) is True
        assert (
            lic.model_copy(update={"quantity": 99}).verify_signature(public_key)
            is False
        )

    @pytest.mark.parametrize("position", [0, 10, -3])
    def test_any_flipped_byte_breaks_signature(
        self, keypair: tuple[str, str], position: int
    ):
        public_key, private_key = keypair
        payload_b64, signature_b64 = sign_license(
            private_key, customer_name="Acme"
        ).split(".")
        payload = bytearray(base64.b64decode(payload_b64))
        payload[position] ^= 0x01

        try:
            lic = License.load(
                f"{base64.b64encode(bytes(payload)).decode()}.{signature_b64}"
            )
        except LicenseFormatError:
            return
        assert lic.verify_signature(public_key) is False


class TestLoad:
    @pytest.mark.parametrize("value", ["no_dot", "a.b.c"])
    def test_invalid_format(self, value: str):
        with pytest.raises(LicenseFormatError, match="Invalid license format"):
            License.load(value)

    def test_invalid_base64(self):
        with pytest.raises(LicenseFormatError, match="Invalid base64"):
            License.load("not!valid!base64.also!invalid!")

    def test_invalid_json(self):
        payload = base64.b64encode(b"{not json").decode()
        with pytest.raises(LicenseFormatError, match="Invalid JSON"):
            License.load(f"{payload}.{payload}")

    def test_invalid_schema(self):
        payload = base64.b64encode(json.dumps({"quantity": 2}).encode()).decode()
        with pytest.raises(LicenseFormatError, match="Invalid payload schema"):
            License.load(f"{payload}.{payload}")

    def test_round_trip_keeps_signature_valid(self):
        public_key, private_key = create_test_keypair()
        license_str = sign_license(private_key, customer_name="Acme", quantity=3)

        lic = License.load(license_str)

        assert lic.to_license_string() == license_str
        assert lic.verify_signature(public_key) is True


class TestGenerator:
    def test_generate_keypair(self):
        kp = generate_keypair()

        assert isinstance(kp, KeyPair)
        assert len(base64.b64decode(kp.public_key)) == 32
        assert len(base64.b64decode(kp.private_key)) == 32

    def test_sign_license_defaults(self):
        kp = generate_keypair()
        issued = datetime(2025, 1, 1, tzinfo=timezone.utc)
        lic = License.load(sign_license(kp.private_key, issued_at=issued))

        assert lic.type == LicenseType.STANDARD
        assert lic.customer is None
        assert lic.expiration == issued + timedelta(days=365)
        assert lic.verify_signature(kp.public_key) is True

    def test_sign_license_explicit_expiration(self):
        kp = generate_keypair()
        expiration = datetime(2031, 6, 1, tzinfo=timezone.utc)
        lic = License.load(
            sign_license(
                kp.private_key,
                license_type="TRIAL",
                expiration=expiration,
                company="Acme",
                product_features={"export": "pdf"},
            )
        )

        assert lic.type == LicenseType.TRIAL
        assert lic.expiration == expiration
        assert lic.customer.company == "Acme"
        assert lic.product_features == {"export": "pdf"}

    def test_invalid_license_type(self):
        kp = generate_keypair()
        with pytest.raises(ValueError, match="Invalid license type"):
            sign_license(kp.private_key, license_type="platinum")

    def test_non_positive_duration(self):
        kp = generate_keypair()
        with pytest.raises(ValueError, match="duration_days must be positive"):
            sign_license(kp.private_key, duration_days=0)

    def test_invalid_private_key(self):
        with pytest.raises(ValueError, match="Invalid private key"):
            sign_license("not a key")


class TestLicensingSettings:
    def test_from_env(self, monkeypatch, tmp_path):
        license_file = tmp_path / "license.lic"
        monkeypatch.setenv("LICENSE_PUBLIC_KEY", "pub")
        monkeypatch.delenv("LICENSE_KEY", raising=False)
        monkeypatch.setenv("LICENSE_FILE", str(license_file))

        settings = LicensingSettings.from_env()

        assert settings.public_key == "pub"
        assert settings.license_key is None
        assert settings.license_file == license_file

    def test_empty_env_values_are_unset(self, monkeypatch):
        monkeypatch.setenv("LICENSE_PUBLIC_KEY", "")
        monkeypatch.delenv("LICENSE_KEY", raising=False)
        monkeypatch.delenv("LICENSE_FILE", raising=False)

        settings = LicensingSettings.from_env()

        assert settings.public_key is None
        assert settings.read_license_key() is None

    def test_license_key_wins_over_file(self, tmp_path):
        license_file = tmp_path / "license.lic"
        license_file.write_text("from-file\n")

        assert (
            LicensingSettings(license_key="inline", license_file=license_file)
            .read_license_key()
            == "inline"
        )
        assert LicensingSettings(license_file=license_file).read_license_key() == (
            "from-file"
        )
