"""
Module 00 - Address Unit Tests
Tests for core/schemas/addresses.py
"""
import pytest
from pydantic import BaseModel, ValidationError

from core.schemas.addresses import ADDRESS_LENGTH, Address, checksum, normalize_address
from core.schemas.errors import InvalidAddressException, StructuralException


LOWER = "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"
CHECKSUMMED = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


class TestNormalizeAddress:
    """Tests for normalize_address()."""

    def test_lowercase_string(self):
        address = normalize_address(LOWER)

        assert isinstance(address, bytes)
        assert len(address) == ADDRESS_LENGTH
        assert address.hex() == LOWER[2:]

    def test_case_insensitive(self):
        """Letter case does not change the canonical value."""
        assert normalize_address(LOWER) == normalize_address(LOWER.upper().replace("0X", "0x"))
        assert normalize_address(LOWER) == normalize_address(CHECKSUMMED)

    def test_bad_checksum_not_enforced(self):
        """Mixed case that is not a valid checksum is still accepted."""
        mangled = "0x5AAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"

        assert normalize_address(mangled) == normalize_address(LOWER)

    def test_raw_bytes(self):
        raw = bytes(range(20))

        assert normalize_address(raw) == raw
        assert normalize_address(bytearray(raw)) == raw

    def test_surrounding_whitespace(self):
        assert normalize_address(f"  {LOWER}\n") == normalize_address(LOWER)

    @pytest.mark.parametrize("value", [
        "0x1234",
        "not an address",
        LOWER + "00",
        b"\x00" * 19,
        b"\x00" * 32,
        12345,
        None,
    ])
    def test_invalid_raises(self, value):
        with pytest.raises(InvalidAddressException):
            normalize_address(value)

    def test_prefix_required(self):
        """Bare hex of the right length is still rejected."""
        with pytest.raises(InvalidAddressException, match="0x-prefixed"):
            normalize_address(LOWER[2:])

    def test_invalid_is_structural(self):
        with pytest.raises(StructuralException):
            normalize_address("0xnope")


class TestChecksum:
    def test_eip55(self):
        assert checksum(normalize_address(LOWER)) == CHECKSUMMED


class TestAddressField:
    """Tests for the pydantic Address annotation."""

    class _Model(BaseModel):
        who: Address

    def test_string_coerced_to_bytes(self):
        model = self._Model(who=CHECKSUMMED)

        assert model.who == normalize_address(LOWER)

    def test_invalid_rejected(self):
        with pytest.raises((ValidationError, InvalidAddressException)):
            self._Model(who="0x12")
