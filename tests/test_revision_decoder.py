"""Tests for the revision code field extraction and renderers."""

import json

import pytest

import revision_decoder
from revision_decoder import (
    InvalidLegacyCode,
    MANUFACTURER_MAP,
    PROCESSOR_MAP,
    REVISION_MAP,
    RevisionDecoder,
    TYPE_MAP,
    is_new_style,
    lut_to_str,
    manufacturer_str,
    memory_mbytes,
    memory_str,
    normalize,
    otp_programming_allowed,
    otp_reading_allowed,
    overvoltage_allowed,
    overvoltage_allowed_str,
    processor_str,
    revision_str,
    type_str,
    warranty_intact,
    warranty_intact_str,
)

NEW = 1 << 23


class TestLookupContract:
    """Tests for lut_to_str."""

    @pytest.mark.parametrize("table", [TYPE_MAP, PROCESSOR_MAP, MANUFACTURER_MAP, REVISION_MAP])
    def test_in_range_and_one_past_end(self, table):
        for i, name in enumerate(table):
            assert lut_to_str(table, i) == name
        assert lut_to_str(table, len(table)) == "???"

    def test_sentinel_only_applies_past_end(self):
        table = ("a", "b")
        assert lut_to_str(table, 1, 1, "sub") == "b"
        assert lut_to_str(table, 5, 5, "sub") == "sub"
        assert lut_to_str(table, 4, 5, "sub") == "???"
        assert lut_to_str(table, 5) == "???"


class TestFields:
    """Tests for the individual field accessors."""

    @pytest.mark.parametrize("index,expected", [
        (0, "256MB"), (1, "512MB"), (2, "1GB"), (3, "2GB"), (4, "4GB"), (5, "8GB"),
        (6, "???"), (7, "???"),
    ])
    def test_memory_str(self, index, expected):
        assert memory_str(NEW | (index << 20)) == expected

    def test_memory_mbytes_unassigned(self):
        assert memory_mbytes(NEW | (5 << 20)) == 8192
        assert memory_mbytes(NEW | (6 << 20)) is None

    def test_memory_truncates_fractional_gb(self, monkeypatch):
        monkeypatch.setattr(revision_decoder, "MEM_MBYTES_MAP", (1536,))
        assert memory_str(NEW) == "1GB"

    def test_memory_too_large_renders_empty(self, monkeypatch):
        monkeypatch.setattr(revision_decoder, "MEM_MBYTES_MAP", (10000 * 1024,))
        assert memory_str(NEW) == ""

    def test_manufacturer_sentinel(self):
        assert manufacturer_str(NEW | (0xF << 16)) == "Qisda"
        assert manufacturer_str(NEW | (6 << 16)) == "???"
        assert manufacturer_str(NEW | (5 << 16)) == "Stadium"

    def test_revision_sentinel(self):
        assert revision_str(NEW | 0xF) == "2.0"
        assert revision_str(NEW | 6) == "???"
        assert revision_str(NEW | 5) == "1.5"

    def test_processor_unknown(self):
        assert processor_str(NEW | (3 << 12)) == "BCM2711"
        assert processor_str(NEW | (4 << 12)) == "???"

    def test_type_wide_index(self):
        assert type_str(NEW | (0x14 << 4)) == "CM4"
        assert type_str(NEW | (0xFF << 4)) == "???"

    def test_flag_polarity(self):
        assert overvoltage_allowed(NEW)
        assert overvoltage_allowed_str(NEW) == "Allowed"
        assert not overvoltage_allowed(NEW | (1 << 31))
        assert overvoltage_allowed_str(NEW | (1 << 31)) == "Disallowed"
        assert not otp_programming_allowed(NEW | (1 << 30))
        assert not otp_reading_allowed(NEW | (1 << 29))
        assert otp_reading_allowed(NEW | (1 << 30))
        assert warranty_intact_str(NEW) == "Intact"
        assert not warranty_intact(NEW | (1 << 25))
        assert warranty_intact_str(NEW | (1 << 25)) == "Voided"


class TestNormalize:
    """Tests for normalize."""

    def test_new_style_unchanged(self):
        assert normalize(0xA02082) == 0xA02082

    def test_legacy_code_gets_style_bit(self):
        assert normalize(0x02) == 0x810010
        assert is_new_style(normalize(0x02))

    @pytest.mark.parametrize("code", [0x00, 0x01, 0x0A, 0x0B, 0x0C, 0x16, 0x7FFFFF])
    def test_invalid_legacy(self, code):
        with pytest.raises(InvalidLegacyCode) as exc:
            normalize(code)
        assert exc.value.code == code
        assert f"0x{code:X}" in str(exc.value)

    def test_invalid_legacy_is_value_error(self):
        with pytest.raises(ValueError):
            RevisionDecoder(0x0B)


class TestRevisionDecoderModern:
    """End-to-end decode of the new style code 0xa02082 (3B, 1GB, Sony UK)."""

    def test_decode(self):
        d = RevisionDecoder(0xA02082).decode()
        assert d == {
            "revision_code": "0xA02082",
            "style": "new",
            "overvoltage_allowed": True,
            "otp_programming_allowed": True,
            "otp_reading_allowed": True,
            "warranty_intact": True,
            "type": "3B",
            "revision": "1.2",
            "processor": "BCM2837",
            "memory": "1GB",
            "manufacturer": "Sony UK",
            "warnings": [],
        }

    def test_render_text(self):
        text = RevisionDecoder(0xA02082).render_text()
        assert text.splitlines() == [
            "Revision code 0xA02082 interpreted:",
            "    Style           : New",
            "    Overvoltage     : Allowed",
            "    OTP Programming : Allowed",
            "    OTP Reading     : Allowed",
            "    Warranty        : Intact",
            "    Type/Model      : 3B",
            "    Revision        : 1.2",
            "    Processor/SOC   : BCM2837",
            "    Memory          : 1GB",
            "    Manufacturer    : Sony UK",
        ]

    def test_render_json(self):
        out = RevisionDecoder(0xA02082).render_json()
        data = json.loads(out)
        assert list(data) == [
            "revision_code", "style",
            "overvoltage_allowed", "otp_programming_allowed", "otp_reading_allowed", "warranty_intact",
            "type", "revision", "processor", "memory", "manufacturer",
        ]
        assert data["revision_code"] == "0xA02082"
        assert data["overvoltage_allowed"] is True
        assert '"warranty_intact": true' in out
        assert "warnings" not in data

    def test_render_json_disallowed_flags(self):
        data = json.loads(RevisionDecoder(0xA02082 | (1 << 31) | (1 << 25)).render_json())
        assert data["overvoltage_allowed"] is False
        assert data["warranty_intact"] is False
        assert data["revision_code"] == "0x82A02082"

    def test_programmer_mode(self):
        lines = RevisionDecoder(0xA02082).render_text(programmer_mode=True).splitlines()
        memory = [line for line in lines if "Memory" in line][0]
        assert "1GB" in memory
        assert "[22:20]" in memory
        assert "(0x2)" in memory

    def test_dump_field_map(self):
        fmap = RevisionDecoder(0xA02082).dump_field_map()
        assert "11-04  Type/Model" in fmap
        assert fmap.splitlines()[-2].endswith("0x8")


class TestRevisionDecoderLegacy:
    """End-to-end decode of the old style code 0x02."""

    def test_render_text(self):
        text = RevisionDecoder(0x02).render_text()
        assert text.splitlines() == [
            "Revision code 0x2 interpreted:",
            "    Style           : Old",
            "    Type/Model      : B",
            "    Revision        : 1.0",
            "    Memory          : 256MB",
            "    Manufacturer    : Egoman",
        ]

    def test_render_json(self):
        data = json.loads(RevisionDecoder(0x02).render_json())
        assert data == {
            "revision_code": "0x2",
            "style": "old",
            "type": "B",
            "revision": "1.0",
            "memory": "256MB",
            "manufacturer": "Egoman",
        }

    def test_qisda_legacy_has_no_warnings(self):
        d = RevisionDecoder(0x05).decode()
        assert d["manufacturer"] == "Qisda"
        assert d["revision"] == "2.0"
        assert d["warnings"] == []


class TestWarnings:
    """Tests for decode() warnings on unknown hardware."""

    def test_unknown_fields_are_reported(self):
        d = RevisionDecoder(NEW | (0x30 << 4) | (6 << 20)).decode()
        assert d["type"] == "???"
        assert d["memory"] == "???"
        assert len(d["warnings"]) == 2
        assert d["warnings"][0].startswith("Type/model index 48 (0x30)")

    def test_reserved_sentinel_on_new_style(self):
        d = RevisionDecoder(NEW | (0xF << 16) | 0xF).decode()
        assert d["manufacturer"] == "Qisda"
        assert any("Manufacturer index 15" in w for w in d["warnings"])
        assert any("Revision index 15" in w for w in d["warnings"])
