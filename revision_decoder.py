#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
#
# revision_decoder.py
#
# Decodes Raspberry Pi revision codes (new style bit-field layout, with old
# style codes translated first) into readable text or JSON.
#
from typing import Dict, List, Optional, Sequence
import json

from legacy_revision_map import map_old_to_new

UNKNOWN = "???"

# --- Errors ---

class RevisionCodeError(ValueError):
    """Base class for revision codes that cannot be decoded at all."""

class MalformedRevisionCode(RevisionCodeError):
    pass

class RevisionCodeOverflow(RevisionCodeError):
    pass

class InvalidLegacyCode(RevisionCodeError):
    def __init__(self, code: int):
        self.code = code
        super().__init__(f"Invalid old style revision code 0x{code:X}")

# --- Lookup tables ---

TYPE_MAP = (
    "A", "B", "A+", "B+", "2B", "Alpha", "CM1", "0x07",
    "3B", "Zero", "CM3", "0x0B", "Zero W", "3B+", "3A+", "Internal use only",
    "CM3+", "4B", "Zero 2 W", "400", "CM4", "CM4S",
    # 8-bit field: room for 256 entries
)

MEM_MBYTES_MAP = (
    256,        # 0
    512,        # 1
    1 * 1024,   # 2
    2 * 1024,   # 3
    4 * 1024,   # 4
    8 * 1024,   # 5
    # 6 and 7 unassigned
)

PROCESSOR_MAP = ("BCM2835", "BCM2836", "BCM2837", "BCM2711")

MANUFACTURER_MAP = ("Sony UK", "Egoman", "Embest", "Sony Japan", "Embest", "Stadium")
MANUFACTURER_QISDA = (0xF, "Qisda")

REVISION_MAP = ("1.0", "1.1", "1.2", "1.3", "1.4", "1.5")
REVISION_2_0 = (0xF, "2.0")

# (hi bit, lo bit, name) of every new style field, MSB first
REVISION_FIELDS = [
    (31, 31, "Overvoltage disallowed"),
    (30, 30, "OTP programming disallowed"),
    (29, 29, "OTP reading disallowed"),
    (25, 25, "Warranty voided"),
    (23, 23, "New style"),
    (22, 20, "Memory size"),
    (19, 16, "Manufacturer"),
    (15, 12, "Processor"),
    (11, 4,  "Type/Model"),
    (3,  0,  "Revision"),
]

def _bits(v: int, hi: int, lo: int) -> int:
    mask = (1 << (hi - lo + 1)) - 1
    return (v >> lo) & mask

def lut_to_str(lut: Sequence[str], index: int,
               invalid_index: Optional[int] = None,
               invalid_str: Optional[str] = None) -> str:
    """
    Returns lut[index] when the index is inside the table. Past the end, the
    substitute string is returned if one is given and the index equals
    invalid_index; anything else yields "???".
    """
    if index < len(lut):
        return lut[index]
    if invalid_str is not None and index == invalid_index:
        return invalid_str
    return UNKNOWN

# --- Normalizer ---

def is_new_style(code: int) -> bool:
    return _bits(code, 23, 23) == 1

def normalize(code: int) -> int:
    """Maps an old style code onto the new style layout; new style codes pass through."""
    if is_new_style(code):
        return code
    new_code = map_old_to_new(code)
    if new_code is None:
        raise InvalidLegacyCode(code)
    return new_code

# --- Field extraction ---
# NOTE: for the four flags a 0 bit means allowed/intact, 1 means disallowed/voided

def overvoltage_allowed(code: int) -> bool:
    return _bits(code, 31, 31) == 0

def otp_programming_allowed(code: int) -> bool:
    return _bits(code, 30, 30) == 0

def otp_reading_allowed(code: int) -> bool:
    return _bits(code, 29, 29) == 0

def warranty_intact(code: int) -> bool:
    return _bits(code, 25, 25) == 0

def _allowed(flag: bool) -> str:
    return "Allowed" if flag else "Disallowed"

def overvoltage_allowed_str(code: int) -> str:
    return _allowed(overvoltage_allowed(code))

def otp_programming_allowed_str(code: int) -> str:
    return _allowed(otp_programming_allowed(code))

def otp_reading_allowed_str(code: int) -> str:
    return _allowed(otp_reading_allowed(code))

def warranty_intact_str(code: int) -> str:
    return "Intact" if warranty_intact(code) else "Voided"

def type_index(code: int) -> int:
    return _bits(code, 11, 4)

def type_str(code: int) -> str:
    return lut_to_str(TYPE_MAP, type_index(code))

def memory_index(code: int) -> int:
    return _bits(code, 22, 20)

def memory_mbytes(code: int) -> Optional[int]:
    """Physical memory in MB, or None for an unassigned index."""
    index = memory_index(code)
    return MEM_MBYTES_MAP[index] if index < len(MEM_MBYTES_MAP) else None

def memory_str(code: int) -> str:
    """
    Memory size as "<n>MB" below 1GB, "<n>GB" from 1GB up. Fractional GB are
    truncated (1536MB -> "1GB"), no padding or leading zeros. A GB count that
    does not fit four digits renders as an empty string.
    """
    mega_bytes = memory_mbytes(code)
    if mega_bytes is None:
        return UNKNOWN
    if mega_bytes >= 1024:
        giga_bytes = mega_bytes >> 10
        return f"{giga_bytes}GB" if giga_bytes <= 9999 else ""
    return f"{mega_bytes}MB"

def processor_index(code: int) -> int:
    return _bits(code, 15, 12)

def processor_str(code: int) -> str:
    return lut_to_str(PROCESSOR_MAP, processor_index(code))

def manufacturer_index(code: int) -> int:
    return _bits(code, 19, 16)

def manufacturer_str(code: int) -> str:
    return lut_to_str(MANUFACTURER_MAP, manufacturer_index(code), *MANUFACTURER_QISDA)

def revision_index(code: int) -> int:
    return _bits(code, 3, 0)

def revision_str(code: int) -> str:
    return lut_to_str(REVISION_MAP, revision_index(code), *REVISION_2_0)


class RevisionDecoder:
    """Decodes one revision code. Old style input is normalized on construction."""

    def __init__(self, code: int):
        self.original = code
        self.original_new_style = is_new_style(code)
        self.code = normalize(code)

    # ----- Public API -----

    def decode(self) -> Dict:
        """Decoded fields in output order. Flags and processor only exist for new style input."""
        c = self.code
        fields = {
            "revision_code": f"0x{self.original:X}",
            "style": "new" if self.original_new_style else "old",
        }
        if self.original_new_style:
            fields["overvoltage_allowed"] = overvoltage_allowed(c)
            fields["otp_programming_allowed"] = otp_programming_allowed(c)
            fields["otp_reading_allowed"] = otp_reading_allowed(c)
            fields["warranty_intact"] = warranty_intact(c)
        fields["type"] = type_str(c)
        fields["revision"] = revision_str(c)
        if self.original_new_style:
            fields["processor"] = processor_str(c)
        fields["memory"] = memory_str(c)
        fields["manufacturer"] = manufacturer_str(c)
        fields["warnings"] = self._collect_warnings(fields)
        return fields

    def render_text(self, programmer_mode: bool = False) -> str:
        c = self.code
        lines = [f"Revision code 0x{self.original:X} interpreted:"]

        def p(name, value, field=None):
            if programmer_mode and field is not None:
                hi, lo = field
                bits = f"[{hi}]" if hi == lo else f"[{hi}:{lo}]"
                lines.append(f"    {name:<16}: {value:<20} {bits:<8} (0x{_bits(c, hi, lo):X})")
            else:
                lines.append(f"    {name:<16}: {value}")

        p("Style", "New" if self.original_new_style else "Old", (23, 23))
        if self.original_new_style:
            p("Overvoltage", overvoltage_allowed_str(c), (31, 31))
            p("OTP Programming", otp_programming_allowed_str(c), (30, 30))
            p("OTP Reading", otp_reading_allowed_str(c), (29, 29))
            p("Warranty", warranty_intact_str(c), (25, 25))
        p("Type/Model", type_str(c), (11, 4))
        p("Revision", revision_str(c), (3, 0))
        if self.original_new_style:
            p("Processor/SOC", processor_str(c), (15, 12))
        p("Memory", memory_str(c), (22, 20))
        p("Manufacturer", manufacturer_str(c), (19, 16))
        return "\n".join(lines)

    def render_json(self) -> str:
        fields = self.decode()
        fields.pop("warnings")
        return json.dumps(fields, indent=4)

    def dump_field_map(self) -> str:
        """Raw bit-field map of the normalized code."""
        lines = []
        for hi, lo, name in REVISION_FIELDS:
            bits = f"{hi:02d}" if hi == lo else f"{hi:02d}-{lo:02d}"
            lines.append(f"{bits:<6} {name:<28} 0x{_bits(self.code, hi, lo):X}")
        return "\n".join(lines)

    # ----- Helpers -----

    def _collect_warnings(self, fields: Dict) -> List[str]:
        c = self.code
        warnings = []
        indexed = [
            ("type", "Type/model", type_index(c)),
            ("revision", "Revision", revision_index(c)),
            ("processor", "Processor", processor_index(c)),
            ("memory", "Memory size", memory_index(c)),
            ("manufacturer", "Manufacturer", manufacturer_index(c)),
        ]
        for key, label, index in indexed:
            if fields.get(key) == UNKNOWN:
                warnings.append(f"{label} index {index} (0x{index:X}) is not known; reported as '{UNKNOWN}'.")

        # Index 15 is borrowed for old style boards; a new style board using it would be misreported.
        if self.original_new_style:
            if manufacturer_index(c) == MANUFACTURER_QISDA[0]:
                warnings.append("Manufacturer index 15 is reserved for old style Qisda boards.")
            if revision_index(c) == REVISION_2_0[0]:
                warnings.append("Revision index 15 is reserved for old style revision 2.0 boards.")
        return warnings
