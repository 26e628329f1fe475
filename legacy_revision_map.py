#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
#
# legacy_revision_map.py
#
# Translation of old style (pre-2014) Raspberry Pi revision codes into the
# new style bit-field layout.
#
from typing import List, Optional

NEW_STYLE   = 1 << 23

# Manufacturer field (bits 16..19)
SONY_UK     = 0 << 16
EGOMAN      = 1 << 16
EMBEST      = 2 << 16
SONY_JAPAN  = 3 << 16
STADIUM     = 5 << 16
QISDA       = 0xF << 16   # never emitted by new style boards

# Memory field (bits 20..22)
MEM_256M    = 0 << 20
MEM_512M    = 1 << 20
MEM_1G      = 2 << 20
MEM_2G      = 3 << 20
MEM_4G      = 4 << 20
MEM_8G      = 5 << 20

# Type/model field (bits 4..11)
MODEL_A     = 0 << 4
MODEL_B     = 1 << 4
MODEL_APLUS = 2 << 4
MODEL_BPLUS = 3 << 4
MODEL_CM1   = 6 << 4

# Revision field (bits 0..3)
# Old style codes do not encode 1.x sub-revisions; all map to index 0 ("1.0")
REV_1_0     = 0
REV_1_1     = 0
REV_1_2     = 0
REV_2_0     = 0xF         # highest index, unused by new style boards

OLD_REV_NOT_VALID = 0xFFFFFFFF

# Indexed by the old style code. Processor bits stay 0 (BCM2835), which is
# what every old style board shipped with.
OLD_REVISION_MAP = (
    OLD_REV_NOT_VALID,                                          # 0x00
    OLD_REV_NOT_VALID,                                          # 0x01
    NEW_STYLE | MODEL_B     | REV_1_0 | MEM_256M | EGOMAN,      # 0x02
    NEW_STYLE | MODEL_B     | REV_1_0 | MEM_256M | EGOMAN,      # 0x03
    NEW_STYLE | MODEL_B     | REV_2_0 | MEM_256M | SONY_UK,     # 0x04
    NEW_STYLE | MODEL_B     | REV_2_0 | MEM_256M | QISDA,       # 0x05
    NEW_STYLE | MODEL_B     | REV_2_0 | MEM_256M | EGOMAN,      # 0x06
    NEW_STYLE | MODEL_A     | REV_2_0 | MEM_256M | EGOMAN,      # 0x07
    NEW_STYLE | MODEL_A     | REV_2_0 | MEM_256M | SONY_UK,     # 0x08
    NEW_STYLE | MODEL_A     | REV_2_0 | MEM_256M | QISDA,       # 0x09
    OLD_REV_NOT_VALID,                                          # 0x0a
    OLD_REV_NOT_VALID,                                          # 0x0b
    OLD_REV_NOT_VALID,                                          # 0x0c
    NEW_STYLE | MODEL_B     | REV_2_0 | MEM_512M | EGOMAN,      # 0x0d
    NEW_STYLE | MODEL_B     | REV_2_0 | MEM_512M | SONY_UK,     # 0x0e
    NEW_STYLE | MODEL_B     | REV_2_0 | MEM_512M | EGOMAN,      # 0x0f
    NEW_STYLE | MODEL_BPLUS | REV_1_2 | MEM_512M | SONY_UK,     # 0x10
    NEW_STYLE | MODEL_CM1   | REV_1_0 | MEM_512M | SONY_UK,     # 0x11
    NEW_STYLE | MODEL_APLUS | REV_1_1 | MEM_256M | SONY_UK,     # 0x12
    NEW_STYLE | MODEL_BPLUS | REV_1_2 | MEM_512M | EMBEST,      # 0x13
    NEW_STYLE | MODEL_CM1   | REV_1_0 | MEM_512M | EMBEST,      # 0x14
    # Shipped with 256MB or 512MB under the same code; report the smaller.
    NEW_STYLE | MODEL_APLUS | REV_1_1 | MEM_256M | EMBEST,      # 0x15
)


def map_old_to_new(code: int) -> Optional[int]:
    """Returns the new style equivalent of an old style code, or None if the code has no valid entry."""
    if not (0 <= code < len(OLD_REVISION_MAP)):
        return None
    new_code = OLD_REVISION_MAP[code]
    return None if new_code == OLD_REV_NOT_VALID else new_code


def valid_legacy_codes() -> List[int]:
    return [c for c, v in enumerate(OLD_REVISION_MAP) if v != OLD_REV_NOT_VALID]
