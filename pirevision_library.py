#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
#
# pirevision_library.py
#
import re

from revision_decoder import (
    RevisionDecoder,
    MalformedRevisionCode,
    RevisionCodeOverflow,
)

CPUINFO_PATH_DEFAULT = "/proc/cpuinfo"

MAX_REVISION_CODE = 0xFFFFFFFF

_HEX_CODE_RE = re.compile(
    r"""
    \s*
    (?:0[xX])?             # optional '0x' / '0X'
    ([0-9A-Fa-f]+)         # hex digits
    \s*
    """,
    re.VERBOSE,
)

_CPUINFO_REVISION_RE = re.compile(r"^Revision\s*:\s*(\S+)")

def parse_revision_code(text: str) -> int:
    """Parses a hex revision code, with or without 0x prefix."""
    m = _HEX_CODE_RE.fullmatch(text)
    if not m:
        raise MalformedRevisionCode(f'Could not parse revision code "{text}"')
    value = int(m.group(1), 16)
    if value > MAX_REVISION_CODE:
        raise RevisionCodeOverflow(f'Revision code "{text}" ({value:x}) larger than 32 bits')
    return value

def read_cpuinfo_revision(path: str = CPUINFO_PATH_DEFAULT) -> str:
    """Returns the token of the first 'Revision : <token>' line of a cpuinfo file."""
    try:
        with open(path, "r", encoding="utf-8", errors="ignore") as f:
            for line in f:
                m = _CPUINFO_REVISION_RE.match(line)
                if m:
                    return m.group(1)
    except FileNotFoundError as e:
        raise FileNotFoundError(f"Could not open {path}") from e
    except OSError as e:
        raise OSError(f"Could not open {path}") from e

    raise MalformedRevisionCode(f"{path}: no 'Revision' line found.")

def load_revision(text: str) -> RevisionDecoder:
    """Parses a revision code string and returns its decoder."""
    return RevisionDecoder(parse_revision_code(text))
