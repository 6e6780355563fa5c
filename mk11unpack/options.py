"""Command-line options and small byte helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

DEFAULT_PROGRAM = "mk11unpack"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def usage(program: str) -> str:
    """Return the usage text shown when the arguments are wrong."""
    return (
        "Usage:\n\t"
        f"{program} [-options]\n"
        "\tOptions:\n\t\t-f file_name [-p] load_psf [-d] dll_folder\n"
        "\tMandatory:\n\t\t-f\n"
    )


class UsageError(Exception):
    """Raised when the command line cannot be understood."""

    def __init__(self, program: str = DEFAULT_PROGRAM) -> None:
        super().__init__("Incorrect Usage")
        self.usage = usage(program)


@dataclass(frozen=True)
class Options:
    """What the extractor was asked to do."""

    file_name: str
    dll_folder: str = ""
    load_psf: bool = True


def _flag_value(argv: Sequence[str], flag: str, program: str) -> str:
    try:
        position = list(argv).index(flag, 1)
    except ValueError:
        return ""
    if position + 1 >= len(argv):
        raise UsageError(program)
    return argv[position + 1]


def _parse_int(text: str, program: str) -> int:
    match = _LEADING_INT.match(text)
    if match is None:
        raise UsageError(program)
    return int(match.group(1))


def parse_args(argv: Sequence[str]) -> Options:
    """Parse a full argument vector whose first item is the program name."""
    program = argv[0] if argv else DEFAULT_PROGRAM
    if len(argv) < 2:
        raise UsageError(program)

    file_name = _flag_value(argv, "-f", program)
    if not file_name:
        raise UsageError(program)

    psf_value = _flag_value(argv, "-p", program)
    load_psf = True if not psf_value else bool(_parse_int(psf_value, program))

    dll_folder = _flag_value(argv, "-d", program)
    return Options(file_name=file_name, dll_folder=dll_folder, load_psf=load_psf)


def swap_uint32(value: int) -> int:
    """Reverse the byte order of a 32-bit unsigned integer."""
    return int.from_bytes((value & 0xFFFFFFFF).to_bytes(4, "little"), "big")


def int_to_le_bytes(value: int, size: int) -> bytes:
    """Return the lowest ``size`` bytes of ``value`` in little-endian order."""
    return (value & ((1 << (8 * size)) - 1)).to_bytes(size, "little")