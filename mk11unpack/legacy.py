"""Dump the compressed chunks of an archive into standalone ``.cmp`` files."""

from __future__ import annotations

import os
import sys
from typing import BinaryIO, Optional, Sequence

from mk11unpack.options import DEFAULT_PROGRAM, int_to_le_bytes

MAGIC = bytes((0xC1, 0x83, 0x2A, 0x9E))
SUPPORTED_FILE_VERSION = b"\x01\x03"
COMPRESSED_DATA_VERSION = b"\x00\x00"
SUPPORTED_SCRIPT_VERSION = b"\x9d\x00"
SUPPORTED_ENGINE_VERSION = b"\xe7\x01"
SUPPORTED_COOK_VERSION = b"\x50\x00"

ENGINE_VERSION_OFFSET = 0x10
PACKAGES_COUNT_OFFSET = 0x68
FOOTER_PADDING = 0x18
SEGMENT_HEADER_SKIP = 12


class FormatError(ValueError):
    """Raised when the input is not an archive this dumper understands."""


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise FormatError(f"unexpected end of file: expected {size} bytes, got {len(data)}")
    return data


def _read_field(stream: BinaryIO, size: int = 8) -> int:
    """Read ``size`` bytes and return the little-endian value of the first four."""
    return int.from_bytes(_read_exact(stream, size)[:4], "little")


def _c_string(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("latin-1")


def _warn(message: str) -> None:
    print(message, file=sys.stderr)


def _extract_segment(stream: BinaryIO, start_offset: int, out_dir: str, prefix: str) -> list[str]:
    """Write every chunk of the block at ``start_offset``; the stream position is kept."""
    resume = stream.tell()
    try:
        stream.seek(start_offset)
        if stream.read(4) != MAGIC:
            _warn("Invalid Segment. Skipping...")
            return []
        _read_exact(stream, SEGMENT_HEADER_SKIP)

        segment_compressed = _read_field(stream)
        print(f"\t\tSegment Compressed Size: {segment_compressed:x}")
        segment_decompressed = _read_field(stream)
        print(f"\t\tSegment Decompressed Size: {segment_decompressed:x}")

        chunks: list[tuple[int, int]] = []
        total = 0
        while total < segment_decompressed:
            print(f"\t\tCompressed Segment: {len(chunks) + 1:x}")
            compressed = _read_field(stream)
            print(f"\t\t\tCompressed Size: {compressed:x}")
            decompressed = _read_field(stream)
            print(f"\t\t\tDecompressed Size: {decompressed:x}")
            if decompressed == 0:
                raise FormatError("compressed segment declares a zero decompressed size")
            chunks.append((compressed, decompressed))
            total += decompressed

        print(f"\t\tTotal Compressed Segments Found: {len(chunks):x}")
        data_offset = stream.tell()
        print(f"\t\tCompressed Segments Start Position: {data_offset:x}")

        written = []
        for number, (compressed, decompressed) in enumerate(chunks, start=1):
            print(f"\t\tExtracting Compressed Segment: {number:x}")
            stream.seek(data_offset)
            data = _read_exact(stream, compressed)
            data_offset += compressed
            kind = "".join(f"{byte:02x} " for byte in data[:2])
            print(f"\t\t\tCompression Type: {kind}")
            path = os.path.join(out_dir, f"{prefix}_{number}.cmp")
            with open(path, "wb") as out:
                out.write(int_to_le_bytes(decompressed, 8) + data)
            written.append(path)
        return written
    finally:
        stream.seek(resume)


def read_package(
    stream: BinaryIO, package_index: int, out_dir: str, is_psf: bool = False
) -> list[str]:
    """Read one package record and, unless it lives in a companion file, dump its chunks.

    Returns the paths of the files written.
    """
    print(f"Package {package_index + 1:x}:")
    name_len = _read_field(stream, 4)
    name = _c_string(_read_exact(stream, name_len))
    print(f"\tName: {name}")

    unknown = _read_field(stream)
    print(f"\tUnknown: {unknown:x}")
    decompressed_size = _read_field(stream)
    print(f"\tDecompressed Size: {decompressed_size:x}")
    start_offset = _read_field(stream)
    print(f"\tStart Offset: {start_offset:x}")
    segment_size = _read_field(stream)
    print(f"\tSegment Size: {segment_size:x}")
    compressed_segments = _read_field(stream, 4)
    print(f"\tCompressed Segments: {compressed_segments:x}")
    print(f"\tDecompressed Size: {decompressed_size:x}")

    written: list[str] = []
    calculated_size = 0
    calculated_segments = 0
    while calculated_size < decompressed_size:
        print(f"\tSegment: {calculated_segments + 1:x}")
        unk = _read_field(stream)
        print(f"\t\tUnk: {unk:x}")
        dec_size = _read_field(stream)
        print(f"\t\tDecompressed Size: {dec_size:x}")
        st_offset = _read_field(stream)
        print(f"\t\tStart Offset: {st_offset:x}")
        seg_size = _read_field(stream)
        print(f"\t\tSegment Size: {seg_size:x}")
        if dec_size == 0:
            raise FormatError("segment declares a zero decompressed size")

        if not is_psf:
            prefix = f"{package_index + 1}_{name}_{calculated_segments + 1}"
            written.extend(_extract_segment(stream, st_offset, out_dir, prefix))

        calculated_size += dec_size
        calculated_segments += 1

    if calculated_size > decompressed_size or calculated_segments > compressed_segments:
        _warn("Warning: Decompressed Data Overflow.")
        _warn(f"Expected size: {decompressed_size:x} but got {calculated_size:x}")
        _warn(f"Expected Segments: {compressed_segments:x} but got {calculated_segments:x}")
    print(f"\tCalculated #Segments: {calculated_segments:x}")
    return written


def dump(path: str) -> list[str]:
    """Dump every chunk of the archive at ``path`` into ``<path>_out``.

    Returns the paths of the files written.
    """
    path = os.fspath(path)
    with open(path, "rb") as stream:
        out_dir = path + "_out"
        print(f"File Name: {out_dir}{os.sep}")
        os.makedirs(out_dir, exist_ok=True)

        magic = stream.read(4)
        print()
        if magic != MAGIC:
            raise FormatError("Not a Mortal Kombat 11 Package file")

        file_version = _read_exact(stream, 2)
        script_version = _read_exact(stream, 2)
        stream.seek(ENGINE_VERSION_OFFSET)
        engine_version = _read_exact(stream, 4)
        _read_exact(stream, 4)  # game package four-cc
        cooking_version = _read_exact(stream, 4)

        if file_version != SUPPORTED_FILE_VERSION:
            if file_version != COMPRESSED_DATA_VERSION:
                raise FormatError("Not a supported file version.")
            print("Compressed Data Package")
            return []

        if (
            script_version != SUPPORTED_SCRIPT_VERSION
            or engine_version[:2] != SUPPORTED_ENGINE_VERSION
            or cooking_version[:2] != SUPPORTED_COOK_VERSION
        ):
            raise FormatError("Not a supported file version.")

        stream.seek(PACKAGES_COUNT_OFFSET)
        packages_count = _read_field(stream, 4)
        print(f"Number of Packages: {packages_count:x}")

        written: list[str] = []
        for index in range(packages_count):
            written.extend(read_package(stream, index, out_dir, False))

        additional_count = _read_field(stream, 4)
        if additional_count:
            print(f"Additional {additional_count:x} Packages Exist in .PSF file")
            for index in range(additional_count):
                read_package(stream, index + packages_count, out_dir, True)

        stream.seek(FOOTER_PADDING, os.SEEK_CUR)
        name_len = _read_field(stream, 4)
        internal_name = _c_string(_read_exact(stream, name_len))
        print(f"Internal Package Name: {internal_name}")
    return written


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Dump the archive named by the first argument."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        _warn(f"Usage: {DEFAULT_PROGRAM} file_to_extract")
        return -1
    try:
        dump(args[0])
    except FormatError as exc:
        _warn(str(exc))
        return -1
    except OSError:
        _warn(f"Error opening file {args[0]}")
        return -1
    return 0


if __name__ == "__main__":
    sys.exit(main())