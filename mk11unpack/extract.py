"""Command that unpacks an archive into decompressed data, tables and objects."""

from __future__ import annotations

import os
import sys
from contextlib import ExitStack
from typing import BinaryIO, Optional, Sequence, TextIO

from mk11unpack.archive import MK11File
from mk11unpack.compression import (
    Codec,
    CompressionError,
    CompressionFlag,
    UnsupportedCompression,
    codec_for_flag,
)
from mk11unpack.header import HeaderError
from mk11unpack.options import DEFAULT_PROGRAM, Options, UsageError, parse_args
from mk11unpack.paths import FileLayout, join, make_folder_out_name
from mk11unpack.segments import Package


def _unpack_packages(
    packages: list[Package],
    stream: BinaryIO,
    codec: Codec,
    parent: str,
    info: TextIO,
    upk: Optional[BinaryIO],
) -> None:
    for index, package in enumerate(packages):
        info.write(package.describe() + "\n")
        folder = join(parent, make_folder_out_name(index, package.name))
        os.makedirs(folder, exist_ok=True)
        for sub_index, subpackage in enumerate(package.subpackages):
            info.write(subpackage.describe() + "\n")
            segment = subpackage.segment
            if segment is None:
                continue
            info.write(segment.describe() + "\n")
            out_name = join(folder, f"{sub_index}.decompressed")
            total = len(segment.compressed_segments)
            with open(out_name, "wb") as out:
                for number, chunk in enumerate(segment.compressed_segments, start=1):
                    sys.stderr.write(f"\rDecompressing into {out_name} ({number}/{total})")
                    info.write(chunk.describe() + "\n")
                    data = codec.decompress(chunk.read_data(stream), chunk.decompressed_size)
                    chunk.data = None
                    out.write(data)
                    if upk is not None:
                        upk.write(data)
            sys.stderr.write("\n")


def _write_text(path: str, text: str) -> None:
    with open(path, "w", encoding="utf-8") as out:
        out.write(text)


def extract(options: Options, output_folder: str = "output") -> MK11File:
    """Unpack the archive named by ``options`` below ``output_folder``."""
    layout = FileLayout(options.file_name, output_folder=output_folder)
    with ExitStack() as stack:
        source = stack.enter_context(open(layout.file_in_name, "rb"))
        try:
            psf: Optional[BinaryIO] = stack.enter_context(open(layout.file_in_psf_name, "rb"))
        except OSError:
            print("PSF File not present.", file=sys.stderr)
            psf = None

        os.makedirs(output_folder, exist_ok=True)
        archive = MK11File.read(source, psf, options.load_psf)

        flag = archive.header.compression_flag
        codec = codec_for_flag(flag, options.dll_folder)
        print(f"Compression Type Set To {CompressionFlag(flag).name.title()}", file=sys.stderr)

        os.makedirs(layout.folder_out_name, exist_ok=True)
        with open(layout.file_out_upk_name, "wb") as upk, open(
            layout.file_out_info_name, "w", encoding="utf-8"
        ) as info:
            info.write(layout.describe() + "\n\n")
            print(layout.describe(), file=sys.stderr)
            info.write(archive.describe() + "\n\n")
            upk.write(archive.upk_header())

            _unpack_packages(archive.packages, source, codec, layout.folder_out_name, info, upk)

            if archive.extra_packages and archive.has_psf and psf is not None:
                info.write("Extra Packages: \n")
                os.makedirs(layout.folder_out_extra_name, exist_ok=True)
                _unpack_packages(
                    archive.extra_packages, psf, codec, layout.folder_out_extra_name, info, None
                )

            if archive.psf_tables:
                info.write("Extra Packages Table:\n")
                _write_text(
                    layout.table_path("additionaldata"),
                    "".join(table.describe() + "\n" for table in archive.psf_tables),
                )

        if archive.bulk_tables:
            print("Bulk Data Table:")
            _write_text(
                layout.table_path("bulkdata"),
                "".join(table.describe() + "\n" for table in archive.bulk_tables),
            )

        with open(layout.file_out_upk_name, "rb") as upk_in:
            archive.read_tables(upk_in)
            for kind, heading, table in (
                ("names", "Name Table:", archive.name_table),
                ("exports", "Export Table:", archive.export_table),
                ("imports", "Import Table: ", archive.import_table),
            ):
                print(heading)
                _write_text(layout.table_path(kind), table.describe())
            archive.extract_exports(upk_in, layout)
    return archive


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the extractor with ``argv`` (the arguments after the program name)."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        options = parse_args([DEFAULT_PROGRAM, *args])
    except UsageError as exc:
        sys.stderr.write(exc.usage)
        print(exc, file=sys.stderr)
        return 1

    try:
        extract(options)
    except OSError as exc:
        print(f"Couldn't open file {options.file_name}.", file=sys.stderr)
        print(exc, file=sys.stderr)
        return -1
    except UnsupportedCompression as exc:
        print(exc, file=sys.stderr)
        return -1
    except (HeaderError, CompressionError, EOFError, ValueError, IndexError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())