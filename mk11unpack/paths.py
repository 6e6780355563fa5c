"""Names of the input and output files the extractor works with."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

SEPARATOR = os.sep

PACKAGE_EXTENSION = ".xxx"
EXTRA_PACKAGE_EXTENSION = ".psf"
COMPRESSED_EXTENSION = ".oodle"
DECOMPRESSED_EXTENSION = ".dec"
UNPACKED_EXTENSION = ".upk"
TABLE_EXTENSION = ".txt"

PACKAGE_INFO_SUFFIX = ".info"

TABLE_SUFFIXES = {
    "names": ".names_table",
    "exports": ".exports_table",
    "imports": ".imports_table",
    "bulkdata": ".bulkdata_table",
    "additionaldata": ".additionaldata_table",
}


def join(*args: str) -> str:
    """Join path parts with the platform separator."""
    return SEPARATOR.join(args)


def file_name_part(file_name: str) -> str:
    """Return what follows the last path separator."""
    cut = max(file_name.rfind("\\"), file_name.rfind("/"))
    return file_name[cut + 1 :]


def strip_extension(file_name: str) -> str:
    """Return everything before the last dot, or the whole name without one."""
    head, dot, _ = file_name.rpartition(".")
    return head if dot else file_name


def base_name(file_name: str) -> str:
    """Return the file name without its directories and extension."""
    return strip_extension(file_name_part(file_name))


def psf_name(file_name: str) -> str:
    """Return the name of the companion data file."""
    return strip_extension(file_name) + EXTRA_PACKAGE_EXTENSION


def reext(file_name: str, extension: str) -> str:
    """Replace the extension of ``file_name``."""
    return strip_extension(file_name) + extension


def make_folder_out_name(pack_id: int, pack_name: str) -> str:
    """Return the folder name used for one package."""
    return f"{pack_id}_{pack_name}"


def make_file_out_name(seg_id: int, chunk_id: int) -> str:
    """Return the file name used for one compressed chunk."""
    return f"{seg_id}_{chunk_id}{COMPRESSED_EXTENSION}"


def mkdirs(path: str) -> None:
    """Create every directory leading up to ``path``."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


@dataclass
class FileLayout:
    """Every path derived from one input archive."""

    file_in_name: str
    output_folder: str = "output"
    extra_folder_name: str = "PSFData"
    extracted_folder: str = "extracted"
    file_in_psf_name: str = field(init=False)
    folder_out_name: str = field(init=False)
    folder_out_extra_name: str = field(init=False)
    file_out_upk_name: str = field(init=False)
    file_out_info_name: str = field(init=False)

    def __post_init__(self) -> None:
        name = self.file_in_name
        stem = base_name(name)
        self.file_in_psf_name = psf_name(name)
        self.folder_out_name = join(self.output_folder, stem)
        self.folder_out_extra_name = join(self.folder_out_name, self.extra_folder_name)
        self.file_out_upk_name = join(
            self.folder_out_name, reext(stem, UNPACKED_EXTENSION)
        )
        self.file_out_info_name = join(
            self.folder_out_name, reext(stem, PACKAGE_INFO_SUFFIX + TABLE_EXTENSION)
        )

    def table_path(self, kind: str) -> str:
        """Return the text file a table of the given kind is written to."""
        try:
            suffix = TABLE_SUFFIXES[kind]
        except KeyError:
            raise ValueError(f"unknown table kind: {kind!r}") from None
        return join(
            self.folder_out_name,
            reext(base_name(self.file_in_name), suffix + TABLE_EXTENSION),
        )

    def describe(self) -> str:
        """Return a short human-readable summary of the layout."""
        return (
            f"File Name: {self.file_in_name}\n"
            f"PSF File Name: {self.file_in_psf_name}\n"
            f"UPK File Name: {self.file_out_upk_name}\n"
            f"Output Name: {self.folder_out_name}"
        )