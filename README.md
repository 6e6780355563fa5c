# mk11unpack

Tools for unpacking Mortal Kombat 11 `.xxx` package archives, together with
the `.psf` companion file that can sit next to an archive.

## Installing

```
pip install .
```

## Extracting an archive

```
mk11unpack -f path/to/Archive.xxx [-p 0|1] [-d dll_folder]
```

Options:

- `-f file_name`: the `.xxx` archive to unpack (required).
- `-p load_psf`: a non-zero number (the default is `1`) also unpacks the extra
  packages stored in the `.psf` file with the same name as the archive; `0`
  skips them.
- `-d dll_folder`: the location of the Oodle codec library. It only appears
  in the error message for Oodle-compressed archives, which cannot be
  unpacked (see below).

The header is checked first: the magic number, engine version, file version
and licensee version must be the supported ones, or the command stops with an
error. Everything is then written below an `output` folder in the current
directory, in a sub-folder named after the archive:

- one `N.decompressed` file per sub-package, in an `id_PackageName` folder;
  extra packages from the `.psf` file go to a `PSFData` sub-folder;
- `<name>.upk`: a rebuilt header followed by the decompressed data of the
  archive's own packages (not the extra packages);
- `<name>.info.txt`: a description of the header, packages, sub-packages,
  segments and chunks;
- `<name>.names_table.txt`, `<name>.exports_table.txt` and
  `<name>.imports_table.txt`, read back from the `.upk` file, plus
  `<name>.additionaldata_table.txt` and `<name>.bulkdata_table.txt` when the
  archive has such tables;
- an `extracted` folder holding the data of every export, laid out by its
  resolved object path.

The command returns 0 on success, 1 for bad usage, an unsupported header or
a broken chunk, and -1 when a file cannot be opened or the compression method
is not supported.

## Dumping raw compressed chunks

```
mk11dump path/to/Archive.xxx
```

Prints the package and segment layout of an archive and writes every
compressed chunk of the archive's own packages, prefixed with its decompressed
size as an 8-byte little-endian integer, into a `<archive>_out` folder as
`<package>_<name>_<segment>_<chunk>.cmp` files. Packages that live in the
`.psf` file are listed but not dumped, and an archive whose file version marks
it as a compressed data package is only reported.

## Using it as a library

```python
from mk11unpack.options import parse_args
from mk11unpack.extract import extract

options = parse_args(["mk11unpack", "-f", "Init.xxx"])
archive = extract(options, "output")
print(archive.describe())
```

- `mk11unpack.archive.MK11File.read(stream, psf_stream, load_psf)` parses an
  archive from open binary streams; `upk_header()`, `read_tables(upk_stream)`
  and `extract_exports(upk_stream, layout)` rebuild and walk the unpacked data.
- `mk11unpack.header.FileHeader` reads, validates and writes the fixed header.
- `mk11unpack.segments` and `mk11unpack.extra_tables` hold the package,
  sub-package, segment, chunk and extra-table records.
- `mk11unpack.tables` reads the name, export and import tables of a `.upk`
  file.
- `mk11unpack.compression.codec_for_flag(flag)` returns the codec for a
  header's compression flag.
- `mk11unpack.paths.FileLayout` gives every path derived from an input name.
- `mk11unpack.legacy.dump(path)` is the chunk dumper behind `mk11dump`.

## What it does not do

- Only zlib-compressed archives can be unpacked. Oodle and every other
  compression method named in the header are reported as unsupported;
  `mk11dump` still works for them, since it does not decompress.
- There is no packing: nothing builds an `.xxx` or `.psf` archive from
  unpacked files.

## Running the tests

```
pip install .[test]
pytest
```