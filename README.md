# volstudio

Readers for resource archives and asset formats from classic game engines.

## Archives

- Darkstar volumes (` VOL`, `PVOL`, `VOL `): `volstudio.darkstar_volume.VolFileArchive`,
  with the lower-level `get_file_names` and `get_file_metadata`.
- 3Space archives: `volstudio.three_space_volume.RmfFileArchive`, `DynFileArchive`
  and `VolFileArchive` (VOLN), with `get_rmf_sub_archives`, `get_rmf_data`,
  `get_dyn_data`, `get_vol_folders` and `get_vol_data`.
- Trophy Bass volumes: `volstudio.trophy_bass_volume.RbxFileArchive` and
  `TbvFileArchive`.

Every archive type implements `volstudio.archive.ArchivePlugin`:

- `stream_is_supported(stream)` checks the tag at the current position and
  leaves the position unchanged (each class also has a static `is_supported`);
- `get_content_listing(stream, path)` returns a list of `FileInfo` and
  `FolderInfo` entries;
- `set_stream_position(stream, info)` moves to the start of a file's data;
- `extract_file_contents(stream, info, output)` writes a file's bytes to a
  binary output.

`FileInfo` carries `filename`, `offset`, `size`, `compression_type`
(a `CompressionType`) and `folder_path`; `FolderInfo` carries `name`,
`file_count` and `full_path`.

Compressed entries in Darkstar volumes are not decoded by the package: for
them `VolFileArchive.extract_file_contents` runs an external `extract.exe`
found in the current directory or next to the volume, and copies its output
if it produced one. Without that tool nothing is written for such entries.

```python
from volstudio.darkstar_volume import VolFileArchive

archive = VolFileArchive()
with open("archive.vol", "rb") as stream:
    for entry in archive.get_content_listing(stream, "archive.vol"):
        print(entry.filename, entry.size, entry.compression_type.name)
```

## Other formats

- `volstudio.palette`: `is_microsoft_pal`, `get_pal_data` and `write_pal_data`
  for RIFF PAL files; `is_phoenix_pal` and `get_ppl_data` for PPL files
  (returning `Palette` objects); `Colour` and `colour_distance`.
- `volstudio.mdl`: `read_mdl` reads version 6 MDL models into an `MdlFile`
  (headers, skins, texture vertices, faces and frames), raising `ValueError`
  for data that is not one.
- `volstudio.structures`: `Vector3f`, `Quaternion4s`, `Quaternion4f`,
  `to_float` and other small value types.
- `volstudio.renderer`: the `ShapeRenderer` and `RenderableShape` interfaces
  and `ObjRenderer`, which writes the geometry it receives as Wavefront OBJ text.
- `volstudio.shared`: `find_files`, which resolves command-line names (`*`,
  `*.ext` or plain file names) against the current directory, and
  `get_padding_size`.

## Command

`mdl-info` reads MDL files and reports the size of each skin, how many bytes
were read and how many frames were found. `*` picks every `.mdl`/`.MDL` file
in the current directory and `*.mdl` picks by extension; other arguments name
files in the current directory. Errors are reported per file on standard error.

```
mdl-info "*"
```

## What the package does not do

- There is no command for extracting archives; extraction is done through the
  archive classes from Python code.
- There is no component that walks a directory tree and opens the archives in
  it as folders; each archive class works on a stream you open yourself.
- MDL models are read and reported on, not converted to another format.
- Sound files are not read or written.

## Installation and tests

```
pip install .[test]
pytest
```