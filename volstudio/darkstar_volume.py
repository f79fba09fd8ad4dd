"""Reader for Darkstar and 3Space VOL archives."""

from __future__ import annotations

import os
import struct
import subprocess
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from .archive import ArchivePlugin, CompressionType, ContentInfo, FileInfo

_VOL_FILE_TAG = b" VOL"
_ALT_VOL_FILE_TAG = b"PVOL"
_OLD_VOL_FILE_TAG = b"VOL "

_VOLUME_HEADER_SIZE = 8
_FILE_INDEX_HEADER_SIZE = 8
_NORMAL_FOOTER = struct.Struct("<4sI4sI4sI")
_ALTERNATIVE_FOOTER = struct.Struct("<4sI")
_OLD_FOOTER_SIZE = 20
_FILE_HEADER = struct.Struct("<IIIIB")
_OLD_FILE_HEADER = struct.Struct("<IIIBB")


class VolumeVersion(Enum):
    """The flavour of VOL archive."""

    THREE_SPACE_VOL = "three_space_vol"
    DARKSTAR_PVOL = "darkstar_pvol"
    DARKSTAR_VOL = "darkstar_vol"


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise ValueError("Unexpected end of VOL data.")
    return data


def _u24(data: bytes) -> int:
    return int.from_bytes(data[:3], "little")


def _get_file_list_offsets(stream: BinaryIO) -> tuple[VolumeVersion, int, int | None]:
    header = _read_exact(stream, _VOLUME_HEADER_SIZE)
    tag = header[:4]
    footer_offset = struct.unpack_from("<I", header, 4)[0]

    if tag == _VOL_FILE_TAG:
        stream.seek(footer_offset)
        footer = _NORMAL_FOOTER.unpack(_read_exact(stream, _NORMAL_FOOTER.size))
        return VolumeVersion.DARKSTAR_VOL, footer[-1], None

    if tag == _ALT_VOL_FILE_TAG:
        stream.seek(footer_offset)
        footer = _ALTERNATIVE_FOOTER.unpack(_read_exact(stream, _ALTERNATIVE_FOOTER.size))
        return VolumeVersion.DARKSTAR_PVOL, footer[-1], None

    if tag == _OLD_VOL_FILE_TAG:
        footer = _read_exact(stream, _OLD_FOOTER_SIZE)
        buffer_size = _u24(footer[12:15])
        file_list_size = _u24(footer[16:19])
        amount_to_skip = buffer_size - 4 - file_list_size
        return VolumeVersion.THREE_SPACE_VOL, file_list_size, amount_to_skip

    raise ValueError("The file provided is not a valid Darkstar VOL file.")


def get_file_names(stream: BinaryIO) -> tuple[VolumeVersion, list[str]]:
    """Read the volume header and the list of file names that follows it."""
    volume_type, buffer_size, amount_to_skip = _get_file_list_offsets(stream)

    if volume_type is not VolumeVersion.THREE_SPACE_VOL and buffer_size % 2 != 0:
        stream.seek(1, os.SEEK_CUR)

    raw_chars = _read_exact(stream, buffer_size)

    names: list[str] = []
    index = 0
    while index < len(raw_chars):
        end = raw_chars.find(b"\0", index)
        if end == -1:
            end = len(raw_chars)
        names.append(raw_chars[index:end].decode("latin-1"))
        index = end + 1

    if amount_to_skip is not None:
        stream.seek(amount_to_skip, os.SEEK_CUR)

    return volume_type, names


def get_file_metadata(stream: BinaryIO) -> list[FileInfo]:
    """Read the names, offsets, sizes and compression of every file in the volume."""
    volume_type, filenames = get_file_names(stream)
    three_space = volume_type is VolumeVersion.THREE_SPACE_VOL

    index_header = _read_exact(stream, _FILE_INDEX_HEADER_SIZE)
    if three_space:
        index_size = _u24(index_header[4:7])
    else:
        index_size = struct.unpack_from("<I", index_header, 4)[0]

    raw_bytes = _read_exact(stream, index_size)
    entry = _OLD_FILE_HEADER if three_space else _FILE_HEADER

    results: list[FileInfo] = []
    index = 0
    while index < len(raw_bytes) and len(results) < len(filenames):
        if index + entry.size > len(raw_bytes):
            raise ValueError("The VOL file index is truncated.")

        if three_space:
            _, offset, size, _, raw_compression = entry.unpack_from(raw_bytes, index)
            compression = CompressionType.NONE if raw_compression == 1 else CompressionType.LZ
        else:
            _, _, offset, size, raw_compression = entry.unpack_from(raw_bytes, index)
            compression = CompressionType(raw_compression)

        index += entry.size
        results.append(
            FileInfo(
                filename=Path(filenames[len(results)]),
                offset=offset,
                size=size,
                compression_type=compression,
            )
        )

    return results


class VolFileArchive(ArchivePlugin):
    """Archive plugin for Darkstar (" VOL", "PVOL") and 3Space ("VOL ") volumes."""

    @staticmethod
    def is_supported(stream: BinaryIO) -> bool:
        """Return True if the stream starts with a known VOL tag; the position is kept."""
        position = stream.tell()
        tag = stream.read(4)
        stream.seek(position)
        return tag in (_VOL_FILE_TAG, _ALT_VOL_FILE_TAG, _OLD_VOL_FILE_TAG)

    def stream_is_supported(self, stream: BinaryIO) -> bool:
        return self.is_supported(stream)

    def get_content_listing(
        self, stream: BinaryIO, archive_or_folder_path: Path
    ) -> list[ContentInfo]:
        folder_path = Path(archive_or_folder_path)
        return [replace(info, folder_path=folder_path) for info in get_file_metadata(stream)]

    def set_stream_position(self, stream: BinaryIO, info: FileInfo) -> None:
        position = stream.tell()
        if position == info.offset:
            stream.seek(_FILE_INDEX_HEADER_SIZE, os.SEEK_CUR)
        elif position != info.offset + _FILE_INDEX_HEADER_SIZE:
            stream.seek(info.offset + _FILE_INDEX_HEADER_SIZE)

    def extract_file_contents(
        self, stream: BinaryIO, info: FileInfo, output: BinaryIO
    ) -> None:
        if info.compression_type == CompressionType.NONE:
            self.set_stream_position(stream, info)
            output.write(stream.read(info.size))
            return

        self._extract_with_tool(info, output)

    @staticmethod
    def _extract_with_tool(info: FileInfo, output: BinaryIO) -> None:
        volume_filename = Path(info.folder_path)
        folder_path = volume_filename.parent / "temp"
        new_path = folder_path / f"{info.filename}.tmp"
        folder_path.mkdir(exist_ok=True)

        extract_path = Path("extract.exe")
        if (Path.cwd() / extract_path).exists():
            extract_path = Path.cwd() / extract_path
        elif (volume_filename.parent / extract_path).exists():
            extract_path = volume_filename.parent / extract_path

        working_dir = extract_path.parent if " " in str(extract_path) else None
        command = [str(extract_path), str(volume_filename), str(info.filename), str(new_path)]
        try:
            subprocess.run(command, cwd=working_dir, check=False)
        except OSError:
            return

        if new_path.exists() and new_path.stat().st_size > info.size:
            with new_path.open("rb") as new_file:
                output.write(new_file.read(info.size))
            new_path.unlink()