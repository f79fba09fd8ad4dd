"""Readers for the 3Space era RMF, DYN and VOLN archives."""

from __future__ import annotations

import os
import struct
from dataclasses import replace
from pathlib import Path
from typing import BinaryIO

from .archive import ArchivePlugin, CompressionType, ContentInfo, FileInfo, FolderInfo

_RMF_TAGS = frozenset(
    bytes(tag)
    for tag in (
        (0x00, 0x01, 0x05, 0x07),
        (0x00, 0x01, 0x06, 0x07),
        (0x00, 0x02, 0x05, 0x07),
        (0x00, 0x02, 0x04, 0x07),
        (0x01, 0x00, 0x00, 0x00),
        (0x01, 0x04, 0x06, 0x07),
        (0x01, 0x02, 0x04, 0x05),
        (0x00, 0x01, 0x05, 0x06),
        (0x00, 0x01, 0x04, 0x07),
        (0x03, 0x04, 0x05, 0x07),
    )
)

_DYN_TAG = b"Dynamix Volume File\0"
_VOL_TAG = b"VOLN"

_NAME_SIZE = 13
_RMF_HEADER_SIZE = 6
_RMF_FILE_HEADER = struct.Struct("<ii")
_ENTRY_HEADER_SIZE = _NAME_SIZE + 4
_VOL_ENTRY = struct.Struct("<13sBI")
_VOL_DATA_HEADER_SIZE = 1 + 8

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise ValueError("Unexpected end of volume data.")
    return data


def _read_u16(stream: BinaryIO) -> int:
    return _U16.unpack(_read_exact(stream, _U16.size))[0]


def _read_u32(stream: BinaryIO) -> int:
    return _U32.unpack(_read_exact(stream, _U32.size))[0]


def _c_string(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("latin-1")


def _read_name(stream: BinaryIO) -> str:
    return _c_string(_read_exact(stream, _NAME_SIZE))


def _peek(stream: BinaryIO, size: int) -> bytes:
    position = stream.tell()
    data = stream.read(size)
    stream.seek(position)
    return data


def _seek_to_data(stream: BinaryIO, info: FileInfo, header_size: int) -> None:
    position = stream.tell()
    if position == info.offset:
        stream.seek(header_size, os.SEEK_CUR)
    elif position != info.offset + header_size:
        stream.seek(info.offset + header_size)


def get_rmf_sub_archives(stream: BinaryIO) -> list[FolderInfo]:
    """List the volumes referenced by an RMF file, with their file counts."""
    header = _read_exact(stream, _RMF_HEADER_SIZE)
    volume_count = header[-2]

    results: list[FolderInfo] = []
    for _ in range(volume_count):
        name = _read_name(stream)
        file_count = _read_u16(stream)
        results.append(FolderInfo(name=name, file_count=file_count))
        stream.seek(file_count * _RMF_FILE_HEADER.size, os.SEEK_CUR)

    return results


def get_rmf_data(stream: BinaryIO, archive_path: Path) -> list[FileInfo]:
    """List the files an RMF file places in the volume named by ``archive_path``.

    ``archive_path`` has the form ``<folder>/<rmf file>/<volume file>``; the
    volume itself is read from ``<folder>/<volume file>``.
    """
    archive_path = Path(archive_path)
    header = _read_exact(stream, _RMF_HEADER_SIZE)
    volume_count = header[-2]

    real_path = archive_path.parent.parent
    map_filename = archive_path.parent.name
    volume_filename = archive_path.name

    results: list[FileInfo] = []
    for _ in range(volume_count):
        name = _read_name(stream)
        file_count = _read_u16(stream)

        if name != volume_filename:
            stream.seek(file_count * _RMF_FILE_HEADER.size, os.SEEK_CUR)
            continue

        raw_headers = _read_exact(stream, file_count * _RMF_FILE_HEADER.size)
        offsets = sorted(offset for _, offset in _RMF_FILE_HEADER.iter_unpack(raw_headers))

        with open(real_path / volume_filename, "rb") as volume:
            for offset in offsets:
                volume.seek(offset)
                child_name = _read_name(volume)
                file_size = _read_u32(volume)
                results.append(
                    FileInfo(
                        filename=Path(child_name),
                        offset=offset,
                        size=file_size,
                        compression_type=CompressionType.NONE,
                        folder_path=real_path / map_filename / volume_filename,
                    )
                )
        break

    return results


def get_dyn_data(stream: BinaryIO) -> list[FileInfo]:
    """List the files stored in a DYN volume."""
    if _read_exact(stream, len(_DYN_TAG)) != _DYN_TAG:
        raise ValueError("File was is not a DYN volume, as expected.")

    stream.seek(12, os.SEEK_CUR)
    file_count = _read_u32(stream)
    # An array of what appear to be checksums.
    stream.seek(file_count * 4, os.SEEK_CUR)

    results: list[FileInfo] = []
    for _ in range(file_count):
        offset = stream.tell()
        name = _read_name(stream)
        file_size = _read_u32(stream)
        results.append(
            FileInfo(
                filename=Path(name),
                offset=offset,
                size=file_size,
                compression_type=CompressionType.NONE,
            )
        )
        stream.seek(file_size, os.SEEK_CUR)
        padding = -stream.tell() % 4
        if padding:
            stream.seek(padding, os.SEEK_CUR)

    return results


def get_vol_folders(stream: BinaryIO) -> list[str]:
    """Read the folder names at the start of a VOLN volume."""
    if _read_exact(stream, len(_VOL_TAG)) != _VOL_TAG:
        raise ValueError("File was is not a VOL file, as expected.")

    stream.seek(6, os.SEEK_CUR)
    num_chars = _read_u16(stream)
    raw_folders = _read_exact(stream, num_chars)

    folders: list[str] = []
    index = 0
    while index < len(raw_folders):
        end = raw_folders.find(b"\0", index)
        if end == -1:
            end = len(raw_folders)
        folder = raw_folders[index:end].decode("latin-1")
        if folder.endswith("\\"):
            folder = folder[:-1]
        folders.append(folder)
        index = end + 1

    return folders


def get_vol_data(stream: BinaryIO, archive_path: Path) -> list[FileInfo]:
    """List the files of a VOLN volume that belong to the folder named by ``archive_path``."""
    folders = get_vol_folders(stream)
    folder_name = Path(archive_path).name

    num_files = _read_u16(stream)
    _read_u32(stream)  # size of the file index

    files: list[FileInfo] = []
    for _ in range(num_files):
        raw_name, folder_index, offset = _VOL_ENTRY.unpack(_read_exact(stream, _VOL_ENTRY.size))

        if not folders or folder_index >= len(folders):
            folder = folder_name
        else:
            folder = folders[folder_index]

        if folder == folder_name:
            files.append(
                FileInfo(
                    filename=Path(_c_string(raw_name)),
                    offset=offset,
                    compression_type=CompressionType.NONE,
                    folder_path=Path(folder),
                )
            )

    for info in files:
        stream.seek(info.offset)
        entry = _read_exact(stream, 1)[0]
        if entry not in (0x02, 0x09):
            raise ValueError("VOL file has corrupted data.")
        info.compression_type = CompressionType.NONE if entry == 0x02 else CompressionType.LZ
        info.size = _read_u32(stream)
        _read_u32(stream)

    return files


class RmfFileArchive(ArchivePlugin):
    """Archive plugin for RMF files, which index files held in separate volumes."""

    @staticmethod
    def is_supported(stream: BinaryIO) -> bool:
        """Return True if the stream starts with a known RMF tag; the position is kept."""
        return _peek(stream, 4) in _RMF_TAGS

    def stream_is_supported(self, stream: BinaryIO) -> bool:
        return self.is_supported(stream)

    def get_content_listing(
        self, stream: BinaryIO, archive_or_folder_path: Path
    ) -> list[ContentInfo]:
        path = Path(archive_or_folder_path)
        if path.exists():
            return [
                replace(info, full_path=path / info.name)
                for info in get_rmf_sub_archives(stream)
            ]
        return list(get_rmf_data(stream, path))

    def set_stream_position(self, stream: BinaryIO, info: FileInfo) -> None:
        _seek_to_data(stream, info, _ENTRY_HEADER_SIZE)

    def extract_file_contents(
        self, stream: BinaryIO, info: FileInfo, output: BinaryIO
    ) -> None:
        folder_path = Path(info.folder_path)
        volume_path = folder_path.parent.parent / folder_path.name
        with open(volume_path, "rb") as real_stream:
            self.set_stream_position(real_stream, info)
            output.write(real_stream.read(info.size))


class DynFileArchive(ArchivePlugin):
    """Archive plugin for DYN volumes."""

    @staticmethod
    def is_supported(stream: BinaryIO) -> bool:
        """Return True if the stream starts with the DYN tag; the position is kept."""
        return _peek(stream, len(_DYN_TAG)) == _DYN_TAG

    def stream_is_supported(self, stream: BinaryIO) -> bool:
        return self.is_supported(stream)

    def get_content_listing(
        self, stream: BinaryIO, archive_or_folder_path: Path
    ) -> list[ContentInfo]:
        path = Path(archive_or_folder_path)
        return [replace(info, folder_path=path) for info in get_dyn_data(stream)]

    def set_stream_position(self, stream: BinaryIO, info: FileInfo) -> None:
        position = stream.tell()
        if position == info.offset:
            stream.seek(_ENTRY_HEADER_SIZE, os.SEEK_CUR)
        elif position != info.offset + _ENTRY_HEADER_SIZE:
            stream.seek(info.offset + 4)

    def extract_file_contents(
        self, stream: BinaryIO, info: FileInfo, output: BinaryIO
    ) -> None:
        self.set_stream_position(stream, info)
        output.write(stream.read(info.size))


class VolFileArchive(ArchivePlugin):
    """Archive plugin for VOLN volumes, which group their files into folders."""

    @staticmethod
    def is_supported(stream: BinaryIO) -> bool:
        """Return True if the stream starts with the VOLN tag; the position is kept."""
        return _peek(stream, len(_VOL_TAG)) == _VOL_TAG

    def stream_is_supported(self, stream: BinaryIO) -> bool:
        return self.is_supported(stream)

    def get_content_listing(
        self, stream: BinaryIO, archive_or_folder_path: Path
    ) -> list[ContentInfo]:
        path = Path(archive_or_folder_path)

        if path.exists():
            position = stream.tell()
            folders = get_vol_folders(stream)
            if folders:
                return [FolderInfo(name=folder, full_path=path / folder) for folder in folders]
            stream.seek(position)

        return [replace(info, folder_path=path) for info in get_vol_data(stream, path)]

    def set_stream_position(self, stream: BinaryIO, info: FileInfo) -> None:
        _seek_to_data(stream, info, _VOL_DATA_HEADER_SIZE)

    def extract_file_contents(
        self, stream: BinaryIO, info: FileInfo, output: BinaryIO
    ) -> None:
        position = stream.tell()
        last_byte = stream.seek(0, os.SEEK_END)
        stream.seek(position)

        self.set_stream_position(stream, info)

        remaining = last_byte - info.offset - _VOL_DATA_HEADER_SIZE
        amount = info.size if remaining < 0 else min(info.size, remaining)
        output.write(stream.read(amount))