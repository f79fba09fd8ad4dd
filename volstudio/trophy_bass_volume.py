"""Readers for the RBX and TBV volumes."""

from __future__ import annotations

import os
import struct
from pathlib import Path
from typing import BinaryIO

from .archive import ArchivePlugin, CompressionType, ContentInfo, FileInfo

_TBV_TAG = b"TBVolume\0"
_RBX_TAG = bytes((0x9E, 0x9A, 0xA9, 0x0B))
_RBX_PADDING = b"\0\0\0\0"
_HEADER_TAGS = frozenset((b"RichRayl@CUC", b"RichRayl@DYN", b"RichRayl@Dyn"))

_TBV_HEADER = struct.Struct("<hHi12s12s")
_TBV_FILE_HEADER = struct.Struct("<ii")
_TBV_FILE_INFO = struct.Struct("<24sI")
_RBX_FILE_HEADER = struct.Struct("<12si")
_U32 = struct.Struct("<I")
_SIZE_FIELD = 4


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise ValueError("Unexpected end of volume data.")
    return data


def _c_string(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("latin-1")


def _peek(stream: BinaryIO, size: int) -> bytes:
    position = stream.tell()
    data = stream.read(size)
    stream.seek(position)
    return data


def _copy(stream: BinaryIO, size: int, output: BinaryIO) -> None:
    output.write(stream.read(size))


class RbxFileArchive(ArchivePlugin):
    """Archive plugin for RBX volumes."""

    @staticmethod
    def is_supported(stream: BinaryIO) -> bool:
        """Return True if the stream starts with the RBX tag; the position is kept."""
        return _peek(stream, len(_RBX_TAG)) == _RBX_TAG

    def stream_is_supported(self, stream: BinaryIO) -> bool:
        return self.is_supported(stream)

    def get_content_listing(
        self, stream: BinaryIO, archive_or_folder_path: Path
    ) -> list[ContentInfo]:
        if _read_exact(stream, len(_RBX_TAG)) != _RBX_TAG:
            raise ValueError("The file data provided is not a valid RBX file.")

        num_files = _U32.unpack(_read_exact(stream, _U32.size))[0]

        padding = stream.read(len(_RBX_PADDING))
        if padding != _RBX_PADDING:
            stream.seek(-len(padding), os.SEEK_CUR)

        entries: list[FileInfo] = []
        for _ in range(num_files):
            raw_name, offset = _RBX_FILE_HEADER.unpack(
                _read_exact(stream, _RBX_FILE_HEADER.size)
            )
            entries.append(
                FileInfo(
                    filename=Path(_c_string(raw_name)),
                    offset=offset,
                    compression_type=CompressionType.NONE,
                )
            )

        entries.sort(key=lambda info: info.offset)

        for info in entries:
            if stream.tell() != info.offset:
                stream.seek(info.offset)
            info.size = _U32.unpack(_read_exact(stream, _U32.size))[0]

        folder_path = Path(archive_or_folder_path)
        for info in entries:
            info.folder_path = folder_path
        return list(entries)

    def set_stream_position(self, stream: BinaryIO, info: FileInfo) -> None:
        position = stream.tell()
        if position == info.offset:
            stream.seek(_SIZE_FIELD, os.SEEK_CUR)
        elif position != info.offset + _TBV_FILE_INFO.size:
            stream.seek(info.offset + _SIZE_FIELD)

    def extract_file_contents(
        self, stream: BinaryIO, info: FileInfo, output: BinaryIO
    ) -> None:
        self.set_stream_position(stream, info)
        _copy(stream, info.size, output)


class TbvFileArchive(ArchivePlugin):
    """Archive plugin for TBV volumes."""

    @staticmethod
    def is_supported(stream: BinaryIO) -> bool:
        """Return True if the stream starts with the TBV tag; the position is kept."""
        return _peek(stream, len(_TBV_TAG)) == _TBV_TAG

    def stream_is_supported(self, stream: BinaryIO) -> bool:
        return self.is_supported(stream)

    def get_content_listing(
        self, stream: BinaryIO, archive_or_folder_path: Path
    ) -> list[ContentInfo]:
        if _read_exact(stream, len(_TBV_TAG)) != _TBV_TAG:
            raise ValueError("The file data provided is not a valid TBV file.")

        _, num_files, _, magic_string, _ = _TBV_HEADER.unpack(
            _read_exact(stream, _TBV_HEADER.size)
        )
        if magic_string not in _HEADER_TAGS:
            raise ValueError("The file data provided is not a valid TBV file.")

        entries: list[FileInfo] = []
        for _ in range(num_files):
            _, offset = _TBV_FILE_HEADER.unpack(_read_exact(stream, _TBV_FILE_HEADER.size))
            entries.append(FileInfo(offset=offset, compression_type=CompressionType.NONE))

        entries.sort(key=lambda info: info.offset)

        for info in entries:
            if stream.tell() != info.offset:
                stream.seek(info.offset)
            raw_name, file_size = _TBV_FILE_INFO.unpack(
                _read_exact(stream, _TBV_FILE_INFO.size)
            )
            info.filename = Path(_c_string(raw_name))
            info.size = file_size

        folder_path = Path(archive_or_folder_path)
        for info in entries:
            info.folder_path = folder_path
        return list(entries)

    def set_stream_position(self, stream: BinaryIO, info: FileInfo) -> None:
        position = stream.tell()
        if position == info.offset:
            stream.seek(_TBV_FILE_INFO.size, os.SEEK_CUR)
        elif position != info.offset + _TBV_FILE_INFO.size:
            stream.seek(info.offset + _TBV_FILE_INFO.size)

    def extract_file_contents(
        self, stream: BinaryIO, info: FileInfo, output: BinaryIO
    ) -> None:
        self.set_stream_position(stream, info)
        _copy(stream, info.size, output)