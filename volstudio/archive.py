"""Common types and the interface shared by archive readers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import BinaryIO, Union


class CompressionType(IntEnum):
    """How the contents of an archived file are stored."""

    NONE = 0
    RLE = 1
    LZ = 2
    LZH = 3


@dataclass
class FileInfo:
    """A file held in a folder or inside an archive."""

    filename: Path = field(default_factory=Path)
    offset: int = 0
    size: int = 0
    compression_type: CompressionType = CompressionType.NONE
    folder_path: Path = field(default_factory=Path)


@dataclass
class FolderInfo:
    """A folder, or an archive that can be browsed like one."""

    name: str = ""
    file_count: int | None = None
    full_path: Path = field(default_factory=Path)


ContentInfo = Union[FolderInfo, FileInfo]


class ArchivePlugin(ABC):
    """Reads the listing and contents of one kind of archive."""

    @abstractmethod
    def stream_is_supported(self, stream: BinaryIO) -> bool:
        """Return True if the stream holds an archive of this kind."""

    @abstractmethod
    def get_content_listing(
        self, stream: BinaryIO, archive_or_folder_path: Path
    ) -> list[ContentInfo]:
        """Return the folders and files found in the archive."""

    @abstractmethod
    def set_stream_position(self, stream: BinaryIO, info: FileInfo) -> None:
        """Move the stream to the start of the data of ``info``."""

    @abstractmethod
    def extract_file_contents(
        self, stream: BinaryIO, info: FileInfo, output: BinaryIO
    ) -> None:
        """Write the contents of ``info`` to ``output``."""