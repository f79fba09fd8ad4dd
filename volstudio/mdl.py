"""Reader for version 6 MDL model files and a command that inspects them."""

from __future__ import annotations

import struct
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar, Union

from .shared import find_files
from .structures import Vector3f

MDL_TAG = b"IDPO"
SUPPORTED_VERSION = 6

_FILE_HEADER = struct.Struct("<4si")
_DATA_HEADER = struct.Struct("<3f3ff3f8if")
_VERTEX = struct.Struct("<4B")
_TEXTURE_VERTEX = struct.Struct("<3B")
_FACE = struct.Struct("<4i")
_I32 = struct.Struct("<i")
_FRAME_NAME_SIZE = 16


@dataclass(frozen=True)
class Vertex:
    """A packed vertex position with a normal index."""

    keys: ClassVar[tuple[str, ...]] = ("x", "y", "z", "normal")
    x: int
    y: int
    z: int
    normal: int


@dataclass(frozen=True)
class TextureVertex:
    """A texture coordinate and whether it lies on a seam."""

    keys: ClassVar[tuple[str, ...]] = ("onSeam", "x", "y")
    on_seam: int
    x: int
    y: int


@dataclass(frozen=True)
class Face:
    """A triangle referring to three vertices."""

    keys: ClassVar[tuple[str, ...]] = ("facesFront", "vertexIndices")
    faces_front: int
    vertex_indices: tuple[int, int, int]


@dataclass(frozen=True)
class SimpleFrame:
    """A single animation frame with its bounding box and name."""

    frame_type: ClassVar[int] = 0
    bounding_box_min: Vertex
    bounding_box_max: Vertex
    name: str


@dataclass(frozen=True)
class GroupFrame:
    """The header of a group of animation frames."""

    min_position: Vertex
    max_position: Vertex


Frame = Union[SimpleFrame, GroupFrame]


@dataclass(frozen=True)
class FileHeader:
    """The tag and version at the start of the file."""

    file_tag: bytes
    version: int


@dataclass(frozen=True)
class DataHeader:
    """Sizes and counts describing the rest of the file."""

    scale: Vector3f
    translation: Vector3f
    bounding_radius: float
    eye_position: Vector3f
    num_skins: int
    skin_width: int
    skin_height: int
    num_vertices: int
    num_triangles: int
    num_frames: int
    sync_type: int
    flags: int
    size: float


@dataclass
class MdlFile:
    """Everything read from an MDL file."""

    header: FileHeader
    data_header: DataHeader
    skins: list[bytes] = field(default_factory=list)
    texture_vertices: list[TextureVertex] = field(default_factory=list)
    faces: list[Face] = field(default_factory=list)
    frames: list[Frame] = field(default_factory=list)


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise ValueError("Unexpected end of MDL data.")
    return data


def _read_i32(stream: BinaryIO) -> int:
    return _I32.unpack(_read_exact(stream, _I32.size))[0]


def _read_vertex(stream: BinaryIO) -> Vertex:
    return Vertex(*_VERTEX.unpack(_read_exact(stream, _VERTEX.size)))


def _read_data_header(stream: BinaryIO) -> DataHeader:
    values = _DATA_HEADER.unpack(_read_exact(stream, _DATA_HEADER.size))
    return DataHeader(
        Vector3f(*values[0:3]),
        Vector3f(*values[3:6]),
        values[6],
        Vector3f(*values[7:10]),
        *values[10:],
    )


def _read_frame(stream: BinaryIO) -> Frame:
    if _read_i32(stream) == SimpleFrame.frame_type:
        minimum = _read_vertex(stream)
        maximum = _read_vertex(stream)
        raw_name = _read_exact(stream, _FRAME_NAME_SIZE)
        name = raw_name.split(b"\0", 1)[0].decode("latin-1")
        return SimpleFrame(minimum, maximum, name)
    return GroupFrame(_read_vertex(stream), _read_vertex(stream))


def read_mdl(stream: BinaryIO) -> MdlFile:
    """Read a version 6 MDL file; raise ValueError if the data is not one."""
    tag, version = _FILE_HEADER.unpack(_read_exact(stream, _FILE_HEADER.size))
    if tag != MDL_TAG:
        raise ValueError("The file presented does not appear to be a valid MDL file.")
    if version != SUPPORTED_VERSION:
        raise ValueError("Only version 6 MDL files are supported.")

    data_header = _read_data_header(stream)
    model = MdlFile(header=FileHeader(tag, version), data_header=data_header)

    skin_size = max(data_header.skin_width * data_header.skin_height, 0)
    for _ in range(data_header.num_skins):
        if _read_i32(stream) not in (0, 1):
            raise ValueError("Skin not parsed correctly.")
        model.skins.append(_read_exact(stream, skin_size))

    for _ in range(max(data_header.num_vertices, 0)):
        raw = _read_exact(stream, _TEXTURE_VERTEX.size)
        model.texture_vertices.append(TextureVertex(*_TEXTURE_VERTEX.unpack(raw)))

    for _ in range(max(data_header.num_triangles, 0)):
        faces_front, *indices = _FACE.unpack(_read_exact(stream, _FACE.size))
        model.faces.append(Face(faces_front, tuple(indices)))

    model.frames.extend(_read_frame(stream) for _ in range(max(data_header.num_frames, 0)))
    return model


def main(argv: Sequence[str] | None = None) -> int:
    """Read each MDL file named on the command line and report what was found."""
    args = sys.argv[1:] if argv is None else list(argv)

    for file_name in find_files(args, ".mdl", ".MDL"):
        try:
            print(f"Converting {file_name}")
            with open(file_name, "rb") as stream:
                model = read_mdl(stream)
                position = stream.tell()

            for skin in model.skins:
                print(f"Read {len(skin)} bytes for texture")
            print(f"File has read {position} out of {file_name.stat().st_size} bytes")
            print(f"File has {len(model.frames)} frames")
        except (OSError, ValueError) as ex:
            print(f"{file_name} {ex}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())