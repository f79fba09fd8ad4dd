"""Shape rendering interfaces and a Wavefront OBJ renderer."""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TextIO

from .structures import TextureVertex, Vector3f


class ShapeRenderer(ABC):
    """Receives the geometry of a shape as it is walked."""

    @abstractmethod
    def update_node(self, parent_node_name: str | None, node_name: str) -> None:
        """Called when a new node is entered."""

    @abstractmethod
    def update_object(self, parent_node_name: str | None, object_name: str) -> None:
        """Called when a new object is entered."""

    @abstractmethod
    def new_face(self, num_vertices: int) -> None:
        """Called before the vertices of a face are emitted."""

    @abstractmethod
    def end_face(self) -> None:
        """Called after the vertices of a face have been emitted."""

    @abstractmethod
    def emit_vertex(self, vertex: Vector3f) -> None:
        """Receives one vertex position."""

    @abstractmethod
    def emit_texture_vertex(self, vertex: TextureVertex) -> None:
        """Receives one texture coordinate."""


@dataclass
class SubSequenceInfo:
    """Animation state of one node within a sequence."""

    node_index: int
    node_name: str
    frame_index: int
    first_key_frame_index: int
    num_key_frames: int
    min_position: float
    max_position: float
    position: float
    enabled: bool


@dataclass
class SequenceInfo:
    """An animation sequence and its per-node parts."""

    index: int
    name: str
    enabled: bool
    sub_sequences: list[SubSequenceInfo] = field(default_factory=list)


class RenderableShape(ABC):
    """A shape that can be drawn through a ShapeRenderer."""

    @abstractmethod
    def get_sequences(self, detail_level_indexes: list[int]) -> list[SequenceInfo]:
        """Return the animation sequences for the given detail levels."""

    @abstractmethod
    def get_detail_levels(self) -> list[str]:
        """Return the names of the detail levels."""

    @abstractmethod
    def render_shape(
        self,
        renderer: ShapeRenderer,
        detail_level_indexes: list[int],
        sequences: list[SequenceInfo],
    ) -> None:
        """Walk the shape, sending its geometry to ``renderer``."""


def _format_float(value: float) -> str:
    single = struct.unpack("<f", struct.pack("<f", value))[0]
    return format(single, ".32g")


class ObjRenderer(ShapeRenderer):
    """Writes geometry as Wavefront OBJ text."""

    def __init__(self, output: TextIO) -> None:
        self.output = output
        self.new_face_str: str | None = None
        self.face_count = 0
        self.current_node: str | None = None

    def update_node(self, parent_node_name: str | None, node_name: str) -> None:
        """Remember the node being walked; OBJ output has no node records."""
        self.current_node = node_name

    def update_object(self, parent_node_name: str | None, object_name: str) -> None:
        self.output.write(f"o {object_name}\n")

    def new_face(self, num_vertices: int) -> None:
        indexes = range(self.face_count + 1, self.face_count + num_vertices + 1)
        self.new_face_str = "\tf" + "".join(f" {i}/{i}" for i in indexes) + "\n"
        self.face_count += num_vertices

    def end_face(self) -> None:
        if self.new_face_str is not None:
            self.output.write(self.new_face_str)

    def emit_vertex(self, vertex: Vector3f) -> None:
        coords = " ".join(_format_float(v) for v in (vertex.x, vertex.y, vertex.z))
        self.output.write(f"\tv {coords}\n")

    def emit_texture_vertex(self, vertex: TextureVertex) -> None:
        coords = " ".join(_format_float(v) for v in (vertex.x, vertex.y))
        self.output.write(f"\tvt {coords}\n")