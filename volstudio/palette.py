"""Microsoft RIFF PAL and Phoenix PPL palette files."""

from __future__ import annotations

import math
import os
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar

_RIFF_TAG = b"RIFF"
_PAL_TAG = b"PAL "
_DATA_TAG = b"data"
_PPL_TAG = b"PL98"

_U32 = struct.Struct("<I")
_PALETTE_HEADER = struct.Struct(">h")
_COLOUR_COUNT = struct.Struct("<h")
_PALETTE_INFO = struct.Struct("<iii4s32s")
_PALETTE_SUFFIX = struct.Struct("<II")
_COLOUR_SIZE = 4
_FIXED_PALETTE_COLOURS = 256


@dataclass(frozen=True, order=True)
class Colour:
    """An RGB colour with a flags byte; ordered by red, green, blue, flags."""

    keys: ClassVar[tuple[str, ...]] = ("r", "g", "b", "a")
    red: int
    green: int
    blue: int
    flags: int

    def to_bytes(self) -> bytes:
        return bytes((self.red, self.green, self.blue, self.flags))


@dataclass
class Palette:
    """One palette of a PPL file."""

    colours: list[Colour] = field(default_factory=list)
    index: int = 0
    type: int = 0


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise ValueError("Unexpected end of palette data.")
    return data


def _colours_from(raw: bytes) -> list[Colour]:
    return [Colour(*raw[i : i + _COLOUR_SIZE]) for i in range(0, len(raw), _COLOUR_SIZE)]


def colour_distance(e1: Colour, e2: Colour) -> float:
    """Return the perceptual "redmean" distance between two colours."""
    rmean = (e1.red + e2.red) // 2
    r = e1.red - e2.red
    g = e1.green - e2.green
    b = e1.blue - e2.blue
    return math.sqrt((((512 + rmean) * r * r) >> 8) + 4 * g * g + (((767 - rmean) * b * b) >> 8))


def is_microsoft_pal(stream: BinaryIO) -> bool:
    """Return True if the stream holds a RIFF PAL file; the position is kept."""
    start = stream.tell()
    header = stream.read(4)
    stream.read(4)
    sub_header = stream.read(4)
    stream.seek(start)
    return header == _RIFF_TAG and sub_header == _PAL_TAG


def get_pal_data(stream: BinaryIO) -> list[Colour]:
    """Read the colours of a RIFF PAL file."""
    header = stream.read(4)
    file_size_raw = stream.read(4)
    start = stream.tell()
    sub_header = stream.read(4)

    if header != _RIFF_TAG:
        raise ValueError("File data is not RIFF based.")
    if sub_header != _PAL_TAG or len(file_size_raw) != 4:
        raise ValueError("File data is RIFF based but is not a PAL file.")

    file_size = _U32.unpack(file_size_raw)[0]
    end = start + file_size + len(header) + len(file_size_raw)

    colours: list[Colour] = []
    while stream.tell() < end:
        chunk_header = stream.read(4)
        chunk_size_raw = stream.read(4)
        if len(chunk_header) != 4 or len(chunk_size_raw) != 4:
            break
        chunk_size = _U32.unpack(chunk_size_raw)[0]

        if chunk_header == _DATA_TAG:
            _read_exact(stream, _PALETTE_HEADER.size)
            colour_count = _COLOUR_COUNT.unpack(_read_exact(stream, _COLOUR_COUNT.size))[0]
            if colour_count > 0:
                colours = _colours_from(_read_exact(stream, colour_count * _COLOUR_SIZE))
            break

        if chunk_size == 0:
            break
        stream.seek(chunk_size, os.SEEK_CUR)

    return colours


def write_pal_data(stream: BinaryIO, colours: list[Colour]) -> int:
    """Write ``colours`` as a RIFF PAL file and return the number of bytes written."""
    colour_bytes = b"".join(colour.to_bytes() for colour in colours)
    data_size = _PALETTE_HEADER.size + _COLOUR_COUNT.size + len(colour_bytes)
    file_size = 12 + data_size

    stream.write(_RIFF_TAG)
    stream.write(struct.pack("<i", file_size))
    stream.write(_PAL_TAG)
    stream.write(_DATA_TAG)
    stream.write(struct.pack("<i", data_size))
    stream.write(_PALETTE_HEADER.pack(3))
    stream.write(_COLOUR_COUNT.pack(len(colours)))
    stream.write(colour_bytes)

    return len(_RIFF_TAG) + 4 + file_size


def is_phoenix_pal(stream: BinaryIO) -> bool:
    """Return True if the stream holds a Phoenix PPL file; the position is kept."""
    start = stream.tell()
    header = stream.read(4)
    stream.seek(start)
    return header == _PPL_TAG


def get_ppl_data(stream: BinaryIO) -> list[Palette]:
    """Read every palette of a Phoenix PPL file."""
    if stream.read(4) != _PPL_TAG:
        raise ValueError("File data is not PPL as expected.")

    palette_count = _PALETTE_INFO.unpack(_read_exact(stream, _PALETTE_INFO.size))[0]

    colours_size = _FIXED_PALETTE_COLOURS * _COLOUR_SIZE
    palettes: list[Palette] = []
    for _ in range(max(palette_count, 0)):
        raw_colours = _read_exact(stream, colours_size)
        index, palette_type = _PALETTE_SUFFIX.unpack(_read_exact(stream, _PALETTE_SUFFIX.size))
        palettes.append(Palette(colours=_colours_from(raw_colours), index=index, type=palette_type))

    return palettes