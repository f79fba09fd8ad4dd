import io
import struct
from pathlib import Path

import pytest

from volstudio.archive import CompressionType, FileInfo, FolderInfo
from volstudio.three_space_volume import (
    DynFileArchive,
    RmfFileArchive,
    VolFileArchive,
    get_dyn_data,
    get_rmf_data,
    get_rmf_sub_archives,
    get_vol_data,
    get_vol_folders,
)

RMF_TAG = bytes([0x00, 0x01, 0x05, 0x07])
DYN_TAG = b"Dynamix Volume File\0"


def _name(text: str) -> bytes:
    return text.encode("latin-1").ljust(13, b"\0")


def build_rmf(volumes):
    """volumes: list of (name, [(checksum, offset), ...])."""
    data = RMF_TAG + bytes([len(volumes), 0])
    for name, headers in volumes:
        data += _name(name) + struct.pack("<H", len(headers))
        data += b"".join(struct.pack("<ii", c, o) for c, o in headers)
    return data


def build_volume(files):
    """files: list of (name, payload). Returns data and offsets."""
    data = b"HEAD"
    offsets = []
    for name, payload in files:
        offsets.append(len(data))
        data += _name(name) + struct.pack("<I", len(payload)) + payload
    return data, offsets


def build_dyn(files):
    data = DYN_TAG + b"\0" * 12 + struct.pack("<I", len(files))
    data += b"\xaa\xbb\xcc\xdd" * len(files)
    offsets = []
    for name, payload in files:
        offsets.append(len(data))
        data += _name(name) + struct.pack("<I", len(payload)) + payload
        data += b"\0" * (-len(data) % 4)
    return data, offsets


def build_voln(folders, entries):
    """entries: list of (name, folder_index, payload, entry_byte)."""
    chars = b"".join(f.encode("latin-1") + b"\0" for f in folders)
    data = b"VOLN" + b"\0" * 6 + struct.pack("<H", len(chars)) + chars
    data += struct.pack("<HI", len(entries), 0)
    start = len(data) + 18 * len(entries)
    blocks = b""
    offsets = []
    for _, _, payload, _ in entries:
        offsets.append(start + len(blocks))
        blocks += b"\0" + struct.pack("<II", len(payload), 0) + payload
    for (name, index, _, _), offset in zip(entries, offsets):
        data += struct.pack("<13sBI", _name(name), index, offset)
    block_bytes = bytearray(blocks)
    for (_, _, _, entry_byte), offset in zip(entries, offsets):
        block_bytes[offset - start] = entry_byte
    return data + bytes(block_bytes), offsets


# RMF


def test_rmf_is_supported_keeps_position():
    stream = io.BytesIO(build_rmf([]))
    assert RmfFileArchive.is_supported(stream) is True
    assert stream.tell() == 0
    assert RmfFileArchive().stream_is_supported(io.BytesIO(b"VOLN0000")) is False


def test_rmf_sub_archives_lists_volumes():
    data = build_rmf([("VOL1.VOL", [(1, 10), (2, 20)]), ("VOL2.VOL", [(3, 30)])])
    stream = io.BytesIO(data)
    result = get_rmf_sub_archives(stream)
    assert [(f.name, f.file_count) for f in result] == [("VOL1.VOL", 2), ("VOL2.VOL", 1)]
    assert stream.tell() == len(data)


@pytest.fixture
def rmf_layout(tmp_path):
    volume, offsets = build_volume([("ALPHA.BMP", b"alpha-data"), ("BETA.PAL", b"beta")])
    (tmp_path / "VOL1.VOL").write_bytes(volume)
    rmf = build_rmf(
        [
            ("OTHER.VOL", [(9, 99)]),
            ("VOL1.VOL", [(2, offsets[1]), (1, offsets[0])]),
        ]
    )
    (tmp_path / "MAP.RMF").write_bytes(rmf)
    return tmp_path, rmf, offsets


def test_rmf_data_reads_files_sorted_by_offset(rmf_layout):
    root, rmf, offsets = rmf_layout
    archive_path = root / "MAP.RMF" / "VOL1.VOL"
    result = get_rmf_data(io.BytesIO(rmf), archive_path)
    assert [str(f.filename) for f in result] == ["ALPHA.BMP", "BETA.PAL"]
    assert [f.offset for f in result] == offsets
    assert [f.size for f in result] == [len(b"alpha-data"), len(b"beta")]
    assert all(f.folder_path == archive_path for f in result)
    assert all(f.compression_type == CompressionType.NONE for f in result)


def test_rmf_listing_of_existing_file_gives_folders(rmf_layout):
    root, rmf, _ = rmf_layout
    rmf_path = root / "MAP.RMF"
    result = RmfFileArchive().get_content_listing(io.BytesIO(rmf), rmf_path)
    assert all(isinstance(item, FolderInfo) for item in result)
    assert [item.full_path for item in result] == [rmf_path / "OTHER.VOL", rmf_path / "VOL1.VOL"]


def test_rmf_extract_round_trip(rmf_layout):
    root, rmf, _ = rmf_layout
    archive = RmfFileArchive()
    listing = archive.get_content_listing(io.BytesIO(rmf), root / "MAP.RMF" / "VOL1.VOL")
    extracted = []
    for info in listing:
        output = io.BytesIO()
        archive.extract_file_contents(io.BytesIO(), info, output)
        extracted.append(output.getvalue())
    assert extracted == [b"alpha-data", b"beta"]


# DYN


def test_dyn_is_supported_keeps_position():
    data, _ = build_dyn([])
    stream = io.BytesIO(data)
    assert DynFileArchive.is_supported(stream) is True
    assert stream.tell() == 0
    assert DynFileArchive.is_supported(io.BytesIO(b"Dynamix Volume Fil")) is False


def test_dyn_data_lists_files():
    files = [("ONE.TXT", b"abc"), ("TWO.TXT", b"hello world")]
    data, offsets = build_dyn(files)
    result = get_dyn_data(io.BytesIO(data))
    assert [str(f.filename) for f in result] == ["ONE.TXT", "TWO.TXT"]
    assert [f.offset for f in result] == offsets
    assert [f.size for f in result] == [3, 11]


def test_dyn_rejects_bad_tag():
    with pytest.raises(ValueError):
        get_dyn_data(io.BytesIO(b"Not a Dynamix Volume" + b"\0" * 40))


def test_dyn_extract_from_entry_start():
    files = [("ONE.TXT", b"abc"), ("TWO.TXT", b"hello world")]
    data, _ = build_dyn(files)
    archive = DynFileArchive()
    stream = io.BytesIO(data)
    listing = archive.get_content_listing(stream, Path("game.dyn"))
    assert all(item.folder_path == Path("game.dyn") for item in listing)
    results = []
    for info in listing:
        stream.seek(info.offset)
        output = io.BytesIO()
        archive.extract_file_contents(stream, info, output)
        results.append(output.getvalue())
    assert results == [payload for _, payload in files]


def test_dyn_extract_when_already_at_data():
    data, _ = build_dyn([("ONE.TXT", b"xyz")])
    info = get_dyn_data(io.BytesIO(data))[0]
    stream = io.BytesIO(data)
    stream.seek(info.offset + 17)
    output = io.BytesIO()
    DynFileArchive().extract_file_contents(stream, info, output)
    assert output.getvalue() == b"xyz"


# VOLN


def test_vol_folders_strip_backslash():
    data, _ = build_voln(["MAPS\\", "SOUND\\"], [])
    assert get_vol_folders(io.BytesIO(data)) == ["MAPS", "SOUND"]


def test_vol_folders_rejects_bad_tag():
    with pytest.raises(ValueError):
        get_vol_folders(io.BytesIO(b"VOL " + b"\0" * 20))


def test_vol_is_supported_keeps_position():
    data, _ = build_voln([], [])
    stream = io.BytesIO(data)
    assert VolFileArchive.is_supported(stream) is True
    assert stream.tell() == 0
    assert VolFileArchive().stream_is_supported(io.BytesIO(RMF_TAG)) is False


def test_vol_data_filters_by_folder():
    entries = [
        ("A.MAP", 0, b"map-a", 0x02),
        ("B.WAV", 1, b"sound", 0x02),
        ("C.MAP", 0, b"packed", 0x09),
    ]
    data, offsets = build_voln(["MAPS\\", "SOUND\\"], entries)
    result = get_vol_data(io.BytesIO(data), Path("somewhere/MAPS"))
    assert [str(f.filename) for f in result] == ["A.MAP", "C.MAP"]
    assert [f.offset for f in result] == [offsets[0], offsets[2]]
    assert [f.size for f in result] == [5, 6]
    assert [f.compression_type for f in result] == [CompressionType.NONE, CompressionType.LZ]


def test_vol_data_without_folders_keeps_all_files():
    entries = [("A.MAP", 0, b"a", 0x02), ("B.MAP", 3, b"bb", 0x02)]
    data, _ = build_voln([], entries)
    result = get_vol_data(io.BytesIO(data), Path("MAPS"))
    assert [str(f.filename) for f in result] == ["A.MAP", "B.MAP"]


def test_vol_data_detects_corruption():
    data, _ = build_voln(["MAPS\\"], [("A.MAP", 0, b"a", 0x05)])
    with pytest.raises(ValueError, match="corrupted"):
        get_vol_data(io.BytesIO(data), Path("MAPS"))


def test_vol_listing_of_existing_path_gives_folders(tmp_path):
    data, _ = build_voln(["MAPS\\", "SOUND\\"], [("A.MAP", 0, b"a", 0x02)])
    result = VolFileArchive().get_content_listing(io.BytesIO(data), tmp_path)
    assert [(f.name, f.full_path) for f in result] == [
        ("MAPS", tmp_path / "MAPS"),
        ("SOUND", tmp_path / "SOUND"),
    ]


def test_vol_listing_of_existing_path_without_folders_gives_files(tmp_path):
    data, _ = build_voln([], [("A.MAP", 0, b"a", 0x02)])
    result = VolFileArchive().get_content_listing(io.BytesIO(data), tmp_path)
    assert len(result) == 1
    assert isinstance(result[0], FileInfo)
    assert result[0].folder_path == tmp_path


def test_vol_extract_round_trip(tmp_path):
    entries = [("A.MAP", 0, b"map-a", 0x02), ("B.MAP", 0, b"map-bb", 0x02)]
    data, _ = build_voln(["MAPS\\"], entries)
    archive = VolFileArchive()
    stream = io.BytesIO(data)
    folder = tmp_path / "missing" / "MAPS"
    listing = archive.get_content_listing(stream, folder)
    assert all(item.folder_path == folder for item in listing)
    results = []
    for info in listing:
        output = io.BytesIO()
        archive.extract_file_contents(stream, info, output)
        results.append(output.getvalue())
    assert results == [b"map-a", b"map-bb"]


def test_vol_extract_clamps_to_end_of_stream():
    data, _ = build_voln(["MAPS\\"], [("A.MAP", 0, b"tail", 0x02)])
    info = get_vol_data(io.BytesIO(data), Path("MAPS"))[0]
    info.size = 1000
    output = io.BytesIO()
    VolFileArchive().extract_file_contents(io.BytesIO(data), info, output)
    assert output.getvalue() == b"tail"