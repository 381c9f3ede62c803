import math
import struct

import pytest

from rvos.ls import FileType
from rvos.mkfs import ROOTINO, ImageBuilder, Layout, Superblock, build_image, main

SMALL = Layout(block_size=512, fs_size=200, ninodes=16, nlog=4)


def _block(image, layout, n):
    bs = layout.block_size
    return image[n * bs:(n + 1) * bs]


def _contents(image, layout, inode):
    nums = list(inode.addrs[:layout.ndirect])
    ind = inode.addrs[layout.ndirect]
    if ind:
        nums += struct.unpack(f"<{layout.nindirect}I", _block(image, layout, ind))
    count = math.ceil(inode.size / layout.block_size)
    return b"".join(_block(image, layout, n) for n in nums[:count])[:inode.size]


def _entries(data, layout):
    fmt = f"<H{layout.dirsiz}s"
    out = []
    for off in range(0, len(data), layout.dirent_size):
        inum, name = struct.unpack(fmt, data[off:off + layout.dirent_size])
        if inum:
            out.append((inum, name.rstrip(b"\0")))
    return out


def test_layout_invariants():
    layout = Layout()
    assert layout.nmeta + layout.nblocks == layout.fs_size
    assert layout.logstart == 2
    assert layout.inodestart == layout.logstart + layout.nlog
    assert layout.bmapstart == layout.inodestart + layout.ninodeblocks
    assert layout.inode_size == 64
    assert layout.block_size % layout.inode_size == 0


def test_layout_rejects_bad_block_size():
    with pytest.raises(ValueError):
        Layout(block_size=100)


def test_superblock_pack_roundtrip():
    sb = Superblock(1, 2, 3, 4, 5, 6, 7, 8)
    packed = sb.pack()
    assert len(packed) == 32
    assert Superblock(*struct.unpack("<8I", packed)) == sb


def test_empty_image_size_and_superblock(tmp_path):
    path = tmp_path / "fs.img"
    used = build_image(path, [], SMALL)
    image = path.read_bytes()
    assert len(image) == SMALL.fs_size * SMALL.block_size
    fields = struct.unpack("<8I", _block(image, SMALL, 1)[:32])
    assert fields == (
        SMALL.magic, SMALL.fs_size, SMALL.nblocks, SMALL.ninodes,
        SMALL.nlog, SMALL.logstart, SMALL.inodestart, SMALL.bmapstart,
    )
    assert used == SMALL.nmeta + 1


def test_root_directory_entries(tmp_path):
    path = tmp_path / "fs.img"
    with ImageBuilder(path, SMALL) as builder:
        a = builder.add_file("a", b"alpha")
        b = builder.add_file("b", b"beta")
        builder.finish()
        root = builder.read_inode(ROOTINO)
    image = path.read_bytes()
    assert root.type == FileType.DIR
    assert root.nlink == 1
    assert root.size % SMALL.block_size == 0
    entries = _entries(_contents(image, SMALL, root), SMALL)
    assert entries == [(ROOTINO, b"."), (ROOTINO, b".."), (a, b"a"), (b, b"b")]


def test_small_file_roundtrip(tmp_path):
    path = tmp_path / "fs.img"
    with ImageBuilder(path, SMALL) as builder:
        inum = builder.add_file("hello", b"hello world\n")
        inode = builder.read_inode(inum)
    assert inode.type == FileType.FILE
    assert inode.size == len(b"hello world\n")
    assert _contents(path.read_bytes(), SMALL, inode) == b"hello world\n"


def test_large_file_uses_indirect_block(tmp_path):
    path = tmp_path / "fs.img"
    data = bytes(range(256)) * 40
    with ImageBuilder(path, SMALL) as builder:
        inum = builder.add_file("big", data)
        inode = builder.read_inode(inum)
    assert inode.addrs[SMALL.ndirect] != 0
    assert inode.size == len(data)
    assert _contents(path.read_bytes(), SMALL, inode) == data


def test_appends_accumulate(tmp_path):
    path = tmp_path / "fs.img"
    with ImageBuilder(path, SMALL) as builder:
        inum = builder.add_file("f", b"x" * 700)
        builder.iappend(inum, b"y" * 400)
        inode = builder.read_inode(inum)
    assert _contents(path.read_bytes(), SMALL, inode) == b"x" * 700 + b"y" * 400


def test_bitmap_marks_used_blocks(tmp_path):
    path = tmp_path / "fs.img"
    with ImageBuilder(path, SMALL) as builder:
        builder.add_file("f", b"z" * 2000)
        used = builder.finish()
        assert used == builder.freeblock
    bitmap = _block(path.read_bytes(), SMALL, SMALL.bmapstart)
    bits = [(bitmap[i // 8] >> (i % 8)) & 1 for i in range(SMALL.block_size * 8)]
    assert all(bits[:used])
    assert not any(bits[used:])
    assert used > SMALL.nmeta


def test_name_truncated_to_dirsiz(tmp_path):
    path = tmp_path / "fs.img"
    name = "abcdefghijklmnopq"
    with ImageBuilder(path, SMALL) as builder:
        inum = builder.add_file(name, b"")
        root = builder.read_inode(ROOTINO)
    entries = _entries(_contents(path.read_bytes(), SMALL, root), SMALL)
    assert entries[-1] == (inum, name[:SMALL.dirsiz].encode())


def test_name_with_slash_rejected(tmp_path):
    with ImageBuilder(tmp_path / "fs.img", SMALL) as builder:
        with pytest.raises(ValueError):
            builder.add_file("a/b", b"")


def test_file_too_large(tmp_path):
    with ImageBuilder(tmp_path / "fs.img", SMALL) as builder:
        with pytest.raises(ValueError):
            builder.add_file("huge", bytes(SMALL.maxfile * SMALL.block_size + 1))


def test_builder_not_open(tmp_path):
    builder = ImageBuilder(tmp_path / "fs.img", SMALL)
    with pytest.raises(RuntimeError):
        builder.ialloc(FileType.FILE)


def test_ialloc_numbers_increase(tmp_path):
    with ImageBuilder(tmp_path / "fs.img", SMALL) as builder:
        first = builder.ialloc(FileType.FILE)
        second = builder.ialloc(FileType.FILE)
        assert first == ROOTINO + 1
        assert second == first + 1
        assert builder.read_inode(second).nlink == 1


def test_main_usage(capsys):
    assert main([]) == 1
    assert "Usage: mkfs fs.img files..." in capsys.readouterr().err


def test_main_builds_image(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "user").mkdir()
    (tmp_path / "user" / "_cat").write_bytes(b"\x7fELF cat")
    (tmp_path / "README").write_bytes(b"read me\n")
    assert main(["fs.img", "README", "user/_cat"]) == 0
    out = capsys.readouterr().out
    assert "balloc: first" in out
    layout = Layout()
    image = (tmp_path / "fs.img").read_bytes()
    assert len(image) == layout.fs_size * layout.block_size
    with ImageBuilder(tmp_path / "check.img", layout):
        pass
    inode_block = _block(image, layout, layout.iblock(ROOTINO))
    off = (ROOTINO % layout.inodes_per_block) * layout.inode_size
    size = struct.unpack_from("<I", inode_block, off + 8)[0]
    first = struct.unpack_from("<I", inode_block, off + 12)[0]
    names = [name for _, name in _entries(_block(image, layout, first), layout)]
    assert names == [b".", b"..", b"README", b"cat"]
    assert size % layout.block_size == 0


def test_main_missing_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["fs.img", "nosuchfile"]) == 1


def test_main_rejects_nested_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "f").write_bytes(b"x")
    assert main(["fs.img", "sub/f"]) == 1