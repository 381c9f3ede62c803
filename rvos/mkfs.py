"""Build a file system image holding a root directory and a set of files."""

import struct
import sys
from dataclasses import dataclass, field

from .ls import FileType

ROOTINO = 1

_INODE_HEAD = struct.Struct("<hhhhI")  # type, major, minor, nlink, size
_SUPERBLOCK = struct.Struct("<8I")


@dataclass(frozen=True)
class Layout:
    """Sizes that fix where everything lives on the disk.

    Disk layout:
    [ boot block | sb block | log | inode blocks | free bit map | data blocks ]
    """

    block_size: int = 1024
    fs_size: int = 2000
    ninodes: int = 200
    nlog: int = 30
    ndirect: int = 12
    dirsiz: int = 14
    magic: int = 0x10203040

    def __post_init__(self):
        if self.block_size <= 0 or self.block_size % self.inode_size:
            raise ValueError(
                f"block size {self.block_size} is not a multiple of the inode size"
            )
        if self.block_size % self.dirent_size:
            raise ValueError(
                f"block size {self.block_size} is not a multiple of the dirent size"
            )

    @property
    def inode_size(self):
        return _INODE_HEAD.size + 4 * (self.ndirect + 1)

    @property
    def dirent_size(self):
        return 2 + self.dirsiz

    @property
    def inodes_per_block(self):
        return self.block_size // self.inode_size

    @property
    def nindirect(self):
        return self.block_size // 4

    @property
    def maxfile(self):
        return self.ndirect + self.nindirect

    @property
    def nbitmap(self):
        return self.fs_size // (self.block_size * 8) + 1

    @property
    def ninodeblocks(self):
        return self.ninodes // self.inodes_per_block + 1

    @property
    def logstart(self):
        return 2

    @property
    def inodestart(self):
        return self.logstart + self.nlog

    @property
    def bmapstart(self):
        return self.inodestart + self.ninodeblocks

    @property
    def nmeta(self):
        return 2 + self.nlog + self.ninodeblocks + self.nbitmap

    @property
    def nblocks(self):
        return self.fs_size - self.nmeta

    def iblock(self, inum):
        """Block holding inode inum."""
        return inum // self.inodes_per_block + self.inodestart


@dataclass
class Superblock:
    magic: int
    size: int
    nblocks: int
    ninodes: int
    nlog: int
    logstart: int
    inodestart: int
    bmapstart: int

    def pack(self):
        """Encode the superblock as little-endian bytes."""
        return _SUPERBLOCK.pack(
            self.magic, self.size, self.nblocks, self.ninodes, self.nlog,
            self.logstart, self.inodestart, self.bmapstart,
        )


def _superblock(layout):
    return Superblock(
        magic=layout.magic,
        size=layout.fs_size,
        nblocks=layout.nblocks,
        ninodes=layout.ninodes,
        nlog=layout.nlog,
        logstart=layout.logstart,
        inodestart=layout.inodestart,
        bmapstart=layout.bmapstart,
    )


@dataclass
class _DiskInode:
    type: int = 0
    major: int = 0
    minor: int = 0
    nlink: int = 0
    size: int = 0
    addrs: list = field(default_factory=list)


class ImageBuilder:
    """Writes a fresh image; use as a context manager to open and format it."""

    def __init__(self, path, layout=None):
        self.path = path
        self.layout = layout or Layout()
        self.superblock = _superblock(self.layout)
        self.freeinode = 1
        self.freeblock = self.layout.nmeta
        self.root = None
        self._file = None
        self._addrs = struct.Struct(f"<{self.layout.ndirect + 1}I")
        self._indirect = struct.Struct(f"<{self.layout.nindirect}I")
        self._dirent = struct.Struct(f"<H{self.layout.dirsiz}s")

    def __enter__(self):
        self._file = open(self.path, "w+b")
        try:
            self._format()
        except BaseException:
            self._file.close()
            self._file = None
            raise
        return self

    def __exit__(self, *args):
        if self._file is not None:
            self._file.close()
            self._file = None

    def _format(self):
        layout = self.layout
        self._file.write(bytes(layout.block_size * layout.fs_size))
        self._wsect(1, self.superblock.pack())
        self.root = self.ialloc(FileType.DIR)
        if self.root != ROOTINO:
            raise RuntimeError(f"root inode is {self.root}, expected {ROOTINO}")
        self.iappend(self.root, self._dirent.pack(self.root, b"."))
        self.iappend(self.root, self._dirent.pack(self.root, b".."))

    def _require_open(self):
        if self._file is None:
            raise RuntimeError("image is not open")
        return self._file

    def _wsect(self, sec, data):
        bs = self.layout.block_size
        if len(data) > bs:
            raise ValueError(f"sector data of {len(data)} bytes exceeds block size")
        f = self._require_open()
        f.seek(sec * bs)
        f.write(bytes(data).ljust(bs, b"\0"))

    def _rsect(self, sec):
        bs = self.layout.block_size
        f = self._require_open()
        f.seek(sec * bs)
        data = f.read(bs)
        if len(data) != bs:
            raise OSError(f"short read of sector {sec}")
        return data

    def _next_block(self):
        block = self.freeblock
        self.freeblock += 1
        return block

    def ialloc(self, kind):
        """Allocate the next inode with the given type; return its number."""
        inum = self.freeinode
        self.freeinode += 1
        inode = _DiskInode(type=int(kind), nlink=1, size=0,
                           addrs=[0] * (self.layout.ndirect + 1))
        self.write_inode(inum, inode)
        return inum

    def _inode_offset(self, inum):
        return (inum % self.layout.inodes_per_block) * self.layout.inode_size

    def read_inode(self, inum):
        """Return the on-disk inode inum."""
        block = self._rsect(self.layout.iblock(inum))
        offset = self._inode_offset(inum)
        itype, major, minor, nlink, size = _INODE_HEAD.unpack_from(block, offset)
        addrs = list(self._addrs.unpack_from(block, offset + _INODE_HEAD.size))
        return _DiskInode(itype, major, minor, nlink, size, addrs)

    def write_inode(self, inum, inode):
        """Store inode as the on-disk inode inum."""
        bn = self.layout.iblock(inum)
        block = bytearray(self._rsect(bn))
        offset = self._inode_offset(inum)
        _INODE_HEAD.pack_into(block, offset, inode.type, inode.major, inode.minor,
                              inode.nlink, inode.size)
        self._addrs.pack_into(block, offset + _INODE_HEAD.size, *inode.addrs)
        self._wsect(bn, block)

    def iappend(self, inum, data):
        """Append data to the end of inode inum, allocating blocks as needed."""
        layout = self.layout
        bs = layout.block_size
        din = self.read_inode(inum)
        off = din.size
        view = memoryview(bytes(data))
        while view:
            fbn = off // bs
            if fbn >= layout.maxfile:
                raise ValueError(f"inode {inum}: file exceeds {layout.maxfile} blocks")
            if fbn < layout.ndirect:
                if din.addrs[fbn] == 0:
                    din.addrs[fbn] = self._next_block()
                x = din.addrs[fbn]
            else:
                if din.addrs[layout.ndirect] == 0:
                    din.addrs[layout.ndirect] = self._next_block()
                ind_block = din.addrs[layout.ndirect]
                indirect = list(self._indirect.unpack(self._rsect(ind_block)))
                k = fbn - layout.ndirect
                if indirect[k] == 0:
                    indirect[k] = self._next_block()
                    self._wsect(ind_block, self._indirect.pack(*indirect))
                x = indirect[k]
            n1 = min(len(view), (fbn + 1) * bs - off)
            buf = bytearray(self._rsect(x))
            start = off - fbn * bs
            buf[start:start + n1] = view[:n1]
            self._wsect(x, buf)
            view = view[n1:]
            off += n1
        din.size = off
        self.write_inode(inum, din)

    def add_file(self, name, data):
        """Create a file in the root directory holding data; return its inode."""
        raw = name.encode() if isinstance(name, str) else bytes(name)
        if b"/" in raw:
            raise ValueError(f"file name {name!r} contains '/'")
        self._require_open()
        inum = self.ialloc(FileType.FILE)
        self.iappend(self.root, self._dirent.pack(inum, raw))
        self.iappend(inum, data)
        return inum

    def finish(self):
        """Round up the root directory size and write the bitmap; return blocks used."""
        bs = self.layout.block_size
        din = self.read_inode(self.root)
        din.size = (din.size // bs + 1) * bs
        self.write_inode(self.root, din)

        used = self.freeblock
        if used >= bs * 8:
            raise ValueError(f"{used} used blocks do not fit in one bitmap block")
        bitmap = bytearray(bs)
        for i in range(used):
            bitmap[i // 8] |= 1 << (i % 8)
        self._wsect(self.layout.bmapstart, bitmap)
        return used


def build_image(path, files, layout=None):
    """Write an image at path holding files, a mapping or pairs of (name, data)."""
    items = files.items() if hasattr(files, "items") else files
    with ImageBuilder(path, layout) as builder:
        for name, data in items:
            builder.add_file(name, data)
        return builder.finish()


def _image_name(path):
    short = path[5:] if path.startswith("user/") else path
    if "/" in short:
        raise ValueError(f"{path}: name must not contain '/'")
    # Build outputs carry a leading '_' so the host never runs them by mistake.
    return short[1:] if short.startswith("_") else short


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("Usage: mkfs fs.img files...\n")
        return 1
    image, paths = args[0], args[1:]
    layout = Layout()
    try:
        with ImageBuilder(image, layout) as builder:
            sys.stdout.write(
                f"nmeta {layout.nmeta} (boot, super, log blocks {layout.nlog} "
                f"inode blocks {layout.ninodeblocks}, bitmap blocks {layout.nbitmap}) "
                f"blocks {layout.nblocks} total {layout.fs_size}\n"
            )
            for path in paths:
                name = _image_name(path)
                try:
                    with open(path, "rb") as f:
                        data = f.read()
                except OSError as exc:
                    sys.stderr.write(f"{path}: {exc.strerror}\n")
                    return 1
                builder.add_file(name, data)
            used = builder.finish()
    except OSError as exc:
        sys.stderr.write(f"{image}: {exc.strerror or exc}\n")
        return 1
    except ValueError as exc:
        sys.stderr.write(f"mkfs: {exc}\n")
        return 1
    sys.stdout.write(f"balloc: first {used} blocks have been allocated\n")
    sys.stdout.write(f"balloc: write bitmap block at sector {layout.bmapstart}\n")
    return 0