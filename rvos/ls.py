"""List files and directories."""

import enum
import os
import stat
import sys

DIRSIZ = 14
_BUFSIZE = 512


class FileType(enum.IntEnum):
    DIR = 1
    FILE = 2
    DEVICE = 3


def fmtname(path):
    """Return the last path component, blank-padded to DIRSIZ."""
    name = path[path.rfind("/") + 1:]
    return name if len(name) >= DIRSIZ else name.ljust(DIRSIZ)


def _kind(st):
    if stat.S_ISDIR(st.st_mode):
        return FileType.DIR
    if stat.S_ISCHR(st.st_mode) or stat.S_ISBLK(st.st_mode):
        return FileType.DEVICE
    return FileType.FILE


def _line(path, st):
    return f"{fmtname(path)} {int(_kind(st))} {st.st_ino} {st.st_size}\n"


def ls(path, out):
    """Write a listing of path to out."""
    try:
        st = os.stat(path)
    except OSError:
        sys.stderr.write(f"ls: cannot open {path}\n")
        return
    if _kind(st) != FileType.DIR:
        out.write(_line(path, st))
        return
    if len(path) + 1 + DIRSIZ + 1 > _BUFSIZE:
        out.write("ls: path too long\n")
        return
    try:
        names = [".", ".."] + sorted(os.listdir(path))
    except OSError:
        sys.stderr.write(f"ls: cannot open {path}\n")
        return
    for name in names:
        full = f"{path}/{name}"
        try:
            entry = os.stat(full)
        except OSError:
            out.write(f"ls: cannot stat {full}\n")
            continue
        out.write(_line(full, entry))


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    for path in args or ["."]:
        ls(path, sys.stdout)
    return 0