"""Concatenate files to standard output."""

import sys


def cat(src, dst):
    """Copy all bytes from binary stream src to binary stream dst."""
    for chunk in iter(lambda: src.read(512), b""):
        dst.write(chunk)


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    out = sys.stdout.buffer
    try:
        if not args:
            cat(sys.stdin.buffer, out)
            return 0
        for name in args:
            try:
                f = open(name, "rb")
            except OSError:
                sys.stderr.write(f"cat: cannot open {name}\n")
                return 1
            with f:
                cat(f, out)
    except OSError:
        sys.stderr.write("cat: write error\n")
        return 1
    finally:
        out.flush()
    return 0