"""Count lines, words and characters."""

import sys
from dataclasses import dataclass

_SPACE = " \r\t\n\v\0"


@dataclass
class Counts:
    lines: int = 0
    words: int = 0
    chars: int = 0


def count(stream):
    """Count the lines, words and characters read from a text stream."""
    counts = Counts()
    inword = False
    for chunk in iter(lambda: stream.read(512), ""):
        for c in chunk:
            counts.chars += 1
            if c == "\n":
                counts.lines += 1
            if c in _SPACE:
                inword = False
            elif not inword:
                counts.words += 1
                inword = True
    return counts


def _report(counts, name):
    sys.stdout.write(f"{counts.lines} {counts.words} {counts.chars} {name}\n")


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        _report(count(sys.stdin), "")
        return 0
    for name in args:
        try:
            f = open(name, encoding="latin-1", newline="")
        except OSError:
            sys.stdout.write(f"wc: cannot open {name}\n")
            return 1
        with f:
            _report(count(f), name)
    return 0