"""Simple grep supporting only the ^ . * $ operators."""

import sys


def match(re, text):
    """Return True if re matches anywhere in text."""
    if re.startswith("^"):
        return _match_here(re[1:], text)
    return any(_match_here(re, text[i:]) for i in range(len(text) + 1))


def _match_here(re, text):
    if not re:
        return True
    if len(re) > 1 and re[1] == "*":
        return _match_star(re[0], re[2:], text)
    if re == "$":
        return text == ""
    if text and re[0] in (".", text[0]):
        return _match_here(re[1:], text[1:])
    return False


def _match_star(c, re, text):
    i = 0
    while True:
        if _match_here(re, text[i:]):
            return True
        if i < len(text) and (text[i] == c or c == "."):
            i += 1
        else:
            return False


def grep_lines(pattern, stream):
    """Yield every newline-terminated line of stream that matches pattern."""
    for line in stream:
        if line.endswith("\n") and match(pattern, line[:-1]):
            yield line


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("usage: grep pattern [file ...]\n")
        return 1
    pattern, files = args[0], args[1:]
    if not files:
        sys.stdout.writelines(grep_lines(pattern, sys.stdin))
        return 0
    for name in files:
        try:
            f = open(name, encoding="latin-1", newline="")
        except OSError:
            sys.stdout.write(f"grep: cannot open {name}\n")
            return 1
        with f:
            sys.stdout.writelines(grep_lines(pattern, f))
    return 0