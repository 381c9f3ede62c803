"""Small string helpers used by the user programs."""


def atoi(s):
    """Parse the leading decimal digits of s; 0 when there are none."""
    n = 0
    for c in s:
        if not "0" <= c <= "9":
            break
        n = n * 10 + ord(c) - ord("0")
    return n


def strcmp(p, q):
    """Compare two strings, returning the difference of the first unequal characters."""
    for a, b in zip(p, q):
        if a != b:
            return ord(a) - ord(b)
    if len(p) == len(q):
        return 0
    return ord(p[len(q)]) if len(p) > len(q) else -ord(q[len(p)])


def gets(stream, limit):
    """Read one line of at most limit-1 characters, keeping the newline."""
    out = []
    while len(out) + 1 < limit:
        c = stream.read(1)
        if not c:
            break
        out.append(c)
        if c in "\n\r":
            break
    return "".join(out)