"""A first-fit free-list allocator over a simulated, growable heap."""

HEADER = 16
_MIN_UNITS = 4096


class Heap:
    """Kernighan and Ritchie style allocator; addresses are byte offsets."""

    def __init__(self, limit):
        self.limit = limit
        self.start = HEADER
        self.brk = self.start
        self._base = 0
        self._headers = {self._base: [self._base, 0]}
        self._freep = None

    def sbrk(self, n):
        """Move the break by n bytes; return the old break, or None on failure."""
        new = self.brk + n
        if new < self.start or new > self.start + self.limit:
            return None
        old, self.brk = self.brk, new
        return old

    def _morecore(self, nu):
        nu = max(nu, _MIN_UNITS)
        addr = self.sbrk(nu * HEADER)
        if addr is None:
            return None
        hp = addr // HEADER
        self._headers[hp] = [None, nu]
        self.free((hp + 1) * HEADER)
        return self._freep

    def malloc(self, nbytes):
        """Allocate nbytes; return the address, or None when out of memory."""
        h = self._headers
        nunits = (nbytes + HEADER - 1) // HEADER + 1
        if self._freep is None:
            h[self._base] = [self._base, 0]
            self._freep = self._base
        prevp = self._freep
        p = h[prevp][0]
        while True:
            if h[p][1] >= nunits:
                if h[p][1] == nunits:
                    h[prevp][0] = h[p][0]
                else:
                    h[p][1] -= nunits
                    p += h[p][1]
                    h[p] = [None, nunits]
                self._freep = prevp
                return (p + 1) * HEADER
            if p == self._freep:
                p = self._morecore(nunits)
                if p is None:
                    return None
            prevp, p = p, h[p][0]

    def free(self, ap):
        """Return a block obtained from malloc to the free list."""
        h = self._headers
        bp = ap // HEADER - 1
        if ap % HEADER or bp not in h or bp == self._base:
            raise ValueError(f"free: bad address {ap}")
        p = self._freep
        while not (p < bp < h[p][0]):
            if p >= h[p][0] and (bp > p or bp < h[p][0]):
                break
            p = h[p][0]
        nxt = h[p][0]
        if bp + h[bp][1] == nxt:
            h[bp][1] += h[nxt][1]
            h[bp][0] = h[nxt][0]
            del h[nxt]
        else:
            h[bp][0] = nxt
        if p + h[p][1] == bp:
            h[p][1] += h[bp][1]
            h[p][0] = h[bp][0]
            del h[bp]
        else:
            h[p][0] = bp
        self._freep = p