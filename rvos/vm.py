"""Sv39 page tables over a simulated pool of physical memory pages."""

from .riscv import (
    MAXVA,
    PGSIZE,
    PTE_R,
    PTE_U,
    PTE_V,
    PTE_W,
    PTE_X,
    PTES_PER_PAGE,
    pa2pte,
    pg_round_down,
    pg_round_up,
    pte2pa,
    pte_flags,
    px,
)

_PTE_SIZE = 8
_JUNK = 0x01


class VMError(Exception):
    """Raised for an invalid page-table operation or a bad user address."""


def _ptr(value):
    return f"0x{value:016x}"


class PhysicalMemory:
    """A contiguous range of physical pages with a page allocator."""

    def __init__(self, base, npages):
        if base % PGSIZE:
            raise ValueError(f"base {base:#x} is not page aligned")
        if npages < 0:
            raise ValueError("npages must not be negative")
        self.base = base
        self.npages = npages
        self.end = base + npages * PGSIZE
        self._pages = {}
        # Popping from the end hands out the lowest address first.
        self._free = [base + i * PGSIZE for i in reversed(range(npages))]
        self._free_set = set(self._free)

    def __repr__(self):
        return (
            f"PhysicalMemory(base={self.base:#x}, npages={self.npages}, "
            f"free={self.free_count()})"
        )

    def kalloc(self):
        """Take one page from the free list; None when memory is exhausted."""
        if not self._free:
            return None
        pa = self._free.pop()
        self._free_set.discard(pa)
        return pa

    def kfree(self, pa):
        """Return a page to the free list, filling it with junk."""
        if pa % PGSIZE or not self.base <= pa < self.end:
            raise VMError(f"kfree: bad address {pa:#x}")
        if pa in self._free_set:
            raise VMError(f"kfree: page {pa:#x} already free")
        self._page(pa)[:] = bytes([_JUNK]) * PGSIZE
        self._free.append(pa)
        self._free_set.add(pa)

    def free_count(self):
        """Number of pages currently on the free list."""
        return len(self._free)

    def _page(self, pa):
        if not self.base <= pa < self.end:
            raise VMError(f"physical address {pa:#x} outside memory")
        key = pg_round_down(pa)
        page = self._pages.get(key)
        if page is None:
            page = self._pages[key] = bytearray(PGSIZE)
        return page

    def read(self, pa, n):
        """Read n bytes starting at physical address pa."""
        out = bytearray()
        while n > 0:
            offset = pa % PGSIZE
            chunk = min(n, PGSIZE - offset)
            out += self._page(pa)[offset:offset + chunk]
            pa += chunk
            n -= chunk
        return bytes(out)

    def write(self, pa, data):
        """Write data starting at physical address pa."""
        view = memoryview(bytes(data))
        while view:
            offset = pa % PGSIZE
            chunk = min(len(view), PGSIZE - offset)
            self._page(pa)[offset:offset + chunk] = view[:chunk]
            pa += chunk
            view = view[chunk:]

    def read_pte(self, pa, index):
        """Read entry index of the page-table page at pa."""
        if not 0 <= index < PTES_PER_PAGE:
            raise VMError(f"PTE index {index} out of range")
        return int.from_bytes(self.read(pa + index * _PTE_SIZE, _PTE_SIZE), "little")

    def write_pte(self, pa, index, value):
        """Store value as entry index of the page-table page at pa."""
        if not 0 <= index < PTES_PER_PAGE:
            raise VMError(f"PTE index {index} out of range")
        self.write(pa + index * _PTE_SIZE, value.to_bytes(_PTE_SIZE, "little"))


class PageTable:
    """A three-level Sv39 page table rooted at a page of physical memory.

    A PTE is referred to as a (table page address, index) pair.
    """

    def __init__(self, memory, root):
        self.memory = memory
        self.root = root

    def __repr__(self):
        return f"PageTable(root={self.root:#x})"

    def _get(self, ref):
        return self.memory.read_pte(*ref)

    def _set(self, ref, value):
        self.memory.write_pte(*ref, value)

    def walk(self, va, alloc=False):
        """Locate the level-0 PTE for va, creating table pages if alloc.

        Returns a (table, index) pair, or None when a table page is
        missing and cannot or may not be allocated.
        """
        if va >= MAXVA:
            raise VMError("walk")
        memory = self.memory
        table = self.root
        for level in (2, 1):
            index = px(level, va)
            pte = memory.read_pte(table, index)
            if pte & PTE_V:
                table = pte2pa(pte)
                continue
            if not alloc:
                return None
            child = memory.kalloc()
            if child is None:
                return None
            memory.write(child, bytes(PGSIZE))
            memory.write_pte(table, index, pa2pte(child) | PTE_V)
            table = child
        return table, px(0, va)

    def walkaddr(self, va):
        """Physical address of the user page mapped at va, or None."""
        if va >= MAXVA:
            return None
        ref = self.walk(va, False)
        if ref is None:
            return None
        pte = self._get(ref)
        if not pte & PTE_V or not pte & PTE_U:
            return None
        return pte2pa(pte)

    def map_pages(self, va, size, pa, perm):
        """Map [va, va+size) to physical memory starting at pa."""
        if size == 0:
            raise VMError("mappages: size")
        first = pg_round_down(va)
        last = pg_round_down(va + size - 1)
        for offset in range(0, last - first + PGSIZE, PGSIZE):
            ref = self.walk(first + offset, True)
            if ref is None:
                raise MemoryError("mappages: out of memory for page-table pages")
            if self._get(ref) & PTE_V:
                raise VMError("mappages: remap")
            self._set(ref, pa2pte(pa + offset) | perm | PTE_V)

    def kvmmap(self, va, pa, sz, perm):
        """Add a mapping that must succeed, as used while booting."""
        try:
            self.map_pages(va, sz, pa, perm)
        except MemoryError as exc:
            raise VMError("kvmmap") from exc

    def unmap(self, va, npages, do_free):
        """Remove npages of mappings from page-aligned va, optionally freeing them."""
        if va % PGSIZE:
            raise VMError("uvmunmap: not aligned")
        for a in range(va, va + npages * PGSIZE, PGSIZE):
            ref = self.walk(a, False)
            if ref is None:
                raise VMError("uvmunmap: walk")
            pte = self._get(ref)
            if pte & PTE_V:
                if pte_flags(pte) == PTE_V:
                    raise VMError("uvmunmap: not a leaf")
                if do_free:
                    self.memory.kfree(pte2pa(pte))
            self._set(ref, 0)

    def load_first(self, src):
        """Place the first process's code, less than a page, at address 0."""
        if len(src) >= PGSIZE:
            raise VMError("uvmfirst: more than a page")
        page = self.memory.kalloc()
        if page is None:
            raise MemoryError("uvmfirst: out of memory")
        self.memory.write(page, bytes(PGSIZE))
        self.map_pages(0, PGSIZE, page, PTE_W | PTE_R | PTE_X | PTE_U)
        self.memory.write(page, src)

    def grow(self, oldsz, newsz, xperm=0):
        """Allocate zeroed user pages to grow from oldsz to newsz; return the new size."""
        if newsz < oldsz:
            return oldsz
        oldsz = pg_round_up(oldsz)
        for a in range(oldsz, newsz, PGSIZE):
            page = self.memory.kalloc()
            if page is None:
                self.shrink(a, oldsz)
                raise MemoryError("uvmalloc: out of memory")
            self.memory.write(page, bytes(PGSIZE))
            try:
                self.map_pages(a, PGSIZE, page, PTE_R | PTE_U | xperm)
            except MemoryError:
                self.memory.kfree(page)
                self.shrink(a, oldsz)
                raise
        return newsz

    def shrink(self, oldsz, newsz):
        """Free user pages to bring the size from oldsz down to newsz."""
        if newsz >= oldsz:
            return oldsz
        if pg_round_up(newsz) < pg_round_up(oldsz):
            npages = (pg_round_up(oldsz) - pg_round_up(newsz)) // PGSIZE
            self.unmap(pg_round_up(newsz), npages, True)
        return newsz

    def free_walk(self):
        """Free every page-table page; all leaf mappings must be gone."""
        self._free_walk(self.root)

    def _free_walk(self, table):
        memory = self.memory
        for index in range(PTES_PER_PAGE):
            pte = memory.read_pte(table, index)
            if pte & PTE_V and not pte & (PTE_R | PTE_W | PTE_X):
                self._free_walk(pte2pa(pte))
                memory.write_pte(table, index, 0)
            elif pte & PTE_V:
                raise VMError("freewalk: leaf")
        memory.kfree(table)

    def dump(self):
        """Describe every valid PTE, indented by depth."""
        lines = [f"page table {_ptr(self.root)}"]
        self._dump(self.root, 0, lines)
        return "\n".join(lines) + "\n"

    def _dump(self, table, depth, lines):
        for index in range(PTES_PER_PAGE):
            pte = self.memory.read_pte(table, index)
            if not pte & PTE_V:
                continue
            lines.append(f"{'..' * depth}{index}: pte {_ptr(pte)} pa {_ptr(pte2pa(pte))}")
            if not pte & (PTE_R | PTE_W | PTE_X):
                self._dump(pte2pa(pte), depth + 1, lines)

    def free(self, sz):
        """Free sz bytes of user memory and then the page-table pages."""
        if sz > 0:
            self.unmap(0, pg_round_up(sz) // PGSIZE, True)
        self.free_walk()

    def copy_to(self, other, sz):
        """Copy the first sz bytes of memory and their mappings into other."""
        memory = self.memory
        done = 0
        try:
            for va in range(0, sz, PGSIZE):
                ref = self.walk(va, False)
                if ref is None:
                    raise VMError("uvmcopy: pte should exist")
                pte = self._get(ref)
                if not pte & PTE_V:
                    raise VMError("uvmcopy: page not present")
                page = memory.kalloc()
                if page is None:
                    raise MemoryError("uvmcopy: out of memory")
                memory.write(page, memory.read(pte2pa(pte), PGSIZE))
                try:
                    other.map_pages(va, PGSIZE, page, pte_flags(pte))
                except MemoryError:
                    memory.kfree(page)
                    raise
                done = va + PGSIZE
        except MemoryError:
            other.unmap(0, done // PGSIZE, True)
            raise

    def clear_user(self, va):
        """Mark the PTE for va inaccessible to user mode."""
        ref = self.walk(va, False)
        if ref is None:
            raise VMError("uvmclear")
        self._set(ref, self._get(ref) & ~PTE_U)

    def _user_chunks(self, va, n, what):
        """Yield (physical address, length) pieces of user range [va, va+n)."""
        while n > 0:
            va0 = pg_round_down(va)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise VMError(f"{what}: address {va:#x} not mapped")
            chunk = min(PGSIZE - (va - va0), n)
            yield pa0 + (va - va0), chunk
            n -= chunk
            va = va0 + PGSIZE

    def copy_out(self, dstva, data):
        """Copy data into user memory at virtual address dstva."""
        view = memoryview(bytes(data))
        for pa, chunk in self._user_chunks(dstva, len(view), "copyout"):
            self.memory.write(pa, view[:chunk])
            view = view[chunk:]

    def copy_in(self, srcva, n):
        """Read n bytes of user memory starting at virtual address srcva."""
        return b"".join(
            self.memory.read(pa, chunk)
            for pa, chunk in self._user_chunks(srcva, n, "copyin")
        )

    def copy_in_str(self, srcva, limit):
        """Read a NUL-terminated string of at most limit bytes from user memory."""
        out = bytearray()
        for pa, chunk in self._user_chunks(srcva, limit, "copyinstr"):
            data = self.memory.read(pa, chunk)
            nul = data.find(0)
            if nul >= 0:
                out += data[:nul]
                return bytes(out)
            out += data
        raise VMError("copyinstr: no terminating NUL within limit")


def create_pagetable(memory):
    """Allocate an empty page table in memory."""
    root = memory.kalloc()
    if root is None:
        raise MemoryError("uvmcreate: out of memory")
    memory.write(root, bytes(PGSIZE))
    return PageTable(memory, root)