"""Sv39 page tables, ELF headers, disk-image building, a shell parser and command-line tools."""

__version__ = "0.1.0"