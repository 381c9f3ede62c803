"""A small printf that understands %d, %l, %x, %p, %s, %c and %%."""

import sys

_DIGITS = "0123456789ABCDEF"
_MASK32 = 0xFFFFFFFF
_MASK64 = (1 << 64) - 1


def _int_text(value, base):
    digits = []
    while True:
        digits.append(_DIGITS[value % base])
        value //= base
        if value == 0:
            return "".join(reversed(digits))


def _signed32(value):
    value &= _MASK32
    return value - (1 << 32) if value & 0x80000000 else value


def _convert(spec, arg):
    if spec == "d":
        value = _signed32(arg)
        if value < 0:
            return "-" + _int_text(-value & _MASK32, 10)
        return _int_text(value, 10)
    if spec == "l":
        return _int_text(arg & _MASK64, 10)
    if spec == "x":
        return _int_text(arg & _MASK32, 16)
    if spec == "p":
        return "0x" + format(arg & _MASK64, "016X")
    if spec == "s":
        return "(null)" if arg is None else str(arg)
    if spec == "c":
        return arg[:1] if isinstance(arg, str) else chr(arg & 0xFF)
    raise AssertionError(spec)


def format_message(fmt, *args):
    """Expand fmt with args the way the user-level printf does."""
    out = []
    values = iter(args)
    chars = iter(fmt)
    for c in chars:
        if c != "%":
            out.append(c)
            continue
        spec = next(chars, None)
        if spec is None:
            break
        if spec in "dlxpsc":
            try:
                arg = next(values)
            except StopIteration:
                raise TypeError(f"not enough arguments for %{spec}") from None
            out.append(_convert(spec, arg))
        elif spec == "%":
            out.append("%")
        else:
            out.append("%" + spec)
    return "".join(out)


def fprintf(stream, fmt, *args):
    """Write the formatted message to stream."""
    stream.write(format_message(fmt, *args))


def printf(fmt, *args):
    """Write the formatted message to standard output."""
    fprintf(sys.stdout, fmt, *args)