import io

import pytest

from rvos.printf import format_message, fprintf, printf


def test_plain_text_passes_through():
    assert format_message("hello world\n") == "hello world\n"


def test_decimal_signed():
    assert format_message("%d", -5) == "-5"
    assert format_message("%d", 42) == "42"


def test_hex_uppercase():
    assert format_message("%x", 255) == "FF"


def test_hex_negative_wraps_to_32_bits():
    assert format_message("%x", -1) == "FFFFFFFF"


def test_pointer_is_zero_padded():
    assert format_message("%p", 1) == "0x0000000000000001"


def test_long_unsigned():
    assert format_message("%l", 2 ** 40) == str(2 ** 40)


def test_null_string():
    assert format_message("%s", None) == "(null)"


def test_string_and_char():
    assert format_message("%s-%c", "ab", ord("z")) == "ab-z"


def test_unknown_sequence_echoed():
    assert format_message("%q%%") == "%q%"


def test_missing_argument():
    with pytest.raises(TypeError):
        format_message("%d")


def test_fprintf_writes_stream():
    buf = io.StringIO()
    fprintf(buf, "%s %d\n", "n", 3)
    assert buf.getvalue() == "n 3\n"


def test_printf_writes_stdout(capsys):
    printf("x=%d\n", 7)
    assert capsys.readouterr().out == "x=7\n"