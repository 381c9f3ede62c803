import io

import pytest

from rvos.grep import grep_lines, main, match


@pytest.mark.parametrize(
    "re,text,expected",
    [
        ("abc", "xxabcxx", True),
        ("^abc", "xxabc", False),
        ("^abc", "abcd", True),
        ("c$", "abc", True),
        ("c$", "abcd", False),
        ("a.c", "abc", True),
        ("ab*c", "ac", True),
        ("ab*c", "abbbc", True),
        ("^.*$", "", True),
        ("x", "", False),
    ],
)
def test_match(re, text, expected):
    assert match(re, text) is expected


def test_grep_lines_only_complete_lines():
    stream = io.StringIO("foo\nbar\nfood")
    assert list(grep_lines("foo", stream)) == ["foo\n"]


def test_main_file(tmp_path, capsys):
    path = tmp_path / "f.txt"
    path.write_text("one\ntwo\nthree\n")
    assert main(["t", str(path)]) == 0
    assert capsys.readouterr().out == "two\nthree\n"


def test_main_usage(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    missing = tmp_path / "nope"
    assert main(["x", str(missing)]) == 1
    assert capsys.readouterr().out == f"grep: cannot open {missing}\n"