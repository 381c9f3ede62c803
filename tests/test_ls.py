import io

from rvos.ls import DIRSIZ, FileType, fmtname, ls, main


def test_fmtname_pads():
    assert fmtname("a/b/cat") == "cat".ljust(DIRSIZ)


def test_fmtname_long_name_unpadded():
    name = "x" * 20
    assert fmtname("dir/" + name) == name


def test_ls_file(tmp_path):
    path = tmp_path / "f"
    path.write_bytes(b"12345")
    out = io.StringIO()
    ls(str(path), out)
    fields = out.getvalue().split()
    assert fields[0] == "f"
    assert fields[1] == str(int(FileType.FILE))
    assert fields[3] == "5"


def test_ls_directory_lists_entries(tmp_path):
    (tmp_path / "x").write_text("")
    out = io.StringIO()
    ls(str(tmp_path), out)
    names = [line.split()[0] for line in out.getvalue().splitlines()]
    assert names == [".", "..", "x"]


def test_main_missing(tmp_path, capsys):
    missing = tmp_path / "nope"
    assert main([str(missing)]) == 0
    assert capsys.readouterr().err == f"ls: cannot open {missing}\n"