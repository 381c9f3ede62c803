from rvos.rm import main


def test_usage(capsys):
    assert main([]) == 1
    assert capsys.readouterr().err == "Usage: rm files...\n"


def test_removes_file_and_empty_dir(tmp_path):
    f = tmp_path / "f"
    f.write_text("")
    d = tmp_path / "d"
    d.mkdir()
    assert main([str(f), str(d)]) == 0
    assert not f.exists() and not d.exists()


def test_non_empty_dir_fails_and_stops(tmp_path, capsys):
    d = tmp_path / "d"
    d.mkdir()
    (d / "x").write_text("")
    later = tmp_path / "later"
    later.write_text("")
    assert main([str(d), str(later)]) == 0
    assert later.exists()
    assert capsys.readouterr().err == f"rm: {d} failed to delete\n"