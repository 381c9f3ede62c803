from rvos.mkdir import main


def test_usage(capsys):
    assert main([]) == 1
    assert capsys.readouterr().err == "Usage: mkdir files...\n"


def test_creates_directories(tmp_path):
    a, b = tmp_path / "a", tmp_path / "b"
    assert main([str(a), str(b)]) == 0
    assert a.is_dir() and b.is_dir()


def test_stops_at_first_failure(tmp_path, capsys):
    existing = tmp_path / "a"
    existing.mkdir()
    later = tmp_path / "b"
    assert main([str(existing), str(later)]) == 0
    assert not later.exists()
    assert capsys.readouterr().err == f"mkdir: {existing} failed to create\n"