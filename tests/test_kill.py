from rvos.kill import main


def test_usage(capsys):
    assert main([]) == 1
    assert capsys.readouterr().err == "usage: kill pid...\n"


def test_non_numeric_pid_is_ignored():
    assert main(["abc"]) == 0