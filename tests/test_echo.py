from rvos.echo import echo, main


def test_echo_joins():
    assert echo(["hello", "world"]) == "hello world\n"


def test_echo_nothing():
    assert echo([]) == ""


def test_main(capsys):
    assert main(["a", "b"]) == 0
    assert capsys.readouterr().out == "a b\n"