from __future__ import annotations

import io

import pytest

from chessrules.cli.main import main, parse_settings
from chessrules.engine.fen import STARTPOS_FEN


def test_default_settings() -> None:
    settings = parse_settings([])
    assert settings.fen == STARTPOS_FEN
    assert settings.show_board
    assert settings.log_level == "WARNING"


def test_settings_from_flags() -> None:
    settings = parse_settings(["--no-board", "--log-level", "debug", "--fen", "4k3/8/8/8/8/8/8/4K3 w - - 0 1"])
    assert not settings.show_board
    assert settings.log_level == "DEBUG"
    assert settings.fen.startswith("4k3")


def test_invalid_log_level_exits() -> None:
    with pytest.raises(SystemExit):
        parse_settings(["--log-level", "loud"])


def test_invalid_fen_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    with pytest.raises(SystemExit):
        main(["--fen", "not a fen"])


def test_main_runs_repl_over_stdin(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("e2\ne2 e4\nfen\nquit\n"))
    main(["--no-board"])
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "e3",
        "e4",
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1",
    ]


def test_fen_with_non_ascii_digit_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    with pytest.raises(SystemExit):
        main(["--fen", "4k3/8/8/8/8/8/8/4K2² w - - 0 1"])
