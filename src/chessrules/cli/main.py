from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError

from ..engine.errors import MalformedPosition
from ..engine.fen import STARTPOS_FEN
from ..engine.position import Position
from ..protocol.repl.loop import run_repl


class ReplSettings(BaseModel):
    fen: str = Field(default=STARTPOS_FEN, description="Starting position (FEN)")
    show_board: bool = True
    log_level: str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chessrules",
        description="Interactive chess rules engine: '<from> <to> [q|r|b|n]' to move, "
        "a single square to list its legal destinations",
    )
    parser.add_argument("--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)")
    parser.add_argument(
        "--no-board", action="store_true", help="Do not print the board after each move"
    )
    parser.add_argument(
        "--log-level", type=str, default="WARNING", help="Logging level (default: WARNING)"
    )
    return parser


def parse_settings(argv: Optional[List[str]] = None) -> ReplSettings:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return ReplSettings(
            fen=args.fen, show_board=not args.no_board, log_level=args.log_level.upper()
        )
    except ValidationError as e:
        parser.error(str(e))
        raise  # unreachable: parser.error exits


def main(argv: Optional[List[str]] = None) -> None:
    settings = parse_settings(argv)
    logging.basicConfig(level=getattr(logging, settings.log_level))
    try:
        position = Position.from_fen(settings.fen)
    except MalformedPosition as e:
        build_parser().error(f"invalid --fen: {e}")
        return
    run_repl(position, show_board=settings.show_board)


if __name__ == "__main__":
    main()
