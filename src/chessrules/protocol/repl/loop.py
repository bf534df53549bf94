from __future__ import annotations

import logging
import sys
from typing import Callable, Iterable, List, Optional

from ...engine.enums import GameResult, Piece
from ...engine.errors import ChessError, PendingPromotionChoice
from ...engine.geometry import NO_SQUARE
from ...engine.move import MoveOutcome, parse_uci, square_from_str
from ...engine.position import Position
from ..state import GameState


logger = logging.getLogger(__name__)

Writer = Callable[[str], None]

_RESULT_TEXT = {
    GameResult.WHITE_WINS: "White has won!",
    GameResult.BLACK_WINS: "Black has won!",
    GameResult.DRAW: "Game is a draw!",
}


def render_board(pos: Position) -> str:
    """Render ``pos`` as text, rank 8 first, FEN letters and '.' for empty squares."""
    rows: List[str] = []
    for rank in range(7, -1, -1):
        row = " ".join(pos.piece_at(rank * 8 + f).symbol for f in range(8))
        rows.append(f"{rank + 1}    {row}")
    rows.append("")
    rows.append("     a b c d e f g h")
    return "\n".join(rows)


class ReplSession:
    """Line-oriented text interface around a ``Position``.

    Notes:
    - Core remains pure; I/O is isolated here behind a ``Writer`` callable.
    - ``<from> <to> [q|r|b|n]`` moves, a single square lists its destinations,
      keywords cover loading, state reports, resignation and draws.
    """

    def __init__(self, position: Optional[Position] = None, *, show_board: bool = True) -> None:
        self.position: Position = position if position is not None else Position()
        self.show_board = show_board

    # ---- Command handlers ----
    def cmd_move(self, tokens: List[str], write: Writer) -> None:
        from_sq = square_from_str(tokens[0])
        to_sq = square_from_str(tokens[1])
        if from_sq == NO_SQUARE or to_sq == NO_SQUARE:
            write("Error: invalid square")
            return
        try:
            if len(tokens) >= 3:
                mover = self.position.piece_at(from_sq).color
                if mover is None:
                    mover = self.position.side_to_move
                try:
                    choice = Piece.of(mover, tokens[2].lower())
                except ValueError:
                    write(f"Error: invalid promotion piece: {tokens[2]!r}")
                    return
                outcome = self.position.promote(from_sq, to_sq, choice)
            else:
                outcome = self.position.move(from_sq, to_sq)
        except PendingPromotionChoice as e:
            logger.debug("promotion choice required", extra={"code": e.code})
            write(f"Error: {e}; add q, r, b or n")
            return
        except ChessError as e:
            logger.debug("move rejected", extra={"code": e.code})
            write(f"Error: {e}")
            return
        self._report(outcome, write)

    def cmd_list(self, token: str, write: Writer) -> None:
        sq = square_from_str(token)
        if sq == NO_SQUARE:
            write(f"Error: unknown command or square: {token!r}")
            return
        for name in self.position.legal_destination_names(sq):
            write(name)

    def cmd_load(self, fen_tokens: List[str], write: Writer) -> None:
        if self._load(fen_tokens, write):
            self.cmd_board(write)

    def cmd_position(self, args: List[str], write: Writer) -> None:
        """Set up ``startpos`` or ``fen <FEN>``, then replay any ``moves`` in UCI text."""
        if "moves" in args:
            cut = args.index("moves")
            setup, moves = args[:cut], args[cut + 1 :]
        else:
            setup, moves = args, []
        if setup[:1] == ["startpos"]:
            self.position.reset()
        elif setup[:1] == ["fen"]:
            if not self._load(setup[1:], write):
                return
        elif setup:
            write(f"Error: expected 'startpos' or 'fen', got {setup[0]!r}")
            return
        for uci in moves:
            try:
                self.position.apply_move(parse_uci(uci))
            except ValueError as e:
                write(f"Error: {uci}: {e}")
                return

    def cmd_board(self, write: Writer) -> None:
        if self.show_board:
            write(render_board(self.position))
        self._write_status(write)

    def cmd_state(self, write: Writer) -> None:
        write(GameState.from_position(self.position).model_dump_json())

    def cmd_resign(self, write: Writer) -> None:
        try:
            self.position.resign(self.position.side_to_move)
        except ChessError as e:
            write(f"Error: {e}")
            return
        self._write_status(write)

    def cmd_draw(self, write: Writer) -> None:
        try:
            self.position.agree_draw()
        except ChessError as e:
            write(f"Error: {e}")
            return
        self._write_status(write)

    # ---- Dispatch ----
    def handle_line(self, line: str, write: Writer) -> bool:
        """Execute one input line; return False when the session should end."""
        parts = line.split()
        if not parts:
            return True
        cmd, args = parts[0].lower(), parts[1:]

        if cmd in ("quit", "exit"):
            return False
        if cmd == "new":
            self.position.reset()
            self.cmd_board(write)
        elif cmd == "board":
            self.cmd_board(write)
        elif cmd in ("fen", "load"):
            if args:
                self.cmd_load(args, write)
            else:
                write(self.position.to_fen())
        elif cmd == "position":
            self.cmd_position(args, write)
        elif cmd == "state":
            self.cmd_state(write)
        elif cmd == "resign":
            self.cmd_resign(write)
        elif cmd == "draw":
            self.cmd_draw(write)
        elif len(parts) >= 2:
            self.cmd_move(parts, write)
        else:
            self.cmd_list(parts[0], write)
        return True

    def run(self, lines: Iterable[str], write: Writer) -> None:
        self.cmd_board(write)
        for raw in lines:
            if not self.handle_line(raw.strip(), write):
                break

    # ---- Utilities ----
    def _load(self, fen_tokens: List[str], write: Writer) -> bool:
        try:
            self.position.load(" ".join(fen_tokens))
        except ChessError as e:
            logger.debug("load rejected", extra={"code": e.code})
            write(f"Error: {e}")
            return False
        return True

    def _report(self, outcome: MoveOutcome, write: Writer) -> None:
        if self.show_board:
            write(render_board(self.position))
        if outcome.result is GameResult.ONGOING and outcome.check:
            write(f"{self.position.side_to_move} is in check")
        self._write_status(write)

    def _write_status(self, write: Writer) -> None:
        pos = self.position
        text = _RESULT_TEXT.get(pos.game_result)
        if text is None:
            return
        reason = pos.termination.value.replace("_", " ") if pos.termination else ""
        write(f"{text} ({reason})" if reason else text)


def _default_writer(line: str) -> None:
    # Ensure newline termination and immediate flush
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def run_repl(position: Optional[Position] = None, *, show_board: bool = True) -> None:
    ReplSession(position, show_board=show_board).run(sys.stdin, _default_writer)
