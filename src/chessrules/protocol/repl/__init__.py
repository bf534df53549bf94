from .loop import ReplSession, render_board, run_repl

__all__ = ["ReplSession", "render_board", "run_repl"]
