"""Console presentation for capdesk."""

from .session_table import SessionTableView, build_session_table, render_phase

__all__ = [
    "SessionTableView",
    "build_session_table",
    "render_phase",
]
