"""Request-scoped access to the editor session."""

from fastapi import Request

from src.scenario_store import EditorSession


def get_session(request: Request) -> EditorSession:
    """Return the single editor session held by the application."""
    return request.app.state.editor_session


def set_session(request: Request, session: EditorSession) -> None:
    request.app.state.editor_session = session
