"""Transient per-screen sessions."""

from scholarai.sessions.editor_session import EditorSession
from scholarai.sessions.reading_session import ReadingSession

__all__ = ["EditorSession", "ReadingSession"]
