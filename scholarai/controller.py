"""Screen navigation: which view is active and which paper it is about.

The view is a closed set of frozen dataclasses (``Library``,
``Editing(paper_id)`` and ``Reading(paper_id)``), so a paper-less editor or
reader cannot be represented.  ``Library`` is the hub: there is no direct
move between editing and reading.

::

    Library ──new_paper / open_paper(draft)──▶ Editing(id)
       ▲  ◀───────────── save / cancel ──────────┘
       │
       └──── back ◀── Reading(id) ◀── open_paper(not draft)
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from scholarai.config import AILimits
from scholarai.database.repository import PaperRepository
from scholarai.errors import InvalidTransition, PaperNotFound
from scholarai.models.paper import Author, Paper
from scholarai.services.ai_gateway import AIGateway
from scholarai.sessions import EditorSession, ReadingSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Library:
    """Paper list (hub state)."""

    def to_dict(self) -> dict[str, Any]:
        return {"name": "library", "paper_id": None}


@dataclass(frozen=True)
class Editing:
    paper_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": "editing", "paper_id": self.paper_id}


@dataclass(frozen=True)
class Reading:
    paper_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": "reading", "paper_id": self.paper_id}


View = Union[Library, Editing, Reading]


class ViewController:
    """Mediates view transitions and owns the live session for the view."""

    def __init__(
        self,
        repo: PaperRepository,
        gateway: AIGateway,
        current_user: Author,
        limits: Optional[AILimits] = None,
    ):
        """Initialize controller in the library view.

        Args:
            repo: Paper repository
            gateway: AI gateway shared by all sessions
            current_user: Acting user, first author of new papers
            limits: Size guards for editor sessions (defaults to the gateway's)
        """
        self.repo = repo
        self.gateway = gateway
        self.current_user = current_user
        self.limits = limits or gateway.limits
        self.view: View = Library()
        self.query = ""
        self._session: Optional[Union[EditorSession, ReadingSession]] = None

    # ── Accessors ─────────────────────────────────────────────────────

    @property
    def editor(self) -> EditorSession:
        """Live editor session.

        Raises:
            InvalidTransition: Not in the editing view
        """
        if not isinstance(self.view, Editing) or not isinstance(self._session, EditorSession):
            raise InvalidTransition("edit", self.view)
        return self._session

    @property
    def reader(self) -> ReadingSession:
        """Live reading session.

        Raises:
            InvalidTransition: Not in the reading view
        """
        if not isinstance(self.view, Reading) or not isinstance(self._session, ReadingSession):
            raise InvalidTransition("read", self.view)
        return self._session

    @property
    def active_paper(self) -> Optional[Paper]:
        return self._session.paper if self._session else None

    def library(self) -> list[Paper]:
        """Papers matching the current search query."""
        return self.repo.filter(self.query)

    def search(self, query: str) -> list[Paper]:
        """Set the library search query and return the matching papers."""
        self.query = query
        return self.library()

    # ── Transitions ───────────────────────────────────────────────────

    def _require(self, action: str, *allowed: type) -> None:
        if not isinstance(self.view, allowed):
            raise InvalidTransition(action, self.view)

    def _enter(self, view: View, session: Union[EditorSession, ReadingSession]) -> None:
        logger.info("%s -> %s", self.view, view)
        self.view = view
        self._session = session

    def _leave(self) -> None:
        if self._session is not None:
            self._session.close()
        logger.info("%s -> %s", self.view, Library())
        self._session = None
        self.view = Library()

    def new_paper(self) -> EditorSession:
        """Create a draft authored by the acting user and start editing it."""
        self._require("create a paper", Library)
        paper = self.repo.create([self.current_user])
        session = EditorSession(paper, self.repo, self.gateway, self.limits)
        self._enter(Editing(paper.id), session)
        return session

    def open_paper(self, paper_id: str) -> Union[EditorSession, ReadingSession]:
        """Open a paper: drafts go to the editor, everything else to the reader.

        Raises:
            PaperNotFound: Unknown *paper_id*
        """
        self._require("open a paper", Library)
        paper = self.repo.get(paper_id)
        if paper is None:
            raise PaperNotFound(paper_id)

        session: Union[EditorSession, ReadingSession]
        if paper.is_draft:
            session = EditorSession(paper, self.repo, self.gateway, self.limits)
            self._enter(Editing(paper.id), session)
        else:
            session = ReadingSession(paper, self.gateway)
            self._enter(Reading(paper.id), session)
        return session

    def save(self) -> Paper:
        """Commit the draft and return to the library."""
        paper = self.editor.save()
        self._leave()
        return paper

    def cancel(self) -> None:
        """Discard the draft and return to the library."""
        self._require("cancel editing", Editing)
        self._leave()

    def back(self) -> None:
        """Leave the reader and return to the library."""
        self._require("go back", Reading)
        self._leave()

    def home(self) -> None:
        """Return to the library from any view, discarding unsaved edits."""
        if not isinstance(self.view, Library):
            self._leave()

    def to_dict(self) -> dict[str, Any]:
        paper = self.active_paper
        return {
            "view": self.view.to_dict(),
            "query": self.query,
            "paper": paper.to_dict() if paper else None,
        }
