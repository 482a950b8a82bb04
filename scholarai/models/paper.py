"""Paper, author, chat and review data models."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Literal, Optional


class PaperStatus(str, Enum):
    """Publication lifecycle of a paper."""

    DRAFT = "Draft"
    UNDER_REVIEW = "Under Review"
    PUBLISHED = "Published"


@dataclass(frozen=True)
class Author:
    """An author; shared between papers, never owned by one."""

    id: str
    name: str
    avatar: str = ""
    affiliation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Paper:
    """Represents an authored paper with metadata and a markdown-like body."""

    id: str
    title: str
    abstract: str
    content: str
    authors: list[Author]
    status: PaperStatus = PaperStatus.DRAFT
    publish_date: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    citations: int = 0
    cover_image: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.authors:
            raise ValueError(f"Paper {self.id!r} must have at least one author")
        if self.citations < 0:
            raise ValueError(f"Paper {self.id!r} has negative citations")
        self.status = PaperStatus(self.status)
        # Tags behave as a set but keep their display order
        self.tags = list(dict.fromkeys(self.tags))

    @property
    def is_draft(self) -> bool:
        return self.status is PaperStatus.DRAFT

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-ready dict."""
        return {
            "id": self.id,
            "title": self.title,
            "abstract": self.abstract,
            "content": self.content,
            "authors": [a.to_dict() for a in self.authors],
            "status": self.status.value,
            "publish_date": self.publish_date,
            "tags": list(self.tags),
            "citations": self.citations,
            "cover_image": self.cover_image,
        }


@dataclass(frozen=True)
class ChatMessage:
    """A single turn in a reading-session transcript."""

    id: str
    role: Literal["user", "model"]
    text: str
    timestamp: int  # ms since epoch

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# Sentinel carried in ``weaknesses`` by the degraded review
REVIEW_ERROR_SUMMARY = "Error generating review."
REVIEW_ERROR_WEAKNESS = "Service unavailable or API Error"


@dataclass
class AIReviewResult:
    """Structured peer review produced by the AI gateway.

    The failure path yields a structurally valid result with ``score == 0``;
    use :attr:`degraded` rather than the score to tell the two apart.
    """

    summary: str
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)
    score: float = 0.0

    @classmethod
    def failed(cls) -> "AIReviewResult":
        """Build the degraded result returned when a review cannot be produced."""
        return cls(
            summary=REVIEW_ERROR_SUMMARY,
            strengths=[],
            weaknesses=[REVIEW_ERROR_WEAKNESS],
            score=0,
        )

    @property
    def degraded(self) -> bool:
        return REVIEW_ERROR_WEAKNESS in self.weaknesses and self.score == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "score": self.score,
        }
