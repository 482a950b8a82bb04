"""ScholarAI - academic paper authoring and review with an AI assistant.

A library of papers, an editor with AI rewriting, and a reader that can
chat about, summarize and peer-review a paper through Google Gemini.
"""

__version__ = "1.0.0"

from scholarai.config import Settings
from scholarai.models.paper import AIReviewResult, Author, ChatMessage, Paper, PaperStatus

__all__ = [
    "AIReviewResult",
    "Author",
    "ChatMessage",
    "Paper",
    "PaperStatus",
    "Settings",
    "__version__",
]
