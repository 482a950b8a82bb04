"""Exception hierarchy.

AI gateway errors never leave the gateway except :class:`ContentTooLarge`,
which the editor raises before any request is made.  Navigation errors are
raised by the view controller for transitions the state machine forbids.
"""


class AIGatewayError(Exception):
    """Base class for AI request failures."""


class RequestFailure(AIGatewayError):
    """Network, backend or timeout error while calling the AI backend."""


class MalformedResponse(AIGatewayError):
    """Backend reply was empty or failed schema validation."""


class ContentTooLarge(AIGatewayError):
    """Input exceeds a caller-side size guard; no request was attempted."""

    def __init__(self, length: int, limit: int):
        self.length = length
        self.limit = limit
        super().__init__(
            f"Content too long for full auto-improve ({length} > {limit} characters). "
            "Please shorten the text or select a section."
        )


class NavigationError(Exception):
    """Base class for view-controller errors."""


class InvalidTransition(NavigationError):
    """The requested action is not allowed from the current view."""

    def __init__(self, action: str, view: object):
        self.action = action
        self.view = view
        super().__init__(f"Cannot {action} from {view!r}")


class PaperNotFound(NavigationError, KeyError):
    """No paper with the given id exists in the repository."""

    def __init__(self, paper_id: str):
        self.paper_id = paper_id
        super().__init__(paper_id)

    def __str__(self) -> str:
        return f"Paper not found: {self.paper_id}"
