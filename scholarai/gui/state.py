"""Application state shared by the routers."""

import logging
from typing import Optional

from scholarai.config import Settings, load_library
from scholarai.controller import ViewController
from scholarai.database.repository import PaperRepository
from scholarai.models.paper import Author
from scholarai.services.ai_backend import AIBackend
from scholarai.services.ai_gateway import AIGateway

logger = logging.getLogger(__name__)


# ============================================================================
# Global State
# ============================================================================


class AppState:
    """Mutable singleton holding the runtime services of the single user."""

    settings: Settings
    current_user: Author
    repo: PaperRepository
    backend: Optional[AIBackend] = None
    gateway: AIGateway
    controller: ViewController

    @property
    def ready(self) -> bool:
        return self.backend is not None


state = AppState()


def init_state(
    settings: Settings,
    backend: AIBackend,
    repo: Optional[PaperRepository] = None,
) -> AppState:
    """Wire repository, gateway and controller around an injected backend.

    Args:
        settings: Loaded settings
        backend: AI backend, created once per process
        repo: Repository to use (defaults to the packaged seed library)
    """
    current_user, papers = load_library(settings.library_path)
    state.settings = settings
    state.current_user = current_user
    state.repo = repo if repo is not None else PaperRepository(papers)
    state.backend = backend
    state.gateway = AIGateway(backend, settings.limits)
    state.controller = ViewController(
        state.repo, state.gateway, current_user, settings.limits
    )
    logger.info("Application state initialised with %d papers", len(state.repo))
    return state


async def shutdown_state() -> None:
    """Close any open session and release the backend."""
    if not state.ready:
        return
    state.controller.home()
    await state.backend.aclose()
    state.backend = None
