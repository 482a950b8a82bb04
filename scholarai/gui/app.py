"""FastAPI JSON app exposing the library, editor and reader."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from scholarai import __version__
from scholarai.config import Settings
from scholarai.errors import ContentTooLarge, InvalidTransition, PaperNotFound
from scholarai.gui.routers import common, editor, library, reader
from scholarai.gui.state import init_state, shutdown_state, state
from scholarai.services.ai_backend import build_backend


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize services on startup (unless already wired) and tear down on exit."""
    if not state.ready:
        settings = Settings.load()
        init_state(settings, build_backend(settings.api_key, settings.model))
    yield
    await shutdown_state()


app = FastAPI(title="ScholarAI", version=__version__, lifespan=lifespan)

app.include_router(common.router)
app.include_router(library.router)
app.include_router(editor.router)
app.include_router(reader.router)


# ============================================================================
# Error mapping
# ============================================================================


@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "view": state.controller.view.to_dict()},
    )


@app.exception_handler(PaperNotFound)
async def paper_not_found_handler(request: Request, exc: PaperNotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ContentTooLarge)
async def content_too_large_handler(request: Request, exc: ContentTooLarge):
    return JSONResponse(
        status_code=413,
        content={"detail": str(exc), "length": exc.length, "limit": exc.limit},
    )
