"""Common routes: current view, navigation home, app info."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from scholarai import __version__
from scholarai.gui.state import state

router = APIRouter(prefix="/api")


@router.get("/view")
async def get_view():
    """Current view, search query and active paper."""
    return JSONResponse(state.controller.to_dict())


@router.post("/home")
async def go_home():
    """Return to the library from any view (unsaved edits are discarded)."""
    state.controller.home()
    return JSONResponse(state.controller.to_dict())


@router.get("/info")
async def get_info():
    """Version, acting user and configured model."""
    return JSONResponse({
        "version": __version__,
        "user": state.current_user.to_dict(),
        "model": state.settings.model,
    })
