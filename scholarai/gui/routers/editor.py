"""Editor routes: draft, AI improve, save and cancel."""

from typing import Literal, Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from scholarai.gui.state import state

router = APIRouter(prefix="/api/editor")


class DraftUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


class ImproveRequest(BaseModel):
    mode: Literal["grammar", "clarity", "academic"]


@router.get("")
async def get_draft():
    return JSONResponse(state.controller.editor.to_dict())


@router.put("")
async def update_draft(body: DraftUpdate):
    session = state.controller.editor
    session.update_draft(title=body.title, content=body.content)
    return JSONResponse(session.to_dict())


@router.post("/improve")
async def improve(body: ImproveRequest):
    """Rewrite the draft content (413 when the draft is too long)."""
    session = state.controller.editor
    applied = await session.improve(body.mode)
    return JSONResponse({"applied": applied, **session.to_dict()})


@router.post("/save")
async def save():
    """Commit the draft and return to the library."""
    paper = state.controller.save()
    return JSONResponse({
        "view": state.controller.view.to_dict(),
        "paper": paper.to_dict(),
    })


@router.post("/cancel")
async def cancel():
    """Discard the draft and return to the library."""
    state.controller.cancel()
    return JSONResponse({"view": state.controller.view.to_dict()})
