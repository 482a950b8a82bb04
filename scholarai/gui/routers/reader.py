"""Reader routes: chat, review, summary and back."""

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from scholarai.gui.state import state
from scholarai.utils.text import is_blank

router = APIRouter(prefix="/api/reader")


class ChatRequest(BaseModel):
    text: str


@router.get("")
async def get_reader():
    return JSONResponse(state.controller.reader.to_dict())


@router.get("/messages")
async def get_messages():
    session = state.controller.reader
    return JSONResponse({
        "messages": [m.to_dict() for m in session.messages],
        "typing": session.typing,
    })


@router.post("/messages")
async def send_message(body: ChatRequest):
    """Send a chat message; the reply is appended to the transcript.

    422 for blank input; 409 when the reader was left or reset before the
    reply arrived and the reply was discarded.
    """
    if is_blank(body.text):
        raise HTTPException(status_code=422, detail="Message must not be blank")
    session = state.controller.reader
    reply = await session.send_message(body.text)
    if reply is None:
        return JSONResponse(status_code=409, content={
            "detail": "Reader session ended before the reply arrived",
            "discarded": True,
            "view": state.controller.view.to_dict(),
        })
    return JSONResponse({
        "reply": reply.to_dict(),
        "messages": [m.to_dict() for m in session.messages],
    })


@router.post("/review")
async def review():
    """Generate (or return the cached) AI peer review."""
    session = state.controller.reader
    result = await session.generate_review()
    return JSONResponse({
        "review": result.to_dict(),
        "degraded": result.degraded,
        "cached": session.review is result,
    })


@router.post("/summary")
async def summary():
    session = state.controller.reader
    text = await session.summarize()
    return JSONResponse({"summary": text})


@router.post("/back")
async def back():
    """Leave the reader; chat and review are discarded."""
    state.controller.back()
    return JSONResponse({"view": state.controller.view.to_dict()})
