"""Library routes: list/search papers, create and open them."""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from scholarai.gui.state import state

router = APIRouter(prefix="/api/papers")


@router.get("")
async def list_papers(q: str = Query("", description="Search title and abstract")):
    """Papers whose title or abstract contains *q* (case-insensitive)."""
    papers = state.controller.search(q)
    return JSONResponse({
        "query": q,
        "count": len(papers),
        "papers": [p.to_dict() for p in papers],
    })


@router.post("", status_code=201)
async def create_paper():
    """Create an untitled draft and open it in the editor."""
    session = state.controller.new_paper()
    return JSONResponse(status_code=201, content={
        "view": state.controller.view.to_dict(),
        "paper": session.paper.to_dict(),
    })


@router.post("/{paper_id}/open")
async def open_paper(paper_id: str):
    """Open a paper: drafts in the editor, others in the reader."""
    session = state.controller.open_paper(paper_id)
    return JSONResponse({
        "view": state.controller.view.to_dict(),
        "paper": session.paper.to_dict(),
    })
