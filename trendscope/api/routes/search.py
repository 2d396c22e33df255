from __future__ import annotations

from fastapi import APIRouter

from trendscope.api.deps import error_response
from trendscope.models.schemas import SearchRequest
from trendscope.services import search as search_service

router = APIRouter(prefix="/api", tags=["search"])


@router.post("/semantic-search")
async def semantic_search(request: SearchRequest):
    if not request.query.strip():
        return error_response("Missing query or content array", 400)
    result = await search_service.semantic_search(request.query, request.content)
    return {"success": True, "data": result.model_dump()}
