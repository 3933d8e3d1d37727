from fastapi import APIRouter, Depends, Request

from server.dependencies.auth import verify_api_key
from shared.models.search import SearchRequest, SearchResponse

router = APIRouter(prefix="/query", tags=["query"])


@router.post("")
async def query_portfolios(
    request: Request,
    body: SearchRequest,
    _: None = Depends(verify_api_key),
) -> SearchResponse:
    """Search portfolios and products, semantically for questions, lexically otherwise.

    Args:
        request (Request): FastAPI request (provides app.state.query_service).
        body (SearchRequest): JSON body with the query string and result limit.
        _ (None): Auth dependency result (unused).

    Returns:
        SearchResponse: The results and the search mode that produced them.
    """
    query_service = request.app.state.query_service
    return await query_service.do_query(body)
