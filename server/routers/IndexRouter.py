from fastapi import APIRouter, Depends, HTTPException, Request

from server.dependencies.auth import verify_api_key
from shared.models.search import CredentialRequest, IndexStatus

router = APIRouter(prefix="/index", tags=["index"])


@router.get("/status")
async def index_status(
    request: Request,
    _: None = Depends(verify_api_key),
) -> IndexStatus:
    """Report whether the vector index is built, its size and the active embedding engine.

    Args:
        request (Request): FastAPI request (provides app.state.index_service).
        _ (None): Auth dependency result (unused).

    Returns:
        IndexStatus: The current index state.
    """
    return request.app.state.index_service.get_status()


@router.post("/rebuild")
async def index_rebuild(
    request: Request,
    _: None = Depends(verify_api_key),
) -> IndexStatus:
    """Rebuild the vector index from a fresh portfolio snapshot.

    Args:
        request (Request): FastAPI request (provides app.state.index_service).
        _ (None): Auth dependency result (unused).

    Returns:
        IndexStatus: The index state after the rebuild.

    Raises:
        HTTPException: 502 if the portfolio store cannot be read.
    """
    index_service = request.app.state.index_service
    try:
        return await index_service.do_rebuild()
    except Exception as exc:
        raise HTTPException(status_code=502, detail=f"Rebuilding the index failed: {exc}")


@router.post("/credential")
async def index_credential(
    request: Request,
    body: CredentialRequest,
    _: None = Depends(verify_api_key),
) -> IndexStatus:
    """Set (or clear, with an empty key) the remote embedding credential and rebuild the index.

    Args:
        request (Request): FastAPI request (provides app.state.index_service).
        body (CredentialRequest): JSON body with the api_key.
        _ (None): Auth dependency result (unused).

    Returns:
        IndexStatus: The index state after the rebuild.

    Raises:
        HTTPException: 400 for an unsupported embedding engine, 502 if the portfolio store cannot be read.
    """
    index_service = request.app.state.index_service
    try:
        return await index_service.do_set_credential(body.api_key)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        raise HTTPException(status_code=502, detail=f"Rebuilding the index failed: {exc}")
