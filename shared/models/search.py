"""Pydantic models for search requests and responses."""

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SearchRequest(BaseModel):
    """Incoming free-text search query from the dashboard."""

    query: str
    limit: int = 15


class SearchResultItem(BaseModel):
    """A single search hit in the uniform shape consumed by the result list.

    Lexical hits leave semantic_score and semantic_text unset. Serialised with
    camelCase keys (portfolioId, matchField, semanticScore, ...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Literal["portfolio", "product"]
    id: str
    name: str
    portfolio_id: str | None = None
    portfolio_name: str | None = None
    match_field: str
    match_value: str
    semantic_score: float | None = None
    semantic_text: str | None = None


class SearchResponse(BaseModel):
    """Response payload returned to the dashboard after a search."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    query: str
    mode: Literal["semantic", "lexical"]
    results: list[SearchResultItem]
    total: int


class CredentialRequest(BaseModel):
    """Remote embedding credential supplied by the user. Empty clears it."""

    api_key: str = ""


class IndexStatus(BaseModel):
    """Current state of the vector index and the active embedding engine."""

    initialized: bool
    entries: int
    engine: str
    dimension: int
    notices: list[str] = []
    rebuilding: bool = False
