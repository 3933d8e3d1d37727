"""Converts semantic matches and lexical hits into SearchResultItem models."""

from shared.index.models.VectorEntry import EntryCategory, VectorMatch
from shared.models.portfolio import Portfolio, Product
from shared.models.search import SearchResultItem

PREVIEW_LENGTH = 120

# display label per category; portfolio and product entries use their stored field name
CATEGORY_LABELS: dict[EntryCategory, str] = {
    EntryCategory.GOAL: "Goal",
    EntryCategory.PLAN: "Plan",
    EntryCategory.NOTE: "Note",
    EntryCategory.METRIC: "Metric",
}


def format_semantic_match(match: VectorMatch) -> SearchResultItem:
    """Convert a vector match into a result item.

    Portfolio entries become portfolio results; every other category points at
    its product. semantic_text keeps the full embedded text, truncation is left
    to the renderer (see preview_text()).

    Args:
        match (VectorMatch): The ranked vector entry.

    Returns:
        SearchResultItem: The formatted result, including the similarity score.
    """
    entry = match.entry
    metadata = entry.metadata
    match_field = CATEGORY_LABELS.get(entry.category, metadata.field or "semantic")

    if entry.category == EntryCategory.PORTFOLIO:
        result_type, result_id, name = "portfolio", metadata.portfolio_id, metadata.portfolio_name
    else:
        result_type, result_id, name = "product", metadata.product_id or "", metadata.product_name or ""

    return SearchResultItem(
        type=result_type,
        id=result_id,
        name=name,
        portfolio_id=metadata.portfolio_id,
        portfolio_name=metadata.portfolio_name,
        match_field=match_field,
        match_value=metadata.original_text,
        semantic_score=match.similarity,
        semantic_text=entry.text,
    )


def format_semantic_matches(matches: list[VectorMatch]) -> list[SearchResultItem]:
    return [format_semantic_match(match) for match in matches]


def format_portfolio_hit(portfolio: Portfolio) -> SearchResultItem:
    return SearchResultItem(
        type="portfolio",
        id=portfolio.id,
        name=portfolio.name,
        portfolio_id=portfolio.id,
        portfolio_name=portfolio.name,
        match_field="name",
        match_value=portfolio.name,
    )


def format_product_hit(portfolio: Portfolio, product: Product, match_field: str, match_value: str) -> SearchResultItem:
    return SearchResultItem(
        type="product",
        id=product.id,
        name=product.name,
        portfolio_id=portfolio.id,
        portfolio_name=portfolio.name,
        match_field=match_field,
        match_value=match_value,
    )


def preview_text(text: str | None, limit: int = PREVIEW_LENGTH) -> str:
    """Shorten a semantic text for list previews: the first limit characters plus "..." if longer."""
    if not text:
        return ""
    return text if len(text) <= limit else text[:limit] + "..."
