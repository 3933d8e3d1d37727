"""Substring search over the record tree. Used as the guaranteed fallback of every search."""

from typing import Iterator

from server.core.result_formatter import format_portfolio_hit, format_product_hit
from shared.index.entry_builder import resolve_goal_items
from shared.models.portfolio import Portfolio, Product
from shared.models.search import SearchResultItem

MAX_LEXICAL_RESULTS = 15


def _contains(value: str | None, query_lower: str) -> bool:
    return bool(value) and query_lower in value.lower()


def _iter_product_hits(portfolio: Portfolio, product: Product, query_lower: str) -> Iterator[SearchResultItem]:
    if _contains(product.name, query_lower):
        yield format_product_hit(portfolio, product, "name", product.name)

    if _contains(product.description, query_lower):
        yield format_product_hit(portfolio, product, "description", product.description)

    for release_goal in product.release_goals:
        for goal in resolve_goal_items(release_goal):
            if any(_contains(value, query_lower) for value in (goal.description, goal.current_state, goal.target_state)):
                yield format_product_hit(portfolio, product, goal.field, goal.description)

    for plan in product.release_plans:
        for item in plan.items:
            if _contains(item.title, query_lower) or _contains(item.description, query_lower):
                yield format_product_hit(portfolio, product, "plan", item.title)

    for metric in product.metrics:
        if _contains(metric.name, query_lower) or _contains(metric.description, query_lower):
            yield format_product_hit(portfolio, product, "metric", metric.name)


def lexical_search(portfolios: list[Portfolio], query: str, limit: int = MAX_LEXICAL_RESULTS) -> list[SearchResultItem]:
    """Case-insensitive containment search over names, descriptions, goals, plans and metrics.

    Hits are deduplicated by (id, type, match_field), keeping the first one in
    record order, and capped at limit.

    Args:
        portfolios (list[Portfolio]): The record tree snapshot.
        query (str): The raw query. Empty or whitespace-only queries return no hits.
        limit (int): Maximum number of results.

    Returns:
        list[SearchResultItem]: The lexical hits.
    """
    if not query.strip():
        return []

    query_lower = query.lower()
    results: list[SearchResultItem] = []
    seen: set[tuple[str, str, str]] = set()

    def _hits() -> Iterator[SearchResultItem]:
        for portfolio in portfolios:
            if _contains(portfolio.name, query_lower):
                yield format_portfolio_hit(portfolio)
            for product in portfolio.products:
                yield from _iter_product_hits(portfolio, product, query_lower)

    for hit in _hits():
        key = (hit.id, hit.type, hit.match_field)
        if key in seen:
            continue
        seen.add(key)
        results.append(hit)
        if len(results) >= limit:
            break
    return results
