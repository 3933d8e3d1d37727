"""Query service: routes each query to semantic or lexical search.

Lexical results are always computed first and serve as the fallback whenever
semantic search is unavailable, not applicable, empty or failing.
"""

from typing import Callable, Literal

from server.core.lexical_search import lexical_search
from server.core.query_classifier import QueryKind, classify
from server.core.result_formatter import format_semantic_matches
from shared.helper.HelperConfig import HelperConfig
from shared.index.VectorIndex import VectorIndex
from shared.models.portfolio import Portfolio
from shared.models.search import SearchRequest, SearchResponse, SearchResultItem

SearchMode = Literal["semantic", "lexical"]


class QueryService:
    """Decides between semantic and lexical search per query."""

    def __init__(
        self,
        helper_config: HelperConfig,
        vector_index: VectorIndex,
        portfolio_snapshot: Callable[[], list[Portfolio]] | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._vector_index = vector_index
        self._portfolio_snapshot = portfolio_snapshot or (lambda: [])
        self.semantic_top_k = int(helper_config.get_number_val("SEARCH_SEMANTIC_TOP_K", default=5))

    ##########################################
    ################ CORE ####################
    ##########################################

    async def search(self, query: str, portfolios: list[Portfolio]) -> list[SearchResultItem]:
        """Search the record tree, semantically where it makes sense.

        Args:
            query (str): The free-text query.
            portfolios (list[Portfolio]): The record tree snapshot for lexical search.

        Returns:
            list[SearchResultItem]: Semantic results if the index is built, the query
                reads as a question and the index returned matches; lexical results otherwise.
        """
        results, _ = await self.search_with_mode(query, portfolios)
        return results

    async def search_with_mode(self, query: str, portfolios: list[Portfolio]) -> tuple[list[SearchResultItem], SearchMode]:
        """Like search(), but also reports which mode produced the results."""
        lexical_results = lexical_search(portfolios, query)

        if not self._vector_index.is_initialized() or classify(query) != QueryKind.NATURAL_LANGUAGE:
            return lexical_results, "lexical"

        try:
            matches = await self._vector_index.query(query, top_k=self.semantic_top_k)
        except Exception as exc:
            self.logging.error("Semantic search failed for query %r, using lexical results: %s", query[:80], exc)
            return lexical_results, "lexical"

        if not matches:
            self.logging.debug("Semantic search returned nothing for query %r.", query[:80])
            return lexical_results, "lexical"
        return format_semantic_matches(matches), "semantic"

    async def do_query(self, request: SearchRequest) -> SearchResponse:
        """Execute a search request against the current record snapshot.

        Args:
            request (SearchRequest): The incoming query and result limit.

        Returns:
            SearchResponse: The results, the mode that produced them and their count.
        """
        self.logging.info("Executing query: query=%r limit=%d", request.query[:80], request.limit)

        results, mode = await self.search_with_mode(request.query, self._portfolio_snapshot())
        results = results[:max(request.limit, 0)]

        self.logging.info("Query complete: mode=%s results=%d", mode, len(results))
        return SearchResponse(query=request.query, mode=mode, results=results, total=len(results))
