"""Index runner entry point.

Builds the vector index from the configured portfolio store and answers one
query on the command line.

Usage:
    python -m services.portfolio_index.index_runner "What are the goals for Alpha?"
    python -m services.portfolio_index.index_runner --api-key sk-... "show me the metrics"
"""

import argparse
import asyncio

from server.core.QueryService import QueryService
from server.core.result_formatter import preview_text
from services.portfolio_index.IndexService import IndexService
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.portfolio.PortfolioClientManager import PortfolioClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.index.VectorIndex import VectorIndex
from shared.logging.logging_setup import setup_logging
from shared.models.search import SearchRequest, SearchResponse


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build the portfolio vector index and run one search.")
    parser.add_argument("query", help="Free-text query or question.")
    parser.add_argument("--api-key", default="", help="Remote embedding credential (local approximation if omitted).")
    parser.add_argument("--limit", type=int, default=15, help="Maximum number of results.")
    return parser


def render_response(response: SearchResponse) -> str:
    """Render a search response as plain text lines."""
    lines = [f"{response.total} result(s) for {response.query!r} ({response.mode}):"]
    for item in response.results:
        location = f"{item.portfolio_name} > " if item.type == "product" and item.portfolio_name else "Portfolio > "
        line = f"- {item.name} [{item.type}] {location}{item.match_field}: {item.match_value}"
        if item.semantic_score is not None:
            line += f" (score {item.semantic_score:.3f})"
        lines.append(line)
        if item.semantic_text:
            lines.append(f"    {preview_text(item.semantic_text)}")
    return "\n".join(lines)


async def main(argv: list[str] | None = None) -> int:
    """Run the index build and the query. Returns the process exit code."""
    args = _build_parser().parse_args(argv)
    logger = setup_logging()
    config = HelperConfig(logger=logger)

    portfolio_client = PortfolioClientManager(helper_config=config).get_client()
    embed_manager = EmbedClientManager(helper_config=config)
    vector_index = VectorIndex(helper_config=config, embed_manager=embed_manager)
    index_service = IndexService(
        helper_config=config,
        portfolio_client=portfolio_client,
        embed_manager=embed_manager,
        vector_index=vector_index,
    )
    query_service = QueryService(
        helper_config=config,
        vector_index=vector_index,
        portfolio_snapshot=index_service.get_portfolios,
    )

    try:
        await portfolio_client.boot()
        await embed_manager.boot()
        try:
            if args.api_key:
                await index_service.do_set_credential(args.api_key)
            else:
                await index_service.do_rebuild()
        except Exception as e:
            logger.error("Building the vector index failed: %s. Aborting.", e)
            return 1

        response = await query_service.do_query(SearchRequest(query=args.query, limit=args.limit))
        print(render_response(response))
        return 0
    finally:
        await embed_manager.close()
        await portfolio_client.close()


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
