"""FastAPI application entry point for the portfolio search API."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.portfolio.PortfolioClientInterface import PortfolioClientInterface
from shared.clients.portfolio.PortfolioClientManager import PortfolioClientManager
from shared.index.VectorIndex import VectorIndex
from services.portfolio_index.IndexService import IndexService
from server.core.QueryService import QueryService
from server.routers.IndexRouter import router as index_router
from server.routers.QueryRouter import router as query_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = HelperConfig(logger=logging)

    portfolio_client = PortfolioClientManager(helper_config=app.state.helper_config).get_client()
    embed_manager = EmbedClientManager(helper_config=app.state.helper_config)
    vector_index = VectorIndex(helper_config=app.state.helper_config, embed_manager=embed_manager)

    logging.info("Booting all clients...")
    await portfolio_client.boot()
    await embed_manager.boot()
    logging.info("All clients booted successfully.")

    app.state.index_service = IndexService(
        helper_config=app.state.helper_config,
        portfolio_client=portfolio_client,
        embed_manager=embed_manager,
        vector_index=vector_index,
    )
    app.state.query_service = QueryService(
        helper_config=app.state.helper_config,
        vector_index=vector_index,
        portfolio_snapshot=app.state.index_service.get_portfolios,
    )

    await check_connections(portfolio_client)
    await build_initial_index(app.state.index_service)

    # while the app is running...
    yield

    # when the app shuts down, close all client connections
    logging.info("Shutting down, closing all clients...")
    await embed_manager.close()
    await portfolio_client.close()
    logging.info("All clients closed.")


app = FastAPI(
    title="portfolio_search",
    description=(
        "Search core of the product-portfolio dashboard. Portfolio and product fields "
        "are indexed into an in-memory vector index and served via POST /query, with "
        "lexical search as the fallback. The index is rebuilt via POST /index/rebuild."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(query_router)
app.include_router(index_router)


async def check_connections(portfolio_client: PortfolioClientInterface) -> None:
    """Check connectivity to the portfolio store on startup.

    Failures are non-fatal: the server stays up and serves lexical search over
    an empty snapshot until a rebuild succeeds.
    """
    try:
        result = await portfolio_client.do_healthcheck()
    except Exception as exc:
        logging.warning("Portfolio store '%s' is not reachable: %s", portfolio_client.get_engine_name(), exc)
        return
    if not result.is_success:
        logging.warning(
            "Portfolio store '%s' is not reachable (status %d). Index rebuilds may fail.",
            portfolio_client.get_engine_name(),
            result.status_code,
        )


async def build_initial_index(index_service: IndexService) -> None:
    """Build the vector index once at startup. A failure leaves the index empty."""
    try:
        status = await index_service.do_rebuild()
    except Exception as exc:
        logging.error("Initial index build failed, semantic search disabled until rebuild: %s", exc)
        return
    logging.info("Portfolio search API ready with %d index entries.", status.entries, color="green")


if __name__ == "__main__":
    import uvicorn

    logging.info("Starting portfolio_search API Server v%s on port 8000...", app_version)
    uvicorn.run(app, host="0.0.0.0", port=8000)
