"""Index service.

Fetches the record tree from the portfolio store, rebuilds the vector index
and switches the embedding credential. Rebuilds are serialised: a rebuild
requested while another one is running waits for it to finish.
"""

import asyncio

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.portfolio.PortfolioClientInterface import PortfolioClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.index.VectorIndex import VectorIndex
from shared.models.portfolio import Portfolio
from shared.models.search import IndexStatus


class IndexService:
    """Orchestrates portfolio snapshot → embedding → vector index."""

    def __init__(
        self,
        helper_config: HelperConfig,
        portfolio_client: PortfolioClientInterface,
        embed_manager: EmbedClientManager,
        vector_index: VectorIndex,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._portfolio_client = portfolio_client
        self._embed_manager = embed_manager
        self._vector_index = vector_index
        self._portfolios: list[Portfolio] = []
        self._rebuild_lock = asyncio.Lock()

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_portfolios(self) -> list[Portfolio]:
        """
        Returns the record tree snapshot the current index was built from.
        """
        return self._portfolios

    def get_status(self) -> IndexStatus:
        return IndexStatus(
            initialized=self._vector_index.is_initialized(),
            entries=self._vector_index.size(),
            engine=self._embed_manager.get_engine_name(),
            dimension=self._embed_manager.get_dimension(),
            notices=self._embed_manager.get_notices(),
            rebuilding=self.is_rebuilding(),
        )

    def is_rebuilding(self) -> bool:
        return self._rebuild_lock.locked()

    ##########################################
    ############### CORE INDEX ###############
    ##########################################

    async def do_rebuild(self) -> IndexStatus:
        """Fetch a fresh snapshot and rebuild the vector index from it.

        Returns:
            IndexStatus: The state after the rebuild.

        Raises:
            RuntimeError: If the portfolio store cannot be read. The previous index stays in place.
        """
        async with self._rebuild_lock:
            await self._rebuild()
        return self.get_status()

    async def do_set_credential(self, api_key: str | None) -> IndexStatus:
        """Switch the embedding backend and rebuild the index with it.

        The new entries are embedded with a candidate client while queries keep
        using the current client and index. Both are swapped together once the
        build succeeds.

        Args:
            api_key (str | None): Remote credential, or empty to return to local embeddings.

        Returns:
            IndexStatus: The state after the rebuild.

        Raises:
            ValueError: If the configured remote engine or model is unsupported. Nothing changes.
            RuntimeError: If the portfolio store cannot be read. The current client and index stay in place.
        """
        async with self._rebuild_lock:
            candidate = await self._embed_manager.create_client(api_key)
            try:
                self._embed_manager.clear_notices()
                await self._rebuild(candidate)
            except Exception:
                await self._embed_manager.discard_client(candidate)
                raise
        return self.get_status()

    async def _rebuild(self, client: EmbedClientInterface | None = None) -> None:
        try:
            portfolios = await self._portfolio_client.do_fetch_portfolios()
        except Exception as exc:
            self.logging.error(
                "Fetching portfolios from '%s' failed, keeping the current index: %s",
                self._portfolio_client.get_engine_name(), exc,
            )
            raise RuntimeError(f"Fetching portfolios failed: {exc}") from exc

        client = client or self._embed_manager.get_client()
        entries = await self._vector_index.build_entries(portfolios, client=client)

        # no await between the two swaps, a query never sees a client next to entries of another dimension
        previous = self._embed_manager.swap_client(client)
        self._vector_index.replace_entries(entries)
        self._portfolios = portfolios
        if previous is not None:
            await previous.close()

        notices = self._embed_manager.get_notices()
        if notices:
            self.logging.warning(
                "Vector index rebuilt with %d embedding notice(s); semantic quality may be degraded.",
                len(notices),
            )
