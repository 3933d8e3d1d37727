"""In-memory vector index over the portfolio record tree.

The index is rebuilt wholesale by initialize() or replace_entries() and is
read-only in between.
query() ranks all entries by cosine similarity to the embedded query text.
"""

import math
from typing import Any

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.index.entry_builder import iter_entry_sources
from shared.index.models.VectorEntry import VectorEntry, VectorMatch
from shared.models.portfolio import Portfolio


def cosine_similarity(vec_a: list[float], vec_b: list[float]) -> float:
    """Cosine of the angle between two vectors.

    Args:
        vec_a (list[float]): First vector.
        vec_b (list[float]): Second vector, same length as vec_a.

    Returns:
        float: Similarity in [-1, 1]; exactly 0.0 if either vector has zero norm.

    Raises:
        ValueError: If the vectors differ in length.
    """
    if len(vec_a) != len(vec_b):
        raise ValueError(f"Vectors must have the same dimensions ({len(vec_a)} != {len(vec_b)}).")

    dot_product = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for a, b in zip(vec_a, vec_b):
        dot_product += a * b
        norm_a += a * a
        norm_b += b * b

    if norm_a == 0 or norm_b == 0:
        return 0.0
    similarity = dot_product / (math.sqrt(norm_a) * math.sqrt(norm_b))
    # rounding can push identical vectors slightly past 1
    return max(-1.0, min(1.0, similarity))


class VectorIndex:
    """Holds the current set of vector entries and answers similarity queries."""

    def __init__(self, helper_config: HelperConfig, embed_manager: EmbedClientManager) -> None:
        self.logging = helper_config.get_logger()
        self._embed_manager = embed_manager
        self._entries: tuple[VectorEntry, ...] = ()
        self._initialized = False

    ##########################################
    ################ GETTER ##################
    ##########################################

    def is_initialized(self) -> bool:
        return self._initialized

    def size(self) -> int:
        return len(self._entries)

    def get_entries(self) -> tuple[VectorEntry, ...]:
        return self._entries

    ##########################################
    ################ BUILD ###################
    ##########################################

    async def initialize(self, portfolios: list[Portfolio | dict[str, Any]]) -> None:
        """Rebuild the index from a record tree snapshot with the active client.

        Replaces any previous content in full. Shorthand for build_entries()
        followed by replace_entries().

        Args:
            portfolios (list[Portfolio | dict]): The record tree. Raw dicts in the
                store's camelCase format are validated into Portfolio models.
        """
        self.replace_entries(await self.build_entries(portfolios))

    async def build_entries(
        self,
        portfolios: list[Portfolio | dict[str, Any]],
        client: EmbedClientInterface | None = None,
    ) -> tuple[VectorEntry, ...]:
        """Embed the entries of a record tree snapshot without touching the index.

        A query running meanwhile still sees the current entries.

        Args:
            portfolios (list[Portfolio | dict]): The record tree. Raw dicts in the
                store's camelCase format are validated into Portfolio models.
            client (EmbedClientInterface | None): Client to embed with. Defaults to the active one.

        Returns:
            tuple[VectorEntry, ...]: The entries in record tree order.
        """
        client = client or self._embed_manager.get_client()
        snapshot = [
            portfolio if isinstance(portfolio, Portfolio) else Portfolio.model_validate(portfolio)
            for portfolio in portfolios
        ]
        self.logging.info(
            "Building vector entries for %d portfolio(s) via '%s'...",
            len(snapshot), client.get_engine_name(),
        )

        entries: list[VectorEntry] = []
        for source in iter_entry_sources(snapshot):
            embedding = await self._embed_manager.embed(source.text, client=client)
            entries.append(
                VectorEntry(
                    id=source.id,
                    category=source.category,
                    text=source.text,
                    embedding=embedding,
                    metadata=source.metadata,
                )
            )
        return tuple(entries)

    def replace_entries(self, entries: tuple[VectorEntry, ...]) -> None:
        self._entries = tuple(entries)
        self._initialized = True
        self.logging.info("Vector index initialized with %d entries.", len(self._entries))

    ##########################################
    ################ QUERY ###################
    ##########################################

    async def query(self, text: str, top_k: int = 5) -> list[VectorMatch]:
        """Rank all entries by cosine similarity to the query text.

        Args:
            text (str): The free-text query.
            top_k (int): Maximum number of matches to return.

        Returns:
            list[VectorMatch]: Up to top_k matches, highest similarity first; ties
                keep index order. Empty if the index is not built or empty.

        Raises:
            ValueError: If the query vector and the stored vectors differ in dimension.
        """
        entries = self._entries
        if not self._initialized or not entries:
            self.logging.debug("Vector index is empty, semantic query skipped.")
            return []

        try:
            query_vector = await self._embed_manager.embed(text)
        except Exception as exc:
            self.logging.error("Embedding the query failed: %s", exc)
            return []

        matches = [
            VectorMatch(entry=entry, similarity=cosine_similarity(query_vector, entry.embedding))
            for entry in entries
        ]
        # list.sort is stable, also with reverse=True
        matches.sort(key=lambda match: match.similarity, reverse=True)
        return matches[:max(top_k, 0)]
