import httpx

from shared.helper.HelperConfig import HelperConfig
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.embed.local.EmbedClientLocal import EmbedClientLocal, compute_local_embedding
from shared.clients.embed.models.EmbedResult import EmbedResult


class EmbedClientManager:
    """
    Embedding provider used by the vector index.

    Always holds the local approximation client. A remote client is created
    when the user supplies a credential via set_credential() and replaces the
    local client as the active one until the credential is cleared.

    embed() is the single place where failures are handled: a failed remote
    call degrades to the local approximation for that call only.
    """

    def __init__(self, helper_config: HelperConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self._transport = transport
        self.local_client = EmbedClientLocal(helper_config=helper_config)
        self.remote_client: EmbedClientInterface | None = None

        # one exact-text cache per engine/model, vectors of different modes never mix
        self._cache: dict[str, dict[str, list[float]]] = {}
        self._notices: list[str] = []

    ##########################################
    ################ GETTER ##################
    ##########################################

    def _get_engine_from_env(self) -> str:
        """
        Reads the remote Embed engine from ENV configuration.

        Returns:
            str: The name of the Embed engine, capitalized (e.g. "Openai").
        """
        engine = self.helper_config.get_string_val("EMBED_ENGINE", default="openai")
        return engine.strip().lower().capitalize()

    def get_client(self) -> EmbedClientInterface:
        """
        Returns the active Embed client: the remote one if a credential is set, else the local one.

        Returns:
            EmbedClientInterface: The active Embed client instance.
        """
        return self.remote_client or self.local_client

    def get_dimension(self) -> int:
        return self.get_client().get_dimension()

    def get_engine_name(self) -> str:
        return self.get_client().get_engine_name()

    def get_notices(self) -> list[str]:
        """
        Returns the distinct non-blocking failure notices collected since the last clear_notices().
        """
        return list(self._notices)

    def clear_notices(self) -> None:
        self._notices = []

    def _get_cache(self, client: EmbedClientInterface) -> dict[str, list[float]]:
        cache_key = f"{client.get_engine_name()}:{client.embed_model}:{client.get_dimension()}"
        return self._cache.setdefault(cache_key, {})

    ##########################################
    ############### CLIENTS ##################
    ##########################################

    def _initialize_remote_client(self, api_key: str) -> EmbedClientInterface:
        """
        Instantiates the remote Embed client for the engine specified in the configuration.

        Args:
            api_key (str): The credential supplied by the user.

        Returns:
            EmbedClientInterface: The (not yet booted) remote client.

        Raises:
            ValueError: If the configured engine is unsupported.
        """
        engine = self._get_engine_from_env()
        className = f"EmbedClient{engine}"
        try:
            module = __import__(
                f"shared.clients.embed.{engine.lower()}.{className}",
                fromlist=[className],
            )
            client_class = getattr(module, className)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported Embed engine specified: '{engine}'. Error: {e}")

        client = client_class(helper_config=self.helper_config, api_key=api_key)
        client.set_transport(self._transport)
        self.logging.debug("Instantiated Embed client for engine: %s", engine)
        return client

    async def create_client(self, api_key: str | None) -> EmbedClientInterface:
        """Prepare the client a credential selects, without making it active.

        An empty key selects the local approximation. A non-empty key creates
        and boots a remote client. The active client stays untouched, so the
        caller can embed with the candidate and swap it in via swap_client()
        only once everything built with it is ready.

        Args:
            api_key (str | None): The remote credential, or empty for local embeddings.

        Returns:
            EmbedClientInterface: The booted candidate client.

        Raises:
            ValueError: If the configured remote engine or model is unsupported.
        """
        api_key = (api_key or "").strip()
        if not api_key:
            return self.local_client

        client = self._initialize_remote_client(api_key)
        await client.boot()
        return client

    def swap_client(self, client: EmbedClientInterface) -> EmbedClientInterface | None:
        """Make client the active one.

        Synchronous, so a caller can swap the client and the vectors built with
        it without a query running in between.

        Returns:
            EmbedClientInterface | None: The replaced remote client the caller must close, if any.
        """
        previous = self.remote_client
        self.remote_client = None if client is self.local_client else client
        if self.remote_client is None and previous is not None:
            self.logging.info("Using local embedding approximation (dimension %d).", self.local_client.get_dimension())
        elif self.remote_client is not None and previous is not client:
            self.logging.info(
                "Remote embeddings enabled via '%s' (model %s, dimension %d).",
                client.get_engine_name(), client.embed_model, client.get_dimension(),
            )
        return previous if previous is not client else None

    async def discard_client(self, client: EmbedClientInterface) -> None:
        """Close a candidate from create_client() that never became active."""
        if client is not self.local_client and client is not self.remote_client:
            await client.close()

    async def set_credential(self, api_key: str | None) -> None:
        """Switch between remote and local embeddings right away.

        Vectors cached in the previous mode are kept but never returned for the
        new mode. Callers holding vectors of the previous mode should use
        create_client() and swap_client() instead.

        Args:
            api_key (str | None): The remote credential, or empty to clear it.

        Raises:
            ValueError: If the configured remote engine or model is unsupported. The active client is kept.
        """
        client = await self.create_client(api_key)
        previous = self.swap_client(client)
        if previous is not None:
            await previous.close()

    async def boot(self) -> None:
        await self.local_client.boot()

    async def close(self) -> None:
        if self.remote_client is not None:
            await self.remote_client.close()
            self.remote_client = None
        await self.local_client.close()

    ##########################################
    ############### EMBEDDING ################
    ##########################################

    async def embed(self, text: str, client: EmbedClientInterface | None = None) -> list[float]:
        """Return the embedding vector for a text.

        Checks the exact-text cache of the client first. On a miss the client
        is asked; successful vectors are cached. A failed call falls back to
        the local approximation at the client's dimension and is not cached,
        so the next call retries the backend.

        Args:
            text (str): The text to embed.
            client (EmbedClientInterface | None): A candidate from create_client(). Defaults to the active client.

        Returns:
            list[float]: A vector of the client's dimension.
        """
        client = client or self.get_client()
        cache = self._get_cache(client)
        cached = cache.get(text)
        if cached is not None:
            return cached

        result = await client.do_embed_text(text)
        if result.ok:
            cache[text] = result.vector
            return result.vector
        return self._fallback(text, result, client.get_dimension())

    def _fallback(self, text: str, result: EmbedResult, dimension: int) -> list[float]:
        notice = f"Embedding via '{result.engine}' failed, using local approximation: {result.error}"
        if notice not in self._notices:
            self._notices.append(notice)
            self.logging.warning(notice)
        else:
            self.logging.debug(notice)
        return compute_local_embedding(text, dimension)
