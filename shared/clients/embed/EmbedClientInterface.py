from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.clients.embed.models.EmbedResult import EmbedResult
from shared.helper.HelperConfig import HelperConfig


class EmbedClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # model config
        self.embed_model = helper_config.get_string_val(
            f"{self.get_client_type().upper()}_MODEL", default=self._get_default_model()
        )

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "embed"

    @abstractmethod
    def _get_default_model(self) -> str:
        """
        Returns the model identifier used when EMBED_MODEL is not set.
        """
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """
        Returns the length of every vector produced by this client.

        Returns:
            int: The embedding dimension (e.g. 1536 for text-embedding-3-small).
        """
        pass

    ##########################################
    ############### EMBEDDING ################
    ##########################################

    @abstractmethod
    async def _compute_embedding(self, text: str) -> list[float]:
        """Compute the embedding vector for a single text.

        Args:
            text (str): The text to embed.

        Returns:
            list[float]: The embedding vector.

        Raises:
            Exception: Any backend failure. Converted into an error result by do_embed_text().
        """
        pass

    async def do_embed_text(self, text: str) -> EmbedResult:
        """Embed a single text and report the outcome as an EmbedResult.

        Args:
            text (str): The text to embed.

        Returns:
            EmbedResult: The vector on success, otherwise the failure reason.
        """
        engine = self.get_engine_name()
        try:
            vector = await self._compute_embedding(text)
        except Exception as exc:
            return EmbedResult(engine=engine, error=f"{type(exc).__name__}: {exc}")
        if len(vector) != self.get_dimension():
            return EmbedResult(
                engine=engine,
                error=f"Expected a vector of dimension {self.get_dimension()}, got {len(vector)}.",
            )
        return EmbedResult(engine=engine, vector=vector)
