import math

import httpx

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

DEFAULT_DIMENSION = 384


def compute_local_embedding(text: str, dimension: int = DEFAULT_DIMENSION) -> list[float]:
    """Deterministic character-code approximation of an embedding.

    Every character adds ord(char) / 1000 to the slot ord(char) % dimension,
    wrapped into [0, 1) after each step. The result is L2-normalised; a text
    without characters yields the all-zero vector.

    Args:
        text (str): The text to embed.
        dimension (int): Length of the resulting vector.

    Returns:
        list[float]: The normalised vector.
    """
    vector = [0.0] * dimension
    for char in text:
        code = ord(char)
        position = code % dimension
        vector[position] = (vector[position] + code / 1000) % 1

    norm = math.sqrt(sum(value * value for value in vector))
    if norm == 0:
        return vector
    return [value / norm for value in vector]


class EmbedClientLocal(EmbedClientInterface):
    """Embedding client without any backend. Always available, never fails."""

    def __init__(self, helper_config: HelperConfig, dimension: int | None = None):
        super().__init__(helper_config=helper_config)
        self._dimension = int(dimension or self._config["DIMENSION"])

    ##########################################
    ################ GETTER ##################
    ##########################################

    def _get_engine_name(self) -> str:
        return "Local"

    def _get_default_model(self) -> str:
        return "local-approximation"

    def get_dimension(self) -> int:
        return self._dimension

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="DIMENSION", val_type="number", default=DEFAULT_DIMENSION),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return ""

    def _get_endpoint_healthcheck(self) -> str:
        return ""

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self) -> None:
        # nothing to connect to
        return None

    async def do_healthcheck(self) -> httpx.Response:
        return httpx.Response(status_code=200)

    ##########################################
    ############### EMBEDDING ################
    ##########################################

    async def _compute_embedding(self, text: str) -> list[float]:
        return compute_local_embedding(text, self._dimension)
