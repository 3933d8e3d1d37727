from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

# output dimension per model, fixed by the backend
MODEL_DIMENSIONS: dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class EmbedClientOpenai(EmbedClientInterface):
    def __init__(self, helper_config: HelperConfig, api_key: str):
        super().__init__(helper_config=helper_config)
        self._base_url = self._config["BASE_URL"]
        # supplied at runtime by the user, never read from the environment
        self._api_key = api_key
        if self.embed_model not in MODEL_DIMENSIONS:
            raise ValueError(
                f"Unsupported OpenAI embedding model '{self.embed_model}'. "
                f"Supported models: {', '.join(MODEL_DIMENSIONS)}"
            )

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Openai"

    def _get_default_model(self) -> str:
        return "text-embedding-3-small"

    def get_dimension(self) -> int:
        return MODEL_DIMENSIONS[self.embed_model]

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://api.openai.com"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"Authorization": f"Bearer {self._api_key}"}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/v1/models"

    def get_endpoint_embedding(self) -> str:
        return "/v1/embeddings"

    ################ PAYLOAD BUILDER ##################
    def get_embed_payload(self, text: str) -> dict:
        """Build the OpenAI embedding request body.

        Args:
            text (str): The text to embed.

        Returns:
            dict: {"input": "...", "model": "...", "encoding_format": "float"}
        """
        return {"input": text, "model": self.embed_model, "encoding_format": "float"}

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_embedding_from_response(self, response_data: dict) -> list[float]:
        """Extract the embedding vector from an OpenAI /v1/embeddings response.

        Args:
            response_data (dict): The parsed JSON body, {"data": [{"embedding": [...], "index": 0}], ...}.

        Returns:
            list[float]: The embedding vector of the first (only) input.

        Raises:
            ValueError: If the response does not contain a valid embedding.
        """
        data = response_data.get("data")
        if not data or not data[0].get("embedding"):
            raise ValueError(
                "OpenAI response does not contain a valid embedding. "
                f"Response keys: {list(response_data.keys())}"
            )
        return [float(value) for value in data[0]["embedding"]]

    ##########################################
    ############### EMBEDDING ################
    ##########################################

    async def _compute_embedding(self, text: str) -> list[float]:
        # error statuses raise ClientRequestError, do_embed_text() turns it into an error result
        response = await self.do_request(
            method="POST",
            endpoint=self.get_endpoint_embedding(),
            json=self.get_embed_payload(text),
            raise_on_error=True,
        )
        return self.extract_embedding_from_response(response.json())
