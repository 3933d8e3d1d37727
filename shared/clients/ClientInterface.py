"""Base class for every backend the search core talks to (embedding APIs, portfolio stores).

Each client is identified by a type ("embed", "portfolio") and an engine
("openai", "rest", ...). Its settings live in environment variables named
<TYPE>_<ENGINE>_<KEY>, e.g. EMBED_OPENAI_BASE_URL or PORTFOLIO_REST_ENDPOINT.
"""

from abc import ABC, abstractmethod
from typing import Any

import httpx
from httpx._types import QueryParamTypes

from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class ClientRequestError(Exception):
    """A backend answered with a non-success status."""

    def __init__(self, url: str, status_code: int, body: str = ""):
        super().__init__(f"Request to {url} failed with status {status_code}")
        self.url = url
        self.status_code = status_code
        self.body = body


class ClientInterface(ABC):
    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=30.0)

        self._client: httpx.AsyncClient | None = None
        self._transport: httpx.AsyncBaseTransport | None = None
        # resolved once, keyed by raw key ("BASE_URL", ...)
        self._config: dict[str, Any] = self._load_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def _load_configuration(self) -> dict[str, Any]:
        """
        Resolves every declared setting of the engine so that a misconfigured
        client fails at construction, not at its first request.

        Returns:
            dict[str, Any]: Resolved values keyed by their raw key.

        Raises:
            ValueError: If a setting without default is missing or cannot be parsed.
        """
        return {
            config.env_key: self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)
            for config in self._get_required_config()
        }

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_client_type(self) -> str:
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        """
        Returns the backend family, used as first part of the env prefix. E.g. "embed"
        """
        pass

    def get_engine_name(self) -> str:
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        """
        Returns the concrete backend, used as second part of the env prefix. E.g. "Openai"
        """
        pass

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """
        Declares the engine specific settings. Entries with default=None are mandatory.
        """
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        """E.g. raw_key "endpoint" on the rest portfolio client -> "PORTFOLIO_REST_ENDPOINT"."""
        return f"{self.get_client_type().upper()}_{self.get_engine_name().upper()}_{raw_key.upper()}"

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """
        Reads one engine specific setting from the environment.

        Args:
            raw_key (str): Key without the <TYPE>_<ENGINE>_ prefix.
            default (Any): Value used when the variable is unset. None makes it mandatory.
            val_type (str): "string", "number" or "bool".

        Raises:
            ValueError: If the setting is mandatory and unset, or val_type is unknown.
        """
        key = self._get_config_key_name(raw_key)
        readers = {
            "string": self._helper_config.get_string_val,
            "number": self._helper_config.get_number_val,
            "bool": self._helper_config.get_bool_val,
        }
        if val_type not in readers:
            raise ValueError(f"Unsupported value type '{val_type}' for setting '{key}'.")
        return readers[val_type](key, default=default)

    ################ AUTH ##################
    @abstractmethod
    def _get_auth_header(self) -> dict:
        """
        Returns the headers that authenticate against the backend, or {} if none are needed.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_base_url(self) -> str:
        """
        Returns the backend root without trailing path, e.g. "https://api.openai.com".
        """
        pass

    @abstractmethod
    def _get_endpoint_healthcheck(self) -> str:
        """
        Returns a cheap GET path that tells whether the backend is reachable.
        """
        pass

    def _build_url(self, endpoint: str) -> str:
        path = endpoint.strip().lstrip("/")
        base = self._get_base_url().rstrip("/")
        return f"{base}/{path}" if path else base

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    def set_transport(self, transport: httpx.AsyncBaseTransport | None) -> None:
        """Replaces the network transport used from the next boot() on (httpx.MockTransport in tests)."""
        self._transport = transport

    async def boot(self) -> None:
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_healthcheck(self) -> httpx.Response:
        return await self.do_request(method="GET", endpoint=self._get_endpoint_healthcheck())

    async def do_request(
        self,
        method: str = "GET",
        json: dict | None = None,
        params: QueryParamTypes | None = None,
        endpoint: str = "",
        additional_headers: dict | None = None,
        raise_on_error: bool = False,
    ) -> httpx.Response:
        """Sends one request to the backend with the engine's auth headers.

        Args:
            method: HTTP verb.
            json: Request body, serialised as JSON.
            params: Query string parameters.
            endpoint: Path below the base URL.
            additional_headers: Headers merged over the auth headers.
            raise_on_error: Raise ClientRequestError for statuses >= 300 instead of returning them.

        Returns:
            The httpx.Response.

        Raises:
            RuntimeError: If boot() has not been called.
            ClientRequestError: On an error status when raise_on_error is set.
            httpx.HTTPError: On connection or timeout failures.
        """
        if self._client is None:
            raise RuntimeError(f"{self.get_client_type()} client '{self.get_engine_name()}' is not booted.")

        url = self._build_url(endpoint)
        headers = {**self._get_auth_header(), **(additional_headers or {})}
        response = await self._client.request(method, url, headers=headers, params=params, json=json)

        if raise_on_error and response.status_code >= 300:
            self.logging.error("%s %s returned %d: %s", method, url, response.status_code, response.text[:200])
            raise ClientRequestError(url, response.status_code, response.text[:200])
        return response
