from typing import Any

from shared.clients.portfolio.PortfolioClientInterface import PortfolioClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class PortfolioClientRest(PortfolioClientInterface):
    """Reads the record tree as JSON from the dashboard's data endpoint."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self._config["BASE_URL"]
        self._endpoint = self._config["ENDPOINT"]
        self._api_key = self._config["API_KEY"]

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Rest"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="ENDPOINT", val_type="string", default="/portfolios"),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
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
        return self._endpoint

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def _fetch_raw_portfolios(self) -> Any:
        response = await self.do_request(method="GET", endpoint=self._endpoint, raise_on_error=True)
        return response.json()
