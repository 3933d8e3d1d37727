import json
from pathlib import Path
from typing import Any

import httpx

from shared.clients.portfolio.PortfolioClientInterface import PortfolioClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class PortfolioClientFile(PortfolioClientInterface):
    """Reads the record tree from a JSON export of the dashboard store."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._path = Path(self._config["PATH"])

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "File"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="PATH", val_type="string", default=None),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._path.as_uri() if self._path.is_absolute() else str(self._path)

    def _get_endpoint_healthcheck(self) -> str:
        return ""

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self) -> None:
        # no HTTP connection needed
        return None

    async def do_healthcheck(self) -> httpx.Response:
        return httpx.Response(status_code=200 if self._path.is_file() else 404)

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def _fetch_raw_portfolios(self) -> Any:
        with self._path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
