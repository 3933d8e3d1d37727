from abc import abstractmethod
from typing import Any

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.portfolio import Portfolio


class PortfolioClientInterface(ClientInterface):
    """Read-only access to the dashboard's portfolio store.

    The search core only ever reads full snapshots of the record tree through
    do_fetch_portfolios(); it never writes back.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "portfolio"

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    async def _fetch_raw_portfolios(self) -> Any:
        """
        Fetches the raw record tree from the store.

        Returns:
            Any: Either a list of portfolio dicts or a dict with a "portfolios" list.

        Raises:
            Exception: If the store cannot be read.
            NotImplementedError: If the method is not implemented in a subclass.
        """
        pass

    def extract_portfolios(self, raw: Any) -> list[Portfolio]:
        """Validate the raw store content into Portfolio models.

        Args:
            raw (Any): A list of portfolio dicts, or a dict holding them under "portfolios".

        Returns:
            list[Portfolio]: The validated record tree.

        Raises:
            ValueError: If the content has neither shape.
        """
        if isinstance(raw, dict):
            raw = raw.get("portfolios")
        if not isinstance(raw, list):
            raise ValueError(
                f"Portfolio store '{self.get_engine_name()}' returned no portfolio list "
                f"(got {type(raw).__name__})."
            )
        return [Portfolio.model_validate(item) for item in raw]

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_fetch_portfolios(self) -> list[Portfolio]:
        """Fetch a full snapshot of the record tree.

        Returns:
            list[Portfolio]: All portfolios with their products.

        Raises:
            Exception: If the store cannot be read or returns invalid content.
        """
        portfolios = self.extract_portfolios(await self._fetch_raw_portfolios())
        self.logging.info(
            "Fetched %d portfolio(s) with %d product(s) from '%s'.",
            len(portfolios),
            sum(len(portfolio.products) for portfolio in portfolios),
            self.get_engine_name(),
        )
        return portfolios
