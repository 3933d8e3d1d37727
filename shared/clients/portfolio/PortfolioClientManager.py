from shared.helper.HelperConfig import HelperConfig
from shared.clients.portfolio.PortfolioClientInterface import PortfolioClientInterface


class PortfolioClientManager:
    """
    Manager class to handle the Portfolio client based on configuration.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        """
        Reads the Portfolio engine from ENV configuration.

        Returns:
            str: The name of the Portfolio engine, capitalized (e.g. "Rest").

        Raises:
            ValueError: If no Portfolio engine is specified in the configuration.
        """
        engine = self.helper_config.get_string_val("PORTFOLIO_ENGINE")
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> PortfolioClientInterface:
        """
        Initializes the Portfolio client based on the engine specified in the configuration.

        Returns:
            PortfolioClientInterface: An instance of the Portfolio client.

        Raises:
            ValueError: If the specified engine is unsupported.
        """
        engine = self._get_engine_from_env()
        className = f"PortfolioClient{engine}"
        try:
            module = __import__(
                f"shared.clients.portfolio.{engine.lower()}.{className}",
                fromlist=[className],
            )
            client_class = getattr(module, className)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported Portfolio engine specified: '{engine}'. Error: {e}")

        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated Portfolio client for engine: %s", engine)
        return client

    def get_client(self) -> PortfolioClientInterface:
        """
        Returns the instantiated Portfolio client.

        Returns:
            PortfolioClientInterface: The Portfolio client instance.
        """
        return self.client
