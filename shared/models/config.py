from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    Describes one environment setting a client needs before it can boot.

    The full variable name is built by the client as <TYPE>_<ENGINE>_<ENV_KEY>,
    e.g. "EMBED_OPENAI_BASE_URL" or "PORTFOLIO_REST_BASE_URL".

    Attributes:
        env_key (str): The client-relative key of the environment variable.
        val_type (str): The expected value type: "string", "number" or "bool".
        default (str | int | float | bool | None): Value used when the variable is not set. None marks the setting as required.
    """

    env_key: str
    val_type: str
    default: str | int | float | bool | None = None
