import logging

import pytest

from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger
from shared.models.portfolio import Portfolio

# settings that would change client behaviour if present in the developer's shell
_ENV_KEYS = (
    "EMBED_ENGINE",
    "EMBED_MODEL",
    "EMBED_TIMEOUT",
    "EMBED_LOCAL_DIMENSION",
    "EMBED_OPENAI_BASE_URL",
    "PORTFOLIO_ENGINE",
    "PORTFOLIO_TIMEOUT",
    "PORTFOLIO_REST_BASE_URL",
    "PORTFOLIO_REST_ENDPOINT",
    "PORTFOLIO_REST_API_KEY",
    "PORTFOLIO_FILE_PATH",
    "SEARCH_SEMANTIC_TOP_K",
    "API_SERVER_API_KEY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def helper_config() -> HelperConfig:
    return HelperConfig(logger=ColorLogger(logging.getLogger("tests")))


@pytest.fixture
def raw_portfolios() -> list[dict]:
    """Record tree in the store's camelCase format."""
    return [
        {
            "id": "pf-core",
            "name": "Core",
            "products": [
                {
                    "id": "alpha",
                    "name": "Alpha",
                    "description": "Alpha product",
                    "releaseGoals": [
                        {
                            "id": "g1",
                            "month": 4,
                            "year": 2025,
                            "description": "Improve speed",
                            "currentState": "slow",
                            "targetState": "fast",
                        }
                    ],
                    "releasePlans": [
                        {
                            "id": "plan1",
                            "month": 5,
                            "year": 2025,
                            "items": [
                                {
                                    "id": "pi1",
                                    "title": "Dashboard redesign",
                                    "description": "New layout for the dashboard",
                                    "status": "planned",
                                    "owner": "Dana",
                                }
                            ],
                        }
                    ],
                    "metrics": [
                        {
                            "id": "m1",
                            "name": "Uptime",
                            "value": 99.9,
                            "unit": "%",
                            "description": "Service availability",
                        }
                    ],
                },
                {
                    "id": "beta",
                    "name": "Beta",
                    "description": None,
                    "releaseGoals": [
                        {
                            "id": "g2",
                            "month": 6,
                            "year": 2025,
                            "goals": [
                                {"id": "gi1", "description": "Grow users", "currentState": "1k", "targetState": "5k"},
                                {"id": "gi2", "description": "Cut costs", "currentState": "high", "targetState": "low"},
                            ],
                        },
                        {
                            "id": "g3",
                            "month": 7,
                            "year": 2024,
                            "goal": "Legacy launch",
                            "currentState": "draft",
                            "futureState": "live",
                        },
                    ],
                    "releasePlans": [
                        {"id": "plan2", "month": 8, "year": 2025, "title": "Flat plan", "description": "no items"}
                    ],
                },
            ],
        },
        {
            "id": "pf-growth",
            "name": "Growth",
            "products": [],
        },
    ]


@pytest.fixture
def portfolios(raw_portfolios: list[dict]) -> list[Portfolio]:
    return [Portfolio.model_validate(item) for item in raw_portfolios]
