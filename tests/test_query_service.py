import pytest

from server.core.QueryService import QueryService
from server.core.lexical_search import MAX_LEXICAL_RESULTS, lexical_search
from server.core.query_classifier import QueryKind, classify
from server.core.result_formatter import format_semantic_match, preview_text
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.index.VectorIndex import VectorIndex
from shared.index.models.VectorEntry import EntryCategory, VectorEntry, VectorMatch, VectorMetadata
from shared.models.portfolio import Portfolio
from shared.models.search import SearchRequest


class FailingIndex:
    def is_initialized(self) -> bool:
        return True

    async def query(self, text: str, top_k: int = 5):
        raise RuntimeError("embedding backend exploded")


class EmptyIndex:
    def is_initialized(self) -> bool:
        return True

    async def query(self, text: str, top_k: int = 5):
        return []


@pytest.fixture
def vector_index(helper_config) -> VectorIndex:
    return VectorIndex(helper_config=helper_config, embed_manager=EmbedClientManager(helper_config=helper_config))


# ---------------------------------------------------------------------------
# classifier
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "query",
    [
        "What are the goals for Alpha?",
        "what's planned next month",
        "  How fast is Alpha  ",
        "Alpha uptime?",
        "please show me the metrics",
        "find products with low uptime",
        "I am looking for the roadmap",
    ],
)
def test_classify_natural_language(query):
    assert classify(query) == QueryKind.NATURAL_LANGUAGE


@pytest.mark.parametrize("query", ["alpha", "whatever", "is", "uptime metrics", "", "   "])
def test_classify_keyword(query):
    assert classify(query) == QueryKind.KEYWORD


# ---------------------------------------------------------------------------
# lexical search
# ---------------------------------------------------------------------------


def test_lexical_search_matches_names_and_descriptions(portfolios):
    results = lexical_search(portfolios, "ALPHA")

    assert [(item.type, item.id, item.match_field) for item in results] == [
        ("product", "alpha", "name"),
        ("product", "alpha", "description"),
    ]
    assert results[0].portfolio_name == "Core"
    assert results[0].semantic_score is None


def test_lexical_search_covers_all_goal_shapes(portfolios):
    results = lexical_search(portfolios, "low")

    assert [(item.id, item.match_field, item.match_value) for item in results] == [
        ("alpha", "goal", "Improve speed"),
        ("beta", "goals", "Cut costs"),
    ]
    legacy = lexical_search(portfolios, "live")
    assert [(item.id, item.match_field, item.match_value) for item in legacy] == [("beta", "goal", "Legacy launch")]


def test_lexical_search_deduplicates_per_field():
    portfolio = Portfolio.model_validate(
        {
            "id": "p",
            "name": "P",
            "products": [
                {
                    "id": "x",
                    "name": "X",
                    "releaseGoals": [
                        {"id": "g", "goals": [{"description": "speed up search"}, {"description": "speed up index"}]}
                    ],
                }
            ],
        }
    )

    results = lexical_search([portfolio], "speed")

    assert len(results) == 1
    assert results[0].match_value == "speed up search"


def test_lexical_search_caps_results():
    portfolio = Portfolio.model_validate(
        {"id": "p", "name": "P", "products": [{"id": f"x{index}", "name": f"Item {index}"} for index in range(20)]}
    )

    results = lexical_search([portfolio], "item")

    assert len(results) == MAX_LEXICAL_RESULTS
    assert results[-1].id == "x14"


def test_lexical_search_ignores_blank_query(portfolios):
    assert lexical_search(portfolios, "") == []
    assert lexical_search(portfolios, "   ") == []


def test_lexical_search_covers_plans_and_metrics(portfolios):
    assert [item.match_field for item in lexical_search(portfolios, "dashboard")] == ["plan"]
    assert [item.match_value for item in lexical_search(portfolios, "availability")] == ["Uptime"]


# ---------------------------------------------------------------------------
# result formatting
# ---------------------------------------------------------------------------


def _match(category: EntryCategory, field: str, product_id: str | None = "alpha") -> VectorMatch:
    return VectorMatch(
        entry=VectorEntry(
            id="e1",
            category=category,
            text="Goal for Alpha (4/2025): Improve speed. Current state: slow. Target state: fast",
            embedding=[1.0],
            metadata=VectorMetadata(
                portfolio_id="core",
                portfolio_name="Core",
                product_id=product_id,
                product_name="Alpha" if product_id else None,
                field=field,
                original_text="Improve speed",
            ),
        ),
        similarity=0.42,
    )


def test_format_semantic_goal_match():
    item = format_semantic_match(_match(EntryCategory.GOAL, "goals"))

    assert item.type == "product"
    assert item.id == "alpha"
    assert item.name == "Alpha"
    assert item.match_field == "Goal"
    assert item.match_value == "Improve speed"
    assert item.semantic_score == 0.42
    assert item.semantic_text.startswith("Goal for Alpha")


def test_format_semantic_portfolio_and_product_matches():
    portfolio_item = format_semantic_match(_match(EntryCategory.PORTFOLIO, "name", product_id=None))
    product_item = format_semantic_match(_match(EntryCategory.PRODUCT, "description"))

    assert (portfolio_item.type, portfolio_item.id, portfolio_item.name) == ("portfolio", "core", "Core")
    assert portfolio_item.match_field == "name"
    assert product_item.match_field == "description"


def test_result_items_serialise_with_camel_case_keys():
    data = format_semantic_match(_match(EntryCategory.METRIC, "metric")).model_dump(by_alias=True)

    assert data["matchField"] == "Metric"
    assert data["semanticScore"] == 0.42
    assert data["portfolioId"] == "core"


def test_preview_text():
    assert preview_text("x" * 130) == "x" * 120 + "..."
    assert preview_text("x" * 120) == "x" * 120
    assert preview_text(None) == ""


# ---------------------------------------------------------------------------
# query routing
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_keyword_query_uses_lexical_search(helper_config, vector_index, portfolios):
    await vector_index.initialize(portfolios)
    service = QueryService(helper_config=helper_config, vector_index=vector_index)

    results, mode = await service.search_with_mode("alpha", portfolios)

    assert mode == "lexical"
    assert results == lexical_search(portfolios, "alpha")


@pytest.mark.asyncio
async def test_question_without_index_uses_lexical_search(helper_config, vector_index, portfolios):
    service = QueryService(helper_config=helper_config, vector_index=vector_index)

    results, mode = await service.search_with_mode("show me Alpha", portfolios)

    assert mode == "lexical"
    assert results == lexical_search(portfolios, "show me Alpha")


@pytest.mark.asyncio
async def test_question_with_index_uses_semantic_search(helper_config, vector_index, portfolios, monkeypatch):
    monkeypatch.setenv("SEARCH_SEMANTIC_TOP_K", "3")
    await vector_index.initialize(portfolios)
    service = QueryService(helper_config=helper_config, vector_index=vector_index)

    results = await service.search("What are the goals for Alpha?", portfolios)

    assert len(results) == 3
    assert all(item.semantic_score is not None for item in results)
    scores = [item.semantic_score for item in results]
    assert scores == sorted(scores, reverse=True)


@pytest.mark.asyncio
async def test_failing_index_falls_back_to_lexical(helper_config, portfolios):
    service = QueryService(helper_config=helper_config, vector_index=FailingIndex())

    results, mode = await service.search_with_mode("What about Alpha?", portfolios)

    assert mode == "lexical"
    assert results == lexical_search(portfolios, "What about Alpha?")


@pytest.mark.asyncio
async def test_empty_semantic_result_falls_back_to_lexical(helper_config, portfolios):
    service = QueryService(helper_config=helper_config, vector_index=EmptyIndex())

    results, mode = await service.search_with_mode("show me alpha", portfolios)

    assert mode == "lexical"
    assert results == []


@pytest.mark.asyncio
async def test_do_query_applies_limit(helper_config, vector_index, portfolios):
    service = QueryService(helper_config=helper_config, vector_index=vector_index, portfolio_snapshot=lambda: portfolios)

    response = await service.do_query(SearchRequest(query="alpha", limit=1))

    assert response.mode == "lexical"
    assert response.total == 1
    assert response.results[0].match_field == "name"


@pytest.mark.asyncio
async def test_do_query_without_snapshot_returns_empty_response(helper_config, vector_index):
    service = QueryService(helper_config=helper_config, vector_index=vector_index)

    response = await service.do_query(SearchRequest(query=""))

    assert response.results == []
    assert response.total == 0
