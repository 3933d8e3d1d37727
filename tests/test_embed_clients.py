import json
import math

import httpx
import pytest

from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.embed.local.EmbedClientLocal import DEFAULT_DIMENSION, EmbedClientLocal, compute_local_embedding
from shared.clients.embed.openai.EmbedClientOpenai import EmbedClientOpenai


def _norm(vector: list[float]) -> float:
    return math.sqrt(sum(value * value for value in vector))


def _openai_transport(calls: list[dict], status_code: int = 200, dimension: int = 1536) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        calls.append({"path": request.url.path, "body": body, "auth": request.headers.get("Authorization")})
        if status_code != 200:
            return httpx.Response(status_code, json={"error": {"message": "rate limited"}})
        return httpx.Response(200, json={"data": [{"embedding": [0.5] * dimension, "index": 0}], "model": body["model"]})

    return httpx.MockTransport(handler)


# ---------------------------------------------------------------------------
# local approximation
# ---------------------------------------------------------------------------


def test_local_embedding_is_deterministic_and_normalised():
    first = compute_local_embedding("Improve speed")
    second = compute_local_embedding("Improve speed")

    assert first == second
    assert len(first) == DEFAULT_DIMENSION
    assert _norm(first) == pytest.approx(1.0)


def test_local_embedding_of_empty_text_is_zero_vector():
    vector = compute_local_embedding("")

    assert vector == [0.0] * DEFAULT_DIMENSION


def test_local_embedding_slot_values():
    # a single "a" (97) lands in slot 97 with value 0.097 before normalisation
    vector = compute_local_embedding("a", dimension=8)

    assert vector[97 % 8] == pytest.approx(1.0)
    assert sum(1 for value in vector if value) == 1


def test_local_embedding_wraps_slot_values_into_unit_interval():
    # ten "e" (101) add up to 1.01 and wrap to 0.01; one "d" (100) stays at 0.1
    vector = compute_local_embedding("e" * 10 + "d")

    assert vector[100] > vector[101] > 0
    assert vector[101] / vector[100] == pytest.approx(0.1)


def test_local_client_reads_dimension_from_env(helper_config, monkeypatch):
    monkeypatch.setenv("EMBED_LOCAL_DIMENSION", "64")
    client = EmbedClientLocal(helper_config=helper_config)

    assert client.get_dimension() == 64
    assert client.get_engine_name() == "local"


@pytest.mark.asyncio
async def test_local_client_never_fails(helper_config):
    client = EmbedClientLocal(helper_config=helper_config)

    result = await client.do_embed_text("anything")

    assert result.ok
    assert len(result.vector) == DEFAULT_DIMENSION


# ---------------------------------------------------------------------------
# remote client
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_openai_client_sends_payload_and_bearer(helper_config):
    calls: list[dict] = []
    client = EmbedClientOpenai(helper_config=helper_config, api_key="sk-test")
    client.set_transport(_openai_transport(calls))
    await client.boot()

    result = await client.do_embed_text("hello")
    await client.close()

    assert result.ok
    assert len(result.vector) == 1536
    assert calls == [
        {
            "path": "/v1/embeddings",
            "body": {"input": "hello", "model": "text-embedding-3-small", "encoding_format": "float"},
            "auth": "Bearer sk-test",
        }
    ]


def test_openai_client_rejects_unknown_model(helper_config, monkeypatch):
    monkeypatch.setenv("EMBED_MODEL", "text-embedding-unknown")

    with pytest.raises(ValueError):
        EmbedClientOpenai(helper_config=helper_config, api_key="sk-test")


@pytest.mark.asyncio
async def test_openai_client_reports_dimension_mismatch(helper_config):
    calls: list[dict] = []
    client = EmbedClientOpenai(helper_config=helper_config, api_key="sk-test")
    client.set_transport(_openai_transport(calls, dimension=3))
    await client.boot()

    result = await client.do_embed_text("hello")
    await client.close()

    assert not result.ok
    assert "1536" in result.error


# ---------------------------------------------------------------------------
# manager (embedding provider)
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_manager_defaults_to_local(helper_config):
    manager = EmbedClientManager(helper_config=helper_config)
    await manager.boot()

    vector = await manager.embed("Alpha")

    assert manager.get_engine_name() == "local"
    assert manager.get_dimension() == DEFAULT_DIMENSION
    assert vector == compute_local_embedding("Alpha")


@pytest.mark.asyncio
async def test_manager_caches_remote_vectors(helper_config):
    calls: list[dict] = []
    manager = EmbedClientManager(helper_config=helper_config, transport=_openai_transport(calls))
    await manager.set_credential("sk-test")

    first = await manager.embed("Product: Alpha")
    second = await manager.embed("Product: Alpha")
    await manager.embed("Product: Beta")
    await manager.close()

    assert first == second
    assert len(calls) == 2
    assert manager.get_notices() == []


@pytest.mark.asyncio
async def test_manager_falls_back_at_remote_dimension_without_caching(helper_config):
    calls: list[dict] = []
    manager = EmbedClientManager(helper_config=helper_config, transport=_openai_transport(calls, status_code=429))
    await manager.set_credential("sk-test")

    first = await manager.embed("Product: Alpha")
    second = await manager.embed("Product: Alpha")
    await manager.close()

    assert len(first) == 1536
    assert first == compute_local_embedding("Product: Alpha", 1536)
    assert second == first
    # the failed vector was not cached, so the backend was asked again
    assert len(calls) == 2
    # one distinct notice, however often the failure repeats
    assert len(manager.get_notices()) == 1
    assert "openai" in manager.get_notices()[0]


@pytest.mark.asyncio
async def test_manager_clearing_credential_returns_to_local(helper_config):
    calls: list[dict] = []
    manager = EmbedClientManager(helper_config=helper_config, transport=_openai_transport(calls))
    await manager.set_credential("sk-test")
    assert manager.get_engine_name() == "openai"
    assert manager.get_dimension() == 1536

    await manager.set_credential("   ")
    vector = await manager.embed("Product: Alpha")

    assert manager.get_engine_name() == "local"
    assert manager.get_dimension() == DEFAULT_DIMENSION
    assert vector == compute_local_embedding("Product: Alpha")
    assert calls == []


@pytest.mark.asyncio
async def test_manager_keeps_caches_apart_per_mode(helper_config):
    calls: list[dict] = []
    manager = EmbedClientManager(helper_config=helper_config, transport=_openai_transport(calls))
    local_vector = await manager.embed("Portfolio: Core")

    await manager.set_credential("sk-test")
    remote_vector = await manager.embed("Portfolio: Core")
    await manager.close()

    assert len(local_vector) == DEFAULT_DIMENSION
    assert len(remote_vector) == 1536
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_manager_rejects_unknown_engine(helper_config, monkeypatch):
    monkeypatch.setenv("EMBED_ENGINE", "nonexistent")
    manager = EmbedClientManager(helper_config=helper_config)

    with pytest.raises(ValueError):
        await manager.set_credential("sk-test")
    assert manager.get_engine_name() == "local"


@pytest.mark.asyncio
async def test_manager_keeps_active_client_when_new_model_is_unsupported(helper_config, monkeypatch):
    calls: list[dict] = []
    manager = EmbedClientManager(helper_config=helper_config, transport=_openai_transport(calls))
    await manager.set_credential("sk-test")

    monkeypatch.setenv("EMBED_MODEL", "text-embedding-unknown")
    with pytest.raises(ValueError):
        await manager.set_credential("sk-other")

    vector = await manager.embed("Product: Alpha")

    assert manager.get_engine_name() == "openai"
    assert len(vector) == 1536
    assert len(calls) == 1
    await manager.close()
