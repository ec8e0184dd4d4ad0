# Copyright 2025 Vijaykumar Singh <singhvjd@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for the Ollama client and the local LLM service."""

import json

import httpx
import pytest

from code_index.config import LLMSettings
from code_index.llm import LocalLLMService, OllamaClient, RankingService, get_local_llm_service

SETTINGS = LLMSettings(model="qwen2.5-coder:7b", host="ollama.test", port=11434)


def _transport(replies, requests=None):
    """MockTransport answering /api/tags and queued /api/generate replies."""
    queue = list(replies)

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        if request.url.path == "/api/tags":
            return httpx.Response(200, json={"models": [{"name": "qwen2.5-coder:7b"}]})
        if request.url.path == "/api/generate":
            return httpx.Response(200, json={"response": queue.pop(0)})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


class TestOllamaClient:
    """HTTP calls and JSON extraction."""

    async def test_health_check(self):
        client = OllamaClient(SETTINGS, transport=_transport([]))

        health = await client.health_check()

        assert health == {
            "available": True,
            "models": ["qwen2.5-coder:7b"],
            "has_model": True,
            "selected_model": "qwen2.5-coder:7b",
        }
        await client.close()

    async def test_health_check_unreachable(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = OllamaClient(SETTINGS, transport=httpx.MockTransport(refuse))

        health = await client.health_check()

        assert health["available"] is False
        assert "connection refused" in health["error"]

    async def test_generate_request(self):
        requests = []
        client = OllamaClient(SETTINGS, transport=_transport(["hello"], requests))

        assert await client.generate("Say hi", max_tokens=10) == "hello"

        body = json.loads(requests[0].content)
        assert requests[0].url == "http://ollama.test:11434/api/generate"
        assert body["model"] == "qwen2.5-coder:7b"
        assert body["stream"] is False
        assert body["options"]["num_predict"] == 10

    async def test_generate_json_extracts_embedded_value(self):
        client = OllamaClient(SETTINGS, transport=_transport(['Sure! [{"path": "a"}] Done.']))

        assert await client.generate_json("list") == [{"path": "a"}]

    async def test_generate_json_without_json(self):
        client = OllamaClient(SETTINGS, transport=_transport(["no json here"]))

        with pytest.raises(ValueError, match="No JSON"):
            await client.generate_json("list")

    async def test_rank_file_relevance_sorts_and_filters(self):
        reply = json.dumps(
            [
                {"path": "b.js", "relevance": 0.4, "reason": "maybe"},
                "garbage",
                {"path": "a.js", "relevance": 0.9, "reason": "yes"},
            ]
        )
        client = OllamaClient(SETTINGS, transport=_transport([reply]))

        ranked = await client.rank_file_relevance(["a.js", "b.js"], "task")

        assert [r["path"] for r in ranked] == ["a.js", "b.js"]

    async def test_rank_requires_array(self):
        client = OllamaClient(SETTINGS, transport=_transport(['{"path": "a.js"}']))

        with pytest.raises(ValueError):
            await client.rank_file_relevance(["a.js"], "task")


class TestLocalLLMService:
    """Availability, caching and failure handling."""

    def _service(self, replies, requests=None):
        client = OllamaClient(SETTINGS, transport=_transport(replies, requests))
        return LocalLLMService(SETTINGS, client=client)

    def test_satisfies_protocol(self):
        assert isinstance(LocalLLMService(SETTINGS), RankingService)

    async def test_initialize_runs_once(self):
        requests = []
        service = self._service([], requests)

        await service.initialize()
        await service.initialize()

        assert service.is_available() is True
        assert [r.url.path for r in requests] == ["/api/tags"]

    async def test_close_releases_http_client(self):
        service = self._service([])
        await service.initialize()
        assert service.client._client is not None

        await service.close()

        assert service.client._client is None

    async def test_not_available_before_initialize(self):
        service = self._service(["unused"])

        assert service.is_available() is False
        assert await service.generate("hi") is None

    async def test_disabled_settings(self):
        service = LocalLLMService(LLMSettings(model=None))

        result = await service.initialize()

        assert result["available"] is False
        assert "CODE_INDEX_LOCAL_LLM" in result["error"]

    async def test_results_are_cached(self):
        requests = []
        service = self._service(['[{"path": "a.js", "relevance": 0.7}]'], requests)
        await service.initialize()

        first = await service.rank_file_relevance(["a.js"], "task")
        second = await service.rank_file_relevance(["a.js"], "task")

        assert first == second == [{"path": "a.js", "relevance": 0.7}]
        assert [r.url.path for r in requests].count("/api/generate") == 1

    async def test_bad_reply_returns_none(self):
        service = self._service(["not json"])
        await service.initialize()

        assert await service.summarize_context([{"path": "a", "content": "x"}], "task") is None
        assert await service.summarize_context([], "task") == []


class TestFactory:
    """Environment-driven construction."""

    def test_disabled_by_default(self, monkeypatch):
        monkeypatch.delenv("CODE_INDEX_LOCAL_LLM", raising=False)

        assert get_local_llm_service() is None

    @pytest.mark.parametrize("value", ["", "0", "1", "true", "FALSE"])
    def test_boolean_values_do_not_enable(self, monkeypatch, value):
        monkeypatch.setenv("CODE_INDEX_LOCAL_LLM", value)

        assert LLMSettings.from_env().enabled is False

    def test_enabled_with_model(self, monkeypatch):
        monkeypatch.setenv("CODE_INDEX_LOCAL_LLM", "llama3:8b")
        monkeypatch.setenv("OLLAMA_HOST", "gpu-box")
        monkeypatch.setenv("OLLAMA_PORT", "9999")

        service = get_local_llm_service()

        assert isinstance(service, LocalLLMService)
        assert service.settings.base_url == "http://gpu-box:9999"
        assert service.settings.model == "llama3:8b"

    def test_invalid_port_uses_default(self, monkeypatch):
        monkeypatch.setenv("OLLAMA_PORT", "not-a-port")

        assert LLMSettings.from_env().port == 11434
