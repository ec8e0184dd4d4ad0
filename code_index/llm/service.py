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

"""Local LLM service used for optional ranking and summarization.

The service is opt-in: set ``CODE_INDEX_LOCAL_LLM`` to a model name such as
``qwen2.5-coder:7b``. Every method returns None on failure so callers can
fall back to keyword scoring.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from code_index.config import LLMSettings
from code_index.llm.ollama_client import OllamaClient

logger = logging.getLogger(__name__)


class LocalLLMService:
    """Ollama-backed implementation of RankingService."""

    def __init__(
        self,
        settings: Optional[LLMSettings] = None,
        client: Optional[OllamaClient] = None,
    ):
        self.settings = settings or LLMSettings.from_env()
        self.client = client
        self.available = False
        self.initialized = False
        self.init_error: Optional[str] = None
        self._cache: Dict[str, Any] = {}

    async def initialize(self) -> Dict[str, Any]:
        """Run the health check once and remember the outcome."""
        if self.initialized:
            return {"available": self.available, "error": self.init_error}

        self.initialized = True
        if not self.settings.enabled:
            self.init_error = (
                "Local LLM not enabled (set CODE_INDEX_LOCAL_LLM=<model_name>, "
                "e.g. qwen2.5-coder:7b)"
            )
            logger.debug(self.init_error)
            return {"available": False, "error": self.init_error}

        if self.client is None:
            self.client = OllamaClient(self.settings)

        health = await self.client.health_check()
        self.available = bool(health.get("available"))
        if not self.available:
            self.init_error = health.get("error") or "Ollama not available"
            logger.warning(f"Local LLM unavailable, using keyword fallbacks: {self.init_error}")
        else:
            logger.info(
                f"Local LLM ready: {self.client.model} (installed: {health.get('has_model')})"
            )
        return {"available": self.available, "model": self.client.model, "error": self.init_error}

    def is_available(self) -> bool:
        return self.initialized and self.available

    async def generate(self, prompt: str, max_tokens: int = 256) -> Optional[str]:
        if not self.is_available():
            return None
        cache_key = f"generate:{max_tokens}:{prompt}"
        if cache_key in self._cache:
            return self._cache[cache_key]
        try:
            result = await self.client.generate(prompt, max_tokens=max_tokens)
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"Local LLM generate failed: {e}")
            return None
        self._cache[cache_key] = result
        return result

    async def rank_file_relevance(
        self, paths: List[str], task: str
    ) -> Optional[List[Dict[str, Any]]]:
        if not paths:
            return []
        if not self.is_available():
            return None
        cache_key = f"rankFiles:{task}:{'|'.join(paths)}"
        if cache_key in self._cache:
            return self._cache[cache_key]
        try:
            result = await self.client.rank_file_relevance(paths, task)
        except (httpx.HTTPError, ValueError, TypeError) as e:
            logger.debug(f"Local LLM ranking failed: {e}")
            return None
        self._cache[cache_key] = result
        return result

    async def summarize_context(
        self, files: List[Dict[str, str]], task: str
    ) -> Optional[List[Dict[str, Any]]]:
        if not files:
            return []
        if not self.is_available():
            return None
        cache_key = f"summarizeCtx:{task}:{'|'.join(f['path'] for f in files)}"
        if cache_key in self._cache:
            return self._cache[cache_key]
        try:
            result = await self.client.summarize_context(files, task)
        except (httpx.HTTPError, ValueError, TypeError) as e:
            logger.debug(f"Local LLM summarization failed: {e}")
            return None
        self._cache[cache_key] = result
        return result

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()


def get_local_llm_service(settings: Optional[LLMSettings] = None) -> Optional[LocalLLMService]:
    """Factory for the query engine's LLM handle.

    Returns None when no model is configured, so the capability is reported
    as missing without touching the network.
    """
    settings = settings or LLMSettings.from_env()
    if not settings.enabled:
        return None
    return LocalLLMService(settings)
