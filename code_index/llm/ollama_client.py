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

"""Async HTTP client for a local Ollama server.

Endpoints used:
- ``GET /api/tags``: installed models (health check)
- ``POST /api/generate``: non-streaming completion
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from code_index.config import LLMSettings

logger = logging.getLogger(__name__)

_JSON_VALUE = re.compile(r"\{[\s\S]*\}|\[[\s\S]*\]")


class OllamaClient:
    """Thin wrapper over the Ollama REST API."""

    def __init__(
        self,
        settings: LLMSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            settings: Host, port, model and timeout
            transport: Optional httpx transport (e.g. ``httpx.MockTransport``)
        """
        self.settings = settings
        self.model = settings.model
        self.base_url = settings.base_url
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.settings.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def health_check(self) -> Dict[str, Any]:
        """Check that the server answers and whether the model is installed.

        Returns:
            ``{"available", "models", "has_model", "selected_model"}`` plus
            ``"error"`` when the server could not be reached
        """
        try:
            response = await self.client.get("/api/tags")
            response.raise_for_status()
            models = [m.get("name", "") for m in response.json().get("models", [])]
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"Ollama health check failed at {self.base_url}: {e}")
            return {"available": False, "models": [], "has_model": False, "error": str(e)}

        family = (self.model or "").split(":")[0]
        return {
            "available": True,
            "models": models,
            "has_model": bool(family) and any(m.startswith(family) for m in models),
            "selected_model": self.model,
        }

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 256,
        temperature: float = 0.1,
        top_p: float = 0.9,
        stop: Optional[List[str]] = None,
    ) -> str:
        """Run a single non-streaming completion.

        Raises:
            httpx.HTTPError: Request failed
        """
        response = await self.client.post(
            "/api/generate",
            json={
                "model": self.model,
                "prompt": prompt,
                "stream": False,
                "options": {
                    "temperature": temperature,
                    "num_predict": max_tokens,
                    "top_p": top_p,
                    "stop": stop or [],
                },
            },
        )
        response.raise_for_status()
        return response.json().get("response", "")

    async def generate_json(self, prompt: str, max_tokens: int = 256) -> Any:
        """Completion parsed as the first JSON object or array in the reply.

        Raises:
            ValueError: The reply holds no valid JSON
        """
        text = await self.generate(
            f"{prompt}\n\nRespond with valid JSON only, no additional text.",
            max_tokens=max_tokens,
            temperature=0.05,
        )
        match = _JSON_VALUE.search(text)
        if not match:
            raise ValueError(f"No JSON found in response: {text[:200]}")
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON response: {e}") from e

    async def rank_file_relevance(self, paths: List[str], task: str) -> List[Dict[str, Any]]:
        """Ask the model to score paths (or symbol descriptions) against a task."""
        listing = "\n".join(f"{i + 1}. {p}" for i, p in enumerate(paths[:50]))
        prompt = (
            "Rank these files by relevance to the task.\n\n"
            f"Task: {task[:500]}\n\n"
            f"Files:\n{listing}\n\n"
            "For each file, estimate relevance (0.0-1.0) based on:\n"
            "- File name and path patterns\n"
            "- Likely content based on naming conventions\n"
            "- Relationship to task keywords\n\n"
            'Return JSON array: [{"path": "file.js", "relevance": 0.8, "reason": "brief reason"}, ...]\n'
            "Order by relevance descending. Only include files with relevance > 0.3"
        )
        result = await self.generate_json(prompt, max_tokens=800)
        if not isinstance(result, list):
            raise ValueError("Expected a JSON array of rankings")
        items = [r for r in result if isinstance(r, dict) and "path" in r]
        return sorted(items, key=lambda r: float(r.get("relevance", 0) or 0), reverse=True)

    async def summarize_context(
        self, files: List[Dict[str, str]], task: str
    ) -> List[Dict[str, Any]]:
        """Summarize each ``{"path", "content"}`` entry with a relevance score."""
        blocks = "\n".join(
            f"\n--- FILE {i + 1}: {f['path']} ---\n{f['content'][:2000]}\n"
            for i, f in enumerate(files)
        )
        prompt = (
            "You are a code context summarizer. Summarize each file focusing on "
            "what's relevant to the task.\n\n"
            f"Task: {task[:500]}\n\n"
            f"Files to summarize:\n{blocks}\n"
            "For each file, provide:\n"
            "1. A concise summary (2-3 sentences)\n"
            "2. Relevance score (0.0-1.0) to the task\n\n"
            'Return JSON array: [{"path": "file.js", "summary": "...", "relevance": 0.8}, ...]'
        )
        result = await self.generate_json(prompt, max_tokens=1000)
        if not isinstance(result, list):
            raise ValueError("Expected a JSON array of summaries")
        return [r for r in result if isinstance(r, dict) and "path" in r]
