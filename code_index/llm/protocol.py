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

"""Interface of the optional ranking/summarization capability."""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class RankingService(Protocol):
    """What the query engine needs from a local LLM.

    Methods return None (or an empty list) when they cannot produce a result;
    callers treat that as a signal to use keyword scoring.
    """

    async def initialize(self) -> Dict[str, Any]:
        ...

    def is_available(self) -> bool:
        ...

    async def rank_file_relevance(
        self, paths: List[str], task: str
    ) -> Optional[List[Dict[str, Any]]]:
        """Items of ``{"path", "relevance", "reason"}``, most relevant first."""
        ...

    async def summarize_context(
        self, files: List[Dict[str, str]], task: str
    ) -> Optional[List[Dict[str, Any]]]:
        """Items of ``{"path", "summary", "relevance"}`` for ``{"path", "content"}`` inputs."""
        ...

    async def generate(self, prompt: str, max_tokens: int = 256) -> Optional[str]:
        ...
