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

"""Shared fixtures for the code index tests."""

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

from code_index.capability import LazyCapability
from code_index.codebase.index_builder import IndexBuilder
from code_index.models import IndexData, Reference, Symbol


class FakeRankingService:
    """In-memory RankingService with scripted answers."""

    def __init__(
        self,
        rankings: Optional[List[Dict[str, Any]]] = None,
        summaries: Optional[List[Dict[str, Any]]] = None,
        generated: Optional[str] = None,
        available: bool = True,
        fail: bool = False,
    ):
        self.rankings = rankings
        self.summaries = summaries
        self.generated = generated
        self.available = available
        self.fail = fail
        self.initialize_calls = 0
        self.prompts: List[str] = []
        self.ranked_paths: List[List[str]] = []

    async def initialize(self) -> Dict[str, Any]:
        self.initialize_calls += 1
        return {"available": self.available}

    def is_available(self) -> bool:
        return self.available

    async def rank_file_relevance(self, paths, task):
        if self.fail:
            raise RuntimeError("model crashed")
        self.ranked_paths.append(list(paths))
        return self.rankings

    async def summarize_context(self, files, task):
        if self.fail:
            raise RuntimeError("model crashed")
        return self.summaries

    async def generate(self, prompt, max_tokens=256):
        if self.fail:
            raise RuntimeError("model crashed")
        self.prompts.append(prompt)
        return self.generated


@pytest.fixture
def no_parser() -> LazyCapability:
    """Parser handle that forces regex extraction."""
    return LazyCapability.unavailable(name="Structural parser")


@pytest.fixture
def no_llm() -> LazyCapability:
    return LazyCapability.unavailable(name="Local LLM")


@pytest.fixture
def builder(no_parser) -> IndexBuilder:
    return IndexBuilder(parser=no_parser)


@pytest.fixture
def write_tree(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Write ``{relative_path: content}`` under tmp_path and return the root."""

    def _write(files: Dict[str, str]) -> Path:
        for rel_path, content in files.items():
            path = tmp_path / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _write


def make_symbol(file: str, name: str, kind: str, line: int = 1, exported: bool = False, **extra):
    return Symbol(
        id=Symbol.make_id(file, name),
        name=name,
        kind=kind,
        file=file,
        start_line=line,
        end_line=line + 2,
        exported=exported,
        **extra,
    )


@pytest.fixture
def fixture_index() -> IndexData:
    """Five symbols across four files with imports and calls between them."""
    symbols = [
        make_symbol("src/index.js", "main", "function", line=3, exported=True),
        make_symbol("src/index.js", "bootstrap", "function", line=10),
        make_symbol("src/utils.js", "formatDate", "function", line=1, exported=True),
        make_symbol("src/models/User.js", "User", "class", line=1, exported=True),
        make_symbol("src/components/Button.js", "Button", "component", line=5),
    ]
    references = [
        Reference(type="require", file="src/index.js", line=1, module="./utils"),
        Reference(type="importDeclaration", file="src/index.js", line=2, module="./models/User"),
        Reference(type="importDeclaration", file="src/index.js", line=2, module="react"),
        Reference(type="functionCall", file="src/index.js", line=4, func="formatDate"),
        Reference(type="functionCall", file="src/components/Button.js", line=8, func="formatDate"),
        Reference(type="importDeclaration", file="src/components/Button.js", line=1, module="../utils"),
    ]
    return IndexData(
        symbols=symbols,
        references=references,
        file_hashes={s.file: "0" * 64 for s in symbols},
    )
