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

"""Multi-language code index.

Builds a symbol and reference index of a source tree (tree-sitter when
available, regular expressions otherwise), caches it as JSON, and answers
queries about it. An optional local LLM re-ranks and summarizes results.

Package Structure:
    models.py                    - Symbol, Reference and IndexData
    config.py                    - IndexConfig (.code-index.yaml) and LLMSettings
    capability.py                - LazyCapability handles for optional backends
    languages/                   - Language adapters and their registry
    codebase/index_builder.py    - Full and incremental scans
    codebase/query_engine.py     - Lookups, summaries and LLM-optional ranking
    codebase/code_index.py       - CodeIndex: build, cache and query
    llm/                         - Ollama client and ranking service
    cli.py                       - code-index command

Usage:
    from code_index import create_index

    index = await create_index().build("/path/to/project")
    for symbol in index.find_relevant_symbols("auth token"):
        print(symbol.id, symbol.kind)
"""

from code_index.capability import LazyCapability
from code_index.codebase.code_index import CodeIndex, create_index
from code_index.codebase.index_builder import IndexBuilder
from code_index.codebase.query_engine import QueryEngine
from code_index.config import IndexConfig, LLMSettings
from code_index.errors import CacheCorruptedError, CodeIndexError, IndexNotBuiltError
from code_index.models import IndexData, IndexStats, Reference, Symbol

__version__ = "0.1.0"

__all__ = [
    "CodeIndex",
    "create_index",
    "IndexBuilder",
    "QueryEngine",
    "IndexConfig",
    "LLMSettings",
    "LazyCapability",
    "CodeIndexError",
    "IndexNotBuiltError",
    "CacheCorruptedError",
    "IndexData",
    "IndexStats",
    "Reference",
    "Symbol",
]
