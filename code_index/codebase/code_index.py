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

"""Persistent code index: build (or refresh) an index and query it.

The index is cached as JSON under ``<root>/.code-index/cache/code-index.json``.
``build()`` refreshes a cached index incrementally when possible and falls
back to a full scan when the cache cannot be used.

Instead of sending whole files to an LLM, callers query for the relevant
symbols and send only their code:

    index = await create_index().build("/path/to/project")
    symbols = index.find_relevant_symbols("user authentication")
    context = index.get_symbol_context(symbols[0].id)
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from pydantic import ValidationError

from code_index.capability import LazyCapability
from code_index.codebase.index_builder import IndexBuilder
from code_index.codebase.query_engine import QueryEngine
from code_index.config import IndexConfig
from code_index.errors import CacheCorruptedError, IndexNotBuiltError
from code_index.languages.registry import LanguageRegistry
from code_index.llm.protocol import RankingService
from code_index.models import IndexData, Reference, Symbol

if TYPE_CHECKING:
    from code_index.codebase.tree_sitter_manager import StructuralParser

logger = logging.getLogger(__name__)


class CodeIndex:
    """Builds, caches and queries a code index for one project root."""

    def __init__(
        self,
        root: Optional[Union[str, Path]] = None,
        config: Optional[IndexConfig] = None,
        registry: Optional[LanguageRegistry] = None,
        parser: Optional[LazyCapability["StructuralParser"]] = None,
        llm: Optional[LazyCapability[RankingService]] = None,
        **options: Any,
    ):
        """Initialize the index.

        Args:
            root: Project root; used to read ``.code-index.yaml``
            config: Explicit configuration (skips the config file)
            registry: Language adapters for the builder
            parser: Structural parser handle for the builder
            llm: Local LLM handle for the query engine
            **options: ``IndexConfig`` field overrides
        """
        self.config = config or IndexConfig.load(root, **options)
        self.builder = IndexBuilder(config=self.config, registry=registry, parser=parser)
        if llm is None:
            from code_index.llm.service import get_local_llm_service

            llm = LazyCapability(get_local_llm_service, name="Local LLM")
        self.llm = llm
        self.query: Optional[QueryEngine] = None
        self.index_data: Optional[IndexData] = None
        self.root: Optional[Path] = Path(root) if root is not None else None

    @property
    def is_built(self) -> bool:
        return self.query is not None

    def _require_query(self) -> QueryEngine:
        if self.query is None:
            raise IndexNotBuiltError()
        return self.query

    def _set_index(self, index_data: IndexData) -> None:
        self.index_data = index_data
        self.query = QueryEngine(
            index_data, llm=self.llm, llm_init_timeout=self.config.llm_init_timeout
        )

    # ------------------------------------------------------------------
    # Build and cache
    # ------------------------------------------------------------------

    async def build(
        self,
        root: Union[str, Path],
        force_rebuild: bool = False,
        incremental: bool = True,
    ) -> "CodeIndex":
        """Build the index, reusing the cache when possible.

        Args:
            root: Project root to index
            force_rebuild: Ignore any cache and run a full scan
            incremental: Refresh an existing cache instead of rescanning

        Returns:
            This instance, for chaining
        """
        self.root = Path(root)
        cache_path = self.get_cache_path(root)

        if not force_rebuild and incremental and cache_path.exists():
            try:
                cached = json.loads(cache_path.read_text(encoding="utf-8"))
                self._set_index(await self.builder.incremental_scan(root, cached))
                self.save_cache(root)
                return self
            except (OSError, ValueError, CacheCorruptedError) as e:
                logger.warning(f"Code index cache invalid, rebuilding... ({e})")

        self._set_index(await self.builder.scan(root))
        self.save_cache(root)
        return self

    def get_cache_path(self, root: Union[str, Path]) -> Path:
        return Path(root) / self.config.cache_dir / self.config.cache_file

    def save_cache(self, root: Union[str, Path]) -> None:
        """Write the current index as JSON, creating the cache directory."""
        if self.index_data is None:
            raise IndexNotBuiltError()
        cache_path = self.get_cache_path(root)
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        cache_path.write_text(self.index_data.model_dump_json(indent=2), encoding="utf-8")
        logger.debug(f"Saved code index cache to {cache_path}")

    def load_from_cache(self, root: Union[str, Path]) -> bool:
        """Load a cached index without scanning.

        Returns:
            True if a valid cache was loaded
        """
        cache_path = self.get_cache_path(root)
        if not cache_path.exists():
            return False
        try:
            data = IndexData.model_validate(json.loads(cache_path.read_text(encoding="utf-8")))
        except (OSError, ValueError, ValidationError) as e:
            logger.debug(f"Cannot load code index cache {cache_path}: {e}")
            return False
        self._set_index(data)
        self.root = Path(root)
        return True

    def clear_cache(self, root: Union[str, Path]) -> None:
        """Delete the cache file and forget the loaded index."""
        cache_path = self.get_cache_path(root)
        if cache_path.exists():
            cache_path.unlink()
        self.index_data = None
        self.query = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_relevant_symbols(
        self, topic: str, max_results: int = 20, kinds: Optional[List[str]] = None
    ) -> List[Symbol]:
        """Keyword-ranked symbols for a topic or task description."""
        results = self._require_query().find_by_topic(topic)
        if kinds:
            results = [s for s in results if s.kind in kinds]
        return results[:max_results]

    def get_symbol_context(self, symbol_id: str) -> Optional[Dict[str, Any]]:
        """Symbol fields plus its code (one line of context each side),
        call sites and the imports of its file."""
        query = self._require_query()
        symbol = query.find_by_id(symbol_id)
        if symbol is None:
            return None

        code = None
        if self.root is not None:
            try:
                lines = (self.root / symbol.file).read_text(encoding="utf-8").split("\n")
            except (OSError, UnicodeDecodeError) as e:
                logger.debug(f"Cannot read {symbol.file}: {e}")
            else:
                start = max(0, symbol.start_line - 2)
                end = min(len(lines), symbol.end_line + 1)
                code = "\n".join(lines[start:end])

        context = symbol.model_dump()
        context["code"] = code
        context["references"] = query.get_symbol_references(symbol_id)
        context["dependencies"] = query.get_file_dependencies(symbol.file)
        return context

    def get_file_summary(self, file_path: str) -> Dict[str, Any]:
        return self._require_query().get_file_summary(file_path)

    def get_overview(self) -> Dict[str, Any]:
        return self._require_query().get_codebase_summary()

    def search(self, **filters: Any) -> List[Symbol]:
        """See ``QueryEngine.search`` for the accepted filters."""
        return self._require_query().search(**filters)

    def get_dependency_graph(self) -> Dict[str, List[Any]]:
        return self._require_query().build_dependency_graph()

    def get_file_dependencies(self, file_path: str) -> List[Reference]:
        return self._require_query().get_file_dependencies(file_path)

    def format_for_prompt(self, symbols: List[Symbol]) -> str:
        if self.query is None:
            return ""
        return self.query.format_for_prompt(symbols)

    def to_handles(self, symbols: List[Symbol]) -> List[Dict[str, Any]]:
        if self.query is None:
            return []
        return self.query.to_handles(symbols)

    # ------------------------------------------------------------------
    # LLM-enhanced queries (keyword fallback)
    # ------------------------------------------------------------------

    async def semantic_search(
        self, topic: str, max_results: int = 20, kinds: Optional[List[str]] = None
    ) -> List[Symbol]:
        return await self._require_query().semantic_search(
            topic, max_results=max_results, kinds=kinds
        )

    async def get_smart_context(
        self, task: str, max_symbols: int = 15, include_code: bool = False
    ) -> Dict[str, Any]:
        """Relevant symbols for a task; ``include_code`` attaches their code."""
        context = await self._require_query().get_smart_context(task, max_symbols=max_symbols)
        if include_code and context["symbols"]:
            with_code = []
            for symbol in context["symbols"]:
                symbol_context = self.get_symbol_context(symbol.id)
                if symbol_context and symbol_context.get("code"):
                    symbol = symbol.model_copy(update={"code": symbol_context["code"]})
                with_code.append(symbol)
            context["symbols"] = with_code
        return context

    async def explain_symbol(self, symbol_id: str) -> Optional[Dict[str, Any]]:
        query = self._require_query()
        symbol_context = self.get_symbol_context(symbol_id)
        code = symbol_context.get("code") if symbol_context else None
        return await query.explain_symbol(symbol_id, code)

    async def rank_symbols(self, symbols: List[Symbol], task: str) -> List[Symbol]:
        return await self._require_query().rank_symbols(symbols, task)

    async def is_llm_available(self) -> bool:
        if self.query is None:
            return False
        return await self.query.is_llm_available()

    async def close(self) -> None:
        """Release the local LLM client if one was created."""
        if self.query is not None:
            await self.query.close()


def create_index(**options: Any) -> CodeIndex:
    """Create a CodeIndex; keyword options are passed to the constructor."""
    return CodeIndex(**options)
