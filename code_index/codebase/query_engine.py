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

"""Query engine over a completed index snapshot.

Lookups use four derived indices (id, file, kind, name). Reverse lookups
(dependents, call sites) match names and paths as strings and are heuristic:
name collisions across files give false positives and re-exports give false
negatives.

The relevance methods can use a local LLM. Each goes through ``_with_llm``,
which falls back to keyword scoring whenever the LLM is missing, slow to
initialize, raises, or returns nothing.
"""

import asyncio
import logging
import posixpath
import re
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar, Union

from code_index.capability import LazyCapability
from code_index.llm.protocol import RankingService
from code_index.models import IndexData, Reference, Symbol

logger = logging.getLogger(__name__)

T = TypeVar("T")

IMPORT_REFERENCE_TYPES = frozenset(
    {
        # JavaScript/TypeScript
        "require",
        "importDeclaration",
        "dynamicImport",
        # Python, Java
        "importStatement",
        "fromImport",
        # Go
        "singleImport",
        # Rust
        "useStatement",
        "externCrate",
        # Ruby
        "requireStatement",
        # C, C++, PHP
        "includeDirective",
        # C#
        "usingDirective",
        # Elixir
        "aliasDirective",
        # Bash
        "sourceCommand",
        # CSS, HTML
        "cssImport",
        "scriptSource",
        "linkHref",
    }
)

CALL_REFERENCE_TYPES = frozenset({"functionCall", "methodCall", "constructorCall", "macroInvocation"})

_KIND_DESCRIPTIONS = {
    "function": "A function",
    "class": "A class",
    "method": "A method",
    "component": "A React component",
    "hook": "A React hook",
    "variable": "A variable",
    "constant": "A constant",
    "type": "A type definition",
    "interface": "An interface",
}

_MAX_LLM_CANDIDATES = 50


def _strip_extension(path: str) -> str:
    root, _ext = posixpath.splitext(path)
    return root


def resolve_relative_module(source_file: str, module: str) -> Optional[str]:
    """Resolve a relative import to a project path without extension.

    Handles path-style specifiers (``./utils``, ``../lib/x``) and Python
    relative modules (``.utils``, ``..pkg.mod``). Returns None for package or
    absolute imports.
    """
    if not module or not module.startswith("."):
        return None

    source_dir = posixpath.dirname(source_file)
    if module in (".", "..") or module.startswith("./") or module.startswith("../"):
        return posixpath.normpath(posixpath.join(source_dir, module))

    dots = len(module) - len(module.lstrip("."))
    base = source_dir
    for _ in range(dots - 1):
        base = posixpath.dirname(base)
    rest = module[dots:].replace(".", "/")
    return posixpath.normpath(posixpath.join(base, rest)) if rest else posixpath.normpath(base or ".")


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class QueryEngine:
    """Read-only queries over symbols and references."""

    def __init__(
        self,
        index_data: Optional[Union[IndexData, Dict[str, Any]]] = None,
        llm: Optional[LazyCapability[RankingService]] = None,
        llm_init_timeout: float = 10.0,
    ):
        """Initialize the engine.

        Args:
            index_data: Snapshot (or its dict form) to load
            llm: Handle for the optional local LLM; defaults to the
                environment-configured Ollama service
            llm_init_timeout: Seconds allowed for the LLM to initialize
        """
        if llm is None:
            from code_index.llm.service import get_local_llm_service

            llm = LazyCapability(get_local_llm_service, name="Local LLM")
        self.llm = llm
        self.llm_init_timeout = llm_init_timeout

        self.symbols: Dict[str, Symbol] = {}
        self.symbols_by_file: Dict[str, List[Symbol]] = {}
        self.symbols_by_kind: Dict[str, List[Symbol]] = {}
        self.symbols_by_name: Dict[str, List[Symbol]] = {}
        self.references: List[Reference] = []

        if index_data is not None:
            self.load_index(index_data)

    def load_index(self, index_data: Union[IndexData, Dict[str, Any]]) -> None:
        """Replace the loaded snapshot and rebuild the derived indices."""
        data = IndexData.coerce(index_data)
        by_file: Dict[str, List[Symbol]] = defaultdict(list)
        by_kind: Dict[str, List[Symbol]] = defaultdict(list)
        by_name: Dict[str, List[Symbol]] = defaultdict(list)

        self.symbols = {}
        for symbol in data.symbols:
            self.symbols[symbol.id] = symbol
            by_file[symbol.file].append(symbol)
            by_kind[symbol.kind].append(symbol)
            by_name[symbol.name].append(symbol)

        self.symbols_by_file = dict(by_file)
        self.symbols_by_kind = dict(by_kind)
        self.symbols_by_name = dict(by_name)
        self.references = list(data.references)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_by_id(self, symbol_id: str) -> Optional[Symbol]:
        return self.symbols.get(symbol_id)

    def find_by_name(self, name: str, exact: bool = False, case_sensitive: bool = True) -> List[Symbol]:
        """Symbols whose name equals (``exact``) or contains ``name``."""
        if exact:
            return list(self.symbols_by_name.get(name, []))

        needle = name if case_sensitive else name.lower()
        results: List[Symbol] = []
        for symbol_name, symbols in self.symbols_by_name.items():
            haystack = symbol_name if case_sensitive else symbol_name.lower()
            if needle in haystack:
                results.extend(symbols)
        return results

    def find_by_kind(self, kind: str) -> List[Symbol]:
        return list(self.symbols_by_kind.get(kind, []))

    def find_by_file(self, file_path: str) -> List[Symbol]:
        """Symbols declared in a file; ``\\`` separators are normalized."""
        return list(self.symbols_by_file.get(file_path.replace("\\", "/"), []))

    def find_exported(self) -> List[Symbol]:
        return [s for s in self.symbols.values() if s.exported]

    def search(
        self,
        name: Optional[str] = None,
        kind: Optional[str] = None,
        file: Optional[str] = None,
        exported: Optional[bool] = None,
        pattern: Optional[str] = None,
    ) -> List[Symbol]:
        """AND-combination of filters; None means "don't filter".

        Args:
            name: Case-insensitive substring of the name
            kind: Exact kind
            file: Substring of the file path
            exported: Exported flag
            pattern: Case-insensitive regex tested against name or file

        Raises:
            re.error: ``pattern`` is not a valid regular expression
        """
        results = list(self.symbols.values())

        if name:
            needle = name.lower()
            results = [s for s in results if needle in s.name.lower()]
        if kind:
            results = [s for s in results if s.kind == kind]
        if file:
            results = [s for s in results if file in s.file]
        if exported is not None:
            results = [s for s in results if s.exported == exported]
        if pattern:
            regex = re.compile(pattern, re.IGNORECASE)
            results = [s for s in results if regex.search(s.name) or regex.search(s.file)]

        return results

    # ------------------------------------------------------------------
    # Dependencies
    # ------------------------------------------------------------------

    def get_file_dependencies(self, file_path: str) -> List[Reference]:
        """Import-type references originating in a file."""
        file_path = file_path.replace("\\", "/")
        return [
            ref for ref in self.references
            if ref.file == file_path and ref.type in IMPORT_REFERENCE_TYPES
        ]

    def get_file_dependents(self, file_path: str) -> List[Reference]:
        """Import references that appear to target ``file_path`` (heuristic)."""
        file_path = file_path.replace("\\", "/")
        target = _strip_extension(file_path)
        filename = posixpath.basename(target)

        results = []
        for ref in self.references:
            if ref.type not in IMPORT_REFERENCE_TYPES or ref.file == file_path:
                continue
            module = ref.module or ""
            resolved = resolve_relative_module(ref.file, module)
            if resolved is not None:
                if resolved == target:
                    results.append(ref)
            elif module == filename or module.endswith("/" + filename):
                results.append(ref)
        return results

    def get_symbol_references(self, symbol_id: str) -> List[Dict[str, Any]]:
        """Call sites whose callee text equals the symbol's name (heuristic)."""
        symbol = self.find_by_id(symbol_id)
        if symbol is None:
            return []

        results = []
        for ref in self.references:
            if ref.type in CALL_REFERENCE_TYPES and ref.func == symbol.name:
                entry = ref.model_dump()
                entry["symbol_id"] = symbol_id
                entry["context"] = f"Called in {ref.file}:{ref.line}"
                results.append(entry)
        return results

    def _resolve_target(self, ref: Reference, files: List[str]) -> Optional[str]:
        resolved = resolve_relative_module(ref.file, ref.module or "")
        if resolved is None:
            return None
        candidates = (resolved, f"{resolved}/index", f"{resolved}/__init__")
        for file in files:
            if file == resolved or _strip_extension(file) in candidates:
                return file
        return None

    def build_dependency_graph(self) -> Dict[str, List[Any]]:
        """Intra-project import graph.

        Nodes are all files with symbols. Edges exist only for relative
        imports that resolve to one of those files; package imports are left
        out.
        """
        nodes = list(self.symbols_by_file.keys())
        edges = []
        for ref in self.references:
            if ref.type not in IMPORT_REFERENCE_TYPES:
                continue
            target = self._resolve_target(ref, nodes)
            if target is not None:
                edges.append({"source": ref.file, "target": target, "type": ref.type})
        return {"nodes": nodes, "edges": edges}

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    def get_file_summary(self, file_path: str) -> Dict[str, Any]:
        symbols = self.find_by_file(file_path)
        dependencies = self.get_file_dependencies(file_path)

        def names(*kinds: str) -> List[str]:
            return [s.name for s in symbols if s.kind in kinds]

        return {
            "file": file_path,
            "symbol_count": len(symbols),
            "exports": [s.name for s in symbols if s.exported],
            "functions": names("function"),
            "classes": names("class"),
            "components": names("component"),
            "hooks": names("hook"),
            "types": names("type", "interface"),
            "dependencies": [d.module for d in dependencies if d.module],
        }

    def get_codebase_summary(self) -> Dict[str, Any]:
        files = list(self.symbols_by_file.keys())
        return {
            "total_files": len(files),
            "total_symbols": len(self.symbols),
            "total_references": len(self.references),
            "exported_symbols": len(self.find_exported()),
            "by_kind": {kind: len(symbols) for kind, symbols in self.symbols_by_kind.items()},
            "files": files[:20],
        }

    def find_by_topic(self, topic: str) -> List[Symbol]:
        """Symbols scored by how many topic keywords occur in name/file/kind.

        Highest score first; ties keep index order.
        """
        keywords = topic.lower().split()
        scored = []
        for symbol in self.symbols.values():
            text = f"{symbol.name} {symbol.file} {symbol.kind}".lower()
            score = sum(1 for keyword in keywords if keyword in text)
            if score > 0:
                scored.append((score, symbol))
        scored.sort(key=lambda item: item[0], reverse=True)
        return [symbol for _score, symbol in scored]

    def to_handles(self, symbols: List[Symbol]) -> List[Dict[str, Any]]:
        """Compact symbol references for prompts."""
        return [
            {
                "id": s.id,
                "name": s.name,
                "kind": s.kind,
                "file": s.file,
                "line": s.start_line,
                "exported": s.exported,
            }
            for s in symbols
        ]

    def format_for_prompt(
        self, symbols: List[Symbol], include_file: bool = True, max_length: int = 100
    ) -> str:
        """One ``- name: kind (file:line) [exported]`` line per symbol."""
        lines = []
        for s in symbols[:max_length]:
            location = f" ({s.file}:{s.start_line})" if include_file else ""
            exported = " [exported]" if s.exported else ""
            lines.append(f"- {s.name}: {s.kind}{location}{exported}")
        if len(symbols) > max_length:
            lines.append(f"... and {len(symbols) - max_length} more")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # LLM-enhanced methods (with keyword fallback)
    # ------------------------------------------------------------------

    async def _with_llm(
        self,
        what: str,
        action: Callable[[RankingService], Awaitable[Optional[T]]],
        fallback: Callable[[], T],
    ) -> T:
        """Run ``action`` against the LLM, or return ``fallback()``.

        Initialization is bounded by ``llm_init_timeout``. Missing or
        unavailable services, exceptions and empty results all take the
        fallback.
        """
        service = self.llm.get()
        if service is not None:
            try:
                await asyncio.wait_for(service.initialize(), timeout=self.llm_init_timeout)
                if service.is_available():
                    result = await action(service)
                    if result:
                        return result
            except Exception as e:
                logger.debug(f"Local LLM {what} failed, using keyword fallback: {e}")
        return fallback()

    async def semantic_search(
        self, topic: str, max_results: int = 20, kinds: Optional[List[str]] = None
    ) -> List[Symbol]:
        """Topic search re-ranked by the LLM when available.

        Returned symbols carry ``relevance_score`` and ``relevance_reason``
        when the LLM ranked them.
        """
        candidates = self.find_by_topic(topic)
        if kinds:
            candidates = [s for s in candidates if s.kind in kinds]
        candidates = candidates[:_MAX_LLM_CANDIDATES]
        if not candidates:
            return []

        async def rank(service: RankingService) -> Optional[List[Symbol]]:
            descriptions = [f"{s.kind}:{s.name} in {s.file}:{s.start_line}" for s in candidates]
            ranked = await service.rank_file_relevance(descriptions, topic)
            results = []
            for item in ranked or []:
                path = str(item.get("path", ""))
                match = next((s for s in candidates if s.name in path and s.file in path), None)
                if match is not None:
                    results.append(
                        match.model_copy(
                            update={
                                "relevance_score": _as_float(item.get("relevance"), 0.0),
                                "relevance_reason": item.get("reason"),
                            }
                        )
                    )
            return results[:max_results]

        return await self._with_llm("semantic search", rank, lambda: candidates[:max_results])

    async def get_smart_context(self, task: str, max_symbols: int = 15) -> Dict[str, Any]:
        """Relevant symbols for a task, summarized by the LLM when available.

        Returns:
            ``{"task", "symbols", "files", "summary", "llm_enhanced"}``
        """
        symbols = await self.semantic_search(task, max_results=max_symbols * 2)
        context: Dict[str, Any] = {
            "task": task,
            "symbols": [],
            "files": [],
            "summary": None,
            "llm_enhanced": False,
        }
        if not symbols:
            return context

        async def summarize(service: RankingService) -> Optional[List[Symbol]]:
            infos = [
                {"path": f"{s.file}:{s.start_line}", "content": f"{s.kind} {s.name}"}
                for s in symbols[:max_symbols]
            ]
            summarized = await service.summarize_context(infos, task)
            enriched = []
            for item in summarized or []:
                path = str(item.get("path", ""))
                match = next(
                    (s for s in symbols if s.file in path and str(s.start_line) in path), None
                )
                if match is not None:
                    enriched.append(
                        match.model_copy(
                            update={
                                "summary": item.get("summary"),
                                "relevance": _as_float(item.get("relevance"), 0.0),
                            }
                        )
                    )
            enriched.sort(key=lambda s: s.relevance, reverse=True)
            if enriched:
                context["llm_enhanced"] = True
            return enriched[:max_symbols]

        def basic() -> List[Symbol]:
            return [
                s.model_copy(update={"relevance": getattr(s, "relevance_score", None) or 0.5})
                for s in symbols[:max_symbols]
            ]

        context["symbols"] = await self._with_llm("context summary", summarize, basic)
        files: List[str] = []
        for s in context["symbols"]:
            if s.file not in files:
                files.append(s.file)
        context["files"] = files
        return context

    async def explain_symbol(self, symbol_id: str, code: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Describe a symbol; the LLM is only consulted when ``code`` is given.

        Returns:
            ``{"symbol", "description", "purpose", "dependencies", "llm_enhanced"}``
            or None for an unknown id
        """
        symbol = self.find_by_id(symbol_id)
        if symbol is None:
            return None

        explanation: Dict[str, Any] = {
            "symbol": symbol,
            "description": None,
            "purpose": None,
            "dependencies": self.get_symbol_references(symbol_id),
            "llm_enhanced": False,
        }

        async def describe(service: RankingService) -> Optional[str]:
            if not code:
                return None
            prompt = (
                f"Explain this {symbol.kind} briefly:\n"
                f"Name: {symbol.name}\n"
                f"File: {symbol.file}\n\n"
                f"Code:\n{code[:1500]}\n\n"
                "Provide: 1) What it does, 2) Its purpose in the codebase"
            )
            result = await service.generate(prompt, max_tokens=200)
            if result:
                explanation["llm_enhanced"] = True
            return result

        explanation["description"] = await self._with_llm(
            "explanation", describe, lambda: self._generate_basic_description(symbol)
        )
        return explanation

    async def rank_symbols(self, symbols: List[Symbol], task: str) -> List[Symbol]:
        """Score symbols against a task, highest first.

        Every returned symbol carries ``relevance_score`` and
        ``relevance_reason``.
        """
        if not symbols:
            return []

        async def rank(service: RankingService) -> Optional[List[Symbol]]:
            descriptions = [f"{s.kind}:{s.name} ({s.file}:{s.start_line})" for s in symbols]
            ranked = await service.rank_file_relevance(descriptions, task)
            if not ranked:
                return None
            results = []
            for s in symbols:
                match = next(
                    (
                        r for r in ranked
                        if s.name in str(r.get("path", "")) and s.file in str(r.get("path", ""))
                    ),
                    None,
                )
                results.append(
                    s.model_copy(
                        update={
                            "relevance_score": _as_float(match.get("relevance"), 0.3) if match else 0.3,
                            "relevance_reason": (match.get("reason") if match else None) or "No match",
                        }
                    )
                )
            results.sort(key=lambda s: s.relevance_score, reverse=True)
            return results

        return await self._with_llm("ranking", rank, lambda: self._keyword_rank(symbols, task))

    async def is_llm_available(self) -> bool:
        async def probe(service: RankingService) -> bool:
            return True

        return await self._with_llm("availability check", probe, lambda: False)

    async def close(self) -> None:
        """Close the LLM service's HTTP client.

        A handle that was never probed is left alone, so closing never
        constructs a service.
        """
        if not self.llm.probed:
            return
        service = self.llm.get()
        close = getattr(service, "close", None)
        if close is not None:
            await close()

    # ------------------------------------------------------------------
    # Keyword fallbacks
    # ------------------------------------------------------------------

    @staticmethod
    def _generate_basic_description(symbol: Symbol) -> str:
        base = _KIND_DESCRIPTIONS.get(symbol.kind, f"A {symbol.kind}")
        exported = " (exported)" if symbol.exported else ""
        return f'{base} named "{symbol.name}"{exported} in {symbol.file}'

    @staticmethod
    def _keyword_rank(symbols: List[Symbol], task: str) -> List[Symbol]:
        """0.3 base, +0.2 per keyword (>2 chars) found, +0.1 if exported, max 1.0."""
        keywords = task.lower().split()
        ranked = []
        for s in symbols:
            text = f"{s.name} {s.file} {s.kind}".lower()
            score = sum(0.2 for keyword in keywords if len(keyword) > 2 and keyword in text)
            if s.exported:
                score += 0.1
            ranked.append(
                s.model_copy(
                    update={
                        "relevance_score": min(1.0, 0.3 + score),
                        "relevance_reason": "Keyword matching",
                    }
                )
            )
        ranked.sort(key=lambda s: s.relevance_score, reverse=True)
        return ranked
