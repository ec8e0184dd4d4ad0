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

"""Index builder: walks a source tree and extracts symbols and references.

Extraction is structural (tree-sitter queries from the language adapters)
when a parser is available for the file's grammar, and falls back to
line-oriented regexes otherwise. Files are processed one at a time in walk
order, so de-duplication (first pattern wins per ``file:name``) and
incremental diffs are deterministic.
"""

import hashlib
import logging
import os
from collections import defaultdict
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from pydantic import ValidationError

from code_index.capability import LazyCapability
from code_index.codebase import fallback
from code_index.codebase.ignore_patterns import (
    compile_file_patterns,
    should_ignore_dir,
    should_ignore_file,
)
from code_index.config import IndexConfig
from code_index.errors import CacheCorruptedError
from code_index.languages.base import LanguageAdapter, ReferencePattern, SymbolPattern
from code_index.languages.registry import LanguageRegistry, get_language_registry
from code_index.models import CORE_SYMBOL_FIELDS, IndexData, IndexStats, Reference, Symbol

if TYPE_CHECKING:
    from tree_sitter import Tree

    from code_index.codebase.tree_sitter_manager import StructuralMatch, StructuralParser

logger = logging.getLogger(__name__)

# Reference fields set by the builder, never by extractors
_CORE_REFERENCE_FIELDS = frozenset({"type", "file", "line"})


def load_structural_parser() -> "StructuralParser":
    """Create a tree-sitter backed parser.

    Raises:
        ImportError: tree-sitter is not installed
    """
    from code_index.codebase.tree_sitter_manager import StructuralParser

    return StructuralParser()


class IndexBuilder:
    """Builds an IndexData snapshot from a source tree.

    Example:
        builder = IndexBuilder()
        data = await builder.scan("/path/to/project")
        print(data.stats.total_symbols)
    """

    def __init__(
        self,
        config: Optional[IndexConfig] = None,
        registry: Optional[LanguageRegistry] = None,
        parser: Optional[LazyCapability["StructuralParser"]] = None,
    ):
        """Initialize the builder.

        Args:
            config: Walk options (ignore lists, size cap)
            registry: Language adapters; defaults to the built-in set
            parser: Structural parser handle; ``LazyCapability.unavailable()``
                forces regex extraction
        """
        self.config = config or IndexConfig()
        self.registry = registry or get_language_registry()
        self.parser: LazyCapability["StructuralParser"] = (
            parser
            if parser is not None
            else LazyCapability(load_structural_parser, name="Structural parser")
        )
        self._ignore_dirs = set(self.config.ignore_dirs)
        self._ignore_files = compile_file_patterns(self.config.ignore_files)

        self.root_dir: Path = Path.cwd()
        self.symbols: Dict[str, Symbol] = {}  # id -> Symbol, insertion ordered
        self.references: List[Reference] = []
        self.file_hashes: Dict[str, str] = {}
        self.last_changes: Dict[str, Any] = {}

    def reset(self) -> None:
        """Clear all state from a previous scan."""
        self.symbols = {}
        self.references = []
        self.file_hashes = {}
        self.last_changes = {}

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    async def scan(self, root_dir: Union[str, Path]) -> IndexData:
        """Full scan of a source tree.

        Args:
            root_dir: Project root

        Returns:
            New index snapshot
        """
        self.root_dir = Path(root_dir).resolve()
        self.reset()

        using_structural = self.parser.available
        if not using_structural:
            logger.info("Structural parser unavailable, using regex extraction")

        files = self.get_source_files()
        for file_path in files:
            try:
                await self.index_file(file_path)
            except Exception as exc:
                logger.debug(f"Failed to index {file_path}: {exc}")

        logger.info(
            f"Indexed {len(files)} files with {len(self.symbols)} symbols "
            f"and {len(self.references)} references"
        )
        return self._snapshot(len(files), using_structural)

    async def incremental_scan(
        self, root_dir: Union[str, Path], previous: Union[IndexData, Dict[str, Any]]
    ) -> IndexData:
        """Re-extract only files whose content hash changed.

        Symbols and hashes of unchanged files are carried forward from
        ``previous``. References are only produced for re-extracted files;
        references of unchanged files are not carried forward.

        Args:
            root_dir: Project root
            previous: Prior snapshot, or its dict form as read from the cache

        Returns:
            New index snapshot

        Raises:
            CacheCorruptedError: ``previous`` does not validate as an index
        """
        try:
            previous_data = IndexData.coerce(previous)
        except ValidationError as e:
            raise CacheCorruptedError(f"Previous index is malformed: {e}") from e

        self.root_dir = Path(root_dir).resolve()
        self.reset()
        using_structural = self.parser.available

        previous_symbols: Dict[str, List[Symbol]] = defaultdict(list)
        for symbol in previous_data.symbols:
            previous_symbols[symbol.file].append(symbol)

        changes: Dict[str, Any] = {"updated": [], "added": [], "removed": [], "unchanged": 0}
        files = self.get_source_files()
        current_files = set()

        for file_path in files:
            rel_path = self._relative(file_path)
            current_files.add(rel_path)
            previous_hash = previous_data.file_hashes.get(rel_path)

            if previous_hash is not None and not self.has_file_changed(file_path, previous_hash):
                self.file_hashes[rel_path] = previous_hash
                for symbol in previous_symbols.get(rel_path, []):
                    self.symbols.setdefault(symbol.id, symbol)
                changes["unchanged"] += 1
                continue

            try:
                await self.index_file(file_path)
            except Exception as exc:
                logger.debug(f"Failed to index {file_path}: {exc}")
            changes["updated" if previous_hash is not None else "added"].append(rel_path)

        changes["removed"] = sorted(set(previous_data.file_hashes) - current_files)
        self.last_changes = changes

        total_changes = len(changes["updated"]) + len(changes["added"]) + len(changes["removed"])
        if total_changes > 0:
            logger.info(
                f"Incremental scan: {len(changes['updated'])} updated, "
                f"{len(changes['added'])} added, {len(changes['removed'])} removed, "
                f"{changes['unchanged']} unchanged"
            )
        else:
            logger.debug(f"Incremental scan: no changes detected ({changes['unchanged']} files)")

        return self._snapshot(len(files), using_structural)

    def get_source_files(self, root_dir: Optional[Union[str, Path]] = None) -> List[Path]:
        """Walk the tree in name order and return indexable files.

        Skips ignored directory names at any depth, ignored file globs,
        extensions without an adapter and files over ``max_file_size``.
        """
        root = Path(root_dir).resolve() if root_dir is not None else self.root_dir
        files: List[Path] = []
        self._walk(root, files)
        return files

    def _walk(self, directory: Path, files: List[Path]) -> None:
        try:
            entries = sorted(os.scandir(directory), key=lambda e: e.name)
        except OSError as e:
            logger.debug(f"Cannot read directory {directory}: {e}")
            return

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                if not should_ignore_dir(entry.name, self._ignore_dirs):
                    self._walk(Path(entry.path), files)
                continue
            if not entry.is_file():
                continue
            if should_ignore_file(entry.name, self._ignore_files):
                continue
            path = Path(entry.path)
            if self.registry.for_path(path) is None:
                continue
            try:
                size = entry.stat().st_size
            except OSError as e:
                logger.debug(f"Cannot stat {path}: {e}")
                continue
            if size > self.config.max_file_size:
                logger.debug(f"Skipping {path}: {size} bytes exceeds max_file_size")
                continue
            files.append(path)

    # ------------------------------------------------------------------
    # Per-file extraction
    # ------------------------------------------------------------------

    async def index_file(self, file_path: Path) -> None:
        """Read, hash and extract one file into the builder state."""
        rel_path = self._relative(file_path)
        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug(f"Skipping {file_path} due to read error: {exc}")
            return

        self.file_hashes[rel_path] = self.hash_content(content)

        adapter = self.registry.for_path(file_path)
        if adapter is None:
            return

        parser = self.parser.get()
        grammar = adapter.grammar_for(file_path)
        tree = parser.try_parse(grammar, content) if parser is not None and grammar else None
        if tree is None:
            self.index_file_basic(rel_path, content, adapter)
            return

        try:
            self.extract_symbols(tree, grammar, rel_path, adapter, content)
            self.extract_references(tree, grammar, rel_path, adapter)
        except Exception as e:
            logger.debug(f"Structural extraction failed for {rel_path}, using regex: {e}")
            self.index_file_basic(rel_path, content, adapter)

    def extract_symbols(
        self,
        tree: "Tree",
        grammar: str,
        rel_path: str,
        adapter: LanguageAdapter,
        content: str,
    ) -> None:
        """Apply every symbol pattern; a failing pattern only skips itself."""
        parser = self.parser.get()
        for pattern in adapter.symbol_patterns:
            try:
                for match in parser.matches(tree, grammar, pattern.query, span="def"):
                    self._add_symbol(match, pattern, rel_path, adapter, content)
            except Exception as e:
                logger.debug(f"Pattern {pattern.pattern_id} skipped for {rel_path}: {e}")

    def _add_symbol(
        self,
        match: "StructuralMatch",
        pattern: SymbolPattern,
        rel_path: str,
        adapter: LanguageAdapter,
        content: str,
    ) -> None:
        if pattern.context and not match.within(pattern.context):
            return

        span_text = match.text()
        extracted: Dict[str, Any] = {}
        if pattern.extract is not None:
            try:
                extracted = dict(pattern.extract(match) or {})
            except Exception:
                extracted = {"name": span_text[:50]}

        name = extracted.pop("name", None) or pattern.pattern_id
        if not name:
            return

        symbol_id = Symbol.make_id(rel_path, name)
        if symbol_id in self.symbols:
            return

        extras = {k: v for k, v in extracted.items() if k not in CORE_SYMBOL_FIELDS}
        self.symbols[symbol_id] = Symbol(
            id=symbol_id,
            name=name,
            kind=adapter.infer_kind(name, pattern.kind),
            file=rel_path,
            start_line=match.start_line,
            end_line=max(match.end_line, match.start_line),
            exported=self.check_if_exported(name, content),
            content_hash=self.hash_content(span_text),
            **extras,
        )

    def extract_references(
        self, tree: "Tree", grammar: str, rel_path: str, adapter: LanguageAdapter
    ) -> None:
        """Apply every reference pattern; matches whose extractor fails are dropped."""
        parser = self.parser.get()
        for pattern in adapter.reference_patterns:
            try:
                for match in parser.matches(tree, grammar, pattern.query, span="ref"):
                    self._add_reference(match, pattern, rel_path)
            except Exception as e:
                logger.debug(f"Reference pattern {pattern.pattern_id} skipped for {rel_path}: {e}")

    def _add_reference(
        self, match: "StructuralMatch", pattern: ReferencePattern, rel_path: str
    ) -> None:
        extracted: Dict[str, Any] = {}
        if pattern.extract is not None:
            try:
                extracted = dict(pattern.extract(match) or {})
            except Exception:
                return
        extras = {k: v for k, v in extracted.items() if k not in _CORE_REFERENCE_FIELDS}
        self.references.append(
            Reference(type=pattern.pattern_id, file=rel_path, line=match.start_line, **extras)
        )

    def index_file_basic(
        self, rel_path: str, content: str, adapter: Optional[LanguageAdapter] = None
    ) -> None:
        """Regex extraction for files the structural parser cannot handle."""
        for line_no, name, kind, line in fallback.match_symbols(content):
            symbol_id = Symbol.make_id(rel_path, name)
            if symbol_id in self.symbols:
                continue
            self.symbols[symbol_id] = Symbol(
                id=symbol_id,
                name=name,
                kind=adapter.infer_kind(name, kind) if adapter is not None else kind,
                file=rel_path,
                start_line=line_no,
                end_line=line_no,
                exported="export" in line,
                content_hash=self.hash_content(line),
            )

        for line_no, ref_type, module in fallback.match_references(content):
            self.references.append(
                Reference(type=ref_type, file=rel_path, line=line_no, module=module)
            )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def check_if_exported(name: str, content: str) -> bool:
        return fallback.check_if_exported(name, content)

    @staticmethod
    def hash_content(content: str) -> str:
        """SHA-256 hex digest of text."""
        return hashlib.sha256(content.encode("utf-8")).hexdigest()

    def has_file_changed(self, file_path: Union[str, Path], previous_hash: str) -> bool:
        """Compare a file's current content hash with a previous one.

        Missing or unreadable files count as changed.
        """
        path = Path(file_path)
        if not path.is_absolute():
            path = self.root_dir / path
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return True
        return self.hash_content(content) != previous_hash

    def _relative(self, file_path: Path) -> str:
        try:
            return file_path.relative_to(self.root_dir).as_posix()
        except ValueError:
            return file_path.as_posix()

    def _snapshot(self, total_files: int, using_structural: bool) -> IndexData:
        symbols = list(self.symbols.values())
        return IndexData(
            symbols=symbols,
            references=list(self.references),
            file_hashes=dict(self.file_hashes),
            stats=IndexStats(
                total_files=total_files,
                total_symbols=len(symbols),
                total_references=len(self.references),
                using_structural=using_structural,
            ),
        )
