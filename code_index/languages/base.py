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

"""Base types for language adapters.

A language adapter is configuration: ordered tree-sitter query patterns for
symbols and references, a parameter-list parser and a naming-convention hook.
The index builder consumes adapters; it never branches on a language name.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
    runtime_checkable,
)

if TYPE_CHECKING:
    from code_index.codebase.tree_sitter_manager import StructuralMatch

# extract(match) -> extra fields for the symbol/reference
Extractor = Callable[["StructuralMatch"], Dict[str, Any]]


# ---------------------------------------------------------------------------
# Pattern Types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SymbolPattern:
    """Single tree-sitter query pattern for symbol extraction.

    Attributes:
        pattern_id: Stable identifier; also the symbol name when the extractor
            yields none
        query: Tree-sitter query. ``@def`` spans the declaration, ``@name``
            captures the identifier
        kind: Symbol kind assigned to matches (before infer_kind)
        extract: Optional extractor returning ``name`` plus kind-specific fields
        context: Optional node type the match must be nested inside
    """

    pattern_id: str
    query: str
    kind: str
    extract: Optional[Extractor] = None
    context: Optional[str] = None


@dataclass(frozen=True)
class ReferencePattern:
    """Single tree-sitter query pattern for import/call extraction.

    ``@ref`` spans the reference; the reference type is ``pattern_id``.
    """

    pattern_id: str
    query: str
    extract: Optional[Extractor] = None


@dataclass
class LanguageConfig:
    """Identity and file mapping for a language family."""

    name: str  # Canonical name (e.g., "javascript")
    display_name: str  # Human-readable name (e.g., "JavaScript")
    aliases: List[str] = field(default_factory=list)
    extensions: List[str] = field(default_factory=list)  # .js, .jsx
    # extension -> tree-sitter grammar id; extensions not listed use default_grammar
    grammars: Dict[str, str] = field(default_factory=dict)
    default_grammar: Optional[str] = None


@runtime_checkable
class LanguageAdapter(Protocol):
    """Protocol for language adapters."""

    @property
    def config(self) -> LanguageConfig:
        ...

    @property
    def symbol_patterns(self) -> List[SymbolPattern]:
        ...

    @property
    def reference_patterns(self) -> List[ReferencePattern]:
        ...

    def grammar_for(self, path: Path) -> Optional[str]:
        ...

    def parse_parameter_list(self, text: str) -> List[str]:
        ...

    def infer_kind(self, name: str, default_kind: str) -> str:
        ...


def split_parameters(text: str) -> List[str]:
    """Split a parameter list on top-level commas.

    Surrounding parentheses are removed and nested brackets, generics and
    string literals are kept intact, so ``(a, b: Dict[str, int] = {}, c)``
    yields three entries.
    """
    text = text.strip()
    if len(text) >= 2 and text[0] == "(" and text[-1] == ")":
        text = text[1:-1]

    parts: List[str] = []
    depth = 0
    quote: Optional[str] = None
    current: List[str] = []
    for ch in text:
        if quote:
            current.append(ch)
            if ch == quote:
                quote = None
            continue
        if ch in "\"'`":
            quote = ch
        elif ch in "([{<":
            depth += 1
        elif ch in ")]}>" and depth > 0:
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    parts.append("".join(current).strip())
    return [p for p in parts if p]


def strip_annotation_and_default(param: str) -> str:
    """Drop a ``: type`` annotation and ``= default`` value from one parameter."""
    for sep in ("=", ":"):
        index = param.find(sep)
        if index > 0:
            param = param[:index]
    return param.strip()


class BaseLanguageAdapter(ABC):
    """Base class for language adapters with lazily built pattern tables."""

    def __init__(self):
        self._config: Optional[LanguageConfig] = None
        self._symbol_patterns: Optional[List[SymbolPattern]] = None
        self._reference_patterns: Optional[List[ReferencePattern]] = None

    @property
    def config(self) -> LanguageConfig:
        if self._config is None:
            self._config = self._create_config()
        return self._config

    @property
    def symbol_patterns(self) -> List[SymbolPattern]:
        """Symbol patterns in priority order (first match wins)."""
        if self._symbol_patterns is None:
            self._symbol_patterns = self._create_symbol_patterns()
        return self._symbol_patterns

    @property
    def reference_patterns(self) -> List[ReferencePattern]:
        if self._reference_patterns is None:
            self._reference_patterns = self._create_reference_patterns()
        return self._reference_patterns

    @abstractmethod
    def _create_config(self) -> LanguageConfig:
        """Create language configuration."""
        ...

    @abstractmethod
    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        """Create symbol patterns for this language."""
        ...

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return []

    def grammar_for(self, path: Path) -> Optional[str]:
        """Tree-sitter grammar id used to parse a file of this language."""
        return self.config.grammars.get(path.suffix.lower(), self.config.default_grammar)

    def parse_parameter_list(self, text: str) -> List[str]:
        """Parameter names with annotations and defaults removed."""
        names = [strip_annotation_and_default(p) for p in split_parameters(text)]
        return [n for n in names if n]

    def infer_kind(self, name: str, default_kind: str) -> str:
        """Default: no naming-convention overrides."""
        return default_kind

    # Extractor helpers shared by the adapters

    def _name(self, match: "StructuralMatch") -> Dict[str, Any]:
        return {"name": match.text("name")}

    def _name_and_params(self, match: "StructuralMatch") -> Dict[str, Any]:
        return {
            "name": match.text("name"),
            "params": self.parse_parameter_list(match.text("params")),
        }

    @staticmethod
    def _unquote(text: str) -> str:
        return text.strip().strip("\"'`")
