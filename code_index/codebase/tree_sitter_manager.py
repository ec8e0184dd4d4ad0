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

"""Structural parsing on top of tree-sitter.

Grammars come from pre-compiled ``tree-sitter-<language>`` packages. A grammar
that cannot be loaded is remembered as missing and never retried, so files of
that language go straight to the regex fallback.
"""

import importlib
import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Set, Tuple

from tree_sitter import Language, Parser, Query, QueryCursor

if TYPE_CHECKING:
    from tree_sitter import Node, Tree

logger = logging.getLogger(__name__)


# Language package mapping for tree-sitter 0.25+
# Install with: pip install tree-sitter-<language>
# Format: "grammar_id": ("module_name", "function_name")
LANGUAGE_MODULES: Dict[str, Tuple[str, str]] = {
    "javascript": ("tree_sitter_javascript", "language"),
    "typescript": ("tree_sitter_typescript", "language_typescript"),  # Special case
    "tsx": ("tree_sitter_typescript", "language_tsx"),  # TypeScript + JSX
    "python": ("tree_sitter_python", "language"),
    "go": ("tree_sitter_go", "language"),
    "rust": ("tree_sitter_rust", "language"),
    "java": ("tree_sitter_java", "language"),
    "ruby": ("tree_sitter_ruby", "language"),
    "c": ("tree_sitter_c", "language"),
    "cpp": ("tree_sitter_cpp", "language"),
    "c_sharp": ("tree_sitter_c_sharp", "language"),
    "php": ("tree_sitter_php", "language_php"),
    "swift": ("tree_sitter_swift", "language"),
    "kotlin": ("tree_sitter_kotlin", "language"),
    "scala": ("tree_sitter_scala", "language"),
    "lua": ("tree_sitter_lua", "language"),
    "elixir": ("tree_sitter_elixir", "language"),
    "haskell": ("tree_sitter_haskell", "language"),
    "bash": ("tree_sitter_bash", "language"),
    "css": ("tree_sitter_css", "language"),
    "html": ("tree_sitter_html", "language"),
    "sql": ("tree_sitter_sql", "language"),
}


def get_language(grammar: str) -> Language:
    """Load a tree-sitter Language from its pre-compiled package.

    Raises:
        ValueError: Unknown grammar id
        ImportError: Grammar package not installed
    """
    module_info = LANGUAGE_MODULES.get(grammar)
    if not module_info:
        raise ValueError(f"Unsupported language for tree-sitter: {grammar}")

    module_name, func_name = module_info
    try:
        language_module = importlib.import_module(module_name)
    except ImportError:
        raise ImportError(
            f"Language package '{module_name}' not installed. "
            f"Install it with: pip install {module_name.replace('_', '-')}"
        )

    lang_obj = getattr(language_module, func_name)()
    # Some older grammars expose a PyCapsule; wrap via Language
    return Language(lang_obj) if not isinstance(lang_obj, Language) else lang_obj


def _decode(node: Optional["Node"]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


class StructuralMatch:
    """One query match: named captures plus the span capture used for lines."""

    def __init__(self, captures: Dict[str, List["Node"]], span: str = "def"):
        self.captures = captures
        self.span = span

    def node(self, capture: str) -> Optional["Node"]:
        """First node bound to a capture, or None."""
        nodes = self.captures.get(capture)
        return nodes[0] if nodes else None

    def text(self, capture: Optional[str] = None) -> str:
        """Source text of a capture (the span when omitted); empty if unbound."""
        return _decode(self.node(capture or self.span))

    @property
    def span_node(self) -> Optional["Node"]:
        return self.node(self.span)

    @property
    def start_line(self) -> int:
        node = self.span_node
        return node.start_point[0] + 1 if node is not None else 1

    @property
    def end_line(self) -> int:
        node = self.span_node
        return node.end_point[0] + 1 if node is not None else self.start_line

    def within(self, node_type: str) -> bool:
        """Check whether the span sits inside a node of the given type."""
        node = self.span_node
        parent = node.parent if node is not None else None
        while parent is not None:
            if parent.type == node_type:
                return True
            parent = parent.parent
        return False


class StructuralParser:
    """Parses source text and runs queries, caching grammars per instance."""

    def __init__(self):
        self._languages: Dict[str, Language] = {}
        self._parsers: Dict[str, Parser] = {}
        self._unavailable: Set[str] = set()
        self._queries: Dict[Tuple[str, str], Query] = {}
        self._bad_queries: Dict[Tuple[str, str], str] = {}

    def supports(self, grammar: str) -> bool:
        return grammar in LANGUAGE_MODULES and grammar not in self._unavailable

    def _get_parser(self, grammar: str) -> Optional[Parser]:
        if grammar in self._unavailable:
            return None
        if grammar in self._parsers:
            return self._parsers[grammar]
        try:
            lang = get_language(grammar)
        except (ValueError, ImportError, AttributeError) as e:
            logger.debug(f"Grammar '{grammar}' unavailable: {e}")
            self._unavailable.add(grammar)
            return None
        self._languages[grammar] = lang
        self._parsers[grammar] = Parser(lang)
        return self._parsers[grammar]

    def try_parse(self, grammar: str, content: str) -> Optional["Tree"]:
        """Parse content, returning None when the grammar is unusable.

        A parse error only affects this call; the grammar stays usable.
        """
        parser = self._get_parser(grammar)
        if parser is None:
            return None
        try:
            tree = parser.parse(content.encode("utf-8"))
        except Exception as e:
            logger.debug(f"Failed to parse with grammar '{grammar}': {e}")
            return None
        if tree.root_node.has_error:
            logger.debug(f"Syntax errors in {grammar} source; extracting what parsed")
        return tree

    def _compile(self, grammar: str, query_src: str) -> Query:
        key = (grammar, query_src)
        if key in self._queries:
            return self._queries[key]
        if key in self._bad_queries:
            raise ValueError(self._bad_queries[key])
        try:
            query = Query(self._languages[grammar], query_src)
        except Exception as e:
            self._bad_queries[key] = f"Invalid query for {grammar}: {e}"
            raise ValueError(self._bad_queries[key]) from e
        self._queries[key] = query
        return query

    def matches(
        self, tree: "Tree", grammar: str, query_src: str, span: str = "def"
    ) -> List[StructuralMatch]:
        """Run a query and return its matches in document order.

        Raises:
            ValueError: The query does not compile for this grammar
        """
        query = self._compile(grammar, query_src)
        cursor = QueryCursor(query)
        return [
            StructuralMatch(captures, span=span)
            for _pattern_index, captures in cursor.matches(tree.root_node)
        ]
