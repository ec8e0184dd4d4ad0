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

"""Adapters for the remaining supported languages.

Includes:
- C#, PHP, Swift, Kotlin, Scala (class-based languages)
- Lua, Elixir, Haskell, Bash (scripting and functional languages)
- CSS, HTML, SQL (web and data languages)
- Dart (regex extraction only; no tree-sitter grammar package is mapped)

Each adapter keeps to the declarations and imports its grammar exposes
directly. Files of a language whose grammar package is not installed are
indexed with the regex fallback.
"""

import re
from typing import Any, Dict, List

from code_index.languages.base import (
    BaseLanguageAdapter,
    LanguageConfig,
    ReferencePattern,
    SymbolPattern,
    split_parameters,
)

_CONSTANT_NAME = re.compile(r"^[A-Z_][A-Z0-9_]*$")


def _call(match) -> Dict[str, Any]:
    return {"func": match.text("func"), "args": match.text("args")}


def _module(match) -> Dict[str, Any]:
    return {"module": BaseLanguageAdapter._unquote(match.text("module"))}


def _names_before_colon(text: str) -> List[str]:
    """``[label or modifier] name: Type [= default]``; keep the word before the colon."""
    names = []
    for param in split_parameters(text):
        parts = param.split(":", 1)[0].split()
        if parts:
            names.append(parts[-1])
    return names


# =============================================================================
# C#
# =============================================================================


class CSharpAdapter(BaseLanguageAdapter):
    """C# types, members, namespaces and ``using`` directives."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="csharp",
            display_name="C#",
            aliases=["c#", "cs"],
            extensions=[".cs", ".csx"],
            default_grammar="c_sharp",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "classDeclaration",
                "(class_declaration name: (identifier) @name (base_list)? @bases) @def",
                "class",
                self._type_with_bases,
            ),
            SymbolPattern(
                "interfaceDeclaration",
                "(interface_declaration name: (identifier) @name) @def",
                "interface",
                self._name,
            ),
            SymbolPattern(
                "structDeclaration",
                "(struct_declaration name: (identifier) @name) @def",
                "struct",
                self._name,
            ),
            SymbolPattern(
                "recordDeclaration",
                "(record_declaration name: (identifier) @name) @def",
                "record",
                self._name,
            ),
            SymbolPattern(
                "enumDeclaration",
                "(enum_declaration name: (identifier) @name) @def",
                "enum",
                self._name,
            ),
            SymbolPattern(
                "methodDeclaration",
                "(method_declaration name: (identifier) @name parameters: (parameter_list) @params) @def",
                "method",
                self._name_and_params,
            ),
            SymbolPattern(
                "constructorDeclaration",
                "(constructor_declaration name: (identifier) @name parameters: (parameter_list) @params) @def",
                "constructor",
                self._name_and_params,
            ),
            SymbolPattern(
                "propertyDeclaration",
                "(property_declaration name: (identifier) @name) @def",
                "property",
                self._name,
            ),
            SymbolPattern(
                "namespaceDeclaration",
                "(namespace_declaration name: [(identifier) (qualified_name)] @name) @def",
                "namespace",
                self._name,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "usingDirective",
                "(using_directive [(identifier) (qualified_name)] @module) @ref",
                _module,
            ),
            ReferencePattern(
                "methodCall",
                "(invocation_expression function: (_) @func arguments: (argument_list) @args) @ref",
                _call,
            ),
            ReferencePattern(
                "constructorCall",
                "(object_creation_expression type: (_) @func) @ref",
                lambda m: {"func": m.text("func")},
            ),
        ]

    def _type_with_bases(self, match) -> Dict[str, Any]:
        bases = match.text("bases").lstrip(":")
        return {"name": match.text("name"), "bases": split_parameters(bases)}

    def parse_parameter_list(self, text: str) -> List[str]:
        """``[modifier] type name [= default]``; keep the name."""
        names = []
        for param in split_parameters(text):
            parts = param.split("=", 1)[0].split()
            if len(parts) >= 2:
                names.append(parts[-1])
        return names


# =============================================================================
# PHP
# =============================================================================


class PhpAdapter(BaseLanguageAdapter):
    """PHP functions, classes, traits and ``use``/``require`` statements."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="php",
            display_name="PHP",
            extensions=[".php", ".phtml", ".php3", ".php4", ".php5", ".phps"],
            default_grammar="php",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "functionDefinition",
                "(function_definition name: (name) @name parameters: (formal_parameters) @params) @def",
                "function",
                self._name_and_params,
            ),
            SymbolPattern(
                "classDeclaration",
                "(class_declaration name: (name) @name (base_clause)? @parent) @def",
                "class",
                lambda m: {
                    "name": m.text("name"),
                    "extends": m.text("parent").replace("extends", "", 1).strip() or None,
                },
            ),
            SymbolPattern(
                "interfaceDeclaration",
                "(interface_declaration name: (name) @name) @def",
                "interface",
                self._name,
            ),
            SymbolPattern(
                "traitDeclaration",
                "(trait_declaration name: (name) @name) @def",
                "trait",
                self._name,
            ),
            SymbolPattern(
                "methodDeclaration",
                "(method_declaration name: (name) @name parameters: (formal_parameters) @params) @def",
                "method",
                self._name_and_params,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "useStatement",
                "(namespace_use_clause [(qualified_name) (name)] @module) @ref",
                _module,
            ),
            ReferencePattern(
                "require",
                "[(require_expression (_) @module) (require_once_expression (_) @module)] @ref",
                _module,
            ),
            ReferencePattern(
                "includeDirective",
                "[(include_expression (_) @module) (include_once_expression (_) @module)] @ref",
                _module,
            ),
            ReferencePattern(
                "functionCall",
                "(function_call_expression function: (_) @func arguments: (arguments) @args) @ref",
                _call,
            ),
            ReferencePattern(
                "constructorCall",
                "(object_creation_expression [(name) (qualified_name)] @func) @ref",
                lambda m: {"func": m.text("func")},
            ),
        ]

    def parse_parameter_list(self, text: str) -> List[str]:
        """Keep ``$name`` without the sigil, type hint or default."""
        names = []
        for param in split_parameters(text):
            found = re.search(r"\$(\w+)", param)
            if found:
                names.append(found.group(1))
        return names


# =============================================================================
# Swift
# =============================================================================


class SwiftAdapter(BaseLanguageAdapter):
    """Swift types, protocols, functions and imports."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="swift",
            display_name="Swift",
            extensions=[".swift"],
            default_grammar="swift",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "typeDeclaration",
                "(class_declaration declaration_kind: _ @declaration name: (type_identifier) @name) @def",
                "class",
                lambda m: {"name": m.text("name"), "declaration": m.text("declaration")},
            ),
            SymbolPattern(
                "protocolDeclaration",
                "(protocol_declaration name: (type_identifier) @name) @def",
                "protocol",
                self._name,
            ),
            SymbolPattern(
                "functionDeclaration",
                "(function_declaration name: (simple_identifier) @name) @def",
                "function",
                self._name,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "importStatement",
                "(import_declaration (identifier) @module) @ref",
                _module,
            ),
            ReferencePattern(
                "functionCall",
                "(call_expression (simple_identifier) @func) @ref",
                lambda m: {"func": m.text("func")},
            ),
        ]

    def parse_parameter_list(self, text: str) -> List[str]:
        """The internal name follows the optional argument label."""
        return _names_before_colon(text)


# =============================================================================
# Kotlin
# =============================================================================


class KotlinAdapter(BaseLanguageAdapter):
    """Kotlin classes, objects, functions and imports."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="kotlin",
            display_name="Kotlin",
            aliases=["kt"],
            extensions=[".kt", ".kts"],
            default_grammar="kotlin",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "classDeclaration",
                "(class_declaration (type_identifier) @name) @def",
                "class",
                self._name,
            ),
            SymbolPattern(
                "objectDeclaration",
                "(object_declaration (type_identifier) @name) @def",
                "object",
                self._name,
            ),
            SymbolPattern(
                "functionDeclaration",
                "(function_declaration (simple_identifier) @name (function_value_parameters) @params) @def",
                "function",
                self._name_and_params,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "importStatement",
                "(import_header (identifier) @module) @ref",
                _module,
            ),
            ReferencePattern(
                "functionCall",
                "(call_expression (simple_identifier) @func (call_suffix) @args) @ref",
                _call,
            ),
        ]

    def parse_parameter_list(self, text: str) -> List[str]:
        return _names_before_colon(text)


# =============================================================================
# Scala
# =============================================================================


class ScalaAdapter(BaseLanguageAdapter):
    """Scala classes, objects, traits, functions and imports."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="scala",
            display_name="Scala",
            extensions=[".scala", ".sc"],
            default_grammar="scala",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "classDefinition",
                "(class_definition name: (identifier) @name) @def",
                "class",
                self._name,
            ),
            SymbolPattern(
                "objectDefinition",
                "(object_definition name: (identifier) @name) @def",
                "object",
                self._name,
            ),
            SymbolPattern(
                "traitDefinition",
                "(trait_definition name: (identifier) @name) @def",
                "trait",
                self._name,
            ),
            SymbolPattern(
                "functionDefinition",
                "(function_definition name: (identifier) @name parameters: (parameters) @params) @def",
                "function",
                self._name_and_params,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "importStatement",
                "(import_declaration) @ref",
                lambda m: {"module": m.text().split(None, 1)[-1]},
            ),
            ReferencePattern(
                "functionCall",
                "(call_expression function: (identifier) @func arguments: (arguments) @args) @ref",
                _call,
            ),
        ]

    def parse_parameter_list(self, text: str) -> List[str]:
        return _names_before_colon(text)


# =============================================================================
# Lua
# =============================================================================


class LuaAdapter(BaseLanguageAdapter):
    """Lua functions and ``require`` calls."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="lua",
            display_name="Lua",
            extensions=[".lua"],
            default_grammar="lua",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "functionDeclaration",
                """(function_declaration
                    name: [(identifier) (dot_index_expression) (method_index_expression)] @name
                    parameters: (parameters) @params) @def""",
                "function",
                self._name_and_params,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "require",
                """(function_call
                    name: (identifier) @function
                    arguments: (arguments (string) @module)
                    (#eq? @function "require")) @ref""",
                _module,
            ),
            ReferencePattern(
                "functionCall",
                "(function_call name: (identifier) @func arguments: (arguments) @args) @ref",
                _call,
            ),
        ]


# =============================================================================
# Elixir
# =============================================================================


class ElixirAdapter(BaseLanguageAdapter):
    """Elixir modules, functions and module directives."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="elixir",
            display_name="Elixir",
            aliases=["ex"],
            extensions=[".ex", ".exs"],
            default_grammar="elixir",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "moduleDefinition",
                """(call
                    target: (identifier) @keyword
                    (arguments (alias) @name)
                    (#eq? @keyword "defmodule")) @def""",
                "module",
                self._name,
            ),
            SymbolPattern(
                "functionDefinition",
                """(call
                    target: (identifier) @keyword
                    (arguments (call target: (identifier) @name (arguments)? @params))
                    (#match? @keyword "^defp?$")) @def""",
                "function",
                lambda m: {
                    **self._name_and_params(m),
                    "private": m.text("keyword") == "defp",
                },
            ),
            SymbolPattern(
                "macroDefinition",
                """(call
                    target: (identifier) @keyword
                    (arguments (call target: (identifier) @name))
                    (#match? @keyword "^defmacrop?$")) @def""",
                "macro",
                self._name,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            self._directive("aliasDirective", "alias"),
            self._directive("importStatement", "import"),
            self._directive("require", "require"),
            self._directive("useStatement", "use"),
        ]

    @staticmethod
    def _directive(pattern_id: str, keyword: str) -> ReferencePattern:
        return ReferencePattern(
            pattern_id,
            f"""(call
                target: (identifier) @keyword
                (arguments (alias) @module)
                (#eq? @keyword "{keyword}")) @ref""",
            _module,
        )


# =============================================================================
# Haskell
# =============================================================================


class HaskellAdapter(BaseLanguageAdapter):
    """Haskell functions, data types, type classes and imports."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="haskell",
            display_name="Haskell",
            aliases=["hs"],
            extensions=[".hs", ".lhs"],
            default_grammar="haskell",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "functionDefinition",
                "(function name: (variable) @name) @def",
                "function",
                self._name,
            ),
            SymbolPattern(
                "typeSignature",
                "(signature name: (variable) @name) @def",
                "function",
                self._name,
            ),
            SymbolPattern(
                "dataType",
                "(data_type name: (name) @name) @def",
                "data",
                self._name,
            ),
            SymbolPattern(
                "newtype",
                "(newtype name: (name) @name) @def",
                "type",
                self._name,
            ),
            SymbolPattern(
                "typeClass",
                "(class name: (name) @name) @def",
                "class",
                self._name,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "importStatement",
                "(import module: (module) @module) @ref",
                _module,
            ),
        ]


# =============================================================================
# Bash
# =============================================================================


class BashAdapter(BaseLanguageAdapter):
    """Shell functions, exported variables and ``source`` commands."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="bash",
            display_name="Bash",
            aliases=["sh", "shell"],
            extensions=[".sh", ".bash", ".zsh", ".ksh"],
            default_grammar="bash",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "functionDefinition",
                "(function_definition name: (word) @name) @def",
                "function",
                self._name,
            ),
            SymbolPattern(
                "declaredVariable",
                "(declaration_command (variable_assignment name: (variable_name) @name)) @def",
                "variable",
                self._name,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "sourceCommand",
                """(command
                    name: (command_name) @command
                    argument: (_) @module
                    (#match? @command "^(source|\\\\.)$")) @ref""",
                _module,
            ),
        ]

    def infer_kind(self, name: str, default_kind: str) -> str:
        """UPPER_CASE declared variables are constants."""
        if default_kind == "variable" and _CONSTANT_NAME.match(name):
            return "constant"
        return default_kind


# =============================================================================
# CSS
# =============================================================================


class CssAdapter(BaseLanguageAdapter):
    """Rule sets, keyframes, custom properties and ``@import``."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="css",
            display_name="CSS",
            extensions=[".css", ".scss", ".sass", ".less", ".styl"],
            default_grammar="css",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "customProperty",
                """(declaration (property_name) @name (#match? @name "^--")) @def""",
                "variable",
                self._name,
            ),
            SymbolPattern(
                "keyframes",
                "(keyframes_statement (keyframes_name) @name) @def",
                "keyframes",
                self._name,
            ),
            SymbolPattern(
                "ruleSet",
                "(rule_set (selectors) @name) @def",
                "selector",
                self._name,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "cssImport",
                "(import_statement (string_value) @module) @ref",
                _module,
            ),
        ]


# =============================================================================
# HTML
# =============================================================================


class HtmlAdapter(BaseLanguageAdapter):
    """Elements with an ``id`` plus script and link targets."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="html",
            display_name="HTML",
            extensions=[".html", ".htm", ".xhtml", ".vue", ".svelte"],
            default_grammar="html",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "elementId",
                """(element
                    (start_tag
                        (tag_name) @tag
                        (attribute
                            (attribute_name) @attribute
                            (quoted_attribute_value (attribute_value) @name)))
                    (#eq? @attribute "id")) @def""",
                "element",
                lambda m: {"name": m.text("name"), "tag": m.text("tag")},
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "scriptSource",
                """(script_element
                    (start_tag
                        (attribute
                            (attribute_name) @attribute
                            (quoted_attribute_value (attribute_value) @module)))
                    (#eq? @attribute "src")) @ref""",
                _module,
            ),
            ReferencePattern(
                "linkHref",
                """(element
                    (start_tag
                        (tag_name) @tag
                        (attribute
                            (attribute_name) @attribute
                            (quoted_attribute_value (attribute_value) @module)))
                    (#eq? @tag "link")
                    (#eq? @attribute "href")) @ref""",
                _module,
            ),
        ]


# =============================================================================
# SQL
# =============================================================================


class SqlAdapter(BaseLanguageAdapter):
    """``CREATE`` statements and table references."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="sql",
            display_name="SQL",
            extensions=[".sql", ".psql", ".pgsql", ".plsql", ".mysql"],
            default_grammar="sql",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "createTable",
                "(create_table (object_reference name: (identifier) @name)) @def",
                "table",
                self._name,
            ),
            SymbolPattern(
                "createView",
                "(create_view (object_reference name: (identifier) @name)) @def",
                "view",
                self._name,
            ),
            SymbolPattern(
                "createFunction",
                "(create_function (object_reference name: (identifier) @name)) @def",
                "function",
                self._name,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "tableReference",
                "(relation (object_reference name: (identifier) @module)) @ref",
                _module,
            ),
        ]


# =============================================================================
# Dart
# =============================================================================


class DartAdapter(BaseLanguageAdapter):
    """Dart files are walked and indexed with the regex fallback."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="dart",
            display_name="Dart",
            extensions=[".dart"],
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return []
