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

"""C and C++ language adapters."""

import re
from typing import Any, Dict, List

from code_index.languages.base import (
    BaseLanguageAdapter,
    LanguageConfig,
    ReferencePattern,
    SymbolPattern,
    split_parameters,
)

_DECLARATOR_NOISE = re.compile(r"[*&\[\]]|\.\.\.")
_CONSTANT_NAME = re.compile(r"^[A-Z_][A-Z0-9_]*$")


def c_parameter_names(text: str) -> List[str]:
    """``type name`` parameters; pointer and array sigils are dropped.

    ``(void)`` and unnamed parameters yield nothing.
    """
    names = []
    for param in split_parameters(text):
        param = param.split("=", 1)[0]
        parts = _DECLARATOR_NOISE.sub(" ", param).split()
        if len(parts) >= 2:
            names.append(parts[-1])
    return names


class CAdapter(BaseLanguageAdapter):
    """C functions, prototypes, aggregates, typedefs and macros."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="c",
            display_name="C",
            extensions=[".c", ".h"],
            default_grammar="c",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "functionDefinition",
                """(function_definition
                    declarator: (function_declarator
                        declarator: (identifier) @name
                        parameters: (parameter_list) @params)) @def""",
                "function",
                self._name_and_params,
            ),
            SymbolPattern(
                "pointerFunctionDefinition",
                """(function_definition
                    declarator: (pointer_declarator
                        declarator: (function_declarator
                            declarator: (identifier) @name
                            parameters: (parameter_list) @params))) @def""",
                "function",
                self._name_and_params,
            ),
            SymbolPattern(
                "functionPrototype",
                """(declaration
                    declarator: (function_declarator
                        declarator: (identifier) @name
                        parameters: (parameter_list) @params)) @def""",
                "prototype",
                self._name_and_params,
            ),
            SymbolPattern(
                "structDefinition",
                "(struct_specifier name: (type_identifier) @name body: (field_declaration_list)) @def",
                "struct",
                self._name,
            ),
            SymbolPattern(
                "unionDefinition",
                "(union_specifier name: (type_identifier) @name body: (field_declaration_list)) @def",
                "union",
                self._name,
            ),
            SymbolPattern(
                "enumDefinition",
                "(enum_specifier name: (type_identifier) @name body: (enumerator_list)) @def",
                "enum",
                self._name,
            ),
            SymbolPattern(
                "typedefDeclaration",
                "(type_definition declarator: (type_identifier) @name) @def",
                "typedef",
                self._name,
            ),
            SymbolPattern(
                "macroDefinition",
                "(preproc_def name: (identifier) @name) @def",
                "macro",
                self._name,
            ),
            SymbolPattern(
                "functionMacro",
                "(preproc_function_def name: (identifier) @name parameters: (preproc_params) @params) @def",
                "macro",
                self._name_and_params,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "includeDirective",
                "(preproc_include path: [(string_literal) (system_lib_string)] @module) @ref",
                lambda m: {"module": m.text("module").strip("\"<>")},
            ),
            ReferencePattern(
                "functionCall",
                "(call_expression function: (identifier) @func arguments: (argument_list) @args) @ref",
                lambda m: {"func": m.text("func"), "args": m.text("args")},
            ),
        ]

    def parse_parameter_list(self, text: str) -> List[str]:
        return c_parameter_names(text)

    def infer_kind(self, name: str, default_kind: str) -> str:
        """Object-like macros in UPPER_CASE are constants."""
        if default_kind == "macro" and _CONSTANT_NAME.match(name):
            return "constant"
        return default_kind


class CppAdapter(CAdapter):
    """C++ adds classes, namespaces, member functions and ``new``."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="cpp",
            display_name="C++",
            aliases=["c++", "cxx"],
            extensions=[".cpp", ".cc", ".cxx", ".hpp", ".hh", ".hxx"],
            default_grammar="cpp",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "classDefinition",
                """(class_specifier
                    name: (type_identifier) @name
                    (base_class_clause)? @bases
                    body: (field_declaration_list)) @def""",
                "class",
                self._class,
            ),
            SymbolPattern(
                "namespaceDefinition",
                "(namespace_definition name: (namespace_identifier) @name) @def",
                "namespace",
                self._name,
            ),
            SymbolPattern(
                "inlineMethod",
                """(function_definition
                    declarator: (function_declarator
                        declarator: (field_identifier) @name
                        parameters: (parameter_list) @params)) @def""",
                "method",
                self._name_and_params,
            ),
            SymbolPattern(
                "qualifiedMethod",
                """(function_definition
                    declarator: (function_declarator
                        declarator: (qualified_identifier
                            scope: (namespace_identifier) @scope
                            name: (identifier) @name)
                        parameters: (parameter_list) @params)) @def""",
                "method",
                self._qualified_method,
            ),
        ] + super()._create_symbol_patterns()

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return super()._create_reference_patterns() + [
            ReferencePattern(
                "methodCall",
                """(call_expression
                    function: (field_expression field: (field_identifier) @func)
                    arguments: (argument_list) @args) @ref""",
                lambda m: {"func": m.text("func"), "args": m.text("args")},
            ),
            ReferencePattern(
                "constructorCall",
                "(new_expression type: (type_identifier) @func) @ref",
                lambda m: {"func": m.text("func")},
            ),
        ]

    def _class(self, match) -> Dict[str, Any]:
        bases = match.text("bases").lstrip(":")
        return {
            "name": match.text("name"),
            "bases": [b.split()[-1] for b in split_parameters(bases) if b.split()],
        }

    def _qualified_method(self, match) -> Dict[str, Any]:
        fields = self._name_and_params(match)
        fields["scope"] = match.text("scope")
        return fields
