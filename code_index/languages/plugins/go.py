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

"""Go language adapter."""

from typing import Any, Dict, List

from code_index.languages.base import (
    BaseLanguageAdapter,
    LanguageConfig,
    ReferencePattern,
    SymbolPattern,
    split_parameters,
)


class GoAdapter(BaseLanguageAdapter):
    """Go functions, methods, types, constants and variables."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="go",
            display_name="Go",
            aliases=["golang"],
            extensions=[".go"],
            default_grammar="go",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "functionDeclaration",
                "(function_declaration name: (identifier) @name parameters: (parameter_list) @params) @def",
                "function",
                self._name_and_params,
            ),
            SymbolPattern(
                "methodDeclaration",
                """(method_declaration
                    receiver: (parameter_list) @receiver
                    name: (field_identifier) @name
                    parameters: (parameter_list) @params) @def""",
                "method",
                self._method,
            ),
            SymbolPattern(
                "structDeclaration",
                "(type_declaration (type_spec name: (type_identifier) @name type: (struct_type))) @def",
                "struct",
                self._name,
            ),
            SymbolPattern(
                "interfaceDeclaration",
                "(type_declaration (type_spec name: (type_identifier) @name type: (interface_type))) @def",
                "interface",
                self._name,
            ),
            SymbolPattern(
                "typeAlias",
                "(type_declaration (type_alias name: (type_identifier) @name)) @def",
                "type",
                self._name,
            ),
            SymbolPattern(
                "typeDefinition",
                "(type_declaration (type_spec name: (type_identifier) @name)) @def",
                "type",
                self._name,
            ),
            SymbolPattern(
                "constDeclaration",
                "(const_declaration (const_spec name: (identifier) @name)) @def",
                "constant",
                self._name,
            ),
            SymbolPattern(
                "varDeclaration",
                "(var_declaration (var_spec name: (identifier) @name)) @def",
                "variable",
                self._name,
            ),
            SymbolPattern(
                "packageDeclaration",
                "(package_clause (package_identifier) @name) @def",
                "package",
                self._name,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "singleImport",
                "(import_spec name: (_)? @alias path: (interpreted_string_literal) @module) @ref",
                lambda m: {"module": self._unquote(m.text("module")), "alias": m.text("alias")},
            ),
            ReferencePattern(
                "functionCall",
                """(call_expression
                    function: [(identifier) (selector_expression)] @func
                    arguments: (argument_list) @args) @ref""",
                lambda m: {"func": m.text("func"), "args": m.text("args")},
            ),
        ]

    def _method(self, match) -> Dict[str, Any]:
        fields = self._name_and_params(match)
        fields["receiver"] = match.text("receiver").strip("()")
        return fields

    def parse_parameter_list(self, text: str) -> List[str]:
        """Go parameters are ``name type``; keep the leading name."""
        names = []
        for param in split_parameters(text):
            parts = param.split()
            if parts:
                names.append(parts[0])
        return names
