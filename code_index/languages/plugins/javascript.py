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

"""JavaScript/TypeScript language adapter.

One adapter covers .js/.jsx/.mjs/.cjs (javascript grammar), .ts (typescript)
and .tsx (tsx). TypeScript-only patterns fail to compile against the
javascript grammar and are skipped for those files.
"""

import re
from typing import Any, Dict, List

from code_index.languages.base import (
    BaseLanguageAdapter,
    LanguageConfig,
    ReferencePattern,
    SymbolPattern,
)

_COMPONENT_NAME = re.compile(r"^[A-Z]")
_HOOK_NAME = re.compile(r"^use[A-Z]")


class JavaScriptAdapter(BaseLanguageAdapter):
    """JavaScript and TypeScript, including React conventions.

    Kinds: function, class, method, constant, variable, hook, component,
    interface, type, enum, export.
    """

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="javascript",
            display_name="JavaScript/TypeScript",
            aliases=["js", "jsx", "ts", "tsx", "typescript"],
            extensions=[".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx"],
            grammars={".ts": "typescript", ".tsx": "tsx"},
            default_grammar="javascript",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "functionDeclaration",
                "(function_declaration name: (identifier) @name"
                " parameters: (formal_parameters) @params) @def",
                "function",
                self._function,
            ),
            SymbolPattern(
                "arrowFunction",
                """(lexical_declaration kind: "const"
                    (variable_declarator
                        name: (identifier) @name
                        value: (arrow_function
                            [parameters: (formal_parameters) @params
                             parameter: (identifier) @params]))) @def""",
                "function",
                self._name_and_params,
            ),
            SymbolPattern(
                "asyncFunctionDeclaration",
                '(function_declaration "async" name: (identifier) @name'
                " parameters: (formal_parameters) @params) @def",
                "function",
                self._async_function,
            ),
            SymbolPattern(
                "classDeclaration",
                "(class_declaration name: (_) @name) @def",
                "class",
                self._name,
            ),
            SymbolPattern(
                "classWithExtends",
                "(class_declaration name: (_) @name (class_heritage) @parent) @def",
                "class",
                self._class_with_extends,
            ),
            SymbolPattern(
                "methodDefinition",
                "(method_definition name: (_) @name parameters: (formal_parameters) @params) @def",
                "method",
                self._name_and_params,
                context="class_body",
            ),
            SymbolPattern(
                "constDeclaration",
                """(lexical_declaration kind: "const"
                    (variable_declarator name: (identifier) @name value: (_))) @def""",
                "constant",
                self._name,
            ),
            SymbolPattern(
                "variableDeclaration",
                """[(lexical_declaration kind: "let"
                     (variable_declarator name: (identifier) @name))
                    (variable_declaration
                     (variable_declarator name: (identifier) @name))] @def""",
                "variable",
                self._name,
            ),
            SymbolPattern(
                "reactHook",
                """(lexical_declaration
                    (variable_declarator
                        name: (array_pattern . (identifier) @name . (identifier) @setter)
                        value: (call_expression function: (identifier) @hook))
                    (#eq? @hook "useState")) @def""",
                "hook",
                self._react_hook,
            ),
            SymbolPattern(
                "reactComponent",
                """(function_declaration
                    name: (identifier) @name
                    parameters: (formal_parameters) @params
                    body: (statement_block
                        (return_statement
                            [(jsx_element) (jsx_self_closing_element)
                             (parenthesized_expression [(jsx_element) (jsx_self_closing_element)])]))) @def""",
                "component",
                self._react_component,
            ),
            SymbolPattern(
                "tsInterface",
                "(interface_declaration name: (type_identifier) @name) @def",
                "interface",
                self._name,
            ),
            SymbolPattern(
                "tsTypeAlias",
                "(type_alias_declaration name: (type_identifier) @name) @def",
                "type",
                self._name,
            ),
            SymbolPattern(
                "tsEnum",
                "(enum_declaration name: (identifier) @name) @def",
                "enum",
                self._name,
            ),
            SymbolPattern(
                "moduleExports",
                """(expression_statement
                    (assignment_expression
                        left: (member_expression
                            object: (identifier) @object
                            property: (property_identifier) @property)
                        right: (_) @value)
                    (#eq? @object "module")
                    (#eq? @property "exports")) @def""",
                "export",
                lambda m: {"value": m.text("value")},
            ),
            SymbolPattern(
                "namedExport",
                "(export_statement (export_clause) @names) @def",
                "export",
                lambda m: {"names": m.text("names")},
            ),
            SymbolPattern(
                "exportDefault",
                """(export_statement "default"
                    [value: (_) @value declaration: (_) @value]) @def""",
                "export",
                lambda m: {"default": True, "value": m.text("value")},
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "require",
                """(call_expression
                    function: (identifier) @function
                    arguments: (arguments . (string) @module)
                    (#eq? @function "require")) @ref""",
                lambda m: {"module": self._unquote(m.text("module"))},
            ),
            ReferencePattern(
                "importDeclaration",
                "(import_statement (import_clause)? @imports source: (string) @module) @ref",
                lambda m: {
                    "imports": m.text("imports"),
                    "module": self._unquote(m.text("module")),
                },
            ),
            ReferencePattern(
                "dynamicImport",
                "(call_expression function: (import) arguments: (arguments . (string) @module)) @ref",
                lambda m: {"module": self._unquote(m.text("module"))},
            ),
            ReferencePattern(
                "functionCall",
                """(call_expression
                    function: [(identifier) (member_expression)] @func
                    arguments: (arguments) @args) @ref""",
                lambda m: {"func": m.text("func"), "args": m.text("args")},
            ),
        ]

    def _function(self, match) -> Dict[str, Any]:
        fields = self._name_and_params(match)
        if match.text().startswith("async"):
            fields["async"] = True
        return fields

    def _async_function(self, match) -> Dict[str, Any]:
        fields = self._name_and_params(match)
        fields["async"] = True
        return fields

    def _class_with_extends(self, match) -> Dict[str, Any]:
        parent = match.text("parent")
        return {"name": match.text("name"), "extends": re.sub(r"^extends\s+", "", parent)}

    def _react_hook(self, match) -> Dict[str, Any]:
        return {"name": match.text("name"), "setter": match.text("setter"), "type": "useState"}

    def _react_component(self, match) -> Dict[str, Any]:
        return {
            "name": match.text("name"),
            "hasProps": bool(self.parse_parameter_list(match.text("params"))),
        }

    def infer_kind(self, name: str, default_kind: str) -> str:
        """PascalCase functions are components, ``useX`` functions are hooks."""
        if default_kind == "function":
            if _COMPONENT_NAME.match(name):
                return "component"
            if _HOOK_NAME.match(name):
                return "hook"
        return default_kind
