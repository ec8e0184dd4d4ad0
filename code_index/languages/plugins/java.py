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

"""Java language adapter."""

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


class JavaAdapter(BaseLanguageAdapter):
    """Java types, members and imports."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="java",
            display_name="Java",
            extensions=[".java"],
            default_grammar="java",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "classDeclaration",
                """(class_declaration
                    name: (identifier) @name
                    superclass: (superclass (_) @parent)?
                    interfaces: (super_interfaces (type_list) @interfaces)?) @def""",
                "class",
                self._class,
            ),
            SymbolPattern(
                "interfaceDeclaration",
                "(interface_declaration name: (identifier) @name) @def",
                "interface",
                self._name,
            ),
            SymbolPattern(
                "enumDeclaration",
                "(enum_declaration name: (identifier) @name) @def",
                "enum",
                self._name,
            ),
            SymbolPattern(
                "recordDeclaration",
                "(record_declaration name: (identifier) @name parameters: (formal_parameters) @params) @def",
                "record",
                self._name_and_params,
            ),
            SymbolPattern(
                "annotationDefinition",
                "(annotation_type_declaration name: (identifier) @name) @def",
                "annotation",
                self._name,
            ),
            SymbolPattern(
                "methodDeclaration",
                """(method_declaration
                    type: (_) @returns
                    name: (identifier) @name
                    parameters: (formal_parameters) @params) @def""",
                "method",
                self._method,
            ),
            SymbolPattern(
                "constructorDeclaration",
                "(constructor_declaration name: (identifier) @name parameters: (formal_parameters) @params) @def",
                "constructor",
                self._name_and_params,
                context="class_body",
            ),
            SymbolPattern(
                "fieldDeclaration",
                """(field_declaration
                    type: (_) @type
                    declarator: (variable_declarator name: (identifier) @name)) @def""",
                "field",
                lambda m: {"name": m.text("name"), "type": m.text("type")},
            ),
            SymbolPattern(
                "packageDeclaration",
                "(package_declaration [(scoped_identifier) (identifier)] @name) @def",
                "package",
                self._name,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "importStatement",
                "(import_declaration [(scoped_identifier) (identifier)] @module) @ref",
                lambda m: {
                    "module": m.text("module"),
                    "static": " static " in f" {m.text()} ",
                    "wildcard": m.text().rstrip(";").rstrip().endswith("*"),
                },
            ),
            ReferencePattern(
                "methodCall",
                """(method_invocation
                    object: (_)? @receiver
                    name: (identifier) @func
                    arguments: (argument_list) @args) @ref""",
                lambda m: {
                    "func": m.text("func"),
                    "receiver": m.text("receiver"),
                    "args": m.text("args"),
                },
            ),
            ReferencePattern(
                "constructorCall",
                "(object_creation_expression type: (_) @func arguments: (argument_list) @args) @ref",
                lambda m: {"func": m.text("func"), "args": m.text("args")},
            ),
        ]

    def _class(self, match) -> Dict[str, Any]:
        fields: Dict[str, Any] = {"name": match.text("name")}
        if match.text("parent"):
            fields["extends"] = match.text("parent")
        if match.text("interfaces"):
            fields["implements"] = split_parameters(match.text("interfaces"))
        return fields

    def _method(self, match) -> Dict[str, Any]:
        fields = self._name_and_params(match)
        fields["returns"] = match.text("returns")
        return fields

    def parse_parameter_list(self, text: str) -> List[str]:
        """Java parameters are ``[annotations] [modifiers] type name``."""
        names = []
        for param in split_parameters(text):
            parts = param.split()
            if parts:
                names.append(parts[-1])
        return names

    def infer_kind(self, name: str, default_kind: str) -> str:
        """UPPER_CASE fields are constants."""
        if default_kind == "field" and _CONSTANT_NAME.match(name):
            return "constant"
        return default_kind
