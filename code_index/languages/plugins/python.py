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

"""Python language adapter."""

import re
from typing import Any, Dict, List

from code_index.languages.base import (
    BaseLanguageAdapter,
    LanguageConfig,
    ReferencePattern,
    SymbolPattern,
    split_parameters,
    strip_annotation_and_default,
)

_CONSTANT_NAME = re.compile(r"^[A-Z_][A-Z0-9_]*$")


class PythonAdapter(BaseLanguageAdapter):
    """Python functions, methods, classes and module-level assignments."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="python",
            display_name="Python",
            aliases=["py"],
            extensions=[".py", ".pyw", ".pyi"],
            default_grammar="python",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "methodDefinition",
                "(function_definition name: (identifier) @name parameters: (parameters) @params) @def",
                "method",
                self._function,
                context="class_definition",
            ),
            SymbolPattern(
                "functionDefinition",
                "(function_definition name: (identifier) @name parameters: (parameters) @params) @def",
                "function",
                self._function,
            ),
            SymbolPattern(
                "classDefinition",
                "(class_definition name: (identifier) @name superclasses: (argument_list)? @bases) @def",
                "class",
                self._class,
            ),
            SymbolPattern(
                "variableAssignment",
                "(module (expression_statement (assignment left: (identifier) @name)) @def)",
                "variable",
                self._name,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "importStatement",
                """(import_statement
                    name: [(dotted_name) @module
                           (aliased_import name: (dotted_name) @module)]) @ref""",
                lambda m: {"module": m.text("module")},
            ),
            ReferencePattern(
                "fromImport",
                """(import_from_statement
                    module_name: [(dotted_name) (relative_import)] @module) @ref""",
                lambda m: {"module": m.text("module")},
            ),
            ReferencePattern(
                "functionCall",
                """(call
                    function: [(identifier) (attribute)] @func
                    arguments: (argument_list) @args) @ref""",
                lambda m: {"func": m.text("func"), "args": m.text("args")},
            ),
        ]

    def _function(self, match) -> Dict[str, Any]:
        fields = self._name_and_params(match)
        if match.text().startswith("async"):
            fields["async"] = True
        return fields

    def _class(self, match) -> Dict[str, Any]:
        return {"name": match.text("name"), "bases": split_parameters(match.text("bases"))}

    def parse_parameter_list(self, text: str) -> List[str]:
        """Drop annotations, defaults, ``*``/``**`` sigils and self/cls."""
        names = []
        for param in split_parameters(text):
            name = strip_annotation_and_default(param).lstrip("*").strip()
            if name and name not in ("self", "cls", "/"):
                names.append(name)
        return names

    def infer_kind(self, name: str, default_kind: str) -> str:
        """UPPER_CASE module variables are constants."""
        if default_kind == "variable" and _CONSTANT_NAME.match(name):
            return "constant"
        return default_kind
