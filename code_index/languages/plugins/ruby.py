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

"""Ruby language adapter."""

import re
from typing import Any, Dict, List

from code_index.languages.base import (
    BaseLanguageAdapter,
    LanguageConfig,
    ReferencePattern,
    SymbolPattern,
    split_parameters,
)

_CONSTANT_NAME = re.compile(r"^[A-Z]")


class RubyAdapter(BaseLanguageAdapter):
    """Ruby classes, modules, methods, attributes and constants."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="ruby",
            display_name="Ruby",
            aliases=["rb"],
            extensions=[".rb", ".rake", ".gemspec", ".ru"],
            default_grammar="ruby",
        )

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "classDefinition",
                "(class name: (_) @name superclass: (superclass (_) @parent)?) @def",
                "class",
                self._class,
            ),
            SymbolPattern(
                "moduleDefinition",
                "(module name: (_) @name) @def",
                "module",
                self._name,
            ),
            SymbolPattern(
                "singletonMethod",
                "(singleton_method name: (_) @name parameters: (method_parameters)? @params) @def",
                "singleton_method",
                self._name_and_params,
            ),
            SymbolPattern(
                "methodDefinition",
                "(method name: (_) @name parameters: (method_parameters)? @params) @def",
                "method",
                self._name_and_params,
            ),
            SymbolPattern(
                "attrAccessor",
                """(call
                    method: (identifier) @macro
                    arguments: (argument_list (simple_symbol) @name)
                    (#match? @macro "^attr_(accessor|reader|writer)$")) @def""",
                "attribute",
                lambda m: {"name": m.text("name").lstrip(":"), "access": m.text("macro")[5:]},
            ),
            SymbolPattern(
                "constantAssignment",
                "(assignment left: (constant) @name) @def",
                "variable",
                self._name,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "requireStatement",
                """(call
                    method: (identifier) @function
                    arguments: (argument_list . (string) @module)
                    (#match? @function "^(require|require_relative|load)$")) @ref""",
                lambda m: {
                    "module": self._unquote(m.text("module")),
                    "relative": m.text("function") == "require_relative",
                },
            ),
            ReferencePattern(
                "includeModule",
                """(call
                    method: (identifier) @function
                    arguments: (argument_list . [(constant) (scope_resolution)] @module)
                    (#match? @function "^(include|extend|prepend)$")) @ref""",
                lambda m: {"module": m.text("module"), "mixin": m.text("function")},
            ),
            ReferencePattern(
                "methodCall",
                "(call receiver: (_) @receiver method: (identifier) @func) @ref",
                lambda m: {"func": m.text("func"), "receiver": m.text("receiver")},
            ),
        ]

    def _class(self, match) -> Dict[str, Any]:
        fields: Dict[str, Any] = {"name": match.text("name")}
        if match.text("parent"):
            fields["extends"] = match.text("parent")
        return fields

    def parse_parameter_list(self, text: str) -> List[str]:
        """Drop splats, block sigils, defaults and keyword colons."""
        names = []
        for param in split_parameters(text):
            name = param.lstrip("*&").split("=", 1)[0].split(":", 1)[0].strip()
            if name:
                names.append(name)
        return names

    def infer_kind(self, name: str, default_kind: str) -> str:
        """Capitalized assignments are constants."""
        if default_kind == "variable" and _CONSTANT_NAME.match(name):
            return "constant"
        return default_kind
