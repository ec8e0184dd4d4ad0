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

"""Rust language adapter."""

import re
from typing import Any, Dict, List

from code_index.languages.base import (
    BaseLanguageAdapter,
    LanguageConfig,
    ReferencePattern,
    SymbolPattern,
    split_parameters,
)

_BORROW_PREFIX = re.compile(r"^(&\s*mut\s+|&\s*|mut\s+)")


class RustAdapter(BaseLanguageAdapter):
    """Rust items: functions, structs, enums, traits, impls, modules, macros."""

    def _create_config(self) -> LanguageConfig:
        return LanguageConfig(
            name="rust",
            display_name="Rust",
            aliases=["rs"],
            extensions=[".rs"],
            default_grammar="rust",
        )

    def _item(self, match) -> Dict[str, Any]:
        return {"name": match.text("name"), "public": match.text().startswith("pub")}

    def _create_symbol_patterns(self) -> List[SymbolPattern]:
        return [
            SymbolPattern(
                "functionDeclaration",
                "(function_item name: (identifier) @name parameters: (parameters) @params) @def",
                "function",
                self._function,
            ),
            SymbolPattern(
                "structDeclaration",
                "(struct_item name: (type_identifier) @name) @def",
                "struct",
                self._item,
            ),
            SymbolPattern(
                "enumDeclaration",
                "(enum_item name: (type_identifier) @name) @def",
                "enum",
                self._item,
            ),
            SymbolPattern(
                "traitDeclaration",
                "(trait_item name: (type_identifier) @name) @def",
                "trait",
                self._item,
            ),
            SymbolPattern(
                "implTrait",
                "(impl_item trait: (_) @trait type: (_) @type) @def",
                "impl",
                lambda m: {
                    "name": f"impl {m.text('trait')} for {m.text('type')}",
                    "trait": m.text("trait"),
                    "type": m.text("type"),
                },
            ),
            SymbolPattern(
                "implBlock",
                "(impl_item type: (_) @type) @def",
                "impl",
                lambda m: {"name": f"impl {m.text('type')}", "type": m.text("type")},
            ),
            SymbolPattern(
                "typeAlias",
                "(type_item name: (type_identifier) @name) @def",
                "type",
                self._item,
            ),
            SymbolPattern(
                "constDeclaration",
                "(const_item name: (identifier) @name) @def",
                "constant",
                self._item,
            ),
            SymbolPattern(
                "staticDeclaration",
                "(static_item name: (identifier) @name) @def",
                "static",
                self._item,
            ),
            SymbolPattern(
                "modDeclaration",
                "(mod_item name: (identifier) @name) @def",
                "module",
                self._item,
            ),
            SymbolPattern(
                "macroDefinition",
                "(macro_definition name: (identifier) @name) @def",
                "macro",
                self._name,
            ),
        ]

    def _create_reference_patterns(self) -> List[ReferencePattern]:
        return [
            ReferencePattern(
                "useStatement",
                "(use_declaration argument: (_) @module) @ref",
                lambda m: {"module": m.text("module")},
            ),
            ReferencePattern(
                "externCrate",
                "(extern_crate_declaration name: (identifier) @module) @ref",
                lambda m: {"module": m.text("module")},
            ),
            ReferencePattern(
                "functionCall",
                """(call_expression
                    function: [(identifier) (scoped_identifier) (field_expression)] @func
                    arguments: (arguments) @args) @ref""",
                lambda m: {"func": m.text("func"), "args": m.text("args")},
            ),
            ReferencePattern(
                "macroInvocation",
                "(macro_invocation macro: (identifier) @func) @ref",
                lambda m: {"func": m.text("func")},
            ),
        ]

    def _function(self, match) -> Dict[str, Any]:
        fields = self._name_and_params(match)
        fields["public"] = match.text().startswith("pub")
        if re.match(r"^(pub(\([^)]*\))?\s+)?async\b", match.text()):
            fields["async"] = True
        return fields

    def parse_parameter_list(self, text: str) -> List[str]:
        """Drop types, borrow/mut modifiers and the self receiver."""
        names = []
        for param in split_parameters(text):
            name = param.split(":", 1)[0].strip()
            name = _BORROW_PREFIX.sub("", name).strip()
            if name and name != "self":
                names.append(name)
        return names
