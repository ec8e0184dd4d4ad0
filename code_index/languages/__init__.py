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

"""Language adapters for the index builder.

Architecture:
    ┌─────────────────────────────────────────────────────────────┐
    │                   Language Registry                          │
    │  (Maps file extensions to language adapters)                │
    └─────────────────────────────────────────────────────────────┘
                              │
          ┌───────────────────┼───────────────────┐
          ▼                   ▼                   ▼
    ┌───────────┐       ┌───────────┐       ┌───────────┐
    │ JavaScript│       │  Python   │       │    Go     │  ...
    │  Adapter  │       │  Adapter  │       │  Adapter  │
    └───────────┘       └───────────┘       └───────────┘

Each adapter provides:
- File extension to tree-sitter grammar mappings
- Ordered symbol patterns (first match wins per file and name)
- Reference patterns for imports and calls
- A parameter-list parser and a naming-convention hook
"""

from code_index.languages.base import (
    BaseLanguageAdapter,
    LanguageAdapter,
    LanguageConfig,
    ReferencePattern,
    SymbolPattern,
)
from code_index.languages.registry import LanguageRegistry, get_language_registry

__all__ = [
    "BaseLanguageAdapter",
    "LanguageAdapter",
    "LanguageConfig",
    "ReferencePattern",
    "SymbolPattern",
    "LanguageRegistry",
    "get_language_registry",
]
