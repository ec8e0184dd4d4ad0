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

"""Data model for the code index.

Symbols and references keep whatever extra fields the language extractors
produce (parameters, base classes, module names, ...) as pydantic extras, so
the cache round-trips them without a per-language schema.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Fields owned by the builder; extractor output never overrides them
CORE_SYMBOL_FIELDS = frozenset(
    {"id", "file", "kind", "start_line", "end_line", "exported", "exports", "content_hash"}
)


class Symbol(BaseModel):
    """A named, locatable code entity extracted from a source file.

    Note: Body content is NOT stored here - read from file via start_line/end_line.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str  # "<file>:<name>"
    name: str
    kind: str  # function, class, method, constant, component, hook, ...
    file: str  # project-relative, "/"-separated
    start_line: int
    end_line: int
    exported: bool = Field(default=False, alias="exports")
    content_hash: Optional[str] = None

    @staticmethod
    def make_id(file_path: str, name: str) -> str:
        """Build the unique symbol id for a (file, name) pair."""
        return f"{file_path}:{name}"


class Reference(BaseModel):
    """A recorded import or call site. References are never de-duplicated."""

    model_config = ConfigDict(extra="allow")

    type: str  # reference pattern id: require, importDeclaration, functionCall, ...
    file: str
    line: int
    module: Optional[str] = None
    func: Optional[str] = None


class IndexStats(BaseModel):
    """Summary counters for one scan."""

    total_files: int = 0
    total_symbols: int = 0
    total_references: int = 0
    using_structural: Optional[bool] = None


class IndexData(BaseModel):
    """Snapshot produced by a scan and persisted as the JSON cache."""

    symbols: List[Symbol] = Field(default_factory=list)
    references: List[Reference] = Field(default_factory=list)
    file_hashes: Dict[str, str] = Field(default_factory=dict)
    stats: IndexStats = Field(default_factory=IndexStats)

    @classmethod
    def coerce(cls, data: Any) -> "IndexData":
        """Accept either an IndexData or its dict form (as read from the cache)."""
        if isinstance(data, IndexData):
            return data
        if data is None:
            return cls()
        return cls.model_validate(data)
