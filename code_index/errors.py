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

"""Exceptions raised by the code index.

Only usage errors leave the public API. Per-file failures, parser or LLM
unavailability and cache corruption are handled internally and logged.
"""


class CodeIndexError(Exception):
    """Base class for code index errors."""


class IndexNotBuiltError(CodeIndexError):
    """Raised when a query is issued before the index has been built."""

    def __init__(self, message: str = "Index not built. Call build() first."):
        super().__init__(message)


class CacheCorruptedError(CodeIndexError):
    """Raised when a cached index cannot be decoded or validated."""
