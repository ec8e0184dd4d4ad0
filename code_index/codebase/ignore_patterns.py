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

"""Shared ignore patterns and path filtering for the index builder.

Directory names are matched exactly against each directory entry, so
``node_modules`` is skipped at any depth. File patterns are shell globs
compiled once to regular expressions.
"""

import fnmatch
import re
from typing import Iterable, List, Pattern, Set

DEFAULT_IGNORE_DIRS: Set[str] = {
    # Node.js
    "node_modules",
    # VCS
    ".git",
    # Build outputs
    "dist",
    "build",
    # Coverage
    "coverage",
    # Python
    "__pycache__",
    "venv",
    ".venv",
    # Own cache
    ".code-index",
}

DEFAULT_IGNORE_FILES = ("*.min.js", "*.bundle.js", "*.d.ts")


def compile_file_patterns(patterns: Iterable[str]) -> List[Pattern[str]]:
    """Compile glob patterns (``*.min.js``) to regular expressions."""
    return [re.compile(fnmatch.translate(p)) for p in patterns]


def should_ignore_dir(name: str, ignore_dirs: Set[str]) -> bool:
    """Check a single directory name against the ignore set."""
    return name in ignore_dirs


def should_ignore_file(name: str, patterns: List[Pattern[str]]) -> bool:
    """Check a file name against compiled ignore patterns.

    Example:
        >>> pats = compile_file_patterns(["*.min.js"])
        >>> should_ignore_file("app.min.js", pats)
        True
        >>> should_ignore_file("app.js", pats)
        False
    """
    return any(p.match(name) for p in patterns)
