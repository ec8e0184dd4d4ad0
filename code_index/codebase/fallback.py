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

"""Line-oriented regex extraction used when structural parsing is unavailable.

The patterns are anchored at the start of a line and only see one line at a
time, so every fallback symbol has ``end_line == start_line``.
"""

import re
from typing import Iterator, List, Pattern, Tuple

# (regex, kind) applied to every line; group 1 is the name
FALLBACK_SYMBOL_PATTERNS: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"^(?:export\s+)?(?:async\s+)?function\s+(\w+)"), "function"),
    (re.compile(r"^(?:export\s+)?class\s+(\w+)"), "class"),
    (re.compile(r"^(?:export\s+)?const\s+(\w+)\s*="), "constant"),
    (re.compile(r"^(?:export\s+)?interface\s+(\w+)"), "interface"),
    (re.compile(r"^(?:export\s+)?type\s+(\w+)\s*="), "type"),
]

# (reference type, regex) applied to every line; group 1 is the module
FALLBACK_REFERENCE_PATTERNS: List[Tuple[str, Pattern[str]]] = [
    ("require", re.compile(r"\brequire\s*\(\s*['\"]([^'\"]+)['\"]\s*\)")),
    (
        "importDeclaration",
        re.compile(r"^\s*import\s+(?:[\w*{}$\s,]+?\s+from\s+)?['\"]([^'\"]+)['\"]"),
    ),
    ("dynamicImport", re.compile(r"\bimport\s*\(\s*['\"]([^'\"]+)['\"]\s*\)")),
    (
        "importStatement",
        re.compile(r"^import\s+(?!.*\bfrom\s+['\"])([\w.]+)\s*(?:as\s+\w+\s*)?(?:[,#]|$)"),
    ),
    ("fromImport", re.compile(r"^from\s+([\w.]+)\s+import\b")),
]


def match_symbols(content: str) -> Iterator[Tuple[int, str, str, str]]:
    """Yield ``(line_number, name, kind, line)`` for each fallback match.

    Every pattern is tried on every line; de-duplication is left to the caller.
    """
    for line_no, line in enumerate(content.split("\n"), start=1):
        for regex, kind in FALLBACK_SYMBOL_PATTERNS:
            match = regex.match(line)
            if match:
                yield line_no, match.group(1), kind, line


def match_references(content: str) -> Iterator[Tuple[int, str, str]]:
    """Yield ``(line_number, reference_type, module)`` for import-like lines."""
    for line_no, line in enumerate(content.split("\n"), start=1):
        for ref_type, regex in FALLBACK_REFERENCE_PATTERNS:
            for match in regex.finditer(line):
                yield line_no, ref_type, match.group(1)


def check_if_exported(name: str, content: str) -> bool:
    """Whole-file heuristics for whether ``name`` is exported.

    Recognizes ``export <decl> name``, ``export { ... name ... }``,
    ``export default name``, ``module.exports = { ... name ... }``,
    ``module.exports.name =`` and ``exports.name =``.
    """
    n = re.escape(name)
    patterns = (
        r"export\s+(const|let|var|function|class|async\s+function)\s+" + n + r"\b",
        r"export\s*\{[^}]*\b" + n + r"\b[^}]*\}",
        r"export\s+default\s+" + n + r"\b",
        r"module\.exports\s*=\s*\{[^}]*\b" + n + r"\b",
        r"module\.exports\." + n + r"\s*=",
        r"exports\." + n + r"\s*=",
    )
    return any(re.search(p, content) for p in patterns)
