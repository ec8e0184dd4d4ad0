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

"""Built-in language adapters.

Provides symbol and reference patterns for:
- JavaScript/TypeScript (.js, .jsx, .mjs, .cjs, .ts, .tsx)
- Python, Go, Rust, Java, Ruby
- C and C++ (cpp.py)
- C#, PHP, Swift, Kotlin, Scala, Lua, Elixir, Haskell, Bash, CSS, HTML, SQL
  and Dart (additional.py)
"""

from code_index.languages.plugins.javascript import JavaScriptAdapter
from code_index.languages.plugins.python import PythonAdapter
from code_index.languages.plugins.go import GoAdapter
from code_index.languages.plugins.rust import RustAdapter
from code_index.languages.plugins.java import JavaAdapter
from code_index.languages.plugins.ruby import RubyAdapter
from code_index.languages.plugins.cpp import CAdapter, CppAdapter
from code_index.languages.plugins.additional import (
    BashAdapter,
    CSharpAdapter,
    CssAdapter,
    DartAdapter,
    ElixirAdapter,
    HaskellAdapter,
    HtmlAdapter,
    KotlinAdapter,
    LuaAdapter,
    PhpAdapter,
    ScalaAdapter,
    SqlAdapter,
    SwiftAdapter,
)

__all__ = [
    "JavaScriptAdapter",
    "PythonAdapter",
    "GoAdapter",
    "RustAdapter",
    "JavaAdapter",
    "RubyAdapter",
    "CAdapter",
    "CppAdapter",
    "CSharpAdapter",
    "PhpAdapter",
    "SwiftAdapter",
    "KotlinAdapter",
    "ScalaAdapter",
    "LuaAdapter",
    "ElixirAdapter",
    "HaskellAdapter",
    "BashAdapter",
    "CssAdapter",
    "HtmlAdapter",
    "SqlAdapter",
    "DartAdapter",
]
