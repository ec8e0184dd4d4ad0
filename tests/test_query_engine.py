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

"""Tests for deterministic QueryEngine lookups."""

import pytest

from code_index.codebase.query_engine import QueryEngine, resolve_relative_module
from code_index.models import IndexData, Reference

from conftest import make_symbol


@pytest.fixture
def engine(fixture_index, no_llm):
    return QueryEngine(fixture_index, llm=no_llm)


def _names(symbols):
    return [s.name for s in symbols]


class TestLookups:
    """Lookups over the derived indices."""

    def test_find_by_kind(self, engine):
        assert _names(engine.find_by_kind("function")) == ["main", "bootstrap", "formatDate"]
        assert engine.find_by_kind("enum") == []

    def test_find_exported(self, engine):
        assert _names(engine.find_exported()) == ["main", "formatDate", "User"]

    def test_search_intersection(self, engine):
        assert _names(engine.search(kind="function", exported=True)) == ["main", "formatDate"]

    def test_search_filters(self, engine):
        assert _names(engine.search(name="BUTTON")) == ["Button"]
        assert _names(engine.search(file="models")) == ["User"]
        assert _names(engine.search(exported=False)) == ["bootstrap", "Button"]
        assert _names(engine.search(pattern="^(main|user)")) == ["main", "User"]
        assert len(engine.search()) == 5

    def test_find_by_id(self, engine):
        assert engine.find_by_id("src/utils.js:formatDate").kind == "function"
        assert engine.find_by_id("src/utils.js:missing") is None

    def test_find_by_name(self, engine):
        assert _names(engine.find_by_name("format")) == ["formatDate"]
        assert engine.find_by_name("FORMAT") == []
        assert _names(engine.find_by_name("FORMAT", case_sensitive=False)) == ["formatDate"]
        assert engine.find_by_name("format", exact=True) == []
        assert _names(engine.find_by_name("User", exact=True)) == ["User"]

    def test_find_by_file_normalizes_separators(self, engine):
        assert _names(engine.find_by_file("src\\index.js")) == ["main", "bootstrap"]

    def test_load_index_replaces_state(self, engine):
        engine.load_index({"symbols": [make_symbol("x.py", "only", "function").model_dump()]})

        assert _names(engine.search()) == ["only"]
        assert engine.references == []
        assert engine.find_by_kind("class") == []


class TestDependencies:
    """Import and call-site heuristics."""

    def test_file_dependencies(self, engine):
        deps = engine.get_file_dependencies("src/index.js")
        assert [d.module for d in deps] == ["./utils", "./models/User", "react"]

    def test_file_dependents_resolve_relative_imports(self, engine):
        dependents = engine.get_file_dependents("src/utils.js")
        assert [(d.file, d.module) for d in dependents] == [
            ("src/index.js", "./utils"),
            ("src/components/Button.js", "../utils"),
        ]

    def test_file_dependents_match_package_basename(self, no_llm):
        data = IndexData(
            references=[
                Reference(type="importDeclaration", file="app.js", line=1, module="lodash"),
                Reference(type="require", file="app.js", line=2, module="my-lib/lodash"),
            ]
        )
        engine = QueryEngine(data, llm=no_llm)

        assert len(engine.get_file_dependents("vendor/lodash.js")) == 2

    def test_symbol_references(self, engine):
        refs = engine.get_symbol_references("src/utils.js:formatDate")

        assert [r["context"] for r in refs] == [
            "Called in src/index.js:4",
            "Called in src/components/Button.js:8",
        ]
        assert all(r["symbol_id"] == "src/utils.js:formatDate" for r in refs)
        assert engine.get_symbol_references("nope:nope") == []

    def test_dependency_graph(self, engine):
        graph = engine.build_dependency_graph()

        assert graph["nodes"] == [
            "src/index.js",
            "src/utils.js",
            "src/models/User.js",
            "src/components/Button.js",
        ]
        assert graph["edges"] == [
            {"source": "src/index.js", "target": "src/utils.js", "type": "require"},
            {"source": "src/index.js", "target": "src/models/User.js", "type": "importDeclaration"},
            {
                "source": "src/components/Button.js",
                "target": "src/utils.js",
                "type": "importDeclaration",
            },
        ]

    def test_dependency_graph_python_packages(self, no_llm):
        data = IndexData(
            symbols=[
                make_symbol("pkg/app.py", "run", "function"),
                make_symbol("pkg/models/__init__.py", "Model", "class"),
                make_symbol("pkg/util.py", "helper", "function"),
            ],
            references=[
                Reference(type="fromImport", file="pkg/app.py", line=1, module=".models"),
                Reference(type="fromImport", file="pkg/app.py", line=2, module=".util"),
                Reference(type="importStatement", file="pkg/app.py", line=3, module="os"),
            ],
        )
        graph = QueryEngine(data, llm=no_llm).build_dependency_graph()

        assert [(e["source"], e["target"]) for e in graph["edges"]] == [
            ("pkg/app.py", "pkg/models/__init__.py"),
            ("pkg/app.py", "pkg/util.py"),
        ]

    @pytest.mark.parametrize(
        "source, module, expected",
        [
            ("src/a.js", "./b", "src/b"),
            ("src/a/b.js", "../c/d", "src/c/d"),
            ("a.js", "../x", "../x"),
            ("src/a.py", ".b", "src/b"),
            ("src/a/b.py", "..pkg.mod", "src/pkg/mod"),
            ("src/x.py", ".", "src"),
            ("src/a.js", "react", None),
            ("src/a.py", "os.path", None),
        ],
    )
    def test_resolve_relative_module(self, source, module, expected):
        assert resolve_relative_module(source, module) == expected


class TestSummaries:
    """File and codebase summaries, topic search and prompt formatting."""

    def test_file_summary(self, engine):
        assert engine.get_file_summary("src/index.js") == {
            "file": "src/index.js",
            "symbol_count": 2,
            "exports": ["main"],
            "functions": ["main", "bootstrap"],
            "classes": [],
            "components": [],
            "hooks": [],
            "types": [],
            "dependencies": ["./utils", "./models/User", "react"],
        }

    def test_codebase_summary(self, engine):
        summary = engine.get_codebase_summary()

        assert summary["total_files"] == 4
        assert summary["total_symbols"] == 5
        assert summary["total_references"] == 6
        assert summary["exported_symbols"] == 3
        assert summary["by_kind"] == {"function": 3, "class": 1, "component": 1}
        assert summary["files"][0] == "src/index.js"

    def test_find_by_topic_scores_keywords(self, engine):
        assert _names(engine.find_by_topic("user model")) == ["User"]
        assert _names(engine.find_by_topic("format utils function")) == [
            "formatDate",
            "main",
            "bootstrap",
        ]
        assert engine.find_by_topic("") == []

    def test_find_by_topic_ties_keep_index_order(self, engine):
        assert _names(engine.find_by_topic("src")) == [
            "main",
            "bootstrap",
            "formatDate",
            "User",
            "Button",
        ]

    def test_to_handles(self, engine):
        handles = engine.to_handles(engine.find_by_kind("class"))
        assert handles == [
            {
                "id": "src/models/User.js:User",
                "name": "User",
                "kind": "class",
                "file": "src/models/User.js",
                "line": 1,
                "exported": True,
            }
        ]

    def test_format_for_prompt(self, engine):
        symbols = engine.find_by_kind("function")

        assert engine.format_for_prompt(symbols, max_length=2) == (
            "- main: function (src/index.js:3) [exported]\n"
            "- bootstrap: function (src/index.js:10)\n"
            "... and 1 more"
        )
        assert engine.format_for_prompt(symbols[:1], include_file=False) == (
            "- main: function [exported]"
        )
