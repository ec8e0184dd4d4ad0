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

"""Tests for full scans with the regex fallback."""

from code_index.codebase.index_builder import IndexBuilder
from code_index.config import IndexConfig
from code_index.models import Symbol


class TestFallbackExtraction:
    """Regex extraction when no structural parser is available."""

    async def test_fallback_maps_kinds(self, builder, write_tree):
        root = write_tree(
            {
                "src/app.ts": (
                    "export async function load() {}\n"
                    "class Store {}\n"
                    "export const LIMIT = 10;\n"
                    "interface Props {}\n"
                    "type Id = string;\n"
                ),
            }
        )

        data = await builder.scan(root)
        kinds = {s.name: s.kind for s in data.symbols}

        assert kinds == {
            "load": "function",
            "Store": "class",
            "LIMIT": "constant",
            "Props": "interface",
            "Id": "type",
        }
        assert data.stats.using_structural is False

    async def test_fallback_symbols_span_one_line(self, builder, write_tree):
        root = write_tree({"a.js": "\n\nfunction go() {\n  return 1;\n}\n"})

        data = await builder.scan(root)

        (symbol,) = data.symbols
        assert symbol.start_line == 3
        assert symbol.end_line == 3

    async def test_adapter_naming_conventions_apply(self, builder, write_tree):
        root = write_tree(
            {"ui.jsx": "export function Header() {}\nfunction useTheme() {}\n"}
        )

        data = await builder.scan(root)
        kinds = {s.name: s.kind for s in data.symbols}

        assert kinds == {"Header": "component", "useTheme": "hook"}

    async def test_fallback_references(self, builder, write_tree):
        root = write_tree(
            {
                "a.js": (
                    "const fs = require('fs');\n"
                    "import React, { useState } from 'react';\n"
                    "const lazy = () => import('./lazy');\n"
                ),
                "b.py": "import os.path\nfrom .utils import helper\n",
            }
        )

        data = await builder.scan(root)
        refs = {(r.file, r.type, r.module) for r in data.references}

        assert refs == {
            ("a.js", "require", "fs"),
            ("a.js", "importDeclaration", "react"),
            ("a.js", "dynamicImport", "./lazy"),
            ("b.py", "importStatement", "os.path"),
            ("b.py", "fromImport", ".utils"),
        }

    async def test_indented_python_defs_not_matched(self, builder, write_tree):
        root = write_tree({"m.py": "class Model:\n    def save(self):\n        pass\n"})

        data = await builder.scan(root)

        assert [s.name for s in data.symbols] == ["Model"]


class TestExportDetection:
    """Whole-file export heuristics."""

    def test_export_forms(self):
        check = IndexBuilder.check_if_exported
        assert check("a", "export const a = 1")
        assert check("b", "export async function b() {}")
        assert check("c", "export { x, c, y }")
        assert check("d", "export default d;")
        assert check("e", "module.exports = { e, f }")
        assert check("g", "module.exports.g = g")
        assert check("h", "exports.h = () => {}")

    def test_not_exported(self):
        check = IndexBuilder.check_if_exported
        assert not check("a", "const a = 1")
        assert not check("ab", "export const abc = 1")

    def test_name_is_escaped(self):
        assert IndexBuilder.check_if_exported("a.b", "exports.a.b = 1")
        assert not IndexBuilder.check_if_exported("a.b", "export const axb = 1")


class TestScan:
    """Walk, hashing and stats of full scans."""

    async def test_end_to_end_two_files(self, builder, write_tree):
        root = write_tree(
            {
                "src/index.js": "function main() {\n  return 1;\n}\nmodule.exports = { main };\n",
                "src/utils.js": "const helper = () => {};\n",
            }
        )

        data = await builder.scan(root)

        assert data.stats.total_files == 2
        main = [s for s in data.symbols if s.name == "main"]
        assert main and main[0].kind == "function"
        # Regex extraction only sees the declaration line, not the module.exports line.
        assert main[0].exported is False
        assert Symbol.make_id("src/utils.js", "helper") in {s.id for s in data.symbols}

    async def test_fallback_exported_follows_declaration_line(self, builder, write_tree):
        root = write_tree(
            {
                "lib.js": (
                    "export function run() {}\n"
                    "function stop() {}\n"
                    "export { stop };\n"
                    "export const LIMIT = 3;\n"
                )
            }
        )

        data = await builder.scan(root)

        exported = {s.name: s.exported for s in data.symbols}
        assert exported == {"run": True, "stop": False, "LIMIT": True}

    async def test_full_scan_is_idempotent(self, builder, write_tree):
        root = write_tree(
            {
                "a.js": "export function a() {}\nclass B {}\n",
                "lib/c.ts": "export interface C {}\n",
            }
        )

        first = await builder.scan(root)
        second = await builder.scan(root)

        assert [s.model_dump() for s in first.symbols] == [s.model_dump() for s in second.symbols]
        assert first.file_hashes == second.file_hashes

    async def test_node_modules_ignored_at_any_depth(self, builder, write_tree):
        root = write_tree(
            {
                "index.js": "function keep() {}\n",
                "node_modules/dep/index.js": "function dep() {}\n",
                "packages/web/node_modules/x/y.js": "function nested() {}\n",
            }
        )

        data = await builder.scan(root)

        assert [s.name for s in data.symbols] == ["keep"]
        assert data.stats.total_files == 1

    async def test_ignored_file_globs_and_unknown_extensions(self, builder, write_tree):
        root = write_tree(
            {
                "app.js": "function app() {}\n",
                "app.min.js": "function minified() {}\n",
                "types.d.ts": "interface Decl {}\n",
                "README.md": "function notCode() {}\n",
            }
        )

        data = await builder.scan(root)

        assert [s.name for s in data.symbols] == ["app"]
        assert list(data.file_hashes) == ["app.js"]

    async def test_size_cap_excludes_large_files(self, no_parser, write_tree):
        root = write_tree(
            {
                "small.js": "function small() {}\n",
                "big.js": "function big() {}\n" + "// padding\n" * 200,
            }
        )
        builder = IndexBuilder(config=IndexConfig(max_file_size=100), parser=no_parser)

        data = await builder.scan(root)

        assert data.stats.total_files == 1
        assert [s.name for s in data.symbols] == ["small"]

    async def test_walk_order_is_sorted(self, builder, write_tree):
        root = write_tree({"b.js": "", "a.js": "", "c/a.js": "", "B.js": ""})

        files = builder.get_source_files(root)

        rel_paths = [f.relative_to(root.resolve()).as_posix() for f in files]
        assert rel_paths == ["B.js", "a.js", "b.js", "c/a.js"]

    async def test_undecodable_file_counted_but_not_indexed(self, builder, write_tree):
        root = write_tree({"ok.js": "function ok() {}\n"})
        (root / "bad.js").write_bytes(b"function bad() {}\n\xff\xfe\xfa")

        data = await builder.scan(root)

        assert data.stats.total_files == 2
        assert [s.name for s in data.symbols] == ["ok"]
        assert "bad.js" not in data.file_hashes

    async def test_hashes_are_sha256(self, builder, write_tree):
        root = write_tree({"a.js": "function a() {}\n"})

        data = await builder.scan(root)

        assert data.file_hashes["a.js"] == IndexBuilder.hash_content("function a() {}\n")
        assert len(data.file_hashes["a.js"]) == 64

    async def test_empty_tree(self, builder, tmp_path):
        data = await builder.scan(tmp_path)

        assert data.symbols == []
        assert data.stats.total_files == 0


class TestDeduplication:
    """First match wins per file and name."""

    async def test_same_name_in_one_file_yields_one_symbol(self, builder, write_tree):
        root = write_tree({"a.ts": "export const Thing = 1;\ntype Thing = number;\n"})

        data = await builder.scan(root)

        assert len(data.symbols) == 1
        assert data.symbols[0].kind == "constant"
        assert data.symbols[0].start_line == 1

    async def test_same_name_in_different_files_kept(self, builder, write_tree):
        root = write_tree({"a.js": "function run() {}\n", "b.js": "function run() {}\n"})

        data = await builder.scan(root)

        assert sorted(s.id for s in data.symbols) == ["a.js:run", "b.js:run"]
