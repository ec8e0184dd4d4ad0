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

"""Tests for content-hash incremental scans."""

import pytest

from code_index.errors import CacheCorruptedError


def _by_file(data, file):
    return {s.id: s for s in data.symbols if s.file == file}


class TestIncrementalScan:
    """Re-extract changed files, carry unchanged ones forward."""

    @pytest.fixture
    def project(self, write_tree):
        return write_tree(
            {
                "a.js": "function alpha() {}\nconst lib = require('./b');\n",
                "b.js": "export function beta() {}\nconst x = require('fs');\n",
                "c.js": "class Gamma {}\n",
            }
        )

    async def test_modified_file_replaced_others_preserved(self, builder, project):
        first = await builder.scan(project)
        (project / "a.js").write_text("function alphaTwo() {}\n", encoding="utf-8")

        second = await builder.incremental_scan(project, first)

        assert _by_file(second, "b.js") == _by_file(first, "b.js")
        assert _by_file(second, "c.js") == _by_file(first, "c.js")
        assert [s.name for s in second.symbols if s.file == "a.js"] == ["alphaTwo"]
        assert second.file_hashes["a.js"] != first.file_hashes["a.js"]
        assert second.file_hashes["b.js"] == first.file_hashes["b.js"]

    async def test_change_report(self, builder, project):
        first = await builder.scan(project)
        (project / "a.js").write_text("function changed() {}\n", encoding="utf-8")
        (project / "c.js").unlink()
        (project / "d.js").write_text("function delta() {}\n", encoding="utf-8")

        second = await builder.incremental_scan(project, first)

        assert builder.last_changes == {
            "updated": ["a.js"],
            "added": ["d.js"],
            "removed": ["c.js"],
            "unchanged": 1,
        }
        assert "c.js" not in second.file_hashes
        assert not _by_file(second, "c.js")
        assert [s.name for s in second.symbols if s.file == "d.js"] == ["delta"]
        assert second.stats.total_files == 3

    async def test_symbols_follow_walk_order(self, builder, project):
        first = await builder.scan(project)
        (project / "b.js").write_text("export function betaTwo() {}\n", encoding="utf-8")

        second = await builder.incremental_scan(project, first)

        assert list(dict.fromkeys(s.file for s in second.symbols)) == ["a.js", "b.js", "c.js"]

    async def test_no_changes_is_equivalent_to_full_scan(self, builder, project):
        first = await builder.scan(project)

        second = await builder.incremental_scan(project, first)

        assert second.symbols == first.symbols
        assert second.file_hashes == first.file_hashes
        assert builder.last_changes["unchanged"] == 3

    async def test_references_only_from_reextracted_files(self, builder, project):
        first = await builder.scan(project)
        assert {r.file for r in first.references} == {"a.js", "b.js"}
        (project / "a.js").write_text(
            "function alpha() {}\nconst lib = require('./c');\n", encoding="utf-8"
        )

        second = await builder.incremental_scan(project, first)

        # References of the unchanged b.js are not carried forward.
        assert [(r.file, r.module) for r in second.references] == [("a.js", "./c")]

    async def test_accepts_dict_from_cache(self, builder, project):
        first = await builder.scan(project)

        second = await builder.incremental_scan(project, first.model_dump(mode="json"))

        assert [s.id for s in second.symbols] == [s.id for s in first.symbols]

    async def test_malformed_previous_index_raises(self, builder, project):
        with pytest.raises(CacheCorruptedError):
            await builder.incremental_scan(project, {"symbols": [{"name": "no id"}]})

    def test_has_file_changed(self, builder, project):
        builder.root_dir = project
        current = builder.hash_content((project / "c.js").read_text(encoding="utf-8"))

        assert builder.has_file_changed("c.js", current) is False
        assert builder.has_file_changed("c.js", "0" * 64) is True
        assert builder.has_file_changed("missing.js", current) is True
