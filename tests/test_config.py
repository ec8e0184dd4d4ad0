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

"""Tests for configuration loading and capability handles."""

import logging

from code_index.capability import LazyCapability
from code_index.codebase.ignore_patterns import (
    compile_file_patterns,
    should_ignore_dir,
    should_ignore_file,
)
from code_index.config import IndexConfig


class TestIndexConfig:
    """Defaults, project file and overrides."""

    def test_defaults(self):
        config = IndexConfig()

        assert "node_modules" in config.ignore_dirs
        assert "*.min.js" in config.ignore_files
        assert config.max_file_size == 1024 * 1024
        assert config.cache_dir == ".code-index/cache"
        assert config.cache_file == "code-index.json"

    def test_project_file(self, tmp_path):
        (tmp_path / ".code-index.yaml").write_text(
            "ignore_dirs: [vendor]\nmax_file_size: 2048\n", encoding="utf-8"
        )

        config = IndexConfig.load(tmp_path)

        assert config.ignore_dirs == ["vendor"]
        assert config.max_file_size == 2048

    def test_overrides_win(self, tmp_path):
        (tmp_path / ".code-index.yaml").write_text("max_file_size: 2048\n", encoding="utf-8")

        config = IndexConfig.load(tmp_path, max_file_size=10, cache_file=None)

        assert config.max_file_size == 10
        assert config.cache_file == "code-index.json"

    def test_invalid_yaml_is_ignored(self, tmp_path, caplog):
        (tmp_path / ".code-index.yaml").write_text("ignore_dirs: [unclosed\n", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            config = IndexConfig.load(tmp_path)

        assert config == IndexConfig()
        assert "Failed to load index config" in caplog.text

    def test_non_mapping_is_ignored(self, tmp_path, caplog):
        (tmp_path / ".code-index.yaml").write_text("- a\n- b\n", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            assert IndexConfig.load(tmp_path) == IndexConfig()
        assert "expected a mapping" in caplog.text

    def test_no_root(self):
        assert IndexConfig.load(None, max_file_size=5).max_file_size == 5


class TestIgnorePatterns:
    """Directory names and file globs."""

    def test_file_globs(self):
        patterns = compile_file_patterns(["*.min.js", "*.d.ts"])

        assert should_ignore_file("app.min.js", patterns)
        assert should_ignore_file("index.d.ts", patterns)
        assert not should_ignore_file("app.js", patterns)

    def test_dir_names_are_exact(self):
        assert should_ignore_dir("node_modules", {"node_modules"})
        assert not should_ignore_dir("my_node_modules", {"node_modules"})


class TestLazyCapability:
    """Probe-once semantics."""

    def test_factory_runs_once(self):
        calls = []

        def factory():
            calls.append(1)
            return "parser"

        handle = LazyCapability(factory, name="thing")

        assert handle.probed is False
        assert handle.get() == "parser"
        assert handle.get() == "parser"
        assert handle.available is True
        assert calls == [1]

    def test_failure_is_cached(self, caplog):
        calls = []

        def factory():
            calls.append(1)
            raise ImportError("No module named 'tree_sitter'")

        handle = LazyCapability(factory, name="Structural parser")

        with caplog.at_level(logging.WARNING):
            assert handle.get() is None
            assert handle.available is False

        assert calls == [1]
        assert "tree_sitter" in handle.error
        assert "Structural parser not available" in caplog.text

    def test_reset_probes_again(self):
        calls = []
        handle = LazyCapability(lambda: calls.append(1) or None)

        handle.get()
        handle.reset()
        handle.get()

        assert calls == [1, 1]

    def test_of_and_unavailable(self):
        assert LazyCapability.of(42).get() == 42
        assert LazyCapability.unavailable().available is False
        assert LazyCapability.unavailable().probed is True
