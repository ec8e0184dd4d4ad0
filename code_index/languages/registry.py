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

"""Language adapter registry.

Maps file extensions to language adapters. The index builder receives a
registry instance and asks it which adapter owns a file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Type, Union

from code_index.languages.base import LanguageAdapter

logger = logging.getLogger(__name__)

# Type alias for adapter factory
AdapterFactory = Callable[[], LanguageAdapter]


class LanguageRegistry:
    """Registry for language adapters.

    Provides:
    - Adapter registration by name/extension
    - Extension lookup for the file walk
    - Discovery of the built-in adapters
    """

    def __init__(self):
        """Initialize empty registry."""
        self._adapters: Dict[str, AdapterFactory] = {}
        self._instances: Dict[str, LanguageAdapter] = {}
        self._extension_map: Dict[str, str] = {}  # .py -> python
        self._alias_map: Dict[str, str] = {}  # py -> python

    def register(
        self,
        name: str,
        adapter: Union[Type[LanguageAdapter], AdapterFactory],
        extensions: Optional[List[str]] = None,
    ) -> None:
        """Register a language adapter.

        Args:
            name: Canonical language name
            adapter: Adapter class or factory function
            extensions: File extensions (taken from the adapter config if None)
        """
        name = name.lower()
        self._adapters[name] = adapter  # type: ignore[assignment]
        self._instances.pop(name, None)
        logger.debug(f"Registered language adapter: {name}")

        instance = self._get_or_create_instance(name)

        for ext in extensions or instance.config.extensions:
            ext = ext.lower()
            if not ext.startswith("."):
                ext = "." + ext
            self._extension_map[ext] = name

        for alias in instance.config.aliases:
            self._alias_map[alias.lower()] = name

    def get(self, name: str) -> LanguageAdapter:
        """Get a language adapter by name or alias.

        Raises:
            KeyError: If language not registered
        """
        name = name.lower()
        name = self._alias_map.get(name, name)

        if name not in self._adapters:
            available = ", ".join(sorted(self._adapters.keys()))
            raise KeyError(f"Language '{name}' not registered. Available: {available}")

        return self._get_or_create_instance(name)

    def for_extension(self, ext: str) -> Optional[LanguageAdapter]:
        """Adapter owning a file extension (``.js`` or ``js``), or None."""
        ext = ext.lower()
        if not ext.startswith("."):
            ext = "." + ext
        name = self._extension_map.get(ext)
        if name is None:
            return None
        return self._get_or_create_instance(name)

    def for_path(self, path: Path) -> Optional[LanguageAdapter]:
        return self.for_extension(path.suffix) if path.suffix else None

    def extensions(self) -> List[str]:
        """All registered extensions, sorted."""
        return sorted(self._extension_map)

    def list_languages(self) -> List[str]:
        """Sorted list of registered language names."""
        return sorted(self._adapters.keys())

    def _get_or_create_instance(self, name: str) -> LanguageAdapter:
        if name not in self._instances:
            self._instances[name] = self._adapters[name]()
        return self._instances[name]

    def discover_adapters(self) -> int:
        """Register the built-in adapters.

        Returns:
            Number of adapters registered
        """
        from code_index.languages import plugins

        adapters = [
            ("javascript", plugins.JavaScriptAdapter),
            ("python", plugins.PythonAdapter),
            ("go", plugins.GoAdapter),
            ("rust", plugins.RustAdapter),
            ("java", plugins.JavaAdapter),
            ("ruby", plugins.RubyAdapter),
            ("c", plugins.CAdapter),
            ("cpp", plugins.CppAdapter),
            ("csharp", plugins.CSharpAdapter),
            ("php", plugins.PhpAdapter),
            ("swift", plugins.SwiftAdapter),
            ("kotlin", plugins.KotlinAdapter),
            ("scala", plugins.ScalaAdapter),
            ("lua", plugins.LuaAdapter),
            ("elixir", plugins.ElixirAdapter),
            ("haskell", plugins.HaskellAdapter),
            ("bash", plugins.BashAdapter),
            ("css", plugins.CssAdapter),
            ("html", plugins.HtmlAdapter),
            ("sql", plugins.SqlAdapter),
            ("dart", plugins.DartAdapter),
        ]

        count = 0
        for name, adapter_class in adapters:
            try:
                self.register(name, adapter_class)
                count += 1
            except Exception as e:
                logger.warning(f"Failed to register {name} adapter: {e}")

        logger.debug(f"Discovered {count} language adapters")
        return count


# Default registry instance
_default_registry: Optional[LanguageRegistry] = None


def get_language_registry() -> LanguageRegistry:
    """Get the default registry with the built-in adapters.

    Returns:
        Shared registry instance (created and populated on first call)
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = LanguageRegistry()
        _default_registry.discover_adapters()
    return _default_registry
