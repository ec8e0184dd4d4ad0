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

"""Configuration for indexing and the optional local LLM.

Index options can live in ``<root>/.code-index.yaml``:

```yaml
ignore_dirs: [node_modules, .git, dist, vendor]
ignore_files: ["*.min.js", "*.generated.ts"]
max_file_size: 524288
```

Explicit keyword overrides always win over the file.
"""

import logging
import os
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import BaseModel, Field

from code_index.codebase.ignore_patterns import DEFAULT_IGNORE_DIRS, DEFAULT_IGNORE_FILES

logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILE = ".code-index.yaml"


class IndexConfig(BaseModel):
    """Options for walking, caching and ranking."""

    ignore_dirs: List[str] = Field(
        default_factory=lambda: sorted(DEFAULT_IGNORE_DIRS),
        description="Directory names skipped at any depth (exact match)",
    )
    ignore_files: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_FILES),
        description="Glob patterns matched against file names",
    )
    max_file_size: int = Field(
        default=1024 * 1024, description="Files larger than this many bytes are skipped"
    )
    cache_dir: str = Field(
        default=".code-index/cache", description="Cache directory, relative to the project root"
    )
    cache_file: str = Field(default="code-index.json", description="Cache file name")
    llm_init_timeout: float = Field(
        default=10.0, description="Seconds allowed for the local LLM to initialize"
    )

    @classmethod
    def load(cls, root: Optional[Union[str, Path]] = None, **overrides: Any) -> "IndexConfig":
        """Build a config from ``<root>/.code-index.yaml`` plus explicit overrides.

        Args:
            root: Project root to look for the config file in
            **overrides: Option values that take precedence over the file

        Returns:
            Validated configuration
        """
        data: dict = {}
        if root is not None:
            path = Path(root) / PROJECT_CONFIG_FILE
            if path.is_file():
                try:
                    with open(path, encoding="utf-8") as f:
                        loaded = yaml.safe_load(f) or {}
                    if isinstance(loaded, dict):
                        data.update(loaded)
                    else:
                        logger.warning(f"Ignoring {path}: expected a mapping")
                except (OSError, yaml.YAMLError) as e:
                    logger.warning(f"Failed to load index config from {path}: {e}")
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(data)


_DISABLED_VALUES = {"", "0", "1", "false", "true"}


class LLMSettings(BaseModel):
    """Connection settings for the local Ollama server."""

    model: Optional[str] = Field(default=None, description="Model name; None disables the LLM")
    host: str = "localhost"
    port: int = 11434
    timeout: float = Field(default=300.0, description="Per-request timeout in seconds")

    @property
    def enabled(self) -> bool:
        return self.model is not None

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @classmethod
    def from_env(cls) -> "LLMSettings":
        """Read settings from the environment.

        The LLM is opt-in: CODE_INDEX_LOCAL_LLM must name a model
        (e.g. ``qwen2.5-coder:7b``). Boolean-like values do not count.
        """
        model = os.environ.get("CODE_INDEX_LOCAL_LLM", "").strip()
        if model.lower() in _DISABLED_VALUES:
            model = ""

        def _number(name: str, default: float) -> float:
            raw = os.environ.get(name)
            if not raw:
                return default
            try:
                return float(raw)
            except ValueError:
                logger.warning(f"Ignoring invalid {name}={raw!r}")
                return default

        return cls(
            model=model or None,
            host=os.environ.get("OLLAMA_HOST") or "localhost",
            port=int(_number("OLLAMA_PORT", 11434)),
            timeout=_number("OLLAMA_TIMEOUT", 300.0),
        )
