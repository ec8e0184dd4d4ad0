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

"""Handles for optional, lazily-loaded capabilities.

The structural parser and the local LLM are both optional. Each is wrapped in
a LazyCapability that is created once and passed to the components that use
it, instead of living in a module-level cache. The factory runs at most once;
whatever it produced (or the fact that it failed) is remembered for the
lifetime of the handle.
"""

import logging
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LazyCapability(Generic[T]):
    """Optional dependency probed on first use and never re-probed."""

    def __init__(self, factory: Callable[[], Optional[T]], name: str = "capability"):
        self._factory = factory
        self.name = name
        self._value: Optional[T] = None
        self._probed = False
        self.error: Optional[str] = None

    @classmethod
    def of(cls, value: Optional[T], name: str = "capability") -> "LazyCapability[T]":
        """Wrap an already-constructed value (or None)."""
        handle: LazyCapability[T] = cls(lambda: value, name=name)
        handle.get()
        return handle

    @classmethod
    def unavailable(cls, name: str = "capability") -> "LazyCapability[T]":
        """A handle that always reports the capability as missing."""
        return cls.of(None, name=name)

    @property
    def probed(self) -> bool:
        return self._probed

    @property
    def available(self) -> bool:
        return self.get() is not None

    def get(self) -> Optional[T]:
        """Return the capability, constructing it on the first call."""
        if self._probed:
            return self._value

        self._probed = True
        try:
            self._value = self._factory()
        except Exception as e:
            self._value = None
            self.error = str(e)
            logger.warning(f"{self.name} not available: {e}")
        if self._value is None and self.error is None:
            logger.debug(f"{self.name} not configured")
        return self._value

    def reset(self) -> None:
        """Forget the probe result so the next get() runs the factory again."""
        self._value = None
        self._probed = False
        self.error = None
