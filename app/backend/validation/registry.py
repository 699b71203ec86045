from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List


InputFilterFactory = Callable[[], Any]


class InputFilterRegistry:
	"""Name to factory lookup for input filters.

	``fetch`` builds a new instance on every call; caching is the caller's concern.
	"""

	def __init__(self) -> None:
		self._factories: Dict[str, InputFilterFactory] = {}
		self._lock = threading.Lock()

	def register(self, name: str, factory: InputFilterFactory) -> None:
		clean = name.strip()
		if not clean:
			raise ValueError("Input filter name must not be empty.")
		if not callable(factory):
			raise TypeError(f'Factory for input filter "{clean}" is not callable.')
		with self._lock:
			self._factories[clean] = factory

	def exists(self, name: str) -> bool:
		return name in self._factories

	def fetch(self, name: str) -> Any:
		factory = self._factories.get(name)
		if factory is None:
			raise KeyError(name)
		return factory()

	def names(self) -> List[str]:
		return sorted(self._factories)
