from __future__ import annotations
import threading
import time
from typing import Callable, Dict, Optional, Tuple

# Expired keys are swept at most this often
CLEANUP_INTERVAL_SECONDS = 5 * 60


class RateLimiter:
	"""In-process fixed-window counter keyed by an arbitrary string.

	Approximate by design: the window restarts on the first call after it
	has elapsed. Every read-modify-write happens under one lock, so
	concurrent requests never lose an increment. Swap this class for one
	backed by a shared store if the app runs in more than one process.
	"""

	def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
		self._clock = clock
		self._lock = threading.Lock()
		# key -> (count, reset_at)
		self._entries: Dict[str, Tuple[int, float]] = {}
		self._last_cleanup = clock()

	def check(self, key: str, max_requests: int, window_seconds: float, now: Optional[float] = None) -> bool:
		with self._lock:
			now = self._clock() if now is None else now
			self._cleanup(now)
			entry = self._entries.get(key)
			if entry is None or now > entry[1]:
				self._entries[key] = (1, now + window_seconds)
				return 1 <= max_requests
			count = entry[0] + 1
			self._entries[key] = (count, entry[1])
			return count <= max_requests

	def reset(self) -> None:
		with self._lock:
			self._entries.clear()
			self._last_cleanup = self._clock()

	def __len__(self) -> int:
		with self._lock:
			return len(self._entries)

	def _cleanup(self, now: float) -> None:
		if now - self._last_cleanup < CLEANUP_INTERVAL_SECONDS:
			return
		self._last_cleanup = now
		expired = [key for key, (_, reset_at) in self._entries.items() if now > reset_at]
		for key in expired:
			del self._entries[key]


# Shared by every request in this process
survey_limiter = RateLimiter()
