"""Bounded polling of page-side conditions."""

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class Poller:
	"""Re-evaluates a JavaScript condition until it is truthy or the time budget runs out."""

	def __init__(self, evaluate: Callable[[str], Awaitable[Any]], interval_ms: int = 10):
		if interval_ms < 1:
			raise ValueError('interval_ms must be at least 1')
		self._evaluate = evaluate
		self.interval_ms = interval_ms

	async def wait(self, timeout_ms: int, condition: str, deadline: float | None = None) -> bool:
		"""Wait for condition to become truthy.

		The condition is evaluated at most ceil(timeout_ms / interval_ms) + 1
		times, with interval_ms between two evaluations.

		Args:
			timeout_ms: Polling budget in milliseconds
			condition: JavaScript expression
			deadline: Optional absolute event-loop time after which polling stops early

		Returns:
			True as soon as the condition holds, False when the budget is spent
		"""
		loop = asyncio.get_running_loop()
		retries = max(0, math.ceil(timeout_ms / self.interval_ms))

		for attempt in range(retries + 1):
			if await self._evaluate(condition):
				return True
			if attempt == retries:
				break
			if deadline is not None and loop.time() + self.interval_ms / 1000 > deadline:
				logger.debug(f'Deadline reached after {attempt + 1} evaluations of {condition!r}')
				break
			await asyncio.sleep(self.interval_ms / 1000)

		return False
