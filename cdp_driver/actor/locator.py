"""XPath lookups and per-element script execution."""

import logging
import math
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from cdp_driver.actor import scripts
from cdp_driver.errors import ElementNotFoundError, EvaluationError

if TYPE_CHECKING:
	from cdp_driver.browser.views import DocumentReference

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
	return int(math.floor(value + 0.5))


class ElementLocator:
	"""Resolves XPath queries under one document.

	Nothing is cached: every call evaluates its query again, so a locator
	stays valid across DOM mutations as long as the document itself does.
	"""

	def __init__(self, evaluate: Callable[[str], Awaitable[Any]], document: 'DocumentReference'):
		self._evaluate = evaluate
		self.document = document

	async def find(self, xpath: str) -> list[str]:
		"""Canonical path of every match of xpath, in document order."""
		paths = await self._evaluate(scripts.find_script(self.document.expression, xpath))
		return list(paths or [])

	async def run_on_element(self, xpath: str, body: str, element_type: str | None = None) -> Any:
		"""Run body with the first match of xpath bound to `element`.

		Raises:
			ElementNotFoundError: Nothing matches xpath
			EvaluationError: body itself threw
		"""
		script = scripts.element_script(self.document.expression, xpath, body)
		try:
			return await self._evaluate(script)
		except EvaluationError as e:
			if scripts.ELEMENT_NOT_FOUND in e.description:
				raise ElementNotFoundError(xpath, element_type) from e
			raise

	async def expect(self, xpath: str, condition: str, element_type: str) -> None:
		"""Require the first match of xpath to satisfy condition.

		Raises:
			ElementNotFoundError: Nothing matches, or the match is not an element_type
		"""
		if not await self.run_on_element(xpath, scripts.expect_body(condition), element_type):
			raise ElementNotFoundError(xpath, element_type)

	async def element_property(self, xpath: str, name: str) -> Any:
		return await self.run_on_element(xpath, scripts.property_body(name))

	async def attribute(self, xpath: str, name: str) -> str | None:
		return await self.run_on_element(xpath, scripts.attribute_body(name))

	async def coordinates(self, xpath: str) -> tuple[int, int]:
		"""Viewport point one pixel inside the element's top-left corner."""
		left, top = await self.run_on_element(xpath, scripts.COORDINATES)
		x, y = round_half_up(left + 1), round_half_up(top + 1)
		logger.debug(f'Element {xpath} is at x={x}, y={y}')
		return x, y
