"""Element class for element operations."""

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from cdp_driver.actor import scripts
from cdp_driver.actor.keyboard import KeyModifier, char_code, modifier_flags
from cdp_driver.actor.locator import ElementLocator

if TYPE_CHECKING:
	from cdp_driver.browser.views import PageContext

logger = logging.getLogger(__name__)


class Element:
	"""Element operations, addressed by an XPath under the active document.

	The XPath is resolved again by every call, so an Element never holds on
	to a stale node.
	"""

	def __init__(self, context: 'PageContext', xpath: str):
		self._page = context.page
		self._locator = ElementLocator(context.page.evaluate, context.document)
		self.xpath = xpath

	async def _run(self, body: str, element_type: str | None = None) -> Any:
		return await self._locator.run_on_element(self.xpath, body, element_type)

	# Mouse

	async def coordinates(self) -> tuple[int, int]:
		return await self._locator.coordinates(self.xpath)

	async def mouse_over(self) -> tuple[int, int]:
		"""Scroll the element into view and move the pointer onto it."""
		await self._run(scripts.SCROLL_INTO_VIEW)
		x, y = await self.coordinates()
		await self._page.mouse.move(x, y)
		return x, y

	async def click(self) -> None:
		"""Click the element with real mouse events."""
		await self.mouse_over()
		x, y = await self.coordinates()
		logger.debug(f'Clicking {self.xpath} at x={x}, y={y}')
		await self._page.mouse.click(x, y)

		await asyncio.sleep(self._page.profile.click_pause)
		await self._page.wait_for_dom()

	async def double_click(self) -> None:
		await self.click()
		await self._run(scripts.dispatch_mouse_event_body('dblclick'))

	async def right_click(self) -> None:
		await self.mouse_over()
		await self._run(scripts.dispatch_event_body('contextmenu', bubbles=False))

	async def drag_to(self, target: 'Element') -> None:
		"""Press on this element and release on target."""
		source = await self.coordinates()
		destination = await target.coordinates()
		logger.debug(f'Dragging {self.xpath} {source} to {target.xpath} {destination}')
		await self._page.mouse.drag(source, destination)

	# Events

	async def focus(self) -> None:
		await self._run(scripts.dispatch_event_body('focus', bubbles=False))

	async def blur(self) -> None:
		await self._run(scripts.dispatch_event_body('blur', bubbles=False))

	async def key_press(self, char: str | int, modifier: KeyModifier | str | None = None) -> None:
		await self._keyboard_event('keypress', char, modifier)

	async def key_down(self, char: str | int, modifier: KeyModifier | str | None = None) -> None:
		await self._keyboard_event('keydown', char, modifier)

	async def key_up(self, char: str | int, modifier: KeyModifier | str | None = None) -> None:
		await self._keyboard_event('keyup', char, modifier)

	async def _keyboard_event(self, name: str, char: str | int, modifier: KeyModifier | str | None) -> None:
		key, code = char_code(char)
		await self._run(scripts.keyboard_event_body(name, key, code, **modifier_flags(modifier)))

	# Values

	async def get_value(self) -> Any:
		"""Current form value: checkbox and radio give the checked value or None, multi-selects a list."""
		return await self._run(scripts.GET_VALUE)

	async def text_field_kind(self) -> str | None:
		"""'textarea', 'input' for text-like inputs, None for every other control."""
		return await self._run(scripts.TEXT_FIELD_KIND) or None

	async def is_text_field(self) -> bool:
		return await self.text_field_kind() is not None

	async def set_value(self, value: Any) -> None:
		"""Set the element's value the way a user would.

		Text fields are cleared and typed into with raw key events. Every other
		control is updated by script, followed by a change event. Newlines are
		typed as Enter in a textarea and dropped from single-line inputs.
		"""
		kind = await self.text_field_kind()
		if kind is None:
			await self._set_non_text_value(value)
			return

		current = await self.get_value()
		await self._run('element.focus();\nreturn null;')
		await self._page.keyboard.erase(len(current or ''))
		text = '' if value is None else str(value)
		await self._page.keyboard.type_text(text, multiline=kind == 'textarea')
		await self._run('element.blur();\nreturn null;')

	async def _set_non_text_value(self, value: Any) -> None:
		result = await self._run(scripts.set_value_body(value))
		if isinstance(value, bool) and isinstance(result, bool) and result is not value:
			logger.warning(f'Checkbox {self.xpath} is {"checked" if result else "unchecked"} after setting it to {value}')

	async def check(self) -> None:
		await self._locator.expect(self.xpath, scripts.IS_CHECKBOX, 'checkbox')
		await self._set_non_text_value(True)

	async def uncheck(self) -> None:
		await self._locator.expect(self.xpath, scripts.IS_CHECKBOX, 'checkbox')
		await self._set_non_text_value(False)

	async def select_option(self, value: str | list[str], multiple: bool = False) -> None:
		"""Select value in a select box or radio group, keeping the current selection when multiple."""
		await self._locator.expect(self.xpath, scripts.IS_SELECT_OR_RADIO, 'select')
		if multiple:
			requested = value if isinstance(value, list) else [value]
			current = await self.get_value()
			if not isinstance(current, list):
				current = [] if current is None else [current]
			value = requested + [item for item in current if item not in requested]
		await self.set_value(value)

	async def submit_form(self) -> None:
		await self._locator.expect(self.xpath, scripts.IS_FORM, 'form')
		await self._run(scripts.SUBMIT_FORM)

	async def file_input_name(self) -> str | None:
		"""Name attribute of a file input."""
		await self._locator.expect(self.xpath, scripts.IS_FILE_INPUT, 'file')
		return await self._run(scripts.FILE_INPUT_NAME)

	# Reads

	async def get_tag_name(self) -> str:
		return await self._locator.element_property(self.xpath, 'tagName')

	async def get_text(self) -> str:
		"""Rendered text with runs of whitespace collapsed to one space."""
		return await self._run(scripts.GET_TEXT)

	async def get_html(self) -> str:
		return await self._locator.element_property(self.xpath, 'innerHTML')

	async def get_outer_html(self) -> str:
		return await self._locator.element_property(self.xpath, 'outerHTML')

	async def get_attribute(self, name: str) -> str | None:
		return await self._locator.attribute(self.xpath, name)

	async def is_checked(self) -> bool:
		return bool(await self._run(scripts.IS_CHECKED))

	async def is_selected(self) -> bool:
		return bool(await self._run(scripts.IS_SELECTED, 'select'))

	async def is_visible(self) -> bool:
		return bool(await self._run(scripts.IS_VISIBLE))
