"""Keyboard input for a target."""

import logging
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from cdp_use.cdp.input.commands import DispatchKeyEventParameters

	from cdp_driver.transport.session import TransportSession

logger = logging.getLogger(__name__)


class KeyModifier(str, Enum):
	"""Modifier flag of a synthesized keyboard event."""

	CTRL = 'ctrl'
	ALT = 'alt'
	SHIFT = 'shift'
	META = 'meta'


# Named keys used for editing text, as (code, windowsVirtualKeyCode)
# Reference: https://docs.microsoft.com/en-us/windows/win32/inputdev/virtual-key-codes
KEY_MAP: dict[str, tuple[str, int]] = {
	'Backspace': ('Backspace', 8),
	'Tab': ('Tab', 9),
	'Enter': ('Enter', 13),
	'Escape': ('Escape', 27),
	' ': ('Space', 32),
	'Delete': ('Delete', 46),
	';': ('Semicolon', 186),
	'=': ('Equal', 187),
	',': ('Comma', 188),
	'-': ('Minus', 189),
	'.': ('Period', 190),
	'/': ('Slash', 191),
	'`': ('Backquote', 192),
	'[': ('BracketLeft', 219),
	'\\': ('Backslash', 220),
	']': ('BracketRight', 221),
	"'": ('Quote', 222),
}


def get_key_info(key: str) -> tuple[str, int | None]:
	"""Get the code and windowsVirtualKeyCode for a key.

	Args:
		key: Key name (e.g., 'Enter', 'Delete', 'a', '7')

	Returns:
		Tuple of (code, windowsVirtualKeyCode)
	"""
	if key in KEY_MAP:
		return KEY_MAP[key]

	if len(key) == 1:
		if key.isascii() and key.isalpha():
			# Letter keys: A-Z have VK codes 65-90
			return (f'Key{key.upper()}', ord(key.upper()))
		elif key.isascii() and key.isdigit():
			# Digit keys: 0-9 have VK codes 48-57 (same as ASCII)
			return (f'Digit{key}', ord(key))

	return (key, None)


def char_code(char: str | int) -> tuple[str, int]:
	"""Normalize a character or character code into (key, code)."""
	if isinstance(char, int):
		return chr(char), char
	if not char:
		raise ValueError('A key event needs a character')
	return char[0], ord(char[0])


def modifier_flags(modifier: KeyModifier | str | None) -> dict[str, bool]:
	"""ctrl/alt/shift/meta flags for one optional modifier."""
	active = KeyModifier(modifier) if modifier else None
	return {flag.value: flag is active for flag in KeyModifier}


class Keyboard:
	"""Raw key events for the focused element of a target."""

	def __init__(self, session: 'TransportSession'):
		self._session = session

	async def erase(self, count: int) -> None:
		"""Send Backspace then Delete once per character to remove."""
		for _ in range(count):
			await self._raw_key('Backspace')
			await self._raw_key('Delete')

	async def type_text(self, text: str, multiline: bool = True) -> None:
		"""Type text one character at a time.

		Newlines become Enter presses when multiline is set and are skipped otherwise.
		"""
		logger.debug(f'Typing {len(text)} characters')
		for char in text:
			if char == '\n':
				if multiline:
					await self._enter()
			else:
				await self._type_char(char)

	async def _raw_key(self, key: str) -> None:
		code, vk_code = get_key_info(key)
		down: 'DispatchKeyEventParameters' = {
			'type': 'rawKeyDown',
			'key': key,
			'code': code,
			'nativeVirtualKeyCode': vk_code,
			'windowsVirtualKeyCode': vk_code,
		}
		await self._session.send('Input.dispatchKeyEvent', down)

		up: 'DispatchKeyEventParameters' = {
			'type': 'keyUp',
			'key': key,
			'code': code,
			'nativeVirtualKeyCode': vk_code,
			'windowsVirtualKeyCode': vk_code,
		}
		await self._session.send('Input.dispatchKeyEvent', up)

	async def _type_char(self, char: str) -> None:
		down: 'DispatchKeyEventParameters' = {'type': 'keyDown', 'text': char, 'key': char}
		code, vk_code = get_key_info(char)
		if vk_code is not None:
			down['code'] = code
			down['windowsVirtualKeyCode'] = vk_code
		await self._session.send('Input.dispatchKeyEvent', down)

		up: 'DispatchKeyEventParameters' = {'type': 'keyUp', 'key': char}
		await self._session.send('Input.dispatchKeyEvent', up)

	async def _enter(self) -> None:
		down: 'DispatchKeyEventParameters' = {
			'type': 'keyDown',
			'text': '\r',
			'key': 'Enter',
			'code': 'Enter',
			'windowsVirtualKeyCode': 13,
		}
		await self._session.send('Input.dispatchKeyEvent', down)

		up: 'DispatchKeyEventParameters' = {'type': 'keyUp', 'key': 'Enter', 'code': 'Enter', 'windowsVirtualKeyCode': 13}
		await self._session.send('Input.dispatchKeyEvent', up)
