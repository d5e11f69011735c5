"""Mouse class for mouse operations."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from cdp_use.cdp.input.commands import DispatchMouseEventParameters
	from cdp_use.cdp.input.types import MouseButton

	from cdp_driver.transport.session import TransportSession

# Press and release land this far from the move point
CLICK_OFFSET = 5


class Mouse:
	"""Mouse operations for a target."""

	def __init__(self, session: 'TransportSession'):
		self._session = session

	async def click(self, x: int, y: int, button: 'MouseButton' = 'left', click_count: int = 1) -> None:
		"""Move to (x, y), then press and release next to it."""
		await self.move(x, y)
		await self.down(x + CLICK_OFFSET, y + CLICK_OFFSET, button=button, click_count=click_count)
		await self.up(x + CLICK_OFFSET, y + CLICK_OFFSET, button=button, click_count=click_count)

	async def down(self, x: int, y: int, button: 'MouseButton' = 'left', click_count: int = 1) -> None:
		"""Press mouse button down."""
		params: 'DispatchMouseEventParameters' = {
			'type': 'mousePressed',
			'x': x,
			'y': y,
			'button': button,
			'clickCount': click_count,
		}
		await self._session.send('Input.dispatchMouseEvent', params)

	async def up(self, x: int, y: int, button: 'MouseButton' = 'left', click_count: int = 1) -> None:
		"""Release mouse button."""
		params: 'DispatchMouseEventParameters' = {
			'type': 'mouseReleased',
			'x': x,
			'y': y,
			'button': button,
			'clickCount': click_count,
		}
		await self._session.send('Input.dispatchMouseEvent', params)

	async def move(self, x: int, y: int) -> None:
		"""Move mouse to the specified coordinates."""
		params: 'DispatchMouseEventParameters' = {'type': 'mouseMoved', 'x': x, 'y': y}
		await self._session.send('Input.dispatchMouseEvent', params)

	async def drag(self, source: tuple[int, int], destination: tuple[int, int]) -> None:
		"""Press at source and release at destination, with no intermediate moves."""
		await self.move(*source)
		await self.down(*source)
		await self.move(*destination)
		await self.up(*destination)
