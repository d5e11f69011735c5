"""Client for the DevTools HTTP endpoints (/json/version, /json/list, /json/close)."""

import logging

import httpx

from cdp_driver.errors import CDPConnectionError
from cdp_driver.transport.views import BrowserVersion, TargetInfo

logger = logging.getLogger(__name__)


class TargetDirectory:
	"""Lists, locates and closes the targets of one browser."""

	def __init__(self, api_url: str = 'http://localhost:9222', client: httpx.AsyncClient | None = None):
		self.api_url = api_url.rstrip('/')
		self.ws_url = self.api_url.replace('http', 'ws', 1)
		self.client = client or httpx.AsyncClient(timeout=10.0)

	async def version(self) -> BrowserVersion:
		"""Fetch /json/version, which carries the browser-level websocket URL."""
		data = await self._get_json('/json/version')
		return BrowserVersion(**data)

	async def list_targets(self) -> list[TargetInfo]:
		"""Fetch every open target."""
		data = await self._get_json('/json/list')
		return [TargetInfo(**entry) for entry in data]

	async def list_pages(self) -> list[TargetInfo]:
		"""Fetch the open targets of type page (tabs and windows)."""
		return [target for target in await self.list_targets() if target.is_page]

	async def close_target(self, target_id: str) -> None:
		url = f'{self.api_url}/json/close/{target_id}'
		try:
			response = await self.client.get(url)
		except httpx.RequestError as e:
			raise CDPConnectionError(f'Failed to close target {target_id}: {e}', method='close_target') from e

		if not response.is_success:
			logger.debug(f'Closing target {target_id} returned HTTP {response.status_code}')

	def page_ws_url(self, target_id: str) -> str:
		return f'{self.ws_url}/devtools/page/{target_id}'

	async def aclose(self) -> None:
		await self.client.aclose()

	async def _get_json(self, path: str):
		url = f'{self.api_url}{path}'
		try:
			response = await self.client.get(url)
		except httpx.RequestError as e:
			raise CDPConnectionError(f'Failed to reach DevTools endpoint {url}: {e}', method=path) from e

		if not response.is_success:
			raise CDPConnectionError(f'DevTools endpoint {url} returned HTTP {response.status_code}', method=path)
		return response.json()
