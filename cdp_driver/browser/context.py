"""Connected browser state: which window is driven, which document is active, what headers are sent.

Only one page target is connected at a time. Switching windows closes the
current page session and opens a new one, and every switch resets the active
document to the top document and re-sends the request headers.
"""

import base64
import logging
from urllib.parse import quote_plus, unquote_plus

from cdp_driver.actor import scripts
from cdp_driver.actor.element import Element
from cdp_driver.actor.locator import ElementLocator
from cdp_driver.actor.page import Page
from cdp_driver.browser.views import DocumentReference, PageContext
from cdp_driver.config import DriverProfile
from cdp_driver.errors import (
	CDPProtocolError,
	DriverError,
	ElementNotFoundError,
	EvaluationError,
	TargetNotFoundError,
)
from cdp_driver.transport.directory import TargetDirectory
from cdp_driver.transport.session import TransportSession

logger = logging.getLogger(__name__)


class BrowserContext:
	"""Owns the browser-level session and the session of the window being driven."""

	def __init__(self, profile: DriverProfile | None = None, directory: TargetDirectory | None = None):
		self.profile = profile or DriverProfile()
		self.directory = directory or TargetDirectory(self.profile.api_url)

		self.browser_session: TransportSession | None = None
		self.main_window: str | None = None
		self.page: Page | None = None
		self.document = DocumentReference.top()
		self.request_headers: dict[str, str] = {}

	@property
	def is_connected(self) -> bool:
		return self.page is not None and self.page.session.connected

	@property
	def current_window(self) -> str | None:
		return self.page.target_id if self.page else None

	@property
	def current(self) -> PageContext:
		"""Where the next operation runs.

		Raises:
			DriverError: No window is connected
		"""
		if self.page is None:
			raise DriverError('Driver is not started')
		return PageContext(page=self.page, target_id=self.page.target_id, document=self.document)

	def element(self, xpath: str) -> Element:
		return Element(self.current, xpath)

	# Lifecycle

	async def start(self) -> None:
		"""Connect to the browser, open a fresh tab and make it the main window."""
		version = await self.directory.version()
		logger.info(f'Connecting to {version.browser or "browser"} at {self.profile.api_url}')

		self.browser_session = TransportSession(version.ws_url, command_timeout=self.profile.command_timeout)
		await self.browser_session.connect()

		result = await self.browser_session.send('Target.createTarget', {'url': 'about:blank'})
		self.main_window = result['targetId']
		await self.connect_to_window(self.main_window)

	async def close(self) -> None:
		if self.page is not None:
			await self.page.close()
			self.page = None
		if self.browser_session is not None:
			await self.browser_session.close()
			self.browser_session = None
		self.document = DocumentReference.top()

	async def reset(self) -> None:
		"""Return to a clean main window: top document, no cookies, no extra headers, about:blank."""
		self.document = DocumentReference.top()
		await self.delete_all_cookies()
		if self.main_window is not None:
			await self.connect_to_window(self.main_window)
		await self._require_page().reset()
		self.request_headers.clear()
		await self._send_headers()

	# Windows

	async def connect_to_window(self, target_id: str) -> None:
		"""Make target_id the driven window. Does nothing if it already is.

		The current window stays driven until the new one is attached, so a
		failed switch leaves the context as it was.
		"""
		if self.page is not None and self.page.target_id == target_id and self.page.session.connected:
			return

		session = TransportSession(self.directory.page_ws_url(target_id), command_timeout=self.profile.command_timeout)
		await session.connect()
		page = Page(session, target_id, self.profile)
		try:
			await page.attach()
			await self._apply_headers(session)
		except Exception:
			await session.close()
			raise

		previous, self.page = self.page, page
		if previous is not None:
			await previous.close()
		self.document = DocumentReference.top()
		logger.info(f'Switched to window {target_id}')

	async def switch_to_window(self, name: str | None = None) -> None:
		"""Switch to the window whose target id or title is name; None means the main window.

		Raises:
			TargetNotFoundError: No listed tab matches and popup discovery found nothing
		"""
		if name is None:
			if self.main_window is None:
				raise DriverError('Driver is not started')
			await self.connect_to_window(self.main_window)
			return

		for tab in await self.directory.list_pages():
			if name in (tab.target_id, tab.title):
				await self.connect_to_window(tab.target_id)
				return

		target_id = await self._find_popup(name)
		if target_id is None:
			raise TargetNotFoundError(name)
		await self.connect_to_window(target_id)

	async def _find_popup(self, name: str) -> str | None:
		"""Reach a window by its window.open name: open it by name, then match its title and URL to a target."""
		page = self._require_page()
		try:
			await page.run(scripts.open_popup_script(name))
			if not await page.wait(self.profile.popup_timeout_ms, scripts.POPUP_LOADED):
				logger.debug(f'Window {name!r} stayed blank, closing it')
				await page.run(scripts.CLOSE_BLANK_POPUP)
				return None

			title, url = await page.evaluate(scripts.POPUP_INFO)
			for target in await self.directory.list_targets():
				info = await self._target_info(target.target_id)
				if info.get('type') == 'page' and info.get('url') == url and info.get('title') == title:
					return info.get('targetId', target.target_id)
		except (EvaluationError, CDPProtocolError, TypeError, ValueError) as e:
			logger.debug(f'Popup discovery for {name!r} failed: {e}')
		return None

	async def _target_info(self, target_id: str) -> dict:
		session = self.browser_session or self._require_page().session
		result = await session.send('Target.getTargetInfo', {'targetId': target_id})
		return result.get('targetInfo', {})

	async def get_window_names(self) -> list[str]:
		return [tab.target_id for tab in await self.directory.list_pages()]

	async def switch_to_iframe(self, name: str | None = None) -> None:
		"""Scope queries to the iframe with id or name `name`; None returns to the top document.

		Raises:
			ElementNotFoundError: No such iframe under the active document
		"""
		if name is None:
			self.document = DocumentReference.top()
			return

		locator = ElementLocator(self._require_page().evaluate, self.document)
		await locator.run_on_element(scripts.iframe_xpath(name), scripts.STORE_IFRAME, 'iframe')
		self.document = DocumentReference.for_iframe(name)

	# Headers

	async def set_request_header(self, name: str, value: str) -> None:
		self.request_headers[name] = value
		await self._send_headers()

	async def unset_request_header(self, name: str) -> None:
		self.request_headers.pop(name, None)
		await self._send_headers()

	async def set_basic_auth(self, user: str | bool | None, password: str = '') -> None:
		"""Send HTTP basic credentials with every request; a user of None or False stops sending them."""
		if user is None or user is False:
			await self.unset_request_header('Authorization')
			return
		token = base64.b64encode(f'{user}:{password}'.encode()).decode()
		await self.set_request_header('Authorization', f'Basic {token}')

	async def _send_headers(self) -> None:
		if self.page is not None:
			await self._apply_headers(self.page.session)

	async def _apply_headers(self, session: TransportSession) -> None:
		await session.send('Network.setExtraHTTPHeaders', {'headers': dict(self.request_headers)})

	# Cookies

	async def set_cookie(self, name: str, value: str | None = None) -> None:
		"""Set a cookie for the site root; a value of None deletes every cookie called name."""
		session = self._require_page().session
		if value is None:
			cookies = (await session.send('Network.getAllCookies')).get('cookies', [])
			for cookie in cookies:
				if cookie.get('name') == name:
					await session.send(
						'Network.deleteCookies', {'name': name, 'domain': cookie.get('domain'), 'path': cookie.get('path')}
					)
			return

		url = await self._cookie_url()
		result = await session.send('Network.setCookie', {'name': name, 'value': quote_plus(str(value)), 'url': url})
		if result.get('success') is False:
			logger.warning(f'Browser refused cookie {name!r} for {url}')

	async def get_cookie(self, name: str) -> str | None:
		"""Decoded value of a cookie visible to the current page."""
		cookies = (await self._require_page().session.send('Network.getCookies')).get('cookies', [])
		for cookie in cookies:
			if cookie.get('name') == name:
				return unquote_plus(cookie.get('value', ''))
		return None

	async def delete_all_cookies(self) -> None:
		await self._require_page().session.send('Network.clearBrowserCookies')

	async def _cookie_url(self) -> str:
		if self.profile.base_url:
			return self.profile.base_url.rstrip('/') + '/'
		return await self._require_page().evaluate('window.location.href')

	# Files

	async def attach_file(self, xpath: str, path: str) -> None:
		"""Put path into the file input matched by xpath.

		Raises:
			ElementNotFoundError: xpath matches no file input, or the input cannot be found in the DOM tree
		"""
		name = await self.element(xpath).file_input_name()
		session = self._require_page().session
		document = await session.send('DOM.getFlattenedDocument', {'depth': -1, 'pierce': True})

		for node in document.get('nodes', []):
			attributes = node.get('attributes', [])
			pairs = dict(zip(attributes[::2], attributes[1::2]))
			if name and pairs.get('name') == name and pairs.get('type', '').lower() == 'file':
				await session.send('DOM.setFileInputFiles', {'files': [path], 'nodeId': node['nodeId']})
				return

		raise ElementNotFoundError(xpath, 'file')

	def _require_page(self) -> Page:
		if self.page is None:
			raise DriverError('Driver is not started')
		return self.page

