"""Page class for page-level operations."""

import asyncio
import base64
import logging
from typing import TYPE_CHECKING, Any

from cdp_driver.actor import scripts
from cdp_driver.actor.evaluator import ScriptEvaluator
from cdp_driver.actor.keyboard import Keyboard
from cdp_driver.actor.mouse import Mouse
from cdp_driver.actor.polling import Poller
from cdp_driver.actor.views import ResponseInfo
from cdp_driver.config import DriverProfile

if TYPE_CHECKING:
	from cdp_use.cdp.page.commands import CaptureScreenshotParameters, NavigateParameters

	from cdp_driver.transport.session import TransportSession

logger = logging.getLogger(__name__)


class Page:
	"""Page operations for one connected target.

	Listens to the target's Page and Network events to know whether the main
	frame is loading, whether a JavaScript dialog is open, and which document
	response was received last. attach() must run before anything else.
	"""

	def __init__(self, session: 'TransportSession', target_id: str, profile: DriverProfile | None = None):
		self._session = session
		self.target_id = target_id
		self.profile = profile or DriverProfile()

		self.evaluator = ScriptEvaluator(session, max_value_depth=self.profile.max_value_depth)
		self.poller = Poller(self.evaluate, interval_ms=self.profile.poll_interval_ms)
		self.mouse = Mouse(session)
		self.keyboard = Keyboard(session)

		self.main_frame_id: str | None = None
		self._idle = asyncio.Event()
		self._idle.set()
		self._navigated = asyncio.Event()
		self._dialog_open = False
		self._response: ResponseInfo | None = None

	@property
	def session(self) -> 'TransportSession':
		return self._session

	@property
	def is_loading(self) -> bool:
		return not self._idle.is_set()

	@property
	def has_javascript_dialog(self) -> bool:
		return self._dialog_open

	@property
	def response(self) -> ResponseInfo | None:
		"""The last main-frame document response, if any."""
		return self._response

	async def attach(self) -> None:
		"""Subscribe to the target's events and enable the domains that emit them."""
		self._session.on('Page.frameStartedLoading', self._on_frame_started_loading)
		self._session.on('Page.frameStoppedLoading', self._on_frame_stopped_loading)
		self._session.on('Page.loadEventFired', self._on_load_event_fired)
		self._session.on('Page.frameNavigated', self._on_frame_navigated)
		self._session.on('Page.navigatedWithinDocument', self._on_navigated_within_document)
		self._session.on('Page.javascriptDialogOpening', self._on_dialog_opening)
		self._session.on('Page.javascriptDialogClosed', self._on_dialog_closed)
		self._session.on('Network.responseReceived', self._on_response_received)

		await self._session.send('Page.enable')
		await self._session.send('Network.enable')

		tree = await self._session.send('Page.getFrameTree')
		self.main_frame_id = tree.get('frameTree', {}).get('frame', {}).get('id')
		logger.debug(f'Attached to target {self.target_id}, main frame {self.main_frame_id}')

	async def close(self) -> None:
		await self._session.close()

	# Navigation

	async def visit(self, url: str) -> None:
		"""Navigate to url and wait for the load to finish."""
		self._navigated.clear()
		params: 'NavigateParameters' = {'url': url}
		result = await self._session.send('Page.navigate', params)

		if error_text := result.get('errorText'):
			# downloads and aborted loads never commit a new document
			logger.warning(f'Navigation to {url} failed: {error_text}')
			return

		await self._wait_for_navigation()
		await self.wait_for_load()

	async def reload(self) -> None:
		self._navigated.clear()
		await self._session.send('Page.reload')
		await self._wait_for_navigation()
		await self.wait_for_load()

	async def go_back(self) -> None:
		"""Navigate back in history; does nothing on the first entry."""
		await self._go_to_history_offset(-1)

	async def go_forward(self) -> None:
		"""Navigate forward in history; does nothing on the last entry."""
		await self._go_to_history_offset(1)

	async def _go_to_history_offset(self, offset: int) -> None:
		history = await self._session.send('Page.getNavigationHistory')
		index = history.get('currentIndex', 0) + offset
		entries = history.get('entries', [])

		if not 0 <= index < len(entries):
			logger.debug(f'No history entry at offset {offset}')
			return

		self._navigated.clear()
		await self._session.send('Page.navigateToHistoryEntry', {'entryId': entries[index]['id']})
		await self._wait_for_navigation()
		await self.wait_for_dom()
		await self.wait_for_load()

	async def reset(self) -> None:
		"""Leave the current document for about:blank and forget the last response."""
		await self.visit('about:blank')
		self._response = None

	# Synchronization

	async def wait_for_load(self, timeout: float | None = None) -> None:
		"""Wait until the main frame stops loading, or give up after timeout seconds."""
		if self._idle.is_set() or self._dialog_open:
			return

		timeout = self.profile.load_timeout if timeout is None else timeout
		try:
			await asyncio.wait_for(self._idle.wait(), timeout)
		except TimeoutError:
			logger.warning(f'Page {self.target_id} still loading after {timeout}s, continuing anyway')
			self._idle.set()

	async def wait(self, timeout_ms: int, condition: str, deadline: float | None = None) -> bool:
		return await self.poller.wait(timeout_ms, condition, deadline=deadline)

	async def wait_for_dom(self) -> None:
		"""Wait for document.readyState to reach complete, unless a dialog blocks the page."""
		if self._dialog_open:
			return
		if not await self.wait(self.profile.dom_ready_timeout_ms, scripts.DOCUMENT_READY):
			logger.debug(f'Document of {self.target_id} not complete after {self.profile.dom_ready_timeout_ms}ms')

	async def _wait_for_navigation(self) -> None:
		try:
			await asyncio.wait_for(self._navigated.wait(), self.profile.load_timeout)
		except TimeoutError:
			logger.warning(f'Page {self.target_id} did not navigate within {self.profile.load_timeout}s')

	# Scripts

	async def evaluate(self, script: str) -> Any:
		"""Evaluate script once the current load has finished."""
		await self.wait_for_load()
		return await self.evaluator.evaluate(script)

	async def run(self, script: str) -> None:
		await self.wait_for_load()
		await self.evaluator.run(script)

	# Dialogs and capture

	async def accept_alert(self, text: str = '') -> None:
		await self._session.send('Page.handleJavaScriptDialog', {'accept': True, 'promptText': text})
		self._dialog_open = False

	async def dismiss_alert(self) -> None:
		await self._session.send('Page.handleJavaScriptDialog', {'accept': False})
		self._dialog_open = False

	async def screenshot(self, format: str = 'png') -> bytes:
		"""Capture the viewport and return the decoded image bytes."""
		params: 'CaptureScreenshotParameters' = {'format': format}
		result = await self._session.send('Page.captureScreenshot', params)
		return base64.b64decode(result['data'])

	# Event handlers

	def _is_main_frame(self, frame_id: str | None) -> bool:
		return self.main_frame_id is None or frame_id == self.main_frame_id

	def _on_frame_started_loading(self, params: dict) -> None:
		if self._is_main_frame(params.get('frameId')):
			self._idle.clear()

	def _on_frame_stopped_loading(self, params: dict) -> None:
		if self._is_main_frame(params.get('frameId')):
			self._idle.set()

	def _on_load_event_fired(self, params: dict) -> None:
		self._idle.set()

	def _on_frame_navigated(self, params: dict) -> None:
		frame = params.get('frame', {})
		if frame.get('parentId'):
			return
		self.main_frame_id = frame.get('id', self.main_frame_id)
		self._navigated.set()

	def _on_navigated_within_document(self, params: dict) -> None:
		if self._is_main_frame(params.get('frameId')):
			self._navigated.set()

	def _on_dialog_opening(self, params: dict) -> None:
		logger.debug(f'JavaScript {params.get("type", "dialog")} opened: {params.get("message", "")!r}')
		self._dialog_open = True
		# an open dialog suspends loading until it is handled
		self._idle.set()

	def _on_dialog_closed(self, params: dict) -> None:
		self._dialog_open = False

	def _on_response_received(self, params: dict) -> None:
		if params.get('type') != 'Document' or not self._is_main_frame(params.get('frameId')):
			return
		response = params.get('response', {})
		self._response = ResponseInfo(
			url=response.get('url', ''),
			status=response.get('status', 0),
			status_text=response.get('statusText', ''),
			headers={name: str(value) for name, value in response.get('headers', {}).items()},
		)
