"""Websocket session to a single DevTools target.

Owns the pending-command table: every outgoing command gets a fresh id and a
future, and the reader task resolves that future when the matching reply comes
back. Frames without an id are protocol events and go to the registered
handlers and waiters instead. Replies and events may arrive in any order.
"""

import asyncio
import contextlib
import json
import logging
from collections.abc import Callable
from typing import Any

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from cdp_driver.errors import CDPConnectionError, CDPProtocolError, CDPTimeoutError

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict[str, Any]], None]
EventPredicate = Callable[[dict[str, Any]], bool]


class TransportSession:
	"""One persistent websocket connection to one browser target."""

	def __init__(self, ws_url: str, command_timeout: float | None = None):
		self.ws_url = ws_url
		self.command_timeout = command_timeout

		self._ws: ClientConnection | None = None
		self._reader: asyncio.Task | None = None
		self._closed = False

		# id -> future of the caller awaiting that reply
		self._next_id = 0
		self._pending: dict[int, asyncio.Future] = {}

		self._handlers: dict[str, list[EventHandler]] = {}
		self._waiters: list[tuple[str, EventPredicate | None, asyncio.Future]] = []

	@property
	def connected(self) -> bool:
		return self._ws is not None and not self._closed and self._reader is not None and not self._reader.done()

	@property
	def pending_count(self) -> int:
		"""Number of commands still waiting for a reply."""
		return len(self._pending)

	async def connect(self) -> None:
		"""Open the websocket and start routing incoming frames."""
		if self._ws is not None:
			return

		logger.debug(f'Connecting to {self.ws_url}')
		try:
			# Screenshots and flattened DOM trees easily exceed the default frame limit
			self._ws = await connect(self.ws_url, max_size=None, open_timeout=10)
		except (OSError, InvalidHandshake, InvalidURI, TimeoutError) as e:
			raise CDPConnectionError(f'Failed to connect to {self.ws_url}: {e}', method='connect') from e

		self._closed = False
		self._reader = asyncio.create_task(self._read_loop(), name=f'cdp-reader:{self.ws_url}')

	async def send(self, method: str, params: dict[str, Any] | None = None, timeout: float | None = None) -> dict[str, Any]:
		"""Send a command and wait for its reply.

		Args:
			method: Protocol method, e.g. 'Runtime.evaluate'
			params: Command parameters
			timeout: Seconds to wait for the reply, defaults to command_timeout

		Returns:
			The reply's result member

		Raises:
			CDPConnectionError: The socket is closed or drops before the reply arrives
			CDPTimeoutError: No reply within the timeout
			CDPProtocolError: The browser rejected the command
		"""
		if not self.connected or self._ws is None:
			raise CDPConnectionError(f'Cannot send {method}: session is not connected', method=method)

		self._next_id += 1
		command_id = self._next_id
		future = asyncio.get_running_loop().create_future()
		self._pending[command_id] = future

		message = {'id': command_id, 'method': method, 'params': params or {}}
		logger.debug(f'-> {command_id} {method}')

		try:
			await self._ws.send(json.dumps(message))
		except ConnectionClosed as e:
			self._pending.pop(command_id, None)
			raise CDPConnectionError(f'Connection lost while sending {method}: {e}', method=method) from e

		timeout = self.command_timeout if timeout is None else timeout
		try:
			if timeout is None:
				return await future
			return await asyncio.wait_for(future, timeout)
		except TimeoutError as e:
			raise CDPTimeoutError(f'{method} got no reply within {timeout}s', method=method) from e
		finally:
			self._pending.pop(command_id, None)

	def on(self, event: str, handler: EventHandler) -> None:
		"""Call handler with the params of every `event` notification."""
		self._handlers.setdefault(event, []).append(handler)

	def off(self, event: str, handler: EventHandler) -> None:
		handlers = self._handlers.get(event, [])
		if handler in handlers:
			handlers.remove(handler)

	async def wait_for_event(
		self, event: str, predicate: EventPredicate | None = None, timeout: float | None = None
	) -> dict[str, Any]:
		"""Wait for the next `event` notification whose params satisfy predicate."""
		future = asyncio.get_running_loop().create_future()
		waiter = (event, predicate, future)
		self._waiters.append(waiter)
		try:
			return await asyncio.wait_for(future, timeout)
		except TimeoutError as e:
			raise CDPTimeoutError(f'No {event} event within {timeout}s', method=event) from e
		finally:
			if waiter in self._waiters:
				self._waiters.remove(waiter)

	async def close(self) -> None:
		"""Close the socket and fail every pending command. Closing twice does nothing."""
		if self._closed:
			return
		self._closed = True

		if self._reader is not None and not self._reader.done():
			self._reader.cancel()
			with contextlib.suppress(asyncio.CancelledError):
				await self._reader

		if self._ws is not None:
			try:
				await self._ws.close()
			except (OSError, ConnectionClosed) as e:
				logger.debug(f'Error closing websocket {self.ws_url}: {e}')

		self._fail_pending(CDPConnectionError('Session closed', method='close'))
		logger.debug(f'Closed session {self.ws_url}')

	async def __aenter__(self) -> 'TransportSession':
		await self.connect()
		return self

	async def __aexit__(self, *exc_info) -> None:
		await self.close()

	async def _read_loop(self) -> None:
		assert self._ws is not None
		try:
			async for raw in self._ws:
				self._route(raw)
		except ConnectionClosed as e:
			logger.info(f'Connection to {self.ws_url} lost: {e}')
		finally:
			self._fail_pending(CDPConnectionError(f'Connection to {self.ws_url} closed', method='listen'))

	def _route(self, raw: str | bytes) -> None:
		try:
			message = json.loads(raw)
		except json.JSONDecodeError as e:
			logger.warning(f'Dropping unparsable frame: {e}')
			return

		if 'id' in message:
			self._resolve_reply(message)
		elif 'method' in message:
			self._emit(message['method'], message.get('params', {}))

	def _resolve_reply(self, message: dict[str, Any]) -> None:
		future = self._pending.pop(message['id'], None)
		if future is None or future.done():
			logger.debug(f'<- {message["id"]} reply with no waiting caller')
			return

		if 'error' in message:
			error = message['error']
			future.set_exception(
				CDPProtocolError(
					f'CDP error {error.get("code")}: {error.get("message", "Unknown CDP error")}',
					code=error.get('code'),
				)
			)
		else:
			future.set_result(message.get('result', {}))

	def _emit(self, event: str, params: dict[str, Any]) -> None:
		for handler in list(self._handlers.get(event, [])):
			try:
				handler(params)
			except Exception:
				logger.exception(f'Handler for {event} failed')

		for name, predicate, future in list(self._waiters):
			if name != event or future.done():
				continue
			try:
				matched = predicate is None or predicate(params)
			except Exception as e:
				future.set_exception(e)
				continue
			if matched:
				future.set_result(params)

	def _fail_pending(self, error: CDPConnectionError) -> None:
		pending, self._pending = self._pending, {}
		for future in pending.values():
			if not future.done():
				future.set_exception(error)

		for _, _, future in self._waiters:
			if not future.done():
				future.set_exception(error)
