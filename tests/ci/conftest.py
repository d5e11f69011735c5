"""Shared fixtures: an in-memory stand-in for TransportSession and ready-made pages on top of it."""

import pytest

from cdp_driver.actor.page import Page
from cdp_driver.browser.views import DocumentReference, PageContext
from cdp_driver.config import DriverProfile


class FakeSession:
	"""Records every command and answers from scripted replies.

	Replies are queued per method; the last queued reply for a method keeps
	being returned once the queue is down to it. A reply may be a dict, an
	exception to raise, or a callable taking the params. Events queued with a
	reply are emitted before the reply is returned.
	"""

	def __init__(self, ws_url: str = 'ws://fake/devtools/page/target-1', command_timeout: float | None = None):
		self.ws_url = ws_url
		self.command_timeout = command_timeout
		self.connected = False
		self.sent: list[tuple[str, dict]] = []
		self.objects: dict[str, list[dict]] = {}
		self._replies: dict[str, list[tuple]] = {}
		self._handlers: dict[str, list] = {}
		self._next_object = 0

	async def connect(self) -> None:
		self.connected = True

	async def close(self) -> None:
		self.connected = False

	def on(self, event, handler):
		self._handlers.setdefault(event, []).append(handler)

	def off(self, event, handler):
		self._handlers.get(event, []).remove(handler)

	def emit(self, event, params=None):
		for handler in list(self._handlers.get(event, [])):
			handler(params or {})

	def reply(self, method, result=None, events=()):
		self._replies.setdefault(method, []).append((result if result is not None else {}, list(events)))

	def clear(self, method):
		"""Drop every reply queued for method."""
		self._replies.pop(method, None)

	def evaluates(self, *values):
		"""Queue Runtime.evaluate replies returning each value."""
		for value in values:
			self.reply('Runtime.evaluate', {'result': self.remote(value)})

	def remote(self, value) -> dict:
		"""RemoteObject descriptor for value; lists and dicts get a handle served by Runtime.getProperties."""
		if value is None:
			return {'type': 'object', 'subtype': 'null', 'value': None}
		if isinstance(value, bool):
			return {'type': 'boolean', 'value': value}
		if isinstance(value, int | float):
			return {'type': 'number', 'value': value}
		if isinstance(value, str):
			return {'type': 'string', 'value': value}

		self._next_object += 1
		object_id = f'object-{self._next_object}'
		if isinstance(value, list):
			properties = [{'name': str(index), 'value': self.remote(item)} for index, item in enumerate(value)]
			properties.append({'name': 'length', 'value': {'type': 'number', 'value': len(value)}})
			descriptor = {'type': 'object', 'subtype': 'array', 'className': 'Array', 'objectId': object_id}
		else:
			properties = [{'name': key, 'value': self.remote(item)} for key, item in value.items()]
			descriptor = {'type': 'object', 'className': 'Object', 'objectId': object_id}
		properties.append({'name': '__proto__', 'value': {'type': 'object', 'className': 'Object', 'objectId': 'proto'}})
		self.objects[object_id] = properties
		return descriptor

	async def send(self, method, params=None, timeout=None):
		params = params or {}
		self.sent.append((method, params))

		queue = self._replies.get(method)
		if not queue:
			if method == 'Runtime.getProperties' and params.get('objectId') in self.objects:
				return {'result': self.objects[params['objectId']]}
			return {}

		result, events = queue.pop(0) if len(queue) > 1 else queue[0]
		for event, event_params in events:
			self.emit(event, event_params)
		if callable(result):
			result = result(params)
		if isinstance(result, Exception):
			raise result
		return result

	def calls(self, method) -> list[dict]:
		return [params for sent_method, params in self.sent if sent_method == method]

	def scripts(self) -> list[str]:
		return [params['expression'] for params in self.calls('Runtime.evaluate')]

	def methods(self) -> list[str]:
		return [method for method, _ in self.sent]


@pytest.fixture
def profile():
	return DriverProfile(click_pause=0, load_timeout=0.2, dom_ready_timeout_ms=30, popup_timeout_ms=30)


@pytest.fixture
def session():
	fake = FakeSession()
	fake.connected = True
	return fake


@pytest.fixture
def page(session, profile):
	return Page(session, 'target-1', profile)


@pytest.fixture
def context(page):
	return PageContext(page=page, target_id='target-1', document=DocumentReference.top())


def frame_of(ws_url: str) -> str:
	return 'frame-of-' + ws_url.rsplit('/', 1)[-1]


class FakeSessionFactory:
	"""Stands in for the TransportSession class: one FakeSession per websocket URL, created on first use."""

	def __init__(self):
		self.sessions: dict[str, FakeSession] = {}

	def __call__(self, ws_url, command_timeout=None):
		return self.get(ws_url)

	def get(self, ws_url) -> FakeSession:
		if ws_url not in self.sessions:
			fake = FakeSession(ws_url)
			frame_id = frame_of(ws_url)
			fake.reply('Page.getFrameTree', {'frameTree': {'frame': {'id': frame_id}}})
			fake.reply('Page.navigate', {'loaderId': 'l'}, events=[('Page.frameNavigated', {'frame': {'id': frame_id}})])
			self.sessions[ws_url] = fake
		return self.sessions[ws_url]


BROWSER_WS = 'ws://127.0.0.1:9222/devtools/browser/fake'


@pytest.fixture
def fake_sessions(monkeypatch):
	factory = FakeSessionFactory()
	monkeypatch.setattr('cdp_driver.browser.context.TransportSession', factory)
	factory.get(BROWSER_WS).reply('Target.createTarget', {'targetId': 'main'})
	return factory


@pytest.fixture
def devtools(httpserver):
	"""DevTools HTTP endpoints listing a main tab and a second tab titled 'Other'."""
	httpserver.expect_request('/json/version').respond_with_json({'Browser': 'Chrome/120', 'webSocketDebuggerUrl': BROWSER_WS})
	httpserver.expect_request('/json/list').respond_with_json(
		[
			{'id': 'main', 'type': 'page', 'title': 'Main', 'url': 'about:blank'},
			{'id': 'other', 'type': 'page', 'title': 'Other', 'url': 'http://site/other'},
			{'id': 'worker', 'type': 'service_worker', 'title': 'Other', 'url': 'http://site/sw.js'},
		]
	)
	return httpserver
