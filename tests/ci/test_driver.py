"""ChromeDriver lifecycle and its page-level calls, on top of fake sessions and a local DevTools HTTP server."""

import pytest
from pytest_httpserver import HTTPServer

from cdp_driver import ChromeDriver, DriverError
from cdp_driver.errors import CDPConnectionError
from cdp_driver.transport.directory import TargetDirectory
from tests.ci.conftest import frame_of


@pytest.fixture
def directory(devtools: HTTPServer):
	devtools.expect_request('/json/close/main').respond_with_data('Target is closing')
	devtools.expect_request('/json/close/other').respond_with_data('Target is closing')
	return TargetDirectory(devtools.url_for('/'))


@pytest.fixture
async def driver(directory, fake_sessions, profile):
	driver = ChromeDriver(base_url='http://site', profile=profile, directory=directory)
	await driver.start()
	yield driver
	await driver.stop()


def main_session(directory, fake_sessions):
	return fake_sessions.get(directory.page_ws_url('main'))


def test_constructor_arguments_override_the_profile(profile):
	driver = ChromeDriver(api_url='http://chrome:9222', base_url='http://site', profile=profile)

	assert driver.profile.api_url == 'http://chrome:9222'
	assert driver.profile.base_url == 'http://site'
	assert driver.profile.click_pause == profile.click_pause
	assert profile.api_url == 'http://localhost:9222'
	assert not driver.is_started()


async def test_operations_before_start_raise(profile):
	driver = ChromeDriver(profile=profile)

	with pytest.raises(DriverError, match='not started'):
		await driver.visit('http://site/')


async def test_context_manager_starts_and_stops(directory, fake_sessions, devtools, profile):
	async with ChromeDriver(profile=profile, directory=directory) as driver:
		assert driver.is_started()
		assert driver.get_window_name() == 'main'

	assert not driver.is_started()
	assert not main_session(directory, fake_sessions).connected
	closed = sorted(request.path for request, _ in devtools.log if request.path.startswith('/json/close/'))
	assert closed == ['/json/close/main', '/json/close/other']


async def test_stop_carries_on_when_reset_fails(directory, fake_sessions, devtools, profile):
	driver = ChromeDriver(profile=profile, directory=directory)
	await driver.start()
	main_session(directory, fake_sessions).reply('Network.clearBrowserCookies', CDPConnectionError('socket closed'))

	await driver.stop()

	assert not driver.is_started()
	assert any(request.path == '/json/close/main' for request, _ in devtools.log)


async def test_stop_without_start_does_nothing(profile, directory, devtools):
	driver = ChromeDriver(profile=profile, directory=directory)

	await driver.stop()

	assert devtools.log == []


async def test_visit_then_read_url_and_status(driver, directory, fake_sessions):
	session = main_session(directory, fake_sessions)
	session.evaluates(True, 'http://site/missing')

	await driver.visit('http://site/missing')
	assert await driver.get_status_code() is None

	session.emit(
		'Network.responseReceived',
		{
			'type': 'Document',
			'frameId': frame_of(directory.page_ws_url('main')),
			'response': {'url': 'http://site/missing', 'status': 404, 'statusText': 'Not Found', 'headers': {'X-Id': '7'}},
		},
	)

	assert session.calls('Page.navigate')[0] == {'url': 'http://site/missing'}
	assert await driver.get_current_url() == 'http://site/missing'
	assert await driver.get_status_code() == 404
	assert await driver.get_response_headers() == {'X-Id': '7'}


async def test_find_element_xpaths(driver, directory, fake_sessions):
	session = main_session(directory, fake_sessions)
	session.evaluates(True, ['/html/body/ul/li[1]', '/html/body/ul/li[2]'])

	assert await driver.find_element_xpaths('//li') == ['/html/body/ul/li[1]', '/html/body/ul/li[2]']
	assert session.scripts()[0] == 'document.readyState == "complete"'


async def test_execute_and_evaluate_script(driver, directory, fake_sessions):
	session = main_session(directory, fake_sessions)
	session.evaluates(None, {'answer': 42})

	await driver.execute_script('document.title = "x";')
	assert await driver.evaluate_script('function () { return {answer: 42}; }') == {'answer': 42}

	assert session.scripts() == ['document.title = "x";', '(function () { return {answer: 42}; })()']


async def test_wait_returns_false_when_condition_never_holds(driver, directory, fake_sessions):
	main_session(directory, fake_sessions).evaluates(False)

	assert await driver.wait(20, 'window.ready') is False


async def test_resize_window_sets_inner_size(driver, directory, fake_sessions):
	session = main_session(directory, fake_sessions)
	session.evaluates(None)

	await driver.resize_window(800, 600)

	assert session.scripts() == ['window.innerWidth = 800;window.innerHeight = 600;']


async def test_alerts_are_handled_on_the_current_page(driver, directory, fake_sessions):
	session = main_session(directory, fake_sessions)
	session.emit('Page.javascriptDialogOpening', {'type': 'prompt', 'message': 'Name?'})

	await driver.accept_alert('Ada')

	assert session.calls('Page.handleJavaScriptDialog') == [{'accept': True, 'promptText': 'Ada'}]


async def test_screenshot_bytes(driver, directory, fake_sessions):
	main_session(directory, fake_sessions).reply('Page.captureScreenshot', {'data': 'iVBORw=='})

	assert (await driver.get_screenshot()).startswith(b'\x89PNG')
