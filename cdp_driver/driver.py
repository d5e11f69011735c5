"""ChromeDriver: the session-level API used by test orchestration code.

Every method addresses elements with an XPath evaluated under the active
document (the top document, or the iframe selected with switch_to_iframe) of
the active window, and returns once all of its protocol round trips are done.

Example:
	async with ChromeDriver(api_url='http://localhost:9222', base_url='http://localhost:8000') as driver:
		await driver.visit('http://localhost:8000/login')
		await driver.set_value('//input[@name="user"]', 'admin')
		await driver.click('//button[@type="submit"]')
		assert 'Welcome' in await driver.get_text('//h1')
"""

import logging
from typing import Any

from cdp_driver.actor.element import Element
from cdp_driver.actor.keyboard import KeyModifier
from cdp_driver.actor.locator import ElementLocator
from cdp_driver.actor.page import Page
from cdp_driver.browser.context import BrowserContext
from cdp_driver.config import DriverProfile
from cdp_driver.errors import DriverError
from cdp_driver.transport.directory import TargetDirectory

logger = logging.getLogger(__name__)


class ChromeDriver:
	"""Drives one Chrome instance over the DevTools protocol."""

	def __init__(
		self,
		api_url: str | None = None,
		base_url: str | None = None,
		profile: DriverProfile | None = None,
		directory: TargetDirectory | None = None,
	):
		profile = profile or DriverProfile()
		overrides: dict[str, Any] = {}
		if api_url is not None:
			overrides['api_url'] = api_url
		if base_url is not None:
			overrides['base_url'] = base_url
		self.profile = profile.model_copy(update=overrides) if overrides else profile

		self._directory = directory or TargetDirectory(self.profile.api_url)
		self._browser = BrowserContext(self.profile, self._directory)
		self._started = False

	async def __aenter__(self) -> 'ChromeDriver':
		await self.start()
		return self

	async def __aexit__(self, *exc_info) -> None:
		await self.stop()

	@property
	def browser(self) -> BrowserContext:
		return self._browser

	@property
	def _page(self) -> Page:
		return self._browser.current.page

	def _element(self, xpath: str) -> Element:
		return self._browser.element(xpath)

	# Lifecycle

	async def start(self) -> None:
		await self._browser.start()
		self._started = True
		logger.info(f'Driver started on window {self._browser.main_window}')

	def is_started(self) -> bool:
		return self._started

	async def stop(self) -> None:
		"""Reset, close the connections and every open tab. Connection and driver errors are ignored."""
		if not self._started:
			return

		try:
			await self.reset()
		except DriverError as e:
			logger.debug(f'Reset during stop failed: {e}')

		try:
			await self._browser.close()
		except DriverError as e:
			logger.debug(f'Closing connections failed: {e}')

		try:
			for tab in await self._directory.list_pages():
				await self._directory.close_target(tab.target_id)
		except DriverError as e:
			logger.debug(f'Closing tabs failed: {e}')

		await self._directory.aclose()
		self._started = False
		logger.info('Driver stopped')

	async def reset(self) -> None:
		await self._browser.reset()

	# Navigation

	async def visit(self, url: str) -> None:
		await self._page.visit(url)
		await self._page.wait_for_dom()

	async def reload(self) -> None:
		await self._page.reload()

	async def back(self) -> None:
		await self._page.go_back()

	async def forward(self) -> None:
		await self._page.go_forward()

	async def get_current_url(self) -> str:
		await self._page.wait_for_dom()
		return await self._page.evaluate('window.location.href')

	async def get_content(self) -> str:
		return await self.get_html('//html')

	async def get_status_code(self) -> int | None:
		response = self._page.response
		return response.status if response else None

	async def get_response_headers(self) -> dict[str, str]:
		response = self._page.response
		return dict(response.headers) if response else {}

	async def get_screenshot(self) -> bytes:
		return await self._page.screenshot()

	# Headers and cookies

	async def set_basic_auth(self, user: str | bool | None, password: str = '') -> None:
		await self._browser.set_basic_auth(user, password)

	async def set_request_header(self, name: str, value: str) -> None:
		await self._browser.set_request_header(name, value)

	async def unset_request_header(self, name: str) -> None:
		await self._browser.unset_request_header(name)

	async def set_cookie(self, name: str, value: str | None = None) -> None:
		await self._browser.set_cookie(name, value)

	async def get_cookie(self, name: str) -> str | None:
		return await self._browser.get_cookie(name)

	# Windows and frames

	async def get_window_names(self) -> list[str]:
		return await self._browser.get_window_names()

	def get_window_name(self) -> str | None:
		return self._browser.current_window

	async def switch_to_window(self, name: str | None = None) -> None:
		await self._browser.switch_to_window(name)

	async def switch_to_iframe(self, name: str | None = None) -> None:
		await self._browser.switch_to_iframe(name)

	async def resize_window(self, width: int, height: int, name: str | None = None) -> None:
		await self.execute_script(f'window.innerWidth = {int(width)};window.innerHeight = {int(height)};')

	async def maximize_window(self, name: str | None = None) -> None:
		await self.execute_script('window.innerWidth = screen.width;window.innerHeight = screen.height;')

	# Elements

	async def find_element_xpaths(self, xpath: str) -> list[str]:
		context = self._browser.current
		await context.page.wait_for_dom()
		return await ElementLocator(context.page.evaluate, context.document).find(xpath)

	async def get_tag_name(self, xpath: str) -> str:
		return await self._element(xpath).get_tag_name()

	async def get_text(self, xpath: str) -> str:
		return await self._element(xpath).get_text()

	async def get_html(self, xpath: str) -> str:
		return await self._element(xpath).get_html()

	async def get_outer_html(self, xpath: str) -> str:
		return await self._element(xpath).get_outer_html()

	async def get_attribute(self, xpath: str, name: str) -> str | None:
		return await self._element(xpath).get_attribute(name)

	async def get_value(self, xpath: str) -> Any:
		return await self._element(xpath).get_value()

	async def set_value(self, xpath: str, value: Any) -> None:
		await self._element(xpath).set_value(value)

	async def check(self, xpath: str) -> None:
		await self._element(xpath).check()

	async def uncheck(self, xpath: str) -> None:
		await self._element(xpath).uncheck()

	async def is_checked(self, xpath: str) -> bool:
		return await self._element(xpath).is_checked()

	async def select_option(self, xpath: str, value: str | list[str], multiple: bool = False) -> None:
		await self._element(xpath).select_option(value, multiple=multiple)

	async def is_selected(self, xpath: str) -> bool:
		return await self._element(xpath).is_selected()

	async def is_visible(self, xpath: str) -> bool:
		return await self._element(xpath).is_visible()

	async def click(self, xpath: str) -> None:
		await self._element(xpath).click()

	async def double_click(self, xpath: str) -> None:
		await self._element(xpath).double_click()

	async def right_click(self, xpath: str) -> None:
		await self._element(xpath).right_click()

	async def mouse_over(self, xpath: str) -> None:
		await self._element(xpath).mouse_over()

	async def focus(self, xpath: str) -> None:
		await self._element(xpath).focus()

	async def blur(self, xpath: str) -> None:
		await self._element(xpath).blur()

	async def key_press(self, xpath: str, char: str | int, modifier: KeyModifier | str | None = None) -> None:
		await self._element(xpath).key_press(char, modifier)

	async def key_down(self, xpath: str, char: str | int, modifier: KeyModifier | str | None = None) -> None:
		await self._element(xpath).key_down(char, modifier)

	async def key_up(self, xpath: str, char: str | int, modifier: KeyModifier | str | None = None) -> None:
		await self._element(xpath).key_up(char, modifier)

	async def drag_to(self, source_xpath: str, destination_xpath: str) -> None:
		await self._element(source_xpath).drag_to(self._element(destination_xpath))

	async def attach_file(self, xpath: str, path: str) -> None:
		await self._browser.attach_file(xpath, path)

	async def submit_form(self, xpath: str) -> None:
		await self._element(xpath).submit_form()

	# Scripts

	async def execute_script(self, script: str) -> None:
		await self._page.run(script)

	async def evaluate_script(self, script: str) -> Any:
		return await self._page.evaluate(script)

	async def wait(self, timeout_ms: int, condition: str) -> bool:
		"""Poll condition until it is truthy or timeout_ms elapses."""
		return await self._page.wait(timeout_ms, condition)

	# Dialogs

	async def accept_alert(self, text: str = '') -> None:
		await self._page.accept_alert(text)

	async def dismiss_alert(self) -> None:
		await self._page.dismiss_alert()
