"""Remote control of Chrome over the DevTools protocol, with an element-level automation API."""

from cdp_driver.actor.keyboard import KeyModifier
from cdp_driver.config import DriverProfile
from cdp_driver.driver import ChromeDriver
from cdp_driver.errors import (
	CDPConnectionError,
	CDPProtocolError,
	CDPTimeoutError,
	DriverError,
	ElementNotFoundError,
	EvaluationError,
	TargetNotFoundError,
)

__all__ = [
	'ChromeDriver',
	'DriverProfile',
	'KeyModifier',
	'DriverError',
	'CDPConnectionError',
	'CDPTimeoutError',
	'CDPProtocolError',
	'EvaluationError',
	'ElementNotFoundError',
	'TargetNotFoundError',
]
