"""Exception hierarchy for the driver."""


class DriverError(Exception):
	"""Base class for every error raised by the driver."""

	pass


class CDPConnectionError(DriverError):
	"""Raised when the websocket to a target is unreachable or dropped."""

	def __init__(self, message: str, method: str | None = None):
		super().__init__(message)
		self.method = method


class CDPTimeoutError(CDPConnectionError):
	"""Raised when a command reply does not arrive within the requested timeout."""

	pass


class CDPProtocolError(DriverError):
	"""Raised when the browser answers a command with an error member."""

	def __init__(self, message: str, code: int | None = None, method: str | None = None):
		super().__init__(message)
		self.code = code
		self.method = method


class EvaluationError(DriverError):
	"""Raised when injected script throws inside the page."""

	def __init__(self, description: str, class_name: str | None = None):
		super().__init__(description)
		self.description = description
		self.class_name = class_name


class ElementNotFoundError(DriverError):
	"""Raised when an XPath query matches nothing, or matches the wrong kind of element."""

	def __init__(self, xpath: str, element_type: str | None = None):
		kind = element_type or 'element'
		super().__init__(f'Could not find {kind} matching xpath "{xpath}"')
		self.xpath = xpath
		self.element_type = element_type


class TargetNotFoundError(DriverError):
	"""Raised when a window cannot be resolved by id, title or popup discovery."""

	def __init__(self, name: str):
		super().__init__(f"Couldn't find window {name}")
		self.name = name
