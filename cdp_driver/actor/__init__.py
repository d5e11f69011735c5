"""Page-level building blocks: script evaluation, element lookup and synthetic input."""

from .element import Element
from .evaluator import ScriptEvaluator
from .keyboard import Keyboard, KeyModifier
from .locator import ElementLocator
from .mouse import Mouse
from .page import Page
from .polling import Poller
from .remote_value import RemoteValue, RemoteValueKind, RemoteValueMarshaller

__all__ = [
	'Page',
	'Element',
	'ElementLocator',
	'Mouse',
	'Keyboard',
	'KeyModifier',
	'Poller',
	'ScriptEvaluator',
	'RemoteValue',
	'RemoteValueKind',
	'RemoteValueMarshaller',
]
