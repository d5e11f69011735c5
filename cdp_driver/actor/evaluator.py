"""Script evaluation against the connected target."""

import logging
import re
from typing import TYPE_CHECKING, Any

from cdp_driver.actor.remote_value import RemoteValue, RemoteValueKind, RemoteValueMarshaller
from cdp_driver.errors import CDPConnectionError, CDPProtocolError, EvaluationError

if TYPE_CHECKING:
	from cdp_use.cdp.runtime.commands import EvaluateParameters
	from cdp_use.cdp.runtime.types import ExceptionDetails

	from cdp_driver.transport.session import TransportSession

logger = logging.getLogger(__name__)

OBJECT_GROUP = 'cdp-driver'


class ScriptEvaluator:
	"""Evaluates JavaScript source and returns the result as native data.

	The caller embeds the document it targets in the script text; the
	evaluator only runs it in the target's main world.
	"""

	def __init__(self, session: 'TransportSession', max_value_depth: int = 32):
		self._session = session
		self._marshaller = RemoteValueMarshaller(session, max_depth=max_value_depth)

	@staticmethod
	def normalize(script: str) -> str:
		"""Turn a function literal into a call of that function, leave anything else as is."""
		source = script.strip()
		if re.match(r'function\b', source):
			source = source.rstrip(';').rstrip()
			return f'({source})()'
		return script

	@staticmethod
	def wrap_statements(script: str) -> str:
		"""Wrap top-level statements in a function body so `return` is legal."""
		return f'(function() {{\n{script}\n}}());'

	async def evaluate(self, script: str) -> Any:
		"""Evaluate a script and return its completion value.

		Raises:
			EvaluationError: The script threw, or completed with an Error object
		"""
		return await self._evaluate(self.normalize(script), retry=True)

	async def run(self, script: str) -> None:
		"""Evaluate a script for its side effects only."""
		await self.evaluate(script)

	async def _evaluate(self, expression: str, retry: bool) -> Any:
		params: 'EvaluateParameters' = {'expression': expression, 'objectGroup': OBJECT_GROUP}
		reply = await self._session.send('Runtime.evaluate', params)

		descriptor = reply.get('result')
		if descriptor is None:
			return None

		try:
			value = RemoteValue.from_cdp(descriptor)

			if value.is_illegal_return and retry:
				logger.debug('Script uses top-level return, retrying it as a function body')
				return await self._evaluate(self.wrap_statements(expression), retry=False)

			if value.kind is RemoteValueKind.ERROR:
				raise EvaluationError(value.description or 'Unknown remote error', value.class_name)

			if 'exceptionDetails' in reply:
				raise EvaluationError(describe_exception(reply['exceptionDetails']))

			return await self._marshaller.resolve(value)
		finally:
			if descriptor.get('objectId'):
				await self._release()

	async def _release(self) -> None:
		try:
			await self._session.send('Runtime.releaseObjectGroup', {'objectGroup': OBJECT_GROUP})
		except (CDPConnectionError, CDPProtocolError) as e:
			logger.debug(f'Failed to release object group {OBJECT_GROUP}: {e}')


def describe_exception(details: 'ExceptionDetails | dict[str, Any]') -> str:
	"""Best description of a thrown value: the exception's description, its value, or the message text."""
	exception = details.get('exception') or {}
	if description := exception.get('description'):
		return description
	if 'value' in exception:
		return f'Uncaught {exception["value"]}'
	return details.get('text') or 'Uncaught exception'
