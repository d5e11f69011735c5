"""Decoding of Runtime.RemoteObject descriptors into native Python values.

A descriptor is decoded on its type/subtype tag into a RemoteValue, and
RemoteValueMarshaller then walks object handles with Runtime.getProperties
until only plain Python data is left.

Resolution always terminates. Prototype links (and `length` on arrays) are
never followed, a handle already on the current path is not entered again,
and nesting stops at max_depth. Cyclic graphs are therefore truncated rather
than mirrored: the member that closes a cycle, or that sits below the depth
limit, comes back as an empty container.
"""

import logging
import math
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from cdp_driver.errors import EvaluationError

if TYPE_CHECKING:
	from cdp_use.cdp.runtime.types import RemoteObject

	from cdp_driver.transport.session import TransportSession

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES = {'string', 'number', 'boolean', 'bigint', 'symbol', 'function'}
ARRAY_EXCLUDED_PROPERTIES = {'__proto__', 'length'}
OBJECT_EXCLUDED_PROPERTIES = {'__proto__'}


class RemoteValueKind(str, Enum):
	"""Tag of a decoded remote value."""

	PRIMITIVE = 'primitive'
	NULL = 'null'
	UNDEFINED = 'undefined'
	ARRAY = 'array'
	OBJECT = 'object'
	OPAQUE = 'opaque'
	ERROR = 'error'


class RemoteValue(BaseModel):
	"""A remote JavaScript value at one point in time."""

	model_config = ConfigDict(frozen=True)

	kind: RemoteValueKind
	value: Any = None
	object_id: str | None = None
	class_name: str | None = None
	description: str | None = None

	@classmethod
	def from_cdp(cls, descriptor: 'RemoteObject | dict[str, Any]') -> 'RemoteValue':
		"""Decode a protocol RemoteObject on its type and subtype."""
		type_ = descriptor.get('type')
		subtype = descriptor.get('subtype')
		object_id = descriptor.get('objectId')
		class_name = descriptor.get('className')
		description = descriptor.get('description')

		if type_ == 'undefined':
			return cls(kind=RemoteValueKind.UNDEFINED)

		if type_ in PRIMITIVE_TYPES:
			return cls(kind=RemoteValueKind.PRIMITIVE, value=_primitive(descriptor), description=description)

		if type_ != 'object':
			logger.debug(f'Unknown remote value type {type_!r}, treating as opaque')
			return cls(kind=RemoteValueKind.OPAQUE, object_id=object_id, class_name=class_name, description=description)

		if subtype == 'null':
			return cls(kind=RemoteValueKind.NULL)
		if subtype == 'error':
			return cls(kind=RemoteValueKind.ERROR, object_id=object_id, class_name=class_name, description=description)

		# returnByValue replies carry the JSON value inline and no handle
		if object_id is None and 'value' in descriptor:
			return cls(kind=RemoteValueKind.PRIMITIVE, value=descriptor['value'], class_name=class_name)

		if subtype == 'array' and object_id:
			return cls(kind=RemoteValueKind.ARRAY, object_id=object_id, class_name=class_name, description=description)
		if subtype is None and class_name == 'Object' and object_id:
			return cls(kind=RemoteValueKind.OBJECT, object_id=object_id, class_name=class_name, description=description)

		return cls(kind=RemoteValueKind.OPAQUE, object_id=object_id, class_name=class_name, description=description)

	@property
	def is_illegal_return(self) -> bool:
		"""True for the SyntaxError raised by a top-level `return` statement."""
		return (
			self.kind is RemoteValueKind.ERROR
			and self.class_name == 'SyntaxError'
			and 'Illegal return' in (self.description or '')
		)


def _primitive(descriptor: dict[str, Any]) -> Any:
	if 'value' in descriptor:
		return descriptor['value']

	unserializable = descriptor.get('unserializableValue')
	if unserializable is None:
		return None
	if descriptor.get('type') == 'bigint':
		return int(unserializable.rstrip('n'))
	if unserializable == '-0':
		return -0.0
	if unserializable in ('NaN', 'Infinity', '-Infinity'):
		return float(unserializable.replace('Infinity', 'inf'))
	return math.nan


class RemoteValueMarshaller:
	"""Resolves RemoteValues, handles included, into native values."""

	def __init__(self, session: 'TransportSession', max_depth: int = 32):
		self._session = session
		self.max_depth = max_depth

	async def resolve(self, value: RemoteValue) -> Any:
		"""Convert a top-level value.

		Raises:
			EvaluationError: The value is an Error object
		"""
		if value.kind is RemoteValueKind.ERROR:
			raise EvaluationError(value.description or 'Unknown remote error', value.class_name)
		return await self._resolve(value, depth=0, path=frozenset())

	async def _resolve(self, value: RemoteValue, depth: int, path: frozenset[str]) -> Any:
		kind = value.kind

		if kind is RemoteValueKind.PRIMITIVE:
			return value.value
		if kind in (RemoteValueKind.NULL, RemoteValueKind.UNDEFINED):
			return None
		if kind in (RemoteValueKind.OPAQUE, RemoteValueKind.ERROR):
			return {}

		is_array = kind is RemoteValueKind.ARRAY
		if depth >= self.max_depth or value.object_id in path:
			logger.debug(f'Truncating remote {kind.value} {value.object_id} at depth {depth}')
			return [] if is_array else {}

		assert value.object_id is not None
		path = path | {value.object_id}
		properties = await self._own_properties(value.object_id)
		excluded = ARRAY_EXCLUDED_PROPERTIES if is_array else OBJECT_EXCLUDED_PROPERTIES

		members: dict[str, Any] = {}
		for prop in properties:
			name = prop.get('name')
			if name is None or name in excluded:
				continue
			if 'value' not in prop:
				# accessor property without a materialized value
				members[name] = None
				continue
			member = RemoteValue.from_cdp(prop['value'])
			members[name] = await self._resolve(member, depth + 1, path)

		if not is_array:
			return members

		indexed = sorted((int(name), item) for name, item in members.items() if name.isdigit())
		return [item for _, item in indexed]

	async def _own_properties(self, object_id: str) -> list[dict[str, Any]]:
		result = await self._session.send('Runtime.getProperties', {'objectId': object_id, 'ownProperties': True})
		return result.get('result', [])
