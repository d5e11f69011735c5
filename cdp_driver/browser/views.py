from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
	from cdp_driver.actor.page import Page


class DocumentReference(BaseModel):
	"""The document that XPath queries are evaluated against."""

	model_config = ConfigDict(frozen=True)

	TOP_EXPRESSION: ClassVar[str] = 'document'
	IFRAME_EXPRESSION: ClassVar[str] = 'window.active_iframe.contentWindow.document'

	expression: str = TOP_EXPRESSION
	iframe: str | None = None

	@classmethod
	def top(cls) -> 'DocumentReference':
		return cls()

	@classmethod
	def for_iframe(cls, name: str) -> 'DocumentReference':
		return cls(expression=cls.IFRAME_EXPRESSION, iframe=name)

	@property
	def is_top(self) -> bool:
		return self.iframe is None


@dataclass(frozen=True)
class PageContext:
	"""Snapshot of where an operation runs: the connected page and its active document."""

	page: 'Page'
	target_id: str
	document: DocumentReference
