from pydantic import BaseModel, ConfigDict, Field


class TargetInfo(BaseModel):
	"""One entry of the DevTools target directory."""

	model_config = ConfigDict(populate_by_name=True, extra='ignore')

	target_id: str = Field(alias='id')
	title: str = ''
	url: str = ''
	type: str = 'page'
	ws_url: str | None = Field(default=None, alias='webSocketDebuggerUrl')

	@property
	def is_page(self) -> bool:
		return self.type == 'page'


class BrowserVersion(BaseModel):
	"""Subset of /json/version."""

	model_config = ConfigDict(populate_by_name=True, extra='ignore')

	browser: str = Field(default='', alias='Browser')
	protocol_version: str = Field(default='', alias='Protocol-Version')
	ws_url: str = Field(alias='webSocketDebuggerUrl')
