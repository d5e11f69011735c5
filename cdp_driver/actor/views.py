from pydantic import BaseModel, Field


class ResponseInfo(BaseModel):
	"""Status and headers of the last main-frame document response."""

	url: str = ''
	status: int
	status_text: str = ''
	headers: dict[str, str] = Field(default_factory=dict)
