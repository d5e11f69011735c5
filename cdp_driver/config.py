"""Driver configuration.

DriverProfile carries every tunable of a driven session. Values can be given
explicitly or read from the environment with DriverProfile.from_env().
"""

import os

from pydantic import BaseModel, ConfigDict, Field


class DriverProfile(BaseModel):
	"""Settings for one ChromeDriver instance."""

	model_config = ConfigDict(extra='forbid', validate_assignment=True)

	api_url: str = Field(default='http://localhost:9222', description='DevTools HTTP endpoint of the browser')
	base_url: str | None = Field(default=None, description='Site root used when setting cookies')

	poll_interval_ms: int = Field(default=10, ge=1, description='Delay between two condition evaluations')
	dom_ready_timeout_ms: int = Field(default=3000, ge=0)
	popup_timeout_ms: int = Field(default=2000, ge=0)
	click_pause: float = Field(default=0.005, ge=0, description='Seconds to pause after a synthesized click')
	load_timeout: float = Field(default=30.0, gt=0, description='Seconds to wait for a page load to finish')
	command_timeout: float | None = Field(default=None, description='Seconds to wait for any single command reply')
	max_value_depth: int = Field(default=32, ge=1, description='Nesting limit when marshalling remote objects')

	@property
	def ws_url(self) -> str:
		"""The websocket root matching api_url (http -> ws, https -> wss)."""
		return self.api_url.replace('http', 'ws', 1).rstrip('/')

	@classmethod
	def from_env(cls, **overrides) -> 'DriverProfile':
		"""Build a profile from CDP_DRIVER_* environment variables, then apply overrides."""
		values: dict = {}

		if api_url := os.getenv('CDP_DRIVER_API_URL'):
			values['api_url'] = api_url
		if base_url := os.getenv('CDP_DRIVER_BASE_URL'):
			values['base_url'] = base_url
		if poll_interval := os.getenv('CDP_DRIVER_POLL_INTERVAL_MS'):
			values['poll_interval_ms'] = int(poll_interval)
		if load_timeout := os.getenv('CDP_DRIVER_LOAD_TIMEOUT'):
			values['load_timeout'] = float(load_timeout)
		if command_timeout := os.getenv('CDP_DRIVER_COMMAND_TIMEOUT'):
			values['command_timeout'] = float(command_timeout)

		values.update(overrides)
		return cls(**values)
