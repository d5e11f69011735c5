"""Bounded polling."""

import asyncio

import pytest

from cdp_driver.actor.polling import Poller


class Condition:
	def __init__(self, results):
		self.results = list(results)
		self.calls = 0

	async def __call__(self, script):
		self.calls += 1
		return self.results.pop(0) if len(self.results) > 1 else self.results[0]


async def test_returns_true_on_first_truthy_result():
	condition = Condition([False, 0, 'yes'])

	assert await Poller(condition, interval_ms=1).wait(1000, 'window.ready') is True
	assert condition.calls == 3


async def test_gives_up_after_the_budget():
	condition = Condition([False])

	assert await Poller(condition, interval_ms=10).wait(25, 'window.ready') is False
	# ceil(25 / 10) retries after the first evaluation
	assert condition.calls == 4


async def test_zero_timeout_evaluates_once():
	condition = Condition([False])

	assert await Poller(condition, interval_ms=10).wait(0, 'window.ready') is False
	assert condition.calls == 1


async def test_deadline_stops_early():
	condition = Condition([False])
	deadline = asyncio.get_running_loop().time() + 0.03

	assert await Poller(condition, interval_ms=10).wait(10_000, 'window.ready', deadline=deadline) is False
	assert condition.calls <= 5


async def test_wait_is_cancellable():
	condition = Condition([False])
	task = asyncio.create_task(Poller(condition, interval_ms=10).wait(10_000, 'window.ready'))
	await asyncio.sleep(0.03)

	task.cancel()
	with pytest.raises(asyncio.CancelledError):
		await task


def test_interval_must_be_positive():
	with pytest.raises(ValueError):
		Poller(Condition([True]), interval_ms=0)
