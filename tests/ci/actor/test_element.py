"""Element interactions: real mouse and key events, value scripts and synthesized DOM events."""

import logging

import pytest

from cdp_driver.actor.element import Element
from cdp_driver.actor.keyboard import KeyModifier
from cdp_driver.errors import ElementNotFoundError


def mouse_events(session):
	return [(params['type'], params['x'], params['y']) for params in session.calls('Input.dispatchMouseEvent')]


def key_events(session):
	return session.calls('Input.dispatchKeyEvent')


async def test_click_moves_then_presses_next_to_the_point(context, session):
	# scrollIntoView, coordinates for mouse over, coordinates for the click, readyState
	session.evaluates(True, [9.2, 19.0], [9.2, 19.0], True)

	await Element(context, '//button').click()

	assert mouse_events(session) == [
		('mouseMoved', 10, 20),
		('mouseMoved', 10, 20),
		('mousePressed', 15, 25),
		('mouseReleased', 15, 25),
	]
	pressed = session.calls('Input.dispatchMouseEvent')[2]
	assert pressed['button'] == 'left'
	assert pressed['clickCount'] == 1
	assert session.scripts()[-1] == 'document.readyState == "complete"'


async def test_click_on_missing_element_sends_no_input(context, session):
	session.reply(
		'Runtime.evaluate',
		{'result': {'type': 'object', 'subtype': 'error', 'className': 'Error', 'description': 'Error: Element not found'}},
	)

	with pytest.raises(ElementNotFoundError):
		await Element(context, '//nothing').click()
	assert session.calls('Input.dispatchMouseEvent') == []


async def test_set_value_on_textarea_erases_then_types(context, session):
	# text field kind, current value, focus, blur
	session.evaluates('textarea', 'ab', None, None)

	await Element(context, '//textarea').set_value('x\ny')

	events = key_events(session)
	erase, typed = events[:8], events[8:]

	assert [(e['type'], e['windowsVirtualKeyCode']) for e in erase] == [
		('rawKeyDown', 8),
		('keyUp', 8),
		('rawKeyDown', 46),
		('keyUp', 46),
	] * 2
	assert all(e['nativeVirtualKeyCode'] == e['windowsVirtualKeyCode'] for e in erase)

	assert [(e['type'], e.get('text')) for e in typed] == [
		('keyDown', 'x'),
		('keyUp', None),
		('keyDown', '\r'),
		('keyUp', None),
		('keyDown', 'y'),
		('keyUp', None),
	]
	assert typed[2]['key'] == 'Enter'

	scripts = session.scripts()
	assert "return 'textarea';" in scripts[0]
	assert 'element.focus();' in scripts[2]
	assert 'element.blur();' in scripts[3]


async def test_set_value_on_single_line_input_never_presses_enter(context, session):
	session.evaluates('input', '', None, None)

	await Element(context, '//input[@name="q"]').set_value('x\ny')

	assert [(e['type'], e.get('text')) for e in key_events(session)] == [
		('keyDown', 'x'),
		('keyUp', None),
		('keyDown', 'y'),
		('keyUp', None),
	]
	assert all(e.get('key') != 'Enter' for e in key_events(session))


async def test_set_value_none_clears_a_text_field(context, session):
	session.evaluates('input', 'abc', None, None)

	await Element(context, '//input').set_value(None)

	events = key_events(session)
	assert len(events) == 12
	assert all(e['type'] in ('rawKeyDown', 'keyUp') for e in events)


async def test_set_value_on_other_controls_uses_one_script(context, session):
	session.evaluates(False, None)

	await Element(context, '//select').set_value('it\'s "two"')

	assert key_events(session) == []
	script = session.scripts()[1]
	assert 'var value = "it\'s \\"two\\"";' in script
	assert "createEvent('HTMLEvents')" in script


async def test_check_requires_a_checkbox(context, session):
	session.evaluates(False)

	with pytest.raises(ElementNotFoundError) as exc_info:
		await Element(context, '//select').check()
	assert exc_info.value.element_type == 'checkbox'
	assert len(session.scripts()) == 1


async def test_check_logs_when_the_box_does_not_toggle(context, session, caplog):
	session.evaluates(True, False)

	with caplog.at_level(logging.WARNING):
		await Element(context, '//input[@type="checkbox"]').check()

	assert 'var value = true;' in session.scripts()[1]
	assert 'unchecked after setting it to True' in caplog.text


async def test_select_option_multiple_keeps_current_selection(context, session):
	# expect select, current value, is text field, set value
	session.evaluates(True, ['b', 'c'], False, None)

	await Element(context, '//select').select_option('a', multiple=True)

	assert 'var value = ["a", "b", "c"];' in session.scripts()[3]


async def test_select_option_single(context, session):
	session.evaluates(True, False, None)

	await Element(context, '//select').select_option('b')

	assert 'var value = "b";' in session.scripts()[2]


async def test_drag_presses_at_source_and_releases_at_target(context, session):
	session.evaluates([0, 0], [99, 49])

	await Element(context, '//div[@id="a"]').drag_to(Element(context, '//div[@id="b"]'))

	assert mouse_events(session) == [
		('mouseMoved', 1, 1),
		('mousePressed', 1, 1),
		('mouseMoved', 100, 50),
		('mouseReleased', 100, 50),
	]


async def test_key_press_synthesizes_keyboard_event(context, session):
	session.evaluates(None)

	await Element(context, '//input').key_press('a', KeyModifier.SHIFT)

	script = session.scripts()[0]
	assert 'event.initEvent("keypress", true, true);' in script
	assert 'event.key = "a";' in script
	assert 'event.keyCode = 97;' in script
	assert 'event.shiftKey = true;' in script
	assert 'event.metaKey = false;' in script


async def test_key_down_accepts_a_character_code(context, session):
	session.evaluates(None)

	await Element(context, '//input').key_down(13, 'ctrl')

	script = session.scripts()[0]
	assert 'event.keyCode = 13;' in script
	assert 'event.ctrlKey = true;' in script


async def test_double_click_adds_dblclick_event(context, session):
	session.evaluates(True, [0, 0], [0, 0], True, None)

	await Element(context, '//a').double_click()

	assert 'new MouseEvent("dblclick"' in session.scripts()[-1]


async def test_reads(context, session):
	session.evaluates('  Hello world ', 'INPUT', True, None)
	element = Element(context, '//p')

	assert await element.get_text() == '  Hello world '
	assert await element.get_tag_name() == 'INPUT'
	assert await element.is_visible() is True
	assert await element.get_attribute('data-x') is None

	scripts = session.scripts()
	assert ".replace(/\\s+/g, ' ').trim()" in scripts[0]
	assert 'return element["tagName"];' in scripts[1]
	assert 'element.offsetWidth > 0 && element.offsetHeight > 0' in scripts[2]
	assert 'return element.getAttribute("data-x");' in scripts[3]


async def test_submit_form_requires_a_form(context, session):
	session.evaluates(True, None)

	await Element(context, '//form').submit_form()

	assert 'element.submit();' in session.scripts()[1]


async def test_is_selected_on_missing_option_names_the_select_kind(context, session):
	session.reply(
		'Runtime.evaluate',
		{'result': {'type': 'object', 'subtype': 'error', 'className': 'Error', 'description': 'Error: Element not found'}},
	)

	with pytest.raises(ElementNotFoundError) as exc_info:
		await Element(context, '//option[@value="x"]').is_selected()
	assert exc_info.value.element_type == 'select'
