"""JavaScript sources injected into the page.

Every value that ends up inside a generated script goes through js_literal()
(or xpath_literal() when it lands inside an XPath expression). Element scripts
are self-contained IIFEs that declare their own `root`, `xpath_result` and
`element` locals and hand their result back with `return`.
"""

import json
from typing import Any

ELEMENT_NOT_FOUND = 'Element not found'

# Input types that accept typed text
TEXT_INPUT_TYPES = ('text', 'password', 'email', 'search', 'tel', 'url')


def js_literal(value: Any) -> str:
	"""Render a Python value as a JavaScript literal."""
	return json.dumps(value, ensure_ascii=True)


def xpath_literal(value: str) -> str:
	"""Render a string as an XPath 1.0 literal, falling back to concat() when it holds both quote kinds."""
	if "'" not in value:
		return f"'{value}'"
	if '"' not in value:
		return f'"{value}"'
	parts = [f"'{part}'" for part in value.split("'")]
	return 'concat(' + ', "\'", '.join(parts) + ')'


GET_PATH_TO = """function getPathTo(element) {
	if (typeof element.id == 'string' && element.id !== '' && element.id.indexOf('"') == -1
		&& root.getElementById(element.id) === element) {
		return '//' + element.tagName + '[@id="' + element.id + '"]';
	}
	if (element === root.body || element === root.head || element === root.documentElement) {
		return '//' + element.tagName;
	}
	var ix = 0;
	var siblings = element.parentNode.childNodes;
	for (var i = 0; i < siblings.length; i++) {
		var sibling = siblings[i];
		if (sibling === element) {
			return getPathTo(element.parentNode) + '/' + element.tagName + '[' + (ix + 1) + ']';
		}
		if (sibling.nodeType === 1 && sibling.tagName === element.tagName) {
			ix++;
		}
	}
}"""

_ELEMENT_SCRIPT = """(function () {
	var root = %(document)s;
	var xpath_result = root.evaluate(%(xpath)s, root, null, XPathResult.ORDERED_NODE_ITERATOR_TYPE, null);
	var element = xpath_result.iterateNext();
	if (element == null) {
		throw new Error(%(not_found)s);
	}
%(body)s
}())"""

_FIND_SCRIPT = """(function () {
	var root = %(document)s;
	var xpath_result = root.evaluate(%(xpath)s, root, null, XPathResult.ORDERED_NODE_ITERATOR_TYPE, null);
	%(get_path_to)s
	var paths = [];
	var element;
	while ((element = xpath_result.iterateNext())) {
		paths.push(getPathTo(element));
	}
	return paths;
}())"""


def element_script(document: str, xpath: str, body: str) -> str:
	"""Bind the first match of xpath under document to `element` and run body."""
	return _ELEMENT_SCRIPT % {
		'document': document,
		'xpath': js_literal(xpath),
		'not_found': js_literal(ELEMENT_NOT_FOUND),
		'body': body,
	}


def find_script(document: str, xpath: str) -> str:
	"""Canonical paths of every match of xpath, in document order."""
	return _FIND_SCRIPT % {'document': document, 'xpath': js_literal(xpath), 'get_path_to': GET_PATH_TO}


COORDINATES = """var rect = element.getBoundingClientRect();
return [rect.left, rect.top];"""

SCROLL_INTO_VIEW = """if (element.scrollIntoViewIfNeeded) {
	element.scrollIntoViewIfNeeded();
} else {
	element.scrollIntoView({block: 'center'});
}
return true;"""

TEXT_FIELD_KIND = (
	"""if (element.tagName == 'TEXTAREA') {
	return 'textarea';
}
if (element.tagName == 'INPUT' && %s.indexOf(element.type) != -1) {
	return 'input';
}
return null;"""
	% js_literal(list(TEXT_INPUT_TYPES))
)

GET_VALUE = """var value = null;
if (element.tagName == 'INPUT' && element.type == 'checkbox') {
	value = element.checked ? element.value : null;
} else if (element.tagName == 'INPUT' && element.type == 'radio') {
	var name = element.getAttribute('name');
	if (name) {
		var fields = element.ownerDocument.getElementsByName(name);
		for (var i = 0; i < fields.length; i++) {
			var field = fields.item(i);
			if (field.form === element.form && field.checked) {
				value = field.value;
				break;
			}
		}
	} else if (element.checked) {
		value = element.value;
	}
} else if (element.tagName == 'SELECT' && element.multiple) {
	value = [];
	for (var i = 0; i < element.options.length; i++) {
		if (element.options[i].selected) {
			value.push(element.options[i].value);
		}
	}
} else {
	value = element.value;
}
return value;"""

_SET_VALUE = """var value = %(value)s;
var changed = true;
if (element.tagName == 'INPUT' && element.type == 'radio') {
	var name = element.getAttribute('name');
	var fields = name ? element.ownerDocument.getElementsByName(name) : [element];
	for (var i = 0; i < fields.length; i++) {
		var field = fields[i];
		if (field.form === element.form) {
			field.checked = field.value == value;
		}
	}
} else if (element.tagName == 'INPUT' && element.type == 'checkbox') {
	if (element.checked != !!value) {
		element.click();
	}
	element.blur();
	return element.checked;
} else if (element.tagName == 'SELECT') {
	var values = element.multiple && Array.isArray(value) ? value : [value];
	for (var i = 0; i < element.options.length; i++) {
		var option = element.options[i];
		var selected = values.indexOf(option.value) != -1;
		if (element.multiple) {
			option.selected = selected;
		} else if (selected) {
			option.selected = true;
			break;
		}
	}
} else if (element.tagName == 'INPUT' && element.type == 'file') {
	changed = false;
} else {
	element.value = value;
}
if (changed) {
	var event = element.ownerDocument.createEvent('HTMLEvents');
	event.initEvent('change', true, false);
	element.dispatchEvent(event);
}
element.blur();
return null;"""


def set_value_body(value: Any) -> str:
	return _SET_VALUE % {'value': js_literal(value)}


_DISPATCH_EVENT = """var event = element.ownerDocument.createEvent(%(interface)s);
event.initEvent(%(name)s, %(bubbles)s, true);
element.dispatchEvent(event);
return null;"""


def dispatch_event_body(name: str, interface: str = 'Events', bubbles: bool = True) -> str:
	return _DISPATCH_EVENT % {'interface': js_literal(interface), 'name': js_literal(name), 'bubbles': js_literal(bubbles)}


_DISPATCH_MOUSE_EVENT = """var event = new MouseEvent(%(name)s, {bubbles: true, cancelable: true, view: element.ownerDocument.defaultView});
element.dispatchEvent(event);
return null;"""


def dispatch_mouse_event_body(name: str) -> str:
	return _DISPATCH_MOUSE_EVENT % {'name': js_literal(name)}


_KEYBOARD_EVENT = """element.focus();
var event = element.ownerDocument.createEvent('Events');
event.initEvent(%(name)s, true, true);
event.key = %(key)s;
event.keyCode = %(code)s;
event.which = %(code)s;
event.ctrlKey = %(ctrl)s;
event.altKey = %(alt)s;
event.shiftKey = %(shift)s;
event.metaKey = %(meta)s;
element.dispatchEvent(event);
return null;"""


def keyboard_event_body(name: str, key: str, code: int, ctrl: bool, alt: bool, shift: bool, meta: bool) -> str:
	return _KEYBOARD_EVENT % {
		'name': js_literal(name),
		'key': js_literal(key),
		'code': js_literal(code),
		'ctrl': js_literal(ctrl),
		'alt': js_literal(alt),
		'shift': js_literal(shift),
		'meta': js_literal(meta),
	}


def expect_body(condition: str) -> str:
	"""Body returning whether condition (an expression over `element`) holds."""
	return f'return !!({condition});'


def property_body(name: str) -> str:
	return f'return element[{js_literal(name)}];'


def attribute_body(name: str) -> str:
	return f'return element.getAttribute({js_literal(name)});'


GET_TEXT = """var text = element.innerText;
if (text == null) {
	text = element.textContent || '';
}
return text.replace(/\\s+/g, ' ').trim();"""

IS_VISIBLE = 'return element.offsetWidth > 0 && element.offsetHeight > 0;'

IS_SELECTED = 'return !!element.selected;'

IS_CHECKED = 'return !!element.checked;'

SUBMIT_FORM = """element.submit();
return null;"""

IS_CHECKBOX = "element.tagName == 'INPUT' && element.type == 'checkbox'"
IS_SELECT_OR_RADIO = "element.tagName == 'SELECT' || (element.tagName == 'INPUT' && element.type == 'radio')"
IS_FORM = "element.tagName == 'FORM'"
IS_FILE_INPUT = "element.tagName == 'INPUT' && element.type == 'file'"

FILE_INPUT_NAME = 'return element.getAttribute(\'name\');'


def iframe_xpath(name: str) -> str:
	literal = xpath_literal(name)
	return f'//IFRAME[@id={literal} or @name={literal}]'


STORE_IFRAME = """window.active_iframe = element;
return true;"""


def open_popup_script(name: str) -> str:
	return f"window.latest_popup = window.open('', {js_literal(name)});"


POPUP_LOADED = "window.latest_popup && window.latest_popup.location.href != 'about:blank'"
POPUP_INFO = '[window.latest_popup.document.title, window.latest_popup.location.href]'
CLOSE_BLANK_POPUP = """if (window.latest_popup && window.latest_popup.location.href == 'about:blank') {
	window.latest_popup.close();
}"""

DOCUMENT_READY = 'document.readyState == "complete"'
