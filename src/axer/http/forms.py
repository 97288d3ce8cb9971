"""Form and query string helpers.

Values are encoded the way browsers encode URI components, so a mapping
like ``{"q": "a b/c"}`` becomes ``q=a%20b%2Fc``.
"""

from typing import Any, Dict, List, Mapping, Union
from urllib.parse import parse_qsl, quote, unquote

# Characters left untouched by encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"

FormValue = Union[str, List[str]]


def _encode_component(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        value = 'true' if value else 'false'
    return quote(str(value), safe=_URI_COMPONENT_SAFE)


def encode_uri_form(params: Mapping[str, Any]) -> str:
    """Build a query string from a mapping.

    Args:
        params: Mapping of key to scalar, or to a list/tuple of scalars

    Returns:
        Query string without the leading '?'

    Example:
        >>> encode_uri_form({'q': 'a b', 'tag': ['x', 'y']})
        'q=a%20b&tag=x&tag=y'
    """
    pairs = []
    for key, value in params.items():
        name = _encode_component(key)
        if isinstance(value, (list, tuple)):
            pairs.extend(f"{name}={_encode_component(item)}" for item in value)
        else:
            pairs.append(f"{name}={_encode_component(value)}")
    return '&'.join(pairs)


def decode_uri_form(form: Mapping[str, Any]) -> Dict[str, Any]:
    """Percent-decode every string value of a form mapping.

    Non-string values are kept as they are; list values are decoded
    item by item. The input mapping is not modified.
    """
    decoded: Dict[str, Any] = {}
    for key, value in form.items():
        if isinstance(value, str):
            decoded[key] = unquote(value)
        elif isinstance(value, (list, tuple)):
            decoded[key] = [unquote(v) if isinstance(v, str) else v for v in value]
        else:
            decoded[key] = value
    return decoded


def parse_form(text: str) -> Dict[str, FormValue]:
    """Parse an x-www-form-urlencoded string into a dictionary.

    Blank values are kept. A key that appears more than once maps to the
    list of its values in order.

    Args:
        text: Raw form body, e.g. ``"a=1&b=two%20words"``

    Returns:
        Dictionary of form fields
    """
    parsed: Dict[str, FormValue] = {}
    for key, value in parse_qsl(text.lstrip('?'), keep_blank_values=True):
        if key not in parsed:
            parsed[key] = value
        elif isinstance(parsed[key], list):
            parsed[key].append(value)
        else:
            parsed[key] = [parsed[key], value]
    return parsed
