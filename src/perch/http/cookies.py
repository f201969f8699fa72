"""Cookie header parsing for server requests.

Reads the ``Cookie`` request header (``HTTP_COOKIE`` in a server environ)
into the flat mapping exposed as ``ServerRequest.cookie_params``.
"""

from urllib.parse import unquote


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict.

    Values are percent-decoded and stripped of surrounding quotes. When a
    name repeats, the first occurrence wins (browsers send the most
    specific cookie first). Returns an empty dict for empty or missing
    headers.
    """
    if not header:
        return {}
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        key, sep, value = pair.strip().partition("=")
        key = key.strip()
        if not sep or not key or key in cookies:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        cookies[key] = unquote(value)
    return cookies
