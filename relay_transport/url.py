"""Connection URL helpers for the relay endpoint."""

from __future__ import annotations

import platform
import sys
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode


@dataclass(frozen=True)
class Environment:
    """Runtime environment descriptor embedded in connection URLs."""

    name: str
    host: str = ""
    browser: bool = False


def is_browser() -> bool:
    """Return True when running inside a browser (Pyodide/emscripten)."""
    return sys.platform == "emscripten"


def _browser_host() -> str:
    try:
        import js  # type: ignore[import-not-found]  # only present under Pyodide
    except ImportError:
        return ""
    return str(getattr(js.location, "host", "") or "")


def detect_environment() -> Environment:
    """Describe the current runtime for the ``env`` query parameter."""
    if is_browser():
        return Environment(name="browser", host=_browser_host(), browser=True)
    return Environment(name=platform.python_implementation().lower())


def to_socket_scheme(url: str) -> str:
    """Rewrite an http(s) URL to its ws(s) counterpart.

    Any other scheme is returned unchanged.
    """
    if url.startswith("https"):
        return "wss" + url[len("https") :]
    if url.startswith("http"):
        return "ws" + url[len("http") :]
    return url


def get_websocket_url(
    url: str,
    protocol: str,
    version: int | float | str,
    *,
    environment: Environment | None = None,
) -> str:
    """Build the relay connection URL.

    Args:
        url: Base endpoint, optionally carrying its own query string.
        protocol: Protocol name appended as ``protocol``.
        version: Protocol version appended as ``version``.
        environment: Runtime descriptor; detected when omitted.

    Returns:
        Socket URL with ``protocol``, ``version`` and environment parameters
        merged over any query parameters already present on ``url``.
    """
    env = environment if environment is not None else detect_environment()
    base, _, query = to_socket_scheme(url).partition("?")

    params: dict[str, str] = dict(parse_qsl(query, keep_blank_values=True))
    params["protocol"] = str(protocol)
    params["version"] = str(version)
    if env.browser:
        params["env"] = "browser"
        params["host"] = env.host
    else:
        params["env"] = env.name

    return f"{base}?{urlencode(params)}"
