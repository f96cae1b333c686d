from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any
from wsgiref.util import request_uri

from ._environment import EnvironmentSnapshot
from ._redact import redact

RequestContextProvider = Callable[[EnvironmentSnapshot], Mapping[str, Any]]

# CGI variables that carry request headers without the `HTTP_` prefix
_UNPREFIXED_HEADERS = ('CONTENT_TYPE', 'CONTENT_LENGTH')


def _headers(environ: Mapping[str, Any]) -> dict[str, list[str]]:
    headers = {}
    for key, value in environ.items():
        if key.startswith('HTTP_'):
            name = key[5:]
        elif key in _UNPREFIXED_HEADERS:
            name = key
        else:
            continue
        if value in (None, ''):
            continue
        headers[name.replace('_', '-').lower()] = [str(value)]
    return headers


def _url(environ: Mapping[str, Any]) -> str | None:
    try:
        return request_uri(dict(environ))
    except KeyError:
        # not enough CGI variables to rebuild it
        return None


def cli_context(snapshot: EnvironmentSnapshot) -> dict[str, Any]:
    argv = list(snapshot.argv)
    return {
        'argv': argv,
        'script': argv[0] if argv else None,
    }


def wsgi_context(snapshot: EnvironmentSnapshot) -> dict[str, Any]:
    environ = snapshot.server
    return {
        'url': _url(environ),
        'method': environ.get('REQUEST_METHOD'),
        'headers': _headers(environ),
        'query_string': environ.get('QUERY_STRING') or None,
        # wsgi.input is consumed by the application, never read here
        'body': None,
        'client_ip': snapshot.remote_addr,
        # WSGI also carries streams and callables; keep the plain strings
        'server': {k: v for k, v in environ.items() if isinstance(v, str)},
    }


def default_request_context(snapshot: EnvironmentSnapshot) -> dict[str, Any]:
    """
    Describe what the process was doing when the error happened:
    the command line for scripts, the HTTP request for WSGI apps.

    Credentials in headers and server variables are redacted.
    """
    if snapshot.is_cli:
        return cli_context(snapshot)
    return redact(wsgi_context(snapshot))
