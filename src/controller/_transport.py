"""HTTP delivery of events to the collector."""
from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from os import getenv
from typing import Any, Protocol

from ._constants import DEFAULT_TIMEOUT, ENV_CA_BUNDLE
from ._errors import TransportError
from ._log import LOG


class Transport(Protocol):
    def post(self,
             url: str,
             payload: Mapping[str, Any],
             headers: Mapping[str, str]) -> Any:
        ...


def _ssl_context_from_env():
    cafile = getenv(ENV_CA_BUNDLE) or getenv('SSL_CERT_FILE')
    if cafile:
        ctx = ssl.create_default_context(cafile=cafile)
        return ctx
    return None


class HttpTransport:
    """
    Send events as JSON over HTTP(S), one blocking request per event.

    There is no retry or queue: a failed delivery raises
    :class:`TransportError` and the event is dropped.
    """

    __slots__ = ('_timeout',)

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self._timeout = timeout

    def post(self,
             url: str,
             payload: Mapping[str, Any],
             headers: Mapping[str, str]) -> bytes:
        """
        POST `payload` to `url`.

        :raises TransportError: on a non-2xx response or a
                                network-level failure
        """
        # `extra` may hold arbitrary objects
        data = json.dumps(payload, default=str).encode('utf-8')

        req = urllib.request.Request(
            url,
            method='POST',
            data=data,
            headers=dict(headers),
        )

        try:
            with urllib.request.urlopen(req,
                                        timeout=self._timeout,
                                        context=_ssl_context_from_env()) as resp:
                body = resp.read()
                if resp.status >= 400:
                    raise TransportError(
                        f'Collector returned status {resp.status}: '
                        f'{body.decode("utf-8", errors="replace")}',
                        status=resp.status,
                    )
                LOG.debug('Event delivered to %s (status %s)', url, resp.status)
                return body

        except urllib.error.HTTPError as e:
            body = e.read().decode('utf-8', errors='replace')
            raise TransportError(
                f'Collector HTTP error {e.code}: {body}',
                status=e.code,
            ) from e

        except (urllib.error.URLError, OSError) as e:
            raise TransportError(f'Could not reach collector at {url}: {e}') from e
