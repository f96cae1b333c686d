from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any, TypeVar

from . import _ids
from ._constants import (DEFAULT_ENVIRONMENT,
                         LEVEL,
                         MECHANISM,
                         PLATFORM,
                         TRACE_OP)
from ._environment import EnvironmentSnapshot, get_environment_snapshot
from ._log import LOG
from ._metadata import (browser_context,
                        device_context,
                        os_info,
                        runtime_info,
                        sdk_info,
                        server_name)
from ._models import (ExceptionInfo,
                      FaultEvent,
                      TraceContext,
                      UserContext,
                      _copy)
from ._request import RequestContextProvider, default_request_context
from ._sanitize import type_name
from ._trace import build_frames, call_sites, throw_site

T = TypeVar('T')


def _degrade(fn: Callable[[], T], default: T, what: str) -> T:
    # noinspection PyBroadException
    try:
        return fn()
    except Exception:
        # never fail a report over optional data
        LOG.debug('Could not resolve %s, using default', what, exc_info=True)
        return default


def _detach(values: Mapping[str, Any] | None, what: str) -> dict[str, Any]:
    """Deep copy of `values`; an entry that cannot be copied becomes None."""
    return {k: _degrade(lambda v=v: _copy(v), None, f'{what} {k!r}')
            for k, v in (values or {}).items()}


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ')


def resolve_transaction(exc: BaseException) -> str | None:
    """
    ``Class::function`` of the innermost method call in the trace,
    or the file the exception was raised in.
    """
    for site in call_sites(exc):
        if site.class_name and site.function:
            return f'{site.class_name}::{site.function}'
    return throw_site(exc)[0]


def build_event(
    exc: BaseException,
    *,
    project_id: str,
    tags: Mapping[str, str | None] | None = None,
    extra: Mapping[str, Any] | None = None,
    request_context: RequestContextProvider | None = None,
    release: str | None = None,
    environment: str | None = None,
    user: Mapping[str, Any] | None = None,
    snapshot: EnvironmentSnapshot | None = None,
) -> FaultEvent:
    """
    Assemble the event describing `exc`.

    Ambient data that cannot be resolved (no user agent, unreadable
    source files, a failing request-context provider) degrades to
    None or empty values; this function does not raise for it.
    """
    snapshot = (snapshot
                or get_environment_snapshot()
                or EnvironmentSnapshot.from_process())
    provider = request_context or default_request_context

    frames = _degrade(lambda: build_frames(exc, snapshot.app_root),
                      [], 'stack frames')

    user = dict(user or {})
    user_ctx = UserContext(
        id=user.get('id'),
        username=user.get('username'),
        email=user.get('email'),
        ip_address=user.get('ip_address') or snapshot.remote_addr,
    )

    return FaultEvent(
        event_id=_ids.event_id(),
        timestamp=utc_timestamp(),
        platform=PLATFORM,
        level=LEVEL,
        sdk=_degrade(sdk_info, {}, 'sdk info'),
        exception=ExceptionInfo(
            type=type_name(exc),
            value=_degrade(lambda: str(exc), '', 'exception message'),
            frames=tuple(frames),
            mechanism=MECHANISM,
            handled=False,
        ),
        tags=_detach(tags, 'tag'),
        extra=_detach(extra, 'extra'),
        user=user_ctx,
        request=_degrade(
            lambda: _detach(dict(provider(snapshot) or {}), 'request'),
            {}, 'request context'),
        server_name=server_name(),
        runtime=runtime_info(),
        os=_degrade(lambda: os_info(kernel=True), {}, 'os info'),
        trace=TraceContext(
            trace_id=_ids.trace_id(),
            span_id=_ids.span_id(),
            op=TRACE_OP,
        ),
        browser=browser_context(snapshot),
        device=device_context(snapshot),
        project_id=project_id,
        environment=environment or DEFAULT_ENVIRONMENT,
        release=release,
        transaction=_degrade(lambda: resolve_transaction(exc),
                             None, 'transaction'),
    )
