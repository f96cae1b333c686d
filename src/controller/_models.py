from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from os import getenv
from types import MappingProxyType
from typing import Any

from ._constants import (DEFAULT_TIMEOUT,
                         ENV_API_KEY,
                         ENV_APP_ROOT,
                         ENV_ENDPOINT,
                         ENV_ENVIRONMENT,
                         ENV_PROJECT_ID,
                         ENV_RELEASE,
                         ENV_TIMEOUT)
from ._env_helpers import parse_float


@dataclass(slots=True)
class Config:
    api_key: str | None = None
    project_id: str | None = None
    # Collector base URL, `/issues` is appended
    api_endpoint: str | None = None

    environment: str | None = None
    release: str | None = None

    # Frames whose file lives under this directory are marked `in_app`
    app_root: str | None = None

    timeout: float = DEFAULT_TIMEOUT

    def with_env_defaults(self) -> Config:
        cfg = Config.from_env()
        return cfg.overlay(self)

    def overlay(self, other: Config) -> Config:
        """
        Return a new config where `other` overrides `self`.
        Semantics:
          - strings: None means "no override"
          - timeout: always override
        """
        out = replace(self)

        for name in ('api_key', 'project_id', 'api_endpoint',
                     'environment', 'release', 'app_root'):
            v = getattr(other, name)
            if v is not None:
                setattr(out, name, v)

        out.timeout = other.timeout

        return out

    @classmethod
    def from_env(cls) -> Config:
        return cls(
            api_key=getenv(ENV_API_KEY),
            project_id=getenv(ENV_PROJECT_ID),
            api_endpoint=getenv(ENV_ENDPOINT),
            environment=getenv(ENV_ENVIRONMENT),
            release=getenv(ENV_RELEASE),
            app_root=getenv(ENV_APP_ROOT),
            timeout=parse_float(getenv(ENV_TIMEOUT), default=DEFAULT_TIMEOUT),
        )


def _copy(value: Any) -> Any:
    # containers are copied, leaves are shared
    if isinstance(value, Mapping):
        return {k: _copy(v) for k, v in value.items()}
    if type(value) in (list, tuple, set, frozenset):
        return type(value)(_copy(v) for v in value)
    return value


def _frozen(d: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType({k: _copy(v) for k, v in (d or {}).items()})


def _thaw(value: Any) -> Any:
    # read-only views back into plain JSON-ready containers
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True, slots=True)
class StackFrame:
    filename: str | None
    abs_path: str | None
    function: str | None
    # class the function belongs to, if any
    module: str | None
    lineno: int | None
    pre_context: tuple[str, ...] = ()
    context_line: str | None = None
    post_context: tuple[str, ...] = ()
    in_app: bool = False
    vars: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'pre_context', tuple(self.pre_context))
        object.__setattr__(self, 'post_context', tuple(self.post_context))
        object.__setattr__(self, 'vars', _frozen(self.vars))

    def to_dict(self) -> dict[str, Any]:
        return {
            'filename': self.filename,
            'abs_path': self.abs_path,
            'function': self.function,
            'module': self.module,
            'lineno': self.lineno,
            'pre_context': list(self.pre_context),
            'context_line': self.context_line,
            'post_context': list(self.post_context),
            'in_app': self.in_app,
            'vars': dict(self.vars),
        }


@dataclass(frozen=True, slots=True)
class ExceptionInfo:
    type: str
    value: str
    frames: tuple[StackFrame, ...] = ()
    mechanism: str = 'generic'
    handled: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            'type': self.type,
            'value': self.value,
            'mechanism': {
                'type': self.mechanism,
                'handled': self.handled,
            },
            'stacktrace': {
                'frames': [f.to_dict() for f in self.frames],
            },
        }


@dataclass(frozen=True, slots=True)
class TraceContext:
    trace_id: str
    span_id: str
    op: str
    # always None: every event starts its own trace
    parent_span_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'trace_id': self.trace_id,
            'span_id': self.span_id,
            'parent_span_id': self.parent_span_id,
            'op': self.op,
        }


@dataclass(frozen=True, slots=True)
class UserContext:
    id: str | None = None
    username: str | None = None
    email: str | None = None
    ip_address: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'ip_address': self.ip_address,
        }


@dataclass(frozen=True, slots=True)
class FaultEvent:
    """
    A single error report, as sent to the collector.

    Instances are snapshots: containers are copied on construction
    and exposed read-only, so changing the client afterwards never
    alters an event that was already built.
    """
    event_id: str
    timestamp: str
    platform: str
    level: str
    sdk: Mapping[str, Any]
    exception: ExceptionInfo
    tags: Mapping[str, str | None]
    extra: Mapping[str, Any]
    user: UserContext
    request: Mapping[str, Any]
    server_name: str | None
    runtime: Mapping[str, Any]
    os: Mapping[str, Any]
    trace: TraceContext
    browser: Mapping[str, Any]
    device: Mapping[str, Any]
    project_id: str
    environment: str
    release: str | None
    transaction: str | None

    def __post_init__(self):
        for name in ('sdk', 'tags', 'extra', 'request',
                     'runtime', 'os', 'browser', 'device'):
            object.__setattr__(self, name, _frozen(getattr(self, name)))

    @property
    def frames(self) -> tuple[StackFrame, ...]:
        return self.exception.frames

    def to_dict(self) -> dict[str, Any]:
        os_ctx = {k: v for k, v in self.os.items() if k != 'kernel_version'}

        return {
            'event_id': self.event_id,
            'timestamp': self.timestamp,
            'platform': self.platform,
            'level': self.level,
            'sdk': _thaw(self.sdk),
            'exception': self.exception.to_dict(),
            'tags': dict(self.tags),
            'extra': _thaw(self.extra),
            'user': self.user.to_dict(),
            'request': _thaw(self.request),
            'server_name': self.server_name,
            'runtime': dict(self.runtime),
            'os': dict(self.os),
            'contexts': {
                'trace': self.trace.to_dict(),
                'browser': dict(self.browser),
                'os': os_ctx,
                'runtime': dict(self.runtime),
                'device': dict(self.device),
            },
            'project_id': self.project_id,
            'environment': self.environment,
            'release': self.release,
            'transaction': self.transaction,
        }
