from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ._constants import ENV_APP_ROOT


@dataclass(frozen=True, slots=True)
class EnvironmentSnapshot:
    """
    Ambient process / request state the report pipeline reads from.

    `server` holds CGI/WSGI-style variables (``HTTP_USER_AGENT``,
    ``REMOTE_ADDR``, ...); for a plain process it is the OS environment.
    """
    server: Mapping[str, Any] = field(default_factory=dict)
    argv: tuple[str, ...] = ()
    # Directory holding the application's own code
    app_root: str | None = None
    is_cli: bool = True

    def __post_init__(self):
        # detach from the caller's dict
        object.__setattr__(self, 'server', MappingProxyType(dict(self.server)))

    @property
    def user_agent(self) -> str | None:
        ua = self.server.get('HTTP_USER_AGENT')
        return ua if isinstance(ua, str) and ua else None

    @property
    def remote_addr(self) -> str | None:
        return self.server.get('REMOTE_ADDR') or None

    @classmethod
    def from_process(cls, app_root: str | None = None) -> EnvironmentSnapshot:
        return cls(
            server=os.environ,
            argv=tuple(sys.argv),
            app_root=app_root or os.getenv(ENV_APP_ROOT),
            is_cli=True,
        )

    @classmethod
    def from_wsgi(cls,
                  environ: Mapping[str, Any],
                  app_root: str | None = None) -> EnvironmentSnapshot:
        return cls(
            server=environ,
            argv=(),
            app_root=app_root or os.getenv(ENV_APP_ROOT),
            is_cli=False,
        )


_snapshot_ctx: ContextVar[EnvironmentSnapshot | None] = ContextVar(
    'controller_environment_snapshot',
    default=None)


def set_environment_snapshot(snapshot: EnvironmentSnapshot | None) -> Token:
    return _snapshot_ctx.set(snapshot)


def reset_environment_snapshot(token: Token) -> None:
    _snapshot_ctx.reset(token)


def get_environment_snapshot() -> EnvironmentSnapshot | None:
    return _snapshot_ctx.get()


def is_wsgi_environ(obj: Any) -> bool:
    return (isinstance(obj, Mapping)
            and 'REQUEST_METHOD' in obj
            and 'wsgi.version' in obj)
