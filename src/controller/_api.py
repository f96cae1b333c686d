from __future__ import annotations

from functools import wraps
from typing import Any

from ._client import Client
from ._environment import (EnvironmentSnapshot,
                           is_wsgi_environ,
                           reset_environment_snapshot,
                           set_environment_snapshot)
from ._log import LOG
from ._models import Config, FaultEvent
from ._transport import Transport

_CLIENT: Client | None = None
_CONFIG: Config | None = None


def init(config: Config | None = None,
         *,
         transport: Transport | None = None,
         reset: bool = False) -> Client:
    """
    Create the global client; settings not given in `config` are
    read from ``CONTROLLER_*`` environment variables.

    :raises ConfigurationError: if no API key or project ID is available
    """
    global _CLIENT, _CONFIG

    # Already set up (e.g. warm start)
    if _CLIENT is not None and not reset:
        return _CLIENT

    config = (Config.from_env()
              if config is None
              else config.with_env_defaults())

    LOG.debug('Controller: project %s, endpoint %s',
              config.project_id, config.api_endpoint or '(default)')

    _CLIENT = Client.from_config(config, transport)
    _CONFIG = config
    return _CLIENT


def get_client() -> Client:
    if _CLIENT is None:
        return init()
    return _CLIENT


def report_exception(exc: BaseException,
                     *,
                     extra: dict[str, Any] | None = None) -> FaultEvent:
    return get_client().report_exception(exc, extra=extra)


def capture(
    _fn=None,
    *,
    client: Client | None = None,
    context_getter=None,  # fn(args, kwargs) -> dict
    re_raise: bool = True,
):
    """
    Decorator that reports any exception escaping the wrapped function.

    When called as a WSGI application, the report describes the
    request being served. Exceptions are re-raised by default.
    """
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            # app(environ, start_response) or self.__call__(environ, ...)
            environ = next((a for a in args[:2] if is_wsgi_environ(a)), None)
            token = None

            if environ is not None:
                app_root = _CONFIG.app_root if _CONFIG else None
                token = set_environment_snapshot(
                    EnvironmentSnapshot.from_wsgi(environ, app_root))

            try:
                return fn(*args, **kwargs)

            except Exception as e:
                extra = {'function': fn.__qualname__}
                if context_getter:
                    extra.update(context_getter(args, kwargs) or {})

                (client or get_client()).report_exception(e, extra=extra)

                if re_raise:
                    raise

                return None

            finally:
                if token is not None:
                    reset_environment_snapshot(token)

        return wrapper

    return deco(_fn) if _fn else deco


# alias: for people who just want a decorator and don't care about semantics.
wrap = capture
