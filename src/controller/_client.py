from __future__ import annotations

from dataclasses import replace
from logging import Logger, getLogger
from os import getenv
from typing import Any

from ._constants import (DEFAULT_ENDPOINT,
                         DEFAULT_ENVIRONMENT,
                         DEFAULT_TIMEOUT,
                         ENV_ENDPOINT,
                         ENV_ENVIRONMENT,
                         ENV_RELEASE,
                         LEVEL,
                         MECHANISM)
from ._environment import EnvironmentSnapshot, get_environment_snapshot
from ._errors import ConfigurationError
from ._metadata import (browser_name,
                        device_family,
                        os_info,
                        runtime_info,
                        server_name)
from ._models import Config, FaultEvent
from ._report import build_event
from ._request import RequestContextProvider
from ._transport import HttpTransport, Transport


class Client:
    """
    Controller client.

    The client:
        * holds the project identity and the tags / extra context
          accumulated through its fluent setters
        * builds one :class:`FaultEvent` per reported exception
        * hands it to the transport synchronously

    The mutable tag/context state is not synchronized; guard it
    externally if several threads call the setters.
    """
    __slots__ = (
        '_api_key',
        '_project_id',
        '_api_endpoint',
        '_transport',
        '_snapshot',
        '_request_context',
        '_environment',
        '_release',
        '_tags',
        '_extra',
        '_user',
        '_logger',
    )

    def __init__(
        self,
        api_key: str,
        project_id: str,
        api_endpoint: str | None = None,
        transport: Transport | None = None,
        *,
        snapshot: EnvironmentSnapshot | None = None,
        request_context: RequestContextProvider | None = None,
        app_root: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        logger: Logger | None = None,
    ):
        if not api_key:
            raise ConfigurationError('API key is required')
        if not project_id:
            raise ConfigurationError('Project ID is required')

        self._api_key = api_key
        self._project_id = project_id
        self._api_endpoint = api_endpoint
        self._transport = transport or HttpTransport(timeout=timeout)
        self._snapshot = snapshot or EnvironmentSnapshot.from_process(app_root)
        self._request_context = request_context
        self._logger = logger or getLogger('controller.client')

        self._environment = getenv(ENV_ENVIRONMENT) or DEFAULT_ENVIRONMENT
        self._release = getenv(ENV_RELEASE) or None
        self._extra: dict[str, Any] = {}
        self._user: dict[str, Any] = {}
        self._tags = self._default_tags()

    @classmethod
    def from_config(cls,
                    config: Config,
                    transport: Transport | None = None,
                    **kwargs) -> Client:
        client = cls(
            config.api_key or '',
            config.project_id or '',
            config.api_endpoint,
            transport,
            app_root=config.app_root,
            timeout=config.timeout,
            **kwargs,
        )
        if config.environment:
            client.set_environment(config.environment)
        if config.release:
            client.set_release(config.release)
        return client

    def _default_tags(self) -> dict[str, str | None]:
        ua = self._snapshot.user_agent
        runtime = runtime_info()
        return {
            'browser': ua,
            'browser.name': browser_name(ua),
            'client_os': os_info()['name'],
            'device': ua,
            'device.family': device_family(ua),
            'runtime': f"{runtime['name']} {runtime['version']}",
            'runtime.name': runtime['name'],
            'server_name': server_name(),
            'environment': self._environment,
            'level': LEVEL,
            'mechanism': MECHANISM,
        }

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def environment(self) -> str:
        return self._environment

    @property
    def release(self) -> str | None:
        return self._release

    @property
    def tags(self) -> dict[str, str | None]:
        return dict(self._tags)

    @property
    def endpoint(self) -> str:
        base = self._api_endpoint or getenv(ENV_ENDPOINT) or DEFAULT_ENDPOINT
        return base.rstrip('/')

    def context(self, key: str, value: Any) -> Client:
        self._extra[key] = value
        return self

    def tag(self, key: str, value: str | None) -> Client:
        self._tags[key] = value
        return self

    def set_release(self, release: str) -> Client:
        self._release = release
        return self

    def set_environment(self, environment: str) -> Client:
        self._environment = environment
        self._tags['environment'] = environment
        return self

    def set_user(self,
                 id: str | None = None,
                 username: str | None = None,
                 email: str | None = None,
                 ip_address: str | None = None) -> Client:
        self._user = {
            'id': id,
            'username': username,
            'email': email,
            'ip_address': ip_address,
        }
        return self

    def headers(self) -> dict[str, str]:
        return {
            'Authorization': f'Bearer {self._api_key}',
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'project-id': self._project_id,
        }

    def _current_snapshot(self) -> EnvironmentSnapshot:
        snapshot = get_environment_snapshot()
        if snapshot is None:
            return self._snapshot
        # a request snapshot knows nothing of where this client's code lives
        if snapshot.app_root is None and self._snapshot.app_root is not None:
            return replace(snapshot, app_root=self._snapshot.app_root)
        return snapshot

    def build_report(self,
                     exc: BaseException,
                     *,
                     extra: dict[str, Any] | None = None) -> FaultEvent:
        """
        Build the event for `exc` from the client's current state.

        `extra` is merged over the context set with :meth:`context`
        for this report only.
        """
        merged = dict(self._extra)
        if extra:
            merged.update(extra)

        return build_event(
            exc,
            project_id=self._project_id,
            tags=self._tags,
            extra=merged,
            request_context=self._request_context,
            release=self._release,
            environment=self._environment,
            user=self._user,
            snapshot=self._current_snapshot(),
        )

    def report_exception(self,
                         exc: BaseException,
                         *,
                         extra: dict[str, Any] | None = None) -> FaultEvent:
        """
        Build an event for `exc` and send it to the collector.

        :raises TransportError: if the collector could not be reached
                                or rejected the event
        """
        event = self.build_report(exc, extra=extra)
        url = f'{self.endpoint}/issues'

        self._logger.debug('Reporting %s (event %s) to %s',
                           event.exception.type, event.event_id, url)
        self._transport.post(url, event.to_dict(), self.headers())

        return event
