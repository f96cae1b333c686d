from __future__ import annotations

import logging
from logging import ERROR, Handler, LogRecord

from .._log import LOG


class DropInternalFilter(logging.Filter):
    """
    Filter that drops the library's own records, and records
    marked with `controller_skip`
    """
    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == LOG.name or record.name.startswith(f'{LOG.name}.'):
            return False
        return not getattr(record, 'controller_skip', False)


class ControllerHandler(Handler):
    """
    Reports exceptions attached to ERROR+ log records
    (``log.exception(...)`` or ``exc_info=True``) through a client.

    Records without exception info are ignored.
    """

    def __init__(
        self,
        client=None,  # Client; the global client when None
        *,
        min_level: str | int = ERROR,
        context_getter=None,  # fn(record) -> dict
    ):
        if isinstance(min_level, str):
            # noinspection PyUnresolvedReferences,PyProtectedMember
            min_level = logging._nameToLevel.get(min_level.upper(), ERROR)

        super().__init__(level=min_level)  # logging will filter by level for us
        self._client = client
        self._context_getter = context_getter

        self.addFilter(DropInternalFilter())

    def _get_client(self):
        if self._client is None:
            from .._api import get_client
            return get_client()
        return self._client

    def emit(self, record: LogRecord) -> None:
        if not record.exc_info or record.exc_info[1] is None:
            return

        # noinspection PyBroadException
        try:
            extra: dict = {}
            if self._context_getter:
                extra = dict(self._context_getter(record) or {})

            # Add call-site info
            extra.update({
                'logger': record.name,
                'file': record.filename,
                'lineno': record.lineno,
                'func': record.funcName,
                'msg': record.getMessage(),
            })

            self._get_client().report_exception(record.exc_info[1], extra=extra)

        except Exception:
            # never raise from logging handler
            # noinspection PyBroadException
            try:
                LOG.debug(
                    f'{self.__class__.__name__} failed', exc_info=True
                )
            except Exception:
                pass
