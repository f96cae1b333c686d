"""Top-level package for Controller, an error-reporting client."""
from __future__ import annotations

__all__ = [
    'init',
    'get_client',
    'report_exception',
    # decorator
    'capture',
    # per-request state (if capture is not used)
    'set_environment_snapshot',
    'reset_environment_snapshot',
    # Classes
    'Client',
    'Config',
    'ControllerHandler',
    'EnvironmentSnapshot',
    'FaultEvent',
    'StackFrame',
    'HttpTransport',
    # Errors
    'ControllerError',
    'ConfigurationError',
    'TransportError',
]

from logging import NullHandler

from ._api import capture, get_client, init, report_exception
from ._client import Client
from ._environment import (EnvironmentSnapshot,
                           set_environment_snapshot,
                           reset_environment_snapshot)
from ._errors import ConfigurationError, ControllerError, TransportError
from ._integrations import ControllerHandler
from ._log import LOG
from ._models import Config, FaultEvent, StackFrame
from ._transport import HttpTransport


# Set up logging to ``/dev/null`` like a library is supposed to.
# http://docs.python.org/3.3/howto/logging.html#configuring-logging-for-a-library
LOG.addHandler(NullHandler())


def version():
    from importlib.metadata import version
    __version__ = version('controller-sdk')
    return __version__
