__all__ = ['ControllerHandler']

from ._logging import ControllerHandler
