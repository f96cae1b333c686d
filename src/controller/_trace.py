from __future__ import annotations

import inspect
import os
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import FrameType, TracebackType
from typing import Any

from ._constants import CONTEXT_LINES
from ._models import StackFrame
from ._sanitize import sanitize
from ._source import source_context


@dataclass(frozen=True, slots=True)
class CallSite:
    """
    One entry of an exception's raw call-site list: the function that
    was called and the position (in its caller) it was called from.
    """
    filename: str | None = None
    lineno: int | None = None
    function: str | None = None
    class_name: str | None = None
    args: Mapping[str, Any] = field(default_factory=dict)


def _iter_tb(tb: TracebackType | None) -> Iterator[TracebackType]:
    while tb is not None:
        yield tb
        tb = tb.tb_next


def _class_name(frame: FrameType) -> str | None:
    # Python 3.11+
    qualname = getattr(frame.f_code, 'co_qualname', None)
    if qualname is not None:
        owner, _, _ = qualname.rpartition('.')
        if not owner or owner.endswith('<locals>'):
            return None
        return owner

    f_locals = frame.f_locals
    if 'self' in f_locals:
        return type(f_locals['self']).__name__
    cls = f_locals.get('cls')
    if isinstance(cls, type):
        return cls.__name__
    return None


def _arguments(frame: FrameType) -> dict[str, Any]:
    info = inspect.getargvalues(frame)
    names = list(info.args)
    if info.varargs:
        names.append(info.varargs)
    if info.keywords:
        names.append(info.keywords)
    return {n: info.locals[n] for n in names if n in info.locals}


def throw_site(exc: BaseException) -> tuple[str | None, int | None]:
    """File and line the exception was raised at, if it was raised."""
    last = None
    for last in _iter_tb(exc.__traceback__):
        pass
    if last is None:
        return None, None
    return last.tb_frame.f_code.co_filename, last.tb_lineno


def call_sites(exc: BaseException) -> list[CallSite]:
    """
    Raw call-site list of `exc`, innermost call first.

    Exceptions that were never raised have no traceback and
    yield an empty list.
    """
    entries = list(_iter_tb(exc.__traceback__))
    sites = []

    for k in range(len(entries) - 1, -1, -1):
        frame = entries[k].tb_frame

        if k > 0:
            caller = entries[k - 1]
            filename = caller.tb_frame.f_code.co_filename
            lineno = caller.tb_lineno
        elif frame.f_back is not None:
            filename = frame.f_back.f_code.co_filename
            lineno = frame.f_back.f_lineno
        else:
            filename = lineno = None

        sites.append(CallSite(
            filename=filename,
            lineno=lineno,
            function=frame.f_code.co_name,
            class_name=_class_name(frame),
            args=_arguments(frame),
        ))

    return sites


def is_in_app(path: str | None, app_root: str | None) -> bool:
    if not path or not app_root or path.startswith('<'):
        return False
    root = os.path.abspath(app_root).rstrip(os.sep)
    return os.path.abspath(path).startswith(root + os.sep)


def _stack_frame(site: CallSite,
                 app_root: str | None,
                 window: int) -> StackFrame:
    pre, line, post = source_context(site.filename, site.lineno, window)
    return StackFrame(
        filename=site.filename,
        abs_path=site.filename,
        function=site.function,
        module=site.class_name,
        lineno=site.lineno,
        pre_context=pre,
        context_line=line,
        post_context=post,
        in_app=is_in_app(site.filename, app_root),
        vars=sanitize(site.args),
    )


def build_frames(exc: BaseException,
                 app_root: str | None = None,
                 window: int = CONTEXT_LINES) -> list[StackFrame]:
    """
    Enriched stack frames for `exc`.

    The raise location is added in front of the raw call-site list
    (without a function or class), then the whole list is reversed,
    so the raise location is always the last frame.
    """
    filename, lineno = throw_site(exc)
    sites = [CallSite(filename=filename, lineno=lineno)]
    sites.extend(call_sites(exc))

    frames = [_stack_frame(s, app_root, window) for s in sites]
    frames.reverse()
    return frames
