"""
Browser, device, runtime and OS facts for an event.

Everything here is derived from a user-agent string or from process
constants; none of it depends on the exception being reported.
"""
from __future__ import annotations

import platform
import re
import socket
from functools import lru_cache
from importlib.metadata import PackageNotFoundError, distributions, version
from typing import Any

from ._constants import SDK_DIST_NAME, SDK_FALLBACK_VERSION, SDK_NAME
from ._environment import EnvironmentSnapshot
from ._log import LOG

# Order matters: Chrome's user agent also mentions Safari
BROWSERS = ('Chrome', 'Firefox', 'Safari', 'Edge', 'Opera')

BROWSER_VERSION_RE = re.compile(r'(Chrome|Firefox|Safari|Edge|Opera)/([0-9.]+)')
DEVICE_MODEL_RE = re.compile(r'\((.*?)\)')


def browser_name(user_agent: str | None) -> str | None:
    if not user_agent:
        return None
    for name in BROWSERS:
        if name in user_agent:
            return name
    return None


def browser_version(user_agent: str | None) -> str | None:
    if not user_agent:
        return None
    m = BROWSER_VERSION_RE.search(user_agent)
    return m.group(2) if m else None


def device_family(user_agent: str | None) -> str:
    ua = user_agent or ''
    if 'Mobile' in ua:
        return 'Mobile'
    if 'Tablet' in ua:
        return 'Tablet'
    return 'Desktop'


def device_brand(user_agent: str | None) -> str | None:
    ua = user_agent or ''
    if 'iPhone' in ua or 'iPad' in ua:
        return 'Apple'
    if 'Android' in ua:
        return 'Android'
    return None


def device_model(user_agent: str | None) -> str | None:
    if not user_agent:
        return None
    m = DEVICE_MODEL_RE.search(user_agent)
    return m.group(1) if m else None


def browser_context(snapshot: EnvironmentSnapshot) -> dict[str, Any]:
    ua = snapshot.user_agent
    return {
        'name': browser_name(ua),
        'version': browser_version(ua),
        'user_agent': ua,
    }


def device_context(snapshot: EnvironmentSnapshot) -> dict[str, Any]:
    ua = snapshot.user_agent
    return {
        'family': device_family(ua),
        'model': device_model(ua),
        'brand': device_brand(ua),
    }


def runtime_info() -> dict[str, Any]:
    return {
        'name': 'python',
        'version': platform.python_version(),
        'implementation': platform.python_implementation(),
    }


def os_info(*, kernel: bool = False) -> dict[str, Any]:
    uname = platform.uname()
    info = {
        'name': uname.system or None,
        'version': uname.release or None,
        'build': uname.version or None,
    }
    if kernel:
        info['kernel_version'] = ' '.join(p for p in uname if p) or None
    return info


def server_name() -> str | None:
    try:
        return socket.gethostname() or None
    except OSError:
        LOG.debug('Hostname lookup failed', exc_info=True)
        return None


@lru_cache(maxsize=1)
def sdk_version() -> str:
    try:
        return version(SDK_DIST_NAME)
    except PackageNotFoundError:
        return SDK_FALLBACK_VERSION


@lru_cache(maxsize=1)
def installed_packages() -> tuple[tuple[str, str], ...]:
    pkgs = set()
    for dist in distributions():
        name = dist.metadata['Name']
        if name:
            pkgs.add((name, dist.version))
    return tuple(sorted(pkgs, key=lambda p: p[0].lower()))


def sdk_info() -> dict[str, Any]:
    return {
        'name': SDK_NAME,
        'version': sdk_version(),
        'packages': [{'name': n, 'version': v}
                     for n, v in installed_packages()],
    }
