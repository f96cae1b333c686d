import os
from unittest.mock import Mock

import pytest

from controller import EnvironmentSnapshot, _api

CHROME_UA = ('Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
             '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36')
IPHONE_UA = ('Mozilla/5.0 (iPhone; CPU iPhone OS 14_6 like Mac OS X) '
             'AppleWebKit/605.1.15 (KHTML, like Gecko) Version/14.1.1 '
             'Mobile/15E148 Safari/604.1')

TESTS_DIR = os.path.dirname(os.path.abspath(__file__))


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's CONTROLLER_* settings out of the tests."""
    for name in list(os.environ):
        if name.startswith('CONTROLLER_') or name == 'HTTP_USER_AGENT':
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_global_client(monkeypatch):
    monkeypatch.setattr(_api, '_CLIENT', None)
    monkeypatch.setattr(_api, '_CONFIG', None)


@pytest.fixture
def snapshot():
    return EnvironmentSnapshot(
        server={
            'HTTP_USER_AGENT': CHROME_UA,
            'REMOTE_ADDR': '10.0.0.7',
        },
        argv=('worker.py', '--once'),
        app_root=TESTS_DIR,
    )


@pytest.fixture
def transport():
    return Mock(name='transport')
