from unittest.mock import Mock

import pytest

from controller import (Client,
                        Config,
                        ConfigurationError,
                        EnvironmentSnapshot,
                        TransportError)
from controller import _client
from conftest import CHROME_UA


def _boom():
    raise RuntimeError('payment service unavailable')


def _caught() -> BaseException:
    try:
        _boom()
    except RuntimeError as e:
        return e
    raise AssertionError('expected an exception')


@pytest.fixture
def client(transport, snapshot):
    return Client('secret-key', 'proj-9', 'https://collector.test/',
                  transport, snapshot=snapshot)


class TestConstruction:

    def test_requires_api_key(self):
        with pytest.raises(ConfigurationError, match='API key is required'):
            Client('', 'proj')

    def test_requires_project_id(self):
        with pytest.raises(ConfigurationError, match='Project ID is required'):
            Client('key', '')

    def test_api_key_is_checked_first(self):
        with pytest.raises(ConfigurationError, match='API key'):
            Client('', '')

    def test_fails_before_any_other_setup(self, monkeypatch):
        http_transport = Mock()
        from_process = Mock()
        monkeypatch.setattr(_client, 'HttpTransport', http_transport)
        monkeypatch.setattr(_client.EnvironmentSnapshot, 'from_process',
                            from_process)

        with pytest.raises(ConfigurationError):
            Client('', 'proj')

        http_transport.assert_not_called()
        from_process.assert_not_called()

    def test_default_tags(self, client):
        tags = client.tags

        assert tags['browser'] == CHROME_UA
        assert tags['browser.name'] == 'Chrome'
        assert tags['device'] == CHROME_UA
        assert tags['device.family'] == 'Desktop'
        assert tags['runtime.name'] == 'python'
        assert tags['runtime'].startswith('python ')
        assert tags['environment'] == 'production'
        assert tags['level'] == 'error'
        assert tags['mechanism'] == 'generic'
        assert set(tags) >= {'client_os', 'server_name'}

    def test_environment_and_release_from_env(self, monkeypatch, transport):
        monkeypatch.setenv('CONTROLLER_ENVIRONMENT', 'qa')
        monkeypatch.setenv('CONTROLLER_RELEASE', '3.1.0')

        client = Client('key', 'proj', transport=transport,
                        snapshot=EnvironmentSnapshot())

        assert client.environment == 'qa'
        assert client.tags['environment'] == 'qa'
        assert client.release == '3.1.0'

    def test_defaults_without_env(self, transport):
        client = Client('key', 'proj', transport=transport,
                        snapshot=EnvironmentSnapshot())

        assert client.environment == 'production'
        assert client.release is None

    def test_from_config(self, transport):
        config = Config(api_key='key', project_id='proj',
                        api_endpoint='https://eu.collector.test',
                        environment='staging', release='7')
        client = Client.from_config(config, transport,
                                    snapshot=EnvironmentSnapshot())

        assert client.project_id == 'proj'
        assert client.endpoint == 'https://eu.collector.test'
        assert client.environment == 'staging'
        assert client.release == '7'


class TestEndpoint:

    def test_explicit_endpoint_is_trimmed(self, client):
        assert client.endpoint == 'https://collector.test'

    def test_endpoint_from_env(self, monkeypatch, transport):
        monkeypatch.setenv('CONTROLLER_ENDPOINT', 'https://self-hosted.test/')
        client = Client('key', 'proj', transport=transport,
                        snapshot=EnvironmentSnapshot())
        assert client.endpoint == 'https://self-hosted.test'

    def test_default_endpoint(self, transport):
        client = Client('key', 'proj', transport=transport,
                        snapshot=EnvironmentSnapshot())
        assert client.endpoint == 'https://api.controller.dev'


class TestSetters:

    def test_setters_chain(self, client):
        assert client.context('a', 1) is client
        assert client.tag('team', 'payments') is client
        assert client.set_release('1.0') is client
        assert client.set_environment('dev') is client
        assert client.set_user(id='u-1') is client

    def test_context_is_last_write_wins(self, client):
        client.context('plan', 'pro').context('seats', 3).context('plan', 'free')

        event = client.build_report(_caught())
        assert dict(event.extra) == {'plan': 'free', 'seats': 3}

    def test_per_report_extra(self, client):
        client.context('plan', 'pro')

        event = client.build_report(_caught(), extra={'plan': 'trial', 'job': 7})
        assert dict(event.extra) == {'plan': 'trial', 'job': 7}
        # client state untouched
        assert dict(client.build_report(_caught()).extra) == {'plan': 'pro'}

    def test_set_environment_updates_field_and_tag(self, client):
        before = client.build_report(_caught())

        client.set_environment('staging')
        after = client.build_report(_caught())

        assert after.environment == 'staging'
        assert after.tags['environment'] == 'staging'
        # already-built report is a snapshot
        assert before.environment == 'production'
        assert before.tags['environment'] == 'production'

    def test_later_context_does_not_leak_into_built_report(self, client):
        client.context('step', 1)
        event = client.build_report(_caught())

        client.context('step', 2).tag('late', 'yes')

        assert event.extra['step'] == 1
        assert 'late' not in event.tags

    def test_self_referencing_context_does_not_break_report(self, client,
                                                           transport):
        nodes = []
        nodes.append(nodes)
        client.context('nodes', nodes).context('plan', 'pro')

        event = client.report_exception(_caught())

        assert dict(event.extra) == {'nodes': None, 'plan': 'pro'}
        transport.post.assert_called_once()

    def test_release(self, client):
        client.set_release('2024.06.1')
        assert client.build_report(_caught()).release == '2024.06.1'

    def test_user(self, client):
        client.set_user(id='42', username='ada', email='ada@example.com')
        user = client.build_report(_caught()).to_dict()['user']

        assert user == {
            'id': '42',
            'username': 'ada',
            'email': 'ada@example.com',
            'ip_address': '10.0.0.7',
        }


class TestReportException:

    def test_posts_event_to_issues(self, client, transport):
        event = client.report_exception(_caught())

        transport.post.assert_called_once()
        url, payload, headers = transport.post.call_args.args
        assert url == 'https://collector.test/issues'
        assert payload == event.to_dict()
        assert payload['project_id'] == 'proj-9'
        assert payload['exception']['type'] == 'RuntimeError'
        assert headers == {
            'Authorization': 'Bearer secret-key',
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'project-id': 'proj-9',
        }

    def test_each_report_is_a_new_event(self, client, transport):
        first = client.report_exception(_caught())
        second = client.report_exception(_caught())

        assert transport.post.call_count == 2
        assert first.event_id != second.event_id

    def test_transport_failure_propagates(self, client, transport):
        transport.post.side_effect = TransportError('collector down', status=503)

        with pytest.raises(TransportError) as info:
            client.report_exception(_caught())
        assert info.value.status == 503

    def test_transaction_fallback(self, client):
        event = client.build_report(_caught())
        assert event.transaction.endswith('test_client.py')
