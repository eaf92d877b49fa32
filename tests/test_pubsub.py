"""PubsubContainer tests"""

import threading

import pytest

from skygear.config import Configuration
from skygear.errors import InvalidConfiguration
from skygear.pubsub import PubsubContainer, pubsub_endpoint_for


class RecordingConnection:
    def __init__(self):
        self.sent = []

    def send(self, message):
        self.sent.append(message)


@pytest.fixture
def pubsub(config):
    p = PubsubContainer(config)
    yield p
    p.close()


def test_endpoint_derivation():
    http = Configuration(endpoint="http://localhost:3000/", api_key="key")
    https = Configuration(endpoint="https://app.example.com/api", api_key="key")

    assert pubsub_endpoint_for(http) == "ws://localhost:3000/_/pubsub?api_key=key"
    assert pubsub_endpoint_for(https) == "wss://app.example.com/api/_/pubsub?api_key=key"


def test_inbound_message_reaches_handlers(pubsub):
    received = []
    pubsub.subscribe("chat", received.append)

    pubsub.dispatch("chat", {"text": "hi"})
    pubsub.dispatch("other", {"text": "ignored"})

    assert received == [{"text": "hi"}]


def test_handler_error_does_not_stop_others(pubsub):
    received = []

    def broken(data):
        raise RuntimeError("bad handler")

    pubsub.subscribe("chat", broken)
    pubsub.subscribe("chat", received.append)
    pubsub.dispatch("chat", 1)

    assert received == [1]


def test_publish_queued_until_connected(pubsub):
    pubsub.subscribe("chat", lambda data: None)
    pubsub.publish("chat", {"text": "early"})
    connection = RecordingConnection()

    pubsub.attach_connection(connection)

    assert connection.sent == [
        {"action": "sub", "channel": "chat"},
        {"action": "pub", "channel": "chat", "data": {"text": "early"}},
    ]


def test_unsubscribe_last_handler_sends_unsub(pubsub):
    connection = RecordingConnection()
    pubsub.attach_connection(connection)

    def handler(data):
        pass

    pubsub.subscribe("chat", handler)
    pubsub.unsubscribe("chat", handler)

    assert connection.sent == [{"action": "sub", "channel": "chat"}, {"action": "unsub", "channel": "chat"}]
    assert pubsub.subscribed_channels() == []


def test_unsubscribe_all(pubsub):
    pubsub.subscribe("a", lambda d: None)
    pubsub.subscribe("b", lambda d: None)

    pubsub.unsubscribe_all()

    assert pubsub.subscribed_channels() == []


def test_background_execution(config):
    p = PubsubContainer(config.replace(pubsub_handler_execution_in_background=True))
    seen = threading.Event()
    threads = []

    def handler(data):
        threads.append(threading.current_thread().name)
        seen.set()

    try:
        p.subscribe("chat", handler)
        p.dispatch("chat", "hello")
        assert seen.wait(5)
        assert threads[0].startswith("skygear-pubsub")
    finally:
        p.close()


def test_reconfigure_to_new_endpoint_drops_connection(pubsub):
    pubsub.attach_connection(RecordingConnection())

    pubsub.configure(Configuration(endpoint="http://elsewhere/", api_key="key"))

    assert not pubsub.connected
    assert pubsub.endpoint == "ws://elsewhere/_/pubsub?api_key=key"


class RecordingConnector:
    def __init__(self):
        self.endpoints = []
        self.connection = RecordingConnection()

    def __call__(self, endpoint):
        self.endpoints.append(endpoint)
        return self.connection


def test_subscribe_connects_automatically(config):
    connector = RecordingConnector()
    p = PubsubContainer(config, connector=connector)

    try:
        p.subscribe("chat", lambda data: None)

        assert connector.endpoints == ["ws://localhost:3000/_/pubsub?api_key=test-api-key"]
        assert p.connected
        assert connector.connection.sent == [{"action": "sub", "channel": "chat"}]
    finally:
        p.close()


def test_manual_connection_when_automatic_disabled(config):
    connector = RecordingConnector()
    p = PubsubContainer(config.replace(pubsub_connect_automatically=False), connector=connector)

    try:
        p.subscribe("chat", lambda data: None)
        p.publish("chat", "early")

        assert connector.endpoints == []
        assert not p.connected

        p.connect()

        assert connector.connection.sent == [
            {"action": "sub", "channel": "chat"},
            {"action": "pub", "channel": "chat", "data": "early"},
        ]
    finally:
        p.close()


def test_connect_without_connector(pubsub):
    with pytest.raises(InvalidConfiguration):
        pubsub.connect()
