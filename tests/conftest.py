import pytest

from airly.api.client import Client
from helpers import StubTransport


@pytest.fixture
def make_client():
    def factory(transport: StubTransport, language: str = "pl") -> Client:
        return Client("x1234x", language, transport)
    return factory
