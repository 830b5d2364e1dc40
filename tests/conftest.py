"""Shared fixtures for the test suite."""

import socket

import pytest


@pytest.fixture
def socket_pair():
    """Connected (client, device) sockets."""
    client, device = socket.socketpair()
    yield client, device
    client.close()
    device.close()
