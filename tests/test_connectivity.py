"""Tests for connectivity providers."""

from __future__ import annotations

import asyncio
import socket

import pytest

from coinview_core.network import ConnectivityStatus, ProbeConnectivityMonitor, StaticConnectivity


def _unused_port() -> int:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestStaticConnectivity:
    def test_default_satisfied(self):
        assert StaticConnectivity().status() is ConnectivityStatus.SATISFIED

    def test_set_status(self):
        c = StaticConnectivity(ConnectivityStatus.UNKNOWN)
        c.set_status(ConnectivityStatus.UNSATISFIED)
        assert c.status() is ConnectivityStatus.UNSATISFIED


class TestProbeConnectivityMonitor:
    def test_host_and_port_from_url(self):
        m = ProbeConnectivityMonitor("https://rest.coinapi.io/v1")
        assert m.host == "rest.coinapi.io"
        assert m.port == 443
        assert ProbeConnectivityMonitor("http://localhost:8080/v1").port == 8080

    def test_unknown_before_first_probe(self):
        assert ProbeConnectivityMonitor("https://rest.coinapi.io").status() is ConnectivityStatus.UNKNOWN

    @pytest.mark.asyncio
    async def test_reachable_host_is_satisfied(self):
        async def accept(reader, writer):
            writer.close()

        server = await asyncio.start_server(accept, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        try:
            m = ProbeConnectivityMonitor(f"http://127.0.0.1:{port}", timeout_s=2.0)
            assert await m.probe() is ConnectivityStatus.SATISFIED
            assert m.status() is ConnectivityStatus.SATISFIED
        finally:
            server.close()
            await server.wait_closed()

    @pytest.mark.asyncio
    async def test_unreachable_host_is_unsatisfied(self):
        m = ProbeConnectivityMonitor(f"http://127.0.0.1:{_unused_port()}", timeout_s=2.0)
        assert await m.probe() is ConnectivityStatus.UNSATISFIED

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        m = ProbeConnectivityMonitor(f"http://127.0.0.1:{_unused_port()}", interval_s=60, timeout_s=1.0)
        await m.start()
        for _ in range(50):
            if m.status() is not ConnectivityStatus.UNKNOWN:
                break
            await asyncio.sleep(0.01)
        assert m.status() is ConnectivityStatus.UNSATISFIED
        await m.stop()
