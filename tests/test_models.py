"""Tests for slc.models dataclasses."""

import dataclasses
import threading

import pytest

from slc.models import Failed, LatencyRun, Measured, Peer
from slc.results import ResultSet


class TestPeer:
    """Tests for the Peer dataclass."""

    def test_minimal_construction(self) -> None:
        """Only gossip and pubkey are required; metadata defaults to None."""
        peer = Peer(gossip="10.0.0.1:8001", pubkey="A")

        assert peer.gossip == "10.0.0.1:8001"
        assert peer.pubkey == "A"
        assert peer.feature_set is None
        assert peer.rpc is None
        assert peer.shred_version is None
        assert peer.tpu is None
        assert peer.version is None

    def test_is_immutable(self) -> None:
        peer = Peer(gossip="10.0.0.1:8001", pubkey="A")

        with pytest.raises(dataclasses.FrozenInstanceError):
            peer.gossip = "10.0.0.2:8001"  # type: ignore[misc]

    def test_equality_ignores_metadata(self) -> None:
        a = Peer(gossip="10.0.0.1:8001", pubkey="A", version="1.17.0")
        b = Peer(gossip="10.0.0.1:8001", pubkey="A", version="1.18.2")

        assert a == b
        assert hash(a) == hash(b)

    def test_different_pubkeys_differ(self) -> None:
        a = Peer(gossip="10.0.0.1:8001", pubkey="A")
        b = Peer(gossip="10.0.0.1:8001", pubkey="B")

        assert a != b


class TestPeerFromRpc:
    """Peer.from_rpc() maps getClusterNodes records."""

    def test_full_record(self) -> None:
        record = {
            "featureSet": 3580551090,
            "gossip": "145.40.93.1:8001",
            "pubkey": "7Np41oeYqPefeNQEHSv1UDhYrehxin3NStELsSKCT4K2",
            "rpc": "145.40.93.1:8899",
            "shredVersion": 50093,
            "tpu": "145.40.93.1:8003",
            "version": "1.17.22",
        }

        peer = Peer.from_rpc(record)

        assert peer.gossip == "145.40.93.1:8001"
        assert peer.pubkey == "7Np41oeYqPefeNQEHSv1UDhYrehxin3NStELsSKCT4K2"
        assert peer.feature_set == 3580551090
        assert peer.rpc == "145.40.93.1:8899"
        assert peer.shred_version == 50093
        assert peer.tpu == "145.40.93.1:8003"
        assert peer.version == "1.17.22"

    def test_null_fields(self) -> None:
        """Nodes often report null rpc/tpu; a null gossip becomes ''."""
        record = {"gossip": None, "pubkey": "A", "rpc": None, "tpu": None}

        peer = Peer.from_rpc(record)

        assert peer.gossip == ""
        assert peer.rpc is None
        assert peer.tpu is None


class TestMeasured:
    """Tests for the Measured dataclass."""

    @pytest.mark.parametrize(
        ("latency", "expected_ms"),
        [
            (0.02, 20),
            (0.05, 50),
            (0.029, 29),
            (0.0999, 99),
            (1.5, 1500),
            (0.0004, 0),
        ],
    )
    def test_latency_ms_truncates(self, latency: float, expected_ms: int) -> None:
        measured = Measured(peer=Peer("1.1.1.1:1", "A"), host="1.1.1.1", latency=latency)

        assert measured.latency_ms == expected_ms


class TestFailed:
    def test_fields(self) -> None:
        peer = Peer(gossip="bad-address", pubkey="B")
        failed = Failed(peer=peer, address="bad-address", reason="invalid address")

        assert failed.peer is peer
        assert failed.reason == "invalid address"


class TestLatencyRun:
    """Tests for the LatencyRun container."""

    def test_counts(self) -> None:
        results = ResultSet()
        results.append(Measured(peer=Peer("1.1.1.1:1", "A"), host="1.1.1.1", latency=0.01))
        run = LatencyRun(
            results=results,
            failures=[Failed(peer=Peer("x", "B"), address="x", reason="invalid address")],
            total=2,
        )

        assert run.measured_count == 1
        assert run.failed_count == 1
        assert run.total == 2

    def test_failures_default_to_empty_list(self) -> None:
        r1 = LatencyRun(results=ResultSet())
        r2 = LatencyRun(results=ResultSet())

        assert r1.failures == []
        assert r1.failures is not r2.failures

    def test_concurrent_add_failure_keeps_every_entry(self) -> None:
        run = LatencyRun(results=ResultSet())

        def worker(base: int) -> None:
            for i in range(200):
                peer = Peer(gossip="bad-address", pubkey=f"pk{base}-{i}")
                run.add_failure(Failed(peer=peer, address="bad-address", reason="invalid address"))

        threads = [threading.Thread(target=worker, args=(t,)) for t in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert run.failed_count == 1600
        assert len({f.peer.pubkey for f in run.failures}) == 1600
