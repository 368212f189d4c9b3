"""Data models: Peer, Measured / Failed probe outcomes, LatencyRun."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from slc.results import ResultSet


@dataclass(frozen=True)
class Peer:
    """One cluster node as reported by ``getClusterNodes``.

    Only ``gossip`` and ``pubkey`` take part in equality; the rest is
    descriptive metadata carried through unchanged.

    Attributes:
        gossip: Advertised gossip address (``"host:port"``), or ``""`` when
            the node did not report one.
        pubkey: Node identity public key.
        feature_set: Feature set identifier, if reported.
        rpc: RPC address, if the node exposes one.
        shred_version: Shred version, if reported.
        tpu: TPU address, if reported.
        version: Software version string, if reported.
    """

    gossip: str
    pubkey: str
    feature_set: int | None = field(default=None, compare=False)
    rpc: str | None = field(default=None, compare=False)
    shred_version: int | None = field(default=None, compare=False)
    tpu: str | None = field(default=None, compare=False)
    version: str | None = field(default=None, compare=False)

    @classmethod
    def from_rpc(cls, record: dict) -> Peer:
        """Build a ``Peer`` from one ``getClusterNodes`` result record."""
        return cls(
            gossip=record.get("gossip") or "",
            pubkey=record.get("pubkey") or "",
            feature_set=record.get("featureSet"),
            rpc=record.get("rpc"),
            shred_version=record.get("shredVersion"),
            tpu=record.get("tpu"),
            version=record.get("version"),
        )


@dataclass(frozen=True)
class Measured:
    """A successful, loss-free latency measurement.

    Attributes:
        peer: The measured peer.
        host: Host part of the peer's gossip address that was pinged.
        latency: Average round-trip time in seconds.
    """

    peer: Peer
    host: str
    latency: float

    @property
    def latency_ms(self) -> int:
        """Latency in whole milliseconds, truncated."""
        return round(self.latency * 1_000_000) // 1000


@dataclass(frozen=True)
class Failed:
    """A probe that produced no usable measurement.

    Attributes:
        peer: The peer that was probed.
        address: The address the probe was attempted against.
        reason: Short human-readable cause (e.g. ``"invalid address"``).
    """

    peer: Peer
    address: str
    reason: str


ProbeOutcome = Union[Measured, Failed]


@dataclass
class LatencyRun:
    """Everything a fan-out run produced.

    Attributes:
        results: Successful measurements, in completion order.
        failures: Peers that could not be measured.
        total: Number of peers that were probed.
    """

    results: ResultSet
    failures: list[Failed] = field(default_factory=list)
    total: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def add_failure(self, failed: Failed) -> None:
        with self._lock:
            self.failures.append(failed)

    @property
    def measured_count(self) -> int:
        return len(self.results)

    @property
    def failed_count(self) -> int:
        return len(self.failures)
