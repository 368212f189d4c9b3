"""ICMP latency probe for a single peer."""

import logging
import time
from dataclasses import dataclass, field

from ping3 import ping
from ping3.errors import PingError

from slc.models import Failed, Measured, Peer, ProbeOutcome

logger = logging.getLogger(__name__)

INVALID_ADDRESS = "invalid address"


class InvalidAddressError(ValueError):
    """Raised when a gossip address is not a ``host:port`` pair."""


class ProbeError(Exception):
    """Raised when a ping cannot be sent at all (unknown host, socket error)."""


@dataclass(frozen=True)
class ProbeSettings:
    """Fixed parameters applied to every probe.

    Attributes:
        count: Number of echo requests per peer.
        interval: Pause between requests, in seconds.
        timeout: Upper bound for the whole probe, in seconds.
    """

    count: int = 5
    interval: float = 0.2
    timeout: float = 3.0


@dataclass
class PingStats:
    """Raw sample statistics for one host.

    Attributes:
        sent: Number of samples attempted (always the configured count).
        rtts: Round-trip times of the samples that were answered, in seconds.
    """

    sent: int
    rtts: list[float] = field(default_factory=list)

    @property
    def received(self) -> int:
        return len(self.rtts)

    @property
    def packet_loss(self) -> float:
        """Percentage of samples that got no reply."""
        if self.sent == 0:
            return 0.0
        return (self.sent - self.received) / self.sent * 100

    @property
    def avg_rtt(self) -> float | None:
        if not self.rtts:
            return None
        return sum(self.rtts) / len(self.rtts)


def parse_gossip_address(address: str) -> tuple[str, int]:
    """Split a gossip address into ``(host, port)``.

    Raises:
        InvalidAddressError: Unless *address* is exactly ``host:port`` with a
            non-empty host and a port in 0..65535.
    """
    parts = address.split(":")
    if len(parts) != 2:
        raise InvalidAddressError(f"invalid gossip address {address!r}")
    host, port_str = parts
    if not host or not port_str.isdigit():
        raise InvalidAddressError(f"invalid gossip address {address!r}")
    port = int(port_str)
    if port > 65535:
        raise InvalidAddressError(f"invalid gossip address {address!r}")
    return host, port


def ping_host(host: str, settings: ProbeSettings) -> PingStats:
    """Send ``settings.count`` echo requests to *host*.

    The whole run is bounded by ``settings.timeout``: each request only
    waits for the time left, and requests that would start after the
    deadline are counted as lost.

    Raises:
        ProbeError: If the ping could not be sent (e.g. unknown host).
        OSError: If the ICMP socket cannot be opened.
    """
    stats = PingStats(sent=settings.count)
    deadline = time.monotonic() + settings.timeout

    for seq in range(settings.count):
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break

        delay = ping(host, timeout=remaining, unit="s", seq=seq)
        if delay is False:
            raise ProbeError(f"ping to {host} failed")
        if delay is not None:
            stats.rtts.append(delay)

        if seq < settings.count - 1:
            pause = min(settings.interval, deadline - time.monotonic())
            if pause > 0:
                time.sleep(pause)

    return stats


def probe_peer(peer: Peer, settings: ProbeSettings) -> ProbeOutcome:
    """Measure the average round-trip time to *peer*.

    Per-peer problems never raise; they come back as ``Failed``.  A
    measurement with any packet loss is also reported as ``Failed``.
    """
    try:
        host, _port = parse_gossip_address(peer.gossip)
    except InvalidAddressError:
        return Failed(peer=peer, address=peer.gossip, reason=INVALID_ADDRESS)

    try:
        stats = ping_host(host, settings)
    except (ProbeError, PingError, OSError) as exc:
        reason = str(exc) or type(exc).__name__
        return Failed(peer=peer, address=host, reason=reason)

    if stats.packet_loss > 0 or stats.avg_rtt is None:
        return Failed(
            peer=peer,
            address=host,
            reason=f"packet loss {stats.packet_loss:.0f}%",
        )

    logger.debug(
        "%s: avg %.1f ms over %d samples", host, stats.avg_rtt * 1000, stats.sent
    )
    return Measured(peer=peer, host=host, latency=stats.avg_rtt)
