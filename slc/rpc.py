"""Cluster peer-list retrieval over Solana JSON-RPC."""

import logging
from urllib.parse import urlparse

import requests

from slc.models import Peer

logger = logging.getLogger(__name__)

GET_CLUSTER_NODES = {"jsonrpc": "2.0", "id": 1, "method": "getClusterNodes"}


class FetchError(Exception):
    """Raised when the peer list cannot be retrieved or understood."""


def build_url(value: str) -> str:
    """Resolve ``--url`` to an RPC endpoint.

    A value with both scheme and host is used verbatim; anything else is
    treated as a cluster name, e.g. ``"devnet"`` becomes
    ``"http://api.devnet.solana.com"``.
    """
    parsed = urlparse(value)
    if parsed.scheme and parsed.netloc:
        return value
    return f"http://api.{value}.solana.com"


def get_cluster_nodes(url: str, timeout: float = 30.0) -> list[Peer]:
    """Fetch the cluster's nodes with ``getClusterNodes``.

    Args:
        url: JSON-RPC endpoint.
        timeout: Request timeout in seconds.

    Returns:
        One ``Peer`` per record in the response ``result`` array.

    Raises:
        FetchError: On transport errors, HTTP errors, non-JSON bodies,
            JSON-RPC errors, or a response without a ``result`` list.
    """
    logger.info("Fetching cluster nodes from %s", url)
    try:
        resp = requests.post(url, json=GET_CLUSTER_NODES, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise FetchError(f"Request to {url} failed: {exc}") from exc

    try:
        body = resp.json()
    except ValueError as exc:
        raise FetchError(f"Invalid JSON from {url}: {exc}") from exc

    if not isinstance(body, dict):
        raise FetchError(f"Unexpected response from {url}: expected a JSON object")

    if body.get("error"):
        error = body["error"]
        message = error.get("message", error) if isinstance(error, dict) else error
        raise FetchError(f"RPC error from {url}: {message}")

    result = body.get("result")
    if not isinstance(result, list):
        raise FetchError(f"Unexpected response from {url}: missing 'result' list")

    peers = [_to_peer(record, url) for record in result if isinstance(record, dict)]
    logger.info("Discovered %d cluster nodes", len(peers))
    return peers


def _to_peer(record: dict, url: str) -> Peer:
    """Build a ``Peer``, rejecting records whose string fields are not strings."""
    for key in ("gossip", "pubkey"):
        value = record.get(key)
        if value is not None and not isinstance(value, str):
            raise FetchError(
                f"Unexpected response from {url}: {key!r} must be a string, "
                f"got {type(value).__name__}"
            )
    return Peer.from_rpc(record)
