"""Ranking and output rendering: plain text lines, rich table, JSON."""

import dataclasses
import json
import logging
import sys
from collections.abc import Iterable
from io import StringIO

from rich.console import Console
from rich.table import Table

from slc.models import Measured

logger = logging.getLogger(__name__)

FORMATS = ("text", "table", "json")


def rank(results: Iterable[Measured], top: int) -> list[Measured]:
    """Order *results* by latency ascending and keep the first *top*.

    The sort is stable, so equal latencies keep their original order.
    """
    ordered = sorted(results, key=lambda m: m.latency)
    return ordered[: max(top, 0)]


def format_line(index: int, measured: Measured) -> str:
    """Format one ranked entry as ``[i] time:<ms>ms, ip:<host>, pubkey:<key>``."""
    return (
        f"[{index}] time:{measured.latency_ms}ms, "
        f"ip:{measured.host}, pubkey:{measured.peer.pubkey}"
    )


def render(
    ranking: list[Measured],
    fmt: str,
    *,
    file: object | None = None,
    width: int | None = None,
) -> None:
    """Dispatch output to the appropriate formatter.

    Args:
        ranking: Already ranked entries (see ``rank``).
        fmt: Output format — ``"text"``, ``"table"`` or ``"json"``.
        file: Writable file object for output (default: ``sys.stdout``).
        width: Explicit console width for the table format.

    Raises:
        ValueError: If *fmt* is not a known format.
    """
    if fmt == "text":
        render_text(ranking, file=file)
    elif fmt == "table":
        render_table(ranking, file=file, width=width)
    elif fmt == "json":
        render_json(ranking, file=file)
    else:
        raise ValueError(f"Unknown output format: {fmt!r}")


def render_text(ranking: list[Measured], *, file: object | None = None) -> None:
    """Write one line per entry, in rank order."""
    out = file or sys.stdout
    for index, measured in enumerate(ranking):
        out.write(format_line(index, measured) + "\n")  # type: ignore[union-attr]


# ---------------------------------------------------------------------------
# Table (rich) formatter
# ---------------------------------------------------------------------------


def render_table(
    ranking: list[Measured],
    *,
    file: object | None = None,
    width: int | None = None,
) -> None:
    out = file or sys.stdout
    console = Console(file=out, highlight=False, width=width)

    if not ranking:
        console.print("  No reachable peers.")
        return

    table = Table(title=f"Top {len(ranking)} peers by latency")
    table.add_column("#", justify="right")
    table.add_column("Latency", justify="right")
    table.add_column("IP")
    table.add_column("Pubkey")
    table.add_column("Version")

    for index, measured in enumerate(ranking):
        table.add_row(
            str(index),
            f"{measured.latency_ms} ms",
            measured.host,
            measured.peer.pubkey,
            _fmt(measured.peer.version),
        )

    console.print(table)


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------


def render_json(ranking: list[Measured], *, file: object | None = None) -> None:
    """Render *ranking* as a JSON list, peer metadata included."""
    out = file or sys.stdout
    payload = [
        {
            "rank": index,
            "latency_ms": measured.latency_ms,
            "ip": measured.host,
            "peer": dataclasses.asdict(measured.peer),
        }
        for index, measured in enumerate(ranking)
    ]
    json.dump(payload, out, indent=2)
    out.write("\n")  # type: ignore[union-attr]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fmt(value: object) -> str:
    """``None`` becomes ``"-"``, everything else is stringified."""
    if value is None:
        return "-"
    return str(value)


def render_to_string(ranking: list[Measured], fmt: str, *, width: int = 200) -> str:
    """Render to a string instead of stdout — useful for testing."""
    buf = StringIO()
    render(ranking, fmt, file=buf, width=width)
    return buf.getvalue()
