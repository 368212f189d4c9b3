"""CLI entry point for the slc tool."""

import logging
import sys
from functools import partial

import click

from slc.config import ConfigError, SlcConfig, load_config
from slc.coordinator import check_latency
from slc.limiter import ConcurrencyLimiter
from slc.output import FORMATS, rank, render
from slc.probe import probe_peer
from slc.progress import NullProgress, RichProgress
from slc.rpc import FetchError, build_url, get_cluster_nodes

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "--url",
    "-u",
    default=None,
    help="Cluster name (e.g. mainnet-beta, devnet) or full RPC URL. "
    "[default: mainnet-beta]",
)
@click.option(
    "--top",
    "-t",
    default=10,
    type=click.IntRange(min=0),
    show_default=True,
    help="Number of lowest-latency peers to print.",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    default="text",
    type=click.Choice(FORMATS, case_sensitive=False),
    show_default=True,
    help="Output format.",
)
@click.option(
    "--concurrency",
    "-k",
    default=None,
    type=click.IntRange(min=1),
    help="Maximum probes in flight (overrides the config file).",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    default=None,
    type=click.Path(exists=False),
    help="Path to YAML config file (default: ~/.slc/config.yaml).",
)
@click.option("--quiet", "-q", is_flag=True, help="Do not show the progress bar.")
@click.option("--verbose", "-v", is_flag=True, help="Log per-peer probe failures.")
def main(
    url: str | None,
    top: int,
    output_format: str,
    concurrency: int | None,
    config_path: str | None,
    quiet: bool,
    verbose: bool,
) -> None:
    """Find the lowest-latency nodes of a Solana cluster."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        cfg = load_config(config_path)
    except (ConfigError, FileNotFoundError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    logger.debug("Config loaded: %s", cfg)

    if url is not None:
        cfg.url = url
    if concurrency is not None:
        cfg.concurrency = concurrency

    _run(cfg, top, output_format.lower(), quiet)


def _run(cfg: SlcConfig, top: int, output_format: str, quiet: bool) -> None:
    """Run the full pipeline.

    Pipeline: fetch peers → probe → rank → render.

    Args:
        cfg: Loaded ``SlcConfig`` with CLI overrides applied.
        top: Number of ranked entries to print.
        output_format: ``"text"``, ``"table"`` or ``"json"``.
        quiet: Disable the progress bar.
    """
    endpoint = build_url(cfg.url)
    try:
        peers = get_cluster_nodes(endpoint, timeout=cfg.rpc_timeout)
    except FetchError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    run = check_latency(
        peers,
        probe=partial(probe_peer, settings=cfg.probe_settings()),
        limiter=ConcurrencyLimiter(cfg.concurrency),
        progress=NullProgress() if quiet else RichProgress(),
    )

    if not run.measured_count:
        logger.warning("No reachable peers out of %d probed", run.total)

    render(rank(run.results, top), output_format)
