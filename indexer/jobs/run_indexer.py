#!/usr/bin/env python3
"""
indexer/jobs/run_indexer.py - CLI entrypoint for the ERC indexer.

Features:
- Environment config (.env supported), CLI options override env
- Starting point: explicit cursor / contract id / EVM address / stored cursor
- Detection-only mode (no registry writes)
- Run summary on exit

Usage:
    python -m indexer.jobs.run_indexer --network testnet
    python -m indexer.jobs.run_indexer --network local --starting-point 0.0.1234 --detection-only
"""

import asyncio
import os
import signal
import sys
from typing import Optional

import click
from dotenv import load_dotenv

from chains.mirror_node import MirrorNodeClient
from config.settings import IndexerConfig
from core.exceptions import ConfigError, IndexerError
from core.logging import get_logger, set_global_context, setup_logging
from core.models import RunStats
from discovery.classifier import BytecodeClassifier
from discovery.registry import TokenRegistryStore
from indexer.runner import IndexerRunner
from indexer.starting_point import resolve_from_starting_point

logger = get_logger("indexer.run")

EXIT_CONFIG_ERROR = 2


def handle_shutdown(signum: int, frame: object) -> None:
    """Turn SIGTERM into KeyboardInterrupt so the run unwinds cleanly."""
    logger.info("Shutdown requested", extra={"context": {"signal": signum}})
    raise KeyboardInterrupt


async def run_indexer(config: IndexerConfig) -> RunStats:
    """
    Run one full indexing pass for the configured network.

    Args:
        config: Validated configuration

    Returns:
        RunStats for the pass
    """
    client = MirrorNodeClient(
        mirror_node_url=config.mirror_node_url,
        web3_url=config.mirror_node_url_web3,
        page_size=config.page_size,
        rate_limit_delay_ms=config.rate_limit_delay_ms,
        timeout_seconds=config.http_timeout_seconds,
    )
    store = TokenRegistryStore(config.registry_dir, config.network)
    classifier = BytecodeClassifier(client)
    runner = IndexerRunner(
        client,
        classifier,
        store,
        detection_only=config.detection_only,
    )

    try:
        start_cursor = await resolve_from_starting_point(
            client,
            store,
            config.starting_point,
            page_size=config.page_size,
        )
        return await runner.run(start_cursor)
    finally:
        logger.debug("Mirror node stats", extra={"context": client.get_stats_summary()})
        await client.close()


def _apply_overrides(env: dict[str, str], **overrides: Optional[str]) -> dict[str, str]:
    for key, value in overrides.items():
        if value is not None:
            env[key] = value
    return env


@click.command()
@click.option("--network", "-n", default=None, help="Network name (overrides HEDERA_NETWORK)")
@click.option(
    "--starting-point",
    "-s",
    default=None,
    help="Contracts URL, contract id or EVM address (overrides STARTING_POINT)",
)
@click.option(
    "--detection-only/--persist",
    default=None,
    help="Classify without writing the registry (overrides ENABLE_DETECTION_ONLY)",
)
@click.option(
    "--page-size",
    "-p",
    type=int,
    default=None,
    help="Contracts per page, 1-100 (overrides SCAN_CONTRACT_LIMIT)",
)
@click.option("--registry-dir", "-o", default=None, help="Registry root directory (overrides REGISTRY_DIR)")
@click.option(
    "--log-level",
    "-l",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level (overrides LOG_LEVEL)",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Use JSON log format (overrides LOG_JSON)",
)
def main(
    network: Optional[str],
    starting_point: Optional[str],
    detection_only: Optional[bool],
    page_size: Optional[int],
    registry_dir: Optional[str],
    log_level: Optional[str],
    json_logs: Optional[bool],
) -> None:
    """
    ERC token indexer.

    Scans the mirror node contract list, classifies ERC-20 / ERC-721 /
    ERC-1155 contracts from bytecode and merges them into the registry.
    """
    load_dotenv()
    env = _apply_overrides(
        dict(os.environ),
        HEDERA_NETWORK=network,
        STARTING_POINT=starting_point,
        ENABLE_DETECTION_ONLY=None if detection_only is None else str(detection_only).lower(),
        SCAN_CONTRACT_LIMIT=None if page_size is None else str(page_size),
        REGISTRY_DIR=registry_dir,
        LOG_LEVEL=log_level,
        LOG_JSON=None if json_logs is None else str(json_logs).lower(),
    )

    try:
        config = IndexerConfig.from_env(env)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    setup_logging(level=config.log_level, json_output=config.json_logs)
    set_global_context(service="erc-indexer", network=config.network)

    signal.signal(signal.SIGTERM, handle_shutdown)

    logger.info(
        "Starting ERC indexer",
        extra={
            "context": {
                "network": config.network,
                "mirror_node_url": config.mirror_node_url,
                "detection_only": config.detection_only,
                "page_size": config.page_size,
                "registry_dir": str(config.network_registry_dir),
            }
        },
    )

    try:
        stats = asyncio.run(run_indexer(config))
    except KeyboardInterrupt:
        logger.info("Indexer interrupted")
        sys.exit(130)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}", extra={"context": e.to_dict()})
        sys.exit(EXIT_CONFIG_ERROR)
    except IndexerError as e:
        logger.error(f"Indexer error: {e}", extra={"context": e.to_dict()})
        sys.exit(1)
    except Exception as e:
        logger.error(
            f"Indexer error: {e}",
            extra={"context": {"error": str(e)}},
            exc_info=True,
        )
        sys.exit(1)

    summary = stats.to_dict()
    click.echo("\n" + "=" * 60)
    click.echo("ERC INDEXER RUN SUMMARY")
    click.echo("=" * 60)
    click.echo(f"Network: {config.network}")
    click.echo(f"Pages fetched: {summary['pages_fetched']}")
    click.echo(f"Contracts scanned: {summary['contracts_scanned']}")
    for standard, count in summary["tokens_found"].items():
        click.echo(f"{standard}: {count}")
    click.echo(f"Registry updates: {summary['registry_updates']}")
    click.echo(f"Stopped: {summary['stop_reason']}")
    click.echo(f"Elapsed: {summary['elapsed_ms']} ms")
    click.echo("=" * 60)


if __name__ == "__main__":
    main()
