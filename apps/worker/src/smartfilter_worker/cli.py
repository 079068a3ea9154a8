"""CLI for the SmartFilter worker."""

from __future__ import annotations

import logging
import sys

import click

from smartfilter_shared.files import find_free_tcp_port

from .config import WorkerConfig
from .server import WorkerServer


@click.command()
@click.option("-h", "--host", default="127.0.0.1", envvar="SMARTFILTER_WORKER_HOST",
              help="Worker host")
@click.option("-p", "--port", default=9000, type=int, envvar="SMARTFILTER_WORKER_PORT",
              help="Worker port")
@click.option("--find-port", is_flag=True, help="Use the next free port if --port is busy")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def cli(host: str, port: int, find_port: bool, verbose: bool) -> None:
    """Run a SmartFilter image-processing worker."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    actual_port = find_free_tcp_port(host, port) if find_port else port
    if actual_port != port:
        logging.info("Port %d busy, using %d", port, actual_port)

    config = WorkerConfig(host=host, port=actual_port)

    server = WorkerServer(config)
    try:
        server.run()
    except KeyboardInterrupt:
        logging.info("Interrupted")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
