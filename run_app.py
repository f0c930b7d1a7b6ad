#!/usr/bin/env python
"""Entry point for the Dash rent explorer.

Usage
-----
    python run_app.py --data-dir path/to/data [--port 8050]

Individual files can be pointed elsewhere:
    python run_app.py --data-dir data --stops other/Transport.geojson
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import threading

from loguru import logger

from rent_explorer.config import DataPaths, MapConfig
from rent_explorer.dashboard import DashboardController
from rent_explorer.io import default_jobs, load_sources


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(
        sys.stdout,
        colorize=True,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{message}</level>",
    )


def start_background_load(controller: DashboardController, paths: DataPaths) -> threading.Thread:
    """Fetch every data file once on a daemon thread, feeding the controller."""
    jobs = default_jobs(paths)
    thread = threading.Thread(
        target=asyncio.run,
        args=(load_sources(jobs, controller.dispatch),),
        name="data-loader",
        daemon=True,
    )
    thread.start()
    return thread


def main() -> None:
    parser = argparse.ArgumentParser(description="Launch the rent explorer web app")
    parser.add_argument(
        "--data-dir", default=".",
        help="Directory holding Park/*.geojson and df_calculator.csv (default: .)",
    )
    parser.add_argument("--districts", default=None, help="District polygons GeoJSON")
    parser.add_argument("--network", default=None, help="Train network GeoJSON")
    parser.add_argument("--stops", default=None, help="Transit stops GeoJSON")
    parser.add_argument("--rent-table", default=None, help="Comparable listings CSV")
    parser.add_argument(
        "--host", default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port", type=int, default=8050,
        help="Port to serve on (default: 8050)",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Run Dash in debug mode",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        help="Log level for the console sink (default: INFO)",
    )
    args = parser.parse_args()

    configure_logging(args.log_level)

    paths = DataPaths.from_directory(
        args.data_dir,
        districts=args.districts,
        network=args.network,
        stops=args.stops,
        rent_table=args.rent_table,
    )
    controller = DashboardController(MapConfig())

    logger.info(f"Loading data from {args.data_dir}...")
    start_background_load(controller, paths)

    logger.info(f"Starting Dash app on http://{args.host}:{args.port}/")

    from rent_explorer.app import create_app
    app = create_app(controller)
    # The reloader would start a second process with its own loader thread.
    app.run(host=args.host, port=args.port, debug=args.debug, use_reloader=False)


if __name__ == "__main__":
    main()
