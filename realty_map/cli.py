"""CLI entrypoint for the realty map loader and cluster queries."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from realty_map.clustering.grid import ClusteringSettings
from realty_map.clustering.service import get_clusters, get_properties, parse_cluster_query, parse_property_query
from realty_map.common.config_loader import load_settings
from realty_map.common.constants import EXIT_HARD_FAIL, EXIT_SUCCESS
from realty_map.common.errors import PipelineError
from realty_map.common.logging import build_logger, log_event
from realty_map.common.time_utils import generate_run_id
from realty_map.ingest.coordinator import IngestionSettings, run_ingestion
from realty_map.ingest.reports import write_load_summary
from realty_map.store.listing_store import ListingStore

COMMANDS = ("load", "clusters", "properties")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--input", default=None)
    parser.add_argument("--batch-size", type=int, default=None)
    parser.add_argument("--workers", type=int, default=None)
    parser.add_argument("--min-lat", default=None)
    parser.add_argument("--max-lat", default=None)
    parser.add_argument("--min-lng", default=None)
    parser.add_argument("--max-lng", default=None)
    parser.add_argument("--zoom", default=None)
    parser.add_argument("--limit", default=None)
    parser.add_argument("--database-url", default=None)
    parser.add_argument("--create-schema", action="store_true")
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    return parser.parse_args(argv)


def _query_params(args: argparse.Namespace) -> dict:
    return {
        "min_lat": args.min_lat,
        "max_lat": args.max_lat,
        "min_lng": args.min_lng,
        "max_lng": args.max_lng,
        "zoom": args.zoom,
        "limit": args.limit,
    }


def _write_json(items) -> None:
    sys.stdout.write(json.dumps([item.to_dict() for item in items], ensure_ascii=False))
    sys.stdout.write("\n")


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    data_dir = Path(args.data_dir)
    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    bundle = load_settings(
        Path(args.config_dir),
        overlay_config_dir=Path(args.overlay_config_dir) if args.overlay_config_dir else None,
    )
    database_url = args.database_url or bundle.database_url

    try:
        if args.command == "load":
            settings = IngestionSettings.from_config(bundle.ingest, batch_size=args.batch_size, workers=args.workers)
            input_path = Path(args.input or bundle.ingest["input_path"])
            with ListingStore(database_url, pool_size=settings.workers + 1, logger=logger) as store:
                if args.create_schema:
                    store.create_schema()
                summary = run_ingestion(input_path, store, settings, logger=logger)
            write_load_summary(data_dir, run_id=run_id, input_path=input_path, summary=summary)
        elif args.command == "clusters":
            query = parse_cluster_query(_query_params(args))
            with ListingStore(database_url, logger=logger) as store:
                clusters = get_clusters(store, query, ClusteringSettings.from_config(bundle.clustering))
            _write_json(clusters)
        else:
            query = parse_property_query(_query_params(args), default_limit=bundle.query["default_limit"])
            with ListingStore(database_url, logger=logger) as store:
                properties = get_properties(store, query)
            _write_json(properties)
    except PipelineError as exc:
        log_event(
            logger,
            f"{args.command} failed: {exc}",
            level=logging.ERROR,
            stage=args.command,
            event="COMMAND_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL
    except Exception:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
