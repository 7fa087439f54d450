#!/usr/bin/env python3
# run_reconciliation.py
"""
Catalog reconciliation runner.

Loads the product catalog, checks every product's FDA label against the
openFDA label database, validates the annotated catalog and optionally
writes it out for rendering. Any failure stops the run with exit status 1.

Usage:
    # Full run against the catalog/ directory
    python run_reconciliation.py catalog/

    # Validate only, no network
    python run_reconciliation.py catalog/ --skip-label-check

    # Write the annotated catalog for the renderer
    python run_reconciliation.py catalog/ --output public/catalog.json

    # Give up on the lookup after 10 minutes
    python run_reconciliation.py catalog/ --max-lookup-seconds 600
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from A_core.A00_logging import StepLogger, configure_logging, get_logger
from A_core.A12_exceptions import LabelReconError
from B_lookup.B01_fda_label_client import FDALabelClient
from D_validation.D01_catalog_validator import CatalogValidator
from G_config.reconciliation_config import load_config
from H_pipeline.H01_label_reconciler import LabelReconciler
from I_catalog.I01_catalog_loader import load_catalog, write_catalog
from Z_utils.Z02_data_loader import load_catalog_enumerations

logger = get_logger("runner")


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Reconcile catalog FDA label dates against openFDA and validate the catalog.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "catalog",
        type=Path,
        help="Directory of product JSON files",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to config.yaml (default: G_config/config.yaml)",
    )
    parser.add_argument(
        "--skip-label-check",
        action="store_true",
        help="Skip the FDA label recency check",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Write the annotated catalog as JSON",
    )
    parser.add_argument(
        "--max-lookup-seconds",
        type=float,
        default=None,
        help="Cancel the label lookup after this many seconds",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def _install_cancel_handlers(cancel_event: threading.Event) -> Dict[int, Any]:
    """Route SIGINT/SIGTERM to the cancel event. Returns the previous handlers."""
    def handler(signum, frame):
        logger.warning(f"Received signal {signum}, canceling label lookup")
        cancel_event.set()

    return {sig: signal.signal(sig, handler) for sig in (signal.SIGINT, signal.SIGTERM)}


def main(argv: Optional[List[str]] = None) -> int:
    args = create_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except LabelReconError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(
        log_dir=config.log_dir,
        log_level=logging.DEBUG if args.verbose else config.numeric_log_level,
        enable_file_logging=config.file_logging,
    )

    steps = StepLogger(logger, total_steps=4)
    cancel_event = threading.Event()
    timer: Optional[threading.Timer] = None
    previous_handlers: Dict[int, Any] = {}

    try:
        steps.step(f"Loading catalog from {args.catalog}")
        products = load_catalog(args.catalog)
        steps.complete(f"{len(products)} product(s) loaded")

        steps.step("Checking FDA label recency")
        if args.skip_label_check or not config.enabled:
            steps.detail("Skipped")
        else:
            previous_handlers = _install_cancel_handlers(cancel_event)
            if args.max_lookup_seconds is not None:
                timer = threading.Timer(args.max_lookup_seconds, cancel_event.set)
                timer.daemon = True
                timer.start()

            with FDALabelClient(config.lookup_client_config) as client:
                reconciler = LabelReconciler(client, excluded_routes=config.excluded_routes)
                reconciler.reconcile(products, cancel_event=cancel_event)
        steps.complete()

        steps.step("Validating catalog")
        validator = CatalogValidator(
            load_catalog_enumerations(config.enums_file),
            fda_label_prefix=config.fda_label_prefix,
            phone_pattern=config.phone_pattern,
        )
        validator.validate_catalog(products).raise_for_failure()
        steps.complete("All products valid")

        steps.step("Writing annotated catalog")
        if args.output:
            write_catalog(products, args.output)
        else:
            steps.detail("No output path given")
        steps.complete()

    except LabelReconError as e:
        logger.error(f"Run aborted: {type(e).__name__}: {e}")
        return 1
    finally:
        if timer is not None:
            timer.cancel()
        for sig, previous in previous_handlers.items():
            signal.signal(sig, previous)

    stale = [p.brand_name for p in products if p.fda_label_needs_update]
    if stale:
        logger.info(f"{len(stale)} product(s) need an FDA label update: {', '.join(stale)}")
    else:
        logger.info("All FDA label dates are current")
    return 0


if __name__ == "__main__":
    sys.exit(main())
