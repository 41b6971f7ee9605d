"""
Shooting Incident Report Script
Loads, cleans, aggregates and models NYPD shooting incidents
"""

import json
import logging
import os
import sys
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.pipeline import run_pipeline  # noqa: E402
from src.shared.config import get_config, get_raw_data_path  # noqa: E402
from src.shared.exceptions import ShootingDataError  # noqa: E402

config = get_config()

# Set up logging
logging.basicConfig(
    level=config.logging.level,
    format=config.logging.format,
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger(__name__)


def run_shooting_report(input_path: str, output_path: str | None = None) -> dict:
    """
    Run the full shooting analysis and optionally save the summary

    Args:
        input_path: Path to the raw shooting incident CSV
        output_path: Where to write the JSON summary (skipped if None)

    Returns:
        Summary dictionary
    """
    result = run_pipeline(input_path, config)
    summary = result.summary()

    if output_path:
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(summary, f, indent=2, default=str)
        logger.info(f"Saved report summary to {output_path}")

    return summary


if __name__ == "__main__":
    path = sys.argv[1] if len(sys.argv) > 1 else str(get_raw_data_path(config))
    output = os.path.join(config.storage.paths.reports, "shooting_report.json")

    try:
        summary = run_shooting_report(path, output)
    except ShootingDataError as e:
        logger.error(str(e))
        sys.exit(1)

    evaluation = summary["evaluation"]
    print("\n=== Shooting Report ===")
    print(f"Raw rows: {summary['ingestion']['rows_fetched']}")
    print(f"Cleaned rows: {summary['preprocessing']['rows_output']}")
    print(f"Drop reasons: {summary['preprocessing']['drop_reasons']}")
    print(f"Feature rows: {summary['features']['rows_output']}")
    print(f"Accuracy: {evaluation['accuracy']:.3f} (baseline {evaluation['baseline_accuracy']:.3f})")
