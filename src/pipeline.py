"""
NYC Shootings - End-to-End Pipeline

Runs every stage once, top to bottom:

    load -> clean -> {report, features -> split -> fit -> evaluate}

Any stage failure aborts the run.

Usage:
    from src.pipeline import run_pipeline

    result = run_pipeline("data/raw/NYPD_Shooting_Incident_Data__Historic_.csv")
    print(result.evaluation.accuracy)

    # or from the command line
    python -m src.pipeline data/raw/NYPD_Shooting_Incident_Data__Historic_.csv
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from src.analysis.report import ShootingReport, build_report
from src.datasets.base import FeatureBuildResult, IngestionResult, PreprocessingResult
from src.datasets.shootings import ShootingFeatureBuilder, ShootingIngester, ShootingPreprocessor
from src.models.murder_classifier import EvaluationResult, MurderClassifier, evaluate, fit, split
from src.shared.config import Settings, get_config, get_raw_data_path
from src.shared.exceptions import SchemaError, ShootingDataError

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything produced by one pipeline run."""

    ingestion: IngestionResult
    preprocessing: PreprocessingResult
    feature_build: FeatureBuildResult
    cleaned: pd.DataFrame
    features: pd.DataFrame
    report: ShootingReport
    train: pd.DataFrame
    test: pd.DataFrame
    classifier: MurderClassifier
    evaluation: EvaluationResult

    def summary(self) -> dict[str, Any]:
        """JSON-friendly summary of the run."""
        return {
            "ingestion": self.ingestion.to_dict(),
            "preprocessing": self.preprocessing.to_dict(),
            "features": self.feature_build.to_dict(),
            "report": self.report.to_dict(),
            "split": {"rows_train": len(self.train), "rows_test": len(self.test)},
            "evaluation": self.evaluation.to_dict(),
            "top_coefficients": self.classifier.coefficients().head(10).to_dict(),
        }


def run_pipeline(source: str | Path, config: Settings | None = None) -> PipelineResult:
    """
    Run the full analysis on one incident file.

    Args:
        source: Path to the NYPD shooting incident CSV
        config: Configuration object (uses default if not provided)

    Returns:
        PipelineResult
    """
    config = config or get_config()

    ingester = ShootingIngester(config)
    ingestion = ingester.run(source)

    preprocessor = ShootingPreprocessor(config)
    try:
        preprocessing = preprocessor.run(ingester.get_data())
    except SchemaError as e:
        if e.source is not None:
            raise
        raise SchemaError(e.missing_columns, source=str(source)) from e
    cleaned = preprocessor.get_data()

    report = build_report(cleaned, config)

    builder = ShootingFeatureBuilder(config)
    feature_build = builder.run(cleaned)
    features = builder.get_data()

    train, test = split(features, config=config)
    classifier = fit(train, config)
    evaluation = evaluate(classifier, test)

    return PipelineResult(
        ingestion=ingestion,
        preprocessing=preprocessing,
        feature_build=feature_build,
        cleaned=cleaned,
        features=features,
        report=report,
        train=train,
        test=test,
        classifier=classifier,
        evaluation=evaluation,
    )


def main(argv: list[str] | None = None) -> int:
    """Command line entry point."""
    config = get_config()

    parser = argparse.ArgumentParser(description="Analyze NYPD shooting incidents")
    parser.add_argument(
        "path",
        nargs="?",
        default=str(get_raw_data_path(config)),
        help="Path to the shooting incident CSV",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.logging.level, format=config.logging.format)

    try:
        result = run_pipeline(args.path, config)
    except ShootingDataError as e:
        logger.error(str(e))
        return 1

    print(json.dumps(result.summary(), indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
