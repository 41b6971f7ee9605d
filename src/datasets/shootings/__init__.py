"""
NYC Shootings - Shooting Incident Dataset

Components for the NYPD shooting incident data.

Components:
    - ShootingIngester: Loads the raw CSV
    - ShootingPreprocessor: Cleans and validates incident records
    - ShootingFeatureBuilder: Creates the model-ready feature table

Data Source:
    NYPD Shooting Incident Data (Historic)
    https://data.cityofnewyork.us/Public-Safety/NYPD-Shooting-Incident-Data-Historic-/833y-fsy8

Usage:
    from src.datasets.shootings import (
        ShootingFeatureBuilder,
        ShootingIngester,
        ShootingPreprocessor,
    )

    # Ingest
    ingester = ShootingIngester()
    ingester.run("data/raw/NYPD_Shooting_Incident_Data__Historic_.csv")
    raw_df = ingester.get_data()

    # Preprocess
    preprocessor = ShootingPreprocessor()
    preprocessor.run(raw_df)
    cleaned_df = preprocessor.get_data()

    # Build features
    builder = ShootingFeatureBuilder()
    builder.run(cleaned_df)
    features_df = builder.get_data()
"""

from src.datasets.shootings.features import ShootingFeatureBuilder, build_shooting_features
from src.datasets.shootings.ingest import (
    ShootingIngester,
    ingest_shooting_data,
    load_shooting_data,
)
from src.datasets.shootings.preprocess import ShootingPreprocessor, preprocess_shooting_data

__all__ = [
    "ShootingIngester",
    "ShootingPreprocessor",
    "ShootingFeatureBuilder",
    "ingest_shooting_data",
    "load_shooting_data",
    "preprocess_shooting_data",
    "build_shooting_features",
]
