"""
NYC Shootings - Pytest Configuration and Fixtures

Shared fixtures for all tests:
- Configuration fixtures
- Raw and cleaned sample incident data
"""

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

# Set test environment
os.environ["NS_ENVIRONMENT"] = "dev"

RAW_COLUMNS = [
    "INCIDENT_KEY",
    "OCCUR_DATE",
    "OCCUR_TIME",
    "BORO",
    "LOC_OF_OCCUR_DESC",
    "PRECINCT",
    "STATISTICAL_MURDER_FLAG",
    "PERP_AGE_GROUP",
    "PERP_SEX",
    "PERP_RACE",
    "VIC_AGE_GROUP",
    "VIC_SEX",
    "VIC_RACE",
    "Latitude",
    "Longitude",
]

# fmt: off
RAW_ROWS = [
    ["100001", "01/15/2021", "14:30:00", "BRONX", "OUTSIDE", "44", "false", "25-44", "M", "BLACK", "18-24", "M", "BLACK", "40.8270", "-73.9230"],
    ["100002", "03/02/2021", "02:15:00", "BROOKLYN", "", "75", "true", "(null)", "(null)", "(null)", "25-44", "M", "BLACK", "40.6710", "-73.8790"],
    ["100003", "07/04/2020", "21:45:00", "QUEENS", "INSIDE", "113", "false", "", "", "", "<18", "F", "WHITE HISPANIC", "40.6890", "-73.7760"],
    ["100001", "01/15/2021", "14:30:00", "MANHATTAN", "OUTSIDE", "44", "false", "25-44", "M", "BLACK", "18-24", "M", "BLACK", "40.8270", "-73.9230"],
    ["100004", "11/30/2019", "08:05:00", "", "", "25", "false", "18-24", "M", "BLACK", "25-44", "M", "BLACK", "", ""],
    ["100005", "not-a-date", "12:00:00", "MANHATTAN", "", "25", "true", "18-24", "M", "BLACK", "25-44", "M", "BLACK", "40.8040", "-73.9370"],
    ["100006", "12/31/2022", "18:00:00", "STATEN ISLAND", "", "120", "false", "45-64", "F", "WHITE", "65+", "U", "UNKNOWN", "40.6410", "-74.0770"],
    ["100007", "06/21/2022", "00:00:00", "", "", "73", "true", "UNKNOWN", "U", "UNKNOWN", "18-24", "M", "BLACK", "40.6650", "-73.9100"],
]
# fmt: on

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def configs_dir(project_root: Path) -> Path:
    """Get the configs directory."""
    return project_root / "configs"


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def test_config() -> Any:
    """Get test configuration."""
    from src.shared.config import get_config, reload_config

    # Ensure fresh config for tests
    reload_config("dev")
    return get_config("dev")


@pytest.fixture
def mutable_config(test_config: Any) -> Any:
    """A deep copy of the test configuration that tests may modify."""
    return test_config.model_copy(deep=True)


# =============================================================================
# Data Fixtures
# =============================================================================


@pytest.fixture
def sample_raw_data() -> pd.DataFrame:
    """Raw incident rows as the ingester returns them (all strings)."""
    return pd.DataFrame(RAW_ROWS, columns=RAW_COLUMNS)


@pytest.fixture
def sample_csv(tmp_path: Path, sample_raw_data: pd.DataFrame) -> Path:
    """Sample raw rows written to a CSV file."""
    path = tmp_path / "NYPD_Shooting_Incident_Data__Historic_.csv"
    sample_raw_data.to_csv(path, index=False)
    return path


@pytest.fixture
def sample_cleaned_data(sample_raw_data: pd.DataFrame, test_config: Any) -> pd.DataFrame:
    """Sample rows after the default cleaning policy."""
    from src.datasets.shootings.preprocess import ShootingPreprocessor

    preprocessor = ShootingPreprocessor(test_config)
    preprocessor.run(sample_raw_data)
    return preprocessor.get_data()


# =============================================================================
# Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def cleanup_env() -> Generator[None, None, None]:
    """Clean up environment variables after each test."""
    original_env = os.environ.copy()
    yield
    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)
