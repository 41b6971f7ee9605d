from src.shared.config import Settings, get_config, get_dataset_config
from src.shared.exceptions import DataSourceError, ParseError, SchemaError, ShootingDataError

__all__ = [
    "get_config",
    "get_dataset_config",
    "Settings",
    "ShootingDataError",
    "DataSourceError",
    "SchemaError",
    "ParseError",
]
