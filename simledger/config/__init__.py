"""
Configuration management.
"""

from .config import (
    Config,
    get_config,
    parse_id_map,
    OracleConfig,
    LogConfig,
    ScenarioConfig,
)

from .constants import (
    BASE_UNIT,
    UINT32_MAX,
    UINT64_MAX,
    INT64_MIN,
    INT64_MAX,
    ADDRESS_SIZE,
    WITHDRAW_RECORD_SIZE,
    ZERO_ADDRESS,
)

__all__ = [
    # Config classes
    "Config",
    "get_config",
    "parse_id_map",
    "OracleConfig",
    "LogConfig",
    "ScenarioConfig",
    # Constants
    "BASE_UNIT",
    "UINT32_MAX",
    "UINT64_MAX",
    "INT64_MIN",
    "INT64_MAX",
    "ADDRESS_SIZE",
    "WITHDRAW_RECORD_SIZE",
    "ZERO_ADDRESS",
]
