"""
ChainGov Configuration

Loads every section of chaingov.toml.
Environment variables override TOML values.
"""

from .loader import (
    ChainGovConfig,
    ChainSectionConfig,
    GovernorSectionConfig,
    LoggingSectionConfig,
    TimelockSectionConfig,
    load_config,
    parse_amount,
)

__all__ = [
    "ChainGovConfig",
    "ChainSectionConfig",
    "GovernorSectionConfig",
    "LoggingSectionConfig",
    "TimelockSectionConfig",
    "load_config",
    "parse_amount",
]
