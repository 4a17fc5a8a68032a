"""
ChainGov TOML Configuration Loader

Loads chaingov.toml with environment variable overrides.

Environment variable mapping:
    [governor] quorum_votes  → CHAINGOV_QUORUM_VOTES
    [timelock] delay         → CHAINGOV_TIMELOCK_DELAY
    [chain] chain_id         → CHAINGOV_CHAIN_ID
    [logging] level          → LOG_LEVEL
    ...

Token amounts may be written as integers or as strings ("400_000e18"),
because TOML integers stop at 64 bits.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    try:
        import tomli  # type: ignore[no-redef]
    except ImportError:
        tomli = None  # type: ignore[assignment]

from ..constants import (
    BLOCK_TIME,
    CHAINGOV_CHAIN_ID,
    CHAINGOV_CONFIG_FILE,
    CHAINGOV_GOVERNOR_NAME,
    GENESIS_TIMESTAMP,
    GOVERNANCE_PROPOSAL_MAX_OPERATIONS,
    GOVERNANCE_PROPOSAL_THRESHOLD,
    GOVERNANCE_QUORUM_VOTES,
    GOVERNANCE_VOTING_DELAY,
    GOVERNANCE_VOTING_PERIOD,
    LOG_FILE_OUTPUT,
    LOG_LEVEL,
    TIMELOCK_DEFAULT_DELAY,
    TIMELOCK_MAXIMUM_DELAY,
    TIMELOCK_MINIMUM_DELAY,
)
from ..exceptions import ConfigurationError
from ..governance.params import GovernanceParameters

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_amount(value: Any, name: str) -> int:
    """
    Parse an integer that may be given as an int or a string.

    Strings accept underscores, hex ("0x...") and exponent notation as long
    as the result is integral ("400_000e18").
    """
    if isinstance(value, bool):
        raise ConfigurationError(f"{name}: expected an integer, got a boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip().replace("_", "")
        try:
            return int(text, 0)
        except ValueError:
            pass
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ConfigurationError(f"{name}: not an integer: {value!r}")
        if amount != amount.to_integral_value():
            raise ConfigurationError(f"{name}: not an integer: {value!r}")
        return int(amount)
    raise ConfigurationError(f"{name}: expected an integer, got {type(value).__name__}")


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "1", "yes", "on"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "0", "no", "off"):
        return False
    raise ConfigurationError(f"{name}: expected a boolean, got {value!r}")


# ---------------------------------------------------------------------------
# Section dataclasses
# ---------------------------------------------------------------------------


@dataclass
class GovernorSectionConfig:
    """[governor] section."""
    name: str = str(CHAINGOV_GOVERNOR_NAME)
    guardian: str = ""
    quorum_votes: int = GOVERNANCE_QUORUM_VOTES
    proposal_threshold: int = GOVERNANCE_PROPOSAL_THRESHOLD
    proposal_max_operations: int = GOVERNANCE_PROPOSAL_MAX_OPERATIONS
    voting_delay: int = GOVERNANCE_VOTING_DELAY
    voting_period: int = GOVERNANCE_VOTING_PERIOD

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovernorSectionConfig":
        return cls(
            name=str(data.get("name", CHAINGOV_GOVERNOR_NAME)),
            guardian=str(data.get("guardian", "")),
            quorum_votes=parse_amount(
                data.get("quorum_votes", GOVERNANCE_QUORUM_VOTES), "governor.quorum_votes"),
            proposal_threshold=parse_amount(
                data.get("proposal_threshold", GOVERNANCE_PROPOSAL_THRESHOLD),
                "governor.proposal_threshold"),
            proposal_max_operations=parse_amount(
                data.get("proposal_max_operations", GOVERNANCE_PROPOSAL_MAX_OPERATIONS),
                "governor.proposal_max_operations"),
            voting_delay=parse_amount(
                data.get("voting_delay", GOVERNANCE_VOTING_DELAY), "governor.voting_delay"),
            voting_period=parse_amount(
                data.get("voting_period", GOVERNANCE_VOTING_PERIOD), "governor.voting_period"),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("CHAINGOV_GOVERNOR_NAME"):
            self.name = v
        if v := os.environ.get("CHAINGOV_GUARDIAN"):
            self.guardian = v
        if v := os.environ.get("CHAINGOV_QUORUM_VOTES"):
            self.quorum_votes = parse_amount(v, "CHAINGOV_QUORUM_VOTES")
        if v := os.environ.get("CHAINGOV_PROPOSAL_THRESHOLD"):
            self.proposal_threshold = parse_amount(v, "CHAINGOV_PROPOSAL_THRESHOLD")
        if v := os.environ.get("CHAINGOV_PROPOSAL_MAX_OPERATIONS"):
            self.proposal_max_operations = parse_amount(v, "CHAINGOV_PROPOSAL_MAX_OPERATIONS")
        if v := os.environ.get("CHAINGOV_VOTING_DELAY"):
            self.voting_delay = parse_amount(v, "CHAINGOV_VOTING_DELAY")
        if v := os.environ.get("CHAINGOV_VOTING_PERIOD"):
            self.voting_period = parse_amount(v, "CHAINGOV_VOTING_PERIOD")


@dataclass
class TimelockSectionConfig:
    """[timelock] section."""
    delay: int = TIMELOCK_DEFAULT_DELAY
    admin: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimelockSectionConfig":
        return cls(
            delay=parse_amount(data.get("delay", TIMELOCK_DEFAULT_DELAY), "timelock.delay"),
            admin=str(data.get("admin", "")),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("CHAINGOV_TIMELOCK_DELAY"):
            self.delay = parse_amount(v, "CHAINGOV_TIMELOCK_DELAY")
        if v := os.environ.get("CHAINGOV_TIMELOCK_ADMIN"):
            self.admin = v


@dataclass
class ChainSectionConfig:
    """[chain] section."""
    chain_id: int = int(CHAINGOV_CHAIN_ID)
    block_number: int = 1
    timestamp: int = GENESIS_TIMESTAMP
    block_time: int = BLOCK_TIME

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChainSectionConfig":
        return cls(
            chain_id=parse_amount(data.get("chain_id", int(CHAINGOV_CHAIN_ID)), "chain.chain_id"),
            block_number=parse_amount(data.get("block_number", 1), "chain.block_number"),
            timestamp=parse_amount(data.get("timestamp", GENESIS_TIMESTAMP), "chain.timestamp"),
            block_time=parse_amount(data.get("block_time", BLOCK_TIME), "chain.block_time"),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("CHAINGOV_CHAIN_ID"):
            self.chain_id = parse_amount(v, "CHAINGOV_CHAIN_ID")
        if v := os.environ.get("CHAINGOV_BLOCK_TIME"):
            self.block_time = parse_amount(v, "CHAINGOV_BLOCK_TIME")


@dataclass
class LoggingSectionConfig:
    """[logging] section."""
    level: str = str(LOG_LEVEL)
    file_output: bool = bool(LOG_FILE_OUTPUT)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingSectionConfig":
        return cls(
            level=str(data.get("level", LOG_LEVEL)).upper(),
            file_output=_parse_bool(data.get("file_output", bool(LOG_FILE_OUTPUT)),
                                    "logging.file_output"),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("LOG_LEVEL"):
            self.level = v.upper()
        if v := os.environ.get("LOG_FILE_OUTPUT"):
            self.file_output = _parse_bool(v, "LOG_FILE_OUTPUT")


# -----------------------------------------------------------------------

@dataclass
class ChainGovConfig:
    """
    Unified configuration.

    Loads every section of chaingov.toml and applies environment variable
    overrides.
    """
    governor: GovernorSectionConfig = field(default_factory=GovernorSectionConfig)
    timelock: TimelockSectionConfig = field(default_factory=TimelockSectionConfig)
    chain: ChainSectionConfig = field(default_factory=ChainSectionConfig)
    logging: LoggingSectionConfig = field(default_factory=LoggingSectionConfig)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChainGovConfig":
        """Create ChainGovConfig from a parsed TOML dict."""
        for section in ("governor", "timelock", "chain", "logging"):
            if not isinstance(data.get(section, {}), dict):
                raise ConfigurationError(f"[{section}] must be a table")
        return cls(
            governor=GovernorSectionConfig.from_dict(data.get("governor", {})),
            timelock=TimelockSectionConfig.from_dict(data.get("timelock", {})),
            chain=ChainSectionConfig.from_dict(data.get("chain", {})),
            logging=LoggingSectionConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "ChainGovConfig":
        """
        Load configuration from a TOML file.

        A missing file yields the defaults (with env overrides).

        Raises:
            ConfigurationError: Unparseable TOML or invalid values
        """
        if tomli is None:
            raise ImportError(
                "tomli is required for TOML config loading. "
                "Install it: pip install tomli"
            )

        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            cfg.validate()
            return cfg

        with open(path, "rb") as f:
            try:
                raw = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ConfigurationError(f"Cannot parse {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        cfg.validate()
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.governor.apply_env()
        self.timelock.apply_env()
        self.chain.apply_env()
        self.logging.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Raises:
            ConfigurationError: on invalid config
        """
        self.governance_parameters()
        if not TIMELOCK_MINIMUM_DELAY <= self.timelock.delay <= TIMELOCK_MAXIMUM_DELAY:
            raise ConfigurationError(
                f"timelock.delay must be within [{TIMELOCK_MINIMUM_DELAY}, "
                f"{TIMELOCK_MAXIMUM_DELAY}], got {self.timelock.delay}"
            )
        if self.chain.chain_id < 1:
            raise ConfigurationError("chain_id must be >= 1")
        if self.chain.block_time < 0:
            raise ConfigurationError("block_time must be >= 0")
        if self.logging.level not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.logging.level}")
        return True

    def governance_parameters(self) -> GovernanceParameters:
        return GovernanceParameters.from_config(self)

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "governor": {
                "name": self.governor.name,
                "guardian": self.governor.guardian,
                **self.governance_parameters().to_dict(),
            },
            "timelock": {
                "delay": self.timelock.delay,
                "admin": self.timelock.admin,
            },
            "chain": {
                "chainId": self.chain.chain_id,
                "blockNumber": self.chain.block_number,
                "timestamp": self.chain.timestamp,
                "blockTime": self.chain.block_time,
            },
            "logging": {
                "level": self.logging.level,
                "fileOutput": self.logging.file_output,
            },
        }


def load_config(path: Optional[str] = None) -> ChainGovConfig:
    """
    Load governor configuration.

    Resolution order:
        1. Explicit *path* argument
        2. CHAINGOV_CONFIG env var
        3. CHAINGOV_CONFIG_FILE from .env (default ./chaingov.toml)
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("CHAINGOV_CONFIG", str(CHAINGOV_CONFIG_FILE))

    return ChainGovConfig.from_file(path)
