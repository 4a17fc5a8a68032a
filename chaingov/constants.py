"""
ChainGov Constants

This module consolidates the governance policy constants, the Timelock
bounds, and the environment configuration used throughout the codebase.
Constants are organized by category for easy reference and maintenance.
"""
import ast
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

GOVERNOR_DEFAULTS = {
    'CHAINGOV_GOVERNOR_NAME':          'ChainGov Governor Alpha',
    'CHAINGOV_CHAIN_ID':               '1',
    'CHAINGOV_CONFIG_FILE':            'chaingov.toml',
}

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# WARNING: THE POLICY VALUES BELOW ARE PART OF THE GOVERNANCE CONTRACT. CHANGING THEM ON A LIVE
# DEPLOYMENT CHANGES WHO MAY PROPOSE AND WHAT PASSES. OVERRIDE THEM THROUGH THE TOML CONFIGURATION
# (chaingov.config) FOR TEST NETWORKS INSTEAD OF EDITING THIS FILE.

# ==================================================================================
# ARITHMETIC
# ==================================================================================
UINT256_MAX = 2 ** 256 - 1
TOKEN_DECIMALS = 18
ONE_TOKEN = 10 ** TOKEN_DECIMALS


# ==================================================================================
# GOVERNOR POLICY
# ==================================================================================
# Minimum "for" weight for a proposal to succeed (4% of 10M)
GOVERNANCE_QUORUM_VOTES = 400_000 * ONE_TOKEN

# Voting weight a proposer must exceed (1% of 10M)
GOVERNANCE_PROPOSAL_THRESHOLD = 100_000 * ONE_TOKEN

# Maximum number of actions in one proposal
GOVERNANCE_PROPOSAL_MAX_OPERATIONS = 10

# Blocks between proposing and the start of voting
GOVERNANCE_VOTING_DELAY = 1

# Blocks voting stays open (~3 days at 15s blocks)
GOVERNANCE_VOTING_PERIOD = 17_280


# ==================================================================================
# TIMELOCK
# ==================================================================================
TIMELOCK_GRACE_PERIOD = 14 * 86400
TIMELOCK_MINIMUM_DELAY = 2 * 86400
TIMELOCK_MAXIMUM_DELAY = 30 * 86400
TIMELOCK_DEFAULT_DELAY = TIMELOCK_MINIMUM_DELAY


# ==================================================================================
# SIGNED BALLOTS (EIP-712)
# ==================================================================================
EIP712_DOMAIN_TYPE = "EIP712Domain(string name,uint256 chainId,address verifyingContract)"
BALLOT_TYPE = "Ballot(uint256 proposalId,bool support)"


# ==================================================================================
# CHAIN HOST
# ==================================================================================
BLOCK_TIME = 15  # seconds per block when mining without an explicit timestamp
GENESIS_TIMESTAMP = 1_600_000_000
ZERO_ADDRESS = "0x" + "00" * 20


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = GOVERNOR_DEFAULTS | LOGGER_DEFAULTS
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
