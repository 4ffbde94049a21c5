"""
qstake Constants

This module consolidates all protocol constants and environment configuration
used throughout the codebase. Constants are organized by category for easy
reference and maintenance.
"""
import ast
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LEDGER_DEFAULTS = {
    'QSTAKE_ADMIN_ADDRESS':            '',
    'QSTAKE_CONFIG_PATH':              'config.toml',
}

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_ENABLED':                'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# WARNING: THE VALUES BELOW DEFINE THE STAKING PROTOCOL. CHANGING THEM CHANGES
# EVERY REWARD THE LEDGER COMPUTES AND INVALIDATES THE REFERENCE FIGURES IN THE
# TEST SUITE.

# ==================================================================================
# TIME
# ==================================================================================
SECONDS_PER_DAY = 60 * 60 * 24
DAYS_PER_YEAR = 365
CYCLE_DAYS = 28  # Reward cycle length
CYCLE_SECONDS = CYCLE_DAYS * SECONDS_PER_DAY


# ==================================================================================
# STAKE LIMITS
# ==================================================================================
MIN_STAKE_DAYS = 21
MAX_STAKE_DAYS = 365

# Ceiling on principal + pending + claimable for a single position.
# 10^12 whole tokens at 18 decimals; keeps every intermediate product of the
# interest engine far below 2^256.
MAX_STAKE_AMOUNT = 10 ** 30


# ==================================================================================
# RATES
# ==================================================================================
BASIS_POINTS = 10_000
MAX_APY_BASIS_POINTS = 10_000  # 100.00%


# ==================================================================================
# FIXED POINT
# ==================================================================================
WAD_DECIMALS = 18
WAD = 10 ** WAD_DECIMALS

# Internal precision for ln/exp series before flooring back to WAD
EXTENDED_DECIMALS = 36
EXTENDED = 10 ** EXTENDED_DECIMALS

# ln(2) floored at 36 decimals
LN2_EXTENDED = 693147180559945309417232121458176568


# ==================================================================================
# TOKEN
# ==================================================================================
TOKEN_DEFAULT_DECIMALS = 18
TOKEN_DEFAULT_SYMBOL = 'ST'


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

    def __hash__(self):
        return hash(bool(self))


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = LEDGER_DEFAULTS | LOGGER_DEFAULTS
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
