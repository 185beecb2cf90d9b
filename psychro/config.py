"""
Psychro engine configuration and constants.
"""

from enum import Enum


class PropertyKind(str, Enum):
    """Independent properties accepted by the state point resolver."""

    TDB = "Tdb"  # dry-bulb temperature
    TWB = "Twb"  # wet-bulb temperature
    RH = "RH"    # relative humidity
    W = "W"      # humidity ratio
    H = "h"      # specific enthalpy
    TDP = "Tdp"  # dew point temperature


class Season(str, Enum):
    SUMMER = "summer"
    WINTER = "winter"
    BOTH = "both"


# Supported input pair combinations for state point resolution.
# Order within a pair does not matter; (Tdp, W) is listed but can never
# fix the dry-bulb temperature and is rejected as ambiguous.
SUPPORTED_INPUT_PAIRS: list[tuple[str, str]] = [
    ("Tdb", "RH"),
    ("Tdb", "Twb"),
    ("Tdb", "Tdp"),
    ("Tdb", "W"),
    ("Tdb", "h"),
    ("Twb", "RH"),
    ("Twb", "W"),
    ("Twb", "h"),
    ("Twb", "Tdp"),
    ("RH", "W"),
    ("RH", "h"),
    ("RH", "Tdp"),
    ("W", "h"),
    ("h", "Tdp"),
    ("Tdp", "W"),
]

# Standard atmospheric pressure at sea level
STANDARD_PRESSURE = 101.325  # kPa

ABSOLUTE_ZERO = -273.15  # °C

# Dry-bulb search window for pairs without a direct solution (°C)
SEARCH_TDB_MIN = -50.0
SEARCH_TDB_MAX = 100.0

# Width of the dry-bulb window above a known wet-bulb temperature (K)
WET_BULB_SEARCH_SPAN = 80.0

# A humidity ratio within this of W(Tdp) is consistent with the dew point
DEW_POINT_W_TOLERANCE = 0.0005  # kg/kg

# Below this magnitude a heat flow counts as zero (kW)
HEAT_EPSILON = 1e-6

# Number of segments in a generated process path
PATH_SEGMENTS = 12
