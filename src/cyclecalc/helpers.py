from datetime import timedelta

import numpy as np

from .errors import InvalidInputError


# --------------------------
# Small input validators
# --------------------------
def _validate_nonempty(name: str, s: str) -> None:
    if not s:
        raise InvalidInputError(f"empty {name}")

def _validate_positive(name: str, x: float) -> None:
    if not (x > 0):
        raise InvalidInputError(f"nonpositive {name} (got {x})")

def _validate_non_negative(name: str, x: float) -> None:
    if x < 0:
        raise InvalidInputError(f"negative {name} (got {x})")

def _validate_whole_ticks(name: str, x) -> int:
    if (isinstance(x, bool) or not isinstance(x, (int, float, np.integer, np.floating))
            or not np.isfinite(x) or x != int(x)):
        raise InvalidInputError(f"{name}: not a whole number of ticks (got {x})")
    return int(x)

def _validate_positive_duration(name: str, d: timedelta) -> None:
    if not (d > timedelta(0)):
        raise InvalidInputError(f"nonpositive {name} ({d})")

def _validate_non_negative_duration(name: str, d: timedelta) -> None:
    if d < timedelta(0):
        raise InvalidInputError(f"negative {name} ({d})")

def _validate_name_chars(name: str, s: str) -> None:
    # '.' prefixes are reserved for entry kinds and '=' separates base from variant
    if s.startswith("."):
        raise InvalidInputError(f"{name} starts with '.'")
    if "=" in s:
        raise InvalidInputError(f"{name} contains '='")
