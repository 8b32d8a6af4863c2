"""
Conversions from APEX exposure values to conventional notation.
"""

import math


def aperture_to_fnumber(apex: float) -> float:
    """Convert an APEX aperture value to an f-number."""
    return math.pow(2.0, apex / 2.0)


def format_fnumber(apex: float) -> str:
    """APEX aperture value as an f-number label with one decimal, e.g. 4.0 -> "4.0"."""
    return f"{aperture_to_fnumber(apex):.1f}"


def shutter_speed_to_exposure_time(apex: float) -> str:
    """
    Convert an APEX shutter speed value to an exposure time expressed
    as a fraction of a second, e.g. 7 -> "1/128".
    """
    return f"1/{math.pow(2.0, apex):.0f}"
