"""Snow estimation from temperature, humidity and provider snowfall.

Hourly snow is estimated from the wet-bulb temperature, which governs whether
precipitation falls and accumulates as rain or snow:

1. Wet-bulb temperature via the Stull (2011) approximation.
2. Snow fraction: share of precipitation that accumulates as snow.
3. Snow-to-liquid ratio (Kuchera-style crystal habit bands).
4. Quality label (rain, sleet/mix, wet_snow, dry_snow, powder).
5. Accumulation: provider snowfall converted back to liquid and rescaled by
   the ratio.
"""

import math

from models.forecast import SnowEstimate, SnowQuality

# Open-Meteo derives snowfall (cm) from water equivalent (mm) with this factor
OPENMETEO_SNOW_DENSITY_FACTOR = 0.7


def calculate_wet_bulb(temp_c: float, rh: float) -> float:
    """Calculate wet-bulb temperature (°C) using the Stull (2011) approximation.

    Args:
        temp_c: Dry-bulb temperature in Celsius
        rh: Relative humidity in percent, clamped to [0, 100]
    """
    safe_rh = max(0.0, min(100.0, rh))
    term1 = temp_c * math.atan(0.151977 * math.sqrt(safe_rh + 8.313659))
    term2 = math.atan(temp_c + safe_rh)
    term3 = math.atan(safe_rh - 1.676331)
    term4 = 0.00391838 * safe_rh**1.5 * math.atan(0.023101 * safe_rh)
    term5 = 4.686035
    return term1 + term2 - term3 + term4 - term5


def calculate_snow_fraction(wet_bulb_c: float) -> float:
    """Fraction of precipitation that contributes to accumulation.

    - Warm (>= 0.5°C WB): 0% snow (all rain)
    - Slush (-0.5 to 0.5°C WB): 10%
    - Transition (-2.0 to -0.5°C WB): 20% - 100%, linear
    - Cold (<= -2.0°C WB): 100% snow
    """
    if wet_bulb_c >= 0.5:
        return 0.0
    if wet_bulb_c >= -0.5:
        return 0.1
    if wet_bulb_c > -2.0:
        slope = (1.0 - 0.2) / (-2.0 - (-0.5))
        fraction = 0.2 + slope * (wet_bulb_c - (-0.5))
        return min(1.0, max(0.0, fraction))
    return 1.0


def get_kuchera_ratio(wet_bulb_c: float) -> float:
    """Snow-to-liquid ratio for a wet-bulb temperature.

    - above 0: rain -> 1:1
    - 0 to -4: thin plates (wet) -> 3:1
    - -4 to -10: needles/columns -> 7:1
    - -10 to -12: transition -> 12:1
    - -12 to -18: dendrites (DGZ) -> 20:1
    - below -18: plates/columns (dense) -> 12:1
    """
    if wet_bulb_c > 0:
        return 1
    if wet_bulb_c > -4:
        return 3
    if wet_bulb_c > -10:
        return 7
    if wet_bulb_c > -12:
        return 12
    if wet_bulb_c > -18:
        return 20
    return 12


def get_snow_quality(wet_bulb_c: float, snow_fraction: float) -> SnowQuality:
    """Classify snow quality from wet-bulb temperature and snow fraction."""
    if snow_fraction == 0:
        return SnowQuality.RAIN
    if snow_fraction < 0.5:
        return SnowQuality.SLEET_MIX
    if wet_bulb_c > -4:
        return SnowQuality.WET_SNOW
    if -18 <= wet_bulb_c <= -12:
        return SnowQuality.POWDER
    return SnowQuality.DRY_SNOW


def estimate_hourly_snow(
    temp_c: float, humidity: float, snowfall_cm: float
) -> SnowEstimate:
    """Estimate snow accumulation for one hour."""
    wet_bulb = calculate_wet_bulb(temp_c, humidity)
    snow_fraction = calculate_snow_fraction(wet_bulb)
    ratio = get_kuchera_ratio(wet_bulb)

    swe_mm = snowfall_cm / OPENMETEO_SNOW_DENSITY_FACTOR
    snow_mm = swe_mm * ratio

    return SnowEstimate(
        snow_cm=snow_mm / 10,
        ratio=ratio,
        snow_fraction=snow_fraction,
        quality=get_snow_quality(wet_bulb, snow_fraction),
    )
