"""Shared constants and environment configuration for the snow forecast backend."""

import os
from pathlib import Path

# Path to the continent -> country -> province -> resort hierarchy
LOCATIONS_FILE = Path(
    os.environ.get(
        "LOCATIONS_FILE",
        str(Path(__file__).parent.parent.parent / "data" / "locations.json"),
    )
)

OPENMETEO_URL = os.environ.get(
    "OPENMETEO_URL", "https://api.open-meteo.com/v1/forecast"
)

# Max resorts per provider call (30 resorts = 90 elevation points)
MAX_POINTS_PER_BATCH = int(os.environ.get("MAX_POINTS_PER_BATCH", "30"))
# Delay between provider batches to respect the per-minute rate limit
BATCH_DELAY_SECONDS = float(os.environ.get("BATCH_DELAY_SECONDS", "60"))
FORECAST_DAYS = int(os.environ.get("FORECAST_DAYS", "10"))
# Full refresh every 5 hours
UPDATE_INTERVAL_SECONDS = float(os.environ.get("UPDATE_INTERVAL_SECONDS", "18000"))
REQUEST_TIMEOUT_SECONDS = float(os.environ.get("REQUEST_TIMEOUT_SECONDS", "30"))

ENABLE_SCHEDULER = os.environ.get("ENABLE_SCHEDULER", "true").lower() == "true"
CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*").split(",")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Forecast models per country; anything else uses DEFAULT_MODEL
COUNTRY_MODELS: dict[str, str] = {
    "Canada": "gem_seamless",
    "USA": "gfs_seamless",
    "Japan": "jma_seamless",
}
DEFAULT_MODEL = os.environ.get("DEFAULT_MODEL", "best_match")
# Freezing level always comes from this model, regardless of country
FREEZING_LEVEL_MODEL = os.environ.get("FREEZING_LEVEL_MODEL", "gfs_seamless")
