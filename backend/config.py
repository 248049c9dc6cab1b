"""Runtime settings for the map engine, read from the environment (.env supported)."""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Playback
TICK_INTERVAL_SECONDS = float(os.getenv("PLAYBACK_TICK_INTERVAL", "0.1"))  # wall clock, independent of speed
BASE_STEP_HOURS = float(os.getenv("PLAYBACK_BASE_STEP_HOURS", "0.5"))
PLAYBACK_WINDOW_HOURS = float(os.getenv("PLAYBACK_WINDOW_HOURS", str(7 * 24)))
HALF_WINDOW_HOURS = float(os.getenv("PLAYBACK_HALF_WINDOW_HOURS", "2"))
SKIP_HOURS = float(os.getenv("PLAYBACK_SKIP_HOURS", "12"))
ALLOWED_SPEEDS = (0.5, 1.0, 2.0, 4.0)
STRICT_SEEK = _env_bool("PLAYBACK_STRICT_SEEK", False)

# Fleet
LOOP_PATROL_ROUTES = _env_bool("FLEET_LOOP_ROUTES", True)

# Clamp margins (percent of viewport) per overlay layer
LAYER_MARGINS = {
    "heatmap": 2.0,
    "drone_patrol": 2.0,
    "coverage": 2.0,
    "threat": 5.0,
    "animal": 5.0,
    "sensor": 5.0,
    "park": 10.0,
    "corridor": 0.0,
}

# Assistant
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
ASSISTANT_MODEL = os.getenv("ASSISTANT_MODEL", "claude-sonnet-4-20250514")
ASSISTANT_MAX_TOKENS = int(os.getenv("ASSISTANT_MAX_TOKENS", "1024"))
