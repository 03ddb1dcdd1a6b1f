import os

# Persistence (empty = keep everything in memory)
HAZARD_STORE_PATH = os.getenv("HAZARD_STORE_PATH", "")
SEED_DEFAULT_DATA = os.getenv("SEED_DEFAULT_DATA", "1") not in ("0", "false", "False", "")

# Route simulation
ROUTE_WAYPOINTS = int(os.getenv("ROUTE_WAYPOINTS", 12))
NARRATION_STEPS = int(os.getenv("NARRATION_STEPS", 20))
NEAR_ROUTE_KM = float(os.getenv("NEAR_ROUTE_KM", 0.2))
ALERT_DISTANCE_KM = float(os.getenv("ALERT_DISTANCE_KM", 0.1))

# Playback timer
NAV_TICK_SECONDS = float(os.getenv("NAV_TICK_SECONDS", 1.0))
NAV_HOLD_SECONDS = float(os.getenv("NAV_HOLD_SECONDS", 2.0))

LOG_LEVEL = os.getenv("SPEEDBREAKER_LOG_LEVEL", "INFO")
