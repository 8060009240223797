import logging
import os

from dotenv import load_dotenv

load_dotenv()


def _float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    return float(raw) if raw else default


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw else default


TIMEZONE = os.getenv("TIMEZONE", "America/Los_Angeles")

USER_AGENT = os.getenv(
    "EVENTFINDER_USER_AGENT",
    "NapaValleyFeaturesEventFinder/1.0 (+https://napavalleyfeatures.com)",
)
ACCEPT_LANGUAGE = os.getenv("EVENTFINDER_ACCEPT_LANGUAGE", "en-US,en;q=0.9")

CACHE_TTL_S = _float_env("EVENTFINDER_CACHE_TTL_S", 600.0)

# Per-fetch < aggregate < handler
FETCH_TIMEOUT_S = _float_env("EVENTFINDER_FETCH_TIMEOUT_S", 10.0)
AGGREGATE_DEADLINE_S = _float_env("EVENTFINDER_AGGREGATE_DEADLINE_S", 20.0)
HANDLER_DEADLINE_S = _float_env("EVENTFINDER_HANDLER_DEADLINE_S", 25.0)

DETAIL_CONCURRENCY = max(1, min(_int_env("EVENTFINDER_DETAIL_CONCURRENCY", 4), 16))
MAX_CANDIDATES = max(10, min(_int_env("EVENTFINDER_MAX_CANDIDATES", 12), 20))

ALLOWED_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "EVENTFINDER_ALLOWED_ORIGINS",
        "https://napavalleyfeatures.com,https://www.napavalleyfeatures.com",
    ).split(",")
    if o.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Fail fast if the deadline ladder is inverted
if not (0 < FETCH_TIMEOUT_S < AGGREGATE_DEADLINE_S < HANDLER_DEADLINE_S):
    raise EnvironmentError(
        "Deadlines must satisfy 0 < EVENTFINDER_FETCH_TIMEOUT_S < "
        "EVENTFINDER_AGGREGATE_DEADLINE_S < EVENTFINDER_HANDLER_DEADLINE_S "
        f"(got {FETCH_TIMEOUT_S}, {AGGREGATE_DEADLINE_S}, {HANDLER_DEADLINE_S})."
    )


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure the root logger once (API startup, CLI)."""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
