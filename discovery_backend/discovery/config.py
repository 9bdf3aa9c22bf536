from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class DiscoveryConfig:
    fetch_limit: int = int(os.getenv("DISCOVERY_FETCH_LIMIT", "100"))
    recommendation_limit: int = int(os.getenv("DISCOVERY_RECOMMENDATION_LIMIT", "20"))
    # Share of the homepage list reserved for the preferred gender group.
    preferred_ratio: float = float(os.getenv("DISCOVERY_PREFERRED_RATIO", "0.75"))
    default_radius_km: float = 5.0
    recommended_radius_km: float = 10.0
    default_active_within_minutes: int = 30
    recommended_active_within_minutes: int = 60 * 24
    viewers_days_back: int = 30
    request_timeout_seconds: float = float(os.getenv("DISCOVERY_REQUEST_TIMEOUT", "5.0"))


DEFAULT_DISCOVERY_CONFIG = DiscoveryConfig()
