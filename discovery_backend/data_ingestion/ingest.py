from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import pandas as pd

from ..discovery.models import User, UserProfile, UserRelationship
from ..discovery.store import Stores
from .config import DEFAULT_SEED_CONFIG, SeedConfig

logger = logging.getLogger(__name__)

LIST_COLUMNS = {"interests"}


def _read_records(path: Path) -> list[dict[str, Any]]:
    """Read a CSV as strings, turning empty cells into ``None``."""
    if not path.is_file():
        return []
    df = pd.read_csv(path, dtype=str, keep_default_na=False)

    records: list[dict[str, Any]] = []
    for raw in df.to_dict(orient="records"):
        record: dict[str, Any] = {}
        for key, value in raw.items():
            value = value.strip()
            if key in LIST_COLUMNS:
                record[key] = [v.strip() for v in value.split(",") if v.strip()]
            else:
                record[key] = value or None
        records.append(record)
    return records


def _drop_none(record: dict[str, Any]) -> dict[str, Any]:
    # Missing cells fall back to model defaults
    return {k: v for k, v in record.items() if v is not None}


def load_seed(stores: Stores, config: SeedConfig = DEFAULT_SEED_CONFIG) -> dict[str, int]:
    """
    Populate *stores* from the seed CSVs.

    Missing files are skipped, so a seed directory may hold only users.
    Returns the number of rows loaded per entity.
    """
    users = [User(**_drop_none(r)) for r in _read_records(config.users_path)]
    profiles = [UserProfile(**_drop_none(r)) for r in _read_records(config.profiles_path)]
    relationships = [
        UserRelationship(**_drop_none(r)) for r in _read_records(config.relationships_path)
    ]

    for user in users:
        stores.users.add(user)
    for profile in profiles:
        stores.profiles.add(profile)
    for relationship in relationships:
        stores.relationships.add(relationship)

    counts = {
        "users": len(users),
        "profiles": len(profiles),
        "relationships": len(relationships),
    }
    logger.info("Loaded seed data from %s: %s", config.seed_dir, counts)
    return counts


def load_seed_from_env(stores: Stores) -> dict[str, int] | None:
    """Load seed data only when ``DISCOVERY_SEED_DIR`` is set."""
    seed_dir = os.getenv("DISCOVERY_SEED_DIR")
    if not seed_dir:
        return None
    return load_seed(stores, SeedConfig(seed_dir=Path(seed_dir)))


if __name__ == "__main__":
    counts = load_seed(Stores())
    print(f"Seed files parsed: {counts}")
