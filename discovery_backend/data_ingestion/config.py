from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SeedConfig:
    """
    Location and file names of the CSV seed data.
    """

    seed_dir: Path = Path(os.getenv("DISCOVERY_SEED_DIR", "discovery_backend/data/seed"))
    users_filename: str = "users.csv"
    profiles_filename: str = "profiles.csv"
    relationships_filename: str = "relationships.csv"

    @property
    def users_path(self) -> Path:
        return self.seed_dir / self.users_filename

    @property
    def profiles_path(self) -> Path:
        return self.seed_dir / self.profiles_filename

    @property
    def relationships_path(self) -> Path:
        return self.seed_dir / self.relationships_filename


DEFAULT_SEED_CONFIG = SeedConfig()
