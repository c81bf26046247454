"""
Global Configuration and Defaults.

Module-level defaults used across the CLI and the analysis session, plus an
optional per-project override file at ``.bobble/config.yaml``:

    impact:
      workers: 4          # background threads for impact queries
      max_visible: 50     # impact queries issued per rendered tree
      wait_seconds: 30    # how long the CLI waits for fresh impacts
    tree:
      depth: 3
      max_rows: 500
    store:
      path: .bobble/bobble.db
"""

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

BOBBLE_DIR = ".bobble"
DEFAULT_DB_PATH = f"{BOBBLE_DIR}/bobble.db"
DEFAULT_CONFIG_PATH = f"{BOBBLE_DIR}/config.yaml"

# Background threads running impact computations
DEFAULT_IMPACT_WORKERS = 2

# Upper bound on impact queries issued for one rendered view
DEFAULT_MAX_VISIBLE_IMPACTS = 50

DEFAULT_IMPACT_WAIT_SECONDS = 30.0

DEFAULT_TREE_DEPTH = 3

# Rows printed before the tree walk stops
DEFAULT_MAX_TREE_ROWS = 500

# Key under which the uploaded stats file is stored
STATS_KEY = "stats"


class ImpactConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    workers: int = Field(DEFAULT_IMPACT_WORKERS, ge=1)
    max_visible: int = Field(DEFAULT_MAX_VISIBLE_IMPACTS, ge=0)
    wait_seconds: float = Field(DEFAULT_IMPACT_WAIT_SECONDS, ge=0)


class TreeConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    depth: int = Field(DEFAULT_TREE_DEPTH, ge=0)
    max_rows: int = Field(DEFAULT_MAX_TREE_ROWS, ge=1)


class StoreConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    path: str = DEFAULT_DB_PATH


class BobbleConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    impact: ImpactConfig = Field(default_factory=ImpactConfig)
    tree: TreeConfig = Field(default_factory=TreeConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)


def load_config(config_path: Optional[Path] = None) -> BobbleConfig:
    """
    Load configuration, falling back to defaults when the file is missing.

    Raises:
        pydantic.ValidationError: If the file holds invalid values.
    """
    path = Path(config_path or DEFAULT_CONFIG_PATH)
    if not path.exists():
        return BobbleConfig()

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    logger.debug(f"Loaded config from {path}")
    return BobbleConfig.model_validate(data)
