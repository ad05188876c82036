# ================================================================
# Light Processor - Configuration
# ================================================================
# Capacity bounds, grid geometry and ingestion cadence
# ================================================================

import os
import json
from dataclasses import dataclass, asdict, fields
from typing import Optional

# Hard bound on distinct words held by the registry
CAPACITY = 100_000

# Visual encoding grid: GRID_SIDE x GRID_SIDE cells, CHANNELS floats per cell
GRID_SIDE = 4096
CHANNELS = 4

# Tokens applied to the registry per ingestion batch
BATCH_SIZE = 1000

# Input phrases are truncated to this many tokens before prediction
SEED_LIMIT = 10

# Default number of greedy steps taken by the walker
MAX_STEPS = 10

# Saturation is drawn from [SATURATION_FLOOR, 1.0)
SATURATION_FLOOR = 0.5

CONFIG_ENV_VAR = "LIGHT_PROCESSOR_CONFIG"
DEFAULT_CONFIG_FILE = "processor_config.json"
DEFAULT_CHECKPOINT_PATH = os.path.join("sessions", "latest_checkpoint.pkl")

CONFIG = {
    # --- Registry ---
    "capacity": CAPACITY,              # Max distinct words (new words dropped once full)

    # --- Visual Encoding ---
    "grid_side": GRID_SIDE,            # Grid is grid_side x grid_side cells
    "initial_fill": "noise",           # "noise" (random texture) or "zeros"

    # --- Ingestion ---
    "batch_size": BATCH_SIZE,          # Tokens per batch before yielding

    # --- Prediction ---
    "seed_limit": SEED_LIMIT,          # Max tokens kept from an input phrase
    "max_steps": MAX_STEPS,            # Max words generated per walk

    # --- Misc ---
    "seed": None,                      # RNG seed for hue/saturation/noise (None = random)
    "checkpoint_path": DEFAULT_CHECKPOINT_PATH,
}

INITIAL_FILLS = ("noise", "zeros")


@dataclass
class ProcessorConfig:
    """Runtime configuration for a LightProcessor instance"""
    capacity: int = CONFIG["capacity"]
    grid_side: int = CONFIG["grid_side"]
    initial_fill: str = CONFIG["initial_fill"]
    batch_size: int = CONFIG["batch_size"]
    seed_limit: int = CONFIG["seed_limit"]
    max_steps: int = CONFIG["max_steps"]
    seed: Optional[int] = CONFIG["seed"]
    checkpoint_path: str = CONFIG["checkpoint_path"]

    def validate(self):
        """Raise ValueError on out-of-range settings."""
        for name in ("capacity", "grid_side", "batch_size", "seed_limit"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if not isinstance(self.max_steps, int) or self.max_steps < 0:
            raise ValueError(f"max_steps must be a non-negative integer, got {self.max_steps!r}")
        if self.initial_fill not in INITIAL_FILLS:
            raise ValueError(f"initial_fill must be one of {INITIAL_FILLS}, got {self.initial_fill!r}")
        return self

    @property
    def cell_count(self):
        return self.grid_side * self.grid_side

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        """Build a config from a plain dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            print(f"[Config] Ignoring unknown keys: {unknown}")
        return cls(**{k: v for k, v in data.items() if k in known}).validate()


def load_config(path=None):
    """
    Resolve the processor configuration.

    Order: explicit path, $LIGHT_PROCESSOR_CONFIG, ./processor_config.json,
    then the built-in defaults.
    """
    cfg_path = path or os.environ.get(CONFIG_ENV_VAR, None)
    if cfg_path is None and os.path.exists(DEFAULT_CONFIG_FILE):
        cfg_path = DEFAULT_CONFIG_FILE

    if cfg_path is None:
        return ProcessorConfig().validate()

    with open(cfg_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file {cfg_path} must contain a JSON object")

    print(f"[Config] Loaded configuration from: {cfg_path}")
    return ProcessorConfig.from_dict(data)
