"""Trial table generator: sample self-motion trials from a YAML spec."""

import yaml
import csv
import numpy as np
from pathlib import Path
from dataclasses import dataclass
from typing import Dict, Any, List, Optional, Union

from ..core import Trial


@dataclass
class SamplingSpec:
    """Specification for parameter sampling."""
    distribution: str = "uniform"  # "uniform" | "normal" | "fixed"
    min_val: float = 0.0
    max_val: float = 1.0
    mean: float = 0.5
    std: float = 0.1
    value: Optional[float] = None  # for "fixed"

    def sample(self, rng: np.random.Generator) -> float:
        if self.distribution == "fixed":
            return float(self.value if self.value is not None else self.mean)
        elif self.distribution == "uniform":
            return float(rng.uniform(self.min_val, self.max_val))
        elif self.distribution == "normal":
            val = float(rng.normal(self.mean, self.std))
            return float(np.clip(val, self.min_val, self.max_val))
        else:
            raise ValueError(f"Unknown distribution: {self.distribution}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SamplingSpec":
        return cls(
            distribution=d.get("distribution", "uniform"),
            min_val=d.get("min", 0.0),
            max_val=d.get("max", 1.0),
            mean=d.get("mean", (d.get("min", 0.0) + d.get("max", 1.0)) / 2),
            std=d.get("std", 0.1),
            value=d.get("value"),
        )


class TrialCSVGenerator:
    """Generate a CSV table of self-motion trials.

    YAML config format:
    ```yaml
    trials:
      U:
        distribution: uniform
        min: -0.2
        max: 0.2
      W:
        distribution: normal
        mean: 0.3
        std: 0.1
        min: 0.0
        max: 0.6
      C:
        distribution: fixed
        value: 0.0

    generation:
      seed: 42
      num_trials: 8
    ```
    Dimensions left out are fixed at 0.
    """

    COLUMNS = ["trial"] + list(Trial.KEYS)

    DEFAULT_SPEC = {"distribution": "fixed", "value": 0.0}

    def __init__(self, config_path: Union[str, Path]):
        """Initialize generator from YAML config."""
        self.config_path = Path(config_path)
        with open(config_path) as f:
            self.config = yaml.safe_load(f) or {}

        specs = self.config.get("trials", {}) or {}
        unknown = set(specs) - set(Trial.KEYS)
        if unknown:
            raise ValueError(f"Unknown trial dimensions: {sorted(unknown)}")

        self.param_specs = {
            key: SamplingSpec.from_dict(specs.get(key, self.DEFAULT_SPEC))
            for key in Trial.KEYS
        }

        gen_cfg = self.config.get("generation", {}) or {}
        self.seed = gen_cfg.get("seed", 42)
        self.num_trials = int(gen_cfg.get("num_trials", 1))

    def sample_trials(self) -> List[Trial]:
        """Draw num_trials trials; deterministic for a given seed."""
        rng = np.random.default_rng(self.seed)
        trials = []
        for _ in range(self.num_trials):
            row = {key: self.param_specs[key].sample(rng) for key in Trial.KEYS}
            trials.append(Trial.from_dict(row))
        return trials

    def generate(self, output_csv: Union[str, Path]) -> int:
        """Write the sampled trials to CSV.

        Returns:
            number of trials written
        """
        trials = self.sample_trials()
        return write_trials_csv(output_csv, trials)


def write_trials_csv(output_csv: Union[str, Path], trials: List[Trial]) -> int:
    output_csv = Path(output_csv)
    output_csv.parent.mkdir(parents=True, exist_ok=True)
    with open(output_csv, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=TrialCSVGenerator.COLUMNS)
        writer.writeheader()
        for i, trial in enumerate(trials):
            writer.writerow({"trial": i, **trial.to_dict()})
    return len(trials)


def load_trials_csv(path: Union[str, Path]) -> List[Trial]:
    """Read trials in row order. Missing velocity columns default to 0."""
    trials = []
    with open(path, newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            values = {k: row[k] for k in Trial.KEYS if row.get(k) not in (None, "")}
            trials.append(Trial.from_dict(values))
    return trials
