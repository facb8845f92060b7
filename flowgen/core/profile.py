"""Velocity profiles: distribute a trial's net self-motion across frames."""

from dataclasses import dataclass
from typing import Tuple, Union
import numpy as np
from scipy.stats import norm

from .config import Trial


DIMENSIONS = ("u", "v", "w", "a", "b", "c")


def gaussian_weights(num_frames: int, num_sigmas: float = 6.0) -> np.ndarray:
    """Bell-shaped frame weights summing to 1.

    Evaluated on frames 1..num_frames, centered at num_frames / 2 with
    sigma = num_frames / num_sigmas.
    """
    if num_frames < 1:
        raise ValueError(f"num_frames must be >= 1, got {num_frames}")
    x = np.arange(1, num_frames + 1, dtype=np.float64)
    # Log space keeps narrow profiles finite when every pdf value underflows
    logpdf = norm.logpdf(x, loc=num_frames / 2, scale=num_frames / num_sigmas)
    w = np.exp(logpdf - logpdf.max())
    return w / w.sum()


@dataclass(frozen=True, eq=False)
class VelocityProfile:
    """Per-frame velocities for the six motion dimensions of one trial.

    values: [6, num_frames] rows ordered u, v, w, a, b, c. Each row sums to
    the trial's net velocity for that dimension.
    """
    values: np.ndarray

    def __post_init__(self):
        values = np.array(self.values, dtype=np.float64)
        if values.ndim != 2 or values.shape[0] != len(DIMENSIONS):
            raise ValueError(f"Expected [6, num_frames] profile, got {values.shape}")
        values.flags.writeable = False
        object.__setattr__(self, "values", values)

    @property
    def num_frames(self) -> int:
        return self.values.shape[1]

    def __len__(self) -> int:
        return self.num_frames

    def __getitem__(self, dim: Union[str, int]) -> np.ndarray:
        if isinstance(dim, str):
            dim = DIMENSIONS.index(dim.lower())
        return self.values[dim]

    def at(self, idx: int) -> Tuple[float, ...]:
        """Instantaneous (u, v, w, a, b, c) for frame idx."""
        return tuple(float(v) for v in self.values[:, idx])

    def totals(self) -> np.ndarray:
        """Net velocity per dimension (sum over frames)."""
        return self.values.sum(axis=1)


def velocity_profile(trial: Trial, num_frames: int, num_sigmas: float = 6.0) -> VelocityProfile:
    """Shape a trial's six net velocities into a smooth ramp up and down."""
    weights = gaussian_weights(num_frames, num_sigmas)
    net = np.asarray(trial.velocities, dtype=np.float64).reshape(-1, 1)
    return VelocityProfile(net * weights.reshape(1, -1))
