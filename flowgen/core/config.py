"""Optic flow stimulus configuration."""

from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Tuple, Dict, Any, List, Sequence, Union
import numpy as np
import yaml


class ConfigError(ValueError):
    """Invalid simulation configuration."""


_SECTIONS = ("flow", "render")


def _field_names(cls) -> set:
    return {f.name for f in fields(cls)}


def _check_keys(cls, d: Dict[str, Any]) -> None:
    unknown = set(d) - _field_names(cls)
    if unknown:
        raise ConfigError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")


def _load_section(path: Union[str, Path], section: str) -> Dict[str, Any]:
    """Read one section of a YAML config.

    A file without ``flow``/``render`` keys is one flat mapping, split between
    the two config classes by field name.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if any(key in data for key in _SECTIONS):
        return data.get(section) or {}
    owners = {"flow": FlowConfig, "render": RenderConfig}
    unknown = set(data) - set().union(*(_field_names(c) for c in owners.values()))
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {sorted(unknown)}")
    own = _field_names(owners[section])
    return {k: v for k, v in data.items() if k in own}


@dataclass
class FlowConfig:
    """Configuration for dot-field self-motion simulation.

    Distances are in meters in a viewer-centered frame, z along the line of sight.
    """
    # Timing
    num_frames: int = 150
    stim_duration: float = 3.0  # seconds
    fixation_duration: float = 0.25  # seconds, fixation frame before each trial

    # Dot field
    num_dots: int = 4000
    min_val: float = -1.0
    max_val: float = 1.0
    clip_near: float = 0.05
    clip_far: float = 1.50

    # Projection
    view_dist: float = 0.33
    star_size: float = 8.0

    # Velocity profile width: sigma = num_frames / num_sigmas
    num_sigmas: float = 6.0

    @property
    def frame_duration(self) -> float:
        return self.stim_duration / self.num_frames

    def validate(self) -> "FlowConfig":
        """Raise ConfigError if the configuration cannot be simulated."""
        if int(self.num_frames) != self.num_frames or self.num_frames < 1:
            raise ConfigError(f"num_frames must be a positive integer, got {self.num_frames}")
        if int(self.num_dots) != self.num_dots or self.num_dots < 1:
            raise ConfigError(f"num_dots must be a positive integer, got {self.num_dots}")
        if self.clip_near <= 0:
            raise ConfigError(f"clip_near must be positive, got {self.clip_near}")
        if self.clip_far <= self.clip_near:
            raise ConfigError(
                f"clip_far ({self.clip_far}) must be greater than clip_near ({self.clip_near})"
            )
        if self.max_val <= self.min_val:
            raise ConfigError(f"max_val ({self.max_val}) must be greater than min_val ({self.min_val})")
        for name in ("view_dist", "star_size", "num_sigmas", "stim_duration"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.fixation_duration < 0:
            raise ConfigError(f"fixation_duration must be non-negative, got {self.fixation_duration}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FlowConfig":
        _check_keys(cls, d)
        return cls(**d)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "FlowConfig":
        """Load from a YAML mapping, optionally nested under a ``flow`` key."""
        return cls.from_dict(_load_section(path, "flow"))


@dataclass
class RenderConfig:
    """Rasterization settings for projected frames.

    Screen coordinates in [-view_extent, view_extent] map onto a square image.
    Marker sizes are areas in points^2 on a figure ``figure_size_cm`` wide.
    """
    image_size: int = 512
    figure_size_cm: float = 24.0
    view_extent: float = 0.3
    background: Tuple[int, int, int] = (0, 0, 0)
    dot_color: Tuple[int, int, int] = (255, 255, 0)
    marker: str = "triangle"  # "triangle" | "circle"
    fixation_color: Tuple[int, int, int] = (255, 255, 0)
    fixation_size: float = 0.006  # square side, screen units
    antialias: bool = True

    @property
    def figure_points(self) -> float:
        """Figure width in typographic points."""
        return self.figure_size_cm / 2.54 * 72.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RenderConfig":
        _check_keys(cls, d)
        d = dict(d)
        for key in ("background", "dot_color", "fixation_color"):
            if key in d:
                d[key] = tuple(int(c) for c in d[key])
        return cls(**d)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "RenderConfig":
        """Load from a YAML mapping, optionally nested under a ``render`` key."""
        return cls.from_dict(_load_section(path, "render"))


@dataclass
class Trial:
    """Self-motion for one trial: translation (U, V, W) and rotation (A, B, C).

    U lateral, V vertical, W fore/aft; A pitch, B yaw, C roll.
    """
    translational: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotational: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    KEYS = ("U", "V", "W", "A", "B", "C")

    def __post_init__(self):
        if len(self.translational) != 3 or len(self.rotational) != 3:
            raise ValueError(
                f"Trial velocities must have 3 components each, got "
                f"{len(self.translational)} translational and {len(self.rotational)} rotational"
            )
        self.translational = tuple(float(v) for v in self.translational)
        self.rotational = tuple(float(v) for v in self.rotational)

    @property
    def velocities(self) -> Tuple[float, ...]:
        """(U, V, W, A, B, C)."""
        return self.translational + self.rotational

    @property
    def W(self) -> float:
        return self.translational[2]

    def to_dict(self) -> Dict[str, float]:
        return dict(zip(self.KEYS, self.velocities))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Trial":
        v = [float(d.get(k, 0.0)) for k in cls.KEYS]
        return cls(translational=tuple(v[:3]), rotational=tuple(v[3:]))


def trials_from_arrays(trans_vel: Sequence, rot_vel: Sequence) -> List[Trial]:
    """Build trials from [T, 3] translational and [T, 3] rotational arrays."""
    trans = np.atleast_2d(np.asarray(trans_vel, dtype=np.float64))
    rot = np.atleast_2d(np.asarray(rot_vel, dtype=np.float64))
    if trans.shape[1] != 3 or rot.shape[1] != 3:
        raise ValueError(f"Expected [T, 3] velocity arrays, got {trans.shape} and {rot.shape}")
    if trans.shape[0] != rot.shape[0]:
        raise ValueError(f"Trial count mismatch: {trans.shape[0]} translational vs {rot.shape[0]} rotational")
    return [Trial(tuple(t), tuple(r)) for t, r in zip(trans.tolist(), rot.tolist())]
