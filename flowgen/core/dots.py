"""Dot field: self-motion update, recycling and pinhole projection."""

from dataclasses import dataclass
from typing import Optional
import numpy as np

from .config import FlowConfig


@dataclass(frozen=True, eq=False)
class Frame:
    """Projected dot positions for one time step.

    points: [N, 3] read-only array of (screen_x, screen_y, size), dot index order.
    recycled: number of dots repositioned by frustum eviction in this step.
    """
    index: int
    points: np.ndarray
    recycled: int = 0

    @property
    def x(self) -> np.ndarray:
        return self.points[:, 0]

    @property
    def y(self) -> np.ndarray:
        return self.points[:, 1]

    @property
    def size(self) -> np.ndarray:
        return self.points[:, 2]

    def __len__(self) -> int:
        return self.points.shape[0]

    def __iter__(self):
        return iter(map(tuple, self.points.tolist()))


def project(xyz: np.ndarray, star_size: float, view_dist: float) -> np.ndarray:
    """Pinhole projection of [N, 3] points to [N, 3] (screen_x, screen_y, size).

    Marker size falls off with the inverse square of depth; a dot at
    z == view_dist has size star_size ** 2.
    """
    x, y, z = xyz[:, 0], xyz[:, 1], xyz[:, 2]
    size = (star_size * (view_dist / z)) ** 2
    return np.stack([x / z, y / z, size], axis=1)


class DotField:
    """Fixed-size 3D point cloud seen by a moving observer.

    Positions live in a viewer-centered frame with z along the line of sight.
    The random source is injected so runs are reproducible.
    """

    def __init__(self, cfg: FlowConfig, rng: Optional[np.random.Generator] = None):
        self.cfg = cfg
        self.rng = rng if rng is not None else np.random.default_rng()
        self.xyz = np.empty((cfg.num_dots, 3), dtype=np.float64)
        self.reseed()

    def __len__(self) -> int:
        return self.xyz.shape[0]

    def _uniform_xy(self, n: int) -> np.ndarray:
        return self.rng.uniform(self.cfg.min_val, self.cfg.max_val, n)

    def reseed(self) -> None:
        """Scatter all dots uniformly through the viewing volume."""
        n = self.cfg.num_dots
        self.xyz[:, 0] = self._uniform_xy(n)
        self.xyz[:, 1] = self._uniform_xy(n)
        self.xyz[:, 2] = self.rng.uniform(self.cfg.clip_near, self.cfg.clip_far, n)

    def move(self, u: float, v: float, w: float, a: float, b: float, c: float) -> None:
        """First-order rigid self-motion step for translation (u, v, w) and rotation (a, b, c)."""
        x, y, z = self.xyz[:, 0], self.xyz[:, 1], self.xyz[:, 2]
        dx = -u - b * z + c * y
        dy = -v - c * x + a * z
        dz = -w - a * y + b * x
        self.xyz += np.stack([dx, dy, dz], axis=1)

    def wrap_depth(self) -> np.ndarray:
        """Send dots past the far plane to the near plane and vice versa.

        Returns the mask of wrapped dots.
        """
        z = self.xyz[:, 2]
        past_far = z > self.cfg.clip_far
        z[past_far] = self.cfg.clip_near
        before_near = z < self.cfg.clip_near
        z[before_near] = self.cfg.clip_far
        return past_far | before_near

    def outside_view(self) -> np.ndarray:
        x, y, z = self.xyz[:, 0], self.xyz[:, 1], self.xyz[:, 2]
        return (np.abs(x) > z) | (np.abs(y) > z)

    def evict(self, heading_w: float) -> np.ndarray:
        """Respawn dots whose projection leaves the unit-slope frustum.

        New x, y are fresh uniform draws. New z is the far plane when the
        trial's net fore/aft velocity is non-negative, else the near plane.
        Returns the mask of respawned dots.
        """
        outside = self.outside_view()
        n = int(outside.sum())
        if n:
            self.xyz[outside, 0] = self._uniform_xy(n)
            self.xyz[outside, 1] = self._uniform_xy(n)
            self.xyz[outside, 2] = self.cfg.clip_far if heading_w >= 0 else self.cfg.clip_near
        return outside

    def step(self, velocities, heading_w: float) -> np.ndarray:
        """Move, wrap and evict. Returns the eviction mask."""
        self.move(*velocities)
        self.wrap_depth()
        return self.evict(heading_w)

    def project(self) -> np.ndarray:
        return project(self.xyz, self.cfg.star_size, self.cfg.view_dist)
