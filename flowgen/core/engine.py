"""FlowEngine: per-trial optic flow simulation."""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Union, Dict, Any
import numpy as np

from .config import FlowConfig, Trial
from .dots import DotField, Frame
from .profile import VelocityProfile, velocity_profile

logger = logging.getLogger(__name__)

TrialLike = Union[Trial, Dict[str, Any]]


@dataclass
class TrialResult:
    """Simulation of one trial.

    frames is a single-pass generator of num_frames Frames in time order.
    """
    index: int
    trial: Trial
    profile: VelocityProfile
    frames: Iterator[Frame]

    def __iter__(self) -> Iterator[Frame]:
        return self.frames


def as_trial(t: TrialLike) -> Trial:
    if isinstance(t, Trial):
        return t
    if isinstance(t, dict):
        if "translational" in t or "rotational" in t:
            return Trial(
                translational=tuple(t.get("translational", (0.0, 0.0, 0.0))),
                rotational=tuple(t.get("rotational", (0.0, 0.0, 0.0))),
            )
        return Trial.from_dict(t)
    raise ValueError(f"Cannot interpret {type(t).__name__} as a trial")


class FlowEngine:
    """Optic flow simulation engine.

    One DotField per trial, reseeded at trial start and stepped once per frame
    with the trial's velocity profile.
    """

    def __init__(self, cfg: Optional[FlowConfig] = None, rng: Optional[np.random.Generator] = None):
        self.cfg = (cfg or FlowConfig()).validate()
        self.rng = rng if rng is not None else np.random.default_rng()

    def profile(self, trial: Trial) -> VelocityProfile:
        return velocity_profile(trial, self.cfg.num_frames, self.cfg.num_sigmas)

    def simulate_trial(self, trial: Trial, profile: Optional[VelocityProfile] = None) -> Iterator[Frame]:
        """Yield num_frames projected frames for one trial."""
        if profile is None:
            profile = self.profile(trial)
        field = DotField(self.cfg, self.rng)
        recycled_total = 0
        for idx in range(self.cfg.num_frames):
            evicted = field.step(profile.at(idx), trial.W)
            recycled = int(evicted.sum())
            recycled_total += recycled
            points = field.project()
            points.flags.writeable = False
            yield Frame(index=idx, points=points, recycled=recycled)
        logger.debug("Trial done: %d frames, %d dots recycled", self.cfg.num_frames, recycled_total)

    def simulate(self, trials: Iterable[TrialLike]) -> Iterator[TrialResult]:
        """Simulate trials in order, streaming frames.

        Trials are checked up front. Unread frames of a trial are drained before
        the next trial starts so the random draw order never depends on the consumer.
        """
        trials = [as_trial(t) for t in trials]
        return self._iter_trials(trials)

    def _iter_trials(self, trials: List[Trial]) -> Iterator[TrialResult]:
        for i, trial in enumerate(trials):
            logger.debug("Trial %d: UVW=%s ABC=%s", i, trial.translational, trial.rotational)
            profile = self.profile(trial)
            frames = self.simulate_trial(trial, profile)
            yield TrialResult(index=i, trial=trial, profile=profile, frames=frames)
            deque(frames, maxlen=0)

    def run(self, trials: Iterable[TrialLike]) -> List[List[Frame]]:
        """Simulate all trials and materialize every frame."""
        return [list(result.frames) for result in self.simulate(trials)]


def simulate(
    trials: Iterable[TrialLike],
    cfg: Optional[FlowConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> Iterator[TrialResult]:
    """Stream TrialResults for trials; see FlowEngine.simulate."""
    return FlowEngine(cfg, rng).simulate(trials)
