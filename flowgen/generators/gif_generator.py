"""GIF Generator: render simulated trials into one looping animation."""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union
import numpy as np
from tqdm import tqdm

from ..core import FlowConfig, RenderConfig, FlowEngine, Trial, rasterize, fixation_frame
from ..core.engine import TrialLike, as_trial
from ..codecs import GifCodec

logger = logging.getLogger(__name__)


class GIFGenerator:
    """Render trials to an animated GIF.

    Per trial the animation holds one fixation frame followed by num_frames
    motion frames. Frames are rasterized as the engine produces them.
    """

    def __init__(
        self,
        config: Optional[FlowConfig] = None,
        render_config: Optional[RenderConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """Initialize generator.

        Args:
            config: FlowConfig (uses defaults if None)
            render_config: RenderConfig (uses defaults if None)
            rng: random source for dot placement
        """
        self.config = config or FlowConfig()
        self.render_config = render_config or RenderConfig()
        self.engine = FlowEngine(self.config, rng)

    def frame_durations(self, num_trials: int) -> List[float]:
        """Display time in seconds of every frame, in animation order."""
        per_trial = [self.config.fixation_duration] + [self.config.frame_duration] * self.config.num_frames
        return per_trial * num_trials

    def _images(self, trials: List[Trial], stats: Dict[str, Any], progress: bool) -> Iterator[np.ndarray]:
        fixation = fixation_frame(self.render_config)
        results = self.engine.simulate(trials)
        if progress:
            results = tqdm(results, total=len(trials), desc="Rendering")
        for result in results:
            yield fixation
            for frame in result.frames:
                stats["frames"] += 1
                stats["recycled"] += frame.recycled
                yield rasterize(frame, self.render_config)
            stats["trials"] += 1

    def generate(
        self,
        trials: Iterable[TrialLike],
        output_path: Union[str, Path],
        progress: bool = True,
    ) -> Dict[str, Any]:
        """Simulate, render and write trials to output_path.

        Args:
            trials: trials in presentation order
            output_path: GIF file to write
            progress: show progress bar

        Returns:
            dict with generation statistics
        """
        trials = [as_trial(t) for t in trials]
        if not trials:
            raise ValueError("No trials to render")

        output_path = Path(output_path)
        stats = {"trials": 0, "frames": 0, "recycled": 0, "path": str(output_path)}

        logger.info("Rendering %d trials x %d frames -> %s", len(trials), self.config.num_frames, output_path)
        GifCodec.save(
            output_path,
            self._images(trials, stats, progress),
            self.frame_durations(len(trials)),
        )
        return stats
