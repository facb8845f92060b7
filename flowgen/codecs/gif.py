"""Animated GIF encoding for rendered stimulus frames."""

import itertools
from pathlib import Path
from typing import Iterable, List, Sequence, Union
import numpy as np
from PIL import GifImagePlugin, Image, ImageSequence


class GifCodec:
    """Encode RGB frames to a looping palette GIF and read back its timing.

    Each frame gets its own adaptive palette (up to 256 colors), stored as a
    local color table. Every frame is written, identical consecutive frames
    included. Durations are given in seconds; GIF stores them in 10 ms units.
    """

    COLORS = 256

    @classmethod
    def encode(cls, images: Iterable[np.ndarray], colors: int = COLORS) -> Iterable[Image.Image]:
        """Quantize [H, W, 3] uint8 RGB arrays to palette images (lazily)."""
        for img in images:
            yield cls.encode_frame(img, colors)

    @staticmethod
    def encode_frame(img: np.ndarray, colors: int = COLORS) -> Image.Image:
        arr = np.asarray(img)
        if arr.ndim != 3 or arr.shape[-1] != 3:
            raise ValueError(f"Expected [H, W, 3] RGB frame, got {arr.shape}")
        rgb = Image.fromarray(np.ascontiguousarray(arr, dtype=np.uint8))
        return rgb.quantize(colors=colors)

    @classmethod
    def save(
        cls,
        path: Union[str, Path],
        images: Iterable[np.ndarray],
        durations: Sequence[float],
        loop: int = 0,
        colors: int = COLORS,
    ) -> int:
        """Write frames to a GIF, one duration (seconds) per frame.

        Frames are written one by one rather than through ``save_all``, which
        merges identical consecutive frames. Returns the number of frames.
        """
        path = Path(path)
        frames = iter(cls.encode(images, colors))
        first = next(frames, None)
        if first is None:
            raise ValueError("Cannot write a GIF with no frames")
        durations = list(durations)
        path.parent.mkdir(parents=True, exist_ok=True)

        count = 0
        with open(path, "wb") as fp:
            header, _ = GifImagePlugin.getheader(first, info={"loop": loop})
            for chunk in header:
                fp.write(chunk)
            for frame in itertools.chain([first], frames):
                if count >= len(durations):
                    raise ValueError(f"Got more frames than durations ({len(durations)})")
                ms = int(round(durations[count] * 1000))
                for chunk in GifImagePlugin.getdata(frame, duration=ms, include_color_table=True):
                    fp.write(chunk)
                count += 1
            fp.write(b";")
        if count != len(durations):
            raise ValueError(f"Got {count} frames for {len(durations)} durations")
        return count

    @staticmethod
    def load_durations(path: Union[str, Path]) -> List[float]:
        """Per-frame display durations (seconds) of a GIF on disk."""
        with Image.open(path) as im:
            return [frame.info.get("duration", 0) / 1000.0 for frame in ImageSequence.Iterator(im)]
