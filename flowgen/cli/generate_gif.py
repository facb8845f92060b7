"""CLI for rendering self-motion trials to an optic flow GIF."""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

from flowgen import FlowConfig, RenderConfig, Trial
from flowgen.generators import GIFGenerator, load_trials_csv

_FORMAT = "[%(levelname)s: %(filename)s: %(lineno)4d]: %(message)s"


def main():
    parser = argparse.ArgumentParser(description="Render optic flow trials to an animated GIF")
    parser.add_argument("csv", type=Path, nargs="?", help="Trial CSV (columns U, V, W, A, B, C)")
    parser.add_argument("--trial", type=float, nargs=6, action="append", default=[],
                        metavar=("U", "V", "W", "A", "B", "C"), help="Add a trial (repeatable)")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Output directory")
    parser.add_argument("--filename", type=str, default="OpticFlow.gif", help="Output GIF name")
    parser.add_argument("--config", type=Path, default=None,
                        help="YAML with 'flow' and/or 'render' sections")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for dot placement")
    parser.add_argument("--num-frames", type=int, default=None, help="Frames per trial")
    parser.add_argument("--num-dots", type=int, default=None, help="Dots in the field")
    parser.add_argument("--image-size", type=int, default=None, help="Frame size in pixels")
    parser.add_argument("--marker", type=str, default=None, choices=["triangle", "circle"], help="Dot marker")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bar")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=_FORMAT,
        stream=sys.stdout,
    )

    trials = load_trials_csv(args.csv) if args.csv else []
    trials += [Trial(tuple(t[:3]), tuple(t[3:])) for t in args.trial]
    if not trials:
        parser.error("no trials given: pass a CSV file and/or --trial U V W A B C")

    cfg = FlowConfig.from_yaml(args.config) if args.config else FlowConfig()
    render_cfg = RenderConfig.from_yaml(args.config) if args.config else RenderConfig()
    if args.num_frames is not None:
        cfg.num_frames = args.num_frames
    if args.num_dots is not None:
        cfg.num_dots = args.num_dots
    if args.image_size is not None:
        render_cfg.image_size = args.image_size
    if args.marker is not None:
        render_cfg.marker = args.marker

    gen = GIFGenerator(cfg, render_cfg, rng=np.random.default_rng(args.seed))
    results = gen.generate(trials, args.output / args.filename, progress=not args.no_progress)

    print(f"\nGeneration complete:")
    print(f"  Trials: {results['trials']}")
    print(f"  Motion frames: {results['frames']}")
    print(f"  Dots recycled: {results['recycled']}")
    print(f"  Output: {results['path']}")


if __name__ == "__main__":
    main()
