"""FlowGen: optic flow stimuli from simulated self-motion through a dot field.

Main components:
- core: Velocity profiles, dot field simulation and projection (FlowConfig, FlowEngine)
- generators: Trial tables and GIF rendering
- codecs: Animation encoding
"""

from .core import (
    FlowConfig,
    RenderConfig,
    Trial,
    ConfigError,
    trials_from_arrays,
    VelocityProfile,
    gaussian_weights,
    velocity_profile,
    DotField,
    Frame,
    project,
    FlowEngine,
    TrialResult,
    simulate,
    rasterize,
    fixation_frame,
)
from .generators import TrialCSVGenerator, GIFGenerator, load_trials_csv
from .codecs import GifCodec

__version__ = "0.1.0"
__all__ = [
    # Core
    "FlowConfig",
    "RenderConfig",
    "Trial",
    "ConfigError",
    "trials_from_arrays",
    "VelocityProfile",
    "gaussian_weights",
    "velocity_profile",
    "DotField",
    "Frame",
    "project",
    "FlowEngine",
    "TrialResult",
    "simulate",
    "rasterize",
    "fixation_frame",
    # Generators
    "TrialCSVGenerator",
    "GIFGenerator",
    "load_trials_csv",
    # Codecs
    "GifCodec",
]
