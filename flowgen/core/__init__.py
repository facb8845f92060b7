"""FlowGen Core: self-motion dot field simulation and projection."""

from .config import FlowConfig, RenderConfig, Trial, ConfigError, trials_from_arrays
from .profile import VelocityProfile, gaussian_weights, velocity_profile
from .dots import DotField, Frame, project
from .engine import FlowEngine, TrialResult, simulate
from .raster import rasterize, fixation_frame, screen_to_pixels, marker_radius

__all__ = [
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
    "screen_to_pixels",
    "marker_radius",
]
