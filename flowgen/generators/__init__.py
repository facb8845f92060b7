"""FlowGen Generators: trial tables and GIF rendering."""

from .csv_generator import TrialCSVGenerator, SamplingSpec, load_trials_csv, write_trials_csv
from .gif_generator import GIFGenerator

__all__ = ["TrialCSVGenerator", "SamplingSpec", "load_trials_csv", "write_trials_csv", "GIFGenerator"]
