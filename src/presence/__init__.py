from .config import Config, cfg
from .input_data import Snapshot
from .main import run_simulation
from .resolver import StatusResolver
from .simulator import CoverageSimulator, simulate

__all__ = [
    "Config",
    "cfg",
    "Snapshot",
    "StatusResolver",
    "CoverageSimulator",
    "simulate",
    "run_simulation",
]
