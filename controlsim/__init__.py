from .dag import DAG, CovariateRole
from .models import CausalModel, PathCoefficients, generate
from .fit import Coefficient, ReplicateResult, fit_pair
from .simulation import (
    ReplicateCollection, SimulationStudy, run_simulation, run_study, simulate_replicate,
)
from ._exceptions import GraphError, UnknownModelError

__all__ = [
    "DAG", "CovariateRole",
    "CausalModel", "PathCoefficients", "generate",
    "Coefficient", "ReplicateResult", "fit_pair",
    "ReplicateCollection", "SimulationStudy", "run_simulation", "run_study", "simulate_replicate",
    "GraphError", "UnknownModelError",
]
