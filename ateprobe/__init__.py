from .stream import RandomStream
from .design import (
    Population, Assignment, ObservedSample,
    generate_population, generate_assignment, observe,
)
from .estimators import estimate, confidence_interval, covers
from .simulation import (
    Design, ExperimentConfig, CoverageSimulation, ExperimentResult, RepetitionResult,
    run_experiment, compare_designs, summary_table,
)
from .diagnostics import Assumption, DiagnosticCheck, DiagnosticReport
from ._exceptions import ConfigurationError, NumericalAnomalyWarning
from ._logging import configure_logging

__all__ = [
    "RandomStream",
    "Population", "Assignment", "ObservedSample",
    "generate_population", "generate_assignment", "observe",
    "estimate", "confidence_interval", "covers",
    "Design", "ExperimentConfig", "CoverageSimulation", "ExperimentResult", "RepetitionResult",
    "run_experiment", "compare_designs", "summary_table",
    "Assumption", "DiagnosticCheck", "DiagnosticReport",
    "ConfigurationError", "NumericalAnomalyWarning",
    "configure_logging",
]
