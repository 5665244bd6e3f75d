from __future__ import annotations

import logging
import math
import warnings
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Callable, NamedTuple

import numpy as np
import pandas as pd

from ._exceptions import ConfigurationError, NumericalAnomalyWarning
from ._logging import log_event
from .design import (
    DEFAULT_TAU0,
    Assignment,
    Population,
    _is_int,
    generate_assignment,
    generate_population,
    observe,
    validate_sizes,
)
from .diagnostics._check import Assumption
from .estimators.difference_in_means import (
    DEFAULT_COV_TYPE,
    Z_95,
    confidence_interval,
    covers,
    estimate,
    validate_cov_type,
)
from .stream import RandomStream

logger = logging.getLogger(__name__)

FIXED_SEED = 12345
REDRAW_SEED = 54321

Observer = Callable[[int, Population, Assignment], None]


class Design(str, Enum):
    """How the population behaves across repetitions."""

    FIXED = "fixed"
    """One population drawn once; only the assignment is re-randomized."""

    REDRAW = "redraw"
    """A fresh population is drawn at the start of every repetition."""


_ASSUMPTIONS: dict[Design, list[Assumption]] = {
    Design.FIXED: [
        Assumption("Completely randomized assignment of exactly Ntreat units", testable=True),
        Assumption("Stable Unit Treatment Value Assumption (SUTVA)", testable=False),
        Assumption("Inference conditions on the realised population; target is its ATE", testable=False),
    ],
    Design.REDRAW: [
        Assumption("Completely randomized assignment of exactly Ntreat units", testable=True),
        Assumption("Stable Unit Treatment Value Assumption (SUTVA)", testable=False),
        Assumption("Units are i.i.d. draws from a super-population with ATE = tau0", testable=False),
    ],
}


def _coerce_design(design) -> Design:
    try:
        return Design(design)
    except ValueError:
        raise ConfigurationError(
            f"Unknown design {design!r}. Choose one of {[d.value for d in Design]}."
        ) from None


@dataclass(frozen=True)
class ExperimentConfig:
    """All inputs of a single experiment run."""

    design: Design
    n: int
    n_treat: int
    reps: int
    seed: int
    tau0: float = DEFAULT_TAU0
    cov_type: str = DEFAULT_COV_TYPE

    def __post_init__(self) -> None:
        object.__setattr__(self, "design", _coerce_design(self.design))

    def validate(self) -> None:
        """
        Raises
        ------
        ConfigurationError
            On the first invalid field. Nothing is drawn before this passes.
        """
        validate_sizes(self.n, self.n_treat)
        if not _is_int(self.reps) or self.reps <= 0:
            raise ConfigurationError(f"reps must be a positive integer, got {self.reps!r}.")
        if not _is_int(self.seed) or self.seed < 0:
            raise ConfigurationError(f"seed must be a non-negative integer, got {self.seed!r}.")
        if isinstance(self.tau0, bool) or not isinstance(self.tau0, (int, float, np.number)) \
                or not math.isfinite(self.tau0):
            raise ConfigurationError(f"tau0 must be a finite real number, got {self.tau0!r}.")
        validate_cov_type(self.cov_type)


class RepetitionResult(NamedTuple):
    """Point estimate, robust variance estimate and 0/1 coverage of one repetition."""

    b: float
    v_hat: float
    covered: int


class ExperimentResult:
    """
    Summary of one Monte Carlo experiment.

    Holds the full repetition series and exposes its reduction: the mean and
    sample variance of the estimates, the mean robust variance estimate, and
    the empirical coverage rate of the Wald interval against ``target``.
    """

    def __init__(
        self,
        config: ExperimentConfig,
        target: float,
        repetitions: pd.DataFrame,
    ) -> None:
        self._config = config
        self._target = float(target)
        self._repetitions = repetitions

        b = repetitions["b"]
        v_hat = repetitions["v_hat"]
        self._mean_b = float(b.mean(skipna=False))
        self._var_b = float(b.var(ddof=1, skipna=False)) if len(b) > 1 else math.nan
        self._mean_vhat = float(v_hat.mean(skipna=False))
        self._coverage_rate = float(repetitions["covered"].mean())
        self._n_nonfinite = int((~np.isfinite(b) | ~np.isfinite(v_hat)).sum())

    # ── Summary statistics ────────────────────────────────────────────────────

    @property
    def config(self) -> ExperimentConfig:
        return self._config

    @property
    def design(self) -> Design:
        return self._config.design

    @property
    def reps(self) -> int:
        return len(self._repetitions)

    @property
    def target(self) -> float:
        """The effect coverage is judged against: realised ATE (fixed) or tau0 (redraw)."""
        return self._target

    @property
    def mean_b(self) -> float:
        """Mean point estimate across repetitions."""
        return self._mean_b

    @property
    def var_b(self) -> float:
        """Sample variance (``ddof=1``) of the point estimates across repetitions."""
        return self._var_b

    @property
    def sd_b(self) -> float:
        return math.sqrt(self._var_b) if self._var_b >= 0 else math.nan

    @property
    def mean_vhat(self) -> float:
        """Mean robust variance estimate across repetitions."""
        return self._mean_vhat

    @property
    def mean_se(self) -> float:
        """Mean robust standard error across repetitions."""
        return float(np.sqrt(self._repetitions["v_hat"]).mean(skipna=False))

    @property
    def coverage_rate(self) -> float:
        """Fraction of repetitions whose interval contains ``target``."""
        return self._coverage_rate

    @property
    def coverage_se(self) -> float:
        """Binomial Monte Carlo standard error of the coverage rate."""
        p = self._coverage_rate
        return math.sqrt(p * (1.0 - p) / self.reps)

    @property
    def bias(self) -> float:
        return self._mean_b - self._target

    @property
    def n_nonfinite(self) -> int:
        """Repetitions whose estimate or variance was NaN or infinite."""
        return self._n_nonfinite

    @property
    def repetitions(self) -> pd.DataFrame:
        """Per-repetition ``b``, ``v_hat`` and ``covered``, indexed from 1."""
        return self._repetitions.copy()

    @property
    def assumptions(self) -> list[Assumption]:
        return list(_ASSUMPTIONS[self.design])

    def to_dict(self) -> dict:
        return {
            "design": self.design.value,
            "reps": self.reps,
            "target": self.target,
            "mean_b": self.mean_b,
            "var_b": self.var_b,
            "mean_vhat": self.mean_vhat,
            "coverage_rate": self.coverage_rate,
            "n_nonfinite": self.n_nonfinite,
        }

    # ── Reporting ─────────────────────────────────────────────────────────────

    def diagnose(self):
        """
        Run Monte Carlo sanity checks on this result.

        Currently runs:

        - **Bias**: the mean estimate is within three Monte Carlo standard
          errors of the target.
        - **Coverage**: the coverage rate is not below 95% by more than
          three binomial standard errors.
        - **Variance calibration**: the mean robust variance is at least
          80% of the Monte Carlo variance of the estimates.
        - **Finite results**: no repetition produced NaN or infinity.
        """
        from .diagnostics.coverage import diagnose
        return diagnose(self)

    def executive_summary(self) -> str:
        """Narrative explanation of the design, target, assumptions, and result."""
        from ._explain import explain_experiment
        return explain_experiment(self)

    def summary(self) -> str:
        """Concise tabular summary of the experiment's reduction."""
        cfg = self._config
        lines = [
            "",
            f"Coverage Experiment: {self.design.value} population",
            f"  N = {cfg.n}, Ntreat = {cfg.n_treat}, reps = {self.reps}, seed = {cfg.seed}",
            "─" * 50,
            f"  Target effect        : {self.target:>10.4f}",
            f"  Mean of b            : {self.mean_b:>10.4f}",
            f"  Bias                 : {self.bias:>+10.4f}",
            "",
            f"  Var(b) across reps   : {self.var_b:>10.6f}",
            f"  Mean robust Var(b)   : {self.mean_vhat:>10.6f}  ({cfg.cov_type})",
            f"  Coverage rate        : {self.coverage_rate:>10.4f}  (nominal 0.95)",
        ]
        if self.n_nonfinite:
            lines.append(f"  Non-finite reps      : {self.n_nonfinite:>10d}")
        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return self.summary()


class CoverageSimulation:
    """
    Monte Carlo evaluation of the difference-in-means estimator under
    completely randomized assignment.

    Each repetition draws a fresh assignment (and, for the ``redraw`` design,
    a fresh population), estimates the ATE with a robust variance, builds a
    95% Wald interval and records whether it covers the target.

    Example::

        sim = CoverageSimulation("fixed", n=1000, n_treat=500)
        result = sim.run(reps=800, seed=12345)
        print(result.summary())
    """

    def __init__(
        self,
        design: Design | str,
        n: int,
        n_treat: int,
        tau0: float = DEFAULT_TAU0,
        cov_type: str = DEFAULT_COV_TYPE,
    ) -> None:
        self._design = _coerce_design(design)
        self._n = n
        self._n_treat = n_treat
        self._tau0 = tau0
        self._cov_type = cov_type
        # reps and seed are checked again in run(); placeholders pass here
        ExperimentConfig(self._design, n, n_treat, 1, 0, tau0, cov_type).validate()

    def run(self, reps: int, seed: int, observer: Observer | None = None) -> ExperimentResult:
        """
        Run ``reps`` repetitions from a stream seeded with ``seed``.

        Parameters
        ----------
        reps : int
            Number of repetitions, positive.
        seed : int
            Non-negative seed for the single random stream of this run.
        observer : callable, optional
            Called as ``observer(rep, population, assignment)`` once per
            repetition, with ``rep`` counting from 1.

        Raises
        ------
        ConfigurationError
            If ``reps`` or ``seed`` is invalid. Raised before any draw.
        """
        config = ExperimentConfig(
            design=self._design,
            n=self._n,
            n_treat=self._n_treat,
            reps=reps,
            seed=seed,
            tau0=self._tau0,
            cov_type=self._cov_type,
        )
        config.validate()
        return _run(config, observer)


def _run(config: ExperimentConfig, observer: Observer | None) -> ExperimentResult:
    log_event(logger, logging.DEBUG, "experiment_start", **asdict(config))
    stream = RandomStream(config.seed)

    if config.design is Design.FIXED:
        population = generate_population(stream, config.n, config.tau0)
        target = population.ate
    else:
        population = None
        target = float(config.tau0)

    series: list[RepetitionResult] = []
    for rep in range(1, config.reps + 1):
        if config.design is Design.REDRAW:
            population = generate_population(stream, config.n, config.tau0)
        assignment = generate_assignment(stream, config.n, config.n_treat)
        if observer is not None:
            observer(rep, population, assignment)
        sample = observe(population, assignment)

        b, v_hat = estimate(sample, config.cov_type)
        lo, hi = confidence_interval(b, v_hat, Z_95)
        series.append(RepetitionResult(b, v_hat, int(covers(target, lo, hi))))

    repetitions = pd.DataFrame(series, columns=list(RepetitionResult._fields))
    repetitions.index = pd.RangeIndex(1, config.reps + 1, name="rep")
    result = ExperimentResult(config, target, repetitions)

    if result.n_nonfinite:
        log_event(
            logger, logging.WARNING, "nonfinite_repetitions",
            design=config.design.value, seed=config.seed, count=result.n_nonfinite,
        )
        warnings.warn(
            f"{result.n_nonfinite} of {result.reps} repetitions produced a non-finite "
            f"estimate or variance; summary statistics propagate these values.",
            NumericalAnomalyWarning,
            stacklevel=3,
        )
    log_event(logger, logging.DEBUG, "experiment_done", **result.to_dict())
    return result


def run_experiment(
    design: Design | str,
    n: int,
    n_treat: int,
    reps: int,
    seed: int,
    tau0: float = DEFAULT_TAU0,
    cov_type: str = DEFAULT_COV_TYPE,
    observer: Observer | None = None,
) -> ExperimentResult:
    """
    Validate the configuration, then run one experiment.

    Equivalent to ``CoverageSimulation(design, n, n_treat, tau0, cov_type).run(reps, seed)``.
    Calling twice with the same arguments gives bit-identical results.
    """
    config = ExperimentConfig(
        design=_coerce_design(design),
        n=n,
        n_treat=n_treat,
        reps=reps,
        seed=seed,
        tau0=tau0,
        cov_type=cov_type,
    )
    config.validate()
    return _run(config, observer)


def compare_designs(
    n: int = 1000,
    n_treat: int = 500,
    reps: int = 800,
    seeds: tuple[int, int] = (FIXED_SEED, REDRAW_SEED),
    tau0: float = DEFAULT_TAU0,
    cov_type: str = DEFAULT_COV_TYPE,
) -> dict[Design, ExperimentResult]:
    """
    Run the fixed-population design with ``seeds[0]`` and the redraw design
    with ``seeds[1]`` under otherwise identical settings.
    """
    fixed_seed, redraw_seed = seeds
    configs = [
        ExperimentConfig(Design.FIXED, n, n_treat, reps, fixed_seed, tau0, cov_type),
        ExperimentConfig(Design.REDRAW, n, n_treat, reps, redraw_seed, tau0, cov_type),
    ]
    for config in configs:
        config.validate()
    return {config.design: _run(config, None) for config in configs}


def summary_table(results: dict[Design, ExperimentResult]) -> pd.DataFrame:
    """One row per design with the summary record of each result."""
    rows = [result.to_dict() for result in results.values()]
    return pd.DataFrame(rows).set_index("design")
