from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ._check import DiagnosticCheck, DiagnosticReport

if TYPE_CHECKING:
    from ..simulation import ExperimentResult

NOMINAL_COVERAGE = 0.95
_MC_SIGMAS = 3.0
_MIN_VARIANCE_RATIO = 0.8


def _check_bias(result: ExperimentResult) -> DiagnosticCheck:
    """
    The mean estimate should sit within three Monte Carlo standard errors
    of the target. A larger gap means the estimator is biased for this
    target, or that the target was computed against the wrong population.
    """
    mc_se = result.sd_b / math.sqrt(result.reps)
    gap = abs(result.bias)
    bound = _MC_SIGMAS * mc_se
    passed = gap <= bound

    if passed:
        detail = f"|mean(b) - target| = {gap:.4f}  (≤ 3 MC SE = {bound:.4f})"
    else:
        detail = (
            f"|mean(b) - target| = {gap:.4f}  (> 3 MC SE = {bound:.4f})  "
            f"The estimator does not centre on the target for this design."
        )
    return DiagnosticCheck(name="Bias", passed=passed, detail=detail)


def _check_coverage(result: ExperimentResult) -> DiagnosticCheck:
    """
    Over-coverage is expected under the fixed design, where the robust
    variance overstates the finite-population variance. Only a shortfall
    beyond binomial noise fails.
    """
    mc_se = math.sqrt(NOMINAL_COVERAGE * (1.0 - NOMINAL_COVERAGE) / result.reps)
    floor = NOMINAL_COVERAGE - _MC_SIGMAS * mc_se
    rate = result.coverage_rate
    passed = rate >= floor

    if passed:
        detail = f"coverage {rate:.4f}  (≥ {floor:.4f})"
    else:
        detail = (
            f"coverage {rate:.4f}  (< {floor:.4f})  "
            f"The interval under-covers: the variance estimate is too small."
        )
    return DiagnosticCheck(name="Coverage", passed=passed, detail=detail)


def _check_variance_calibration(result: ExperimentResult) -> DiagnosticCheck:
    ratio = result.mean_vhat / result.var_b if result.var_b > 0 else math.nan
    passed = ratio >= _MIN_VARIANCE_RATIO

    if passed:
        detail = f"mean(v_hat) / Var(b) = {ratio:.3f}  (≥ {_MIN_VARIANCE_RATIO})"
    else:
        detail = (
            f"mean(v_hat) / Var(b) = {ratio:.3f}  (< {_MIN_VARIANCE_RATIO})  "
            f"The robust variance understates the sampling variance."
        )
    return DiagnosticCheck(name="Variance calibration", passed=passed, detail=detail)


def _check_finite(result: ExperimentResult) -> DiagnosticCheck:
    count = result.n_nonfinite
    if count == 0:
        return DiagnosticCheck(name="Finite results", passed=True, detail="all repetitions finite")
    return DiagnosticCheck(
        name="Finite results",
        passed=False,
        detail=f"{count} of {result.reps} repetitions produced NaN or infinity",
    )


def diagnose(result: ExperimentResult) -> DiagnosticReport:
    checks = [
        _check_bias(result),
        _check_coverage(result),
        _check_variance_calibration(result),
        _check_finite(result),
    ]
    return DiagnosticReport(checks=checks, design=result.design.value, reps=result.reps)
