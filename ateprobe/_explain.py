"""
Narrative explanation renderer for experiment results.

``explain_experiment`` takes an ``ExperimentResult`` and returns a formatted
multi-line string. ``ExperimentResult.executive_summary()`` calls it.
"""
from __future__ import annotations

from .simulation import Design

_SEP = "━" * 66


# ── Shared helpers ─────────────────────────────────────────────────────────────

def _pct(x: float) -> str:
    return f"{100.0 * x:.1f}%"


def _assumptions_section(assumptions: list) -> str:
    n = len(assumptions)
    n_u = sum(1 for a in assumptions if not a.testable)
    n_t = n - n_u

    if n_u == n:
        intro = f"All {n} assumptions are part of how the design is defined."
    elif n_t == n:
        intro = f"All {n} assumptions are checked by the simulation itself."
    else:
        intro = (
            f"{n_u} of the {n} assumptions {'is' if n_u == 1 else 'are'} part of how "
            f"the design is defined; {n_t} {'is' if n_t == 1 else 'are'} enforced "
            f"by the simulation."
        )

    lines = ["ASSUMPTIONS", intro, ""]
    for a in assumptions:
        lines.append(f"  {a.fmt_tag()}  {a.name}")
    return "\n".join(lines)


# ── Section builders ───────────────────────────────────────────────────────────

def _design_section(result) -> str:
    cfg = result.config
    if result.design is Design.FIXED:
        body = (
            f"One population of N = {cfg.n} units was drawn once and held fixed. "
            f"Across {result.reps} repetitions only the treatment assignment was "
            f"re-randomized, {cfg.n_treat} treated each time. The target is the "
            f"realised finite-population ATE of that one population, {result.target:.4f}."
        )
    else:
        body = (
            f"A fresh population of N = {cfg.n} units was drawn in each of "
            f"{result.reps} repetitions, with {cfg.n_treat} treated each time. "
            f"The target is the super-population ATE, tau0 = {result.target:.4f}, "
            f"known before any draws."
        )
    return "\n".join(["DESIGN", body])


def _result_section(result) -> str:
    lines = [
        "RESULT",
        f"The mean estimate is {result.mean_b:.4f} against a target of "
        f"{result.target:.4f} (bias {result.bias:+.4f}). The estimates vary with "
        f"Var(b) = {result.var_b:.6f}; the mean robust variance estimate is "
        f"{result.mean_vhat:.6f}. The nominal 95% interval covered the target in "
        f"{_pct(result.coverage_rate)} of repetitions "
        f"(Monte Carlo SE {_pct(result.coverage_se)}).",
    ]
    if result.n_nonfinite:
        lines.append(
            f"{result.n_nonfinite} repetition(s) produced non-finite values; the "
            f"summary statistics above include them."
        )
    return "\n".join(lines)


def _caveats_section(result) -> str:
    if result.design is Design.FIXED:
        text = (
            "Holding the population fixed, the robust variance estimates the sum of "
            "the two arm variances but ignores the negative term from the variance of "
            "unit-level effects, so it is conservative and coverage above 95% is "
            "expected when effects are heterogeneous."
        )
    else:
        text = (
            "Redrawing the population each repetition adds sampling variance, which "
            "the robust variance accounts for, so coverage should be close to 95% up "
            "to the finite-sample inflation of the normal critical value."
        )
    return "\n".join(["CAVEATS", text])


# ── Public entry point ─────────────────────────────────────────────────────────

def explain_experiment(result) -> str:
    cfg = result.config
    blocks = [
        "\n".join([_SEP, "Executive Summary — Difference-in-Means Coverage Experiment",
                   f"  design: {result.design.value}  |  variance: {cfg.cov_type}  |  seed: {cfg.seed}",
                   _SEP]),

        "\n".join([
            "METHOD",
            "Each repetition estimates the ATE as the difference in mean outcomes "
            "between treated and control units, the slope of an OLS regression of the "
            f"outcome on the treatment indicator. Its variance uses the {cfg.cov_type} "
            "heteroskedasticity-robust sandwich, and a Wald interval "
            "b ± 1.96·sqrt(v_hat) is checked against the target.",
        ]),

        _design_section(result),
        _assumptions_section(result.assumptions),
        _result_section(result),
        _caveats_section(result),

        _SEP,
    ]
    return "\n\n".join(blocks)
