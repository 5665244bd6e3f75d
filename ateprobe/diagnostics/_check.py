from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Assumption:
    """
    A modelling assumption behind an experiment design.

    Every experiment result exposes its assumptions via ``result.assumptions``.
    The ``testable`` flag marks whether the simulation itself can confirm the
    assumption or whether it is part of how the design is defined.
    """

    name: str
    """Human-readable description of the assumption."""

    testable: bool
    """``True`` if the assumption can be checked from simulated data."""

    def fmt_tag(self) -> str:
        """Return a fixed-width bracketed testability label for use in summary output."""
        return "[  testable  ]" if self.testable else "[ untestable ]"


class DiagnosticCheck:
    """Result of a single diagnostic check."""

    def __init__(self, name: str, passed: bool, detail: str) -> None:
        self.name = name
        self.passed = passed
        self.detail = detail

    def __repr__(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        return f"DiagnosticCheck({status!r}, {self.name!r})"


class DiagnosticReport:
    """
    Diagnostic checks run against one experiment result.

    Obtain via ``ExperimentResult.diagnose()``.

    Example::

        result = run_experiment("fixed", n=1000, n_treat=500, reps=800, seed=12345)
        report = result.diagnose()
        print(report.summary())
    """

    def __init__(self, checks: list[DiagnosticCheck], design: str, reps: int) -> None:
        self._checks = checks
        self._design = design
        self._reps = reps

    @property
    def checks(self) -> list[DiagnosticCheck]:
        """All checks, in the order they were run."""
        return list(self._checks)

    @property
    def passed(self) -> bool:
        """``True`` if every check passed."""
        return all(c.passed for c in self._checks)

    @property
    def failed_checks(self) -> list[DiagnosticCheck]:
        """Only the checks that did not pass."""
        return [c for c in self._checks if not c.passed]

    def summary(self) -> str:
        lines = [
            "",
            f"Diagnostic Report: {self._design} population, {self._reps} reps",
            "─" * 50,
        ]
        for check in self._checks:
            status = "PASS" if check.passed else "FAIL"
            lines.append(f"  [{status}]  {check.name}: {check.detail}")
        lines.append("")
        if self.passed:
            lines.append("  All checks passed.")
        else:
            n = len(self.failed_checks)
            lines.append(f"  {n} check(s) failed, see above.")
        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return self.summary()
