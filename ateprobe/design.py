"""
Population and assignment generation for completely randomized experiments.

Every object here is an immutable value: generating a new population or a
new assignment never mutates an earlier one. Arrays are stored read-only.
"""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from ._exceptions import ConfigurationError
from .stream import RandomStream

DEFAULT_TAU0 = 0.2


def _frozen(values) -> np.ndarray:
    arr = np.array(values, dtype=float)
    arr.setflags(write=False)
    return arr


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def validate_sizes(n, n_treat) -> None:
    """
    Reject population / treated-count pairs that cannot form two
    non-empty arms.

    Raises
    ------
    ConfigurationError
        If ``n`` is not a positive integer or ``n_treat`` falls outside
        ``[1, n - 1]``.
    """
    if not _is_int(n) or n <= 0:
        raise ConfigurationError(f"N must be a positive integer, got {n!r}.")
    if not _is_int(n_treat):
        raise ConfigurationError(f"Ntreat must be an integer, got {n_treat!r}.")
    if not 1 <= n_treat <= n - 1:
        raise ConfigurationError(
            f"Ntreat must lie in [1, N-1] = [1, {n - 1}] so both arms are "
            f"non-empty, got Ntreat={n_treat}."
        )


@dataclass(frozen=True, eq=False)
class Population:
    """
    A finite population of units under a linear potential-outcomes model::

        y0 ~ N(0, 1)
        v  ~ N(0, 1)
        y1 = 0.5*y0 + 0.5*v + tau0
        te = y1 - y0
    """

    y0: np.ndarray
    v: np.ndarray
    y1: np.ndarray
    te: np.ndarray
    tau0: float

    @property
    def size(self) -> int:
        return int(self.y0.shape[0])

    @property
    def ate(self) -> float:
        """Finite-population average treatment effect, ``mean(te)``."""
        return float(np.mean(self.te))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"y0": self.y0, "v": self.v, "y1": self.y1, "te": self.te})


@dataclass(frozen=True, eq=False)
class Assignment:
    """Boolean treatment indicator, one entry per unit."""

    treated: np.ndarray

    @property
    def size(self) -> int:
        return int(self.treated.shape[0])

    @property
    def n_treated(self) -> int:
        return int(np.count_nonzero(self.treated))


@dataclass(frozen=True, eq=False)
class ObservedSample:
    """
    What the analyst sees after assignment: ``y`` is ``y1`` for treated
    units and ``y0`` for the rest.
    """

    y: np.ndarray
    treated: np.ndarray

    @property
    def size(self) -> int:
        return int(self.y.shape[0])

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"y": self.y, "treat": self.treated.astype(float)})


def generate_population(
    stream: RandomStream,
    n: int,
    tau0: float = DEFAULT_TAU0,
) -> Population:
    """
    Draw ``n`` units from the stream: all ``y0`` first, then all ``v``.
    """
    if not _is_int(n) or n <= 0:
        raise ConfigurationError(f"N must be a positive integer, got {n!r}.")
    y0 = stream.normal(size=n)
    v = stream.normal(size=n)
    y1 = 0.5 * y0 + 0.5 * v + tau0
    te = y1 - y0
    return Population(
        y0=_frozen(y0),
        v=_frozen(v),
        y1=_frozen(y1),
        te=_frozen(te),
        tau0=float(tau0),
    )


def generate_assignment(stream: RandomStream, n: int, n_treat: int) -> Assignment:
    """
    Completely randomized assignment of exactly ``n_treat`` of ``n`` units.

    Each unit gets an independent uniform key; units are ordered by key
    and the first ``n_treat`` in that order are treated. Every subset of
    size ``n_treat`` is equally likely and the treated count is exact.
    """
    validate_sizes(n, n_treat)
    keys = stream.uniform(size=n)
    order = np.argsort(keys, kind="stable")
    treated = np.zeros(n, dtype=bool)
    treated[order[:n_treat]] = True
    treated.setflags(write=False)
    return Assignment(treated=treated)


def observe(population: Population, assignment: Assignment) -> ObservedSample:
    """Reveal one potential outcome per unit according to the assignment."""
    if population.size != assignment.size:
        raise ValueError(
            f"Population has {population.size} units but the assignment "
            f"covers {assignment.size}."
        )
    y = np.where(assignment.treated, population.y1, population.y0)
    return ObservedSample(y=_frozen(y), treated=assignment.treated)
