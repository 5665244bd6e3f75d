from __future__ import annotations

import math

import numpy as np
import statsmodels.api as sm

from .._exceptions import ConfigurationError
from ..design import ObservedSample

DEFAULT_COV_TYPE = "HC1"
COV_TYPES = ("HC0", "HC1", "HC2", "HC3", "nonrobust")
Z_95 = 1.96


def validate_cov_type(cov_type: str) -> None:
    if cov_type not in COV_TYPES:
        raise ConfigurationError(
            f"Unknown covariance type {cov_type!r}. Choose one of {list(COV_TYPES)}."
        )


def estimate(sample: ObservedSample, cov_type: str = DEFAULT_COV_TYPE) -> tuple[float, float]:
    """
    Difference-in-means ATE estimate and its robust variance.

    Fits ``y ~ 1 + treat`` by OLS. The slope equals the treated mean minus
    the control mean. Its variance comes from the sandwich estimator; with
    the default ``HC1`` the sandwich is scaled by ``n / (n - 2)``, which for
    this regression reduces to::

        n / (n - 2) * (sum_T e_i^2 / n_T^2 + sum_C e_i^2 / n_C^2)

    so each arm keeps its own residual variance.

    Parameters
    ----------
    sample : ObservedSample
        Observed outcomes and treatment indicator.
    cov_type : str
        One of ``HC0``, ``HC1``, ``HC2``, ``HC3`` or ``nonrobust``.

    Returns
    -------
    (b, v_hat) : tuple[float, float]
        Non-finite values are returned as-is rather than raised.

    Raises
    ------
    ConfigurationError
        If either arm is empty or ``cov_type`` is unknown.
    """
    validate_cov_type(cov_type)
    n_treated = int(np.count_nonzero(sample.treated))
    if n_treated == 0 or n_treated == sample.size:
        raise ConfigurationError(
            f"Both arms must be non-empty; got {n_treated} treated of {sample.size} units."
        )

    exog = np.column_stack([np.ones(sample.size), sample.treated.astype(float)])
    with np.errstate(divide="ignore", invalid="ignore"):
        fit = sm.OLS(sample.y, exog).fit(cov_type=cov_type)
        v_hat = float(fit.cov_params()[1, 1])
    b = float(fit.params[1])
    return b, v_hat


def confidence_interval(b: float, v_hat: float, z: float = Z_95) -> tuple[float, float]:
    """
    Two-sided Wald interval ``b ± z * sqrt(v_hat)``.

    A NaN, infinite or negative ``v_hat`` gives NaN bounds.
    """
    half_width = z * math.sqrt(v_hat) if math.isfinite(v_hat) and v_hat >= 0 else math.nan
    return (b - half_width, b + half_width)


def covers(target: float, lo: float, hi: float) -> bool:
    """``True`` if ``lo <= target <= hi``. A non-finite bound or target gives ``False``."""
    if not (math.isfinite(lo) and math.isfinite(hi) and math.isfinite(target)):
        return False
    return bool(lo <= target <= hi)
