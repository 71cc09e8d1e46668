from __future__ import annotations

from dataclasses import dataclass

import pandas as pd
import statsmodels.formula.api as smf

from .models import COVARIATE, OUTCOME, PREDICTOR


@dataclass(frozen=True)
class Coefficient:
    """Point estimate and standard error of the predictor's coefficient."""

    estimate: float
    std_err: float


@dataclass(frozen=True)
class ReplicateResult:
    """
    The two regression fits of one replicate.

    ``unadjusted`` comes from ``Y ~ X``; ``adjusted`` from ``Y ~ X + Z``.
    Both are fit on the same sample, so any difference between them is
    down to the specification alone.
    """

    unadjusted: Coefficient
    adjusted: Coefficient

    @property
    def shift(self) -> float:
        """How far adjusting for the covariate moved the estimate."""
        return self.adjusted.estimate - self.unadjusted.estimate

    def as_row(self) -> dict[str, float]:
        return {
            "unadjusted_estimate": self.unadjusted.estimate,
            "unadjusted_std_err": self.unadjusted.std_err,
            "adjusted_estimate": self.adjusted.estimate,
            "adjusted_std_err": self.adjusted.std_err,
        }


def _predictor_coefficient(result) -> Coefficient:
    return Coefficient(
        estimate=float(result.params[PREDICTOR]),
        std_err=float(result.bse[PREDICTOR]),
    )


def fit_pair(sample: pd.DataFrame) -> ReplicateResult:
    """
    Fit the unadjusted and covariate-adjusted OLS regressions on ``sample``.

    Parameters
    ----------
    sample : pd.DataFrame
        Must contain ``X``, ``Y`` and ``Z`` columns, as produced by
        ``controlsim.models.generate``.

    Raises
    ------
    ValueError
        If a required column is missing.
    """
    for label, var in [("Predictor", PREDICTOR), ("Outcome", OUTCOME), ("Covariate", COVARIATE)]:
        if var not in sample.columns:
            raise ValueError(f"{label} column '{var}' not found in sample.")

    unadjusted = smf.ols(f"{OUTCOME} ~ {PREDICTOR}", data=sample).fit()
    adjusted = smf.ols(f"{OUTCOME} ~ {PREDICTOR} + {COVARIATE}", data=sample).fit()

    return ReplicateResult(
        unadjusted=_predictor_coefficient(unadjusted),
        adjusted=_predictor_coefficient(adjusted),
    )
