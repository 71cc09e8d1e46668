"""
The three causal models under which synthetic samples are generated.

Each model wires the predictor ``X``, the outcome ``Y`` and the covariate
``Z`` differently, with an unobserved ``u`` available as a common cause:

    cc  (case-control bias)   X → Y → Z
    mc  (multiple causes)     X → Y ← Z
    cv  (common variance)     X → Y ← u → Z

All noise terms are unit-variance normals.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np
import pandas as pd

from .dag import DAG
from ._exceptions import UnknownModelError

PREDICTOR = "X"
OUTCOME = "Y"
COVARIATE = "Z"
LATENT = "u"


@dataclass(frozen=True)
class PathCoefficients:
    """
    Strengths of the generative causal links.

    ``z_to_y`` weights Z → Y in the multiple-causes model and Y → Z in the
    case-control model; it is the single Y–Z path weight in both.
    """

    x_to_y: float = 1.0
    z_to_y: float = 1.0
    u_to_y: float = 1.0
    u_to_z: float = 1.0


class CausalModel(Enum):
    """Closed set of causal wirings, keyed by their short tag."""

    CASE_CONTROL = "cc"
    MULTIPLE_CAUSES = "mc"
    COMMON_VARIANCE = "cv"

    @classmethod
    def parse(cls, selector: CausalModel | str) -> CausalModel:
        """Accept a ``CausalModel`` or its tag; anything else is an error."""
        if isinstance(selector, cls):
            return selector
        try:
            return cls(selector)
        except ValueError:
            valid = ", ".join(repr(m.value) for m in cls)
            raise UnknownModelError(
                f"Unknown causal model {selector!r}. Expected one of: {valid}."
            ) from None

    @property
    def title(self) -> str:
        return _TITLES[self]

    @property
    def dag(self) -> DAG:
        """A fresh DAG describing how this model generates X, Y and Z."""
        dag = DAG()
        if self is CausalModel.CASE_CONTROL:
            dag.assume(PREDICTOR).causes(OUTCOME)
            dag.assume(OUTCOME).causes(COVARIATE)
        elif self is CausalModel.MULTIPLE_CAUSES:
            dag.assume(PREDICTOR).causes(OUTCOME)
            dag.assume(COVARIATE).causes(OUTCOME)
        else:
            dag.assume(PREDICTOR).causes(OUTCOME)
            dag.assume(LATENT).causes(OUTCOME, COVARIATE)
        return dag


_TITLES = {
    CausalModel.CASE_CONTROL: "Case-control bias",
    CausalModel.MULTIPLE_CAUSES: "Multiple causes",
    CausalModel.COMMON_VARIANCE: "Common variance",
}


def generate(
    model: CausalModel | str,
    n: int = 100,
    coefficients: PathCoefficients | None = None,
    rng: np.random.Generator | None = None,
) -> pd.DataFrame:
    """
    Draw one synthetic sample of size ``n`` under ``model``.

    X and u are always drawn first, in that order, so every model consumes
    the random stream identically up to the point where the wiring differs.
    u is never returned: it is the unobserved common cause.

    Parameters
    ----------
    model : CausalModel or str
        ``"cc"``, ``"mc"`` or ``"cv"``.
    n : int
        Number of observations, must be positive.
    coefficients : PathCoefficients, optional
        Path weights; all 1 by default.
    rng : numpy.random.Generator, optional
        Source of randomness. A fresh unseeded generator is used if omitted.

    Returns
    -------
    pd.DataFrame
        Columns ``X``, ``Y``, ``Z``, each of length ``n``.

    Raises
    ------
    UnknownModelError
        If ``model`` is not a recognised selector.
    ValueError
        If ``n`` is not a positive integer.
    """
    model = CausalModel.parse(model)
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n < 1:
        raise ValueError(f"Sample size must be a positive integer, got {n!r}.")
    b = coefficients if coefficients is not None else PathCoefficients()
    if rng is None:
        rng = np.random.default_rng()

    x = rng.normal(size=n)
    u = rng.normal(size=n)

    if model is CausalModel.CASE_CONTROL:
        y = rng.normal(b.x_to_y * x)
        z = rng.normal(b.z_to_y * y)
    elif model is CausalModel.MULTIPLE_CAUSES:
        z = rng.normal(size=n)
        y = rng.normal(b.x_to_y * x + b.z_to_y * z)
    else:
        z = rng.normal(b.u_to_z * u)
        y = rng.normal(b.x_to_y * x + b.u_to_y * u)

    return pd.DataFrame({PREDICTOR: x, OUTCOME: y, COVARIATE: z})
