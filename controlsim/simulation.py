"""
Monte Carlo replication of the generate-then-fit engine.

Every replicate draws from its own random stream: a root
``numpy.random.SeedSequence`` is spawned into one child per replicate, so
streams are independent across workers and the results of a seeded run do
not depend on how many workers computed them.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from .fit import ReplicateResult, fit_pair
from .models import COVARIATE, OUTCOME, PREDICTOR, CausalModel, PathCoefficients, generate

logger = logging.getLogger(__name__)

DEFAULT_N = 100
DEFAULT_REPLICATES = 10_000
DEFAULT_N_JOBS = 4

STATISTICS = ("estimate", "std_err")
SPECIFICATIONS = ("unadjusted", "adjusted")
COLUMNS = [f"{spec}_{stat}" for stat in STATISTICS for spec in SPECIFICATIONS]


def simulate_replicate(
    model: CausalModel | str,
    n: int = DEFAULT_N,
    coefficients: PathCoefficients | None = None,
    rng: np.random.Generator | None = None,
) -> ReplicateResult:
    """Generate one sample under ``model`` and fit both regressions on it."""
    sample = generate(model, n=n, coefficients=coefficients, rng=rng)
    return fit_pair(sample)


def _seed_sequence(seed) -> np.random.SeedSequence:
    """A fresh SeedSequence; a passed-in one is rebuilt without its spawn history."""
    if isinstance(seed, np.random.SeedSequence):
        return np.random.SeedSequence(
            seed.entropy, spawn_key=seed.spawn_key, pool_size=seed.pool_size,
        )
    return np.random.SeedSequence(seed)


def _replicate_from_seed(model, n, coefficients, seed) -> ReplicateResult:
    return simulate_replicate(model, n=n, coefficients=coefficients, rng=np.random.default_rng(seed))


def _check_validity(statistic: str, specification: str | None = None) -> None:
    if statistic not in STATISTICS:
        raise ValueError(f"Unknown statistic {statistic!r}. Expected one of: {STATISTICS}.")
    if specification is not None and specification not in SPECIFICATIONS:
        raise ValueError(
            f"Unknown specification {specification!r}. Expected one of: {SPECIFICATIONS}."
        )


class ReplicateCollection:
    """
    All replicate results for one causal model.

    Indexed by replicate number, with one column per specification and
    statistic: ``unadjusted_estimate``, ``adjusted_estimate``,
    ``unadjusted_std_err`` and ``adjusted_std_err``. The collection is not
    modified after construction; accessors hand out copies.
    """

    def __init__(self, model: CausalModel, frame: pd.DataFrame, true_effect: float) -> None:
        missing = [c for c in COLUMNS if c not in frame.columns]
        if missing:
            raise ValueError(f"Replicate frame is missing columns: {missing}")
        self._model = model
        self._frame = frame[COLUMNS].copy()
        self._frame.index.name = "replicate"
        self._true_effect = true_effect

    @classmethod
    def from_results(
        cls, model: CausalModel, results: list[ReplicateResult], true_effect: float
    ) -> ReplicateCollection:
        frame = pd.DataFrame([r.as_row() for r in results], columns=COLUMNS)
        return cls(model, frame, true_effect)

    @property
    def model(self) -> CausalModel:
        return self._model

    @property
    def true_effect(self) -> float:
        """The predictor coefficient used to generate the data."""
        return self._true_effect

    @property
    def frame(self) -> pd.DataFrame:
        """A copy of the per-replicate results."""
        return self._frame.copy()

    def __len__(self) -> int:
        return len(self._frame)

    def values(self, statistic: str, specification: str) -> np.ndarray:
        """
        One statistic across replicates, e.g. ``values("estimate", "adjusted")``.
        """
        _check_validity(statistic, specification)
        return self._frame[f"{specification}_{statistic}"].to_numpy(copy=True)

    def range(self, statistic: str) -> tuple[float, float]:
        """Min and max of ``statistic`` over both specifications."""
        _check_validity(statistic)
        both = self._frame[[f"{spec}_{statistic}" for spec in SPECIFICATIONS]].to_numpy()
        return float(both.min()), float(both.max())

    def summary_frame(self) -> pd.DataFrame:
        """
        Per-specification sampling summary: mean and sd of the estimate,
        bias against the true effect, and mean standard error.
        """
        rows = {}
        for spec in SPECIFICATIONS:
            est = self._frame[f"{spec}_estimate"]
            rows[spec] = {
                "mean": est.mean(),
                "sd": est.std(ddof=1),
                "bias": est.mean() - self._true_effect,
                "mean_std_err": self._frame[f"{spec}_std_err"].mean(),
            }
        return pd.DataFrame.from_dict(rows, orient="index")

    def summary(self) -> str:
        table = self.summary_frame()
        role = self._model.dag.covariate_role(COVARIATE, PREDICTOR, OUTCOME)
        lines = [
            "",
            f"{self._model.title} ({self._model.value}): {len(self)} replicates",
            f"  Covariate role : {role.value}",
            f"  True effect    : {self._true_effect:.4f}",
            "─" * 50,
            f"  {'':<12}{'mean':>9}{'sd':>9}{'bias':>10}{'mean SE':>10}",
        ]
        for spec, row in table.iterrows():
            lines.append(
                f"  {spec:<12}{row['mean']:>9.4f}{row['sd']:>9.4f}"
                f"{row['bias']:>+10.4f}{row['mean_std_err']:>10.4f}"
            )
        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return self.summary()


class SimulationStudy(Mapping):
    """
    Replicate collections for every causal model, keyed by ``CausalModel``.

    The key set is fixed: construction fails unless each of the three
    models is present, and iteration always follows the order cc, mc, cv.
    """

    def __init__(self, collections: Mapping[CausalModel, ReplicateCollection]) -> None:
        keys = {CausalModel.parse(k) for k in collections}
        missing = [m.value for m in CausalModel if m not in keys]
        if missing:
            raise ValueError(f"Simulation study is missing models: {missing}")
        by_model = {CausalModel.parse(k): v for k, v in collections.items()}
        self._collections = {m: by_model[m] for m in CausalModel}

    def __getitem__(self, model: CausalModel | str) -> ReplicateCollection:
        return self._collections[CausalModel.parse(model)]

    def __iter__(self) -> Iterator[CausalModel]:
        return iter(self._collections)

    def __len__(self) -> int:
        return len(self._collections)

    def __contains__(self, model) -> bool:
        try:
            return CausalModel.parse(model) in self._collections
        except ValueError:
            return False

    def limits(self, statistic: str) -> tuple[float, float]:
        """
        Global min and max of ``statistic`` across every model and both
        specifications, for a shared x-axis.
        """
        ranges = [c.range(statistic) for c in self._collections.values()]
        return min(lo for lo, _ in ranges), max(hi for _, hi in ranges)

    def summary(self) -> str:
        return "\n".join(c.summary() for c in self._collections.values())

    def __repr__(self) -> str:
        return self.summary()


def run_simulation(
    model: CausalModel | str,
    replicates: int = DEFAULT_REPLICATES,
    n: int = DEFAULT_N,
    coefficients: PathCoefficients | None = None,
    n_jobs: int = DEFAULT_N_JOBS,
    seed=None,
) -> ReplicateCollection:
    """
    Run ``replicates`` independent replicates of one causal model.

    Parameters
    ----------
    model : CausalModel or str
        ``"cc"``, ``"mc"`` or ``"cv"``.
    replicates : int
        Number of independent samples to draw and fit.
    n : int
        Observations per sample.
    coefficients : PathCoefficients, optional
        Path weights; all 1 by default.
    n_jobs : int
        joblib worker count.
    seed : int, SeedSequence or None
        Root seed. Each replicate gets its own spawned child, so a given
        seed reproduces the same collection for any ``n_jobs``.

    Raises
    ------
    UnknownModelError
        If ``model`` is not a recognised selector.
    ValueError
        If ``replicates`` is less than 1.
    """
    model = CausalModel.parse(model)
    if replicates < 1:
        raise ValueError(f"Number of replicates must be at least 1, got {replicates!r}.")
    coefficients = coefficients if coefficients is not None else PathCoefficients()
    children = _seed_sequence(seed).spawn(replicates)

    logger.info(
        "Simulating %s: %d replicates of n=%d on %d worker(s)",
        model.value, replicates, n, n_jobs,
    )
    results = Parallel(n_jobs=n_jobs)(
        delayed(_replicate_from_seed)(model, n, coefficients, child) for child in children
    )
    logger.debug("Finished %s: %d replicates collected", model.value, len(results))

    return ReplicateCollection.from_results(model, results, coefficients.x_to_y)


def run_study(
    replicates: int = DEFAULT_REPLICATES,
    n: int = DEFAULT_N,
    coefficients: PathCoefficients | None = None,
    n_jobs: int = DEFAULT_N_JOBS,
    seed=None,
) -> SimulationStudy:
    """Run ``run_simulation`` for every causal model, each on its own child seed."""
    seeds = _seed_sequence(seed).spawn(len(CausalModel))
    return SimulationStudy({
        model: run_simulation(
            model, replicates=replicates, n=n, coefficients=coefficients,
            n_jobs=n_jobs, seed=child,
        )
        for model, child in zip(CausalModel, seeds)
    })
