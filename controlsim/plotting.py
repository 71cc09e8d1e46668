"""
Comparative plots of a simulation study.

Every function draws onto an explicit matplotlib ``Axes`` or ``Figure``;
nothing here touches pyplot's current-figure state except ``plot_study``
when it is asked to create a new figure.
"""
from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from scipy.stats import gaussian_kde

from .dag import DAG
from .models import COVARIATE, OUTCOME, PREDICTOR
from .simulation import SimulationStudy

ADJUSTED_COLOR = "red"
UNADJUSTED_COLOR = "black"
LINE_WIDTH = 3
KDE_POINTS = 512
# Half the default bandwidth, as in a density(..., adjust = 0.5) plot
KDE_ADJUST = 0.5

_XLABELS = {"estimate": "bX (mean)", "std_err": "bX (SE)"}


def _layout(dag: DAG) -> dict[str, tuple[float, float]]:
    """Left-to-right by topological layer, spread vertically within a layer."""
    positions = {}
    for x, layer in enumerate(dag.layers()):
        for i, node in enumerate(layer):
            positions[node] = (float(x), (len(layer) - 1) / 2 - i)
    return positions


def plot_dag(
    ax: Axes,
    dag: DAG,
    title: str | None = None,
    observed: set[str] | None = None,
) -> Axes:
    """
    Draw ``dag`` on ``ax``. Nodes not in ``observed`` are drawn with a dashed
    outline as latent variables; by default X, Y and Z are observed.
    """
    observed = observed if observed is not None else {PREDICTOR, OUTCOME, COVARIATE}
    pos = _layout(dag)

    for cause, effect in dag.edges:
        ax.annotate(
            "",
            xy=pos[effect],
            xytext=pos[cause],
            arrowprops=dict(arrowstyle="-|>", color="black", shrinkA=14, shrinkB=14, lw=1.5),
        )
    for node, (x, y) in pos.items():
        ax.text(
            x, y, node,
            ha="center", va="center", fontsize=14,
            bbox=dict(
                boxstyle="circle", facecolor="white", edgecolor="black",
                linestyle="-" if node in observed else "--",
            ),
        )

    xs = [x for x, _ in pos.values()] or [0.0]
    ys = [y for _, y in pos.values()] or [0.0]
    ax.set_xlim(min(xs) - 0.5, max(xs) + 0.5)
    ax.set_ylim(min(ys) - 0.75, max(ys) + 0.75)
    ax.set_axis_off()
    if title:
        ax.set_title(title)
    return ax


def _kde(values: np.ndarray) -> gaussian_kde:
    kde = gaussian_kde(values)
    kde.set_bandwidth(kde.factor * KDE_ADJUST)
    return kde


def plot_density(
    ax: Axes,
    adjusted: np.ndarray,
    unadjusted: np.ndarray,
    xlim: tuple[float, float],
    xlabel: str,
) -> Axes:
    """
    Overlay Gaussian kernel density estimates of the adjusted (red) and
    unadjusted (black) sampling distributions on a fixed x-range.

    Raises ``ValueError`` if either sample has fewer than two values.
    """
    for label, values in [("adjusted", adjusted), ("unadjusted", unadjusted)]:
        if np.size(values) < 2:
            raise ValueError(
                f"A density needs at least two {label} values, got {np.size(values)}."
            )

    grid = np.linspace(xlim[0], xlim[1], KDE_POINTS)
    ax.plot(grid, _kde(adjusted)(grid), color=ADJUSTED_COLOR, lw=LINE_WIDTH,
            label="adjusted (Y ~ X + Z)")
    ax.plot(grid, _kde(unadjusted)(grid), color=UNADJUSTED_COLOR, lw=LINE_WIDTH,
            label="unadjusted (Y ~ X)")
    ax.set_xlim(xlim)
    ax.set_xlabel(xlabel)
    ax.set_ylabel("Density")
    return ax


def plot_study(study: SimulationStudy, fig: Figure | None = None) -> Figure:
    """
    Render the 3×3 comparison grid.

    Row 1 shows each model's DAG; row 2 the sampling densities of the
    predictor estimate; row 3 those of its standard error. Within a row
    every panel shares the global min–max range across all models.

    Raises ``ValueError`` if any model has fewer than two replicates.
    """
    for model, collection in study.items():
        if len(collection) < 2:
            raise ValueError(
                f"Plotting needs at least two replicates per model; "
                f"{model.value} has {len(collection)}."
            )

    if fig is None:
        fig = plt.figure(figsize=(12, 10))
    axes = fig.subplots(3, 3)

    for col, model in enumerate(study):
        plot_dag(axes[0, col], model.dag, model.title)

    for row, statistic in enumerate(("estimate", "std_err"), start=1):
        xlim = study.limits(statistic)
        for col, collection in enumerate(study.values()):
            ax = plot_density(
                axes[row, col],
                collection.values(statistic, "adjusted"),
                collection.values(statistic, "unadjusted"),
                xlim,
                _XLABELS[statistic],
            )
            if statistic == "estimate":
                ax.axvline(collection.true_effect, color="grey", linestyle=":", lw=1)

    axes[1, 0].legend(frameon=False, fontsize="small")
    fig.tight_layout()
    return fig
