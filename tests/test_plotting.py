import matplotlib.pyplot as plt
import numpy as np
import pytest
from scipy.stats import gaussian_kde

from controlsim import CausalModel, run_study
from controlsim.plotting import (
    ADJUSTED_COLOR, KDE_ADJUST, UNADJUSTED_COLOR, _kde, plot_dag, plot_density, plot_study,
)


@pytest.fixture(scope="module")
def small_study():
    return run_study(replicates=30, n=50, n_jobs=1, seed=8)


@pytest.fixture
def ax():
    fig, ax = plt.subplots()
    yield ax
    plt.close(fig)


class TestPlotDAG:
    def test_draws_every_node_and_title(self, ax):
        dag = CausalModel.COMMON_VARIANCE.dag
        plot_dag(ax, dag, "Common variance")
        labels = {t.get_text() for t in ax.texts if t.get_text()}
        assert labels == dag.nodes
        assert ax.get_title() == "Common variance"

    def test_latent_node_is_dashed(self, ax):
        plot_dag(ax, CausalModel.COMMON_VARIANCE.dag)
        styles = {
            t.get_text(): t.get_bbox_patch().get_linestyle()
            for t in ax.texts if t.get_text()
        }
        assert styles["u"] != styles["X"]


class TestPlotDensity:
    def test_two_curves_on_fixed_range(self, ax):
        rng = np.random.default_rng(0)
        plot_density(ax, rng.normal(size=200), rng.normal(size=200), (-4.0, 4.0), "bX (mean)")
        assert [line.get_color() for line in ax.lines] == [ADJUSTED_COLOR, UNADJUSTED_COLOR]
        assert ax.get_xlim() == pytest.approx((-4.0, 4.0))
        assert ax.get_xlabel() == "bX (mean)"

    def test_bandwidth_is_half_the_default(self, ax):
        rng = np.random.default_rng(1)
        adjusted, unadjusted = rng.normal(size=300), rng.normal(size=300)
        assert _kde(adjusted).factor == pytest.approx(gaussian_kde(adjusted).factor * KDE_ADJUST)

        plot_density(ax, adjusted, unadjusted, (-4.0, 4.0), "bX (mean)")
        grid = ax.lines[0].get_xdata()
        np.testing.assert_allclose(ax.lines[0].get_ydata(), _kde(adjusted)(grid))

    @pytest.mark.parametrize("size", [0, 1])
    def test_too_few_values_raises(self, ax, size):
        with pytest.raises(ValueError, match="at least two adjusted values"):
            plot_density(ax, np.ones(size), np.arange(5.0), (0.0, 1.0), "bX (SE)")


class TestPlotStudy:
    def test_three_by_three_grid(self, small_study):
        fig = plot_study(small_study)
        try:
            assert len(fig.axes) == 9
            assert [ax.get_title() for ax in fig.axes[:3]] == [m.title for m in CausalModel]
        finally:
            plt.close(fig)

    def test_rows_share_global_limits(self, small_study):
        fig = plot_study(small_study)
        try:
            axes = np.array(fig.axes).reshape(3, 3)
            for row, statistic in [(1, "estimate"), (2, "std_err")]:
                expected = small_study.limits(statistic)
                for ax in axes[row]:
                    assert ax.get_xlim() == pytest.approx(expected)
        finally:
            plt.close(fig)

    def test_draws_on_given_figure(self, small_study):
        fig = plt.figure()
        try:
            assert plot_study(small_study, fig=fig) is fig
        finally:
            plt.close(fig)

    def test_single_replicate_study_rejected_before_drawing(self):
        study = run_study(replicates=1, n=50, n_jobs=1, seed=1)
        open_figures = plt.get_fignums()
        with pytest.raises(ValueError, match="at least two replicates"):
            plot_study(study)
        assert plt.get_fignums() == open_figures
