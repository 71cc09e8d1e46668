import numpy as np
import pandas as pd
import pytest

from controlsim import CausalModel, PathCoefficients, UnknownModelError, generate


class TestCausalModel:
    def test_parse_tags(self):
        assert CausalModel.parse("cc") is CausalModel.CASE_CONTROL
        assert CausalModel.parse("mc") is CausalModel.MULTIPLE_CAUSES
        assert CausalModel.parse("cv") is CausalModel.COMMON_VARIANCE
        assert CausalModel.parse(CausalModel.CASE_CONTROL) is CausalModel.CASE_CONTROL

    def test_unknown_selector_raises(self):
        with pytest.raises(UnknownModelError, match="Unknown causal model 'xx'"):
            CausalModel.parse("xx")

    def test_unknown_selector_is_value_error(self):
        with pytest.raises(ValueError):
            generate("collider", n=10)

    def test_titles(self):
        assert [m.title for m in CausalModel] == [
            "Case-control bias", "Multiple causes", "Common variance",
        ]

    def test_dag_returns_fresh_graph(self):
        dag = CausalModel.MULTIPLE_CAUSES.dag
        dag.assume("W").causes("Y")
        assert "W" not in CausalModel.MULTIPLE_CAUSES.dag.nodes


class TestGenerate:
    @pytest.mark.parametrize("model", list(CausalModel))
    def test_shape_and_columns(self, model):
        df = generate(model, n=37, rng=np.random.default_rng(0))
        assert list(df.columns) == ["X", "Y", "Z"]
        assert len(df) == 37

    @pytest.mark.parametrize("model", ["cc", "mc", "cv"])
    def test_reproducible_with_seed(self, model):
        a = generate(model, n=100, rng=np.random.default_rng(123))
        b = generate(model, n=100, rng=np.random.default_rng(123))
        pd.testing.assert_frame_equal(a, b)

    def test_different_seeds_differ(self):
        a = generate("cc", n=100, rng=np.random.default_rng(1))
        b = generate("cc", n=100, rng=np.random.default_rng(2))
        assert not np.allclose(a["X"], b["X"])

    def test_predictor_drawn_first_for_every_model(self):
        xs = [generate(m, n=50, rng=np.random.default_rng(9))["X"] for m in CausalModel]
        for x in xs[1:]:
            np.testing.assert_array_equal(xs[0], x)

    @pytest.mark.parametrize("n", [0, -5, 2.5, True])
    def test_invalid_sample_size_raises(self, n):
        with pytest.raises(ValueError, match="positive integer"):
            generate("mc", n=n)

    def test_case_control_regression_structure(self):
        """Each generative slope is recoverable from a large sample: X → Y → Z."""
        rng = np.random.default_rng(4)
        df = generate("cc", n=20_000, coefficients=PathCoefficients(x_to_y=2.0, z_to_y=0.5), rng=rng)
        assert df["Y"].mean() == pytest.approx(0, abs=0.1)
        assert np.polyfit(df["X"], df["Y"], 1)[0] == pytest.approx(2.0, abs=0.05)
        assert np.polyfit(df["Y"], df["Z"], 1)[0] == pytest.approx(0.5, abs=0.05)

    def test_multiple_causes_covariate_independent_of_predictor(self):
        df = generate("mc", n=20_000, rng=np.random.default_rng(5))
        assert abs(np.corrcoef(df["X"], df["Z"])[0, 1]) < 0.05
        assert np.corrcoef(df["Z"], df["Y"])[0, 1] > 0.4

    def test_common_variance_covariate_shares_outcome_variance(self):
        df = generate("cv", n=20_000, rng=np.random.default_rng(6))
        assert abs(np.corrcoef(df["X"], df["Z"])[0, 1]) < 0.05
        # Cov(Y, Z) = u_to_y * u_to_z * Var(u) = 1
        assert np.cov(df["Y"], df["Z"])[0, 1] == pytest.approx(1.0, abs=0.1)

    def test_zero_latent_paths_break_common_variance_link(self):
        coefs = PathCoefficients(u_to_y=0.0, u_to_z=0.0)
        df = generate("cv", n=20_000, coefficients=coefs, rng=np.random.default_rng(7))
        assert abs(np.corrcoef(df["Y"], df["Z"])[0, 1]) < 0.05
