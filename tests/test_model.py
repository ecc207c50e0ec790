"""
End-to-end tests of the tariff() entry point.
"""

import numpy as np
import pandas as pd
import pytest

from tariffva import TariffConfig, TariffFit, TariffWarning, tariff, tariff_from_config
from tariffva import model as model_module


class TestTinyScenario:

    def test_marker_symptom_signs(self, tiny_train, tiny_test):
        fit = tariff("cause", tiny_train, tiny_test, use_rank=False, use_sig=False, progress=False)
        assert fit.tariff.loc["A", "X"] > 0
        assert fit.tariff.loc["B", "X"] < 0
        # Z has the same prevalence under both causes
        assert (fit.tariff["Z"] == 0).all()

    def test_signs_survive_significance(self, tiny_train, tiny_test):
        fit = tariff("cause", tiny_train, tiny_test, use_rank=False, nboot_sig=50, seed=1, progress=False)
        assert fit.tariff.loc["A", "X"] > 0
        assert fit.tariff.loc["B", "X"] < 0

    def test_raw_scores_argmax(self, tiny_train, tiny_test):
        fit = tariff("cause", tiny_train, tiny_test, use_rank=False, use_sig=False, progress=False)
        assert not fit.use_rank
        assert fit.rank_mode is None
        np.testing.assert_allclose(fit.score.to_numpy(), [[1.0, -1.0], [0.0, 0.0]])
        # t2 ties, first cause in the table wins
        assert list(fit.causes_test["cause"]) == ["A", "A"]
        expected = fit.score.to_numpy().argmax(axis=1)
        assert list(fit.causes_test["cause"]) == [fit.causes_table[i] for i in expected]

    def test_unbalanced_ranks(self, tiny_train, tiny_test):
        fit = tariff("cause", tiny_train, tiny_test, nboot_rank=0, use_sig=False, progress=False)
        assert fit.rank_mode == "unbalanced"
        np.testing.assert_allclose(fit.score.to_numpy(), [[2.0, 4.0], [4.0, 2.0]])
        assert list(fit.causes_test["cause"]) == ["A", "B"]

    def test_report_fields(self, tiny_train, tiny_test):
        fit = tariff("cause", tiny_train, tiny_test, use_sig=False, seed=0, progress=False)
        assert isinstance(fit, TariffFit)
        assert fit.rank_mode == "balanced"
        assert list(fit.score.index) == ["t1", "t2"]
        assert list(fit.score.columns) == ["A", "B"]
        assert list(fit.causes_train.columns) == ["ID", "cause"]
        assert list(fit.causes_train["cause"]) == ["A", "A", "B", "B"]
        assert list(fit.causes_test["ID"]) == ["t1", "t2"]
        assert fit.csmf.sum() == pytest.approx(1.0)
        assert list(fit.csmf.index) == fit.causes_table
        # K = nboot_rank * factor * C = 1 * 2 * 2, so ranks lie in [1, 5]
        assert ((fit.score >= 1) & (fit.score <= 5)).all().all()
        assert fit.causes_test_true is None

    def test_no_significance_means_all_ones(self, tiny_train, tiny_test):
        off = tariff("cause", tiny_train, tiny_test, use_sig=False, seed=3, progress=False)
        zero = tariff("cause", tiny_train, tiny_test, nboot_sig=0, seed=3, progress=False)
        assert (off.significance.to_numpy() == 1).all()
        pd.testing.assert_frame_equal(off.score, zero.score)
        pd.testing.assert_frame_equal(off.tariff, zero.tariff)

    def test_collapsed_filter_warns_caller(self, tiny_train, tiny_test, monkeypatch):
        def straddling(symps, causes, causelist, seeds, n_jobs=1, progress=True):
            signs = np.where(np.arange(len(seeds)) % 2 == 0, -1.0, 1.0)
            shape = (len(seeds), len(causelist), symps.shape[1])
            return np.broadcast_to(signs[:, None, None], shape).copy()

        monkeypatch.setattr(model_module, "bootstrap_tariffs", straddling)
        with pytest.warns(TariffWarning, match="No Tariff is significant"):
            fit = tariff("cause", tiny_train, tiny_test, use_rank=False, nboot_sig=10, progress=False)
        assert (fit.significance.to_numpy() == 1).all()
        assert fit.tariff.loc["A", "X"] == 1.0
        assert fit.tariff.loc["B", "X"] == -1.0


class TestInputs:

    def test_label_vector(self, tiny_train, tiny_test):
        labels = tiny_train["cause"].tolist()
        symps = tiny_train.drop(columns=["cause"])
        by_vector = tariff(labels, symps, tiny_test, use_rank=False, use_sig=False, progress=False)
        by_name = tariff("cause", tiny_train, tiny_test, use_rank=False, use_sig=False, progress=False)
        pd.testing.assert_frame_equal(by_vector.score, by_name.score)

    def test_label_length_mismatch(self, tiny_train, tiny_test):
        with pytest.raises(ValueError, match="labels"):
            tariff(["A", "B"], tiny_train.drop(columns=["cause"]), tiny_test, progress=False)

    def test_missing_cause_column(self, tiny_train, tiny_test):
        with pytest.raises(ValueError, match="Cannot find the cause-of-death column"):
            tariff("cod", tiny_train, tiny_test, progress=False)

    def test_duplicated_cause_column(self, tiny_train, tiny_test):
        dup = pd.concat([tiny_train, tiny_train[["cause"]]], axis=1)
        with pytest.raises(ValueError, match="Multiple cause columns"):
            tariff("cause", dup, tiny_test, progress=False)

    def test_empty_test(self, tiny_train, tiny_test):
        with pytest.raises(ValueError, match="no records"):
            tariff("cause", tiny_train, tiny_test.iloc[0:0], progress=False)

    def test_column_alignment_warns(self, tiny_train, tiny_test):
        train = tiny_train.assign(only_train="Y")
        test = tiny_test.assign(only_test="Y")
        with pytest.warns(TariffWarning) as record:
            fit = tariff("cause", train, test, use_rank=False, use_sig=False, progress=False)
        ours = [w for w in record if issubclass(w.category, TariffWarning)]
        messages = " ".join(str(w.message) for w in ours)
        assert "training but not testing" in messages
        assert "testing but not training" in messages
        assert list(fit.tariff.columns) == ["X", "Z"]
        # attributed to the line calling tariff(), not to package internals
        assert all(w.filename == __file__ for w in ours)

    def test_cause_table_restricted_to_training(self, tiny_train, tiny_test):
        fit = tariff(
            "cause", tiny_train, tiny_test, causes_table=["C", "B", "A"],
            use_rank=False, use_sig=False, progress=False,
        )
        assert fit.causes_table == ["B", "A"]
        assert list(fit.csmf.index) == ["B", "A"]
        assert list(fit.score.columns) == ["B", "A"]

    def test_unknown_cause_table(self, tiny_train, tiny_test):
        with pytest.raises(ValueError, match="None of the causes"):
            tariff("cause", tiny_train, tiny_test, causes_table=["Q"], progress=False)

    def test_test_truth_kept(self, tiny_train, tiny_test):
        test = tiny_test.assign(cause=["A", "B"])
        fit = tariff("cause", tiny_train, test, nboot_rank=0, use_sig=False, progress=False)
        assert list(fit.causes_test_true) == ["A", "B"]
        summary = fit.summary()
        assert summary["accuracy"] == 1.0
        assert summary["csmf_accuracy"] == pytest.approx(1.0)


class TestSynthetic:

    def test_recovers_causes(self, synthetic_pair):
        train, test = synthetic_pair
        fit = tariff("cause", train, test, nboot_sig=100, seed=42, progress=False)
        summary = fit.summary()
        assert summary["accuracy"] > 0.6
        assert summary["n_test"] == 30
        assert "s_fever" in fit.top_symptoms("malaria", 3).index
        assert "s_paralysis" in fit.top_symptoms("stroke", 3).index

    def test_seed_reproducible(self, synthetic_pair):
        train, test = synthetic_pair
        one = tariff("cause", train, test, nboot_sig=30, nboot_rank=2, seed=5, progress=False)
        two = tariff("cause", train, test, nboot_sig=30, nboot_rank=2, seed=5, progress=False)
        pd.testing.assert_frame_equal(one.score, two.score)
        pd.testing.assert_frame_equal(one.significance, two.significance)

    def test_mask_zeroes_tariff_cells(self, synthetic_pair):
        train, test = synthetic_pair
        fit = tariff("cause", train, test, use_rank=False, nboot_sig=60, seed=3, progress=False)
        unfiltered = tariff("cause", train, test, use_rank=False, use_sig=False, progress=False)
        assert (fit.significance.to_numpy() == 0).sum() > 0
        pd.testing.assert_frame_equal(fit.tariff, unfiltered.tariff * fit.significance)
        # at least one dropped cell carried a nonzero weight before filtering
        dropped = fit.significance.to_numpy() == 0
        assert (unfiltered.tariff.to_numpy()[dropped] != 0).any()

    def test_parallel_reproducible(self, synthetic_pair):
        train, test = synthetic_pair
        seq = tariff("cause", train, test, nboot_sig=20, seed=5, progress=False)
        par = tariff("cause", train, test, nboot_sig=20, seed=5, n_jobs=2, progress=False)
        pd.testing.assert_frame_equal(seq.score, par.score)

    def test_top_pruning(self, synthetic_pair):
        train, test = synthetic_pair
        fit = tariff("cause", train, test, use_sig=False, use_top=True, ntop=2, use_rank=False, progress=False)
        assert ((fit.tariff != 0).sum(axis=1) <= 2).all()

    def test_from_config(self, synthetic_pair):
        train, test = synthetic_pair
        cfg = TariffConfig(use_sig=False, nboot_rank=0, progress=False)
        fit = tariff_from_config("cause", train, test, cfg)
        assert fit.rank_mode == "unbalanced"

    def test_unknown_top_symptom_cause(self, synthetic_pair):
        train, test = synthetic_pair
        fit = tariff("cause", train, test, use_sig=False, use_rank=False, progress=False)
        with pytest.raises(KeyError):
            fit.top_symptoms("cholera")
