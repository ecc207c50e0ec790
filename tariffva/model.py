from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .config import TariffConfig
from .metrics import cause_accuracy, csmf_accuracy, csmf_from_labels, individual_accuracy
from .prep import prepare_inputs
from .scoring import assign_causes, estimate_csmf, rank_baseline, score_matrix, to_rank
from .significance import bootstrap_tariffs, significance_mask
from .tariffs import clean_tariff, count_combo, get_tariff
from .util import _log, to_binary


@dataclass
class TariffFit:
    score: pd.DataFrame
    causes_train: pd.DataFrame
    causes_test: pd.DataFrame
    csmf: pd.Series
    causes_table: List[Any]
    use_rank: bool
    rank_mode: Optional[str] = None
    tariff: pd.DataFrame = field(default_factory=pd.DataFrame)
    significance: pd.DataFrame = field(default_factory=pd.DataFrame)
    causes_test_true: Optional[pd.Series] = None

    def top_symptoms(self, cause: Any, n: int = 10) -> pd.Series:
        """Largest positive tariffs of one cause."""
        if cause not in self.tariff.index:
            raise KeyError(f"Unknown cause: {cause!r}")
        row = self.tariff.loc[cause]
        row = row[row > 0]
        return row.sort_values(ascending=False, kind="stable").head(n)

    def summary(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "n_train": int(len(self.causes_train)),
            "n_test": int(len(self.causes_test)),
            "n_causes": int(len(self.causes_table)),
            "n_symptoms": int(self.tariff.shape[1]),
            "use_rank": bool(self.use_rank),
            "rank_mode": self.rank_mode,
            "significant_cells": int(self.significance.to_numpy().sum()) if self.significance.size else 0,
            "csmf": {str(k): float(v) for k, v in self.csmf.items()},
        }
        if self.causes_test_true is not None:
            truth = self.causes_test_true.to_numpy(dtype=object)
            out["accuracy"] = individual_accuracy(self.causes_test["cause"], truth)
            out["csmf_accuracy"] = csmf_accuracy(self.csmf, csmf_from_labels(truth))
            sens = cause_accuracy(self.causes_test["cause"], truth, self.causes_table)
            out["sensitivity"] = {str(k): float(v) for k, v in sens.items()}
        return out


def _spawn(seq: np.random.SeedSequence, n: int) -> List[np.random.SeedSequence]:
    return seq.spawn(n) if n > 0 else []


def tariff(
    causes_train: Any,
    symps_train: pd.DataFrame,
    symps_test: pd.DataFrame,
    causes_table: Optional[Sequence[Any]] = None,
    use_rank: bool = True,
    nboot_rank: int = 1,
    use_sig: bool = True,
    nboot_sig: int = 500,
    use_top: bool = False,
    ntop: int = 40,
    missing: float = 0.0,
    seed: Optional[int] = None,
    n_jobs: int = 1,
    progress: bool = True,
) -> TariffFit:
    """
    Fit Tariff on the training deaths and assign causes to the test deaths.

    causes_train is either one label per training row or the name of the
    cause column in symps_train. The first column of each table is the ID.
    With use_rank, scores are turned into ranks against a bootstrap baseline
    of nboot_rank cause-balanced resamples of the training data
    (nboot_rank = 0 uses the unbalanced training set as is). With use_sig,
    tariff cells whose nboot_sig bootstrap 95% interval covers zero are
    dropped. With use_top, only the ntop largest tariffs per cause are kept.
    """
    data = prepare_inputs(causes_train, symps_train, symps_test, causes_table)
    causelist = data.causes_table
    if len(causelist) == 0:
        raise ValueError("None of the causes in causes_table occur in the training data")
    symptoms = list(data.symps_train.columns)
    C, S = len(causelist), len(symptoms)
    _log(f"[tariff] n_train={len(data.id_train)} n_test={len(data.id_test)} causes={C} symptoms={S}")

    ss = np.random.SeedSequence(seed)
    sig_seq, rank_seq = ss.spawn(2)
    symps_num = to_binary(data.symps_train, missing=missing)

    if use_sig and nboot_sig > 0:
        _log(f"[sig] start re-sampling for significant Tariff cells nboot={nboot_sig}")
        boot = bootstrap_tariffs(
            symps_num, data.causes_train, causelist, _spawn(sig_seq, nboot_sig), n_jobs=n_jobs, progress=progress
        )
        insig = significance_mask(boot)
        _log(f"[sig] kept {int(insig.sum())}/{C * S} cells")
    else:
        insig = np.ones((C, S), dtype=float)

    X_train = count_combo(symps_num, data.causes_train, causelist)
    tariffs = get_tariff(X_train) * insig
    if use_top:
        tariffs = clean_tariff(tariffs, ntop)

    rank_mode = None
    baseline = None
    if use_rank:
        baseline, rank_mode = rank_baseline(
            tariffs, symps_num, data.causes_train, causelist,
            _spawn(rank_seq, nboot_rank), n_jobs=n_jobs, progress=progress,
        )

    symps_num_test = to_binary(data.symps_test, missing=missing)
    score = score_matrix(tariffs, symps_num_test)
    if use_rank:
        _log("[rank] calculating ranks")
        score = to_rank(score, baseline)
    pred = assign_causes(score, causelist, use_rank)
    csmf = estimate_csmf(pred, causelist)

    cause_index = pd.Index(causelist, dtype=object)
    return TariffFit(
        score=pd.DataFrame(score.T, index=pd.Index(data.id_test, name="ID"), columns=cause_index),
        causes_train=pd.DataFrame({"ID": data.id_train, "cause": data.causes_train}),
        causes_test=pd.DataFrame({"ID": data.id_test, "cause": pred}),
        csmf=csmf,
        causes_table=list(causelist),
        use_rank=bool(use_rank),
        rank_mode=rank_mode,
        tariff=pd.DataFrame(tariffs, index=cause_index, columns=symptoms),
        significance=pd.DataFrame(insig, index=cause_index, columns=symptoms),
        causes_test_true=data.causes_test,
    )


def tariff_from_config(
    causes_train: Any,
    symps_train: pd.DataFrame,
    symps_test: pd.DataFrame,
    cfg: TariffConfig,
    causes_table: Optional[Sequence[Any]] = None,
) -> TariffFit:
    return tariff(causes_train, symps_train, symps_test, causes_table=causes_table, **cfg.to_dict())
