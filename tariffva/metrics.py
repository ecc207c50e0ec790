from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import pandas as pd
from sklearn.metrics import accuracy_score


def individual_accuracy(pred: Sequence[Any], truth: Sequence[Any]) -> float:
    """Fraction of records whose predicted cause equals the true cause."""
    pred = np.asarray(list(pred), dtype=object)
    truth = np.asarray(list(truth), dtype=object)
    if len(pred) != len(truth):
        raise ValueError("pred and truth must be same length")
    if len(pred) == 0:
        return float("nan")
    return float(accuracy_score(truth.astype(str), pred.astype(str)))


def csmf_from_labels(labels: Sequence[Any]) -> pd.Series:
    s = pd.Series(list(labels), dtype=object)
    if len(s) == 0:
        return pd.Series(dtype=float)
    return s.value_counts(normalize=True).astype(float)


def csmf_accuracy(csmf_pred: pd.Series, csmf_true: pd.Series) -> float:
    '''CSMF accuracy (Murray et al. 2011):
    1 - sum|pred - true| / (2 * (1 - min(true))).
    Causes missing on either side count as 0.
    '''
    causes = pd.Index(csmf_true.index).union(pd.Index(csmf_pred.index), sort=False)
    p = csmf_pred.reindex(causes).fillna(0.0).astype(float)
    t = csmf_true.reindex(causes).fillna(0.0).astype(float)
    t_min = float(csmf_true.astype(float).min()) if len(csmf_true) else 0.0
    denom = 2.0 * (1.0 - t_min)
    if denom <= 0:
        return 1.0 if np.allclose(p.to_numpy(), t.to_numpy()) else 0.0
    return float(1.0 - np.abs(p - t).sum() / denom)


def cause_accuracy(pred: Sequence[Any], truth: Sequence[Any], causes: Sequence[Any]) -> pd.Series:
    """Per-cause sensitivity; NaN for causes absent from the truth."""
    df = pd.DataFrame({"pred": list(pred), "truth": list(truth)})
    out = {}
    for c in causes:
        sub = df[df["truth"] == c]
        out[c] = float((sub["pred"] == c).mean()) if len(sub) else float("nan")
    return pd.Series(out, name="sensitivity", dtype=float)
