from __future__ import annotations

from typing import Any, Sequence

import numpy as np
from scipy.stats import iqr as _iqr


# spread used when a symptom has the same prevalence under every cause
CONSTANT_SPREAD = 0.05


def count_combo(symps: np.ndarray, causes: Sequence[Any], causelist: Sequence[Any]) -> np.ndarray:
    """
    Prevalence of each symptom within each cause, C by S.
    Rows of causes with no records stay zero.
    """
    symps = np.asarray(symps, dtype=float)
    causes = np.asarray(causes, dtype=object)
    out = np.zeros((len(causelist), symps.shape[1]), dtype=float)
    for i, cause in enumerate(causelist):
        rows = causes == cause
        n = int(rows.sum())
        if n == 0:
            continue
        out[i, :] = (symps[rows, :] == 1).sum(axis=0) / n
    return out


def robust_spread(X: np.ndarray) -> np.ndarray:
    '''Per-column denominator for standardization.
    IQR first, the column range where the IQR is zero, and CONSTANT_SPREAD
    where the range is zero too. The order matters.
    '''
    X = np.asarray(X, dtype=float)
    spread = _iqr(X, axis=0, interpolation="linear")
    spread = np.atleast_1d(np.asarray(spread, dtype=float)).copy()
    rng = X.max(axis=0) - X.min(axis=0)
    zero = spread == 0
    spread[zero] = rng[zero]
    spread[spread == 0] = CONSTANT_SPREAD
    return spread


def get_tariff(X: np.ndarray) -> np.ndarray:
    """
    Tariff matrix from a C by S count matrix: per symptom
    (count - median) / spread, rounded to the nearest 0.5.
    """
    X = np.asarray(X, dtype=float)
    if X.size == 0:
        return np.zeros(X.shape, dtype=float)
    med = np.median(X, axis=0)
    tariff = (X - med) / robust_spread(X)
    # np.round is half-to-even
    return np.round(2.0 * tariff) / 2.0


def clean_tariff(tariff: np.ndarray, ntop: int) -> np.ndarray:
    """
    Keep the `ntop` largest |tariff| entries of each cause row, zero the rest.
    Entries are dropped in stable ascending order of magnitude, so among
    equal magnitudes the earlier symptom goes first.
    """
    out = np.array(tariff, dtype=float, copy=True)
    S = out.shape[1]
    n_drop = S - max(0, min(int(ntop), S))
    if n_drop <= 0:
        return out
    for i in range(out.shape[0]):
        order = np.argsort(np.abs(out[i, :]), kind="stable")
        out[i, order[:n_drop]] = 0.0
    return out
