from __future__ import annotations

from typing import Any, List, Sequence

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from .util import _log, _pbar


RANK_BALANCED = "balanced"
RANK_UNBALANCED = "unbalanced"


def score_matrix(tariff: np.ndarray, symps: np.ndarray) -> np.ndarray:
    """Raw tariff scores, C by M."""
    return np.asarray(tariff, dtype=float) @ np.asarray(symps, dtype=float).T


def _balanced_block(
    tariff: np.ndarray,
    symps: np.ndarray,
    index_by_cause: List[np.ndarray],
    factor: int,
    seed,
) -> np.ndarray:
    rng = np.random.default_rng(seed)
    sample = np.concatenate([rng.choice(rows, size=factor, replace=True) for rows in index_by_cause])
    return score_matrix(tariff, symps[sample, :]).T


def rank_baseline(
    tariff: np.ndarray,
    symps: np.ndarray,
    causes: Sequence[Any],
    causelist: Sequence[Any],
    seeds: List[np.random.SeedSequence],
    n_jobs: int = 1,
    progress: bool = True,
) -> tuple[np.ndarray, str]:
    '''Reference score distribution for the rank transform, K by C.
    With seeds, each repetition draws floor(N/C) training records per cause
    with replacement, so the baseline has a uniform cause distribution.
    With no seeds (nboot_rank = 0) the full, unbalanced training set is
    scored instead.
    '''
    symps = np.asarray(symps, dtype=float)
    if len(seeds) == 0:
        _log("[rank] baseline from full training set (unbalanced)")
        return score_matrix(tariff, symps).T, RANK_UNBALANCED

    causes = np.asarray(causes, dtype=object)
    C = len(causelist)
    factor = symps.shape[0] // C
    index_by_cause = [np.flatnonzero(causes == k) for k in causelist]
    block = factor * C
    out = np.zeros((len(seeds) * block, C), dtype=float)
    if n_jobs == 1:
        for i in _pbar(range(len(seeds)), "[rank] baseline", progress, total=len(seeds)):
            out[i * block:(i + 1) * block, :] = _balanced_block(tariff, symps, index_by_cause, factor, seeds[i])
    else:
        parts = Parallel(n_jobs=n_jobs)(
            delayed(_balanced_block)(tariff, symps, index_by_cause, factor, s) for s in seeds
        )
        for i, part in enumerate(parts):
            out[i * block:(i + 1) * block, :] = part
    _log(f"[rank] baseline rows={out.shape[0]} factor={factor}")
    return out, RANK_BALANCED


def to_rank(mat: np.ndarray, baseline: np.ndarray) -> np.ndarray:
    """
    Descending average rank of each score among itself plus the baseline
    column of its cause: 1 + #greater + #tied / 2. Returns C by N.
    """
    mat = np.asarray(mat, dtype=float)
    baseline = np.asarray(baseline, dtype=float)
    K = baseline.shape[0]
    out = np.empty_like(mat)
    for c in range(mat.shape[0]):
        ref = np.sort(baseline[:, c])
        lo = np.searchsorted(ref, mat[c, :], side="left")
        hi = np.searchsorted(ref, mat[c, :], side="right")
        out[c, :] = 1.0 + (K - hi) + (hi - lo) / 2.0
    return out


def assign_causes(scores: np.ndarray, causelist: Sequence[Any], use_rank: bool) -> np.ndarray:
    """Top cause per record: min rank or max raw score, first cause on ties."""
    scores = np.asarray(scores, dtype=float)
    pick = np.argmin(scores, axis=0) if use_rank else np.argmax(scores, axis=0)
    return np.asarray(list(causelist), dtype=object)[pick]


def estimate_csmf(pred: Sequence[Any], causelist: Sequence[Any]) -> pd.Series:
    '''CSMF from predicted causes.
    One synthetic record of every cause is tallied and then subtracted
    again before dividing by the number of records.
    '''
    causelist = list(causelist)
    tally = pd.Series(list(pred) + causelist, dtype=object).value_counts()
    counts = tally.reindex(causelist).fillna(0).astype(float) - 1.0
    n = len(pred)
    if n == 0:
        return pd.Series(0.0, index=pd.Index(causelist, dtype=object), name="csmf")
    csmf = counts / float(n)
    csmf.index = pd.Index(causelist, dtype=object)
    csmf.name = "csmf"
    return csmf
