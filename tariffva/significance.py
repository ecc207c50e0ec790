from __future__ import annotations

import warnings
from typing import Any, List, Sequence

import numpy as np
from joblib import Parallel, delayed

from .tariffs import count_combo, get_tariff
from .util import TariffWarning, _log, _pbar, percentile_cols


SIG_LEVEL = 0.025


def _boot_tariff(symps: np.ndarray, causes: np.ndarray, causelist: Sequence[Any], seed) -> np.ndarray:
    rng = np.random.default_rng(seed)
    n = symps.shape[0]
    idx = rng.integers(0, n, size=n)
    return get_tariff(count_combo(symps[idx, :], causes[idx], causelist))


def bootstrap_tariffs(
    symps: np.ndarray,
    causes: Sequence[Any],
    causelist: Sequence[Any],
    seeds: List[np.random.SeedSequence],
    n_jobs: int = 1,
    progress: bool = True,
) -> np.ndarray:
    """Tariff matrices of uniform bootstrap resamples, nboot x C x S."""
    symps = np.asarray(symps, dtype=float)
    causes = np.asarray(causes, dtype=object)
    nboot = len(seeds)
    out = np.zeros((nboot, len(causelist), symps.shape[1]), dtype=float)
    if nboot == 0:
        return out
    if n_jobs == 1:
        for i in _pbar(range(nboot), "[sig] bootstrap", progress, total=nboot):
            out[i] = _boot_tariff(symps, causes, causelist, seeds[i])
    else:
        parts = Parallel(n_jobs=n_jobs)(
            delayed(_boot_tariff)(symps, causes, causelist, s) for s in seeds
        )
        for i, t in enumerate(parts):
            out[i] = t
    return out


def significance_mask(boot: np.ndarray) -> np.ndarray:
    '''1 where the 95% bootstrap interval of a cell does not straddle zero.
    A bound of exactly zero counts as not straddling. If nothing survives
    the filter is switched off (all ones) with a TariffWarning.'''
    shape = boot.shape[1:]
    if boot.shape[0] == 0:
        return np.ones(shape, dtype=float)
    lower = percentile_cols(boot, 100.0 * SIG_LEVEL)
    upper = percentile_cols(boot, 100.0 * (1.0 - SIG_LEVEL))
    cover = np.sign(lower * upper)
    keep = (cover != -1).astype(float)
    if keep.sum() == 0:
        warnings.warn("No Tariff is significant, remove bootstrapping step", TariffWarning, stacklevel=2)
        _log("[sig] no significant cells; filter disabled")
        keep = np.ones(shape, dtype=float)
    return keep
