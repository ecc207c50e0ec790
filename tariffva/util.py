
import os
import sys
import traceback

import numpy as np
import pandas as pd
from tqdm.auto import tqdm


PRESENT_MARKERS = ("Y", "YES")
MISSING_MARKER = "."


class TariffWarning(UserWarning):
    """Non-fatal data-quality notice raised while fitting Tariff."""


def _log(msg: str) -> None:
    print(msg, flush=True)


def _pbar(seq, desc: str, enabled: bool, total: int | None = None):
    if not enabled:
        return seq
    return tqdm(seq, desc=desc, total=total, dynamic_ncols=True, leave=False)


def to_binary(mat, missing: float = 0.0) -> np.ndarray:
    '''Convert a raw symptom table into a float 0/1 matrix.
    "Y"/"yes" (any case, no surrounding blanks), 1 and True are present;
    "." is missing and takes the value `missing`; everything else
    (including NaN and padded markers such as " y ") is absent.
    '''
    if isinstance(mat, pd.DataFrame):
        raw = mat.to_numpy(dtype=object)
    else:
        raw = np.asarray(mat, dtype=object)
    if raw.ndim == 1:
        raw = raw.reshape(-1, 1)
    out = np.zeros(raw.shape, dtype=float)
    if raw.size == 0:
        return out
    text = np.char.upper(raw.astype(str))
    present = np.isin(text, PRESENT_MARKERS)
    # numeric encodings: str(1) == "1", str(1.0) == "1.0", str(True) == "TRUE"
    present |= np.isin(text, ("1", "1.0", "TRUE"))
    out[present] = 1.0
    out[text == MISSING_MARKER] = float(missing)
    return out


def percentile_cols(x: np.ndarray, q: float) -> np.ndarray:
    """Linear-interpolation percentile along the first axis."""
    return np.percentile(x, q, axis=0, method="linear")


def exception_to_report(step, cfg_dict, out_dir, e):
    rep = {
        "step": step,
        "exception": str(type(e).__name__),
        "message": str(e),
        "traceback": traceback.format_exc(),
        "config_snapshot": cfg_dict,
        "env": {
            "python": sys.version,
            "numpy": np.__version__,
            "pandas": pd.__version__,
        },
        "written_files": []
    }
    if out_dir is not None and os.path.isdir(str(out_dir)):
        w = []
        for base, _, files in os.walk(str(out_dir)):
            for f in files:
                w.append(str(os.path.join(base, f)))
        rep["written_files"] = sorted(w)
    return rep
