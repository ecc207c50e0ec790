from pathlib import Path
import os, json
from typing import Any, Callable, Dict, Iterable

import numpy as np
import pandas as pd


def ensure_dir(p) -> Path:
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def _json_default(o):
    if isinstance(o, np.generic):
        return o.item()
    if isinstance(o, np.ndarray):
        return o.tolist()
    return str(o)


def safe_write(path: Path, writer_fn: Callable[[str], None]) -> None:
    tmp = str(path) + ".tmp"
    writer_fn(tmp)
    os.replace(tmp, str(path))


def write_json(path: Path, data: Dict[str, Any]) -> None:
    ensure_dir(path.parent)
    text = json.dumps(data, indent=2, default=_json_default)
    safe_write(path, lambda tmp: Path(tmp).write_text(text, encoding="utf-8"))


def write_frame(path: Path, df: pd.DataFrame, index: bool = False) -> None:
    ensure_dir(path.parent)
    safe_write(path, lambda tmp: df.to_csv(tmp, index=index))


def outputs_complete(out_dir: Path, names: Iterable[str], force: bool) -> bool:
    """True when every named output already exists and a refit is not forced."""
    if force:
        return False
    return all((out_dir / name).exists() for name in names)
