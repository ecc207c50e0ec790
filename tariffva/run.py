# tariffva/run.py


from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from .config import TariffConfig, load_config
from .io_utils import ensure_dir, outputs_complete, write_frame, write_json
from .model import TariffFit, tariff_from_config
from .util import _log, exception_to_report


OUTPUT_FILES = ["score.csv", "causes_test.csv", "csmf.csv", "tariff.csv", "summary.json"]


@dataclass
class Args:
    config: str
    out: Optional[str]
    force: bool


def parse_args(argv=None) -> Args:
    p = argparse.ArgumentParser(description="Assign causes of death with the Tariff method")
    p.add_argument("--config", required=True)
    p.add_argument("--out", default=None, help="output dir (overrides data.out_dir)")
    p.add_argument("--force", action="store_true")
    a = p.parse_args(argv)
    return Args(config=a.config, out=a.out, force=a.force)


def read_table(path: str) -> pd.DataFrame:
    # keep "." and blanks as text; binarization decides what they mean
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def write_outputs(fit: TariffFit, out_dir: Path) -> Dict[str, Any]:
    ensure_dir(out_dir)
    write_frame(out_dir / "score.csv", fit.score, index=True)
    write_frame(out_dir / "causes_test.csv", fit.causes_test)
    write_frame(out_dir / "csmf.csv", fit.csmf.rename_axis("cause").reset_index())
    write_frame(out_dir / "tariff.csv", fit.tariff.rename_axis("cause"), index=True)
    summary = fit.summary()
    write_json(out_dir / "summary.json", summary)
    return summary


def run(cfg_path: str, out: Optional[str] = None, force: bool = False) -> Optional[Dict[str, Any]]:
    cfg = load_config(cfg_path)
    data_cfg = cfg["data"]
    out_dir = Path(out or data_cfg.get("out_dir", "outputs"))
    if outputs_complete(out_dir, OUTPUT_FILES, force):
        _log(f"[run] outputs in {out_dir} exist; use --force to refit")
        return None

    step = "load"
    try:
        train = read_table(data_cfg["train"])
        test = read_table(data_cfg["test"])
        _log(f"[run] train={train.shape} test={test.shape}")
        step = "fit"
        tcfg = TariffConfig.from_dict(cfg.get("tariff"))
        fit = tariff_from_config(
            data_cfg["cause_column"], train, test, tcfg,
            causes_table=data_cfg.get("causes_table"),
        )
        step = "write"
        summary = write_outputs(fit, out_dir)
    except Exception as e:
        ensure_dir(out_dir)
        write_json(out_dir / "error_report.json", exception_to_report(step, cfg, out_dir, e))
        raise
    _log(f"[run] wrote {', '.join(OUTPUT_FILES)} to {out_dir}")
    return summary


def main(argv=None):
    args = parse_args(argv)
    summary = run(args.config, out=args.out, force=args.force)
    if summary is not None and "accuracy" in summary:
        _log(f"[run] accuracy={summary['accuracy']:.3f} csmf_accuracy={summary['csmf_accuracy']:.3f}")
    _log("Tariff DONE")


if __name__ == "__main__":
    main()
