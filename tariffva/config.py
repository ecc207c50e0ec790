
import yaml
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Optional


@dataclass
class TariffConfig:
    use_rank: bool = True
    nboot_rank: int = 1
    use_sig: bool = True
    nboot_sig: int = 500
    use_top: bool = False
    ntop: int = 40
    missing: float = 0.0
    seed: Optional[int] = None
    n_jobs: int = 1
    progress: bool = True

    @classmethod
    def from_dict(cls, node: Dict[str, Any] | None) -> "TariffConfig":
        node = dict(node or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(node) - known)
        if unknown:
            raise AssertionError(f"Unknown tariff config keys: {', '.join(unknown)}")
        return cls(**node)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _read_yaml(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except UnicodeDecodeError:
        # UTF-8 with BOM
        with open(path, "r", encoding="utf-8-sig") as f:
            return yaml.safe_load(f)


def _require(cfg_node, path, pred, msg):
    node = cfg_node
    for k in path:
        if not isinstance(node, dict) or k not in node:
            raise AssertionError(f"Missing config key: {'.'.join(path)}")
        node = node[k]
    if not pred(node):
        raise AssertionError(msg)


def _is_int(x) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(cfg, dict):
        raise AssertionError("Config root must be a mapping")

    # data block: where the tables live and which column holds the cause
    _require(cfg, ["data", "train"], lambda x: isinstance(x, str) and len(x) > 0, "data.train must be a path")
    _require(cfg, ["data", "test"], lambda x: isinstance(x, str) and len(x) > 0, "data.test must be a path")
    _require(cfg, ["data", "cause_column"], lambda x: isinstance(x, str) and len(x) > 0, "data.cause_column must be a column name")
    causes = cfg["data"].get("causes_table")
    if causes is not None and not (isinstance(causes, (list, tuple)) and len(causes) > 0):
        raise AssertionError("data.causes_table must be a non-empty list when given")
    if "out_dir" in cfg["data"]:
        _require(cfg, ["data", "out_dir"], lambda x: isinstance(x, str) and len(x) > 0, "data.out_dir must be a path")

    tariff = cfg.get("tariff", {}) or {}
    if not isinstance(tariff, dict):
        raise AssertionError("tariff must be a mapping")
    node = {"tariff": tariff}
    for key in ("use_rank", "use_sig", "use_top", "progress"):
        if key in tariff:
            _require(node, ["tariff", key], lambda x: isinstance(x, bool), f"tariff.{key} must be true|false")
    if "nboot_rank" in tariff:
        _require(node, ["tariff", "nboot_rank"], lambda x: _is_int(x) and x >= 0, "tariff.nboot_rank>=0")
    if "nboot_sig" in tariff:
        _require(node, ["tariff", "nboot_sig"], lambda x: _is_int(x) and x >= 0, "tariff.nboot_sig>=0")
    if "ntop" in tariff:
        _require(node, ["tariff", "ntop"], lambda x: _is_int(x) and x > 0, "tariff.ntop>0")
    if "missing" in tariff:
        _require(node, ["tariff", "missing"], lambda x: isinstance(x, (int, float)) and not isinstance(x, bool), "tariff.missing must be numeric")
    if "seed" in tariff:
        _require(node, ["tariff", "seed"], lambda x: x is None or (_is_int(x) and x >= 0), "tariff.seed must be null or an int>=0")
    if "n_jobs" in tariff:
        _require(node, ["tariff", "n_jobs"], lambda x: _is_int(x) and x != 0, "tariff.n_jobs must be a non-zero int")
    TariffConfig.from_dict(tariff)
    return cfg


def load_config(path: str) -> Dict[str, Any]:
    cfg = _read_yaml(path)
    return validate_config(cfg)
