from .config import TariffConfig, load_config
from .model import TariffFit, tariff, tariff_from_config
from .util import TariffWarning, to_binary

__all__ = [
    "TariffConfig",
    "TariffFit",
    "TariffWarning",
    "load_config",
    "tariff",
    "tariff_from_config",
    "to_binary",
]
