from .loader import ConfigLoaderError, load_config, load_config_reference, load_hydra_config
from .schema import DocGenConfig

__all__ = [
    "ConfigLoaderError",
    "DocGenConfig",
    "load_config",
    "load_config_reference",
    "load_hydra_config",
]
