from .loader import CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH, AppConfig, ConfigError, load_config, resolve_config

__all__ = [
    "AppConfig",
    "CONFIG_ENV_VAR",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "resolve_config",
]
