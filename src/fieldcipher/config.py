"""
Configuration management for fieldcipher.

This module loads the cipher settings from an optional YAML file and from
environment variables, and turns them into a validated CipherConfig.
"""

import os
from copy import deepcopy
from pathlib import Path

import yaml

from .errors import ConfigurationError
from .models import CipherConfig


# Environment variables overriding keys of the "cipher" section
_CIPHER_ENV_VARS = {
    "FIELDCIPHER_ALGORITHM": "algorithm",
    "FIELDCIPHER_MODE": "mode",
    "FIELDCIPHER_KEY": "key",
    "FIELDCIPHER_KEY_SIZE": "key_size",
    "FIELDCIPHER_IV": "iv",
    "FIELDCIPHER_IV_RANDOM_LENGTH": "iv_random_length",
}

_TRUE_VALUES = ("1", "true", "True", "yes", "Yes")
_FALSE_VALUES = ("0", "false", "False", "no", "No")


class FieldCipherConfig:
    """
    Configuration for fieldcipher.

    Settings are resolved from defaults, then a YAML file, then the
    environment, with later sources taking precedence.
    """

    # Default configuration values
    _default_config: dict[str, object] = {
        "log_level": "INFO",
        "cipher": {
            "key_size": 16,
            "key_pad": "\0",
            "base64": True,
            "exclude_fields": [],
        },
    }

    # Instance configuration values, loaded from file or environment
    _config: dict[str, object] = {}

    # Flag indicating if the configuration has been initialized
    _initialized: bool = False

    @classmethod
    def initialize(cls, config_path: str | None = None) -> None:
        """
        Initialize the configuration.

        Args:
            config_path: Optional path to a YAML configuration file

        Raises:
            ConfigurationError: If the file is missing or cannot be parsed
        """
        # Deep copy so the nested cipher section is never shared with the defaults
        cls._config = deepcopy(cls._default_config)

        if config_path:
            cls._load_from_file(config_path)

        cls._load_from_env()

        cls._initialized = True

    @classmethod
    def _load_from_file(cls, config_path: str) -> None:
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file
        """
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(path, "r") as f:
                file_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Error loading configuration file: {e}") from e

        if not file_config:
            return
        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")

        for section, values in file_config.items():
            if isinstance(values, dict) and isinstance(cls._config.get(section), dict):
                cls._config[section].update(values)
            else:
                cls._config[section] = values

    @classmethod
    def _load_from_env(cls) -> None:
        """Load configuration from environment variables."""
        cipher = cls._config.setdefault("cipher", {})

        for env_name, key in _CIPHER_ENV_VARS.items():
            value = os.environ.get(env_name)
            if value:
                cipher[key] = value

        # Unrecognized values leave the setting unchanged
        env_base64 = os.environ.get("FIELDCIPHER_BASE64")
        if env_base64 in _TRUE_VALUES:
            cipher["base64"] = True
        elif env_base64 in _FALSE_VALUES:
            cipher["base64"] = False

        env_exclude = os.environ.get("FIELDCIPHER_EXCLUDE_FIELDS")
        if env_exclude is not None:
            cipher["exclude_fields"] = [name.strip() for name in env_exclude.split(",") if name.strip()]

        env_log_level = os.environ.get("FIELDCIPHER_LOG_LEVEL")
        if env_log_level:
            cls._config["log_level"] = env_log_level.upper()

    @classmethod
    def _ensure_initialized(cls) -> None:
        """Ensure the configuration is initialized."""
        if not cls._initialized:
            cls.initialize()

    @classmethod
    def get(cls, key: str, default: object = None) -> object:
        """
        Get a configuration value.

        Args:
            key: The configuration key to retrieve, dot-separated for nested keys
            default: Default value to return if key is not found

        Returns:
            The configuration value, or default if not found
        """
        cls._ensure_initialized()

        if "." in key:
            value: object = cls._config
            for part in key.split("."):
                if isinstance(value, dict) and part in value:
                    value = value[part]
                else:
                    return default
            return value

        return cls._config.get(key, default)

    @classmethod
    def set_cipher_option(cls, key: str, value: object) -> None:
        """
        Override a single cipher setting, e.g. from the command line.

        Args:
            key: Key within the cipher section
            value: New value
        """
        cls._ensure_initialized()
        cls._config.setdefault("cipher", {})[key] = value

    @classmethod
    def get_log_level(cls) -> str:
        """
        Get the configured log level name.

        Returns:
            Log level name such as "INFO"
        """
        return str(cls.get("log_level", "INFO")).upper()

    @classmethod
    def cipher_config(cls) -> CipherConfig:
        """
        Build the validated cipher configuration.

        Returns:
            CipherConfig for the current settings

        Raises:
            ConfigurationError: If the settings fail validation
        """
        cipher = cls.get("cipher", {})
        if not isinstance(cipher, dict):
            raise ConfigurationError("The 'cipher' section must be a mapping")
        return CipherConfig.from_mapping(cipher)
