"""
Cipher configuration model.

CipherConfig is the validated, immutable form of the configuration surface
accepted by the filter. Keys in the configuration surface (``iv``,
``iv_random_length``, ``base64``) are mapped onto descriptive attribute
names through pydantic aliases.
"""

from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigurationError


# Values of cipher_padding that turn block padding off
PADDING_DISABLED_VALUES = frozenset({"0", "false", "no", "none"})


class CipherMode(str, Enum):
    """Direction of the field transform."""

    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


class CipherConfig(BaseModel):
    """
    Immutable cipher settings shared by the engine and the transformer.

    Exactly one IV policy is used at runtime: ``random_iv_length`` when set,
    otherwise ``static_iv``. Enforcing that at least one of them is present
    is left to the engine, which owns IV handling.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Cipher name, e.g. "aes-128-cbc"
    algorithm: str

    mode: CipherMode

    # Raw key; normalized to key_size bytes by the engine
    key: str

    key_size: int = Field(default=16, gt=0)

    key_pad: str = "\0"

    cipher_padding: str | None = None

    # Fixed IV, deprecated in favor of random_iv_length
    static_iv: str | None = Field(default=None, alias="iv")

    random_iv_length: int | None = Field(default=None, alias="iv_random_length", gt=0)

    exclude_fields: frozenset[str]

    use_base64: bool = Field(default=True, alias="base64")

    @field_validator("mode", mode="before")
    @classmethod
    def _normalize_mode(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("key_pad")
    @classmethod
    def _single_pad_character(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("key_pad must be a single character")
        return value

    @field_validator("cipher_padding", mode="before")
    @classmethod
    def _padding_as_string(cls, value: object) -> object:
        # YAML hands us cipher_padding: 0 as an int
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, bool):
            return str(value).lower()
        return str(value)

    @property
    def padding_enabled(self) -> bool:
        """Whether block padding is applied on encrypt and checked on decrypt."""
        if self.cipher_padding is None:
            return True
        return self.cipher_padding.strip().lower() not in PADDING_DISABLED_VALUES

    @property
    def uses_random_iv(self) -> bool:
        return self.random_iv_length is not None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "CipherConfig":
        """
        Build a config from the plain configuration surface.

        Args:
            data: Mapping using the configuration keys (``iv``, ``base64``...)

        Returns:
            Validated CipherConfig

        Raises:
            ConfigurationError: If the mapping fails validation
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'config'}: {error['msg']}"
                for error in e.errors()
            )
            raise ConfigurationError(f"Invalid cipher configuration: {problems}") from e
