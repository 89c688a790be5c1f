"""
Cipher engine implementation.

This module wraps a single symmetric block cipher configuration (algorithm,
key, direction, padding and IV policy) and exposes a one-shot transform
over byte strings.
"""

import logging
import re
from dataclasses import dataclass

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, CipherAlgorithm, algorithms, modes

from ..errors import CipherError, ConfigurationError
from ..models import CipherConfig, CipherMode


logger = logging.getLogger(__name__)


_ALGORITHM_NAME = re.compile(r"^(?P<family>[a-z]+)-(?P<bits>\d+)-(?P<mode>[a-z0-9]+)$")

_FAMILIES: dict[str, type[CipherAlgorithm]] = {
    "aes": algorithms.AES,
}

_MODES: dict[str, type[modes.Mode]] = {
    "cbc": modes.CBC,
    "ecb": modes.ECB,
    "ctr": modes.CTR,
}

# Only these modes operate on whole blocks; CTR behaves as a stream cipher
_BLOCK_MODES = frozenset({"cbc", "ecb"})

_KEY_BITS = frozenset({128, 192, 256})


@dataclass(frozen=True)
class CipherSpec:
    """A resolved cipher name."""

    name: str
    family: type[CipherAlgorithm]
    key_bits: int
    mode_name: str

    @property
    def key_bytes(self) -> int:
        return self.key_bits // 8

    @property
    def block_size(self) -> int:
        return self.family.block_size

    @property
    def uses_iv(self) -> bool:
        return self.mode_name != "ecb"

    @property
    def is_block_mode(self) -> bool:
        return self.mode_name in _BLOCK_MODES

    def build_mode(self, iv: bytes | None) -> modes.Mode:
        mode_cls = _MODES[self.mode_name]
        if not self.uses_iv:
            return mode_cls()
        if iv is None:
            raise CipherError(f"{self.name} requires an IV")
        return mode_cls(iv)


def resolve_algorithm(name: str) -> CipherSpec:
    """
    Resolve an OpenSSL-style cipher name such as ``aes-256-cbc``.

    Args:
        name: Cipher name, case-insensitive

    Returns:
        The resolved CipherSpec

    Raises:
        ConfigurationError: If the name is not a supported cipher
    """
    match = _ALGORITHM_NAME.match(name.strip().lower())
    if (
        match is None
        or match["family"] not in _FAMILIES
        or match["mode"] not in _MODES
        or int(match["bits"]) not in _KEY_BITS
    ):
        supported = ", ".join(sorted(_FAMILIES))
        raise ConfigurationError(
            f"Unsupported cipher algorithm: {name!r} "
            f"(expected <family>-<bits>-<mode> with family one of {supported})"
        )

    return CipherSpec(
        name=match.group(0),
        family=_FAMILIES[match["family"]],
        key_bits=int(match["bits"]),
        mode_name=match["mode"],
    )


def normalize_key(key: bytes, key_size: int, key_pad: bytes) -> bytes:
    """
    Force a key to exactly key_size bytes.

    A key of the wrong length is truncated to key_size and then right-padded
    with key_pad, so long keys lose their tail and short keys are filled.
    """
    if len(key) != key_size:
        logger.debug(
            "Key length differs from key_size, normalizing",
            extra={"key_length": len(key), "key_size": key_size},
        )
        key = key[:key_size].ljust(key_size, key_pad)
    return key


class CipherEngine:
    """
    Owns one cipher configuration and runs complete transforms with it.

    A fresh cipher context is created for every call to run(), so nothing
    from a previous operation leaks into the next. After reset() the engine
    holds no key material and refuses to run; callers build a new engine
    with initialize() instead of reusing a reset one.
    """

    def __init__(self, config: CipherConfig) -> None:
        """
        Initialize the engine from a validated configuration.

        Args:
            config: The cipher configuration

        Raises:
            ConfigurationError: If the algorithm, key or IV policy is invalid
        """
        self.spec = resolve_algorithm(config.algorithm)

        self.mode = config.mode

        key_pad = config.key_pad.encode("utf-8")
        if len(key_pad) != 1:
            raise ConfigurationError("key_pad must encode to a single byte")
        key = normalize_key(config.key.encode("utf-8"), config.key_size, key_pad)
        if len(key) != self.spec.key_bytes:
            raise ConfigurationError(
                f"{self.spec.name} needs a {self.spec.key_bytes} byte key, "
                f"but key_size is {config.key_size}"
            )
        self._algorithm: CipherAlgorithm | None = self.spec.family(key)

        self.random_iv_length = config.random_iv_length
        self._static_iv: bytes | None = None
        if self.random_iv_length is not None:
            logger.debug(
                "iv_random_length is configured, ignoring any statically defined value for 'iv'",
                extra={"iv_random_length": self.random_iv_length},
            )
        elif config.static_iv:
            logger.warning("The static 'iv' setting is deprecated, use 'iv_random_length'")
            self._static_iv = config.static_iv.encode("utf-8")
            try:
                Cipher(self._algorithm, self.spec.build_mode(self._static_iv), backend=default_backend())
            except ValueError as e:
                raise ConfigurationError(f"Invalid static iv for {self.spec.name}: {e}") from e
        else:
            raise ConfigurationError("either 'iv' or 'iv_random_length' must be configured")

        self.padding_enabled = config.padding_enabled

        logger.debug(
            "Cipher initialisation done",
            extra={
                "algorithm": self.spec.name,
                "mode": self.mode.value,
                "iv_random_length": self.random_iv_length,
                "cipher_padding": config.cipher_padding,
            },
        )

    @classmethod
    def initialize(cls, config: CipherConfig) -> "CipherEngine":
        """Build a ready-to-use engine for config."""
        return cls(config)

    @property
    def is_ready(self) -> bool:
        return self._algorithm is not None

    def reset(self) -> None:
        """Discard the key, IV and cipher state held by this engine."""
        self._algorithm = None
        self._static_iv = None

    def run(self, data: bytes, iv: bytes | None = None) -> bytes:
        """
        Encrypt or decrypt data in one update + finalize pass.

        Args:
            data: Input bytes
            iv: IV for this call; required in random IV mode, ignored otherwise

        Returns:
            The transformed bytes

        Raises:
            CipherError: On block alignment, padding, key or IV failures, or
                if the engine has been reset
        """
        if self._algorithm is None:
            raise CipherError("Cipher engine has been reset and must be re-initialized")

        if self.random_iv_length is None:
            iv = self._static_iv
        elif iv is None and self.spec.uses_iv:
            raise CipherError("Random IV mode requires an IV for every call")

        pad = self.padding_enabled and self.spec.is_block_mode
        try:
            cipher = Cipher(self._algorithm, self.spec.build_mode(iv), backend=default_backend())
            if self.mode is CipherMode.ENCRYPT:
                if pad:
                    padder = padding.PKCS7(self.spec.block_size).padder()
                    data = padder.update(data) + padder.finalize()
                encryptor = cipher.encryptor()
                return encryptor.update(data) + encryptor.finalize()

            decryptor = cipher.decryptor()
            result = decryptor.update(data) + decryptor.finalize()
            if pad:
                unpadder = padding.PKCS7(self.spec.block_size).unpadder()
                result = unpadder.update(result) + unpadder.finalize()
            return result
        except ValueError as e:
            raise CipherError(f"{self.spec.name} {self.mode.value} failed: {e}") from e
