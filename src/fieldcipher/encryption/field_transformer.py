"""
Field-level record transformer.

This module walks the fields of a record and encrypts or decrypts each
selected value in place, wrapping the cipher engine with base64 encoding,
random IV prepending and compression framing.
"""

import base64
import binascii
import logging
import os
import threading
import zlib
from collections.abc import Callable, MutableMapping
from dataclasses import dataclass

from ..errors import DecodeError, EncodingError, FieldCipherError
from ..models import CipherConfig, CipherMode
from .cipher_engine import CipherEngine


logger = logging.getLogger(__name__)


# Prefix placed before deflated plaintext in random IV mode
FRAME_MARKER = b":$;"

Record = MutableMapping[str, object]


@dataclass(frozen=True)
class FieldResult:
    """Outcome of transforming a single field."""

    field: str
    value: object = None
    error: FieldCipherError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _as_bytes(value: object) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    try:
        return str(value).encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(f"Value is not encodable as UTF-8: {e}") from e


class FieldTransformer:
    """
    Encrypts or decrypts the fields of records in place.

    Every field not listed in the exclusion set and whose value is not
    empty is transformed. A failure on any field stops the record: fields
    already processed keep their new values, the rest are left alone, and
    the cipher engine is rebuilt from the configuration before the next
    record.

    A transformer may be shared between threads; records are processed one
    at a time.
    """

    def __init__(
        self,
        config: CipherConfig,
        engine: CipherEngine | None = None,
        on_matched: Callable[[Record], None] | None = None,
    ) -> None:
        """
        Initialize the transformer.

        Args:
            config: Cipher configuration
            engine: Optional pre-built engine; one is initialized from config if omitted
            on_matched: Optional callback invoked once for each record that
                was fully transformed

        Raises:
            ConfigurationError: If the engine cannot be initialized
        """
        self.config = config
        self.engine = engine if engine is not None else CipherEngine.initialize(config)
        self.on_matched = on_matched
        self._lock = threading.Lock()

    def should_transform(self, field: str, value: object) -> bool:
        """Check whether a field is selected for transformation."""
        if field in self.config.exclude_fields:
            return False
        if value is None:
            return False
        if isinstance(value, (bytes, bytearray)):
            return len(value) > 0
        return str(value) != ""

    def encrypt_value(self, value: object) -> str | bytes:
        """
        Encrypt a single value.

        Args:
            value: The plaintext value

        Returns:
            Base64 text if base64 is enabled, raw ciphertext bytes otherwise
        """
        data = _as_bytes(value)

        iv = None
        if self.config.uses_random_iv:
            iv = os.urandom(self.config.random_iv_length)
            data = FRAME_MARKER + zlib.compress(data)

        result = self.engine.run(data, iv)

        if iv is not None:
            result = iv + result

        if self.config.use_base64:
            return base64.b64encode(result).decode("ascii")
        return result

    def decrypt_value(self, value: object) -> str:
        """
        Decrypt a single value.

        Args:
            value: Ciphertext as produced by encrypt_value

        Returns:
            The plaintext as text

        Raises:
            DecodeError: If the base64 or compressed payload is malformed
            CipherError: If the cipher rejects the input
            EncodingError: If the plaintext is not UTF-8
        """
        data = _as_bytes(value)

        if self.config.use_base64:
            try:
                data = base64.b64decode(data, validate=True)
            except binascii.Error as e:
                raise DecodeError(f"Invalid base64 input: {e}") from e

        iv = None
        if self.config.uses_random_iv:
            iv = data[: self.config.random_iv_length]
            data = data[self.config.random_iv_length :]

        result = self.engine.run(data, iv)

        if result.startswith(FRAME_MARKER):
            try:
                result = zlib.decompress(result[len(FRAME_MARKER) :])
            except zlib.error as e:
                raise DecodeError(f"Invalid compressed payload: {e}") from e

        try:
            return result.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(f"Decrypted value is not valid UTF-8: {e}") from e

    def transform_field(self, field: str, value: object) -> FieldResult:
        """
        Transform one field value according to the configured mode.

        Errors are returned in the result rather than raised.
        """
        try:
            if self.config.mode is CipherMode.ENCRYPT:
                new_value: object = self.encrypt_value(value)
            else:
                new_value = self.decrypt_value(value)
        except FieldCipherError as e:
            return FieldResult(field=field, error=e)
        return FieldResult(field=field, value=new_value)

    def transform(self, record: Record) -> bool:
        """
        Transform the selected fields of a record in place.

        Args:
            record: The record to rewrite

        Returns:
            True if every selected field was transformed, False if the
            record was abandoned part way through
        """
        with self._lock:
            for field in list(record.keys()):
                value = record[field]
                if not self.should_transform(field, value):
                    continue

                result = self.transform_field(field, value)
                if not result.ok:
                    logger.warning(
                        "Cipher transform failed, leaving remaining fields untouched",
                        extra={
                            "field": field,
                            "error_type": type(result.error).__name__,
                            "error": str(result.error),
                        },
                    )
                    self._rebuild_engine()
                    return False

                record[field] = result.value

        if self.on_matched is not None:
            self.on_matched(record)
        return True

    def _rebuild_engine(self) -> None:
        """Tear down the current engine and initialize a new one."""
        self.engine.reset()
        self.engine = CipherEngine.initialize(self.config)
        logger.debug("Cipher engine re-initialized after failure")
