"""
fieldcipher - field-level record encryption.

This package encrypts or decrypts selected fields of structured records in
place using a symmetric block cipher, with optional random IVs, compression
framing and base64 encoding.
"""

from .config import FieldCipherConfig
from .errors import (
    CipherError,
    ConfigurationError,
    DecodeError,
    EncodingError,
    FieldCipherError,
)
from .models import CipherConfig, CipherMode
from .encryption import CipherEngine, FieldResult, FieldTransformer

__version__ = "0.1.0"

__all__ = [
    "FieldCipherConfig",
    "CipherConfig",
    "CipherMode",
    "CipherEngine",
    "FieldResult",
    "FieldTransformer",
    "FieldCipherError",
    "ConfigurationError",
    "DecodeError",
    "CipherError",
    "EncodingError",
]
