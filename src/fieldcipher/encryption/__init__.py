"""
Encryption components for fieldcipher.

This module provides the cipher engine and the record-level field
transformer built on top of it.
"""

from .cipher_engine import CipherEngine, CipherSpec, normalize_key, resolve_algorithm
from .field_transformer import FRAME_MARKER, FieldResult, FieldTransformer

__all__ = [
    "CipherEngine",
    "CipherSpec",
    "normalize_key",
    "resolve_algorithm",
    "FRAME_MARKER",
    "FieldResult",
    "FieldTransformer",
]
