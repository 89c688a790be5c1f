"""
Error types for fieldcipher.

Library exceptions raised by the cipher, codec and compression primitives
are translated into these types where they occur, so callers only ever
have to handle a FieldCipherError.
"""


class FieldCipherError(Exception):
    """Base class for all fieldcipher errors."""


class ConfigurationError(FieldCipherError):
    """Invalid algorithm, mode, key or IV policy. Fatal at startup."""


class DecodeError(FieldCipherError):
    """Malformed base64 or compressed input."""


class CipherError(FieldCipherError):
    """Block alignment, padding, key or IV failure during a transform."""


class EncodingError(FieldCipherError):
    """Transform output that is not valid UTF-8 text."""
