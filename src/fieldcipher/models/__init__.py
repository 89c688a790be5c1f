"""
Configuration models for fieldcipher.
"""

from .cipher_config import CipherConfig, CipherMode

__all__ = ["CipherConfig", "CipherMode"]
