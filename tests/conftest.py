"""
Pytest configuration for fieldcipher tests.
"""

import os
from typing import Any, Dict, Generator

import pytest

from fieldcipher.config import FieldCipherConfig


@pytest.fixture(autouse=True)
def clean_cipher_env() -> Generator[None, None, None]:
    """
    Isolate each test from FIELDCIPHER_* environment variables.

    The variables present before the test are removed for its duration
    and restored afterward, and the class-level configuration is reset.
    """
    original = {key: value for key, value in os.environ.items() if key.startswith("FIELDCIPHER_")}
    for key in original:
        del os.environ[key]
    FieldCipherConfig._config = {}
    FieldCipherConfig._initialized = False

    yield

    for key in [key for key in os.environ if key.startswith("FIELDCIPHER_")]:
        del os.environ[key]
    os.environ.update(original)
    FieldCipherConfig._config = {}
    FieldCipherConfig._initialized = False


@pytest.fixture
def static_iv_settings() -> Dict[str, Any]:
    """
    Provide a static-IV AES-128-CBC configuration surface.

    Callers set "mode" themselves.
    """
    return {
        "algorithm": "aes-128-cbc",
        "key": "0123456789abcdef",
        "key_size": 16,
        "iv": "1234567890123456",
        "base64": True,
        "exclude_fields": [],
    }


@pytest.fixture
def random_iv_settings() -> Dict[str, Any]:
    """
    Provide a random-IV AES-256-CBC configuration surface.

    Callers set "mode" themselves.
    """
    return {
        "algorithm": "aes-256-cbc",
        "key": "an example key that is long enough",
        "key_size": 32,
        "iv_random_length": 16,
        "base64": True,
        "exclude_fields": ["@timestamp"],
    }
