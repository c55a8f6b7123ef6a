"""
加密模块 - 口令派生与 BDA 加密

Usage:
    from funcaptcha.crypto import CipherEngine, KeyDeriver

    passphrase = KeyDeriver().passphrase(user_agent)
    bda = CipherEngine().encrypt(descriptor.serialize(), passphrase)
"""

from .cipher import CipherEngine, Envelope, evp_bytes_to_key
from .key import BUCKET_SECONDS, KeyDeriver, PassphraseContext, time_bucket

__all__ = [
    "CipherEngine",
    "Envelope",
    "evp_bytes_to_key",
    "BUCKET_SECONDS",
    "KeyDeriver",
    "PassphraseContext",
    "time_bucket",
]
