#!/usr/bin/env python3
"""
BDA 加密引擎 - CryptoJS 兼容的口令加密

与浏览器脚本中 CryptoJS.AES.encrypt(text, passphrase) 的输出格式一致:

    1. salt: 8 字节随机数
    2. key(32) + iv(16) = EVP_BytesToKey(MD5, passphrase, salt, 1 次迭代)
    3. ct = AES-256-CBC(PKCS7) 加密 UTF-8 明文
    4. 信封: {"ct": base64(ct), "iv": hex(iv), "s": hex(salt)}  (紧凑 JSON，键顺序固定)
    5. BDA = base64(信封)

salt 固定时输出是确定的 (iv 由 salt 派生)。
"""

import base64
import binascii
import hashlib
import json
import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..exceptions import EncryptionError

logger = logging.getLogger(__name__)


@dataclass
class Envelope:
    """加密信封"""

    ciphertext: bytes
    iv: bytes
    salt: bytes

    def to_json(self) -> str:
        return json.dumps(
            {
                "ct": base64.b64encode(self.ciphertext).decode("ascii"),
                "iv": self.iv.hex(),
                "s": self.salt.hex(),
            },
            separators=(",", ":"),
        )

    @classmethod
    def from_json(cls, text: str) -> "Envelope":
        data = json.loads(text)
        return cls(
            ciphertext=base64.b64decode(data["ct"]),
            iv=bytes.fromhex(data["iv"]),
            salt=bytes.fromhex(data["s"]),
        )


def evp_bytes_to_key(
    passphrase: bytes, salt: bytes, key_size: int = 32, iv_size: int = 16
) -> Tuple[bytes, bytes]:
    """
    OpenSSL EVP_BytesToKey (MD5, 1 次迭代)

    D_i = MD5(D_{i-1} || passphrase || salt)，拼接直到 key_size + iv_size 字节
    """
    derived = b""
    block = b""
    while len(derived) < key_size + iv_size:
        block = hashlib.md5(block + passphrase + salt).digest()
        derived += block
    return derived[:key_size], derived[key_size : key_size + iv_size]


class CipherEngine:
    """
    BDA 加密引擎

    Usage:
        engine = CipherEngine()
        bda = engine.encrypt(descriptor.serialize(), passphrase)
        text = engine.decrypt(bda, passphrase)
    """

    # AES 块大小
    AES_BLOCK_SIZE = 16
    # 密钥长度 (AES-256)
    KEY_SIZE = 32
    IV_SIZE = 16
    SALT_SIZE = 8

    def __init__(self, salt_factory: Optional[Callable[[], bytes]] = None):
        """
        Args:
            salt_factory: salt 生成函数，默认 os.urandom(8)；注入固定 salt 可得到确定的输出
        """
        self._salt_factory = salt_factory or (lambda: os.urandom(self.SALT_SIZE))

    def encrypt(self, plaintext: str, passphrase: str, salt: Optional[bytes] = None) -> str:
        """
        加密描述符文本并生成 BDA

        Args:
            plaintext: 序列化后的描述符
            passphrase: KeyDeriver 生成的口令
            salt: 指定 salt (8 字节)，默认由 salt_factory 生成

        Returns:
            两层 base64 包装后的 BDA 字符串

        Raises:
            EncryptionError: 明文或口令无法 UTF-8 编码、salt 长度错误
        """
        try:
            data = plaintext.encode("utf-8")
            secret = passphrase.encode("utf-8")
        except (UnicodeEncodeError, AttributeError) as e:
            raise EncryptionError("明文或口令不是合法的 UTF-8 文本", operation="encrypt", cause=e)

        salt = salt if salt is not None else self._salt_factory()
        if len(salt) != self.SALT_SIZE:
            raise EncryptionError(
                "salt 长度错误", operation="encrypt", details={"salt_size": len(salt)}
            )

        key, iv = evp_bytes_to_key(secret, salt, self.KEY_SIZE, self.IV_SIZE)

        padder = padding.PKCS7(self.AES_BLOCK_SIZE * 8).padder()
        padded = padder.update(data) + padder.finalize()

        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        envelope = Envelope(ciphertext=ciphertext, iv=iv, salt=salt).to_json()
        logger.debug("BDA 加密完成: 明文 %d 字节, 密文 %d 字节", len(data), len(ciphertext))
        return base64.b64encode(envelope.encode("ascii")).decode("ascii")

    def decrypt(self, bda: str, passphrase: str) -> str:
        """
        解密 BDA，还原序列化的描述符

        Raises:
            EncryptionError: BDA 格式损坏或口令错误
        """
        try:
            envelope = Envelope.from_json(base64.b64decode(bda, validate=True).decode("ascii"))
        except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError) as e:
            raise EncryptionError("BDA 信封格式错误", operation="decrypt", cause=e)

        try:
            secret = passphrase.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncryptionError("口令不是合法的 UTF-8 文本", operation="decrypt", cause=e)

        key, iv = evp_bytes_to_key(secret, envelope.salt, self.KEY_SIZE, self.IV_SIZE)
        if iv != envelope.iv:
            raise EncryptionError("口令与 BDA 不匹配", operation="decrypt")

        try:
            decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(envelope.ciphertext) + decryptor.finalize()

            unpadder = padding.PKCS7(self.AES_BLOCK_SIZE * 8).unpadder()
            data = unpadder.update(padded) + unpadder.finalize()
            return data.decode("utf-8")
        except (ValueError, UnicodeDecodeError) as e:
            raise EncryptionError("BDA 解密失败", operation="decrypt", cause=e)


__all__ = [
    "Envelope",
    "evp_bytes_to_key",
    "CipherEngine",
]
