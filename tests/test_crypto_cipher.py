"""
funcaptcha.crypto.cipher 模块单元测试

测试 CryptoJS 兼容的 BDA 加密
"""

import base64
import hashlib
import json

import pytest

from funcaptcha.crypto import CipherEngine, Envelope, evp_bytes_to_key
from funcaptcha.exceptions import EncryptionError

PASSPHRASE = "UA/1.01699984800"


def _envelope(bda: str) -> dict:
    return json.loads(base64.b64decode(bda))


class TestEvpBytesToKey:
    """测试 EVP_BytesToKey 派生"""

    def test_sizes(self, fixed_salt):
        key, iv = evp_bytes_to_key(b"secret", fixed_salt)
        assert len(key) == 32
        assert len(iv) == 16

    def test_md5_chain(self, fixed_salt):
        """测试 D_i = MD5(D_{i-1} || passphrase || salt)"""
        d1 = hashlib.md5(b"secret" + fixed_salt).digest()
        d2 = hashlib.md5(d1 + b"secret" + fixed_salt).digest()
        d3 = hashlib.md5(d2 + b"secret" + fixed_salt).digest()

        key, iv = evp_bytes_to_key(b"secret", fixed_salt)

        assert key == d1 + d2
        assert iv == d3


class TestCipherEngine:
    """测试 CipherEngine"""

    def test_round_trip(self):
        """测试加密后解密得到原文"""
        engine = CipherEngine()
        plaintext = '[{"key":"api_type","value":"js"},{"key":"mobile_sdk__is_sdk"}]'

        bda = engine.encrypt(plaintext, PASSPHRASE)

        assert engine.decrypt(bda, PASSPHRASE) == plaintext

    def test_round_trip_non_ascii(self):
        """测试非 ASCII 明文逐字节还原"""
        engine = CipherEngine()
        plaintext = '[{"key":"lang","value":"中文 ✓ \U0001f600"}]'

        assert engine.decrypt(engine.encrypt(plaintext, PASSPHRASE), PASSPHRASE) == plaintext

    def test_empty_plaintext(self):
        """测试空明文也会填充一个完整块"""
        engine = CipherEngine()
        bda = engine.encrypt("", PASSPHRASE)

        ciphertext = base64.b64decode(_envelope(bda)["ct"])
        assert len(ciphertext) == CipherEngine.AES_BLOCK_SIZE
        assert engine.decrypt(bda, PASSPHRASE) == ""

    def test_deterministic_with_fixed_salt(self, fixed_salt):
        """测试 salt 固定时输出确定"""
        engine = CipherEngine(salt_factory=lambda: fixed_salt)

        assert engine.encrypt("hello", PASSPHRASE) == engine.encrypt("hello", PASSPHRASE)

    def test_salt_argument_overrides_factory(self, fixed_salt):
        engine = CipherEngine()
        first = engine.encrypt("hello", PASSPHRASE, salt=fixed_salt)
        second = engine.encrypt("hello", PASSPHRASE, salt=fixed_salt)
        assert first == second

    def test_random_salt(self):
        """测试默认每次使用新的 salt"""
        engine = CipherEngine()
        first = _envelope(engine.encrypt("hello", PASSPHRASE))
        second = _envelope(engine.encrypt("hello", PASSPHRASE))
        assert first["s"] != second["s"]

    def test_envelope_format(self, fixed_salt):
        """测试信封为紧凑 JSON，键顺序 ct/iv/s"""
        engine = CipherEngine(salt_factory=lambda: fixed_salt)
        bda = engine.encrypt("hello", PASSPHRASE)

        text = base64.b64decode(bda).decode("ascii")
        envelope = json.loads(text)

        assert text.startswith('{"ct":"')
        assert " " not in text
        assert list(envelope) == ["ct", "iv", "s"]
        assert envelope["s"] == fixed_salt.hex()

        _, iv = evp_bytes_to_key(PASSPHRASE.encode("utf-8"), fixed_salt)
        assert envelope["iv"] == iv.hex()

    def test_openssl_key_and_iv(self, fixed_salt):
        """测试与 openssl enc -md md5 -P 输出的 key/iv 一致"""
        key, iv = evp_bytes_to_key(PASSPHRASE.encode("utf-8"), fixed_salt)

        assert key.hex() == "6879ab68d267933fcaadeea5716375081e05bc95283a279563ccd0656effd0d4"
        assert iv.hex() == "7b41b5432380cc0e85282044e4fbdc77"

    # openssl enc -aes-256-cbc -md md5 -S 0102030405060708 -pass pass:UA/1.01699984800 | base64
    @pytest.mark.parametrize(
        "plaintext,ciphertext",
        [
            ("hello", "xRwlVUtvzTYwVqYgsl+Pjg=="),
            (
                '[{"key":"api_type","value":"js"}]',
                "yDvYPUyRBYqzDdumKDqcs/1Lpi7ELSbHBYQ9ydW+P7FgazwqCEqFGdF7GPzOjfby",
            ),
        ],
    )
    def test_known_answer(self, fixed_salt, plaintext, ciphertext):
        """测试固定 salt / 口令 / 明文的密文与 openssl 一致"""
        engine = CipherEngine(salt_factory=lambda: fixed_salt)

        bda = engine.encrypt(plaintext, PASSPHRASE)

        assert base64.b64decode(bda).decode("ascii") == (
            '{"ct":"%s","iv":"7b41b5432380cc0e85282044e4fbdc77","s":"0102030405060708"}'
            % ciphertext
        )
        assert engine.decrypt(bda, PASSPHRASE) == plaintext

    def test_envelope_from_json(self, fixed_salt):
        envelope = Envelope(ciphertext=b"\x00" * 16, iv=b"\x01" * 16, salt=fixed_salt)
        restored = Envelope.from_json(envelope.to_json())
        assert restored == envelope

    def test_wrong_passphrase(self):
        """测试口令错误"""
        engine = CipherEngine()
        bda = engine.encrypt("hello", PASSPHRASE)

        with pytest.raises(EncryptionError) as exc_info:
            engine.decrypt(bda, "UA/1.01700006400")
        assert exc_info.value.operation == "decrypt"
        assert exc_info.value.stage == "encrypt"

    @pytest.mark.parametrize(
        "bda",
        [
            "not base64!!",
            base64.b64encode(b"not json").decode("ascii"),
            base64.b64encode(b'{"ct":"AAAA"}').decode("ascii"),
            base64.b64encode(b'{"ct":"AAAA","iv":"zz","s":"00"}').decode("ascii"),
        ],
    )
    def test_malformed_bda(self, bda):
        """测试 BDA 信封损坏"""
        with pytest.raises(EncryptionError):
            CipherEngine().decrypt(bda, PASSPHRASE)

    def test_tampered_ciphertext(self, fixed_salt):
        """测试密文被截断"""
        engine = CipherEngine(salt_factory=lambda: fixed_salt)
        envelope = _envelope(engine.encrypt("hello world", PASSPHRASE))
        envelope["ct"] = base64.b64encode(base64.b64decode(envelope["ct"])[:-1]).decode("ascii")
        bda = base64.b64encode(json.dumps(envelope).encode("ascii")).decode("ascii")

        with pytest.raises(EncryptionError):
            engine.decrypt(bda, PASSPHRASE)

    def test_lone_surrogate(self):
        """测试无法 UTF-8 编码的明文"""
        with pytest.raises(EncryptionError) as exc_info:
            CipherEngine().encrypt("bad \ud800 text", PASSPHRASE)
        assert exc_info.value.operation == "encrypt"
        assert isinstance(exc_info.value.cause, UnicodeEncodeError)

    def test_lone_surrogate_passphrase(self):
        with pytest.raises(EncryptionError):
            CipherEngine().encrypt("hello", "UA\udfff")

    def test_wrong_salt_size(self):
        """测试 salt 长度错误"""
        with pytest.raises(EncryptionError) as exc_info:
            CipherEngine().encrypt("hello", PASSPHRASE, salt=b"short")
        assert exc_info.value.details["salt_size"] == 5
