"""
funcaptcha.cli 模块单元测试
"""

import argparse
import json
import logging
from unittest.mock import patch

import pytest

from funcaptcha import cli
from funcaptcha.client import TokenResult
from funcaptcha.crypto import CipherEngine, KeyDeriver
from funcaptcha.exceptions import UnexpectedStatusError
from funcaptcha.fingerprint import FingerprintDescriptor

_setup_logging = cli.setup_logging


@pytest.fixture(autouse=True)
def no_logging_setup():
    """避免测试中重置根日志器"""
    with patch.object(cli, "setup_logging"):
        yield


class TestParseData:
    """测试 --data 参数解析"""

    def test_pairs(self):
        assert cli.parse_data(["blob=abc", "x=a=b", "empty="]) == {
            "blob": "abc",
            "x": "a=b",
            "empty": "",
        }

    @pytest.mark.parametrize("pair", ["novalue", "=value"])
    def test_invalid(self, pair):
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_data([pair])


class TestCommands:
    """测试子命令"""

    def test_no_command(self, capsys):
        assert cli.main([]) == 2
        assert "usage" in capsys.readouterr().out.lower()

    def test_profiles(self, capsys):
        assert cli.main(["profiles"]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("generic")
        assert lines[1].startswith("openai")
        assert "fixed" in lines[1]

    def test_decrypt(self, capsys):
        """测试解密 BDA 输出描述符"""
        descriptor = FingerprintDescriptor().add("api_type", "js").add("mobile_sdk__is_sdk")
        passphrase = KeyDeriver().passphrase("UA/1.0", 1700000000)
        bda = CipherEngine().encrypt(descriptor.serialize(), passphrase)

        code = cli.main(
            ["decrypt", "--bda", bda, "--user-agent", "UA/1.0", "--timestamp", "1700000100"]
        )

        assert code == 0
        assert json.loads(capsys.readouterr().out) == [
            {"key": "api_type", "value": "js"},
            {"key": "mobile_sdk__is_sdk"},
        ]

    def test_decrypt_wrong_window(self, capsys):
        """测试时间窗口不同时返回错误码"""
        passphrase = KeyDeriver().passphrase("UA/1.0", 1700000000)
        bda = CipherEngine().encrypt("[]", passphrase)

        code = cli.main(
            ["decrypt", "--bda", bda, "--user-agent", "UA/1.0", "--timestamp", "1700006400"]
        )

        assert code == 1
        assert "[encrypt:" in capsys.readouterr().err

    def test_token(self, capsys):
        """测试 token 子命令组装请求参数"""
        result = TokenResult(token="abc.123|r=us-east-1")

        with patch.object(cli.TokenClient, "get_token", return_value=result) as get_token:
            code = cli.main(
                [
                    "token",
                    "--public-key",
                    "TESTKEY",
                    "--site",
                    "https://example.com",
                    "--data",
                    "blob=xyz",
                    "--user-agent",
                    "UA/1.0",
                    "--proxy",
                    "http://127.0.0.1:8080",
                ]
            )

        assert code == 0
        assert capsys.readouterr().out.strip() == "abc.123|r=us-east-1"
        options = get_token.call_args[0][0]
        assert options.public_key == "TESTKEY"
        assert options.site == "https://example.com"
        assert options.data == {"blob": "xyz"}
        assert options.user_agent == "UA/1.0"
        assert options.proxy == "http://127.0.0.1:8080"
        assert options.profile == "generic"

    def test_token_json(self, capsys):
        result = TokenResult(token="abc.123", iframe_height=290)

        with patch.object(cli.TokenClient, "get_token", return_value=result):
            code = cli.main(["token", "--profile", "openai", "--json"])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["token"] == "abc.123"
        assert output["iframe_height"] == 290

    def test_token_error(self, capsys):
        """测试请求失败时返回错误码"""
        with patch.object(
            cli.TokenClient, "get_token", side_effect=UnexpectedStatusError(403)
        ):
            code = cli.main(["token", "--public-key", "TESTKEY"])

        assert code == 1
        assert "403" in capsys.readouterr().err

    @pytest.mark.parametrize("timeout", ["0", "-1"])
    def test_token_non_positive_timeout(self, capsys, timeout):
        """测试 --timeout 为 0 或负数时报配置错误且不发送请求"""
        with patch.object(cli.TokenClient, "get_token") as get_token:
            code = cli.main(["token", "--public-key", "TESTKEY", "--timeout", timeout])

        assert code == 1
        assert "[config:" in capsys.readouterr().err
        get_token.assert_not_called()

    def test_token_bad_data(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["token", "--public-key", "TESTKEY", "--data", "novalue"])
        assert exc_info.value.code == 2


class TestSetupLogging:
    """测试日志配置"""

    @pytest.mark.parametrize(
        "verbose,log_file,level",
        [(False, None, logging.WARNING), (True, "out.log", logging.DEBUG)],
    )
    def test_levels(self, verbose, log_file, level):
        with patch.object(cli, "configure_root_logger") as configure:
            _setup_logging(verbose, log_file)

        kwargs = configure.call_args.kwargs
        assert kwargs["level"] == level
        assert kwargs["log_to_file"] is (log_file is not None)
        assert kwargs["force"] is True
