"""
funcaptcha.crypto.key 模块单元测试

测试口令的时间分桶
"""

import math

import pytest

from funcaptcha.crypto import BUCKET_SECONDS, KeyDeriver, PassphraseContext, time_bucket
from funcaptcha.exceptions import BuildError

WINDOW_START = 1699984800


class TestTimeBucket:
    """测试 time_bucket"""

    def test_floor_to_window(self):
        """测试向下取整到 6 小时窗口"""
        assert BUCKET_SECONDS == 21600
        assert time_bucket(1700000000) == WINDOW_START
        assert time_bucket(1700000000.75) == WINDOW_START

    def test_same_window(self):
        """测试同一窗口内结果不变"""
        assert time_bucket(WINDOW_START) == WINDOW_START
        assert time_bucket(WINDOW_START + BUCKET_SECONDS - 1) == WINDOW_START
        assert time_bucket(WINDOW_START + BUCKET_SECONDS - 0.001) == WINDOW_START

    def test_boundary(self):
        """测试跨越窗口边界"""
        assert time_bucket(WINDOW_START + BUCKET_SECONDS) == WINDOW_START + BUCKET_SECONDS
        assert time_bucket(WINDOW_START - 1) == WINDOW_START - BUCKET_SECONDS

    def test_zero(self):
        assert time_bucket(0) == 0

    @pytest.mark.parametrize("value", [-1, math.nan, math.inf])
    def test_invalid_timestamp(self, value):
        """测试无效时间戳"""
        with pytest.raises(BuildError):
            time_bucket(value)


class TestKeyDeriver:
    """测试 KeyDeriver"""

    def test_passphrase_format(self):
        """测试口令 = User-Agent + 窗口起点"""
        deriver = KeyDeriver()
        assert deriver.passphrase("UA/1.0", 1700000000) == "UA/1.0" + str(WINDOW_START)

    def test_stable_within_window(self):
        """测试同一窗口内口令相同"""
        deriver = KeyDeriver()
        first = deriver.passphrase("UA/1.0", WINDOW_START + 10)
        second = deriver.passphrase("UA/1.0", WINDOW_START + BUCKET_SECONDS - 10)
        assert first == second

    def test_changes_across_window(self):
        """测试增加 21600 秒后口令改变"""
        deriver = KeyDeriver()
        first = deriver.passphrase("UA/1.0", 1700000000)
        second = deriver.passphrase("UA/1.0", 1700000000 + BUCKET_SECONDS)
        assert first != second
        assert second.endswith(str(WINDOW_START + BUCKET_SECONDS))

    def test_uses_clock(self, fixed_clock):
        """测试未指定时间时使用注入的时钟"""
        context = KeyDeriver(clock=fixed_clock).derive("UA/1.0")

        assert isinstance(context, PassphraseContext)
        assert context.time_bucket == WINDOW_START
        assert context.user_agent == "UA/1.0"

    def test_empty_user_agent(self):
        """测试 User-Agent 为空"""
        with pytest.raises(BuildError) as exc_info:
            KeyDeriver().derive("", 1700000000)
        assert exc_info.value.stage == "build"

    def test_context_is_frozen(self):
        context = PassphraseContext(user_agent="UA/1.0", time_bucket=0)
        with pytest.raises(Exception):
            context.time_bucket = 1
