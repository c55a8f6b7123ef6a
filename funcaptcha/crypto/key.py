#!/usr/bin/env python3
"""
口令派生 - 时间分桶

passphrase = user_agent + str(floor(unix_seconds / 21600) * 21600)

同一个 6 小时窗口内、同一个 User-Agent 得到相同的口令；跨越窗口边界后口令改变。
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..exceptions import BuildError

logger = logging.getLogger(__name__)

# 6 小时窗口，与验证端容忍的时钟偏差一致
BUCKET_SECONDS = 21600


def time_bucket(unix_seconds: float) -> int:
    """将 unix 时间向下取整到窗口起点"""
    if not math.isfinite(unix_seconds) or unix_seconds < 0:
        raise BuildError("无效的时间戳", details={"timestamp": unix_seconds})
    return int(unix_seconds // BUCKET_SECONDS) * BUCKET_SECONDS


@dataclass(frozen=True)
class PassphraseContext:
    """口令上下文"""

    user_agent: str
    time_bucket: int

    @property
    def passphrase(self) -> str:
        return f"{self.user_agent}{self.time_bucket}"


class KeyDeriver:
    """
    口令派生器

    Usage:
        deriver = KeyDeriver()
        context = deriver.derive("Mozilla/5.0 ...")
        passphrase = context.passphrase
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    def derive(self, user_agent: str, now: Optional[float] = None) -> PassphraseContext:
        """
        计算口令上下文

        Args:
            user_agent: 请求使用的 User-Agent
            now: unix 秒，默认取时钟当前值

        Raises:
            BuildError: User-Agent 为空或时间戳无效
        """
        if not user_agent:
            raise BuildError("User-Agent 不能为空")
        if now is None:
            now = self._clock()
        context = PassphraseContext(user_agent=user_agent, time_bucket=time_bucket(now))
        logger.debug("口令派生: 时间窗口起点 %d", context.time_bucket)
        return context

    def passphrase(self, user_agent: str, now: Optional[float] = None) -> str:
        return self.derive(user_agent, now).passphrase


__all__ = [
    "BUCKET_SECONDS",
    "time_bucket",
    "PassphraseContext",
    "KeyDeriver",
]
