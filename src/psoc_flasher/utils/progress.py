"""
进度显示模块
============

提供固件烧写进度显示功能。
"""

import sys
import time
from typing import Optional, TextIO


class ProgressBar:
    """简化版进度条显示器 (纯文本，无ANSI颜色)"""

    def __init__(
        self,
        total: int = 100,
        width: int = 40,
        unit: str = "rows",
        refresh_interval: float = 0.2,
        stream: Optional[TextIO] = None,
    ):
        """
        初始化进度条

        Args:
            total: 总数量
            width: 进度条宽度（字符数）
            unit: 计数单位
            refresh_interval: 最小刷新间隔(秒)，减少重复绘制
            stream: 输出流，默认 stderr，与 stdout 上的日志分开
        """
        self.total = total
        self.width = width
        self.unit = unit
        self.refresh_interval = refresh_interval
        self.stream = stream or sys.stderr
        self.start_time = time.time()
        self.last_display_length = 0  # 上次显示字符串的长度，用于清空行
        self._last_draw_ts = 0.0

    def update(self, current: int) -> None:
        """
        更新进度

        Args:
            current: 当前进度
        """
        if self.total <= 0:
            return

        progress_percent = min(100.0, (current / self.total) * 100)

        now_ts = time.time()
        # 若未到刷新间隔且非完成状态，直接返回
        if (
            progress_percent < 100.0
            and (now_ts - self._last_draw_ts) < self.refresh_interval
        ):
            return
        self._last_draw_ts = now_ts

        filled_width = int((progress_percent / 100) * self.width)
        bar = "█" * filled_width + "░" * (self.width - filled_width)
        elapsed = now_ts - self.start_time

        display_str = (
            f"Progress: [{progress_percent:6.2f}%][{bar}]"
            f"[{current}/{self.total} {self.unit}][{elapsed:5.1f}s]"
        )

        # 用空格填充，覆盖旧内容
        padding = " " * max(0, self.last_display_length - len(display_str))
        self.stream.write(f"\r{display_str}{padding}")
        self.stream.flush()
        self.last_display_length = len(display_str)

    def finish(self) -> None:
        """结束进度显示并换行"""
        self.stream.write("\n")
        self.stream.flush()
