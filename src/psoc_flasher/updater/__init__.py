"""
更新模块
========

包含更新会话状态机和外部调用接口。
"""

from .session import UpdateSession, SessionState, iter_commands
from .boundary import (
    ErrorSlot,
    UpdateStatus,
    open_session,
    run_update,
    update_device,
)

__all__ = [
    "UpdateSession",
    "SessionState",
    "iter_commands",
    "ErrorSlot",
    "UpdateStatus",
    "open_session",
    "run_update",
    "update_device",
]
