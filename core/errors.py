"""
错误类型

- InvalidMove: 策略选择了合法动作集合之外的动作，对该局是致命的
- MalformedConfiguration: 配置在开局前即被拒绝

牌堆耗尽与回合上限不是错误，分别体现为抽牌失败和 GameStatus.CAPPED
"""
from typing import Optional, Any


class GameError(Exception):
    """游戏错误基类"""


class InvalidMove(GameError):
    """
    非法动作

    Attributes:
        seat: 出错的座位
        action: 被拒绝的动作
        policy: 产生该动作的策略名称 (若已知)
    """

    def __init__(
        self,
        message: str,
        seat: Optional[int] = None,
        action: Any = None,
        policy: Optional[str] = None,
    ):
        super().__init__(message)
        self.seat = seat
        self.action = action
        self.policy = policy

    def __str__(self) -> str:
        base = super().__str__()
        details = []
        if self.seat is not None:
            details.append(f"seat={self.seat}")
        if self.policy is not None:
            details.append(f"policy={self.policy}")
        if self.action is not None:
            details.append(f"action={self.action}")
        if details:
            return f"{base} ({', '.join(details)})"
        return base


class MalformedConfiguration(GameError, ValueError):
    """配置错误 (玩家数、牌库大小等)"""
