"""
自对弈记录

在每个策略动作执行前记录 (座位, 状态编码, 动作索引)，对局结束后按结果标注
"""
from typing import List, Optional, Dict
from dataclasses import dataclass, field
import numpy as np

from core.actions import Action
from core.state import GameView

from .observation import StateEncoder, ActionEncoder, get_action_encoder


@dataclass
class TurnRecord:
    """
    单个动作记录

    Attributes:
        seat: 行动座位
        encoding: 动作前的状态编码
        action_index: 动作索引
        outcome: 结果标签 (+1 赢家, -1 输家, 0 和局/截断)，finalize 之前为 None
    """
    seat: int
    encoding: np.ndarray
    action_index: int
    outcome: Optional[float] = None


@dataclass
class TrajectoryRecorder:
    """
    一局游戏的记录器

    作为 Game.play_turn / Game.run 的 recorder 使用
    """
    records: List[TurnRecord] = field(default_factory=list)
    winner: Optional[int] = None
    finalized: bool = False
    state_encoder: StateEncoder = field(default_factory=StateEncoder)
    action_encoder: ActionEncoder = field(default_factory=get_action_encoder)

    def __len__(self) -> int:
        return len(self.records)

    def on_action(self, view: GameView, seat: int, action: Action):
        """记录一个即将执行的动作"""
        self.records.append(TurnRecord(
            seat=seat,
            encoding=self.state_encoder.encode(view),
            action_index=self.action_encoder.encode(action),
        ))

    def finalize(self, winner: Optional[int]) -> List[TurnRecord]:
        """
        按对局结果标注所有记录

        Args:
            winner: 赢家座位，和局或截断为 None

        Returns:
            已标注的记录
        """
        self.winner = winner
        for record in self.records:
            if winner is None:
                record.outcome = 0.0
            else:
                record.outcome = 1.0 if record.seat == winner else -1.0
        self.finalized = True
        return self.records

    def to_arrays(self) -> Dict[str, np.ndarray]:
        """堆叠为训练用数组"""
        if not self.records:
            return {
                "encodings": np.zeros((0, self.state_encoder.num_features), dtype=np.float32),
                "actions": np.zeros(0, dtype=np.int64),
                "seats": np.zeros(0, dtype=np.int64),
                "outcomes": np.zeros(0, dtype=np.float32),
            }
        return {
            "encodings": np.stack([r.encoding for r in self.records]),
            "actions": np.array([r.action_index for r in self.records], dtype=np.int64),
            "seats": np.array([r.seat for r in self.records], dtype=np.int64),
            "outcomes": np.array(
                [r.outcome if r.outcome is not None else 0.0 for r in self.records],
                dtype=np.float32,
            ),
        }

    def clear(self):
        self.records.clear()
        self.winner = None
        self.finalized = False
