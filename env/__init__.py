"""
Environment Layer - 数值接口

Modules:
    observation: 状态编码与动作索引
    recorder: 自对弈动作记录
"""
from .observation import (
    STATE_FEATURES,
    NUM_ACTIONS,
    END_TURN_INDEX,
    StateEncoder,
    ActionEncoder,
    get_action_encoder,
)

from .recorder import TurnRecord, TrajectoryRecorder

__all__ = [
    # observation
    "STATE_FEATURES",
    "NUM_ACTIONS",
    "END_TURN_INDEX",
    "StateEncoder",
    "ActionEncoder",
    "get_action_encoder",
    # recorder
    "TurnRecord",
    "TrajectoryRecorder",
]
