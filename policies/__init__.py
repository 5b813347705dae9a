"""
Policy Layer - 决策策略

Modules:
    base: 策略契约
    scoring: 出牌与弃牌打分
    planning: 库存规划与全手牌搜索
    cascade: 参数化决策级联
    presets: h1-h18 预设
    random_policy: 随机策略
    numeric: 数值策略适配器
    registry: 规格字符串工厂
"""
from .base import Policy, card_for_action

from .scoring import (
    DiscardScoring,
    PlayScoring,
    score_discard,
    score_play,
)

from .planning import plan_stock_play, find_full_hand_sequence

from .cascade import (
    FullHandSearch,
    Protection,
    StrategyParams,
    CascadePolicy,
)

from .presets import PRESETS, HEURISTIC_NAMES, get_preset

from .random_policy import RandomPolicy

from .numeric import ScoredPolicy

from .registry import (
    PolicyRegistry,
    create_policy,
    label_for_spec,
    get_registry,
)

__all__ = [
    # base
    "Policy",
    "card_for_action",
    # scoring
    "DiscardScoring",
    "PlayScoring",
    "score_discard",
    "score_play",
    # planning
    "plan_stock_play",
    "find_full_hand_sequence",
    # cascade
    "FullHandSearch",
    "Protection",
    "StrategyParams",
    "CascadePolicy",
    # presets
    "PRESETS",
    "HEURISTIC_NAMES",
    "get_preset",
    # random
    "RandomPolicy",
    # numeric
    "ScoredPolicy",
    # registry
    "PolicyRegistry",
    "create_policy",
    "label_for_spec",
    "get_registry",
]
