"""
Evaluation Layer - 批量模拟与统计

Modules:
    config: 对局与批量配置
    arena: 单局对局和 (并行) 批量模拟
    metrics: 可合并的批量统计
"""
from .config import (
    DEFAULT_TURN_CAP,
    MatchConfig,
    BatchConfig,
)
from .arena import (
    mix_seed,
    play_match,
    plan_game,
    run_games,
    run_batch,
    Arena,
    ParallelArena,
)
from .metrics import (
    MatchResult,
    BatchTally,
    reduce_tallies,
)

__all__ = [
    # config
    "DEFAULT_TURN_CAP",
    "MatchConfig",
    "BatchConfig",
    # arena
    "mix_seed",
    "play_match",
    "plan_game",
    "run_games",
    "run_batch",
    "Arena",
    "ParallelArena",
    # metrics
    "MatchResult",
    "BatchTally",
    "reduce_tallies",
]
