"""
18 种预设策略参数

h1..h18 全部是 StrategyParams 的取值，baseline 即 h15
"""
from dataclasses import replace
from typing import Dict

from core.actions import CardSource

from .cascade import StrategyParams, FullHandSearch, Protection
from .scoring import DiscardScoring, PlayScoring


# 来源优先级
STOCK_DISCARD_HAND = (CardSource.STOCK, CardSource.DISCARD, CardSource.HAND)
STOCK_HAND_DISCARD = (CardSource.STOCK, CardSource.HAND, CardSource.DISCARD)


def _build_presets() -> Dict[str, StrategyParams]:
    p = {}

    p["h1"] = StrategyParams(
        source_priority=STOCK_DISCARD_HAND,
        discard_scoring=DiscardScoring.WEIGHTED,
        play_scoring=PlayScoring.SOURCE_WEIGHTED,
        rank_all_sources=True,
    )
    p["h2"] = StrategyParams(
        source_priority=STOCK_DISCARD_HAND,
        stock_planner=True,
    )
    p["h3"] = replace(p["h2"], discard_scoring=DiscardScoring.WEIGHTED)
    p["h4"] = StrategyParams(
        source_priority=STOCK_DISCARD_HAND,
        stock_planner=True,
        threshold=1,
        discard_scoring=DiscardScoring.PRIORITY_FREE,
    )

    # 阈值族
    p["h5"] = replace(p["h4"], threshold=6)
    p["h6"] = replace(p["h4"], threshold=5)
    p["h7"] = replace(p["h4"], threshold=7)
    p["h8"] = replace(p["h5"], protection=Protection.ALWAYS, protect_planner=True)
    p["h9"] = replace(p["h5"], protection=Protection.LAST_RESORT)
    p["h10"] = replace(p["h9"], duplication_guard=True)
    p["h11"] = replace(p["h10"], full_hand=FullHandSearch.HAND)
    p["h12"] = replace(p["h11"], discard_scoring=DiscardScoring.SEQUENCING)
    p["h13"] = replace(p["h11"], full_hand=FullHandSearch.HAND_AND_DISCARDS)

    # 简单族
    p["h14"] = StrategyParams(source_priority=STOCK_DISCARD_HAND)
    p["h15"] = StrategyParams(source_priority=STOCK_HAND_DISCARD)
    p["h16"] = replace(p["h14"], discard_scoring=DiscardScoring.MANAGER)
    p["h17"] = replace(p["h15"], play_scoring=PlayScoring.PROGRESS)
    p["h18"] = StrategyParams(
        source_priority=STOCK_DISCARD_HAND,
        discard_scoring=DiscardScoring.MANAGER,
        play_scoring=PlayScoring.STOCK_SYNERGY,
    )

    p["baseline"] = p["h15"]
    return p


PRESETS: Dict[str, StrategyParams] = _build_presets()

HEURISTIC_NAMES = tuple(f"h{i}" for i in range(1, 19))


def get_preset(name: str) -> StrategyParams:
    """按名称获取预设参数"""
    key = name.lower()
    if key not in PRESETS:
        raise ValueError(f"Unknown preset: {name}")
    return PRESETS[key]
