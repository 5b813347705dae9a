"""
牌的定义与编码

Skip-Bo 使用 162 张牌：
- 1-12 各 12 张
- 万能牌 (SB) 18 张

牌直接用 int 表示，1-12 为数字牌，13 为万能牌
"""
from typing import List, Tuple, Dict, Iterable
import numpy as np


# 牌面范围
MIN_CARD_VALUE = 1
MAX_CARD_VALUE = 12

# 万能牌 (可当作任意数字打出)
WILD = 13

# 牌组构成
COPIES_PER_VALUE = 12
WILD_COUNT = 18

# 桌面配置
HAND_SIZE = 5
DISCARD_PILE_COUNT = 4
BUILD_PILE_COUNT = 4
MIN_PLAYERS = 2
MAX_PLAYERS = 6

# 牌的种类数 (1-12 + 万能牌)
CARD_BUCKETS = MAX_CARD_VALUE + 1


# 完整牌组 (162 张，未洗牌的固定顺序)
FULL_DECK: Tuple[int, ...] = tuple(
    [value for _ in range(COPIES_PER_VALUE) for value in range(MIN_CARD_VALUE, MAX_CARD_VALUE + 1)]
    + [WILD] * WILD_COUNT
)

# 牌面值到显示字符的映射
CARD_TO_STR: Dict[int, str] = {v: str(v) for v in range(MIN_CARD_VALUE, MAX_CARD_VALUE + 1)}
CARD_TO_STR[WILD] = 'SB'

# 显示字符到牌面值的映射
STR_TO_CARD: Dict[str, int] = {v: k for k, v in CARD_TO_STR.items()}


def is_wild(card: int) -> bool:
    """检查是否为万能牌"""
    return card == WILD


def matches_value(card: int, required: int) -> bool:
    """
    检查牌能否满足建造堆所需的数字

    Args:
        card: 牌
        required: 建造堆需要的下一个数字 (1-12)

    Returns:
        万能牌或数字相等时为 True
    """
    return card == WILD or card == required


def card_priority(card: int) -> int:
    """牌的优先级: 数字牌为其面值，万能牌最高 (13)"""
    return card


def next_after(value: int) -> int:
    """数字的下一个值 (12 之后回到 1)"""
    return MIN_CARD_VALUE if value >= MAX_CARD_VALUE else value + 1


def card_bucket(card: int) -> int:
    """牌到计数桶的索引: 1-12 -> 0-11，万能牌 -> 12"""
    return card - 1


def card_to_str(card: int) -> str:
    return CARD_TO_STR.get(card, '?')


def cards_to_str(cards: Iterable[int]) -> str:
    """
    将牌列表转换为可读字符串

    Args:
        cards: 牌列表 (保持原有顺序)

    Returns:
        如 "1 2 SB 7"
    """
    return ' '.join(card_to_str(c) for c in cards)


def str_to_cards(s: str) -> List[int]:
    """
    将字符串转换为牌列表

    Args:
        s: 空格分隔的牌字符串，如 "1 2 SB 7"

    Returns:
        牌列表
    """
    cards = []
    for token in s.split():
        token = token.upper()
        if token not in STR_TO_CARD:
            raise ValueError(f"Unknown card: {token!r}")
        cards.append(STR_TO_CARD[token])
    return cards


def cards_to_counts(cards: Iterable[int]) -> np.ndarray:
    """
    将牌列表转换为 13 维计数向量

    Args:
        cards: 牌列表

    Returns:
        (13,) numpy 数组，索引 0-11 对应 1-12，索引 12 对应万能牌
    """
    counts = np.zeros(CARD_BUCKETS, dtype=np.float32)
    for card in cards:
        counts[card_bucket(card)] += 1
    return counts
