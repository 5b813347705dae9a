"""
本回合内的搜索

- plan_stock_play: 用手牌和弃牌堆顶把某个建造堆推进到库存顶牌需要的值，返回计划的第一步
- find_full_hand_sequence: 回溯搜索一个能打出全部手牌的顺序 (可穿插弃牌堆顶)
"""
from typing import Callable, List, Optional, Sequence, Tuple

from core.cards import WILD, MIN_CARD_VALUE, MAX_CARD_VALUE, next_after, matches_value
from core.actions import Action
from core.state import GameView


# blocked(value) -> 是否否决打出该数字的出牌
ValueVeto = Callable[[int], bool]


def required_values(next_value: int, stock: int) -> List[int]:
    """
    建造堆从 next_value 推进到可以接受 stock 所需的数字序列

    Args:
        next_value: 建造堆当前需要的值
        stock: 库存顶牌

    Returns:
        需要依次打出的数字 (可能跨过 12 回到 1)，万能牌库存为空列表
    """
    if stock == WILD or next_value == stock:
        return []
    if next_value < stock:
        return list(range(next_value, stock))
    return list(range(next_value, MAX_CARD_VALUE + 1)) + list(range(MIN_CARD_VALUE, stock))


def _effective_value(card: int, next_value: int) -> int:
    return next_value if card == WILD else card


def _immediate_stock_play(view: GameView, stock: int) -> Optional[Action]:
    """库存顶牌能直接打出时选择目标建造堆"""
    piles = view.build_piles
    if stock == WILD:
        # 万能牌打到最靠近完成的堆
        best = max(range(len(piles)), key=lambda i: (piles[i].next_value, len(piles[i].cards), -i))
        return Action.from_stock(best)

    candidates = [i for i, pile in enumerate(piles) if pile.next_value == stock]
    if not candidates:
        return None
    best = max(candidates, key=lambda i: (len(piles[i].cards), -i))
    return Action.from_stock(best)


def plan_stock_play(
    view: GameView,
    legal_plays: Sequence[Action],
    blocked: Optional[ValueVeto] = None,
) -> Optional[Action]:
    """
    库存优先规划

    对每个建造堆计算所需数字，依次从 精确弃牌堆顶 > 精确手牌 > 万能弃牌堆顶 > 万能手牌 中取牌；
    选择步数最少的建造堆 (平局取编号小的)，返回第一步

    Args:
        view: 行动玩家视角
        legal_plays: 当前合法出牌
        blocked: 可选否决，被否决的库存出牌或计划步骤不会被采用 (该建造堆的计划作废)

    Returns:
        计划的第一个动作，无法在本回合打出库存时返回 None
    """
    me = view.me
    stock = me.stock_top
    if stock is None:
        return None

    legal = set(legal_plays)
    immediate = _immediate_stock_play(view, stock)
    if immediate is not None and immediate in legal:
        value = _effective_value(stock, view.build_piles[immediate.target].next_value)
        if blocked is None or not blocked(value):
            return immediate

    # 按数字索引可用来源
    hand_by_value: List[List[int]] = [[] for _ in range(MAX_CARD_VALUE + 1)]
    discard_by_value: List[List[int]] = [[] for _ in range(MAX_CARD_VALUE + 1)]
    wild_hands: List[int] = []
    wild_discards: List[int] = []

    for idx, card in enumerate(view.hand):
        if card == WILD:
            wild_hands.append(idx)
        else:
            hand_by_value[card].append(idx)
    for d_idx, top in enumerate(me.discard_tops):
        if top is None:
            continue
        if top == WILD:
            wild_discards.append(d_idx)
        else:
            discard_by_value[top].append(d_idx)

    best_plan: Optional[Tuple[int, List[Action]]] = None
    for pile_idx, pile in enumerate(view.build_piles):
        required = required_values(pile.next_value, stock)
        used_hand = set()
        used_discard = set()
        steps: List[Action] = []
        possible = True

        for need in required:
            step = None
            d = next((d for d in discard_by_value[need] if d not in used_discard), None)
            h = next((h for h in hand_by_value[need] if h not in used_hand), None)
            if d is None and h is None:
                d = next((d for d in wild_discards if d not in used_discard), None)
                if d is None:
                    h = next((h for h in wild_hands if h not in used_hand), None)
            if d is not None:
                used_discard.add(d)
                step = Action.from_discard(d, pile_idx)
            elif h is not None:
                used_hand.add(h)
                step = Action.from_hand(h, pile_idx)

            if step is None or (blocked is not None and blocked(need)):
                possible = False
                break
            steps.append(step)

        if not possible:
            continue
        if best_plan is None or len(steps) < len(best_plan[1]):
            best_plan = (pile_idx, steps)

    if best_plan is None:
        return None

    pile_idx, steps = best_plan
    if steps:
        first = steps[0]
    else:
        first = Action.from_stock(pile_idx)
        value = _effective_value(stock, view.build_piles[pile_idx].next_value)
        if blocked is not None and blocked(value):
            return None
    if first in legal:
        return first
    return None


def find_full_hand_sequence(
    view: GameView,
    legal_plays: Sequence[Action],
    use_discards: bool = False,
) -> Optional[Action]:
    """
    搜索一个能连续打出全部手牌的顺序

    手牌打空会触发奖励补牌，所以任何一个可行顺序都同样有价值，找到第一个即返回

    Args:
        view: 行动玩家视角
        legal_plays: 当前合法出牌
        use_discards: 是否允许穿插使用弃牌堆顶 (每个弃牌堆只用当前顶牌)

    Returns:
        顺序中的第一个动作，不存在时返回 None
    """
    hand = view.hand
    if not hand:
        return None

    piles = view.next_values()
    discards = view.me.discard_tops if use_discards else (None,) * len(view.me.discard_piles)

    # 至少要有一张可以开始的牌
    any_playable = any(matches_value(card, v) for card in hand for v in piles)
    if not any_playable:
        any_playable = any(
            top is not None and matches_value(top, v) for top in discards for v in piles
        )
    if not any_playable:
        return None

    legal = set(legal_plays)
    used_hand = [False] * len(hand)
    used_discard = [False] * len(discards)
    path: List[Action] = []

    def try_place(action: Action, card: int, played_hand: int, mark: List[bool], slot: int) -> bool:
        for pi in range(len(piles)):
            if not matches_value(card, piles[pi]):
                continue
            candidate = Action(action.action_type, action.source, action.index, pi)
            if not path and candidate not in legal:
                continue
            old = piles[pi]
            piles[pi] = next_after(old)
            mark[slot] = True
            path.append(candidate)
            if dfs(played_hand):
                return True
            path.pop()
            mark[slot] = False
            piles[pi] = old
        return False

    def dfs(played_hand: int) -> bool:
        if played_hand == len(hand):
            return True

        for hi, card in enumerate(hand):
            if used_hand[hi]:
                continue
            if try_place(Action.from_hand(hi, 0), card, played_hand + 1, used_hand, hi):
                return True

        # 弃牌堆顶作为辅助，不计入已打出的手牌数
        for di, top in enumerate(discards):
            if top is None or used_discard[di]:
                continue
            if try_place(Action.from_discard(di, 0), top, played_hand, used_discard, di):
                return True

        return False

    if dfs(0) and path:
        first = path[0]
        if first in legal:
            return first
    return None
