"""状态编码与动作编码测试"""
import pytest
import numpy as np

from core.cards import WILD
from core.actions import Action
from core.rules import RuleEngine
from core.state import GameState, PlayerState
from env.observation import (
    STATE_FEATURES,
    NUM_ACTIONS,
    END_TURN_INDEX,
    StateEncoder,
    ActionEncoder,
    get_action_encoder,
)


def _state():
    players = [
        PlayerState(stock=[3, 7], hand=[1, WILD], discard_piles=[[4], [], [2, 9], []]),
        PlayerState(stock=[5, 6, 12], hand=[2, 2, 2]),
        PlayerState(stock=[], hand=[]),
    ]
    state = GameState(num_players=3, stock_size=10, players=players)
    state.build_piles[1].cards = [1, 2]
    return state


class TestStateEncoder:
    """StateEncoder 测试"""

    def test_shape(self):
        features = StateEncoder().encode(_state().view(0))
        assert STATE_FEATURES == 98
        assert features.shape == (STATE_FEATURES,)
        assert features.dtype == np.float32

    def test_build_piles(self):
        f = StateEncoder().encode(_state().view(0))
        assert f[0:4] == pytest.approx([1 / 12, 0.0, 3 / 12, 2 / 12])

    def test_self_and_hand(self):
        f = StateEncoder().encode(_state().view(0))
        # 库存比例, 库存顶牌 7, 未赢
        assert f[8:11] == pytest.approx([0.2, 7 / 12, 0.0])
        hand = f[11:24]
        assert hand[0] == pytest.approx(0.5)
        assert hand[12] == pytest.approx(0.5)
        assert hand.sum() == pytest.approx(1.0)

    def test_discard_piles(self):
        f = StateEncoder().encode(_state().view(0))
        pile0 = f[24:38]
        assert pile0[3] == 1.0
        assert pile0[:13].sum() == 1.0
        assert pile0[13] == pytest.approx(0.1)
        assert f[38:52].sum() == 0.0
        pile2 = f[52:66]
        assert pile2[8] == 1.0
        assert pile2[13] == pytest.approx(0.2)

    def test_player_slots(self):
        f = StateEncoder().encode(_state().view(0))
        slots = f[80:98].reshape(6, 3)
        assert slots[0] == pytest.approx([0.2, 0.4, 0.0])
        assert slots[1] == pytest.approx([0.3, 0.6, 0.0])
        assert np.all(slots[2:] == 0.0)

    def test_empty_stock_top(self):
        f = StateEncoder().encode(_state().view(2))
        assert f[8] == 0.0
        assert f[9] == 0.0
        assert f[11:24].sum() == 0.0

    def test_perspective_changes_encoding(self):
        state = _state()
        encoder = StateEncoder()
        assert not np.array_equal(encoder.encode(state.view(0)), encoder.encode(state.view(1)))


class TestActionEncoder:
    """ActionEncoder 测试"""

    def test_num_actions(self):
        assert ActionEncoder().num_actions == NUM_ACTIONS == 61
        assert END_TURN_INDEX == 60

    def test_segment_offsets(self):
        encoder = ActionEncoder()
        assert encoder.encode(Action.from_hand(0, 0)) == 0
        assert encoder.encode(Action.from_hand(4, 3)) == 19
        assert encoder.encode(Action.from_stock(0)) == 20
        assert encoder.encode(Action.from_stock(3)) == 23
        assert encoder.encode(Action.from_discard(0, 0)) == 24
        assert encoder.encode(Action.from_discard(3, 3)) == 39
        assert encoder.encode(Action.discard(0, 0)) == 40
        assert encoder.encode(Action.discard(4, 3)) == 59
        assert encoder.encode(Action.end_turn()) == 60

    def test_decode_covers_space(self):
        encoder = ActionEncoder()
        actions = [encoder.decode(i) for i in range(NUM_ACTIONS)]
        assert len(set(actions)) == NUM_ACTIONS
        assert all(encoder.encode(a) == i for i, a in enumerate(actions))

    def test_out_of_range(self):
        encoder = ActionEncoder()
        assert encoder.decode(-1) is None
        assert encoder.decode(NUM_ACTIONS) is None
        assert encoder.encode(Action.from_hand(5, 0)) == -1

    def test_legal_mask(self):
        state = _state()
        legal = RuleEngine.legal_actions(state, 0)
        mask = get_action_encoder().build_legal_mask(legal)
        assert mask.shape == (NUM_ACTIONS,)
        assert mask.sum() == len(legal)
        # 手牌 1 和万能牌都能打到空建造堆
        assert mask[0] == 1.0
        assert mask[1] == 0.0
        assert mask[4] == 1.0
        assert mask[5] == 1.0
        assert mask[END_TURN_INDEX] == 0.0

    def test_singleton(self):
        assert get_action_encoder() is get_action_encoder()
