"""
批量统计

BatchTally 是可合并的计数器集合: 每个工作者独立统计，最后用 merge 归约
"""
from typing import Dict, List, Optional, Tuple, Any, Iterable
from dataclasses import dataclass, field
from collections import Counter
import numpy as np

from core.state import GameStatus


def _sum_counters(a: Dict[str, float], b: Dict[str, float]) -> Dict[str, float]:
    merged: Counter = Counter()
    merged.update(a)
    merged.update(b)
    return dict(merged)


@dataclass
class MatchResult:
    """
    单局结果

    Attributes:
        winner: 赢家座位，无赢家为 None
        status: 结束状态
        turns: 已进行的回合数
        points: 赢家得分
        labels: 每个座位的策略标签
        decision_counts: 每个座位的决策次数
        decision_time: 每个座位的决策耗时 (秒)
    """
    winner: Optional[int]
    status: GameStatus
    turns: int
    points: int
    labels: Tuple[str, ...]
    decision_counts: Tuple[int, ...] = ()
    decision_time: Tuple[float, ...] = ()

    @property
    def is_win(self) -> bool:
        return self.status == GameStatus.WON


@dataclass
class BatchTally:
    """
    批量对局统计

    Attributes:
        num_seats: 座位数
        games: 总局数
        seat_wins: 每个座位的胜局数
        capped: 达到回合上限的局数
        draws: 僵局局数
        aborted: 因非法动作中止的局数
        turns: 有效对局的总回合数
        label_wins / label_seats / label_points: 按策略标签统计的胜局、出场、得分
        label_decisions / label_time: 按策略标签统计的决策次数和耗时
    """
    num_seats: int = 0
    games: int = 0
    seat_wins: List[int] = field(default_factory=list)
    capped: int = 0
    draws: int = 0
    aborted: int = 0
    turns: int = 0
    label_wins: Dict[str, int] = field(default_factory=dict)
    label_seats: Dict[str, int] = field(default_factory=dict)
    label_points: Dict[str, int] = field(default_factory=dict)
    label_decisions: Dict[str, int] = field(default_factory=dict)
    label_time: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        if len(self.seat_wins) < self.num_seats:
            self.seat_wins = list(self.seat_wins) + [0] * (self.num_seats - len(self.seat_wins))

    # ------------------------------------------------------------------
    # 累加
    # ------------------------------------------------------------------

    def _count_labels(self, labels: Iterable[str]):
        for label in labels:
            self.label_seats[label] = self.label_seats.get(label, 0) + 1

    def add_result(self, result: MatchResult):
        """累加一局结果"""
        self.games += 1
        self.turns += result.turns
        self._count_labels(result.labels)

        for seat, label in enumerate(result.labels):
            if seat < len(result.decision_counts):
                self.label_decisions[label] = self.label_decisions.get(label, 0) + result.decision_counts[seat]
            if seat < len(result.decision_time):
                self.label_time[label] = self.label_time.get(label, 0.0) + result.decision_time[seat]

        if result.status == GameStatus.WON and result.winner is not None:
            self.seat_wins[result.winner] += 1
            label = result.labels[result.winner]
            self.label_wins[label] = self.label_wins.get(label, 0) + 1
            self.label_points[label] = self.label_points.get(label, 0) + result.points
        elif result.status == GameStatus.DRAW:
            self.draws += 1
        else:
            self.capped += 1

    def add_aborted(self, labels: Iterable[str]):
        """累加一局中止的对局"""
        self.games += 1
        self.aborted += 1
        self._count_labels(labels)

    def merge(self, other: 'BatchTally') -> 'BatchTally':
        """
        合并两个统计 (结合律、交换律成立)

        Args:
            other: 另一个统计

        Returns:
            新的合并结果
        """
        num_seats = max(self.num_seats, other.num_seats)
        a = self.seat_wins + [0] * (num_seats - len(self.seat_wins))
        b = other.seat_wins + [0] * (num_seats - len(other.seat_wins))
        return BatchTally(
            num_seats=num_seats,
            games=self.games + other.games,
            seat_wins=[x + y for x, y in zip(a, b)],
            capped=self.capped + other.capped,
            draws=self.draws + other.draws,
            aborted=self.aborted + other.aborted,
            turns=self.turns + other.turns,
            label_wins=_sum_counters(self.label_wins, other.label_wins),
            label_seats=_sum_counters(self.label_seats, other.label_seats),
            label_points=_sum_counters(self.label_points, other.label_points),
            label_decisions=_sum_counters(self.label_decisions, other.label_decisions),
            label_time=_sum_counters(self.label_time, other.label_time),
        )

    # ------------------------------------------------------------------
    # 派生指标
    # ------------------------------------------------------------------

    @property
    def decided(self) -> int:
        """有赢家的局数"""
        return sum(self.seat_wins)

    @property
    def non_wins(self) -> int:
        """无赢家的局数 (截断 + 僵局 + 中止)"""
        return self.capped + self.draws + self.aborted

    def win_rate(self, seat: int) -> float:
        """座位胜率，分母只包含有赢家的局"""
        if self.decided == 0:
            return 0.0
        return self.seat_wins[seat] / self.decided

    @property
    def non_win_rate(self) -> float:
        """无赢家比例，分母为总局数"""
        if self.games == 0:
            return 0.0
        return self.non_wins / self.games

    @property
    def avg_turns(self) -> float:
        played = self.games - self.aborted
        return self.turns / played if played else 0.0

    def label_win_rate(self, label: str) -> float:
        """策略标签的胜率 (胜局 / 出场次数)"""
        seats = self.label_seats.get(label, 0)
        if seats == 0:
            return 0.0
        return self.label_wins.get(label, 0) / seats

    def avg_decision_time(self, label: str) -> float:
        """策略标签的平均决策耗时 (秒)"""
        n = self.label_decisions.get(label, 0)
        if n == 0:
            return 0.0
        return self.label_time.get(label, 0.0) / n

    def outcome_counts(self) -> Tuple:
        """不含计时的结果计数 (用于比较确定性)"""
        return (
            self.num_seats,
            self.games,
            tuple(self.seat_wins),
            self.capped,
            self.draws,
            self.aborted,
            self.turns,
            tuple(sorted(self.label_wins.items())),
            tuple(sorted(self.label_seats.items())),
            tuple(sorted(self.label_points.items())),
            tuple(sorted(self.label_decisions.items())),
        )

    # ------------------------------------------------------------------
    # 报告
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式 (供外部绘图)"""
        win_rates = np.array([self.win_rate(s) for s in range(self.num_seats)], dtype=np.float64)
        return {
            "games": self.games,
            "decided": self.decided,
            "seats": [
                {"seat": s, "wins": self.seat_wins[s], "win_rate": float(win_rates[s])}
                for s in range(self.num_seats)
            ],
            "capped": self.capped,
            "draws": self.draws,
            "aborted": self.aborted,
            "non_wins": self.non_wins,
            "non_win_rate": self.non_win_rate,
            "avg_turns": self.avg_turns,
            "labels": {
                label: {
                    "seats": self.label_seats.get(label, 0),
                    "wins": self.label_wins.get(label, 0),
                    "win_rate": self.label_win_rate(label),
                    "points": self.label_points.get(label, 0),
                    "avg_decision_ms": self.avg_decision_time(label) * 1000.0,
                }
                for label in sorted(self.label_seats)
            },
        }

    def to_text(self) -> str:
        """纯文本报告"""
        lines = [f"Games: {self.games}  (decided {self.decided}, avg turns {self.avg_turns:.1f})"]
        lines.append(f"{'Seat':<8}{'Wins':>8}{'Win %':>10}")
        for s in range(self.num_seats):
            lines.append(f"{s:<8}{self.seat_wins[s]:>8}{self.win_rate(s):>10.2%}")
        lines.append(
            f"No winner: {self.non_wins} ({self.non_win_rate:.2%})  "
            f"capped {self.capped}, draws {self.draws}, aborted {self.aborted}"
        )
        if self.label_seats:
            lines.append(f"{'Policy':<14}{'Seats':>8}{'Wins':>8}{'Win %':>10}{'Points':>9}{'ms/dec':>9}")
            for label in sorted(self.label_seats):
                lines.append(
                    f"{label:<14}{self.label_seats[label]:>8}"
                    f"{self.label_wins.get(label, 0):>8}"
                    f"{self.label_win_rate(label):>10.2%}"
                    f"{self.label_points.get(label, 0):>9}"
                    f"{self.avg_decision_time(label) * 1000.0:>9.3f}"
                )
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"BatchTally(games={self.games}, seat_wins={self.seat_wins}, "
            f"capped={self.capped}, draws={self.draws}, aborted={self.aborted})"
        )


def reduce_tallies(tallies: Iterable[BatchTally]) -> BatchTally:
    """归约多个统计"""
    result = BatchTally()
    for tally in tallies:
        result = result.merge(tally)
    return result
