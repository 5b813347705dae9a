"""
对战竞技场

单局对局、顺序批量模拟和并行批量模拟
"""
from typing import List, Optional, Sequence, Any, Tuple
import logging
import random
from concurrent.futures import ThreadPoolExecutor, ProcessPoolExecutor, as_completed

from core.game import Game
from core.errors import InvalidMove, MalformedConfiguration
from policies.base import Policy
from policies.registry import create_policy, label_for_spec

from .config import MatchConfig, BatchConfig
from .metrics import MatchResult, BatchTally, reduce_tallies

logger = logging.getLogger(__name__)


MASK64 = (1 << 64) - 1

# 派生种子用的常数
DECK_STREAM = 0x5EED15
SEAT_PERMUTATION_SALT = 0x9E3779B9


def mix_seed(base: int, a: int, b: int) -> int:
    """
    64 位种子混合 (xorshift)

    Args:
        base: 基础种子
        a: 第一个分量 (通常为对局编号)
        b: 第二个分量 (座位或数据流编号)

    Returns:
        64 位无符号种子
    """
    z = (base ^ (a * 0x9E3779B97F4A7C15) ^ (b * 0xBF58476D1CE4E5B9)) & MASK64
    z ^= z >> 12
    z ^= (z << 25) & MASK64
    z ^= z >> 27
    return z


def play_match(
    config: MatchConfig,
    policies: Optional[Sequence[Policy]] = None,
    recorder: Any = None,
) -> MatchResult:
    """
    进行一局对局

    Args:
        config: 对局配置
        policies: 每个座位的策略，None 时按规格字符串创建
        recorder: 可选动作记录器，对局结束后调用 finalize(winner)

    Returns:
        对局结果

    Raises:
        InvalidMove: 某个策略选择了非法动作
    """
    if policies is None:
        policies = [
            create_policy(spec, seat, config.seed)
            for seat, spec in enumerate(config.specs)
        ]
    if len(policies) != config.num_players:
        raise MalformedConfiguration(
            f"expected {config.num_players} policies, got {len(policies)}"
        )

    game = Game(config.game_config())
    status = game.run(policies, turn_cap=config.turn_cap, recorder=recorder)

    if recorder is not None and hasattr(recorder, "finalize"):
        recorder.finalize(game.winner)

    return MatchResult(
        winner=game.winner,
        status=status,
        turns=game.turns,
        points=game.winner_points(),
        labels=tuple(label_for_spec(spec) for spec in config.specs),
        decision_counts=tuple(game.decision_counts),
        decision_time=tuple(game.decision_time),
    )


def plan_game(batch: BatchConfig, index: int) -> Tuple[MatchConfig, List[int]]:
    """
    批次中第 index 局的配置

    Args:
        batch: 批量配置
        index: 对局编号

    Returns:
        (对局配置, 每个座位的策略种子)
    """
    specs = list(batch.specs)
    if batch.permute_seats:
        random.Random(batch.seed ^ SEAT_PERMUTATION_SALT ^ index).shuffle(specs)
    config = MatchConfig(
        specs=tuple(specs),
        stock_size=batch.stock_size,
        turn_cap=batch.turn_cap,
        seed=mix_seed(batch.seed, index, DECK_STREAM),
    )
    policy_seeds = [mix_seed(batch.seed, index, seat) for seat in range(len(specs))]
    return config, policy_seeds


def run_games(batch: BatchConfig, start: int, stop: int) -> BatchTally:
    """
    顺序运行 [start, stop) 范围内的对局

    每局的 InvalidMove 只中止该局，记录后继续

    Args:
        batch: 批量配置
        start: 起始编号
        stop: 结束编号 (不含)

    Returns:
        这部分对局的统计
    """
    tally = BatchTally(num_seats=batch.num_players)
    for index in range(start, stop):
        config, policy_seeds = plan_game(batch, index)
        labels = tuple(label_for_spec(spec) for spec in config.specs)
        policies = [
            create_policy(spec, seat, policy_seeds[seat])
            for seat, spec in enumerate(config.specs)
        ]
        try:
            result = play_match(config, policies)
        except InvalidMove as e:
            logger.error(f"Game {index} aborted by seat {e.seat} ({e.policy}): {e}")
            tally.add_aborted(labels)
            continue
        tally.add_result(result)
    return tally


def chunk_bounds(n_games: int, n_chunks: int) -> List[Tuple[int, int]]:
    """把 [0, n_games) 切成连续且尽量均匀的区间"""
    n_chunks = max(1, min(n_chunks, n_games)) if n_games > 0 else 1
    edges = [n_games * k // n_chunks for k in range(n_chunks + 1)]
    return [(edges[k], edges[k + 1]) for k in range(n_chunks)]


class Arena:
    """
    对战竞技场

    顺序运行批量对局
    """

    def play_match(
        self,
        config: MatchConfig,
        policies: Optional[Sequence[Policy]] = None,
        recorder: Any = None,
    ) -> MatchResult:
        """进行一局对局"""
        return play_match(config, policies, recorder)

    def run_batch(self, batch: BatchConfig) -> BatchTally:
        """
        运行整个批次

        Args:
            batch: 批量配置

        Returns:
            批次统计
        """
        logger.info(f"Running {batch.n_games} games: {', '.join(batch.specs)}")
        tally = run_games(batch, 0, batch.n_games)
        self._log_summary(tally)
        return tally

    def _log_summary(self, tally: BatchTally):
        logger.info(
            f"Batch finished: {tally.games} games, seat wins {tally.seat_wins}, "
            f"capped {tally.capped}, draws {tally.draws}, aborted {tally.aborted}"
        )


class ParallelArena(Arena):
    """
    并行对战竞技场

    把对局编号切成连续区间，每个工作者独立统计，最后归约
    """

    def __init__(self, n_workers: Optional[int] = None, use_processes: Optional[bool] = None):
        """
        Args:
            n_workers: 工作者数，None 时使用批量配置中的值
            use_processes: 是否使用进程池，None 时使用批量配置中的值
        """
        self.n_workers = n_workers
        self.use_processes = use_processes

    def run_batch(self, batch: BatchConfig) -> BatchTally:
        """并行运行整个批次"""
        n_workers = self.n_workers or batch.n_workers
        use_processes = batch.use_processes if self.use_processes is None else self.use_processes
        bounds = chunk_bounds(batch.n_games, n_workers)

        if len(bounds) <= 1:
            return super().run_batch(batch)

        logger.info(
            f"Running {batch.n_games} games on {len(bounds)} "
            f"{'processes' if use_processes else 'threads'}: {', '.join(batch.specs)}"
        )

        executor_cls = ProcessPoolExecutor if use_processes else ThreadPoolExecutor
        tallies = []
        with executor_cls(max_workers=len(bounds)) as executor:
            futures = [
                executor.submit(run_games, batch, start, stop)
                for start, stop in bounds
            ]
            for future in as_completed(futures):
                tallies.append(future.result())

        tally = reduce_tallies(tallies)
        self._log_summary(tally)
        return tally


def run_batch(batch: BatchConfig) -> BatchTally:
    """
    便捷函数：按配置选择顺序或并行竞技场

    Args:
        batch: 批量配置

    Returns:
        批次统计
    """
    if batch.n_workers > 1:
        return ParallelArena().run_batch(batch)
    return Arena().run_batch(batch)
