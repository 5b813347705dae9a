"""
对局与批量配置

定义单局对局和批量模拟的配置 (已解析的值，解析由外部命令行/配置层负责)
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from core.cards import MIN_PLAYERS, MAX_PLAYERS
from core.state import DEFAULT_SEED, GameConfig
from core.errors import MalformedConfiguration


DEFAULT_TURN_CAP = 2000


def _validate_common(specs: Tuple[str, ...], turn_cap: Optional[int]):
    if not MIN_PLAYERS <= len(specs) <= MAX_PLAYERS:
        raise MalformedConfiguration(
            f"seat count must be between {MIN_PLAYERS} and {MAX_PLAYERS}, got {len(specs)}"
        )
    if any(not isinstance(s, str) or not s.strip() for s in specs):
        raise MalformedConfiguration(f"policy specs must be non-empty strings: {specs}")
    if turn_cap is not None and turn_cap <= 0:
        raise MalformedConfiguration(f"turn cap must be positive, got {turn_cap}")


@dataclass
class MatchConfig:
    """
    单局配置

    Attributes:
        specs: 每个座位的策略规格字符串 (座位数 = 长度)
        stock_size: 库存大小，None 表示按标准规则
        turn_cap: 回合上限，None 表示不限
        seed: 洗牌种子
    """
    specs: Tuple[str, ...] = ("baseline", "baseline")
    stock_size: Optional[int] = None
    turn_cap: Optional[int] = DEFAULT_TURN_CAP
    seed: int = DEFAULT_SEED

    def __post_init__(self):
        self.specs = tuple(self.specs)
        _validate_common(self.specs, self.turn_cap)
        # 库存大小在这里提前校验
        self.game_config()

    @property
    def num_players(self) -> int:
        return len(self.specs)

    def game_config(self) -> GameConfig:
        return GameConfig(
            num_players=self.num_players,
            seed=self.seed,
            stock_size=self.stock_size,
        )

    @classmethod
    def from_dict(cls, d: dict) -> 'MatchConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)


@dataclass
class BatchConfig:
    """
    批量模拟配置

    Attributes:
        specs: 每个座位的策略规格字符串
        n_games: 对局数
        stock_size: 库存大小
        turn_cap: 每局回合上限
        seed: 基础种子 (整个批次可由它完全复现)
        permute_seats: 每局是否随机打乱座位
        n_workers: 并行工作者数
        use_processes: 使用进程池 (否则线程池)
        chart_path: 图表输出路径 (原样传给外部绘图层)
    """
    specs: Tuple[str, ...] = ("baseline", "baseline")
    n_games: int = 100
    stock_size: Optional[int] = None
    turn_cap: Optional[int] = DEFAULT_TURN_CAP
    seed: int = DEFAULT_SEED
    permute_seats: bool = True
    n_workers: int = 1
    use_processes: bool = False
    chart_path: Optional[str] = None

    def __post_init__(self):
        self.specs = tuple(self.specs)
        _validate_common(self.specs, self.turn_cap)
        if self.n_games < 0:
            raise MalformedConfiguration(f"game count must not be negative, got {self.n_games}")
        if self.n_workers < 1:
            raise MalformedConfiguration(f"worker count must be at least 1, got {self.n_workers}")
        GameConfig(num_players=len(self.specs), stock_size=self.stock_size)

    @property
    def num_players(self) -> int:
        return len(self.specs)

    @classmethod
    def from_dict(cls, d: dict) -> 'BatchConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)
