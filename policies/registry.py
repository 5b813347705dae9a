"""
策略注册与工厂

策略规格字符串:
- baseline: 基线策略 (h15)
- heuristic: h1
- heuristicN / hN: 第 N 个预设 (1-18)
- random[:seed]: 随机策略
- 运行时注册的前缀 (例如外部训练好的数值策略)
"""
from typing import Callable, Dict, Optional
import re

from core.errors import MalformedConfiguration

from .base import Policy
from .cascade import CascadePolicy
from .presets import PRESETS
from .random_policy import RandomPolicy


# factory(argument, seat, seed) -> Policy
PolicyFactory = Callable[[Optional[str], int, int], Policy]

_HEURISTIC_RE = re.compile(r"^(?:heuristic|h)(\d+)$")

# 黄金分割常数，用于区分不同座位的默认随机种子
SEAT_SEED_STRIDE = 0x9E3779B9


def label_for_spec(spec: str) -> str:
    """规格字符串的统计标签: ':' 之前的部分，小写"""
    return spec.split(":", 1)[0].strip().lower()


def seat_seed(seed: int, seat: int) -> int:
    """座位默认随机种子"""
    return seed ^ ((seat + 1) * SEAT_SEED_STRIDE)


class PolicyRegistry:
    """
    策略注册与工厂

    单例模式管理规格前缀到工厂函数的映射
    """

    _instance: Optional['PolicyRegistry'] = None

    def __init__(self):
        self._factories: Dict[str, PolicyFactory] = {}
        self._register_defaults()

    @classmethod
    def get_instance(cls) -> 'PolicyRegistry':
        """获取单例实例"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def _register_defaults(self):
        """注册默认策略"""
        self._factories["random"] = _make_random

    def register(self, prefix: str, factory: PolicyFactory):
        """注册策略工厂"""
        key = prefix.lower()
        if key in ("baseline", "heuristic") or _HEURISTIC_RE.match(key):
            raise ValueError(f"Prefix is reserved for built-in heuristics: {prefix}")
        self._factories[key] = factory

    def unregister(self, prefix: str):
        """移除策略工厂"""
        self._factories.pop(prefix.lower(), None)

    def list_prefixes(self) -> list:
        """列出所有注册的前缀"""
        return sorted(self._factories.keys())

    def create(self, spec: str, seat: int = 0, seed: int = 0) -> Policy:
        """
        根据规格字符串创建策略

        Args:
            spec: 规格字符串
            seat: 座位 (用于默认随机种子)
            seed: 基础种子

        Returns:
            策略实例

        Raises:
            MalformedConfiguration: 无法识别的规格
        """
        label = label_for_spec(spec)
        argument = spec.split(":", 1)[1].strip() if ":" in spec else None

        if label == "baseline":
            return CascadePolicy(PRESETS["baseline"], name=label)
        if label == "heuristic":
            return CascadePolicy(PRESETS["h1"], name=label)

        match = _HEURISTIC_RE.match(label)
        if match:
            key = f"h{int(match.group(1))}"
            if key not in PRESETS:
                raise MalformedConfiguration(f"Unknown heuristic policy: {spec}")
            return CascadePolicy(PRESETS[key], name=label)

        factory = self._factories.get(label)
        if factory is None:
            raise MalformedConfiguration(f"Unknown policy spec: {spec}")
        return factory(argument, seat, seed)


def _make_random(argument: Optional[str], seat: int, seed: int) -> Policy:
    if argument:
        try:
            seed = int(argument, 0)
        except ValueError:
            raise MalformedConfiguration(f"Invalid random policy seed: {argument}")
    return RandomPolicy(seed=seat_seed(seed, seat), name="random")


def create_policy(spec: str, seat: int = 0, seed: int = 0) -> Policy:
    """
    便捷函数：根据规格字符串创建策略

    Args:
        spec: 规格字符串
        seat: 座位
        seed: 基础种子

    Returns:
        策略实例
    """
    return PolicyRegistry.get_instance().create(spec, seat, seed)


def get_registry() -> PolicyRegistry:
    """获取策略注册表"""
    return PolicyRegistry.get_instance()
