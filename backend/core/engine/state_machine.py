"""
core/engine/state_machine.py

状态机引擎 - 声明实体状态的合法流转，供服务层在写入前校验
"""
from typing import Dict, FrozenSet, Iterable, List, Optional
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateTransition:
    """
    状态转换定义

    Attributes:
        from_state: 源状态
        to_state: 目标状态
        trigger: 触发动作
    """

    from_state: str
    to_state: str
    trigger: str = ""


@dataclass
class StateMachineConfig:
    """
    状态机配置

    Attributes:
        name: 状态机名称（通常为实体类型）
        states: 所有状态的列表
        transitions: 转换列表
        initial_state: 初始状态
    """

    name: str
    states: List[str]
    transitions: List[StateTransition]
    initial_state: str


@dataclass
class TransitionCheck:
    """转换校验结果"""

    allowed: bool
    reason: str = ""


class StateMachine:
    """
    状态机 - 无状态的流转图，当前状态由调用方（实体本身）持有

    Example:
        >>> machine = StateMachine(StateMachineConfig(
        ...     name="Ticket",
        ...     states=["open", "in_progress"],
        ...     transitions=[StateTransition("open", "in_progress", "assign")],
        ...     initial_state="open",
        ... ))
        >>> machine.can_transition("open", "in_progress")
        True
    """

    def __init__(self, config: StateMachineConfig):
        self._config = config
        self._targets: Dict[str, FrozenSet[str]] = {}

        # 构建转换映射: from_state -> {to_state}
        targets: Dict[str, set] = {}
        for t in config.transitions:
            if t.from_state not in config.states or t.to_state not in config.states:
                raise ValueError(f"{config.name}: unknown state in transition {t}")
            targets.setdefault(t.from_state, set()).add(t.to_state)
        self._targets = {k: frozenset(v) for k, v in targets.items()}

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> StateMachineConfig:
        """获取状态机配置"""
        return self._config

    def targets_from(self, state: str) -> FrozenSet[str]:
        """获取某状态可到达的目标状态"""
        return self._targets.get(state, frozenset())

    def sources_of(self, to_state: str) -> FrozenSet[str]:
        """获取可以到达目标状态的源状态"""
        return frozenset(s for s, targets in self._targets.items() if to_state in targets)

    def can_transition(self, from_state: str, to_state: str) -> bool:
        return to_state in self.targets_from(from_state)

    def check(self, from_state: str, to_state: str) -> TransitionCheck:
        """
        校验转换

        Returns:
            TransitionCheck，不允许时附带原因
        """
        if to_state not in self._config.states:
            return TransitionCheck(False, f"unknown state '{to_state}'")
        if self.can_transition(from_state, to_state):
            return TransitionCheck(True)
        allowed = sorted(self.targets_from(from_state))
        return TransitionCheck(
            False,
            f"{self.name} cannot move from '{from_state}' to '{to_state}'"
            f" (allowed: {', '.join(allowed) or 'none'})"
        )


class StateMachineEngine:
    """
    状态机引擎管理器 - 按实体类型管理状态机

    Example:
        >>> engine = StateMachineEngine()
        >>> engine.register(ticket_machine)
        >>> engine.validate("Ticket", "open", "in_progress").allowed
        True
    """

    def __init__(self):
        self._machines: Dict[str, StateMachine] = {}

    def register(self, machine: StateMachine) -> None:
        """注册状态机"""
        self._machines[machine.name] = machine
        logger.info(f"StateMachine registered for {machine.name}")

    def get(self, entity_type: str) -> Optional[StateMachine]:
        """获取状态机"""
        return self._machines.get(entity_type)

    def validate(self, entity_type: str, from_state: str, to_state: str) -> TransitionCheck:
        """校验转换；未注册的实体类型一律放行"""
        machine = self.get(entity_type)
        if machine is None:
            return TransitionCheck(True, f"no state machine for {entity_type}")
        return machine.check(from_state, to_state)


def build_machine(name: str, initial_state: str,
                  edges: Iterable[tuple], states: Iterable[str]) -> StateMachine:
    """从 (from, to, trigger) 三元组快速构建状态机"""
    return StateMachine(StateMachineConfig(
        name=name,
        states=list(states),
        transitions=[StateTransition(*edge) for edge in edges],
        initial_state=initial_state,
    ))


# 全局状态机引擎实例
state_machine_engine = StateMachineEngine()


# 导出
__all__ = [
    "StateTransition",
    "StateMachineConfig",
    "TransitionCheck",
    "StateMachine",
    "StateMachineEngine",
    "build_machine",
    "state_machine_engine",
]
