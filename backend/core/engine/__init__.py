"""
core/engine - 核心引擎模块

- state_machine: 状态机引擎（状态转换校验）

使用方式:
    >>> from core.engine import state_machine_engine, build_machine
"""

# 状态机引擎
from core.engine.state_machine import (
    StateTransition,
    StateMachineConfig,
    TransitionCheck,
    StateMachine,
    StateMachineEngine,
    build_machine,
    state_machine_engine,
)

__all__ = [
    "StateTransition",
    "StateMachineConfig",
    "TransitionCheck",
    "StateMachine",
    "StateMachineEngine",
    "build_machine",
    "state_machine_engine",
]
