"""
core - 领域无关的框架层

- engine: 核心引擎（状态机）
"""
