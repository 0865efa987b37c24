# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Registry of the optimizations the meta optimizer can apply.

Optimizations are registered by name:

    @register_strategy
    class NoopElimination(OptimizationStrategy):
        name = "noop_elimination"

        def optimize(self, pipeline):
            ...
"""

import threading
from typing import Dict
from typing import List
from typing import Type

from tributary.exceptions import InvalidInternalStateError
from tributary.exceptions import OptimizationNotFoundError

from .optimization_strategy import OptimizationStrategy
from .optimization_strategy import get_steps_of_type_from_pipeline

_registry: Dict[str, Type[OptimizationStrategy]] = {}
_registry_lock = threading.Lock()


def register_strategy(strategy: Type[OptimizationStrategy]) -> Type[OptimizationStrategy]:
    name = getattr(strategy, "name", None)
    if not name:
        raise InvalidInternalStateError(f"Optimization strategy {strategy.__name__} has no name.")
    with _registry_lock:
        if _registry.get(name, strategy) is not strategy:
            raise InvalidInternalStateError(f"An optimization named '{name}' is already registered.")
        _registry[name] = strategy
    return strategy


def unregister_strategy(name: str):
    with _registry_lock:
        _registry.pop(name, None)


def get_strategy(name: str) -> Type[OptimizationStrategy]:
    strategy = _registry.get(name)
    if strategy is None:
        raise OptimizationNotFoundError(name)
    return strategy


def registered_strategies() -> List[str]:
    return sorted(_registry)


__all__ = [
    "OptimizationStrategy",
    "get_steps_of_type_from_pipeline",
    "get_strategy",
    "register_strategy",
    "registered_strategies",
    "unregister_strategy",
]
