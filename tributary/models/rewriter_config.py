# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
The instructions handed to a rewrite engine.

A RewriterConfig names the optimizers the engine should run and carries the
parameters for custom optimizers. Parameters are lists of strings keyed by
name, the engine decides what the entries mean.
"""

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Dict
from typing import List
from typing import Optional

import orjson


class MetaOptimizerIterations(int, Enum):
    DEFAULT_NUM_ITERS = 0
    ONE = 1
    TWO = 2


@dataclass
class CustomOptimizer:
    name: str
    parameter_map: Dict[str, List[str]] = field(default_factory=dict)

    def parameter(self, key: str) -> List[str]:
        """The list stored under `key`, created empty if it isn't there yet"""
        return self.parameter_map.setdefault(key, [])

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "parameter_map": {key: list(value) for key, value in self.parameter_map.items()},
        }


@dataclass
class RewriterConfig:
    optimizers: List[str] = field(default_factory=list)
    custom_optimizers: List[CustomOptimizer] = field(default_factory=list)
    meta_optimizer_iterations: MetaOptimizerIterations = MetaOptimizerIterations.DEFAULT_NUM_ITERS
    fail_on_optimizer_errors: bool = False
    meta_optimizer_timeout_ms: int = 0

    def add_custom_optimizer(self, name: str) -> CustomOptimizer:
        custom_optimizer = CustomOptimizer(name=name)
        self.custom_optimizers.append(custom_optimizer)
        return custom_optimizer

    def custom_optimizer(self, name: str) -> Optional[CustomOptimizer]:
        for custom_optimizer in self.custom_optimizers:
            if custom_optimizer.name == name:
                return custom_optimizer
        return None

    @property
    def iterations(self) -> int:
        """The number of passes to run, the default is a single pass"""
        return max(int(self.meta_optimizer_iterations), 1)

    def to_dict(self) -> dict:
        return {
            "optimizers": list(self.optimizers),
            "custom_optimizers": [optimizer.to_dict() for optimizer in self.custom_optimizers],
            "meta_optimizer_iterations": self.meta_optimizer_iterations.name,
            "fail_on_optimizer_errors": self.fail_on_optimizer_errors,
            "meta_optimizer_timeout_ms": self.meta_optimizer_timeout_ms,
        }

    def __str__(self) -> str:
        return orjson.dumps(self.to_dict()).decode()
