# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
The in-process rewrite engine.

The meta optimizer reads the custom optimizer entry from a RewriterConfig and
applies the named optimizations, in order, to a copy of the pipeline. The
pipeline it was given is never changed.

Optimizer configs address a single optimization each:

    <optimization>:<key>=<value>

e.g. "map_parallelization:autotune=true". The key=value pairs are handed to the
strategy when it is created.
"""

import logging
import time
from typing import Dict
from typing import List
from typing import Optional

from tributary.exceptions import DeadlineExceededError
from tributary.exceptions import InvalidConfigurationError
from tributary.exceptions import OptimizationFailedError
from tributary.exceptions import RewriteError
from tributary.models import Pipeline
from tributary.models import PipelineStatistics
from tributary.models import RewriterConfig
from tributary.models.pipeline_statistics import _PipelineStatistics

from .configuration import OPTIMIZER_CONFIGS
from .configuration import OPTIMIZER_NAME
from .configuration import OPTIMIZERS
from .strategies import OptimizationStrategy
from .strategies import get_strategy

logger = logging.getLogger(__name__)


def parse_optimizer_configs(optimizer_configs: List[str]) -> Dict[str, Dict[str, str]]:
    parameters: Dict[str, Dict[str, str]] = {}
    for entry in optimizer_configs:
        optimization, _, setting = entry.partition(":")
        key, separator, value = setting.partition("=")
        if not optimization.strip() or not key.strip() or not separator:
            raise InvalidConfigurationError(
                config_item=OPTIMIZER_CONFIGS,
                provided_value=entry,
                valid_value_description="Entries must be in the form 'optimization:key=value'.",
            )
        parameters.setdefault(optimization.strip(), {})[key.strip()] = value.strip()
    return parameters


class MetaOptimizer:
    def __init__(self, statistics: Optional[PipelineStatistics] = None):
        self.statistics = statistics if statistics is not None else _PipelineStatistics()

    def _strategies(self, rewriter_config: RewriterConfig) -> List[OptimizationStrategy]:
        if OPTIMIZER_NAME not in rewriter_config.optimizers:
            raise InvalidConfigurationError(
                config_item="optimizers",
                provided_value=str(rewriter_config.optimizers),
                valid_value_description=f"The meta optimizer '{OPTIMIZER_NAME}' must be requested.",
            )
        custom_optimizer = rewriter_config.custom_optimizer(OPTIMIZER_NAME)
        if custom_optimizer is None:
            raise InvalidConfigurationError(
                config_item="custom_optimizers",
                provided_value=str(rewriter_config.custom_optimizers),
                valid_value_description=f"No parameters for '{OPTIMIZER_NAME}' were provided.",
            )

        parameters = parse_optimizer_configs(custom_optimizer.parameter_map.get(OPTIMIZER_CONFIGS, []))
        strategies = []
        for name in custom_optimizer.parameter_map.get(OPTIMIZERS, []):
            try:
                strategy = get_strategy(name)
            except RewriteError as err:
                if rewriter_config.fail_on_optimizer_errors:
                    raise
                logger.warning("Skipping optimization - %s", err)
                self.statistics.add_message(str(err))
                continue
            strategies.append(strategy(self.statistics, parameters.get(name)))
        return strategies

    def rewrite(self, pipeline: Pipeline, rewriter_config: RewriterConfig) -> Pipeline:
        """
        Apply the optimizations in `rewriter_config` to a copy of `pipeline`.

        Raises:
            DeadlineExceededError: the time budget ran out before all of the
                optimizations were applied
            OptimizationNotFoundError: an optimization isn't registered
            OptimizationFailedError: an optimization raised an error and
                optimizer errors are fatal
        """
        start = time.monotonic_ns()
        timeout_ms = rewriter_config.meta_optimizer_timeout_ms
        deadline = start + timeout_ms * 1_000_000 if timeout_ms > 0 else None

        strategies = self._strategies(rewriter_config)
        optimized = pipeline.copy()

        try:
            for _ in range(rewriter_config.iterations):
                for strategy in strategies:
                    if deadline is not None and time.monotonic_ns() > deadline:
                        raise DeadlineExceededError(timeout_ms)
                    if not strategy.should_i_run(optimized):
                        continue
                    try:
                        optimized = strategy.optimize(optimized)
                    except RewriteError:
                        raise
                    except Exception as err:
                        if rewriter_config.fail_on_optimizer_errors:
                            raise OptimizationFailedError(strategy.name, err) from err
                        logger.warning("Optimization '%s' failed and was skipped - %s", strategy.name, err)
                        self.statistics.add_message(f"Optimization '{strategy.name}' failed - {err}")
                        continue
                    self.statistics.increase(f"optimization_{strategy.name}")
        finally:
            self.statistics.increase("time_optimizing", time.monotonic_ns() - start)

        return optimized
