# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

from typing import Iterable
from typing import Optional

from tributary import config
from tributary.models import MetaOptimizerIterations
from tributary.models import RewriterConfig

OPTIMIZER_NAME = "tributary_meta_optimizer"
OPTIMIZERS = "optimizers"
OPTIMIZER_CONFIGS = "optimizer_configs"


def create_config(
    optimizations: Iterable[str],
    optimization_configs: Iterable[str],
    timeout_ms: Optional[int] = None,
) -> RewriterConfig:
    """
    Describe a single pass of the meta optimizer which applies `optimizations`.

    The optimizations and their configs are stored as two separate lists, the
    rewrite engine gives meaning to the configs so their lengths aren't
    compared here. Optimizer errors are fatal inside the engine, it is the
    rewriter which decides whether a failure stops the pipeline.

    Parameters:
        optimizations: Iterable[str]
            The optimizations to apply, in order
        optimization_configs: Iterable[str]
            Free-form configuration strings for the optimizations
        timeout_ms: int (optional)
            The time budget for the rewrite, defaults to REWRITE_TIMEOUT_MS

    Returns:
        RewriterConfig
    """
    if timeout_ms is None:
        timeout_ms = config.REWRITE_TIMEOUT_MS

    rewriter_config = RewriterConfig(
        optimizers=[OPTIMIZER_NAME],
        meta_optimizer_iterations=MetaOptimizerIterations.ONE,
        fail_on_optimizer_errors=True,
        meta_optimizer_timeout_ms=timeout_ms,
    )
    custom_optimizer = rewriter_config.add_custom_optimizer(OPTIMIZER_NAME)
    custom_optimizer.parameter(OPTIMIZERS).extend(optimizations)
    custom_optimizer.parameter(OPTIMIZER_CONFIGS).extend(optimization_configs)
    return rewriter_config
