# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
~~~
               ┌────────────┐
               │  OPERATOR  │
        ┌──────┤ ARGUMENTS  │
        │lists └────────────┘
  ┌─────▼─────┐      ┌─────────────┐
  │           │◄─────┤ Experiment  │
  │ Selector  │      │   Table     │
  └─────┬─────┘      └─────────────┘
        │optimizations
  ┌─────▼─────┐
  │ Config    │
  │ Builder   │
  └─────┬─────┘
        │RewriterConfig
  ┌─────▼─────┐      ┌─────────────┐
  │           ├──────►   Rewrite   │
  │ Rewriter  │      │   Engine    │
  └─────┬─────┘◄─────┴─────────────┘
        │Pipeline (rewritten, or the original on timeout)
        ▼
~~~

The selector decides which optimizations apply, mixing live experiments into
version 2 operators' defaults for a stable share of jobs. The config builder
wraps the optimizations in a single meta optimizer pass. The rewriter runs the
engine against a time budget and falls back to the unoptimized pipeline if
the budget runs out.

Example Usage:
    optimizations = select_optimizations(job_name, LIVE_EXPERIMENTS, enabled, disabled, default)
    pipeline = rewrite_dataset(pipeline, lambda: create_config(optimizations, []))
"""

from .configuration import OPTIMIZER_CONFIGS
from .configuration import OPTIMIZER_NAME
from .configuration import OPTIMIZERS
from .configuration import create_config
from .experiments import LIVE_EXPERIMENTS
from .experiments import ExperimentTable
from .meta_optimizer import MetaOptimizer
from .rewriter import RewriteEngine
from .rewriter import rewrite_dataset
from .selection import OptimizationArguments
from .selection import hash64
from .selection import resolve_optimizations
from .selection import select_optimizations

__all__ = (
    "ExperimentTable",
    "LIVE_EXPERIMENTS",
    "MetaOptimizer",
    "OPTIMIZER_CONFIGS",
    "OPTIMIZER_NAME",
    "OPTIMIZERS",
    "OptimizationArguments",
    "RewriteEngine",
    "create_config",
    "hash64",
    "resolve_optimizations",
    "rewrite_dataset",
    "select_optimizations",
)
