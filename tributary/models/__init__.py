# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

from tributary.models.pipeline import Pipeline
from tributary.models.pipeline_statistics import PipelineStatistics
from tributary.models.pipeline_step import PipelineStep
from tributary.models.rewriter_config import CustomOptimizer
from tributary.models.rewriter_config import MetaOptimizerIterations
from tributary.models.rewriter_config import RewriterConfig

__all__ = (
    "CustomOptimizer",
    "MetaOptimizerIterations",
    "Pipeline",
    "PipelineStatistics",
    "PipelineStep",
    "RewriterConfig",
)
