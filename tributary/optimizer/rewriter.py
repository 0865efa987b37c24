# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Hand a pipeline to a rewrite engine and get the optimized pipeline back.

Optimizing a pipeline isn't needed for it to be correct, so a rewrite which
runs out of time is not an error - the pipeline is used as it was given. Only
a deadline is treated this way, every other rewrite failure is raised to the
caller.
"""

import concurrent.futures
import logging
import time
from typing import Callable
from typing import Optional
from typing import Protocol

from tributary import config
from tributary.exceptions import DeadlineExceededError
from tributary.models import Pipeline
from tributary.models import PipelineStatistics
from tributary.models import RewriterConfig
from tributary.models.pipeline_statistics import _PipelineStatistics

from .meta_optimizer import MetaOptimizer

logger = logging.getLogger(__name__)


class RewriteEngine(Protocol):
    def rewrite(self, pipeline: Pipeline, rewriter_config: RewriterConfig) -> Pipeline:
        """Return the rewritten pipeline, raising DeadlineExceededError when out of time"""


def _nothing():
    pass


def _rewrite_with_deadline(
    engine: RewriteEngine,
    pipeline: Pipeline,
    rewriter_config: RewriterConfig,
    on_finished: Callable[[], None] = _nothing,
) -> Pipeline:
    """
    Run the engine, waiting no longer than the configured timeout.

    `on_finished` is called on the calling thread once the engine has returned
    or raised. It isn't called for an engine which is abandoned.
    """
    timeout_ms = rewriter_config.meta_optimizer_timeout_ms
    if timeout_ms <= 0:
        try:
            return engine.rewrite(pipeline, rewriter_config)
        finally:
            on_finished()

    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=1, thread_name_prefix="tributary-rewrite"
    )
    try:
        future = executor.submit(engine.rewrite, pipeline, rewriter_config)
        try:
            future.exception(timeout=timeout_ms / 1000)
        except concurrent.futures.TimeoutError:
            # the engine may have finished as the wait gave up
            if not future.done():
                future.cancel()
                raise DeadlineExceededError(timeout_ms) from None
        on_finished()
        # the rewritten pipeline, or the engine's own error raised unchanged
        return future.result()
    finally:
        executor.shutdown(wait=False)


def rewrite_dataset(
    pipeline: Pipeline,
    config_factory: Callable[[], RewriterConfig],
    record_fingerprint: bool = True,
    engine: Optional[RewriteEngine] = None,
    statistics: Optional[PipelineStatistics] = None,
) -> Pipeline:
    """
    Rewrite a pipeline, falling back to the pipeline itself when the rewrite
    runs out of time.

    Parameters:
        pipeline: Pipeline
            The pipeline to optimize, it is not changed
        config_factory: Callable[[], RewriterConfig]
            Builds the rewriter configuration
        record_fingerprint: bool
            Record the fingerprint of `pipeline` in the statistics
        engine: RewriteEngine (optional)
            The engine to rewrite with, defaults to the MetaOptimizer
        statistics: PipelineStatistics (optional)
            Where this rewrite is recorded, a fresh set of statistics is used
            when not provided

    Returns:
        Pipeline: the rewritten pipeline, or `pipeline` itself (not a copy)
        when the deadline was exceeded

    The default engine counts into statistics of its own, which are added to
    `statistics` once it finishes. Nothing an abandoned engine does is
    recorded. An engine passed in keeps whatever statistics it was given.
    """
    if statistics is None:
        statistics = _PipelineStatistics()

    if record_fingerprint:
        statistics.pipeline_fingerprint = pipeline.fingerprint()

    if config.DISABLE_OPTIMIZER:
        message = "[TRIBUTARY] The optimizer has been disabled, 'DISABLE_OPTIMIZER' variable is TRUE."
        logger.info(message)
        statistics.add_message(message)
        return pipeline

    rewriter_config = config_factory()
    engine_statistics = None
    if engine is None:
        engine_statistics = _PipelineStatistics()
        engine = MetaOptimizer(engine_statistics)

    def engine_finished():
        if engine_statistics is not None:
            statistics.merge(engine_statistics)

    start = time.monotonic_ns()
    try:
        return _rewrite_with_deadline(engine, pipeline, rewriter_config, engine_finished)
    except DeadlineExceededError as err:
        # running out of time only means the pipeline runs unoptimized
        logger.warning(str(err))
        statistics.add_message(f"{err} The pipeline will run without being optimized.")
        statistics.rewrite_deadline_exceeded += 1
        return pipeline
    finally:
        statistics.increase("time_rewriting", time.monotonic_ns() - start)
