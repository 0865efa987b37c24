# isort: skip_file
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Tributary chooses and applies optimizations to dataset pipelines before they
run.

To get started:
    import tributary
    from tributary.models import Pipeline, PipelineStep

    pipeline = Pipeline.sequential([PipelineStep("source"), PipelineStep("map")])
    pipeline = tributary.optimize_dataset(pipeline, optimizations_default=["noop_elimination"])

Optimizations are registered with `tributary.optimizer.strategies.register_strategy`.

Version 2 operators mix live experiments into the default optimizations for a
stable share of jobs, and a rewrite which runs out of time falls back to the
unoptimized pipeline rather than failing.
"""

import datetime
import os
from pathlib import Path

# we do a separate check for debug mode here so we don't load the config module just yet
TRIBUTARY_DEBUG = os.environ.get("TRIBUTARY_DEBUG") is not None


# python-dotenv allows us to create an environment file to store settings.
# Only try to import dotenv if a .env file exists to avoid paying the
# import cost when no environment file is present.
_env_path = Path.cwd() / ".env"
if _env_path.exists():
    try:
        import dotenv  # type:ignore

        dotenv.load_dotenv(dotenv_path=_env_path)
        if TRIBUTARY_DEBUG:
            print(f"{datetime.datetime.now()} [LOADER] Loading `.env` file.")
    except ImportError:  # pragma: no cover
        # dotenv is optional; if it's not installed, just continue.
        pass


from tributary import config
from tributary.__version__ import __author__
from tributary.__version__ import __build__
from tributary.__version__ import __version__
from tributary.operators import OptimizeDataset
from tributary.operators import optimize_dataset
from tributary.optimizer import create_config
from tributary.optimizer import rewrite_dataset
from tributary.optimizer import select_optimizations

__all__ = [
    "OptimizeDataset",
    "config",
    "create_config",
    "optimize_dataset",
    "rewrite_dataset",
    "select_optimizations",
    "__author__",
    "__build__",
    "__version__",
]
