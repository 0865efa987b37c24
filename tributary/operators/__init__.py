# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

from .optimize_dataset import OPTIMIZE_DATASET_V1
from .optimize_dataset import OPTIMIZE_DATASET_V2
from .optimize_dataset import OptimizeDataset
from .optimize_dataset import optimize_dataset
from .optimize_dataset import parse_vector_argument

__all__ = (
    "OPTIMIZE_DATASET_V1",
    "OPTIMIZE_DATASET_V2",
    "OptimizeDataset",
    "optimize_dataset",
    "parse_vector_argument",
)
