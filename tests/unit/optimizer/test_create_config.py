import os
import sys

sys.path.insert(1, os.path.join(sys.path[0], "../../.."))

import orjson

from tributary import config
from tributary.models import MetaOptimizerIterations
from tributary.optimizer import OPTIMIZER_CONFIGS
from tributary.optimizer import OPTIMIZER_NAME
from tributary.optimizer import OPTIMIZERS
from tributary.optimizer import create_config


def test_single_meta_optimizer_pass():
    rewriter_config = create_config(["map_fusion", "noop_elimination"], [])

    assert rewriter_config.optimizers == [OPTIMIZER_NAME]
    assert rewriter_config.meta_optimizer_iterations == MetaOptimizerIterations.ONE
    assert rewriter_config.iterations == 1
    assert rewriter_config.fail_on_optimizer_errors is True
    assert len(rewriter_config.custom_optimizers) == 1

    custom_optimizer = rewriter_config.custom_optimizers[0]
    assert custom_optimizer.name == OPTIMIZER_NAME
    assert custom_optimizer.parameter_map[OPTIMIZERS] == ["map_fusion", "noop_elimination"]
    assert custom_optimizer.parameter_map[OPTIMIZER_CONFIGS] == []


def test_configs_are_kept_in_order_and_not_matched_to_optimizations():
    configs = ["map_fusion:autotune=true", "b=2", "a=1"]
    rewriter_config = create_config(["map_fusion"], configs)
    custom_optimizer = rewriter_config.custom_optimizer(OPTIMIZER_NAME)
    assert custom_optimizer.parameter_map[OPTIMIZERS] == ["map_fusion"]
    assert custom_optimizer.parameter_map[OPTIMIZER_CONFIGS] == configs


def test_config_does_not_share_the_callers_lists():
    optimizations = ["map_fusion"]
    rewriter_config = create_config(optimizations, [])
    optimizations.append("filter_fusion")
    assert rewriter_config.custom_optimizers[0].parameter_map[OPTIMIZERS] == ["map_fusion"]


def test_empty_selection_still_produces_a_pass():
    rewriter_config = create_config([], [])
    assert len(rewriter_config.custom_optimizers) == 1
    assert rewriter_config.custom_optimizers[0].parameter_map == {
        OPTIMIZERS: [],
        OPTIMIZER_CONFIGS: [],
    }


def test_timeout_defaults_to_configured_value():
    assert create_config([], []).meta_optimizer_timeout_ms == config.REWRITE_TIMEOUT_MS
    assert create_config([], [], timeout_ms=25).meta_optimizer_timeout_ms == 25


def test_config_serializes():
    rewriter_config = create_config(["map_fusion"], ["map_fusion:autotune=true"], timeout_ms=10)
    as_dict = orjson.loads(str(rewriter_config))
    assert as_dict == {
        "optimizers": [OPTIMIZER_NAME],
        "custom_optimizers": [
            {
                "name": OPTIMIZER_NAME,
                "parameter_map": {
                    OPTIMIZERS: ["map_fusion"],
                    OPTIMIZER_CONFIGS: ["map_fusion:autotune=true"],
                },
            }
        ],
        "meta_optimizer_iterations": "ONE",
        "fail_on_optimizer_errors": True,
        "meta_optimizer_timeout_ms": 10,
    }, as_dict


if __name__ == "__main__":  # pragma: no cover
    from tests.tools import run_tests

    run_tests()
