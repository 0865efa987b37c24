# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Settings are read from, in order of precedence:

1) environment variables
2) a `tributary.yaml` file in the working directory
3) the defaults in this module
"""

import datetime
import typing
from os import environ
from pathlib import Path

_config_values: dict = {}

# we need a preliminary version of this variable
_TRIBUTARY_DEBUG = environ.get("TRIBUTARY_DEBUG") is not None


def parse_yaml(yaml_str):
    """
    A minimal YAML reader, enough for flat settings files.

    Supports scalars, inline lists (`[a, b]`), block lists (`- a`) and one level
    of nested `key: value` mappings.
    """

    def line_value(value):
        value = value.strip()
        if value.isdigit():
            value = int(value)
        elif value.replace(".", "", 1).isdigit():
            value = float(value)
        elif value.lower() == "true":
            return True
        elif value.lower() == "false":
            return False
        elif value.lower() == "none":
            return None
        elif value.startswith("["):
            return [val.strip() for val in value[1:-1].split(",") if val.strip()]
        return value

    result: dict = {}
    key = ""
    value: typing.Any = ""
    in_block = False
    block_key = ""
    for line in yaml_str.strip().split("\n"):
        ## remove comments
        line = line.split("#")[0].strip()
        if not line:
            continue
        if in_block:
            if line.startswith("- "):
                if isinstance(result[block_key], dict):
                    raise ValueError(f"Cannot mix list items and mappings under '{block_key}'.")
                result[block_key].append(line[2:].strip())
                continue
            # a mapping line after list items closes the list
            block = result[block_key]
            if line.count(":") == 1 and not (isinstance(block, list) and block):
                key, value = line.split(":", 1)
                if value.strip():
                    if not isinstance(result[block_key], dict):
                        result[block_key] = {}
                    result[block_key][key.strip()] = line_value(value)
                    continue
            in_block = False
        key, value = line.split(":", 1)
        if not value.strip():
            in_block = True
            block_key = key.strip()
            result[block_key] = []
        else:
            result[key.strip()] = line_value(value)
    return result


try:  # pragma: no cover
    _config_path = Path(".") / "tributary.yaml"
    if _config_path.exists():
        with open(_config_path, "r", encoding="UTF8") as _config_file:
            _config_values = parse_yaml(_config_file.read())
        if _TRIBUTARY_DEBUG:
            print(f"{datetime.datetime.now()} [LOADER] Loading config from {_config_path}")
except (OSError, ValueError) as exception:  # pragma: no cover
    # a broken settings file falls back to the defaults
    if _TRIBUTARY_DEBUG:
        print(
            f"{datetime.datetime.now()} [LOADER] Config file {_config_path} not used - {exception}"
        )


def get(key, default=None):
    value = environ.get(key)
    if value is None:
        value = _config_values.get(key, default)
    return value


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def job_name() -> str:
    """
    The name of the job this process is running for, used to bucket experiments.

    An unset name is returned as an empty string, which turns bucketing off.
    """
    value = get(JOB_NAME_VARIABLE)
    if value is None:
        return ""
    return str(value).strip()


# fmt:off

# the environment variable holding the job (or run) name
JOB_NAME_VARIABLE: str = get("JOB_NAME_VARIABLE", "TRIBUTARY_JOB_NAME")
# skip the rewrite step entirely
DISABLE_OPTIMIZER: bool = _as_bool(get("DISABLE_OPTIMIZER", False))
# how long the rewrite engine is given before the pipeline is used unoptimized, 0 is unbounded
REWRITE_TIMEOUT_MS: int = int(get("REWRITE_TIMEOUT_MS", 5000))
# experiments and the percentage of jobs they are rolled out to, e.g. "map_fusion:10,filter_fusion:50"
LIVE_EXPERIMENTS: typing.Any = get("LIVE_EXPERIMENTS")
# debug mode
TRIBUTARY_DEBUG: bool = _as_bool(get("TRIBUTARY_DEBUG", False))

# fmt:on
