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
Bespoke error types for Tributary.

Exception Hierarchy:

Exception
 └── Error
     └── PipelineError
         ├── InvalidArgumentError
         ├── InvalidConfigurationError
         ├── InvalidInternalStateError
         └── RewriteError
             ├── DeadlineExceededError
             ├── OptimizationFailedError
             └── OptimizationNotFoundError

Only DeadlineExceededError is recovered from when rewriting a pipeline; every
other error is surfaced to the caller.
"""

from typing import Optional


# ======================== Begin Tributary Superclasses ========================
# These should not be thrown directly
class Error(Exception):
    """
    The base class of all other Tributary errors, catch this to catch all errors
    with a single except statement.
    """


class PipelineError(Error):
    """Superclass for errors raised while preparing a pipeline."""


class RewriteError(PipelineError):
    """Superclass for errors raised by the rewrite engine."""


# ======================== End Tributary Superclasses ==========================


# ======================== Begin Argument and Configuration Exceptions ========================
class InvalidArgumentError(PipelineError):
    """Exception raised when operator arguments are missing or malformed."""

    def __init__(self, argument: Optional[str] = None, message: Optional[str] = None):
        self.argument = argument
        if message is None:
            message = f"Argument '{argument}' is missing or malformed."
        super().__init__(message)


class InvalidConfigurationError(PipelineError):
    """Exception raised for invalid configuration settings."""

    def __init__(self, config_item: str, provided_value: str, valid_value_description: str = None):
        self.config_item = config_item
        self.provided_value = provided_value
        self.valid_value_description = valid_value_description

        message = f"Invalid value '{provided_value}' for configuration setting '{config_item}'."
        if valid_value_description:
            message += f" {valid_value_description}"
        super().__init__(message)


class InvalidInternalStateError(PipelineError):
    """Exception raised for invalid internal states, these are usually bugs."""


# ======================== End Argument and Configuration Exceptions ==========================


# ======================== Begin Rewrite Exceptions ========================
class DeadlineExceededError(RewriteError):
    """
    Raised when the rewrite engine runs out of its time budget.

    This is the only error the rewriter recovers from, the pipeline is used
    without being optimized.
    """

    def __init__(self, timeout_ms: Optional[int] = None, message: Optional[str] = None):
        self.timeout_ms = timeout_ms
        if message is None:
            message = "Pipeline rewrite did not complete before its deadline"
            if timeout_ms:
                message += f" of {timeout_ms}ms"
            message += "."
        super().__init__(message)


class OptimizationNotFoundError(RewriteError):
    """Exception raised when an optimization is requested which is not registered."""

    def __init__(self, optimization: str):
        self.optimization = optimization
        message = f"Optimization '{optimization}' is not registered."
        super().__init__(message)


class OptimizationFailedError(RewriteError):
    """Exception raised when an optimization fails and failures are fatal."""

    def __init__(self, optimization: str, error: Exception):
        self.optimization = optimization
        self.error = error
        message = f"Optimization '{optimization}' failed - {type(error).__name__}: {error}"
        super().__init__(message)


# ======================== End Rewrite Exceptions ==========================
