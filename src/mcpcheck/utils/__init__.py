# ABOUTME: Utility modules for mcpcheck
# ABOUTME: Exports env expansion and static validation functions

from mcpcheck.utils.env import expand_env_vars, find_unset_env_refs
from mcpcheck.utils.validation import (
    ValidationError,
    validate_command_exists,
    validate_descriptor,
    validate_url,
)

__all__ = [
    "expand_env_vars",
    "find_unset_env_refs",
    "ValidationError",
    "validate_command_exists",
    "validate_descriptor",
    "validate_url",
]
