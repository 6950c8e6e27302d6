# Environment variable expansion utilities
import os
import re
import warnings

# ABOUTME: Pattern matches ${VAR_NAME} where VAR_NAME is uppercase with underscores
ENV_VAR_PATTERN = re.compile(r'\$\{([A-Z_][A-Z0-9_]*)\}')


def expand_env_vars(value: str) -> str:
    """Expand environment variables in ${VAR} format.

    ABOUTME: Unset variables are left verbatim with a UserWarning

    Examples:
        >>> expand_env_vars("${HOME}/projects")
        '/Users/user/projects'
        >>> expand_env_vars("Bearer ${UNSET_TOKEN}")
        'Bearer ${UNSET_TOKEN}'  # with warning
    """
    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        if var_name in os.environ:
            return os.environ[var_name]
        warnings.warn(
            f"Environment variable '{var_name}' not found, keeping original",
            UserWarning,
            stacklevel=2
        )
        return match.group(0)

    return ENV_VAR_PATTERN.sub(replace_var, value)


def find_unset_env_refs(value: str) -> list[str]:
    """Return names of ${VAR} references that are not set in the environment."""
    return [
        match.group(1)
        for match in ENV_VAR_PATTERN.finditer(value)
        if match.group(1) not in os.environ
    ]
