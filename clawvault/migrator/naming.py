"""Deterministic env var naming and the ``${ENV_VAR}`` placeholder grammar."""

import re

from ..errors import InvalidEnvVarName

DEFAULT_PREFIX = "OPENCLAW"

ENV_VAR_NAME_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")
PLACEHOLDER_PATTERN = re.compile(r"^\$\{[A-Z][A-Z0-9_]*\}$")

_NON_ALNUM_RUN = re.compile(r"[^A-Z0-9]+")


def slug(value: str) -> str:
    """Normalize one name component.

    Uppercases, collapses runs of characters outside ``[A-Z0-9]`` into a
    single underscore and trims leading and trailing underscores.

    Example:
        >>> slug("google:user@example.com")
        'GOOGLE_USER_EXAMPLE_COM'
    """
    return _NON_ALNUM_RUN.sub("_", value.upper()).strip("_")


def build_env_var_name(
    prefix: str | None,
    provider: str,
    profile_id: str,
    field: str,
) -> str:
    """Build the env var name for one credential field.

    Args:
        prefix: Name prefix. ``None`` means ``OPENCLAW``.
        provider: Credential provider; blank means ``unknown``.
        profile_id: Profile id within the auth store; blank means ``unknown``.
        field: Credential field name; blank means ``value``.

    Returns:
        The four normalized components joined by ``_`` with empty
        components dropped.

    Raises:
        InvalidEnvVarName: If the result does not start with a letter,
            e.g. when the prefix normalizes to a leading digit.

    Example:
        >>> build_env_var_name("OPENCLAW", "anthropic", "anthropic:default", "key")
        'OPENCLAW_ANTHROPIC_ANTHROPIC_DEFAULT_KEY'
    """
    parts = [
        slug(DEFAULT_PREFIX if prefix is None else prefix),
        slug(provider or "unknown"),
        slug(profile_id or "unknown"),
        slug(field or "value"),
    ]
    name = "_".join(part for part in parts if part)
    validate_env_var_name(name)
    return name


def validate_env_var_name(name: str) -> str:
    """Check ``name`` against ``^[A-Z][A-Z0-9_]*$``.

    Returns:
        The name unchanged, for chaining.

    Raises:
        InvalidEnvVarName: If the name does not match.
    """
    if not isinstance(name, str) or not ENV_VAR_NAME_PATTERN.fullmatch(name):
        raise InvalidEnvVarName(str(name))
    return name


def is_env_placeholder(value: object) -> bool:
    """Return True if ``value`` is an uppercase ``${ENV_VAR}`` reference.

    Lower or mixed case strings such as ``${foo}`` are plaintext.
    """
    return isinstance(value, str) and PLACEHOLDER_PATTERN.fullmatch(value) is not None


def to_placeholder(env_var: str) -> str:
    return "${" + env_var + "}"
