"""Per-profile credential classification.

Decides, for every secret-bearing field of a profile, whether it should be
migrated and under which env var name, or why it is skipped. The
classifier reads nothing from disk and writes nothing, so dry-run and
apply runs make identical decisions.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from .naming import (
    DEFAULT_PREFIX,
    build_env_var_name,
    is_env_placeholder,
    validate_env_var_name,
)
from .schemas import SkipReason, SkipRecord

logger = logging.getLogger(__name__)

# Evaluation order of oauth secret fields. ``access`` and ``refresh`` are the
# short names OpenClaw itself writes.
OAUTH_SECRET_FIELDS: tuple[str, ...] = (
    "accessToken",
    "refreshToken",
    "idToken",
    "token",
    "secret",
    "clientSecret",
    "access",
    "refresh",
)

API_KEY_FIELD = "key"


# =============================================================================
# Credential variants
# =============================================================================


@dataclass
class Credential:
    """Base of the credential variants.

    Attributes:
        profile_id: Profile id within the auth store.
        provider: Resolved provider name.
        raw: The profile object as parsed from JSON.
    """

    profile_id: str
    provider: str
    raw: dict[str, Any]


@dataclass
class ApiKeyCredential(Credential):
    """``type: api_key`` with a single ``key`` field."""


@dataclass
class OAuthCredential(Credential):
    """``type: oauth`` with any subset of ``OAUTH_SECRET_FIELDS``."""


@dataclass
class OtherCredential(Credential):
    """Any other ``type``. Never inspected for secrets."""

    type: Any = None


def resolve_provider(raw: dict[str, Any], profile_id: str) -> str:
    """Provider from the credential, else the profile id before ``:``."""
    provider = raw.get("provider")
    if isinstance(provider, str) and provider.strip():
        return provider
    return profile_id.split(":", 1)[0] or "unknown"


def parse_credential(profile_id: str, raw: dict[str, Any]) -> Credential:
    """Wrap a raw profile object in its credential variant."""
    provider = resolve_provider(raw, profile_id)
    cred_type = raw.get("type")
    if cred_type == "api_key":
        return ApiKeyCredential(profile_id, provider, raw)
    if cred_type == "oauth":
        return OAuthCredential(profile_id, provider, raw)
    return OtherCredential(profile_id, provider, raw, type=cred_type)


# =============================================================================
# Classification results
# =============================================================================


@dataclass
class FieldMigration:
    """A field that is eligible for migration.

    ``value`` holds the plaintext secret. It must only ever be passed to
    ``Storage.set``; reports are built from the other attributes.
    """

    profile_id: str
    provider: str
    field: str
    env_var: str
    value: str = field(repr=False)


@dataclass
class ProfileClassification:
    """Outcome of classifying one profile."""

    profile_id: str
    migrations: list[FieldMigration] = field(default_factory=list)
    skipped: list[SkipRecord] = field(default_factory=list)

    def skip(self, provider: str, field_name: str, reason: SkipReason) -> None:
        self.skipped.append(
            SkipRecord(
                profile_id=self.profile_id,
                provider=provider,
                field=field_name,
                reason=reason,
            )
        )


# =============================================================================
# Classifier
# =============================================================================


class CredentialClassifier:
    """Classifies auth store profiles into field migrations and skips.

    Example:
        >>> classifier = CredentialClassifier(prefix="OPENCLAW")
        >>> result = classifier.classify(
        ...     "anthropic:default",
        ...     {"type": "api_key", "provider": "anthropic", "key": "abc123"},
        ... )
        >>> result.migrations[0].env_var
        'OPENCLAW_ANTHROPIC_ANTHROPIC_DEFAULT_KEY'
    """

    def __init__(
        self,
        prefix: str = DEFAULT_PREFIX,
        include_oauth: bool = True,
        profile_env_var_map: dict[str, str] | None = None,
    ) -> None:
        """Initialize the classifier.

        Args:
            prefix: Env var name prefix.
            include_oauth: If False, oauth profiles are reported as
                ``unsupported_type``.
            profile_env_var_map: Explicit env var names per profile id.
                Only consulted for ``api_key`` credentials.
        """
        self.prefix = prefix
        self.include_oauth = include_oauth
        self.profile_env_var_map = dict(profile_env_var_map or {})

    def classify(self, profile_id: str, entry: Any) -> ProfileClassification:
        """Classify one profile entry.

        Args:
            profile_id: Key of the entry in the ``profiles`` object.
            entry: The raw value stored under that key.

        Returns:
            The eligible migrations and skip records for the profile.

        Raises:
            InvalidEnvVarName: If a generated or override name is invalid.
        """
        result = ProfileClassification(profile_id=profile_id)

        if not isinstance(entry, dict):
            result.skip("unknown", "credential", SkipReason.MISSING)
            return result

        credential = parse_credential(profile_id, entry)

        if isinstance(credential, ApiKeyCredential):
            self._classify_api_key(credential, result)
        elif isinstance(credential, OAuthCredential) and self.include_oauth:
            self._classify_oauth(credential, result)
        else:
            result.skip(credential.provider, "credential", SkipReason.UNSUPPORTED_TYPE)

        logger.debug(
            f"Profile {profile_id}: {len(result.migrations)} eligible, "
            f"{len(result.skipped)} skipped"
        )
        return result

    def _classify_api_key(
        self, credential: ApiKeyCredential, result: ProfileClassification
    ) -> None:
        current = credential.raw.get(API_KEY_FIELD)
        reason = self._skip_reason(current)
        if reason is None and not isinstance(current, str):
            reason = SkipReason.MISSING
        if reason is not None:
            result.skip(credential.provider, API_KEY_FIELD, reason)
            return

        override = self.profile_env_var_map.get(credential.profile_id)
        if override is not None:
            env_var = validate_env_var_name(override)
        else:
            env_var = build_env_var_name(
                self.prefix, credential.provider, credential.profile_id, API_KEY_FIELD
            )
        result.migrations.append(
            FieldMigration(
                profile_id=credential.profile_id,
                provider=credential.provider,
                field=API_KEY_FIELD,
                env_var=env_var,
                value=current,
            )
        )

    def _classify_oauth(
        self, credential: OAuthCredential, result: ProfileClassification
    ) -> None:
        if credential.profile_id in self.profile_env_var_map:
            result.skip(credential.provider, "map", SkipReason.MAP_IGNORED)

        for field_name in OAUTH_SECRET_FIELDS:
            current = credential.raw.get(field_name)
            reason = self._skip_reason(current)
            if reason is not None:
                result.skip(credential.provider, field_name, reason)
                continue
            if not isinstance(current, str):
                # Absent oauth fields are not enumerated.
                continue
            result.migrations.append(
                FieldMigration(
                    profile_id=credential.profile_id,
                    provider=credential.provider,
                    field=field_name,
                    env_var=build_env_var_name(
                        self.prefix,
                        credential.provider,
                        credential.profile_id,
                        field_name,
                    ),
                    value=current,
                )
            )

        if not result.migrations:
            result.skip(credential.provider, "oauth", SkipReason.MISSING)

    @staticmethod
    def _skip_reason(value: Any) -> SkipReason | None:
        if is_env_placeholder(value):
            return SkipReason.ALREADY_PLACEHOLDER
        if isinstance(value, str) and not value.strip():
            return SkipReason.EMPTY
        return None
