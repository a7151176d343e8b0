"""Exception hierarchy for ClawVault.

Every message in this module is assembled from names, identifiers and
paths only. Secret values never reach an exception message; underlying
causes are chained with ``raise ... from`` instead of being formatted in.
"""

from pathlib import Path


class ClawVaultError(Exception):
    """Base class for all ClawVault errors."""


class ConfigError(ClawVaultError):
    """Raised when a migration config file cannot be loaded or validated."""


class DiscoveryFailure(ClawVaultError):
    """Raised when the agents directory exists but cannot be listed."""

    def __init__(self, agents_dir: str | Path) -> None:
        self.agents_dir = str(agents_dir)
        super().__init__(f"Failed to list agents directory: {self.agents_dir}")


class InvalidAuthStoreFormat(ClawVaultError):
    """Raised when an auth store is not a JSON object with a profiles object."""

    def __init__(self, path: str | Path, problem: str) -> None:
        self.path = str(path)
        self.problem = problem
        super().__init__(f"Invalid auth store JSON ({problem}): {self.path}")


class AuthStoreAccessFailure(ClawVaultError):
    """Raised when an auth store cannot be read, backed up or rewritten.

    Attributes:
        path: The auth store path.
        operation: What was being done, e.g. ``"read"`` or ``"rewrite"``.
        stored_env_vars: Secrets already written to storage for this file.
            The file still holds their plaintext.
    """

    def __init__(
        self,
        path: str | Path,
        operation: str,
        stored_env_vars: list[str] | None = None,
    ) -> None:
        self.path = str(path)
        self.operation = operation
        self.stored_env_vars = list(stored_env_vars or [])
        super().__init__(f"Failed to {operation} auth store: {self.path}")


class InvalidEnvVarName(ClawVaultError):
    """Raised when a generated or override env var name fails the grammar."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Invalid env var name: {name}")


class StorageError(ClawVaultError):
    """Raised by storage backends for their own failures."""


class StorageWriteFailure(ClawVaultError):
    """A ``Storage.set`` call failed while migrating one field.

    Attributes:
        agent_id: Agent owning the auth store.
        profile_id: Profile being migrated.
        field: Credential field being migrated.
        env_var: Target secret name.
        provider: Resolved provider of the profile.
        auth_store_path: Path of the auth store file.
        stored_env_vars: Names already written to storage for this file
            before the failure. Those secrets are stored but the file on
            disk still holds the plaintext.
    """

    def __init__(
        self,
        *,
        agent_id: str,
        profile_id: str,
        field: str,
        env_var: str,
        provider: str,
        auth_store_path: str,
        stored_env_vars: list[str] | None = None,
    ) -> None:
        self.agent_id = agent_id
        self.profile_id = profile_id
        self.field = field
        self.env_var = env_var
        self.provider = provider
        self.auth_store_path = auth_store_path
        self.stored_env_vars = list(stored_env_vars or [])
        super().__init__(
            "Failed to store credential in secret storage "
            f"(agent={agent_id}, profile={profile_id}, field={field}, "
            f"env={env_var}, provider={provider}, path={auth_store_path})"
        )


class BackupNotFound(ClawVaultError):
    """Raised when a restore is requested from a missing backup file."""

    def __init__(self, backup_path: str | Path) -> None:
        self.backup_path = str(backup_path)
        super().__init__(f"Backup file not found: {self.backup_path}")


class InvalidBackup(ClawVaultError):
    """Raised when a backup file does not contain valid JSON."""

    def __init__(self, backup_path: str | Path) -> None:
        self.backup_path = str(backup_path)
        super().__init__(f"Backup file contains invalid JSON: {self.backup_path}")
