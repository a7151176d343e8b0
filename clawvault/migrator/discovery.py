"""Discovery of per-agent auth store files under an OpenClaw root."""

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path

from ..errors import DiscoveryFailure

logger = logging.getLogger(__name__)

AUTH_PROFILE_FILENAME = "auth-profiles.json"


@dataclass(frozen=True)
class AuthStoreLocation:
    """An agent id and the path of its auth store."""

    agent_id: str
    auth_store_path: Path


def get_default_openclaw_dir() -> Path:
    return Path.home() / ".openclaw"


def auth_store_path_for(openclaw_dir: str | Path, agent_id: str) -> Path:
    """Expected auth store path: ``<root>/agents/<id>/agent/auth-profiles.json``."""
    return Path(openclaw_dir) / "agents" / agent_id / "agent" / AUTH_PROFILE_FILENAME


def discover_auth_store_paths(
    openclaw_dir: str | Path | None = None,
    agent_id: str | None = None,
) -> list[AuthStoreLocation]:
    """Find one auth store per agent.

    Args:
        openclaw_dir: OpenClaw root. Defaults to ``~/.openclaw``.
        agent_id: If given, only this agent is considered.

    Returns:
        Locations sorted by agent id. Agents without a readable auth store
        are left out. A missing ``agents`` directory gives an empty list.

    Raises:
        DiscoveryFailure: If the ``agents`` directory cannot be inspected
            or listed for any reason other than not existing.
    """
    root = Path(openclaw_dir) if openclaw_dir is not None else get_default_openclaw_dir()
    agents_dir = root / "agents"

    try:
        mode = agents_dir.stat().st_mode
    except (FileNotFoundError, NotADirectoryError):
        logger.debug(f"No agents directory at {agents_dir}")
        return []
    except OSError as e:
        raise DiscoveryFailure(agents_dir) from e
    if not stat.S_ISDIR(mode):
        logger.debug(f"{agents_dir} is not a directory")
        return []

    try:
        agent_ids = sorted(entry.name for entry in agents_dir.iterdir() if entry.is_dir())
    except OSError as e:
        raise DiscoveryFailure(agents_dir) from e

    if agent_id is not None:
        agent_ids = [name for name in agent_ids if name == agent_id]

    results: list[AuthStoreLocation] = []
    for name in agent_ids:
        path = auth_store_path_for(root, name)
        if path.is_file() and os.access(path, os.R_OK):
            results.append(AuthStoreLocation(agent_id=name, auth_store_path=path))
        else:
            logger.debug(f"Agent {name} has no readable auth store at {path}")

    logger.info(f"Discovered {len(results)} auth store(s) under {root}")
    return results
