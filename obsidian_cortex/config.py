"""Configuration loading and vault registry."""

from __future__ import annotations

import logging
import os
from dataclasses import fields
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml

from obsidian_cortex.constants import CONFIG_ENV_VAR, CONFIG_PATH, VAULT_PATH_ENV_VAR
from obsidian_cortex.data_models import VaultConfiguration, VaultMetadata, WorkflowPaths

logger = logging.getLogger(__name__)


def _build_vault(name: str, raw_path: str, description: str = "") -> VaultMetadata:
    resolved_path = Path(raw_path).expanduser()
    try:
        resolved_path = resolved_path.resolve(strict=False)
    except RuntimeError:
        # resolve can raise if underlying filesystem is inaccessible; fall back to expanded path
        pass

    return VaultMetadata(
        name=name,
        path=resolved_path,
        description=description.strip(),
        exists=resolved_path.is_dir(),
    )


def _parse_workflow_paths(section: Any) -> WorkflowPaths:
    """Build :class:`WorkflowPaths` from the optional ``workflow`` mapping.

    Unknown keys are rejected so that typos surface at startup instead of being
    silently ignored.
    """
    if section is None:
        return WorkflowPaths()
    if not isinstance(section, dict):
        raise ValueError("'workflow' must be a mapping of path overrides")

    allowed = {item.name for item in fields(WorkflowPaths)}
    unknown = sorted(set(section) - allowed)
    if unknown:
        raise ValueError(f"Unknown workflow setting(s): {', '.join(unknown)}")

    overrides: dict[str, str] = {}
    for key, value in section.items():
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Workflow setting '{key}' must be a non-empty string")
        overrides[key] = value.strip()
    return WorkflowPaths(**overrides)


def load_vault_configuration(
    config_path: Optional[Path] = None,
    environ: Optional[dict[str, str]] = None,
) -> VaultConfiguration:
    """Load and validate the vault configuration.

    Args:
        config_path: Path to the YAML configuration file. Defaults to the value of
            ``OBSIDIAN_CORTEX_CONFIG`` or ``cortex.yaml`` at the repository root.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        A fully populated :class:`VaultConfiguration`.

    Raises:
        FileNotFoundError: If there is neither a configuration file nor an
            ``OBSIDIAN_VAULT_PATH`` environment variable.
        ValueError: If the file exists but does not provide the expected structure
            (missing default, empty mapping, invalid entries, etc.).
    """
    env = os.environ if environ is None else environ
    if config_path is None:
        config_path = Path(env[CONFIG_ENV_VAR]) if env.get(CONFIG_ENV_VAR) else CONFIG_PATH

    if not config_path.exists():
        vault_path = env.get(VAULT_PATH_ENV_VAR, "").strip()
        if not vault_path:
            raise FileNotFoundError(
                f"Vault configuration file not found at {config_path} and "
                f"{VAULT_PATH_ENV_VAR} is not set"
            )
        logger.info("No configuration file at %s; using %s", config_path, VAULT_PATH_ENV_VAR)
        vault = _build_vault("default", vault_path, "Configured from environment")
        return VaultConfiguration(default_vault=vault.name, vaults={vault.name: vault})

    raw_config = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw_config, dict):
        raise ValueError("Vault configuration must be a YAML mapping")

    vaults_section = raw_config.get("vaults")
    if not isinstance(vaults_section, dict) or not vaults_section:
        raise ValueError("Vault configuration must include a non-empty 'vaults' mapping")

    processed: dict[str, VaultMetadata] = {}
    for name, entry in vaults_section.items():
        if not isinstance(entry, dict):
            raise ValueError(f"Vault '{name}' must map to a dictionary of settings")

        raw_path = entry.get("path")
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise ValueError(f"Vault '{name}' is missing a valid 'path' string")

        processed[name] = _build_vault(name, raw_path, entry.get("description") or "")

    default_vault = raw_config.get("default")
    if not isinstance(default_vault, str) or default_vault not in processed:
        raise ValueError("Vault configuration must specify a 'default' vault present in the mapping")

    return VaultConfiguration(
        default_vault=default_vault,
        vaults=processed,
        workflow=_parse_workflow_paths(raw_config.get("workflow")),
    )


@lru_cache(maxsize=1)
def get_vault_configuration() -> VaultConfiguration:
    """Return the process-wide configuration, loading it on first use."""
    configuration = load_vault_configuration()
    logger.info(
        "Loaded %d vault(s); default vault is '%s'",
        len(configuration.vaults),
        configuration.default_vault,
    )
    return configuration
