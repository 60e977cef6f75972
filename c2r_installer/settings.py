# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/settings.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Loads, merges and schema-validates deployer settings from YAML

"""
Deployer Settings

Defaults live in settings.yaml beside this module. An override YAML file
(--settings or C2R_DEPLOYER_SETTINGS) is deep-merged on top, and the merged
document is validated against settings_schema.json before use.

FAIL-CLOSED: unreadable or invalid settings raise SettingsError.
"""

import copy
import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import jsonschema
import yaml

from .errors import SettingsError

DEFAULTS_PATH = Path(__file__).resolve().parent / "settings.yaml"
SCHEMA_PATH = Path(__file__).resolve().parent / "settings_schema.json"
SETTINGS_ENV_VAR = "C2R_DEPLOYER_SETTINGS"


@dataclass(frozen=True)
class DeployerSettings:
    """Validated, immutable deployer settings."""
    installer_url: str
    installer_file_name: str
    configure_switch: str
    installer_timeout: float
    working_root: Path
    log_path: Optional[Path]
    log_level: str
    download_timeout: float
    download_chunk_size: int
    vendor_organization: str
    vendor_root_common_name: str
    root_store: str
    completion_timeout: float
    completion_poll_interval: float
    uninstall_settle_seconds: float
    tentative_success_codes: Tuple[int, ...]
    service_name: str
    service_stop_wait: float
    service_poll_interval: float
    app_close_enabled: bool
    app_close_default_timeout: int
    app_close_min_timeout: int
    app_close_max_timeout: int
    app_process_names: Tuple[str, ...]
    client_executables: Tuple[str, ...]
    detection_product_id: str

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "DeployerSettings":
        """Build settings from an already-validated mapping."""
        working_root = data['working_area']['root']
        log_path = data['logging']['path']

        return cls(
            installer_url=data['installer']['url'],
            installer_file_name=data['installer']['file_name'],
            configure_switch=data['installer']['configure_switch'],
            installer_timeout=float(data['installer']['run_timeout_seconds']),
            working_root=Path(working_root) if working_root else default_working_root(),
            log_path=Path(log_path) if log_path else None,
            log_level=data['logging']['level'],
            download_timeout=float(data['download']['timeout_seconds']),
            download_chunk_size=int(data['download']['chunk_size']),
            vendor_organization=data['trust']['vendor_organization'],
            vendor_root_common_name=data['trust']['vendor_root_common_name'],
            root_store=data['trust']['root_store'],
            completion_timeout=float(data['install']['completion_timeout_seconds']),
            completion_poll_interval=float(data['install']['poll_interval_seconds']),
            uninstall_settle_seconds=float(data['uninstall']['settle_seconds']),
            tentative_success_codes=tuple(data['uninstall']['tentative_success_codes']),
            service_name=data['service']['name'],
            service_stop_wait=float(data['service']['stop_wait_seconds']),
            service_poll_interval=float(data['service']['poll_interval_seconds']),
            app_close_enabled=bool(data['app_close']['enabled']),
            app_close_default_timeout=int(data['app_close']['default_timeout_seconds']),
            app_close_min_timeout=int(data['app_close']['min_timeout_seconds']),
            app_close_max_timeout=int(data['app_close']['max_timeout_seconds']),
            app_process_names=tuple(name.lower() for name in data['app_close']['process_names']),
            client_executables=tuple(data['product_state']['client_executables']),
            detection_product_id=data['detection']['product_id'],
        )


def default_working_root() -> Path:
    """Well-known scratch location under the host temporary root."""
    return Path(tempfile.gettempdir()) / "C2RDeploy" / "Work"


def load_schema() -> Dict:
    """Load the settings JSON schema."""
    try:
        with open(SCHEMA_PATH, 'r') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SettingsError(f"Failed to load settings schema {SCHEMA_PATH}: {e}")


def _read_yaml(path: Path) -> Dict:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise SettingsError(f"Failed to read settings file {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {path} must contain a mapping at top level")
    return data


def deep_merge(base: Dict, override: Dict) -> Dict:
    """Return base with override applied recursively; neither input is modified."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_settings(override_path: Optional[Path] = None) -> DeployerSettings:
    """
    Load deployer settings.

    Args:
        override_path: Optional YAML override. When None, the
                       C2R_DEPLOYER_SETTINGS environment variable is consulted.

    Returns:
        DeployerSettings

    Raises:
        SettingsError: If any file is unreadable or the merged settings are invalid
    """
    data = _read_yaml(DEFAULTS_PATH)

    if override_path is None and os.environ.get(SETTINGS_ENV_VAR):
        override_path = Path(os.environ[SETTINGS_ENV_VAR])

    if override_path is not None:
        override_path = Path(override_path)
        if not override_path.exists():
            raise SettingsError(f"Settings override not found: {override_path}")
        data = deep_merge(data, _read_yaml(override_path))

    try:
        jsonschema.validate(instance=data, schema=load_schema())
    except jsonschema.ValidationError as e:
        location = "/".join(str(part) for part in e.absolute_path) or "<root>"
        raise SettingsError(f"Invalid settings at {location}: {e.message}")

    app_close = data['app_close']
    if app_close['min_timeout_seconds'] > app_close['max_timeout_seconds']:
        raise SettingsError(
            "Invalid settings at app_close: min_timeout_seconds exceeds max_timeout_seconds"
        )

    return DeployerSettings.from_mapping(data)
