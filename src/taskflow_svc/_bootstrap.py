"""Startup helpers shared by the app entry point and tests."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .config import Config
from .requests.escalation import EscalationPolicy
from .requests.service import RequestService
from .requests.store import FileRecordStore
from .requests.types import Priority

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TASKFLOW_CONFIG"


def load_config() -> tuple[Config, Path | None]:
    """Load config from $TASKFLOW_CONFIG, ./config.yaml, or defaults."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        config_path = Path(env_path)
    else:
        config_path = Path("config.yaml")
        if not config_path.exists():
            logger.info("No config file found, using defaults")
            return Config(), None

    if config_path.suffix.lower() == ".json":
        config = Config.from_json(str(config_path))
    else:
        config = Config.from_yaml(str(config_path))
    logger.info(f"Loaded config from {config_path}")
    return config, config_path


def _resolve(path: str, config_path: Path | None) -> Path:
    """Resolve a configured path relative to the config file's directory."""
    resolved = Path(path)
    if not resolved.is_absolute() and config_path is not None:
        resolved = config_path.parent / resolved
    return resolved


def build_escalation_policy(config: Config) -> EscalationPolicy:
    return EscalationPolicy(
        enabled=config.escalation.enabled,
        threshold_days=config.escalation.threshold_days,
        target_priority=Priority.parse(config.escalation.target_priority),
    )


def build_request_service(config: Config, config_path: Path | None = None) -> RequestService:
    """Wire the record store, escalation policy and request service."""
    store_path = _resolve(config.store.path, config_path)
    seed_file = _resolve(config.store.seed_file, config_path) if config.store.seed_file else None
    store = FileRecordStore(store_path, seed_file=seed_file)
    logger.info(f"Request store: {store_path}")

    return RequestService(
        store,
        policy=build_escalation_policy(config),
        authorized_agents=config.requests.authorized_agents,
        default_due_days=config.requests.default_due_days,
    )
