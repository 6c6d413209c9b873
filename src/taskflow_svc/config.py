"""Configuration for the taskflow service."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 8060
    reload: bool = False


@dataclass
class StoreConfig:
    """Record store configuration."""
    # JSON or YAML file, chosen by suffix
    path: str = "requests.json"

    # Initial document used when `path` does not exist yet
    seed_file: str | None = None


@dataclass
class EscalationConfig:
    """Automatic priority escalation for overdue requests."""
    enabled: bool = True
    threshold_days: int = 3
    target_priority: str = "Critical"


@dataclass
class RequestsConfig:
    """Request workflow configuration."""
    enabled: bool = True
    default_due_days: int = 7

    # Agent identities an admin may assign; empty = any
    authorized_agents: list[str] = field(default_factory=list)


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Config:
    """Main configuration container."""
    server: ServerConfig = field(default_factory=ServerConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    escalation: EscalationConfig = field(default_factory=EscalationConfig)
    requests: RequestsConfig = field(default_factory=RequestsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        """Create config from dictionary."""
        return cls(
            server=ServerConfig(**data.get("server", {})),
            store=StoreConfig(**data.get("store", {})),
            escalation=EscalationConfig(**data.get("escalation", {})),
            requests=RequestsConfig(**data.get("requests", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )

    @classmethod
    def from_yaml(cls, path: str) -> Config:
        """Load config from YAML file."""
        import yaml
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_json(cls, path: str) -> Config:
        """Load config from JSON file."""
        import json
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)
