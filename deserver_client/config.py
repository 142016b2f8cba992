"""
DeServer Client Configuration

Loads configuration from YAML file with environment variable overrides.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_AXES = [
    "Horizontal",
    "Vertical",
    "Mouse X",
    "Mouse Y",
    "Mouse ScrollWheel",
    *(f"JoystickAxis{i}" for i in range(1, 11)),
]

DEFAULT_PAUSE_MENUS = [
    "UI_Pause",
    "UI_Options",
    "UI_OptionsGameplay",
    "UI_OptionsVideo",
    "UI_OptionsAudio",
    "UI_OptionsKeyBindings",
    "UI_OptionsLanguages",
]


def default_data_dir() -> Path:
    """Return the default data directory."""
    return Path.home() / ".deserver"


@dataclass
class ServerConfig:
    """Where the remote authority lives and how long to wait for it."""

    host: str = "127.0.0.1"
    port: int = 1
    timeout: float = 2.0

    def __post_init__(self):
        self.host = os.environ.get("DESERVER_HOST", self.host)
        if env_port := os.environ.get("DESERVER_PORT"):
            self.port = int(env_port)
        if env_timeout := os.environ.get("DESERVER_TIMEOUT"):
            self.timeout = float(env_timeout)

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


@dataclass
class LoopConfig:
    """Fixed intervals (seconds) for the periodic loops."""

    objects_interval: float = 1.0
    poll_interval: float = 0.5
    retry_interval: float = 1.0
    pause_interval: float = 0.25


@dataclass
class InputConfig:
    """Input forwarding settings."""

    axes: list[str] = field(default_factory=lambda: list(DEFAULT_AXES))
    axis_threshold: float = 0.01
    pause_menus: list[str] = field(default_factory=lambda: list(DEFAULT_PAUSE_MENUS))


@dataclass
class ClientConfig:
    """Main configuration for the sync agent."""

    data_dir: Path = field(default_factory=default_data_dir)
    log_level: str = "INFO"
    log_to_file: bool = True
    player_node: str = "Player_Human"
    player_name: str | None = None
    steam_id: str | None = None
    server: ServerConfig = field(default_factory=ServerConfig)
    loops: LoopConfig = field(default_factory=LoopConfig)
    input: InputConfig = field(default_factory=InputConfig)

    def __post_init__(self):
        if isinstance(self.data_dir, str):
            self.data_dir = Path(self.data_dir)
        self.data_dir = self.data_dir.expanduser()

        # Environment overrides
        if env_data_dir := os.environ.get("DESERVER_DATA_DIR"):
            self.data_dir = Path(env_data_dir).expanduser()
        self.log_level = os.environ.get("DESERVER_LOG_LEVEL", self.log_level)

    @property
    def config_file(self) -> Path:
        return self.data_dir / "config.yaml"

    @property
    def log_file(self) -> Path:
        return self.data_dir / "deserver.log"

    def ensure_dirs(self) -> None:
        """Create necessary directories."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def to_dict(self) -> dict:
        """Convert config to dictionary for serialization."""
        return {
            "data_dir": str(self.data_dir),
            "log_level": self.log_level,
            "log_to_file": self.log_to_file,
            "player_node": self.player_node,
            "player_name": self.player_name,
            "steam_id": self.steam_id,
            "server": {
                "host": self.server.host,
                "port": self.server.port,
                "timeout": self.server.timeout,
            },
            "loops": {
                "objects_interval": self.loops.objects_interval,
                "poll_interval": self.loops.poll_interval,
                "retry_interval": self.loops.retry_interval,
                "pause_interval": self.loops.pause_interval,
            },
            "input": {
                "axes": list(self.input.axes),
                "axis_threshold": self.input.axis_threshold,
                "pause_menus": list(self.input.pause_menus),
            },
        }

    def save(self) -> None:
        """Save configuration to YAML file."""
        self.ensure_dirs()
        with open(self.config_file, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def load(cls, config_path: Path | None = None) -> "ClientConfig":
        """
        Load configuration from file.

        Precedence (highest to lowest):
        1. Environment variables
        2. Config file values
        3. Default values
        """
        config = cls()

        if config_path is None:
            config_path = config.config_file

        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}

            if "data_dir" in data:
                config.data_dir = Path(data["data_dir"]).expanduser()
            for key in ("log_level", "log_to_file", "player_node", "player_name", "steam_id"):
                if key in data:
                    setattr(config, key, data[key])

            if server_data := data.get("server"):
                if "host" in server_data:
                    config.server.host = server_data["host"]
                if "port" in server_data:
                    config.server.port = int(server_data["port"])
                if "timeout" in server_data:
                    config.server.timeout = float(server_data["timeout"])

            if loop_data := data.get("loops"):
                for key in ("objects_interval", "poll_interval", "retry_interval", "pause_interval"):
                    if key in loop_data:
                        setattr(config.loops, key, float(loop_data[key]))

            if input_data := data.get("input"):
                if "axes" in input_data:
                    config.input.axes = list(input_data["axes"])
                if "axis_threshold" in input_data:
                    config.input.axis_threshold = float(input_data["axis_threshold"])
                if "pause_menus" in input_data:
                    config.input.pause_menus = list(input_data["pause_menus"])

            # Re-apply environment overrides
            config.__post_init__()
            config.server.__post_init__()

        return config


def get_config() -> ClientConfig:
    """Get the configuration from the default location."""
    return ClientConfig.load()
