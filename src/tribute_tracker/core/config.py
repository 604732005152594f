"""
Configuration management for Tribute Tracker
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class RemoteConfig:
    """Configuration for the hosted Supabase backend."""

    url: str = ""
    anon_key: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.url and self.anon_key)


@dataclass
class AuthConfig:
    """Credentials used to sign in non-interactively."""

    email: str = ""
    password: str = ""


@dataclass
class MediaConfig:
    """Configuration for the media host used for practice recordings."""

    cloud_name: str = ""
    upload_preset: str = ""
    resource_type: str = "video"  # Cloudinary resource type for uploads
    timeout_seconds: int = 120

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.upload_preset)


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/tribute-tracker/tribute-tracker.log)
    )
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of backup files to keep
    console_output: bool = False  # Also output to console (for debugging)


@dataclass
class UIConfig:
    """Configuration for terminal output."""

    use_colors: bool = True
    attention_days: int = 7  # Days since last played before a song needs attention

    def validate(self) -> None:
        """Validate UI configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.attention_days < 1:
            raise ValueError(
                f"Invalid attention_days: {self.attention_days}. Must be at least 1"
            )


@dataclass
class Config:
    """Main configuration object."""

    remote: RemoteConfig = field(default_factory=RemoteConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    media: MediaConfig = field(default_factory=MediaConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    ui: UIConfig = field(default_factory=UIConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "tribute-tracker"
    return Path.home() / ".config" / "tribute-tracker"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    try:
        current = Path(__file__).resolve().parent
        for parent in [current] + list(current.parents):
            if (parent / "pyproject.toml").exists():
                config_path = parent / "config.toml"
                if config_path.exists():
                    return config_path
                # Found project root but no config.toml there
                return None
    except OSError:
        pass
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/tribute-tracker (or ~/.config/tribute-tracker)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "tribute-tracker"
    return Path.home() / ".local" / "share" / "tribute-tracker"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Tribute Tracker Configuration

[remote]
# Supabase project credentials. Leave empty to run on demo data only.
# SUPABASE_URL / SUPABASE_ANON_KEY environment variables take precedence.
# url = "https://your-project.supabase.co"
# anon_key = "your-anon-key"

[auth]
# Sign in automatically on startup
# (TRIBUTE_TRACKER_EMAIL / TRIBUTE_TRACKER_PASSWORD override these)
# email = "you@example.com"
# password = "secret"

[media]
# Cloudinary unsigned upload settings for practice recordings
# cloud_name = "your-cloud"
# upload_preset = "practice-videos"
resource_type = "video"
timeout_seconds = 120

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/tribute-tracker/tribute-tracker.log)
# log_file = "/path/to/custom/tribute-tracker.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of backup log files to keep
backup_count = 5

# Also output logs to console (useful for debugging)
console_output = false

[ui]
# Use colors in terminal output
use_colors = true

# Songs not played for this many days show up under "needs attention"
attention_days = 7
""".strip()


def _apply_env_overrides(config: Config) -> None:
    """Environment variables win over TOML values."""
    env_map = {
        "SUPABASE_URL": (config.remote, "url"),
        "SUPABASE_ANON_KEY": (config.remote, "anon_key"),
        "TRIBUTE_TRACKER_EMAIL": (config.auth, "email"),
        "TRIBUTE_TRACKER_PASSWORD": (config.auth, "password"),
        "CLOUDINARY_CLOUD_NAME": (config.media, "cloud_name"),
        "CLOUDINARY_UPLOAD_PRESET": (config.media, "upload_preset"),
    }
    for env_name, (section, attr) in env_map.items():
        value = os.environ.get(env_name)
        if value:
            setattr(section, attr, value)


def parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML data, falling back to defaults per key."""
    config = Config()

    if "remote" in toml_data:
        remote_data = toml_data["remote"]
        config.remote = RemoteConfig(
            url=remote_data.get("url", config.remote.url),
            anon_key=remote_data.get("anon_key", config.remote.anon_key),
        )

    if "auth" in toml_data:
        auth_data = toml_data["auth"]
        config.auth = AuthConfig(
            email=auth_data.get("email", config.auth.email),
            password=auth_data.get("password", config.auth.password),
        )

    if "media" in toml_data:
        media_data = toml_data["media"]
        config.media = MediaConfig(
            cloud_name=media_data.get("cloud_name", config.media.cloud_name),
            upload_preset=media_data.get("upload_preset", config.media.upload_preset),
            resource_type=media_data.get("resource_type", config.media.resource_type),
            timeout_seconds=media_data.get(
                "timeout_seconds", config.media.timeout_seconds
            ),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get("backup_count", config.logging.backup_count),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    if "ui" in toml_data:
        ui_data = toml_data["ui"]
        config.ui = UIConfig(
            use_colors=ui_data.get("use_colors", config.ui.use_colors),
            attention_days=ui_data.get("attention_days", config.ui.attention_days),
        )
        try:
            config.ui.validate()
        except ValueError as e:
            print(f"Warning: Invalid ui configuration: {e}")
            print("Using default ui configuration.")
            config.ui = UIConfig()

    _apply_env_overrides(config)
    return config


def load_config() -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - SUPABASE_URL, SUPABASE_ANON_KEY
    - TRIBUTE_TRACKER_EMAIL, TRIBUTE_TRACKER_PASSWORD
    - CLOUDINARY_CLOUD_NAME, CLOUDINARY_UPLOAD_PRESET
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        print(f"Created default configuration at: {config_path}")
        config = Config()
        _apply_env_overrides(config)
        return config

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"Error loading configuration from {config_path}: {e}")
        print("Using default configuration.")
        config = Config()
        _apply_env_overrides(config)
        return config

    return parse_config(toml_data)


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
