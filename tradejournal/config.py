"""Configuration for TradeJournal.

Settings live in ``~/.config/tradejournal/config.toml``:

    [user]
    id = "your-user-id"

    [journal]
    db_path = ""            # empty: ~/.config/tradejournal/journal.db
    locale = "fa"
    win_threshold = 100.0
    loss_threshold = -100.0
"""

from pathlib import Path
from typing import Literal, Optional

import toml
from pydantic import BaseModel, Field, model_validator

from tradejournal.ledger.calculations import OutcomePolicy


def get_config_dir() -> Path:
    return Path.home() / ".config" / "tradejournal"


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


class JournalConfig(BaseModel):
    """Parsed configuration."""

    user_id: Optional[str] = Field(default=None, description="Local user profile id")
    db_path: Path = Field(
        default_factory=lambda: get_config_dir() / "journal.db",
        description="SQLite database path",
    )
    locale: Literal["fa", "en"] = Field(default="fa", description="Display locale")
    win_threshold: float = Field(default=100.0, description="Net P&L above this is a win")
    loss_threshold: float = Field(default=-100.0, description="Net P&L below this is a loss")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_thresholds(self) -> "JournalConfig":
        OutcomePolicy(
            win_threshold=self.win_threshold,
            loss_threshold=self.loss_threshold,
        )
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "JournalConfig":
        """Build a config from the raw TOML mapping."""
        user = data.get("user", {})
        journal = data.get("journal", {})
        values = {
            key: journal[key]
            for key in ("locale", "win_threshold", "loss_threshold")
            if key in journal
        }
        if journal.get("db_path"):
            values["db_path"] = Path(journal["db_path"]).expanduser()
        return cls(user_id=user.get("id") or None, **values)

    @property
    def outcome_policy(self) -> OutcomePolicy:
        return OutcomePolicy(
            win_threshold=self.win_threshold,
            loss_threshold=self.loss_threshold,
        )


def load_config(config_path: Optional[Path] = None) -> Optional[JournalConfig]:
    """Load configuration.

    Args:
        config_path: Path to the TOML file; defaults to the user config.

    Returns:
        Parsed config, or None if the file does not exist.

    Raises:
        ValueError: If the file is not valid TOML or has invalid values.
    """
    config_path = config_path or get_config_path()

    if not config_path.exists():
        return None

    try:
        data = toml.load(config_path)
    except toml.TomlDecodeError as e:
        raise ValueError(f"Invalid config file {config_path}: {e}") from e

    try:
        return JournalConfig.from_dict(data)
    except ValueError as e:
        raise ValueError(f"Invalid config file {config_path}: {e}") from e


def write_config(data: dict, config_path: Optional[Path] = None) -> Path:
    """Write a raw configuration mapping and return its path."""
    config_path = config_path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        toml.dump(data, f)

    return config_path


def create_template_config(user_id: str = "") -> Path:
    """Create a template configuration file."""
    template = {
        "user": {
            "id": user_id,
        },
        "journal": {
            "db_path": "",
            "locale": "fa",
            "win_threshold": 100.0,
            "loss_threshold": -100.0,
        },
    }
    return write_config(template)
