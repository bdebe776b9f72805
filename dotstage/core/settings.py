from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DOTSTAGE_",
        case_sensitive=False,
        env_ignore_empty=True,
        populate_by_name=True,
    )

    root: Path = Field(default_factory=Path.cwd)
    template_suffix: str = ".tmpl"
    stow_executable: str = "stow"
    data_home: Path = Field(
        default_factory=lambda: Path.home() / ".local" / "share",
        validation_alias=AliasChoices("DOTSTAGE_DATA_HOME", "XDG_DATA_HOME"),
    )

    @property
    def build_dir(self) -> Path:
        return self.root / "tmp" / "build"

    @property
    def staging_dir(self) -> Path:
        return self.data_home / "dotfiles"
