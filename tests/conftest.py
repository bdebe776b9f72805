from __future__ import annotations

from pathlib import Path

import pytest

from dotstage.core.models import RunConfig


class DotfilesBuilder:
    """Lay out a dotfiles repository under a temporary root."""

    def __init__(self, root: Path) -> None:
        self.root = root
        (root / "config").mkdir(parents=True, exist_ok=True)
        (root / "packages" / "common").mkdir(parents=True, exist_ok=True)

    def defaults(self, text: str) -> Path:
        path = self.root / "config" / "defaults"
        path.write_text(text, encoding="utf-8")
        return path

    def host_config(self, hostname: str, text: str) -> Path:
        path = self.root / "config" / f"{hostname}.conf"
        path.write_text(text, encoding="utf-8")
        return path

    def common(self, package: str, relative: str, text: str) -> Path:
        return self._write(self.root / "packages" / "common" / package, relative, text)

    def host(self, hostname: str, package: str, relative: str, text: str) -> Path:
        base = self.root / "packages" / "host-specific" / hostname / package
        return self._write(base, relative, text)

    @staticmethod
    def _write(base: Path, relative: str, text: str) -> Path:
        path = base / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path


@pytest.fixture
def dotfiles(tmp_path: Path) -> DotfilesBuilder:
    """Provide an empty dotfiles repository rooted under tmp_path."""
    return DotfilesBuilder(tmp_path / "dotfiles")


@pytest.fixture
def sample_dotfiles(dotfiles: DotfilesBuilder) -> DotfilesBuilder:
    """A repository with shared, overridden and host-only packages for 'box'."""
    dotfiles.defaults("NAME=common\nEDITOR=vim\n")
    dotfiles.host_config("box", "NAME=box\nTHEME=dark\n")
    dotfiles.common("vim", "dot-vimrc.tmpl", "\" ${NAME} uses ${EDITOR}\n")
    dotfiles.common("vim", "colors/base.vim", "hi Normal\n")
    dotfiles.common("git", "dot-gitconfig.tmpl", "[user]\n\tname = ${NAME}\n")
    dotfiles.host("box", "vim", "dot-vimrc.tmpl", "\" host ${NAME} ${THEME}\n")
    dotfiles.host("box", "zsh", "dot-zshrc", "export PATH=$PATH:${HOME}/bin\n")
    return dotfiles


@pytest.fixture
def make_config(tmp_path: Path):
    """Build a RunConfig for a dotfiles root without touching the real host."""

    def _make(root: Path, hostname: str = "box", **overrides: object) -> RunConfig:
        values: dict[str, object] = {
            "hostname": hostname,
            "root": root,
            "build_dir": root / "tmp" / "build",
            "staging_dir": tmp_path / "data" / "dotfiles",
            "home": tmp_path / "home",
            "environ": {"HOME": str(tmp_path / "home"), "SHELL": "/bin/zsh"},
        }
        values.update(overrides)
        return RunConfig(**values)

    return _make


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME and XDG_DATA_HOME into tmp_path; returns the data home."""
    home = tmp_path / "home"
    home.mkdir()
    data_home = tmp_path / "data"
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_DATA_HOME", str(data_home))
    for name in ("DOTSTAGE_ROOT", "DOTSTAGE_DATA_HOME", "DOTSTAGE_STOW_EXECUTABLE"):
        monkeypatch.delenv(name, raising=False)
    return data_home
