from __future__ import annotations

import logging
import subprocess
from pathlib import Path

import pytest

from dotstage.linking import stow
from dotstage.linking.stow import (
    LinkerNotFoundError,
    LinkMode,
    TargetUnavailableError,
    build_stow_command,
    link_packages,
)


class FakeRunner:
    """Records linker invocations instead of spawning processes."""

    def __init__(self, fail: set[str] | None = None) -> None:
        self.calls: list[tuple[list[str], Path]] = []
        self.fail = fail or set()

    def __call__(self, cmd, *, check=True, **kwargs):
        cmd = list(cmd)
        self.calls.append((cmd, kwargs["cwd"]))
        if cmd[-1] in self.fail:
            raise subprocess.CalledProcessError(1, cmd)
        return subprocess.CompletedProcess(cmd, 0)


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> FakeRunner:
    fake = FakeRunner()
    monkeypatch.setattr(stow, "run_logged", fake)
    monkeypatch.setattr(stow.shutil, "which", lambda name: f"/usr/bin/{name}")
    return fake


@pytest.fixture
def staged(tmp_path: Path) -> Path:
    staging = tmp_path / "data" / "dotfiles"
    for name in ("zsh", "git", "vim"):
        (staging / name).mkdir(parents=True)
    (staging / "README").write_text("not a package", encoding="utf-8")
    return staging


def test_dry_run_command_vector() -> None:
    cmd = build_stow_command(
        "vim", LinkMode.STOW, home=Path("/home/u"), dry_run=True
    )

    assert cmd == ["stow", "--dotfiles", "-v", "-n", "-t", "/home/u", "vim"]


@pytest.mark.parametrize(
    ("mode", "flag"), [(LinkMode.UNSTOW, "-D"), (LinkMode.RESTOW, "-R")]
)
def test_mode_flags_when_applying(mode: LinkMode, flag: str) -> None:
    cmd = build_stow_command(
        "vim", mode, home=Path("/home/u"), dry_run=False, executable="/opt/stow"
    )

    assert cmd == ["/opt/stow", "--dotfiles", "-v", flag, "-t", "/home/u", "vim"]


def test_package_name_stays_one_token() -> None:
    name = "odd name; rm -rf ~"

    cmd = build_stow_command(name, LinkMode.STOW, home=Path("/h"), dry_run=True)

    assert cmd[-1] == name
    assert len(cmd) == 7


def test_links_every_staged_package(staged, make_config, runner, tmp_path) -> None:
    config = make_config(tmp_path / "dotfiles", staging_dir=staged)

    report = link_packages([], LinkMode.STOW, config)

    assert report.linked == ["git", "vim", "zsh"]
    assert [cmd[-1] for cmd, _ in runner.calls] == ["git", "vim", "zsh"]
    assert all(cwd == staged for _, cwd in runner.calls)
    assert all("-n" in cmd for cmd, _ in runner.calls)


def test_apply_drops_dry_run_flag(staged, make_config, runner, tmp_path) -> None:
    config = make_config(tmp_path / "dotfiles", staging_dir=staged, dry_run=False)

    link_packages(["vim"], LinkMode.RESTOW, config)

    (cmd, _), = runner.calls
    assert cmd == [
        "/usr/bin/stow",
        "--dotfiles",
        "-v",
        "-R",
        "-t",
        str(config.home),
        "vim",
    ]


def test_requested_missing_package_is_skipped(
    staged, make_config, runner, tmp_path, caplog
) -> None:
    config = make_config(tmp_path / "dotfiles", staging_dir=staged)

    with caplog.at_level(logging.ERROR):
        report = link_packages(["emacs", "git", "README"], LinkMode.UNSTOW, config)

    assert report.linked == ["git"]
    assert report.missing == ["emacs", "README"]
    assert report.ok
    assert "Package not found: emacs" in caplog.text


def test_linker_failure_is_contained(staged, make_config, monkeypatch, tmp_path) -> None:
    fake = FakeRunner(fail={"git"})
    monkeypatch.setattr(stow, "run_logged", fake)
    monkeypatch.setattr(stow.shutil, "which", lambda name: name)
    config = make_config(tmp_path / "dotfiles", staging_dir=staged)

    report = link_packages([], LinkMode.STOW, config)

    assert report.failed == ["git"]
    assert report.linked == ["vim", "zsh"]
    assert not report.ok


def test_missing_staging_directory_is_fatal(make_config, runner, tmp_path) -> None:
    config = make_config(tmp_path / "dotfiles", staging_dir=tmp_path / "nowhere")

    with pytest.raises(TargetUnavailableError):
        link_packages([], LinkMode.UNSTOW, config)
    assert runner.calls == []


def test_missing_linker_is_fatal(staged, make_config, monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(stow.shutil, "which", lambda name: None)
    config = make_config(tmp_path / "dotfiles", staging_dir=staged)

    with pytest.raises(LinkerNotFoundError, match="missing dependency: stow"):
        link_packages([], LinkMode.STOW, config)
