"""Domain models for package rendering and linking runs."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PackageScope = Literal["host", "common"]
FileKind = Literal["template", "plain"]


class PackageLayout(BaseModel):
    """Package roots for one hostname."""

    model_config = ConfigDict(frozen=True)

    common_root: Path = Field(..., description="Directory of shared packages")
    host_root: Path = Field(..., description="Directory of host-specific packages")


class RunConfig(BaseModel):
    """Everything a command needs, resolved once at start-up."""

    model_config = ConfigDict(frozen=True)

    hostname: str = Field(..., min_length=1, description="Active hostname")
    root: Path = Field(..., description="Dotfiles repository root")
    build_dir: Path = Field(..., description="Output of the build command")
    staging_dir: Path = Field(..., description="Tree the linker operates on")
    home: Path = Field(..., description="Link target directory")
    environ: dict[str, str] = Field(
        default_factory=dict, description="Environment snapshot for templates"
    )
    template_suffix: str = Field(default=".tmpl", min_length=1)
    stow_executable: str = Field(default="stow", min_length=1)
    dry_run: bool = True
    strict: bool = False

    @property
    def config_dir(self) -> Path:
        return self.root / "config"

    @property
    def defaults_path(self) -> Path:
        return self.config_dir / "defaults"

    @property
    def host_config_path(self) -> Path:
        return self.config_dir / f"{self.hostname}.conf"

    @property
    def layout(self) -> PackageLayout:
        packages = self.root / "packages"
        return PackageLayout(
            common_root=packages / "common",
            host_root=packages / "host-specific" / self.hostname,
        )


class ResolvedPackage(BaseModel):
    """A package name bound to the directory chosen for it."""

    name: str
    path: Path
    scope: PackageScope


class ResolvedFile(BaseModel):
    """A package file and where it lands inside the package target."""

    source: Path
    relative: Path = Field(..., description="Destination relative to package target")
    kind: FileKind


class PackageReport(BaseModel):
    """Outcome of processing one package."""

    package: ResolvedPackage
    target: Path
    written: list[Path] = Field(default_factory=list)
    failed: list[Path] = Field(default_factory=list)


class BuildReport(BaseModel):
    """Outcome of processing a package set into a target tree."""

    target_root: Path
    packages: list[PackageReport] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    failed_packages: list[str] = Field(default_factory=list)

    @property
    def failed_files(self) -> list[Path]:
        return [path for report in self.packages for path in report.failed]


class LinkReport(BaseModel):
    """Outcome of running the linker over a package set."""

    linked: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed
