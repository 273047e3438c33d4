"""Config profiles for storing data directory and schema paths."""
from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import click

from datatbls.config import derive_schema_dir

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

_PROFILE_NAME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")


@dataclass
class Profile:
    name: str
    data_dir: Path
    schema_dir: Optional[Path] = None

    @property
    def schemas(self) -> Path:
        return self.schema_dir or derive_schema_dir(self.data_dir)


@dataclass
class Config:
    default_profile: str | None = None
    profiles: dict[str, Profile] = field(default_factory=dict)


def get_config_path() -> Path:
    """Return the TOML config file path via click.get_app_dir."""
    return Path(click.get_app_dir("datatbls")) / "config.toml"


def load_config() -> Config:
    """Read TOML config. Returns empty Config if file missing."""
    path = get_config_path()
    if not path.exists():
        return Config()

    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = Config(default_profile=data.get("default_profile"))
    for name, info in data.get("profiles", {}).items():
        schema_dir = info.get("schema_dir")
        config.profiles[name] = Profile(
            name=name,
            data_dir=Path(info["data_dir"]),
            schema_dir=Path(schema_dir) if schema_dir else None,
        )
    return config


def save_config(config: Config) -> Path:
    """Write config to TOML using literal strings for paths."""
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    if config.default_profile:
        lines.append(f"default_profile = \"{config.default_profile}\"")
    lines.append("")

    for name, profile in config.profiles.items():
        lines.append(f"[profiles.{name}]")
        # Literal strings so Windows backslashes survive
        lines.append(f"data_dir = '{profile.data_dir}'")
        if profile.schema_dir:
            lines.append(f"schema_dir = '{profile.schema_dir}'")
        lines.append("")

    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def validate_profile_name(name: str) -> bool:
    """Check that a profile name is a valid TOML bare key."""
    return bool(_PROFILE_NAME_RE.match(name))


def resolve_profile(data_dir: Path | None, schema_dir: Path | None,
                    profile_name: str | None) -> Profile:
    """Resolve paths: --data-dir > --profile > default profile.

    Explicit --schema-dir overrides whatever the profile stores.
    Raises click.UsageError with a helpful message if nothing resolves.
    """
    if data_dir is not None:
        if not data_dir.is_dir():
            raise click.UsageError(f"Data directory not found: {data_dir}")
        return Profile(name="(command line)", data_dir=data_dir, schema_dir=schema_dir)

    config = load_config()

    name = profile_name or config.default_profile
    if name is None:
        raise click.UsageError(
            "No data directory provided. Either:\n"
            "  1. Run 'datatbls init' to set up a profile\n"
            "  2. Pass --data-dir <path> explicitly\n"
            "  3. Pass --profile <name> to use a named profile"
        )

    profile = config.profiles.get(name)
    if profile is None:
        available = ", ".join(config.profiles) or "(none)"
        raise click.UsageError(
            f"Profile '{name}' not found. Available profiles: {available}"
        )

    if not profile.data_dir.is_dir():
        raise click.UsageError(
            f"Data directory not found for profile '{name}': {profile.data_dir}\n"
            "Run 'datatbls init' to update the path."
        )

    if schema_dir is not None:
        profile.schema_dir = schema_dir
    return profile
