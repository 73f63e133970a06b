"""Locating the gitable config file."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Mapping, Optional

APP_NAME = "gitable"
CONFIG_FILENAME = "config.yml"
CONFIG_ENV_VAR = "GITABLE_CONFIG"


def config_home(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the per-user base directory for configuration.

    - Linux: $XDG_CONFIG_HOME (when absolute) or ~/.config
    - macOS: ~/Library/Application Support
    - Windows: %APPDATA% or ~/AppData/Roaming

    Args:
        environ: Environment to read, defaults to os.environ.

    Returns:
        Base config directory, without the application subdirectory.
    """
    env = os.environ if environ is None else environ
    home = Path.home()

    if sys.platform.startswith("win"):
        return Path(env.get("APPDATA", str(home / "AppData" / "Roaming")))
    if sys.platform == "darwin":
        return home / "Library" / "Application Support"

    xdg = env.get("XDG_CONFIG_HOME")
    if xdg and Path(xdg).is_absolute():
        return Path(xdg)
    return home / ".config"


def get_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the path of the config file.

    $GITABLE_CONFIG names the file directly; otherwise it is config.yml in
    the gitable directory under config_home().
    """
    env = os.environ if environ is None else environ
    override = env.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return config_home(env) / APP_NAME / CONFIG_FILENAME
