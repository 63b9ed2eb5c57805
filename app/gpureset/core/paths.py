"""Host path layout for gpureset.

Every filesystem location the reset touches is resolved through
:class:`HostPaths`, which anchors the well-known system directories under
a root (``/`` on a live system). Tests build a ``HostPaths`` rooted in a
temporary directory to exercise the real code paths without touching the
host.

Tool configuration lives in ``/etc/gpureset/``:
- config.toml: profile rule overrides and run settings
- theme.toml: console colour overrides
"""

import os
from dataclasses import dataclass
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "gpureset"

# Environment override for the configuration file location
CONFIG_ENV_VAR = "GPURESET_CONFIG"


def get_config_dir() -> Path:
    """Get the system configuration directory path.

    Returns:
        Path to /etc/gpureset/.
    """
    return Path("/etc") / APP_NAME


def get_config_path() -> Path:
    """Get the configuration file path, honouring ``GPURESET_CONFIG``.

    Returns:
        Path to the config.toml file.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the theme override file path.

    Returns:
        Path to /etc/gpureset/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


@dataclass(frozen=True, slots=True)
class HostPaths:
    """Well-known host locations, resolved relative to ``root``.

    Attributes:
        root: Filesystem root the layout is anchored to.
        log_dir: Transcript directory (absolute, re-anchored under root).
        backup_dir: Quarantine directory (absolute, re-anchored under root).
    """

    root: Path = Path("/")
    log_dir: str = "/var/log"
    backup_dir: str = "/var/backups"

    def resolve(self, absolute: str) -> Path:
        """Anchor an absolute host path under ``root``."""
        return self.root / absolute.lstrip("/")

    @property
    def apt_dir(self) -> Path:
        return self.resolve("/etc/apt")

    @property
    def sources_list(self) -> Path:
        return self.apt_dir / "sources.list"

    @property
    def sources_list_d(self) -> Path:
        return self.apt_dir / "sources.list.d"

    @property
    def sources_backup_dir(self) -> Path:
        """Directory receiving copies of sources.list.d before any rename."""
        return self.apt_dir / "sources.list.d.bak"

    @property
    def preferences_d(self) -> Path:
        return self.apt_dir / "preferences.d"

    @property
    def trusted_gpg_d(self) -> Path:
        return self.apt_dir / "trusted.gpg.d"

    @property
    def modprobe_d(self) -> Path:
        return self.resolve("/etc/modprobe.d")

    @property
    def vulkan_icd_d(self) -> Path:
        return self.resolve("/etc/vulkan/icd.d")

    @property
    def opencl_vendors_d(self) -> Path:
        return self.resolve("/etc/OpenCL/vendors")

    @property
    def opt_dir(self) -> Path:
        return self.resolve("/opt")

    @property
    def home_dir(self) -> Path:
        return self.resolve("/home")

    @property
    def root_home(self) -> Path:
        return self.resolve("/root")

    @property
    def os_release(self) -> Path:
        return self.resolve("/etc/os-release")

    @property
    def transcript_dir(self) -> Path:
        return self.resolve(self.log_dir)

    @property
    def vulkan_icd_backup_dir(self) -> Path:
        return self.resolve(self.backup_dir) / "vulkan-icd-bak"

    @property
    def opencl_vendors_backup_dir(self) -> Path:
        return self.resolve(self.backup_dir) / "opencl-vendors-bak"

    def user_cache_dirs(self) -> list[Path]:
        """Per-user ``~/.cache`` directories for every home and root.

        Returns:
            Cache directories in stable order; missing homes are skipped.
        """
        caches: list[Path] = []
        if self.home_dir.is_dir():
            homes = sorted(home for home in self.home_dir.iterdir() if home.is_dir())
            caches.extend(home / ".cache" for home in homes)
        caches.append(self.root_home / ".cache")
        return caches
