"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules: a fake host
that answers dpkg/apt/dkms/boot commands from in-memory state, and a
HostPaths layout rooted in a temporary directory.
"""

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from unittest.mock import patch

import pytest

from gpureset.core.paths import HostPaths
from gpureset.utils.shell import CommandResult


def _ok(stdout: str = "") -> CommandResult:
    return CommandResult(stdout=stdout, stderr="", returncode=0)


def _fail(stderr: str, returncode: int = 100) -> CommandResult:
    return CommandResult(stdout="", stderr=stderr, returncode=returncode)


@dataclass
class FakeHost:
    """In-memory stand-in for the host's package and boot tooling.

    Installed packages map ``name`` (or ``name:arch`` for foreign
    architectures) to a version. Every call is recorded in ``calls``.
    """

    packages: dict[str, str] = field(default_factory=dict)
    dkms: dict[str, list[str]] = field(default_factory=dict)
    foreign_archs: list[str] = field(default_factory=list)
    alternatives: dict[str, list[str]] = field(default_factory=dict)
    broken: set[str] = field(default_factory=set)
    initramfs_create_fails: bool = False
    modprobe_fails: bool = False
    native_arch: str = "amd64"
    calls: list[list[str]] = field(default_factory=list)
    envs: list[Mapping[str, str] | None] = field(default_factory=list)

    def __call__(
        self,
        args: list[str],
        *,
        check: bool = False,
        timeout: float | None = 60.0,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        self.calls.append(list(args))
        self.envs.append(env)
        handler = getattr(self, f"_{args[0].replace('-', '_')}", None)
        if handler is None:
            return _fail(f"{args[0]}: command not found", 127)
        return handler(args[1:])

    # Query helpers for assertions

    def commands(self, name: str) -> list[list[str]]:
        """All recorded invocations of one executable."""
        return [call for call in self.calls if call[0] == name]

    def apt_calls(self, subcommand: str) -> list[list[str]]:
        """apt-get invocations with the given subcommand."""
        return [call for call in self.commands("apt-get") if subcommand in call]

    # dpkg

    def _dpkg(self, args: list[str]) -> CommandResult:
        if args == ["--print-architecture"]:
            return _ok(f"{self.native_arch}\n")
        if args == ["--print-foreign-architectures"]:
            return _ok("".join(f"{arch}\n" for arch in self.foreign_archs))
        if args[:1] == ["--add-architecture"]:
            if args[1] not in self.foreign_archs:
                self.foreign_archs.append(args[1])
            return _ok()
        return _fail("dpkg: unsupported", 2)

    def _dpkg_query(self, args: list[str]) -> CommandResult:
        lines = []
        for spec, version in sorted(self.packages.items()):
            name, _, arch = spec.partition(":")
            lines.append(f"{name}\t{version}\t{arch or self.native_arch}\tinstalled\n")
        return _ok("".join(lines))

    # apt-get

    def _apt_get(self, args: list[str]) -> CommandResult:
        operands = [a for a in args if not a.startswith("-") and "::" not in a and "=" not in a]
        if not operands:
            return _fail("E: no operation", 100)
        command, specs = operands[0], operands[1:]

        if command in ("update", "autoclean", "autoremove"):
            return _ok()
        if any(spec in self.broken for spec in specs):
            bad = next(spec for spec in specs if spec in self.broken)
            return _fail(f"E: Sub-process /usr/bin/dpkg returned an error code (1) for {bad}")
        if command == "purge":
            for spec in specs:
                self.packages.pop(spec, None)
            return _ok()
        if command == "install":
            for spec in specs:
                self.packages.setdefault(spec, "1.0")
            return _ok()
        return _fail(f"E: Invalid operation {command}")

    # dkms

    def _dkms(self, args: list[str]) -> CommandResult:
        if args == ["status"]:
            lines = [
                f"{name}/{version}, 6.14.0-15-generic, x86_64: installed\n"
                for name, versions in self.dkms.items()
                for version in versions
            ]
            return _ok("".join(lines))
        if args[:1] == ["remove"]:
            name, version = args[args.index("-m") + 1], args[args.index("-v") + 1]
            versions = self.dkms.get(name, [])
            if version not in versions:
                return _fail(f"Error! There are no instances of module: {name} {version}", 3)
            versions.remove(version)
            if not versions:
                del self.dkms[name]
            return _ok()
        return _fail("dkms: unsupported", 2)

    # boot chain

    def _update_initramfs(self, args: list[str]) -> CommandResult:
        if "-c" in args and self.initramfs_create_fails:
            return _fail("update-initramfs: /boot/initrd.img-6.14.0 already exists", 1)
        return _ok()

    def _update_grub(self, args: list[str]) -> CommandResult:
        return _ok("done\n")

    def _modprobe(self, args: list[str]) -> CommandResult:
        if self.modprobe_fails:
            return _fail(f"modprobe: ERROR: could not insert '{args[0]}': Device busy", 1)
        return _ok()

    def _update_alternatives(self, args: list[str]) -> CommandResult:
        if args[0] == "--list":
            choices = self.alternatives.get(args[1])
            if not choices:
                return _fail(f"update-alternatives: error: no alternatives for {args[1]}", 2)
            return _ok("".join(f"{choice}\n" for choice in choices))
        return _ok()

    def _ldconfig(self, args: list[str]) -> CommandResult:
        return _ok()

    def _systemctl(self, args: list[str]) -> CommandResult:
        return _ok()


@pytest.fixture
def fake_host() -> FakeHost:
    """Empty fake host."""
    return FakeHost()


@pytest.fixture
def host_paths(tmp_path: Path) -> HostPaths:
    """Host layout rooted in a temporary directory."""
    return HostPaths(root=tmp_path)


@pytest.fixture
def tools_present() -> Iterator[None]:
    """Report every external tool as installed."""
    with (
        patch("gpureset.scanners.apt.command_exists", return_value=True),
        patch("gpureset.scanners.dkms.command_exists", return_value=True),
        patch("gpureset.operators.base.command_exists", return_value=True),
        patch("gpureset.core.preflight.command_exists", return_value=True),
    ):
        yield


def write_file(path: Path, content: str = "") -> Path:
    """Create a file and its parents."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def write_vulkan_icd(directory: Path, name: str, library_path: str) -> Path:
    """Create a Vulkan ICD descriptor."""
    body = {"file_format_version": "1.0.0", "ICD": {"library_path": library_path}}
    return write_file(directory / name, json.dumps(body))


@pytest.fixture
def dirty_host(fake_host: FakeHost, host_paths: HostPaths) -> FakeHost:
    """A host carrying a vendor AMDGPU-PRO/ROCm install next to stock packages."""
    fake_host.packages.update(
        {
            "rocm-dev": "6.1.0",
            "amdgpu-dkms": "6.7.0",
            "amdvlk": "2024.Q2",
            "amdvlk:i386": "2024.Q2",
            "libdrm2": "2.4.122",
            "mesa-vulkan-drivers": "25.0.3",
            "firefox": "128.0",
        }
    )
    fake_host.dkms.update({"amdgpu": ["6.7.0", "6.8.5"], "v4l2loopback": ["0.12.7"]})

    paths = host_paths
    write_file(paths.sources_list, "deb http://archive.ubuntu.com/ubuntu plucky main\n")
    write_file(
        paths.sources_list_d / "rocm.list",
        "deb https://repo.radeon.com/rocm/apt/6.1 jammy main\n",
    )
    write_file(paths.sources_list_d / "ubuntu.sources", "URIs: http://archive.ubuntu.com/\n")
    write_file(paths.preferences_d / "rocm-pin-600", "Package: *\nPin: origin repo.radeon.com\n")
    write_file(paths.preferences_d / "firefox.pref", "Package: firefox*\nPin: origin mozilla\n")
    write_file(paths.trusted_gpg_d / "rocm.gpg", "key")
    write_file(paths.trusted_gpg_d / "ubuntu-keyring-2018-archive.gpg", "key")
    write_file(paths.modprobe_d / "blacklist-radeon.conf", "blacklist radeon\n")
    write_file(paths.modprobe_d / "alsa-base.conf", "options snd-usb-audio index=-2\n")
    write_vulkan_icd(paths.vulkan_icd_d, "radv_icd.x86_64.json", "/usr/lib/libvulkan_radv.so")
    write_vulkan_icd(paths.vulkan_icd_d, "amd_icd64.json", "/opt/amdgpu-pro/lib/amdvlk64.so")
    write_file(paths.opencl_vendors_d / "amdocl64.icd", "libamdocl64.so\n")
    write_file(paths.opencl_vendors_d / "mesa.icd", "libMesaOpenCL.so.1\n")
    (paths.opt_dir / "rocm-6.1.0" / "bin").mkdir(parents=True)
    (paths.opt_dir / "google").mkdir(parents=True)
    (paths.home_dir / "alice" / ".cache" / "mesa_shader_cache").mkdir(parents=True)
    return fake_host
