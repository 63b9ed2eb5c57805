"""End-to-end reset runs against a fake host.

Each test drives a ResetEngine with the in-memory FakeHost as command
runner and a temporary directory as filesystem root.
"""

from collections.abc import Iterator
from unittest.mock import patch

import pytest
from conftest import FakeHost, write_file, write_vulkan_icd

from gpureset.core.engine import ResetEngine
from gpureset.core.paths import HostPaths
from gpureset.core.profiles import FULL_PROFILE, USERLAND_PROFILE, Profile
from gpureset.models.action import ActionType
from gpureset.models.inventory import ItemKind
from gpureset.models.report import RunStage

TS = 1700000000
KERNEL = "6.14.0-15-generic"


@pytest.fixture(autouse=True)
def host_tools(tools_present: None) -> Iterator[None]:
    """Every tool present and a fixed running kernel."""
    with patch("gpureset.core.restorer.running_kernel", return_value=KERNEL):
        yield


def _engine(profile: Profile, paths: HostPaths, host: FakeHost, ts: int = TS) -> ResetEngine:
    return ResetEngine(profile, paths, runner=host, timestamp=ts)


class TestScenarios:
    """The reference scenarios."""

    def test_a_vendor_package_purged(self, fake_host: FakeHost, host_paths: HostPaths) -> None:
        """rocm-dev is labelled foreign, purged, and gone on re-collection."""
        fake_host.packages.update({"rocm-dev": "6.1.0", "libdrm2": "2.4.122"})

        engine = _engine(FULL_PROFILE, host_paths, fake_host)
        report = engine.run()

        [rocm] = [r for r in engine.context.classifications if r.item.name == "rocm-dev"]
        assert rocm.is_foreign
        assert rocm.rule == "package:^rocm(-.*)?$"
        assert report.completed
        assert "rocm-dev" not in fake_host.packages

        again = _engine(FULL_PROFILE, host_paths, fake_host, TS + 1)
        again.plan()
        assert "rocm-dev" not in [item.name for item in again.context.inventory]

    def test_b_vendor_source_disabled(self, fake_host: FakeHost, host_paths: HostPaths) -> None:
        """A repo.radeon.com source is renamed with the disabled marker."""
        source = write_file(
            host_paths.sources_list_d / "amdgpu.list",
            "deb https://repo.radeon.com/amdgpu/6.1/ubuntu jammy main\n",
        )

        _engine(FULL_PROFILE, host_paths, fake_host).run()

        assert not source.exists()
        renamed = host_paths.sources_list_d / f"amdgpu.list.disabled.{TS}"
        assert "repo.radeon.com" in renamed.read_text()

    def test_c_radv_icd_untouched(self, fake_host: FakeHost, host_paths: HostPaths) -> None:
        """A radv ICD is stock and stays in place."""
        icd = write_vulkan_icd(
            host_paths.vulkan_icd_d, "radeon_icd.x86_64.json", "/usr/lib/libvulkan_radv.so"
        )

        engine = _engine(FULL_PROFILE, host_paths, fake_host)
        engine.run()

        [result] = [r for r in engine.context.classifications if r.item.kind == ItemKind.VULKAN_ICD]
        assert not result.is_foreign
        assert icd.exists()

    def test_d_vendor_icd_quarantined(self, fake_host: FakeHost, host_paths: HostPaths) -> None:
        """A non-radv ICD is moved to the quarantine directory."""
        icd = write_vulkan_icd(
            host_paths.vulkan_icd_d, "amd_icd64.json", "/opt/amdgpu-pro/lib/amdvlk64.so"
        )

        _engine(FULL_PROFILE, host_paths, fake_host).run()

        assert not icd.exists()
        assert (host_paths.vulkan_icd_backup_dir / f"amd_icd64.json.disabled.{TS}").exists()

    def test_e_clean_host(self, fake_host: FakeHost, host_paths: HostPaths) -> None:
        """Nothing foreign: nothing destroyed, restoration still runs."""
        fake_host.packages.update({"libdrm2": "2.4.122", "firefox": "128.0"})

        engine = _engine(FULL_PROFILE, host_paths, fake_host)
        report = engine.run()

        assert engine.context.actions == []
        assert not fake_host.apt_calls("purge")
        assert fake_host.commands("dkms") == [["dkms", "status"]]
        assert "install-stock" in report.executed
        assert report.completed
        assert report.failures == []


class TestFullReset:
    """Full reset of a host carrying a vendor stack."""

    def test_removes_vendor_stack(self, dirty_host: FakeHost, host_paths: HostPaths) -> None:
        """Foreign state is removed and stock state preserved."""
        report = _engine(FULL_PROFILE, host_paths, dirty_host).run()

        assert report.completed
        assert not {"rocm-dev", "amdgpu-dkms", "amdvlk", "amdvlk:i386"} & set(dirty_host.packages)
        assert {"libdrm2", "mesa-vulkan-drivers", "firefox"} <= set(dirty_host.packages)
        assert dirty_host.dkms == {"v4l2loopback": ["0.12.7"]}
        assert not (host_paths.opt_dir / "rocm-6.1.0").exists()
        assert (host_paths.opt_dir / "google").exists()
        assert not (host_paths.home_dir / "alice" / ".cache" / "mesa_shader_cache").exists()
        assert (host_paths.preferences_d / "firefox.pref").exists()
        assert (host_paths.modprobe_d / "alsa-base.conf").exists()
        assert (host_paths.vulkan_icd_d / "radv_icd.x86_64.json").exists()
        assert (host_paths.opencl_vendors_d / "mesa.icd").exists()

    def test_purge_is_one_batch(self, dirty_host: FakeHost, host_paths: HostPaths) -> None:
        """Foreign packages are purged in a single apt transaction."""
        _engine(FULL_PROFILE, host_paths, dirty_host).run()

        [purge] = dirty_host.apt_calls("purge")
        assert purge[-4:] == ["amdgpu-dkms", "amdvlk", "amdvlk:i386", "rocm-dev"]

    def test_backup_before_destroy(self, dirty_host: FakeHost, host_paths: HostPaths) -> None:
        """Every renamed artifact has a backup holding its old content."""
        originals = {
            host_paths.sources_list_d / "rocm.list": host_paths.sources_list_d
            / f"rocm.list.disabled.{TS}",
            host_paths.preferences_d / "rocm-pin-600": host_paths.preferences_d
            / f"rocm-pin-600.disabled.{TS}",
            host_paths.modprobe_d / "blacklist-radeon.conf": host_paths.modprobe_d
            / f"blacklist-radeon.conf.disabled.{TS}",
            host_paths.opencl_vendors_d / "amdocl64.icd": host_paths.opencl_vendors_backup_dir
            / f"amdocl64.icd.disabled.{TS}",
        }
        contents = {path: path.read_text() for path in originals}

        _engine(FULL_PROFILE, host_paths, dirty_host).run()

        for original, backup in originals.items():
            assert not original.exists()
            assert backup.read_text() == contents[original]
        assert (host_paths.apt_dir / f"sources.list.bak-{TS}").exists()
        assert (host_paths.sources_backup_dir / "rocm.list").exists()
        assert host_paths.sources_list.exists()

    def test_step_order(self, dirty_host: FakeHost, host_paths: HostPaths) -> None:
        """Sources and pins go first; restoration only after remediation."""
        stages: list[RunStage] = []

        report = _engine(FULL_PROFILE, host_paths, dirty_host).run(on_stage=stages.append)

        executed = report.executed
        assert executed.index("disable-sources") < executed.index("purge-packages")
        assert executed.index("remove-pins") < executed.index("purge-packages")
        assert executed.index("tidy-and-refresh") < executed.index("restore-refresh")
        assert stages == [
            RunStage.COLLECTING,
            RunStage.CLASSIFYING,
            RunStage.REMEDIATING,
            RunStage.RESTORING,
            RunStage.DONE,
        ]

    def test_restores_stock_stack(self, dirty_host: FakeHost, host_paths: HostPaths) -> None:
        """Stock packages, headers, boot chain and module preference are restored."""
        _engine(FULL_PROFILE, host_paths, dirty_host).run()

        assert {"linux-generic", "mesa-opencl-icd", f"linux-headers-{KERNEL}"} <= set(
            dirty_host.packages
        )
        assert dirty_host.commands("update-initramfs")
        assert dirty_host.commands("update-grub")
        assert ["modprobe", "amdgpu"] in dirty_host.calls
        preference = host_paths.modprobe_d / "10-amdgpu-prefer.conf"
        assert "si_support=1" in preference.read_text()

    def test_idempotent(self, dirty_host: FakeHost, host_paths: HostPaths) -> None:
        """A second run finds nothing foreign and completes."""
        _engine(FULL_PROFILE, host_paths, dirty_host).run()

        second = _engine(FULL_PROFILE, host_paths, dirty_host, TS + 60)
        report = second.run()

        assert [r.item.label for r in second.context.classifications if r.is_foreign] == []
        assert second.context.actions == []
        assert report.completed
        assert (host_paths.modprobe_d / "10-amdgpu-prefer.conf").exists()

    def test_broken_package_does_not_stop_run(
        self, dirty_host: FakeHost, host_paths: HostPaths
    ) -> None:
        """A failing purge is retried per package and the run goes on."""
        dirty_host.broken.add("amdvlk:i386")

        report = _engine(FULL_PROFILE, host_paths, dirty_host).run()

        purge = report.step("purge-packages")
        assert purge is not None
        assert [r.target for r in purge.results if r.failed] == ["amdvlk:i386"]
        assert "rocm-dev" not in dirty_host.packages
        assert "load-module" in report.executed
        assert report.completed

    def test_initramfs_fallback(self, dirty_host: FakeHost, host_paths: HostPaths) -> None:
        """Existing images are updated when create refuses."""
        dirty_host.initramfs_create_fails = True

        report = _engine(FULL_PROFILE, host_paths, dirty_host).run()

        step = report.step("regenerate-initramfs")
        assert step is not None
        assert step.success
        assert step.results[0].message == "Updated existing images"

    def test_module_load_failure_is_logged(
        self, dirty_host: FakeHost, host_paths: HostPaths
    ) -> None:
        """amdgpu failing to load before reboot is recorded, not fatal."""
        dirty_host.modprobe_fails = True

        report = _engine(FULL_PROFILE, host_paths, dirty_host).run()

        assert [s.name for s in report.failures] == ["load-module"]
        assert report.completed

    def test_dry_run_changes_nothing(self, dirty_host: FakeHost, host_paths: HostPaths) -> None:
        """plan() only runs read-only queries."""
        engine = _engine(FULL_PROFILE, host_paths, dirty_host)

        report = engine.plan()

        assert report.executed == ["collect", "classify", "plan"]
        assert {call[0] for call in dirty_host.calls} <= {"dpkg", "dpkg-query", "dkms"}
        assert ["dkms", "status"] in dirty_host.calls
        assert (host_paths.sources_list_d / "rocm.list").exists()
        assert (host_paths.opt_dir / "rocm-6.1.0").exists()
        assert len(engine.context.actions) == 13
        assert {a.action_type for a in engine.context.actions} == set(ActionType)

    def test_engine_runs_once(self, fake_host: FakeHost, host_paths: HostPaths) -> None:
        """An engine cannot be reused."""
        engine = _engine(FULL_PROFILE, host_paths, fake_host)
        engine.plan()

        with pytest.raises(RuntimeError, match="exactly once"):
            engine.run()


class TestUserlandReset:
    """Userland-only reset of the same host."""

    def test_keeps_kernel_and_compute_stack(
        self, dirty_host: FakeHost, host_paths: HostPaths
    ) -> None:
        """ROCm, DKMS, pins and modprobe files are out of scope."""
        report = _engine(USERLAND_PROFILE, host_paths, dirty_host).run()

        assert report.completed
        assert "rocm-dev" in dirty_host.packages
        assert "amdvlk" not in dirty_host.packages
        assert "amdvlk:i386" not in dirty_host.packages
        assert dirty_host.dkms["amdgpu"] == ["6.7.0", "6.8.5"]
        assert (host_paths.preferences_d / "rocm-pin-600").exists()
        assert (host_paths.modprobe_d / "blacklist-radeon.conf").exists()
        assert (host_paths.opt_dir / "rocm-6.1.0").exists()
        assert not (host_paths.sources_list_d / "rocm.list").exists()
        assert not (host_paths.vulkan_icd_d / "amd_icd64.json").exists()
        assert not dirty_host.commands("update-initramfs")

    def test_restores_multiarch_mesa(self, dirty_host: FakeHost, host_paths: HostPaths) -> None:
        """i386 is enabled and Mesa is reinstalled for both architectures."""
        dirty_host.alternatives["x86_64-linux-gnu_gl_conf"] = [
            "/usr/lib/x86_64-linux-gnu/mesa/ld.so.conf"
        ]

        _engine(USERLAND_PROFILE, host_paths, dirty_host).run()

        assert dirty_host.foreign_archs == ["i386"]
        assert "mesa-vulkan-drivers:i386" in dirty_host.packages
        assert [
            "update-alternatives",
            "--set",
            "x86_64-linux-gnu_gl_conf",
            "/usr/lib/x86_64-linux-gnu/mesa/ld.so.conf",
        ] in dirty_host.calls
        assert dirty_host.commands("ldconfig")
