"""APT package operator implementation.

Executes package purge, install, and metadata maintenance using apt-get,
and architecture management using dpkg.
"""

import logging

from gpureset.core.errors import OperationError
from gpureset.models.action import ActionResult, ActionType, RestorationTarget, failed, succeeded
from gpureset.operators.base import Operator
from gpureset.utils.shell import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

# Non-interactive dpkg: take maintainer config files, keep defaults otherwise.
APT_FLAGS: tuple[str, ...] = (
    "-y",
    "-o",
    "Dpkg::Options::=--force-confnew",
    "-o",
    "Dpkg::Options::=--force-confdef",
)

APT_ENV: dict[str, str] = {"DEBIAN_FRONTEND": "noninteractive"}


class AptOperator(Operator):
    """Operator for apt-get and dpkg.

    Must run as root. Batch calls let apt resolve removal and install
    ordering; when a batch fails the packages are retried one by one so a
    single bad package does not block the rest.

    ``update()`` is skipped while metadata is known to be fresh; every
    mutating call marks it stale again.
    """

    # Purges of compute stacks and kernel installs can be slow (30 minutes)
    _TIMEOUT: float = 1800.0

    def __init__(self, runner: CommandRunner | None = None) -> None:
        super().__init__(runner)
        self._metadata_fresh = False

    @property
    def tool(self) -> str:
        """Return apt-get as the driven executable."""
        return "apt-get"

    @property
    def metadata_fresh(self) -> bool:
        """Check if package metadata was refreshed since the last mutation."""
        return self._metadata_fresh

    def invalidate_metadata(self) -> None:
        """Mark metadata stale (e.g. after sources changed on disk)."""
        self._metadata_fresh = False

    def _apt(self, *args: str) -> list[str]:
        return ["apt-get", *APT_FLAGS, *args]

    def _run_apt(self, args: list[str]) -> CommandResult:
        return self._call(args, env=APT_ENV)

    def update(self, force: bool = False) -> list[ActionResult]:
        """Refresh package metadata with apt-get update.

        Args:
            force: Run even if metadata is already fresh.

        Returns:
            Single-element result list.
        """
        if self._metadata_fresh and not force:
            return [succeeded("refresh_metadata", "apt", "Already fresh, skipped")]

        result = self._execute("refresh_metadata", "apt", ["apt-get", "update"], env=APT_ENV)
        self._metadata_fresh = result.success
        return [result]

    def autoremove(self) -> list[ActionResult]:
        """Purge orphaned dependencies."""
        self._metadata_fresh = False
        return [
            self._execute(
                "autoremove",
                "orphans",
                self._apt("-o", "APT::Get::AutomaticRemove=true", "autoremove", "--purge"),
                env=APT_ENV,
            )
        ]

    def autoclean(self) -> list[ActionResult]:
        """Drop obsolete archives from the package cache."""
        return [self._execute("autoclean", "cache", self._apt("autoclean"), env=APT_ENV)]

    def purge(self, packages: list[str]) -> list[ActionResult]:
        """Purge packages in one batch, falling back to one call per package.

        Args:
            packages: Package specs (``name`` or ``name:arch``).

        Returns:
            One ActionResult per package.
        """
        if not packages:
            return []
        self._metadata_fresh = False
        return self._batch(ActionType.PURGE_PACKAGE.value, ["purge"], packages)

    def install(self, targets: list[RestorationTarget]) -> list[ActionResult]:
        """Install stock packages, reinstalling where the target asks for it.

        Targets are batched by install mode; each batch falls back to one
        call per package on failure.

        Args:
            targets: Restoration targets.

        Returns:
            One ActionResult per target.
        """
        if not targets:
            return []
        self._metadata_fresh = False

        results: list[ActionResult] = []
        plain = [t.spec for t in targets if not t.reinstall]
        reinstall = [t.spec for t in targets if t.reinstall]
        if plain:
            results.extend(self._batch("install", ["install"], plain))
        if reinstall:
            results.extend(self._batch("reinstall", ["install", "--reinstall"], reinstall))
        return results

    def foreign_architectures(self) -> list[str]:
        """List enabled foreign dpkg architectures.

        Raises:
            OperationError: If dpkg cannot be run.
        """
        result = self._call(["dpkg", "--print-foreign-architectures"])
        if not result.success:
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def add_architecture(self, arch: str) -> list[ActionResult]:
        """Enable a foreign architecture if it is not enabled yet.

        Args:
            arch: dpkg architecture name (e.g. ``i386``).

        Returns:
            Single-element result list.
        """
        if arch in self.foreign_architectures():
            return [succeeded("add_architecture", arch, "Already enabled")]

        result = self._execute("add_architecture", arch, ["dpkg", "--add-architecture", arch])
        if result.success:
            self._metadata_fresh = False
        return [result]

    def _batch(self, operation: str, command: list[str], specs: list[str]) -> list[ActionResult]:
        """Run one apt-get call for all specs, retrying individually on failure."""
        logger.info("APT %s: %s", operation, ", ".join(specs))
        try:
            result = self._run_apt(self._apt(*command, *specs))
        except OperationError as e:
            error = str(e)
        else:
            if result.success:
                return [succeeded(operation, spec, "Operation completed") for spec in specs]
            error = result.error_text

        if len(specs) == 1:
            return [failed(operation, specs[0], error)]

        logger.warning(
            "Batch %s failed, retrying %d package(s) individually", operation, len(specs)
        )
        return [
            self._execute(operation, spec, self._apt(*command, spec), env=APT_ENV)
            for spec in specs
        ]
