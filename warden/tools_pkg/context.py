"""Per-caller bundle of the mediation components."""

from dataclasses import dataclass, field

from warden.command_policy import CommandClassifier, CommandGate
from warden.config import Config
from warden.path_guard import PathGuardMiddleware, PathResolver
from warden.permissions import PermissionManager
from warden.permissions.windows import CommandRunner
from warden.platform_profile import PlatformProfile, profile
from warden.watch import WatchRegistry
from warden.watch.handles import HandleFactory


@dataclass
class ToolContext:
    """Everything a tool front-end needs for one caller.

    Tools never build their own resolver or classifier; they take them from
    here so one configuration governs every capability.
    """

    config: Config
    platform: PlatformProfile
    resolver: PathResolver
    classifier: CommandClassifier
    gate: CommandGate
    permissions: PermissionManager
    watches: WatchRegistry = field(default_factory=WatchRegistry)
    watch_handle_factory: HandleFactory | None = None
    session_id: str | None = None

    @property
    def middleware(self) -> PathGuardMiddleware:
        return PathGuardMiddleware(self.resolver)

    @classmethod
    def create(
        cls,
        config: Config | None = None,
        platform: PlatformProfile | None = None,
        session_id: str | None = None,
        windows_runner: CommandRunner | None = None,
        watch_handle_factory: HandleFactory | None = None,
    ) -> "ToolContext":
        """Wire up the components from a Config.

        Args:
            config: Loaded configuration; defaults to ``Config.load()``
            platform: Profile to run against; defaults to the host
            session_id: Identifier attached to errors and audit entries
            windows_runner: Replacement runner for attrib / icacls
            watch_handle_factory: Replacement handle factory for watches
        """
        config = config or Config.load()
        prof = platform or profile()
        classifier = CommandClassifier(prof, allow_sudo=config.commands.allow_sudo)
        return cls(
            config=config,
            platform=prof,
            resolver=config.sandbox.create_resolver(prof),
            classifier=classifier,
            gate=CommandGate(
                classifier,
                audit_log_file=config.commands.audit_log_file,
                session_id=session_id,
            ),
            permissions=PermissionManager(
                prof,
                default_max_depth=config.permissions.default_max_depth,
                windows_runner=windows_runner,
            ),
            watch_handle_factory=watch_handle_factory,
            session_id=session_id,
        )

    async def close(self) -> None:
        """Stop every watch session owned by this context."""
        await self.watches.stop_all()
