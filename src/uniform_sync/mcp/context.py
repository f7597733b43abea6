"""Objects shared by every tool handler for the lifetime of the server."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..config import Config
from ..core.gateway import VendorGateway
from ..projects import ProjectManager
from ..session import SyncSession
from ..store import CredentialStore
from ..sync.backup import BackupStore
from ..sync.engine import SyncEngine


@dataclass
class AppContext:
    config: Config
    gateway: VendorGateway
    projects: ProjectManager
    engine: SyncEngine
    session: SyncSession = field(default_factory=SyncSession)

    @classmethod
    def from_config(cls, config: Config) -> AppContext:
        """Wire up the store, gateway, backups and engine for *config*."""
        gateway = VendorGateway(config)
        store = CredentialStore(config.projects_file)
        return cls(
            config=config,
            gateway=gateway,
            projects=ProjectManager(store, gateway),
            engine=SyncEngine(gateway, BackupStore(config.backup_dir)),
        )
