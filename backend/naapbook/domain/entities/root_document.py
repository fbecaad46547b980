"""Domain entity for the single persisted root document."""

from dataclasses import dataclass, field
from typing import Any

from .client import ClientRecord

DEFAULT_DATA_VERSION = "1.0"


@dataclass
class AppMetadata:
    """Store bookkeeping kept alongside the client map."""

    total_clients: int = 0
    last_backup: str = ""
    data_version: str = DEFAULT_DATA_VERSION
    next_client_seq: int | None = 1  # None when the document predates sequence tracking

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "total_clients": self.total_clients,
            "last_backup": self.last_backup,
            "data_version": self.data_version,
        }
        if self.next_client_seq is not None:
            out["next_client_seq"] = self.next_client_seq
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "AppMetadata":
        if not isinstance(data, dict):
            return cls(next_client_seq=None)
        seq = data.get("next_client_seq")
        total = data.get("total_clients")
        return cls(
            total_clients=total if isinstance(total, int) and not isinstance(total, bool) else 0,
            last_backup=str(data.get("last_backup") or ""),
            data_version=str(data.get("data_version") or DEFAULT_DATA_VERSION),
            next_client_seq=seq if isinstance(seq, int) and not isinstance(seq, bool) else None,
        )


@dataclass
class AppSettings:
    """User preferences stored in the root document."""

    preferred_unit: str = "inches"  # "inches" | "cm"
    theme: str = "light"            # "light" | "dark"
    language: str = "en"
    version: str = "1.0.0"
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "preferred_unit": self.preferred_unit,
            "theme": self.theme,
            "language": self.language,
            "version": self.version,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppSettings":
        defaults = cls()
        return cls(
            preferred_unit=str(data.get("preferred_unit") or defaults.preferred_unit),
            theme=str(data.get("theme") or defaults.theme),
            language=str(data.get("language") or defaults.language),
            version=str(data.get("version") or defaults.version),
            created_at=str(data.get("created_at") or ""),
            updated_at=str(data.get("updated_at") or ""),
        )


@dataclass
class RootDocument:
    """The single persisted unit: every client record plus metadata.

    Invariant after any mutation: ``app_metadata.total_clients == len(users)``.
    """

    users: dict[str, ClientRecord] = field(default_factory=dict)
    app_metadata: AppMetadata = field(default_factory=AppMetadata)
    app_settings: AppSettings | None = None
    # Keys dropped while decoding; never persisted.
    skipped_users: list[str] = field(default_factory=list, compare=False, repr=False)

    @classmethod
    def default(cls, data_version: str = DEFAULT_DATA_VERSION) -> "RootDocument":
        return cls(
            users={},
            app_metadata=AppMetadata(
                total_clients=0,
                last_backup="",
                data_version=data_version,
                next_client_seq=1,
            ),
        )

    def refresh_totals(self, backup_stamp: str | None = None) -> None:
        """Recompute ``total_clients`` and optionally stamp ``last_backup``."""
        self.app_metadata.total_clients = len(self.users)
        if backup_stamp is not None:
            self.app_metadata.last_backup = backup_stamp

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "users": {key: record.to_dict() for key, record in self.users.items()},
            "app_metadata": self.app_metadata.to_dict(),
        }
        if self.app_settings is not None:
            out["app_settings"] = self.app_settings.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "RootDocument":
        """Build a document from decoded JSON.

        Raises ValueError only when the top level is not a JSON object.
        Unusable ``users`` entries are left out and their keys listed in
        ``skipped_users``; the remaining records and metadata are kept.
        """
        if not isinstance(data, dict):
            raise ValueError("root document must be a JSON object")
        raw_users = data.get("users", {})
        skipped: list[str] = []
        if not isinstance(raw_users, dict):
            skipped.append("users")
            raw_users = {}

        users: dict[str, ClientRecord] = {}
        for key, raw in raw_users.items():
            if not isinstance(raw, dict):
                skipped.append(str(key))
                continue
            users[str(key)] = ClientRecord.from_dict(raw, key=str(key))

        raw_settings = data.get("app_settings")
        return cls(
            users=users,
            app_metadata=AppMetadata.from_dict(data.get("app_metadata")),
            app_settings=AppSettings.from_dict(raw_settings) if isinstance(raw_settings, dict) else None,
            skipped_users=skipped,
        )
