# =============================================================================
# core/models.py - Provisioning data models
# =============================================================================

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from enum import Enum


class ProvisionStatus(Enum):
    """Terminal state of a single user list entry"""
    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class UserRequest:
    """One parsed line of the user list"""
    username: str
    supplementary_groups: Tuple[str, ...] = ()
    line_number: int = 0


@dataclass(frozen=True)
class DirectoryRecord:
    """Identity attributes fetched from the directory for one username"""
    username: str
    display_name: str
    uid: int


@dataclass
class AccountInfo:
    """Read-back of a local account and its group memberships"""
    username: str
    uid: int
    gid: int
    gecos: str = ""
    home: str = ""
    shell: str = ""
    groups: List[str] = field(default_factory=list)

    def passwd_line(self) -> str:
        """Render the account the way getent passwd does"""
        return f"{self.username}:x:{self.uid}:{self.gid}:{self.gecos}:{self.home}:{self.shell}"


@dataclass(frozen=True)
class AccountSpec:
    """Everything useradd needs to create one account"""
    username: str
    uid: int
    primary_group: str
    shell: str
    home: str
    comment: str
    supplementary_groups: Tuple[str, ...] = ()


@dataclass
class ProvisionOutcome:
    """Result of processing one entry"""
    username: str
    status: ProvisionStatus
    uid: Optional[int] = None
    display_name: str = ""
    groups: List[str] = field(default_factory=list)
    reason: str = ""

    @classmethod
    def created(cls, record: DirectoryRecord, groups: List[str]) -> "ProvisionOutcome":
        return cls(record.username, ProvisionStatus.CREATED, uid=record.uid,
                   display_name=record.display_name, groups=list(groups))

    @classmethod
    def skipped(cls, account: AccountInfo) -> "ProvisionOutcome":
        return cls(account.username, ProvisionStatus.SKIPPED, uid=account.uid,
                   groups=list(account.groups), reason="already exists")

    @classmethod
    def failed(cls, username: str, reason: str) -> "ProvisionOutcome":
        return cls(username, ProvisionStatus.FAILED, reason=reason)


@dataclass
class BatchResult:
    """Counters for a batch run and the error that stopped it, if any"""
    total_entries: int = 0
    created: int = 0
    skipped: int = 0
    failure: Optional[ProvisionOutcome] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def record(self, outcome: ProvisionOutcome) -> None:
        """Count one terminal outcome"""
        self.total_entries += 1
        if outcome.status == ProvisionStatus.CREATED:
            self.created += 1
        elif outcome.status == ProvisionStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failure = outcome
