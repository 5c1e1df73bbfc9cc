# =============================================================================
# core/account_db.py - Local account and group database
# =============================================================================

import grp
import logging
import os
import pwd
import subprocess
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from core.errors import ProvisionFailed
from core.models import AccountInfo, AccountSpec

Runner = Callable[[List[str]], subprocess.CompletedProcess]


class AccountDatabase(ABC):
    """Read/write access to the local passwd and group databases"""

    @abstractmethod
    def group_exists(self, name: str) -> bool:
        """Return True if the group is known to the system"""
        pass

    @abstractmethod
    def get_account(self, username: str) -> Optional[AccountInfo]:
        """Return the account and its group memberships, or None if absent"""
        pass

    @abstractmethod
    def create_account(self, spec: AccountSpec) -> None:
        """Create the account, raising ProvisionFailed on failure"""
        pass


def build_useradd_command(spec: AccountSpec, useradd: str = "useradd") -> List[str]:
    """
    Build the useradd argument list for spec.

    --groups is left out entirely when there are no supplementary groups;
    passing it with an empty value is not the same thing to useradd.
    """
    command = [useradd, "--uid", str(spec.uid), "--gid", spec.primary_group]
    if spec.supplementary_groups:
        command.extend(["--groups", ",".join(spec.supplementary_groups)])
    command.extend(["--shell", spec.shell, "--home-dir", spec.home])
    command.extend(["--no-create-home", "--comment", spec.comment, spec.username])
    return command


def _default_runner(command: List[str]) -> subprocess.CompletedProcess:
    return subprocess.run(command, capture_output=True, text=True, check=False)


class SystemAccountDatabase(AccountDatabase):
    """AccountDatabase backed by pwd/grp lookups and the useradd command"""

    def __init__(self, runner: Optional[Runner] = None, useradd: str = "useradd"):
        self.runner = runner or _default_runner
        self.useradd = useradd
        self.logger = logging.getLogger(__name__)

    def group_exists(self, name: str) -> bool:
        try:
            grp.getgrnam(name)
        except KeyError:
            return False
        return True

    def get_account(self, username: str) -> Optional[AccountInfo]:
        try:
            entry = pwd.getpwnam(username)
        except KeyError:
            return None

        return AccountInfo(
            username=entry.pw_name,
            uid=entry.pw_uid,
            gid=entry.pw_gid,
            gecos=entry.pw_gecos,
            home=entry.pw_dir,
            shell=entry.pw_shell,
            groups=self._group_names(entry.pw_name, entry.pw_gid)
        )

    def _group_names(self, username: str, gid: int) -> List[str]:
        """Primary group first, then supplementary groups, like `groups`"""
        names: List[str] = []
        for group_id in os.getgrouplist(username, gid):
            try:
                name = grp.getgrgid(group_id).gr_name
            except KeyError:
                name = str(group_id)
            if name not in names:
                names.append(name)
        return names

    def create_account(self, spec: AccountSpec) -> None:
        command = build_useradd_command(spec, self.useradd)
        self.logger.debug(f"Running: {command}")

        try:
            result = self.runner(command)
        except OSError as e:
            raise ProvisionFailed(spec.username, 127, str(e)) from e

        output = "\n".join(part.strip() for part in (result.stdout, result.stderr) if part)
        if result.returncode != 0:
            raise ProvisionFailed(spec.username, result.returncode, output)
        if output:
            self.logger.debug(f"useradd output: {output}")
