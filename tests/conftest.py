"""
Pytest configuration and fixtures for provisioning tests.
"""

import pytest

from core.account_db import AccountDatabase
from core.errors import ProvisionFailed, UserNotFound
from core.ldap_client import DirectoryLookup
from core.models import AccountInfo, DirectoryRecord
from utils.config import Settings


class FakeAccountDatabase(AccountDatabase):
    """In-memory passwd/group database"""

    def __init__(self, groups=None, accounts=None):
        self.groups = set(groups or [])
        self.accounts = dict(accounts or {})
        self.created = []
        self.fail_with = None

    def group_exists(self, name):
        return name in self.groups

    def get_account(self, username):
        return self.accounts.get(username)

    def create_account(self, spec):
        if self.fail_with is not None:
            raise ProvisionFailed(spec.username, self.fail_with, "useradd: failure")
        self.created.append(spec)
        self.accounts[spec.username] = AccountInfo(
            username=spec.username,
            uid=spec.uid,
            gid=2000,
            gecos=spec.comment,
            home=spec.home,
            shell=spec.shell,
            groups=[spec.primary_group] + list(spec.supplementary_groups),
        )



class FakeDirectory(DirectoryLookup):
    """Directory answering from a dict keyed by uid, recording every query"""

    def __init__(self, entries):
        self.entries = entries
        self.lookups = []
        self.error = None

    def lookup_user(self, username):
        self.lookups.append(username)
        if self.error is not None:
            raise self.error
        if username not in self.entries:
            raise UserNotFound(username)
        return self.entries[username]


@pytest.fixture
def settings():
    """Settings as they would come out of the environment."""
    return Settings(
        ldap_server="ldaps://ldap.example.com",
        bind_dn="cn=reader,ou=services,dc=example,dc=com",
        base_dn="dc=example,dc=com",
        password_file="ldap_pw",
        user_list="user_list",
        primary_group="sftp_users",
        shell="/usr/libexec/openssh/sftp-server",
        home="/sftp_root",
    )


@pytest.fixture
def account_db():
    """Account database with the SFTP groups present and no accounts."""
    return FakeAccountDatabase(groups={"sftp_users", "sftp_admins", "group1", "group2", "group3"})


@pytest.fixture
def directory_entries():
    """Directory contents keyed by uid; tests add to it."""
    return {
        "alice": DirectoryRecord(username="alice", display_name="Alice A.", uid=5001),
    }


@pytest.fixture
def directory(directory_entries):
    """Directory answering from directory_entries."""
    return FakeDirectory(directory_entries)
