"""Tests for the local account database and useradd command construction."""

import subprocess
from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest

from core.account_db import SystemAccountDatabase, build_useradd_command
from core.errors import ProvisionFailed
from core.models import AccountSpec


def make_spec(groups=None):
    return AccountSpec(
        username="alice",
        uid=5001,
        primary_group="sftp_users",
        shell="/usr/libexec/openssh/sftp-server",
        home="/sftp_root",
        comment="Alice A.",
        supplementary_groups=tuple(groups or ()),
    )


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def test_useradd_command_with_supplementary_groups():
    command = build_useradd_command(make_spec(["group1", "group2", "group3"]))

    assert command == [
        "useradd", "--uid", "5001", "--gid", "sftp_users",
        "--groups", "group1,group2,group3",
        "--shell", "/usr/libexec/openssh/sftp-server",
        "--home-dir", "/sftp_root", "--no-create-home",
        "--comment", "Alice A.", "alice",
    ]


def test_useradd_command_without_groups_omits_the_option():
    """No groups means no --groups option at all, not an empty value."""
    with_groups = build_useradd_command(make_spec(["group1"]))
    without_groups = build_useradd_command(make_spec())

    assert "--groups" not in without_groups
    assert "" not in without_groups
    assert without_groups != with_groups
    assert without_groups[-1] == "alice"


def test_useradd_command_never_creates_home():
    for command in (build_useradd_command(make_spec()), build_useradd_command(make_spec(["group1"]))):
        assert "--no-create-home" in command
        assert "--create-home" not in command


def test_useradd_command_uses_configured_binary():
    command = build_useradd_command(make_spec(), useradd="/usr/sbin/useradd")

    assert command[0] == "/usr/sbin/useradd"


def test_create_account_runs_useradd():
    runner = Mock(return_value=completed())
    db = SystemAccountDatabase(runner=runner)

    db.create_account(make_spec(["group1"]))

    runner.assert_called_once_with(build_useradd_command(make_spec(["group1"])))


def test_create_account_non_zero_exit_raises():
    runner = Mock(return_value=completed(returncode=9, stderr="useradd: user 'alice' already exists\n"))
    db = SystemAccountDatabase(runner=runner)

    with pytest.raises(ProvisionFailed) as exc_info:
        db.create_account(make_spec())

    assert exc_info.value.returncode == 9
    assert exc_info.value.username == "alice"
    assert "already exists" in exc_info.value.output


def test_create_account_missing_binary_raises():
    runner = Mock(side_effect=FileNotFoundError("useradd"))
    db = SystemAccountDatabase(runner=runner)

    with pytest.raises(ProvisionFailed) as exc_info:
        db.create_account(make_spec())

    assert exc_info.value.returncode == 127


def fake_getgrnam(name):
    if name != "sftp_users":
        raise KeyError(name)
    return SimpleNamespace(gr_name=name)


@patch("core.account_db.grp.getgrnam", side_effect=fake_getgrnam)
def test_group_exists(mock_getgrnam):
    db = SystemAccountDatabase()

    assert db.group_exists("sftp_users") is True
    assert db.group_exists("nosuchgroup") is False


@patch("core.account_db.pwd.getpwnam", side_effect=KeyError("alice"))
def test_get_account_missing_user(mock_getpwnam):
    assert SystemAccountDatabase().get_account("alice") is None


@patch("core.account_db.os.getgrouplist", return_value=[2000, 3000, 2000, 4000])
@patch("core.account_db.grp.getgrgid")
@patch("core.account_db.pwd.getpwnam")
def test_get_account_reads_passwd_and_groups(mock_getpwnam, mock_getgrgid, mock_getgrouplist):
    mock_getpwnam.return_value = SimpleNamespace(
        pw_name="bob", pw_uid=5002, pw_gid=2000, pw_gecos="Bob B.",
        pw_dir="/sftp_root", pw_shell="/usr/libexec/openssh/sftp-server",
    )
    names = {2000: "sftp_users", 3000: "sftp_admins"}

    def getgrgid(gid):
        if gid not in names:
            raise KeyError(gid)
        return SimpleNamespace(gr_name=names[gid])

    mock_getgrgid.side_effect = getgrgid

    account = SystemAccountDatabase().get_account("bob")

    assert account.uid == 5002
    assert account.groups == ["sftp_users", "sftp_admins", "4000"]
    assert account.passwd_line() == "bob:x:5002:2000:Bob B.:/sftp_root:/usr/libexec/openssh/sftp-server"
    mock_getgrouplist.assert_called_once_with("bob", 2000)
