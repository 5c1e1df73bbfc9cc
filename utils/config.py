# =============================================================================
# utils/config.py - Configuration management
# =============================================================================

import os
from dataclasses import dataclass
from typing import Optional, List
from dotenv import load_dotenv

DEFAULT_PASSWORD_FILE = "ldap_pw"
DEFAULT_USER_LIST = "user_list"
DEFAULT_PRIMARY_GROUP = "sftp_users"
DEFAULT_SHELL = "/usr/libexec/openssh/sftp-server"
DEFAULT_HOME = "/sftp_root"


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, built once at startup"""
    ldap_server: str
    bind_dn: str
    base_dn: str
    password_file: str
    user_list: str
    primary_group: str
    shell: str
    home: str


def read_secret_file(path: str) -> bytes:
    """
    Read the LDAP bind password.

    The secret is kept as raw bytes. Trailing newlines are stripped, otherwise
    they would be sent to the server as part of the password.
    """
    with open(path, 'rb') as file:
        return file.read().rstrip(b'\r\n')


def base_dn_from_bind_dn(bind_dn: str) -> str:
    """cn=x,ou=y,dc=example,dc=com -> dc=example,dc=com"""
    parts = [part.strip() for part in bind_dn.split(',')]
    return ','.join(part for part in parts if part.lower().startswith('dc='))


class Config:
    """Configuration management"""

    def __init__(self):
        load_dotenv()

    @property
    def ldap_server(self) -> Optional[str]:
        return os.getenv("LDAP_SERVER")

    @property
    def bind_dn(self) -> Optional[str]:
        return os.getenv("LDAP_BIND_DN")

    @property
    def base_dn(self) -> str:
        return os.getenv("LDAP_BASE_DN") or base_dn_from_bind_dn(self.bind_dn or "")

    @property
    def password_file(self) -> str:
        return os.getenv("LDAP_PASSWORD_FILE", DEFAULT_PASSWORD_FILE)

    @property
    def user_list(self) -> str:
        return os.getenv("USER_LIST_FILE", DEFAULT_USER_LIST)

    @property
    def primary_group(self) -> str:
        return os.getenv("SFTP_PRIMARY_GROUP", DEFAULT_PRIMARY_GROUP)

    @property
    def shell(self) -> str:
        return os.getenv("SFTP_SHELL", DEFAULT_SHELL)

    @property
    def home(self) -> str:
        return os.getenv("SFTP_HOME", DEFAULT_HOME)

    def validate(self) -> bool:
        """Validate that all required LDAP configuration is present"""
        return not self.get_missing_vars()

    def get_missing_vars(self) -> List[str]:
        """Get list of missing configuration variables"""
        vars_and_names = [
            (self.ldap_server, "LDAP_SERVER"),
            (self.bind_dn, "LDAP_BIND_DN"),
            (self.base_dn, "LDAP_BASE_DN")
        ]
        return [name for var, name in vars_and_names if not var]

    def load_settings(self, user_list: Optional[str] = None) -> Settings:
        """Snapshot the environment into an immutable Settings value"""
        return Settings(
            ldap_server=self.ldap_server or "",
            bind_dn=self.bind_dn or "",
            base_dn=self.base_dn,
            password_file=self.password_file,
            user_list=user_list or self.user_list,
            primary_group=self.primary_group,
            shell=self.shell,
            home=self.home
        )
