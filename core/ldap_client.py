# =============================================================================
# core/ldap_client.py - LDAP directory client
# =============================================================================

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from ldap3 import Server, Connection, ALL, SUBTREE
from ldap3.core.exceptions import LDAPException
from ldap3.utils.conv import escape_filter_chars

from core.errors import DirectoryUnavailable, UserNotFound
from core.models import DirectoryRecord

# Result codes that mean "the search ran, nothing matched"
RESULT_SUCCESS = 0
RESULT_NO_SUCH_OBJECT = 32


class DirectoryLookup(ABC):
    """Directory query returning identity attributes for a username"""

    @abstractmethod
    def lookup_user(self, username: str) -> DirectoryRecord:
        """Return the DirectoryRecord, raising DirectoryUnavailable or UserNotFound"""
        pass


class LdapDirectoryClient(DirectoryLookup):
    """Looks up gecos and uidNumber for a username in an LDAP directory"""

    ATTRIBUTES = ['gecos', 'uidNumber']

    def __init__(self, server_url: str, bind_dn: str, password: Union[str, bytes], base_dn: str):
        self.server_url = server_url
        self.bind_dn = bind_dn
        self.password = password
        self.base_dn = base_dn
        self.connection: Optional[Connection] = None
        self.last_response: Any = None
        self.logger = logging.getLogger(__name__)

    def __enter__(self):
        """Context manager entry; the bind happens on the first lookup"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.disconnect()

    def connect(self, username: str = "") -> None:
        """Bind to the directory, raising DirectoryUnavailable on failure"""
        try:
            server = Server(self.server_url, get_info=ALL)
            self.connection = Connection(
                server,
                user=self.bind_dn,
                password=self.password,
                auto_bind=True
            )
            self.logger.info(f"Bound to {self.server_url} as {self.bind_dn}")
        except LDAPException as e:
            self.connection = None
            self.last_response = str(e)
            self.logger.debug(f"Bind to {self.server_url} failed: {e}")
            raise DirectoryUnavailable(username, self.last_response) from e

    def disconnect(self) -> None:
        """Close the directory connection"""
        if self.connection:
            self.connection.unbind()
            self.connection = None
            self.logger.info("Disconnected from LDAP")

    def lookup_user(self, username: str) -> DirectoryRecord:
        """Return the DirectoryRecord for username with exactly one search"""
        if not self.connection:
            self.connect(username)

        search_filter = f"(uid={escape_filter_chars(username)})"
        try:
            self.connection.search(
                search_base=self.base_dn,
                search_filter=search_filter,
                search_scope=SUBTREE,
                attributes=self.ATTRIBUTES
            )
        except LDAPException as e:
            self.last_response = str(e)
            raise DirectoryUnavailable(username, self.last_response) from e

        self.last_response = self.connection.result
        result_code = self.connection.result.get('result') if self.connection.result else None
        if result_code not in (RESULT_SUCCESS, RESULT_NO_SUCH_OBJECT):
            raise DirectoryUnavailable(username, self.last_response)

        entries = [item for item in (self.connection.response or [])
                   if item.get('type') == 'searchResEntry']
        if not entries:
            self.logger.debug(f"User {username} not found in LDAP")
            raise UserNotFound(username)

        if len(entries) > 1:
            self.logger.warning(f"Multiple entries found for {username}, using first match")

        attributes: Dict[str, Any] = entries[0].get('attributes', {})
        gecos = self._first_value(attributes.get('gecos'))
        uid_number = self._first_value(attributes.get('uidNumber'))
        if not gecos or uid_number in (None, ""):
            self.logger.debug(f"User {username} has no gecos or uidNumber: {attributes}")
            raise UserNotFound(username)

        try:
            uid = int(uid_number)
        except (TypeError, ValueError):
            self.logger.debug(f"User {username} has a non-numeric uidNumber: {uid_number!r}")
            raise UserNotFound(username)

        self.logger.debug(f"Found user {username} in LDAP: uid={uid}, gecos={gecos}")
        return DirectoryRecord(username=username, display_name=str(gecos), uid=uid)

    @staticmethod
    def _first_value(value: Union[None, str, int, List[Any]]) -> Any:
        """Collapse a possibly multi-valued attribute to its first value"""
        if isinstance(value, (list, tuple)):
            return value[0] if value else None
        return value
