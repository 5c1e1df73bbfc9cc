# =============================================================================
# processors/sftp_users.py - SFTP-only account processor
# =============================================================================

from core.account_db import AccountDatabase
from core.base_processor import BaseAccountProcessor
from core.ldap_client import DirectoryLookup
from core.models import AccountSpec, DirectoryRecord, UserRequest
from utils.config import Settings


class SftpUserProcessor(BaseAccountProcessor):
    """Creates SFTP-only accounts with a fixed primary group, shell and home"""

    def __init__(self, directory: DirectoryLookup, account_db: AccountDatabase, settings: Settings):
        super().__init__(directory, account_db)
        self.settings = settings

    def build_account_spec(self, request: UserRequest, record: DirectoryRecord) -> AccountSpec:
        """uid and comment from LDAP, everything else from settings; home is never created"""
        return AccountSpec(
            username=request.username,
            uid=record.uid,
            primary_group=self.settings.primary_group,
            shell=self.settings.shell,
            home=self.settings.home,
            comment=record.display_name,
            supplementary_groups=request.supplementary_groups
        )
