# =============================================================================
# core/base_processor.py - Abstract account provisioning processor
# =============================================================================

from abc import ABC, abstractmethod
from typing import Iterable, Tuple
import logging

from core.models import AccountInfo, AccountSpec, BatchResult, DirectoryRecord, ProvisionOutcome, UserRequest
from core.errors import ProvisioningError, DirectoryUnavailable, ProvisionFailed
from core.account_db import AccountDatabase
from core.ldap_client import DirectoryLookup
from core.user_list import parse_line, check_groups_exist
from utils.file_utils import UserListFile


class BaseAccountProcessor(ABC):
    """Abstract base class for processors that create local accounts from a user list"""

    def __init__(self, directory: DirectoryLookup, account_db: AccountDatabase):
        self.directory = directory
        self.account_db = account_db
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def build_account_spec(self, request: UserRequest, record: DirectoryRecord) -> AccountSpec:
        """Apply the processor's account policy to a request and its directory record"""
        pass

    def process_users(self, input_path: str) -> BatchResult:
        """Main processing workflow over a user list file"""
        self.logger.info(f"Starting {self.__class__.__name__} processing of {input_path}")
        return self.process_lines(UserListFile.read_lines(input_path))

    def process_lines(self, lines: Iterable[Tuple[int, str]]) -> BatchResult:
        """
        Process entries in order, stopping at the first ProvisioningError.

        Args:
            lines: (line_number, text) pairs

        Returns:
            BatchResult with counters, plus the error and failed outcome if the run stopped early
        """
        result = BatchResult()

        for line_number, line in lines:
            try:
                request = parse_line(line, line_number)
                outcome = self.process_entry(request)
            except ProvisioningError as e:
                if e.line_number is None:
                    e.line_number = line_number
                result.record(ProvisionOutcome.failed(e.username, e.message))
                result.error = e
                self.report_failure(e)
                return result

            result.record(outcome)

        self.log_statistics(result)
        return result

    def process_entry(self, request: UserRequest) -> ProvisionOutcome:
        """Take one validated request to Created or Skipped"""
        self.logger.info(f"Working on username: {request.username}")

        check_groups_exist(request, self.account_db.group_exists)

        existing = self.account_db.get_account(request.username)
        if existing:
            self.logger.warning(
                f"Skipping '{request.username}' because the user already exists on this server"
            )
            self.report_account(existing)
            return ProvisionOutcome.skipped(existing)

        record = self.directory.lookup_user(request.username)
        spec = self.build_account_spec(request, record)
        self.account_db.create_account(spec)

        self.logger.info(f"Successfully added user {request.username}")
        created = self.account_db.get_account(request.username)
        if created:
            self.report_account(created)
            return ProvisionOutcome.created(record, created.groups)
        return ProvisionOutcome.created(record, [spec.primary_group] + list(spec.supplementary_groups))

    def report_account(self, account: AccountInfo) -> None:
        """Log a read-back of an account for the operator"""
        self.logger.info(account.passwd_line())
        self.logger.info(f"Group membership: {' '.join(account.groups)}")

    def report_failure(self, error: ProvisioningError) -> None:
        """Log the error block for the entry that stopped the run"""
        self.logger.error(f"Bailing out because {error}")
        if isinstance(error, DirectoryUnavailable):
            self.logger.error(f"Directory response: {error.raw_response}")
        elif isinstance(error, ProvisionFailed) and error.output:
            self.logger.error(f"useradd output: {error.output}")

    def log_statistics(self, result: BatchResult) -> None:
        """Log batch summary"""
        self.logger.info(
            f"Processed {result.total_entries} entries: "
            f"{result.created} created, {result.skipped} skipped"
        )
