# =============================================================================
# core/errors.py - Provisioning error hierarchy
# =============================================================================

from typing import Any, Optional


class ProvisioningError(Exception):
    """Base class for every error that stops a batch run"""

    def __init__(self, message: str, username: str = "", line_number: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.username = username
        self.line_number = line_number

    def __str__(self) -> str:
        if self.line_number:
            return f"line {self.line_number}: {self.message}"
        return self.message


class InvalidUsername(ProvisioningError):
    """Username is empty or contains characters other than letters and digits"""


class InvalidGroupList(ProvisioningError):
    """Supplementary group list contains invalid characters"""


class UnknownGroup(ProvisioningError):
    """A supplementary group does not exist in the local group database"""

    def __init__(self, username: str, group: str, line_number: Optional[int] = None):
        super().__init__(
            f"the group list for '{username}' contains an invalid group: {group}",
            username, line_number
        )
        self.group = group


class DirectoryUnavailable(ProvisioningError):
    """The directory could not be reached, bound to, or searched"""

    def __init__(self, username: str, raw_response: Any, line_number: Optional[int] = None):
        super().__init__(f"the directory query for '{username}' failed", username, line_number)
        self.raw_response = raw_response


class UserNotFound(ProvisioningError):
    """The directory has no gecos/uidNumber for the username"""

    def __init__(self, username: str, line_number: Optional[int] = None):
        super().__init__(
            f"the details for the user '{username}' could not be found in LDAP",
            username, line_number
        )


class ProvisionFailed(ProvisioningError):
    """useradd returned a non-zero status"""

    def __init__(self, username: str, returncode: int, output: str = "",
                 line_number: Optional[int] = None):
        super().__init__(
            f"the 'useradd' command failed for '{username}' (exit status {returncode})",
            username, line_number
        )
        self.returncode = returncode
        self.output = output
