# =============================================================================
# core/user_list.py - User list line parsing and validation
# =============================================================================
#
# Each line is "username" or "username : group1 group2", the same format the
# `groups` command prints. Usernames and group names end up as arguments of a
# privileged useradd call, so anything other than the characters below is
# rejected before it gets that far. Every line is an entry; a line that does
# not hold a valid username stops the run.

import re
from typing import Callable, Tuple

from core.errors import InvalidUsername, InvalidGroupList, UnknownGroup
from core.models import UserRequest

USERNAME_PATTERN = re.compile(r"^[a-z][a-z0-9]*$")
GROUP_PATTERN = re.compile(r"^[a-z_][a-z0-9_]*$")


def normalize_username(field: str) -> str:
    """Drop all blank characters and fold to lower case"""
    return "".join(field.split()).lower()


def normalize_groups(field: str) -> Tuple[str, ...]:
    """Fold to lower case and split on runs of whitespace"""
    return tuple(field.lower().split())


def parse_line(line: str, line_number: int = 0) -> UserRequest:
    """
    Turn one raw line into a UserRequest.

    Raises InvalidUsername when the username is empty, starts with a digit or
    holds anything but letters and digits, and InvalidGroupList for bad group names.
    """
    username_field, _, groups_field = line.partition(":")
    username = normalize_username(username_field)

    if not USERNAME_PATTERN.match(username):
        raise InvalidUsername(
            f"the username '{username}' contains invalid characters",
            username, line_number
        )

    groups = normalize_groups(groups_field)
    if any(not GROUP_PATTERN.match(group) for group in groups):
        raise InvalidGroupList(
            f"the group list for '{username}' contains invalid characters: {groups_field.strip()}",
            username, line_number
        )

    return UserRequest(username=username, supplementary_groups=groups, line_number=line_number)


def check_groups_exist(request: UserRequest, group_exists: Callable[[str], bool]) -> None:
    """Raise UnknownGroup for the first supplementary group missing from the system"""
    for group in request.supplementary_groups:
        if not group_exists(group):
            raise UnknownGroup(request.username, group, request.line_number)
