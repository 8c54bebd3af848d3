"""Password extraction from database connection strings.

Grammar::

    connection := scheme "://" userinfo "@" rest
    userinfo   := user ":" password

``rest`` starts after the LAST ``@`` in the string, so a password may itself
contain ``@`` (``postgresql://app:p@ss@db:5432/app`` yields ``p@ss``). The
user part runs to the first ``:`` of ``userinfo`` and must be non-empty.
Percent-encoded passwords are returned as written, without decoding.
"""
from typing import Optional


def extract_password(connection_string: Optional[str]) -> Optional[str]:
    """
    Return the password portion of ``connection_string``.

    Returns:
        The password (possibly empty), or None if the string does not carry
        a ``user:password@`` section
    """
    if not connection_string:
        return None

    at_index = connection_string.rfind("@")
    if at_index <= 0:
        return None

    before_host = connection_string[:at_index]
    scheme_end = before_host.find("://")
    if scheme_end <= 0:
        return None

    userinfo = before_host[scheme_end + 3:]
    colon_index = userinfo.find(":")
    if colon_index <= 0:
        return None

    return userinfo[colon_index + 1:]
