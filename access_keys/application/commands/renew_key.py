"""
RenewKeyCommand.

Command to extend the expiry of a timed key.
"""
from dataclasses import dataclass
from typing import Optional, Union


@dataclass
class RenewKeyCommand:
    """
    Command to renew a key.

    Identify the key either by key and username, or by username alone
    (the username's active key). Without a duration the key is
    extended by its own stored duration.
    """

    username: str
    key: Optional[str] = None
    duration: Optional[Union[str, int]] = None
