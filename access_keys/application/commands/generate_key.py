"""
GenerateKeyCommand.

Command to issue a new access key to a username.
"""
from dataclasses import dataclass
from typing import Union


@dataclass
class GenerateKeyCommand:
    """Command to generate a key for a username and duration."""

    username: str
    duration: Union[str, int]  # Hour count or "permanent"
