"""
VerifyKeyQuery.

Query to check whether a key is valid for a username.
"""
from dataclasses import dataclass


@dataclass
class VerifyKeyQuery:
    """Query to verify a key/username pair."""

    key: str
    username: str
