"""
Errors raised while resolving credentials and querying the replica
"""
from typing import Optional


class ResolutionError(Exception):
    """Credentials could not be resolved before connecting"""


class CredentialsFileNotFound(ResolutionError):
    def __init__(self, path: str):
        super().__init__(f"Credentials file not found: {path}")
        self.path = path


class CredentialsFileUnreadable(ResolutionError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read credentials file {path}: {reason}")
        self.path = path


class MalformedCredentialsFile(ResolutionError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"Could not parse credentials file {path}: {reason}")
        self.path = path


class SectionMissing(ResolutionError):
    def __init__(self, section: str):
        super().__init__(f"Section [{section}] missing from credentials file")
        self.section = section


class KeyMissing(ResolutionError):
    def __init__(self, key: str):
        super().__init__(f"Key '{key}' missing from credentials file")
        self.key = key


class IncompleteCredentials(ResolutionError):
    def __init__(self, message: str = "Must specify host, user, password"):
        super().__init__(message)


class QueryError(Exception):
    """Connecting to or querying the server failed"""

    def __init__(self, code: Optional[int], message: str, state: Optional[str] = None):
        self.code = code
        self.message = message
        self.state = state
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"Error code: {self.code} Error message: {self.message}"
        if self.state:
            text += f" SQLSTATE: {self.state}"
        return text
