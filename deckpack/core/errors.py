"""Exit codes for the deckpack CLI.

Every failing pipeline step maps to one of these codes. The values are part
of the CLI contract and should remain stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes.

    - 0: Success
    - 1: User error (bad version, declined confirmation, dirty index)
    - 2: Environment error (missing tools, invalid config)
    - 3: Build error (container build exited non-zero)
    - 5: I/O error (missing artifact, unreadable declaration file)
    - 6: Release error (git or changelog tool failed)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    IO_ERROR = 5
    RELEASE_ERROR = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
