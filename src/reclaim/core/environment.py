"""Host environment resolved once at startup."""

from __future__ import annotations

import getpass
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Environment:
    """Who and where we are cleaning for.

    Discovery receives this explicitly instead of looking up the home
    directory or user name on its own.
    """

    home: Path
    username: str
    platform: str

    @classmethod
    def detect(cls) -> Environment:
        """Resolve the environment of the current process."""
        return cls(home=Path.home(), username=getpass.getuser(), platform=sys.platform)

    @property
    def is_macos(self) -> bool:
        return self.platform == "darwin"
