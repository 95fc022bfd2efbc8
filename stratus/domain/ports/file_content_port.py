"""
File Content Port

Architectural Intent:
- Resolves a credential file reference to its contents
- Hides whether the reference is a local path or a remote config store entry
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class FileContentPort(Protocol):
    async def get_contents(self, path: str) -> str:
        """Return the contents at path. Raises ContentUnavailable on failure."""
        ...

    def local_path(self, path: str) -> Optional[str]:
        """Filesystem path the provisioning tool can read, or None if remote."""
        ...
