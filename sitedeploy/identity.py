"""Deploy user identity used to run git commands without root privileges."""

import grp
import os
import pwd
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from .errors import ConfigurationError


@dataclass(frozen=True)
class DeployIdentity:
    """An OS user (and its primary group) that git commands run as."""
    name: str
    uid: int
    gid: int
    home: Path

    @classmethod
    def from_username(cls, name: str) -> "DeployIdentity":
        """
        Resolve a user name through the password database.

        Raises:
            ConfigurationError: if the user does not exist on this host
        """
        try:
            entry = pwd.getpwnam(name)
        except KeyError as e:
            raise ConfigurationError(f"Deploy user does not exist: {name}") from e
        return cls(name=entry.pw_name, uid=entry.pw_uid, gid=entry.pw_gid, home=Path(entry.pw_dir))

    @classmethod
    def current(cls) -> "DeployIdentity":
        """Identity of the running process."""
        entry = pwd.getpwuid(os.geteuid())
        return cls(name=entry.pw_name, uid=entry.pw_uid, gid=os.getegid(), home=Path(entry.pw_dir))

    @property
    def group_name(self) -> str:
        """Name of the primary group, or the numeric gid if it has no entry."""
        try:
            return grp.getgrgid(self.gid).gr_name
        except KeyError:
            return str(self.gid)

    def is_current(self) -> bool:
        """True when the running process already has this identity."""
        return self.uid == os.geteuid() and self.gid == os.getegid()

    def subprocess_kwargs(self) -> Dict[str, Any]:
        """
        Keyword arguments for ``subprocess.Popen`` that switch to this identity.

        Empty when no switch is needed. Otherwise the child drops root's
        supplementary groups and runs with the user's uid, gid and HOME.
        """
        if self.is_current():
            return {}
        return {
            "user": self.uid,
            "group": self.gid,
            "extra_groups": [],
        }

    def environment(self) -> Dict[str, str]:
        """Environment overrides so git reads the deploy user's own configuration."""
        return {
            "HOME": str(self.home),
            "USER": self.name,
            "LOGNAME": self.name,
        }

    def chown(self, path: Path) -> None:
        """Give ``path`` to this identity."""
        if self.is_current():
            return
        os.chown(path, self.uid, self.gid)
