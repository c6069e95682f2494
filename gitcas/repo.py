# repo.py -- For dealing with git repositories.
# Copyright (C) 2026 The gitcas authors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# gitcas is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Repository access.

A repository is a directory with a ``.git`` control directory holding the
object store, an (unused) refs hierarchy and ``HEAD``.
"""

__all__ = [
    "CONTROLDIR",
    "DEFAULT_BRANCH",
    "OBJECTDIR",
    "REFSDIR",
    "REFSDIR_HEADS",
    "DefaultIdentityNotFound",
    "InvalidUserIdentity",
    "Repo",
    "check_user_identity",
    "get_user_identity",
]

import logging
import os
from collections.abc import Iterable
from types import TracebackType

from .build import InvalidUserIdentity, check_user_identity, write_tree_from_directory
from .errors import GitCasError, NotGitRepository
from .file import GitFile
from .object_store import DiskObjectStore
from .objects import ObjectID

logger = logging.getLogger(__name__)

CONTROLDIR = ".git"
OBJECTDIR = "objects"
REFSDIR = "refs"
REFSDIR_HEADS = "heads"
HEADREF = "HEAD"

BASE_DIRECTORIES = [
    [OBJECTDIR],
    [REFSDIR],
    [REFSDIR, REFSDIR_HEADS],
]

DEFAULT_BRANCH = b"master"


class DefaultIdentityNotFound(GitCasError):
    """Default identity could not be determined."""


def _get_default_identity() -> tuple[str, str]:
    import socket

    for name in ("LOGNAME", "USER", "LNAME", "USERNAME"):
        username = os.environ.get(name)
        if username:
            break
    else:
        username = None

    try:
        import pwd
    except ImportError:
        fullname = None
    else:
        try:
            entry = pwd.getpwuid(os.getuid())  # type: ignore[attr-defined,unused-ignore]
        except KeyError:
            fullname = None
        else:
            if getattr(entry, "gecos", None):
                fullname = entry.pw_gecos.split(",")[0]
            else:
                fullname = None
            if username is None:
                username = entry.pw_name
    if not fullname:
        if username is None:
            raise DefaultIdentityNotFound("no username found")
        fullname = username
    email = os.environ.get("EMAIL")
    if email is None:
        if username is None:
            raise DefaultIdentityNotFound("no username found")
        email = f"{username}@{socket.gethostname()}"
    return (fullname, email)


def get_user_identity(kind: str | None = None) -> bytes:
    """Determine the identity to use for new commits.

    If kind is set, this first checks GIT_${KIND}_NAME and GIT_${KIND}_EMAIL.
    Otherwise, or for whichever of the two is unset, it falls back to the
    current user's identity as obtained from the host system (the gecos
    field, $EMAIL, $USER@$(hostname)).

    Args:
      kind: Optional kind to return identity for,
        usually either "AUTHOR" or "COMMITTER".

    Returns:
      A user identity
    """
    user: bytes | None = None
    email: bytes | None = None
    if kind:
        user_uc = os.environ.get("GIT_" + kind + "_NAME")
        if user_uc is not None:
            user = user_uc.encode("utf-8")
        email_uc = os.environ.get("GIT_" + kind + "_EMAIL")
        if email_uc is not None:
            email = email_uc.encode("utf-8")
    if user is None or email is None:
        default_user, default_email = _get_default_identity()
        if user is None:
            user = default_user.encode("utf-8")
        if email is None:
            email = default_email.encode("utf-8")
    if email.startswith(b"<") and email.endswith(b">"):
        email = email[1:-1]
    return user + b" <" + email + b">"


class Repo:
    """A git repository backed by local disk.

    The root is always given explicitly; no discovery of enclosing
    directories takes place.

    Attributes:
      path: Path to the working copy
      object_store: The `DiskObjectStore` under ``.git/objects``
    """

    def __init__(self, root: str | bytes | os.PathLike[str]) -> None:
        """Open a repository on disk.

        Args:
          root: Path to the repository's root.
        Raises:
          NotGitRepository: if there is no control directory under root
        """
        root = os.fspath(root)
        if isinstance(root, bytes):
            root = os.fsdecode(root)
        self.path = root
        self._controldir = os.path.join(root, CONTROLDIR)
        if not os.path.isdir(self._controldir):
            raise NotGitRepository(f"No git repository was found at {root}")
        self.object_store = DiskObjectStore(os.path.join(self._controldir, OBJECTDIR))

    def __repr__(self) -> str:
        """Return string representation of this repository."""
        return f"<Repo at {self.path!r}>"

    def controldir(self) -> str:
        """Return the path of the control directory."""
        return self._controldir

    def write_tree(self, exclude: Iterable[str] = ()) -> ObjectID:
        """Store the working directory as a tree and return its id.

        The control directory is never included.
        """
        return write_tree_from_directory(
            self.object_store, self.path, exclude=(CONTROLDIR, *exclude)
        )

    def close(self) -> None:
        """Close any files opened by this repository."""
        self.object_store.close()

    def __enter__(self) -> "Repo":
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit context manager and close repository."""
        self.close()

    @classmethod
    def init(
        cls,
        path: str | bytes | os.PathLike[str],
        *,
        mkdir: bool = False,
        default_branch: bytes | None = None,
    ) -> "Repo":
        """Create a new repository.

        Args:
          path: Path in which to create the repository
          mkdir: Whether to create the directory
          default_branch: Branch HEAD points at; defaults to master
        Returns: `Repo` instance
        """
        path = os.fspath(path)
        if isinstance(path, bytes):
            path = os.fsdecode(path)
        if mkdir:
            os.mkdir(path)
        controldir = os.path.join(path, CONTROLDIR)
        os.mkdir(controldir)
        for d in BASE_DIRECTORIES:
            os.mkdir(os.path.join(controldir, *d))
        if default_branch is None:
            default_branch = DEFAULT_BRANCH
        with GitFile(os.path.join(controldir, HEADREF), "wb") as f:
            f.write(
                b"ref: %s/%s/%s\n"
                % (REFSDIR.encode(), REFSDIR_HEADS.encode(), default_branch)
            )
        logger.debug("initialized repository in %s", controldir)
        return cls(path)
