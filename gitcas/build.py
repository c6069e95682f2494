# build.py -- Building trees and commits
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

"""Building tree objects from directories, and commit objects from trees."""

__all__ = [
    "InvalidUserIdentity",
    "blob_from_path_and_stat",
    "check_user_identity",
    "cleanup_mode",
    "commit_tree",
    "write_tree_from_directory",
]

import logging
import os
import stat
import time
from collections.abc import Iterable

from .errors import GitCasError, ObjectIOError
from .object_store import BaseObjectStore
from .objects import Blob, Commit, ObjectID, Tree

logger = logging.getLogger(__name__)


class InvalidUserIdentity(GitCasError):
    """User identity is not of the format 'user <email>'."""

    def __init__(self, identity: str) -> None:
        """Initialize InvalidUserIdentity exception."""
        self.identity = identity
        super().__init__(f"invalid identity {identity!r}, expected 'Name <email>'")


def check_user_identity(identity: bytes) -> None:
    """Verify that a user identity is formatted correctly.

    Args:
      identity: User identity bytestring
    Raises:
      InvalidUserIdentity: Raised when identity is invalid
    """
    try:
        _fst, snd = identity.split(b" <", 1)
    except ValueError as exc:
        raise InvalidUserIdentity(identity.decode("utf-8", "replace")) from exc
    if b">" not in snd:
        raise InvalidUserIdentity(identity.decode("utf-8", "replace"))
    if b"\0" in identity or b"\n" in identity:
        raise InvalidUserIdentity(identity.decode("utf-8", "replace"))


def cleanup_mode(mode: int) -> int:
    """Cleanup a mode value.

    This will return a mode that can be stored in a tree object.

    Args:
      mode: Mode to clean up.

    Returns:
      mode
    """
    if stat.S_ISLNK(mode):
        return stat.S_IFLNK
    elif stat.S_ISDIR(mode):
        return stat.S_IFDIR
    ret = stat.S_IFREG | 0o644
    if mode & 0o100:
        ret |= 0o111
    return ret


def blob_from_path_and_stat(fs_path: str, st: os.stat_result) -> Blob:
    """Create a blob from a path and a stat object.

    Symbolic links are not followed; their target becomes the blob contents.

    Args:
      fs_path: Full file system path to file
      st: A stat object
    Returns: A `Blob` object
    """
    blob = Blob()
    try:
        if stat.S_ISLNK(st.st_mode):
            blob.data = os.fsencode(os.readlink(fs_path))
        else:
            with open(fs_path, "rb") as f:
                blob.data = f.read()
    except OSError as exc:
        raise ObjectIOError(fs_path, exc) from exc
    return blob


def write_tree_from_directory(
    object_store: BaseObjectStore,
    path: str | os.PathLike[str],
    exclude: Iterable[str] = (),
) -> ObjectID:
    """Store the contents of a directory as a tree.

    Every file is stored as a blob and every subdirectory as a tree before
    the tree that refers to it, so the returned id is only produced once
    everything below it is in the store. Entries named in ``exclude`` are
    skipped at every level. Sockets, fifos and device files are skipped.

    Args:
      object_store: Object store to add blobs and trees to
      path: Directory to store
      exclude: Names of entries to leave out
    Returns:
      SHA1 of the tree for ``path``
    """
    excluded = frozenset(exclude)

    def build_tree(dirpath: str) -> ObjectID:
        tree = Tree()
        try:
            with os.scandir(dirpath) as it:
                dir_entries = list(it)
        except OSError as exc:
            raise ObjectIOError(dirpath, exc) from exc
        for dir_entry in dir_entries:
            if dir_entry.name in excluded:
                logger.debug("skipping excluded %s", dir_entry.path)
                continue
            try:
                st = dir_entry.stat(follow_symlinks=False)
            except OSError as exc:
                raise ObjectIOError(dir_entry.path, exc) from exc
            if stat.S_ISDIR(st.st_mode):
                sha = build_tree(dir_entry.path)
            elif stat.S_ISREG(st.st_mode) or stat.S_ISLNK(st.st_mode):
                blob = blob_from_path_and_stat(dir_entry.path, st)
                object_store.add_object(blob)
                sha = blob.id
            else:
                logger.debug("skipping special file %s", dir_entry.path)
                continue
            tree.add(os.fsencode(dir_entry.name), cleanup_mode(st.st_mode), sha)
        object_store.add_object(tree)
        logger.debug("stored tree %s for %s", tree.id.decode("ascii"), dirpath)
        return tree.id

    return build_tree(os.fspath(path))


def local_timezone(timestamp: float) -> int:
    """Return the local UTC offset in seconds at the given time."""
    return time.localtime(timestamp).tm_gmtoff


def commit_tree(
    object_store: BaseObjectStore,
    tree: ObjectID,
    message: bytes | str,
    *,
    author: bytes,
    committer: bytes | None = None,
    parents: Iterable[ObjectID] = (),
    commit_time: int | None = None,
    commit_timezone: int | None = None,
    author_time: int | None = None,
    author_timezone: int | None = None,
) -> ObjectID:
    """Create and store a commit for a tree.

    Neither the tree nor the parents need to exist in the object store.

    Args:
      object_store: Object store to add the commit to
      tree: SHA1 of the tree
      message: Commit message
      author: Author identity, as ``Name <email>``
      committer: Committer identity; defaults to the author
      parents: SHA1s of the parent commits
      commit_time: Commit timestamp; defaults to the current time
      commit_timezone: Commit UTC offset in seconds; defaults to the local one
      author_time: Author timestamp; defaults to the commit time
      author_timezone: Author UTC offset; defaults to the commit timezone
    Returns:
      SHA1 of the created commit.
    """
    if committer is None:
        committer = author
    check_user_identity(author)
    check_user_identity(committer)
    if commit_time is None:
        commit_time = int(time.time())
    if commit_timezone is None:
        commit_timezone = local_timezone(commit_time)
    if author_time is None:
        author_time = commit_time
    if author_timezone is None:
        author_timezone = commit_timezone
    if isinstance(message, str):
        message = message.encode("utf-8")

    c = Commit()
    c.tree = tree
    c.parents = list(parents)
    c.author = author
    c.committer = committer
    c.author_time = author_time
    c.author_timezone = author_timezone
    c.commit_time = commit_time
    c.commit_timezone = commit_timezone
    c.message = message
    object_store.add_object(c)
    logger.debug(
        "stored commit %s for tree %s", c.id.decode("ascii"), tree.decode("ascii")
    )
    return c.id
