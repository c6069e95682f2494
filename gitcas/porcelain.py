# porcelain.py -- Porcelain-like layer on top of gitcas
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

"""Simple wrapper that provides porcelain-like functions on top of gitcas.

Currently implemented:
 * cat-file (cat_file, object_type, object_size)
 * cat_blob, cat_commit
 * commit-tree
 * hash-object
 * init
 * ls-tree (list_tree, ls_tree)
 * write-tree

These functions are meant to behave similarly to the git subcommands.
Differences in behaviour are considered bugs.

Functions should generally accept both unicode strings and bytestrings
"""

__all__ = [
    "cat_blob",
    "cat_commit",
    "cat_file",
    "commit_tree",
    "hash_object",
    "init",
    "list_tree",
    "ls_tree",
    "object_size",
    "object_type",
    "open_repo_closing",
    "write_tree",
]

import logging
import os
import sys
from collections.abc import Iterable, Iterator
from contextlib import AbstractContextManager, closing, contextmanager
from typing import TextIO, TypeVar, overload

from . import build
from .errors import ObjectEncodingError
from .object_store import BaseObjectStore, MemoryObjectStore
from .objects import (
    Blob,
    Commit,
    ObjectID,
    ShaFile,
    Tree,
    TreeEntry,
    object_class,
    pretty_format_tree_entry,
    wrong_object_error,
)
from .repo import Repo, get_user_identity

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"

T = TypeVar("T", bound=Repo)
S = TypeVar("S", bound=ShaFile)

RepoPath = str | os.PathLike[str] | Repo


@contextmanager
def _noop_context_manager(obj: T) -> Iterator[T]:
    """Context manager that has the same api as closing but does nothing."""
    yield obj


@overload
def open_repo_closing(path_or_repo: T) -> AbstractContextManager[T]: ...


@overload
def open_repo_closing(
    path_or_repo: str | bytes | os.PathLike[str],
) -> AbstractContextManager[Repo]: ...


def open_repo_closing(
    path_or_repo: str | bytes | os.PathLike[str] | T,
) -> AbstractContextManager[T | Repo]:
    """Open an argument that can be a repository or a path for a repository.

    returns a context manager that will close the repo on exit if the argument
    is a path, else does nothing if the argument is a repo.
    """
    if isinstance(path_or_repo, Repo):
        return _noop_context_manager(path_or_repo)
    return closing(Repo(path_or_repo))


def _get_object(store: BaseObjectStore, sha: ObjectID | str, cls: type[S]) -> S:
    obj = store[sha]
    if not isinstance(obj, cls):
        raise wrong_object_error(cls)(obj.id)
    return obj


def init(
    path: str | os.PathLike[str] = ".", *, default_branch: bytes | None = None
) -> Repo:
    """Create a new git repository.

    Args:
      path: Path to repository.
      default_branch: Branch for HEAD to point at
    Returns: A Repo instance
    """
    if not os.path.exists(path):
        os.mkdir(path)
    return Repo.init(path, default_branch=default_branch)


def hash_object(
    repo: RepoPath | None,
    path: str | os.PathLike[str],
    *,
    write: bool = False,
    object_type: bytes | str = b"blob",
) -> ObjectID:
    """Compute the id of a file's contents as an object of the given type.

    Args:
      repo: Repository to store the object in; only needed with ``write``
      path: File to read the payload from
      write: Whether to store the object
      object_type: Kind of object the file contents represent
    Returns: hex id of the object
    """
    if isinstance(object_type, str):
        object_type = object_type.encode("ascii", "replace")
    object_class(object_type)
    with open(path, "rb") as f:
        payload = f.read()
    if not write:
        return MemoryObjectStore().put(object_type, payload)
    if repo is None:
        repo = "."
    with open_repo_closing(repo) as r:
        return r.object_store.put(object_type, payload)


def cat_blob(repo: RepoPath, sha: ObjectID | str) -> str:
    """Return the contents of a blob as text.

    Args:
      repo: Path to the repository
      sha: Id of the blob
    Raises:
      NotBlobError: if the object is not a blob
      ObjectEncodingError: if the blob is not valid UTF-8
    """
    with open_repo_closing(repo) as r:
        blob = _get_object(r.object_store, sha, Blob)
    try:
        return blob.data.decode(DEFAULT_ENCODING)
    except UnicodeDecodeError as exc:
        raise ObjectEncodingError(blob.id, DEFAULT_ENCODING) from exc


def cat_commit(repo: RepoPath, sha: ObjectID | str) -> str:
    """Return the text of a commit.

    Raises:
      NotCommitError: if the object is not a commit
      ObjectEncodingError: if the commit is not valid UTF-8
    """
    with open_repo_closing(repo) as r:
        commit = _get_object(r.object_store, sha, Commit)
    try:
        return commit.as_raw_string().decode(DEFAULT_ENCODING)
    except UnicodeDecodeError as exc:
        raise ObjectEncodingError(commit.id, DEFAULT_ENCODING) from exc


def list_tree(
    repo: RepoPath, sha: ObjectID | str, name_only: bool = False
) -> list[TreeEntry] | list[bytes]:
    """Return the entries of a tree.

    Args:
      repo: Path to the repository
      sha: Id of the tree
      name_only: Return just the entry names
    Returns: list of (name, mode, sha) entries, or of names
    Raises:
      NotTreeError: if the object is not a tree
    """
    with open_repo_closing(repo) as r:
        tree = _get_object(r.object_store, sha, Tree)
    if name_only:
        return [entry.path for entry in tree.iteritems()]
    return tree.items()


def ls_tree(
    repo: RepoPath,
    sha: ObjectID | str,
    outstream: TextIO = sys.stdout,
    name_only: bool = False,
) -> None:
    """List contents of a tree.

    Args:
      repo: Path to the repository
      sha: Tree id to list
      outstream: Output stream (defaults to stdout)
      name_only: Only print item name
    Raises:
      NotTreeError: if the object is not a tree
      ObjectEncodingError: if an entry name is not valid UTF-8
    """
    with open_repo_closing(repo) as r:
        tree = _get_object(r.object_store, sha, Tree)
    try:
        if name_only:
            lines = [
                entry.path.decode(DEFAULT_ENCODING) + "\n"
                for entry in tree.iteritems()
            ]
        else:
            lines = [
                pretty_format_tree_entry(name, mode, hexsha, DEFAULT_ENCODING)
                for name, mode, hexsha in tree.iteritems()
            ]
    except UnicodeDecodeError as exc:
        raise ObjectEncodingError(tree.id, DEFAULT_ENCODING) from exc
    outstream.writelines(lines)


def cat_file(repo: RepoPath, sha: ObjectID | str, pretty: bool = True) -> bytes:
    """Return the contents of an object.

    Args:
      repo: Path to the repository
      sha: Id of the object
      pretty: Render trees as a listing rather than their binary payload
    """
    with open_repo_closing(repo) as r:
        obj = r.object_store[sha]
    if pretty:
        return obj.as_pretty_string()
    return obj.as_raw_string()


def object_type(repo: RepoPath, sha: ObjectID | str) -> bytes:
    """Return the kind of an object, e.g. b"blob"."""
    with open_repo_closing(repo) as r:
        type_name, _ = r.object_store.get(sha)
    return type_name


def object_size(repo: RepoPath, sha: ObjectID | str) -> int:
    """Return the payload length of an object."""
    with open_repo_closing(repo) as r:
        _, payload = r.object_store.get(sha)
    return len(payload)


def write_tree(repo: RepoPath) -> ObjectID:
    """Write a tree object from the working directory.

    Args:
      repo: Repository for which to write tree
    Returns: tree id for the tree that was written
    """
    with open_repo_closing(repo) as r:
        return r.write_tree()


def commit_tree(
    repo: RepoPath,
    tree: ObjectID | str,
    message: str | bytes,
    parents: Iterable[ObjectID | str] = (),
    author: bytes | None = None,
    committer: bytes | None = None,
) -> ObjectID:
    """Create a new commit object.

    Args:
      repo: Path to repository
      tree: Id of the tree to commit
      message: Commit message
      parents: Ids of the parent commits
      author: Optional author name and email
      committer: Optional committer name and email
    Returns: id of the new commit
    """
    if isinstance(tree, str):
        tree = ObjectID(tree.encode("ascii", "replace"))
    parent_ids = [
        ObjectID(p.encode("ascii", "replace")) if isinstance(p, str) else p
        for p in parents
    ]
    if isinstance(message, str):
        message = message.encode(DEFAULT_ENCODING)
    if author is None:
        author = get_user_identity("AUTHOR")
    if committer is None:
        committer = get_user_identity("COMMITTER")
    with open_repo_closing(repo) as r:
        return build.commit_tree(
            r.object_store,
            tree,
            message,
            author=author,
            committer=committer,
            parents=parent_ids,
        )
