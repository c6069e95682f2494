# object_store.py -- Object store for git objects
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

"""Git object store interfaces and implementation."""

__all__ = [
    "LOOSE_MODE",
    "BaseObjectStore",
    "DiskObjectStore",
    "MemoryObjectStore",
]

import errno
import logging
import os
import sys
from collections.abc import Iterable, Iterator

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

from .compression import decompress
from .errors import ObjectIOError, ObjectMissing
from .file import FileLocked, GitFile, ensure_dir_exists
from .objects import (
    ObjectID,
    ShaFile,
    hex_to_filename,
    object_class,
    parse_object_envelope,
    valid_hexsha,
)

logger = logging.getLogger(__name__)

LOOSE_MODE = 0o444 if sys.platform != "win32" else 0o644


class BaseObjectStore:
    """Object store interface."""

    def _to_hexsha(self, sha: ObjectID | str) -> ObjectID:
        if isinstance(sha, str):
            sha = sha.encode("ascii", "replace")
        if not valid_hexsha(sha):
            # Nothing can be stored under a malformed id.
            raise ObjectMissing(sha)
        return ObjectID(sha.lower())

    def contains_loose(self, sha: ObjectID | str) -> bool:
        """Check if a particular object is present by SHA1 and is loose."""
        raise NotImplementedError(self.contains_loose)

    def __contains__(self, sha: ObjectID | str) -> bool:
        """Check if a particular object is present by SHA1.

        This method makes no distinction between loose and packed objects.
        """
        try:
            return self.contains_loose(sha)
        except ObjectMissing:
            return False

    def get_raw(self, name: ObjectID | str) -> tuple[bytes, bytes]:
        """Obtain the raw text for an object.

        Args:
          name: sha for the object.
        Returns: tuple with type name and object contents.
        Raises:
          ObjectMissing: if there is no object with that id
        """
        raise NotImplementedError(self.get_raw)

    def get(self, name: ObjectID | str) -> tuple[bytes, bytes]:
        """Retrieve the type name and payload of a stored object."""
        return self.get_raw(name)

    def __getitem__(self, sha: ObjectID | str) -> ShaFile:
        """Obtain an object by SHA1."""
        type_name, payload = self.get_raw(sha)
        return ShaFile.from_raw_string(type_name, payload)

    def __iter__(self) -> Iterator[ObjectID]:
        """Iterate over the SHAs that are present in this store."""
        raise NotImplementedError(self.__iter__)

    def add_object(self, obj: ShaFile) -> None:
        """Add a single object to this object store."""
        raise NotImplementedError(self.add_object)

    def add_objects(self, objects: Iterable[ShaFile]) -> None:
        """Add a set of objects to this object store.

        Args:
          objects: Iterable over objects
        """
        for obj in objects:
            self.add_object(obj)

    def put(self, type_name: bytes, payload: bytes) -> ObjectID:
        """Store a payload of the given type and return its id.

        Storing content that is already present is not an error.

        Args:
          type_name: One of b"blob", b"tree" or b"commit"
          payload: Serialized payload
        Returns: hex id of the stored object
        """
        obj = ShaFile.from_raw_string(type_name, payload)
        self.add_object(obj)
        return obj.id

    def close(self) -> None:
        """Close any files opened by this object store."""


class DiskObjectStore(BaseObjectStore):
    """Git-style object store that exists on disk.

    Objects are stored loose, zlib compressed, at
    ``<path>/<first two hex digits>/<remaining hex digits>``.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        loose_compression_level: int = -1,
        fsync_object_files: bool = False,
    ) -> None:
        """Open an object store.

        Args:
          path: Path of the object store.
          loose_compression_level: zlib compression level for loose objects
          fsync_object_files: whether to fsync object files for durability
        """
        self.path = os.fspath(path)
        self.loose_compression_level = loose_compression_level
        self.fsync_object_files = fsync_object_files

    def __repr__(self) -> str:
        """Return string representation of DiskObjectStore."""
        return f"<{self.__class__.__name__}({self.path!r})>"

    def _get_shafile_path(self, sha: ObjectID) -> str:
        return hex_to_filename(self.path, sha)

    @override
    def contains_loose(self, sha: ObjectID | str) -> bool:
        return os.path.exists(self._get_shafile_path(self._to_hexsha(sha)))

    def _read_loose(self, sha: ObjectID) -> bytes:
        path = self._get_shafile_path(sha)
        try:
            with GitFile(path, "rb") as f:
                return f.read()
        except FileNotFoundError as exc:
            raise ObjectMissing(sha) from exc
        except OSError as exc:
            raise ObjectIOError(path, exc) from exc

    @override
    def get_raw(self, name: ObjectID | str) -> tuple[bytes, bytes]:
        sha = self._to_hexsha(name)
        type_name, payload = parse_object_envelope(decompress(self._read_loose(sha)))
        object_class(type_name)
        logger.debug(
            "read %s %s (%d bytes)",
            type_name.decode("ascii"),
            sha.decode(),
            len(payload),
        )
        return type_name, payload

    @override
    def __iter__(self) -> Iterator[ObjectID]:
        try:
            bases = os.listdir(self.path)
        except FileNotFoundError:
            return
        for base in sorted(bases):
            if len(base) != 2:
                continue
            for rest in sorted(os.listdir(os.path.join(self.path, base))):
                sha = os.fsencode(base + rest)
                if not valid_hexsha(sha):
                    continue
                yield ObjectID(sha)

    @override
    def add_object(self, obj: ShaFile) -> None:
        obj_id = obj.id
        path = self._get_shafile_path(obj_id)
        dir = os.path.dirname(path)
        try:
            ensure_dir_exists(dir)
        except OSError as exc:
            raise ObjectIOError(dir, exc) from exc
        if os.path.exists(path):
            logger.debug("%s already stored", obj_id.decode())
            return  # Already there, no need to write again
        try:
            with GitFile(
                path, "wb", mask=LOOSE_MODE, fsync=self.fsync_object_files
            ) as f:
                f.writelines(obj.as_legacy_object_chunks(self.loose_compression_level))
        except FileLocked as exc:
            if os.path.exists(path):
                # Another writer stored the same content under this name.
                logger.debug("%s was written concurrently", obj_id.decode())
                return
            raise ObjectIOError(
                path,
                FileExistsError(
                    errno.EEXIST, "object is locked by another writer", exc.lockfilename
                ),
            ) from exc
        except OSError as exc:
            raise ObjectIOError(path, exc) from exc
        logger.debug("wrote %s %s", obj.type_name.decode("ascii"), obj_id.decode())

    @classmethod
    def init(cls, path: str | os.PathLike[str], **kwargs: object) -> "DiskObjectStore":
        """Initialize a new disk object store.

        Args:
          path: Path where the object store should be created
        Returns: New DiskObjectStore instance
        """
        ensure_dir_exists(path)
        return cls(path, **kwargs)  # type: ignore[arg-type]


class MemoryObjectStore(BaseObjectStore):
    """Object store that keeps all objects in memory."""

    def __init__(self) -> None:
        """Initialize a MemoryObjectStore."""
        self._data: dict[ObjectID, tuple[bytes, bytes]] = {}

    @override
    def contains_loose(self, sha: ObjectID | str) -> bool:
        return self._to_hexsha(sha) in self._data

    @override
    def get_raw(self, name: ObjectID | str) -> tuple[bytes, bytes]:
        sha = self._to_hexsha(name)
        try:
            return self._data[sha]
        except KeyError as exc:
            raise ObjectMissing(sha) from exc

    @override
    def __iter__(self) -> Iterator[ObjectID]:
        return iter(list(self._data))

    def __len__(self) -> int:
        """Return the number of objects in this store."""
        return len(self._data)

    @override
    def add_object(self, obj: ShaFile) -> None:
        # Only the serialized form is kept; later changes to obj are not seen.
        self._data[obj.id] = (obj.type_name, obj.as_raw_string())
