# objects.py -- Access to base git objects
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

"""Access to base git objects.

Every object is stored as an envelope::

    <type name> SP <decimal payload length> NUL <payload>

and named by the hex digest of those bytes. The set of object types is
closed: blobs, trees and commits.
"""

__all__ = [
    "OBJECT_CLASSES",
    "S_IFGITLINK",
    "Blob",
    "Commit",
    "ObjectID",
    "RawObjectID",
    "ShaFile",
    "Tree",
    "TreeEntry",
    "check_hexsha",
    "format_mode",
    "format_timezone",
    "hex_to_filename",
    "hex_to_sha",
    "key_entry",
    "object_class",
    "object_envelope",
    "object_header",
    "parse_object_envelope",
    "parse_timezone",
    "parse_tree",
    "pretty_format_tree_entry",
    "serialize_tree",
    "sha_to_hex",
    "sorted_tree_items",
    "valid_hexsha",
]

import binascii
import os
import stat
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, NamedTuple, NewType

from .compression import compress_chunks
from .errors import (
    NotBlobError,
    NotCommitError,
    NotTreeError,
    ObjectFormatException,
    WrongObjectException,
)
from .object_format import SHA1

if TYPE_CHECKING:
    from _hashlib import HASH

ObjectID = NewType("ObjectID", bytes)
RawObjectID = NewType("RawObjectID", bytes)

# Header fields for commits
_TREE_HEADER = b"tree"
_PARENT_HEADER = b"parent"
_AUTHOR_HEADER = b"author"
_COMMITTER_HEADER = b"committer"

S_IFGITLINK = 0o160000


def S_ISGITLINK(m: int) -> bool:
    """Check if a mode indicates a submodule.

    Args:
      m: Mode to check
    Returns: a ``boolean``
    """
    return stat.S_IFMT(m) == S_IFGITLINK


def sha_to_hex(sha: RawObjectID) -> ObjectID:
    """Takes a string and returns the hex of the sha within."""
    hexsha = binascii.hexlify(sha)
    assert len(hexsha) == SHA1.hex_length, (
        f"Incorrect length of sha1 string: {hexsha!r}"
    )
    return ObjectID(hexsha)


def hex_to_sha(hex: ObjectID | str) -> RawObjectID:
    """Takes a hex sha and returns a binary sha."""
    assert len(hex) == SHA1.hex_length, f"Incorrect length of hexsha: {hex!r}"
    try:
        return RawObjectID(binascii.unhexlify(hex))
    except (TypeError, binascii.Error) as exc:
        if not isinstance(hex, bytes):
            raise
        raise ValueError(exc.args[0]) from exc


def valid_hexsha(hex: bytes | str) -> bool:
    """Check if a string is a valid hex SHA."""
    if len(hex) != SHA1.hex_length:
        return False
    try:
        binascii.unhexlify(hex)
    except (TypeError, binascii.Error):
        return False
    else:
        return True


def check_hexsha(hex: bytes | str, error_msg: str) -> None:
    """Check if a string is a valid hex sha string.

    Args:
      hex: Hex string to check
      error_msg: Error message to use in exception
    Raises:
      ObjectFormatException: Raised when the string is not valid
    """
    if not valid_hexsha(hex):
        raise ObjectFormatException(f"{error_msg} {hex!r}")


def hex_to_filename(path: str, hex: bytes) -> str:
    """Takes a hex sha and returns its filename relative to the given path."""
    # Check from object dir
    directory = hex[:2].decode("ascii")
    filename = hex[2:].decode("ascii")
    return os.path.join(path, directory, filename)


def object_header(type_name: bytes, length: int) -> bytes:
    """Return an object header for the given type name and content length."""
    return type_name + b" " + str(length).encode("ascii") + b"\0"


def object_envelope(type_name: bytes, payload: bytes) -> bytes:
    """Wrap a payload in the envelope that is hashed and stored."""
    return object_header(type_name, len(payload)) + payload


def parse_object_envelope(data: bytes) -> tuple[bytes, bytes]:
    """Split an envelope into its type name and payload.

    The declared length must be in canonical form (no leading zeros) and
    must match the number of payload bytes exactly.

    Args:
      data: Uncompressed envelope bytes
    Returns: tuple of (type name, payload)
    Raises:
      ObjectFormatException: if the envelope is malformed
    """
    space = data.find(b" ")
    if space == -1:
        raise ObjectFormatException("object header has no type terminator")
    nul = data.find(b"\0", space)
    if nul == -1:
        raise ObjectFormatException("object header has no size terminator")
    type_name = data[:space]
    size_text = data[space + 1 : nul]
    if not size_text.isdigit():
        raise ObjectFormatException(f"invalid object size {size_text!r}")
    if len(size_text) > 1 and size_text.startswith(b"0"):
        raise ObjectFormatException("Size is not in canonical format")
    payload = data[nul + 1 :]
    if int(size_text) != len(payload):
        raise ObjectFormatException(
            f"declared size {int(size_text)} does not match payload size {len(payload)}"
        )
    return type_name, payload


def format_mode(mode: int) -> bytes:
    """Format a tree entry mode in its canonical six digit form."""
    return b"%06o" % mode


def format_timezone(offset: int) -> bytes:
    """Format a timezone for git serialization.

    Args:
      offset: Timezone offset as seconds difference to UTC
    """
    if offset % 60 != 0:
        raise ValueError("Unable to handle non-minute offset.")
    if offset < 0:
        offset = -offset
        sign = "-"
    else:
        sign = "+"
    return ("%c%02d%02d" % (sign, offset // 3600, (offset // 60) % 60)).encode("ascii")


def parse_timezone(text: bytes) -> int:
    """Parse a timezone text fragment (e.g. b'+0100').

    Args:
      text: Text to parse.
    Returns: Timezone offset as seconds difference to UTC
    """
    if len(text) != 5 or text[:1] not in (b"+", b"-") or not text[1:].isdigit():
        raise ValueError(f"Invalid timezone {text!r}")
    hours = int(text[1:3])
    minutes = int(text[3:5])
    offset = hours * 3600 + minutes * 60
    if text[:1] == b"-":
        return -offset
    return offset


class ShaFile:
    """A git SHA file."""

    type_name: bytes

    _needs_serialization: bool
    _chunked_text: list[bytes] | None
    _sha: "HASH | None"

    def __init__(self) -> None:
        """Initialize a ShaFile."""
        self._sha = None
        self._chunked_text = []
        self._needs_serialization = True

    @staticmethod
    def from_raw_string(type_name: bytes, string: bytes) -> "ShaFile":
        """Creates an object of the indicated type from the raw string given.

        Args:
          type_name: The type name of the object.
          string: The raw uncompressed contents.
        """
        cls = object_class(type_name)
        obj = cls()
        obj.set_raw_string(string)
        return obj

    @classmethod
    def from_string(cls, string: bytes) -> "ShaFile":
        """Create a ShaFile from a string."""
        obj = cls()
        obj.set_raw_string(string)
        return obj

    def set_raw_string(self, text: bytes) -> None:
        """Set the contents of this object from a serialized string."""
        if not isinstance(text, bytes):
            raise TypeError(f"Expected bytes for text, got {text!r}")
        self.set_raw_chunks([text])

    def set_raw_chunks(self, chunks: list[bytes]) -> None:
        """Set the contents of this object from a list of chunks."""
        self._chunked_text = chunks
        self._deserialize(chunks)
        self._sha = None
        self._needs_serialization = False

    def _deserialize(self, chunks: list[bytes]) -> None:
        raise NotImplementedError(self._deserialize)

    def _serialize(self) -> list[bytes]:
        raise NotImplementedError(self._serialize)

    def as_raw_chunks(self) -> list[bytes]:
        """Return chunks with serialization of the object."""
        if self._needs_serialization:
            self._sha = None
            self._chunked_text = self._serialize()
            self._needs_serialization = False
        assert self._chunked_text is not None
        return self._chunked_text

    def as_raw_string(self) -> bytes:
        """Return raw string with serialization of the object."""
        return b"".join(self.as_raw_chunks())

    def raw_length(self) -> int:
        """Returns the length of the raw string of this object."""
        return sum(map(len, self.as_raw_chunks()))

    def _header(self) -> bytes:
        return object_header(self.type_name, self.raw_length())

    def as_envelope_chunks(self) -> Iterator[bytes]:
        """Return the envelope (header followed by payload) as chunks."""
        yield self._header()
        yield from self.as_raw_chunks()

    def as_envelope(self) -> bytes:
        """Return the envelope bytes that name this object."""
        return b"".join(self.as_envelope_chunks())

    def as_legacy_object_chunks(self, compression_level: int = -1) -> Iterator[bytes]:
        """Return the compressed on-disk form of this object as chunks."""
        return compress_chunks(self.as_envelope_chunks(), compression_level)

    def as_legacy_object(self, compression_level: int = -1) -> bytes:
        """Return the compressed on-disk form of this object."""
        return b"".join(self.as_legacy_object_chunks(compression_level))

    def as_pretty_string(self) -> bytes:
        """Return a string representing this object, fit for display."""
        return self.as_raw_string()

    def sha(self) -> "HASH":
        """The hash object that is the name of this object."""
        if self._needs_serialization or self._sha is None:
            self._sha = SHA1.hash_chunks(self.as_envelope_chunks())
        return self._sha

    @property
    def id(self) -> ObjectID:
        """The hex SHA of this object."""
        return ObjectID(self.sha().hexdigest().encode("ascii"))

    def __repr__(self) -> str:
        """Return string representation of this object."""
        return f"<{self.__class__.__name__} {self.id!r}>"

    def __ne__(self, other: object) -> bool:
        """Check whether this object does not match the other."""
        return not isinstance(other, ShaFile) or self.id != other.id

    def __eq__(self, other: object) -> bool:
        """Return True if the SHAs of the two objects match."""
        return isinstance(other, ShaFile) and self.id == other.id

    def __hash__(self) -> int:
        """Return unique hash for this object."""
        return hash(self.id)


class Blob(ShaFile):
    """A Git Blob object."""

    type_name = b"blob"

    def _get_data(self) -> bytes:
        return self.as_raw_string()

    def _set_data(self, data: bytes) -> None:
        self.set_raw_string(data)

    data = property(
        _get_data, _set_data, doc="The text contained within the blob object."
    )

    def _deserialize(self, chunks: list[bytes]) -> None:
        pass

    def _serialize(self) -> list[bytes]:
        return []


class TreeEntry(NamedTuple):
    """Named tuple encapsulating a single tree entry."""

    path: bytes
    mode: int
    sha: ObjectID


def key_entry(entry: tuple[bytes, tuple[int, ObjectID]]) -> bytes:
    """Sort key for tree entry.

    Directories sort as if their name had a trailing slash.

    Args:
      entry: (name, value) tuple
    """
    (name, (mode, _sha)) = entry
    if stat.S_ISDIR(mode):
        name += b"/"
    return name


def sorted_tree_items(
    entries: dict[bytes, tuple[int, ObjectID]],
) -> Iterator[TreeEntry]:
    """Iterate over a tree entries dictionary in canonical order.

    Args:
      entries: Dictionary mapping names to (mode, sha) tuples
    Returns: Iterator over (name, mode, hexsha)
    """
    for name, (mode, hexsha) in sorted(entries.items(), key=key_entry):
        yield TreeEntry(name, mode, hexsha)


def parse_tree(text: bytes) -> Iterator[TreeEntry]:
    """Parse a tree text.

    Modes may be written with five or six digits; both parse to the same
    value.

    Args:
      text: Serialized text to parse
    Returns: iterator of tuples of (name, mode, sha)

    Raises:
      ObjectFormatException: if the object was malformed in some way
    """
    count = 0
    length = len(text)
    while count < length:
        mode_end = text.find(b" ", count)
        if mode_end == -1:
            raise ObjectFormatException("tree entry has no mode terminator")
        mode_text = text[count:mode_end]
        if not mode_text.isdigit():
            raise ObjectFormatException(f"invalid mode {mode_text!r}")
        try:
            mode = int(mode_text, 8)
        except ValueError as exc:
            raise ObjectFormatException(f"invalid mode {mode_text!r}") from exc
        name_end = text.find(b"\0", mode_end)
        if name_end == -1:
            raise ObjectFormatException("tree entry has no name terminator")
        name = text[mode_end + 1 : name_end]
        if not name:
            raise ObjectFormatException("tree entry has an empty name")
        count = name_end + 1 + SHA1.oid_length
        if count > length:
            raise ObjectFormatException(f"tree entry for {name!r} has a truncated id")
        sha = text[name_end + 1 : count]
        yield TreeEntry(name, mode, sha_to_hex(RawObjectID(sha)))


def serialize_tree(items: Iterable[tuple[bytes, int, ObjectID]]) -> Iterator[bytes]:
    """Serialize the items in a tree to a text.

    Modes are written without zero padding, so directories appear as
    ``40000``.

    Args:
      items: Sorted iterable over (name, mode, sha) tuples
    Returns: Serialized tree text as chunks
    """
    for name, mode, hexsha in items:
        yield (b"%o" % mode) + b" " + name + b"\0" + hex_to_sha(hexsha)


def _object_kind(mode: int) -> bytes:
    if stat.S_ISDIR(mode):
        return b"tree"
    elif S_ISGITLINK(mode):
        return b"commit"
    return b"blob"


def pretty_format_tree_entry(
    name: bytes, mode: int, hexsha: bytes, encoding: str = "utf-8"
) -> str:
    """Pretty format tree entry.

    Args:
      name: Name of the directory entry
      mode: Mode of entry
      hexsha: Hexsha of the referenced object
      encoding: Character encoding of the name
    Returns: string describing the tree entry
    Raises:
      UnicodeDecodeError: if the name is not valid in ``encoding``
    """
    return "{} {} {}\t{}\n".format(
        format_mode(mode).decode("ascii"),
        _object_kind(mode).decode("ascii"),
        hexsha.decode("ascii"),
        name.decode(encoding),
    )


class Tree(ShaFile):
    """A Git tree object."""

    type_name = b"tree"

    def __init__(self) -> None:
        """Initialize an empty Tree."""
        super().__init__()
        self._entries: dict[bytes, tuple[int, ObjectID]] = {}

    def __contains__(self, name: bytes) -> bool:
        """Check if name exists in tree."""
        return name in self._entries

    def __getitem__(self, name: bytes) -> tuple[int, ObjectID]:
        """Get tree entry by name."""
        return self._entries[name]

    def __setitem__(self, name: bytes, value: tuple[int, ObjectID]) -> None:
        """Set a tree entry by name.

        Args:
          name: The name of the entry, as a string.
          value: A tuple of (mode, hexsha), where mode is the mode of the
            entry as an integral type and hexsha is the hex SHA of the entry as
            a string.
        """
        mode, hexsha = value
        self.add(name, mode, hexsha)

    def __delitem__(self, name: bytes) -> None:
        """Delete tree entry by name."""
        del self._entries[name]
        self._needs_serialization = True

    def __len__(self) -> int:
        """Return number of entries in tree."""
        return len(self._entries)

    def __iter__(self) -> Iterator[bytes]:
        """Iterate over tree entry names."""
        return iter(self._entries)

    def add(self, name: bytes, mode: int, hexsha: ObjectID) -> None:
        """Add an entry to the tree.

        Args:
          name: The name of the entry, a single path segment.
          mode: The mode of the entry as an integral type.
          hexsha: The hex SHA of the entry as a string.
        """
        if not name or b"/" in name or b"\0" in name:
            raise ValueError(f"invalid tree entry name {name!r}")
        check_hexsha(hexsha, "invalid sha for tree entry")
        self._entries[name] = mode, ObjectID(hexsha.lower())
        self._needs_serialization = True

    def iteritems(self) -> Iterator[TreeEntry]:
        """Iterate over entries in the order in which they are serialized.

        For a tree read from its serialized form that is the stored order;
        once entries have been added or removed it is the canonical order.

        Returns: iterator over (name, mode, sha) tuples
        """
        if self._needs_serialization:
            return sorted_tree_items(self._entries)
        return (
            TreeEntry(name, mode, sha) for name, (mode, sha) in self._entries.items()
        )

    def items(self) -> list[TreeEntry]:
        """Return the sorted entries in this tree.

        Returns: List with (name, mode, sha) tuples
        """
        return list(self.iteritems())

    def _deserialize(self, chunks: list[bytes]) -> None:
        """Grab the entries in the tree."""
        entries: dict[bytes, tuple[int, ObjectID]] = {}
        for name, mode, sha in parse_tree(b"".join(chunks)):
            if name in entries:
                raise ObjectFormatException(f"duplicate tree entry {name!r}")
            entries[name] = (mode, sha)
        self._entries = entries

    def _serialize(self) -> list[bytes]:
        return list(serialize_tree(sorted_tree_items(self._entries)))

    def as_pretty_string(self) -> bytes:
        """Return a human-readable listing of the tree.

        Entry names are copied as stored, without decoding.
        """
        return b"".join(
            format_mode(entry.mode)
            + b" "
            + _object_kind(entry.mode)
            + b" "
            + entry.sha
            + b"\t"
            + entry.path
            + b"\n"
            for entry in self.iteritems()
        )


def serializable_property(name: str, docstring: str | None = None) -> property:
    """A property that helps tracking whether serialization is necessary."""

    def set(obj: "Commit", value: object) -> None:
        if isinstance(value, bytes) and b"\n" in value:
            raise ValueError(f"newline in {name}: {value!r}")
        obj._ensure_parsed()
        setattr(obj, "_" + name, value)
        obj._needs_serialization = True

    def get(obj: "Commit") -> object:
        obj._ensure_parsed()
        return getattr(obj, "_" + name)

    return property(get, set, doc=docstring)


def _parse_identity_line(value: bytes) -> tuple[bytes, int, int]:
    try:
        identity, timetext, timezonetext = value.rsplit(b" ", 2)
        return identity, int(timetext), parse_timezone(timezonetext)
    except ValueError as exc:
        raise ObjectFormatException(f"malformed identity line {value!r}") from exc


class Commit(ShaFile):
    """A git commit object.

    A commit read from the store keeps its payload as opaque text; the
    header fields are only parsed when one of them is accessed.
    """

    type_name = b"commit"

    def __init__(self) -> None:
        """Initialize an empty Commit."""
        super().__init__()
        self._tree: ObjectID | None = None
        self._parents: list[ObjectID] = []
        self._author: bytes | None = None
        self._committer: bytes | None = None
        self._author_time: int | None = None
        self._author_timezone = 0
        self._commit_time: int | None = None
        self._commit_timezone = 0
        self._message = b""
        self._needs_parsing = False

    def _deserialize(self, chunks: list[bytes]) -> None:
        self._needs_parsing = True

    def _ensure_parsed(self) -> None:
        if self._needs_parsing:
            self._needs_parsing = False
            self._parse_headers(self.as_raw_string())

    def _parse_headers(self, text: bytes) -> None:
        headers, sep, message = text.partition(b"\n\n")
        if not sep:
            raise ObjectFormatException("commit has no blank line after headers")
        tree = None
        parents: list[ObjectID] = []
        for line in headers.split(b"\n"):
            field, _, value = line.partition(b" ")
            if field == _TREE_HEADER:
                check_hexsha(value, "invalid tree sha")
                tree = ObjectID(value)
            elif field == _PARENT_HEADER:
                check_hexsha(value, "invalid parent sha")
                parents.append(ObjectID(value))
            elif field == _AUTHOR_HEADER:
                (self._author, self._author_time, self._author_timezone) = (
                    _parse_identity_line(value)
                )
            elif field == _COMMITTER_HEADER:
                (self._committer, self._commit_time, self._commit_timezone) = (
                    _parse_identity_line(value)
                )
        if tree is None:
            raise ObjectFormatException("commit has no tree header")
        self._tree = tree
        self._parents = parents
        if message.endswith(b"\n"):
            message = message[:-1]
        self._message = message

    def _serialize(self) -> list[bytes]:
        if self._tree is None:
            raise ObjectFormatException("commit has no tree")
        if self._author is None or self._committer is None:
            raise ObjectFormatException("commit has no author or committer")
        if self._author_time is None or self._commit_time is None:
            raise ObjectFormatException("commit has no timestamp")
        lines = [_TREE_HEADER + b" " + self._tree]
        for p in self._parents:
            lines.append(_PARENT_HEADER + b" " + p)
        lines.append(
            b"%s %s %d %s"
            % (
                _AUTHOR_HEADER,
                self._author,
                self._author_time,
                format_timezone(self._author_timezone),
            )
        )
        lines.append(
            b"%s %s %d %s"
            % (
                _COMMITTER_HEADER,
                self._committer,
                self._commit_time,
                format_timezone(self._commit_timezone),
            )
        )
        lines.extend([b"", self._message, b""])
        return [b"\n".join(lines)]

    def _get_tree(self) -> ObjectID | None:
        self._ensure_parsed()
        return self._tree

    def _set_tree(self, value: ObjectID) -> None:
        check_hexsha(value, "invalid tree sha")
        self._ensure_parsed()
        self._tree = ObjectID(value.lower())
        self._needs_serialization = True

    tree = property(_get_tree, _set_tree, doc="Tree that is the state of this commit")

    def _get_parents(self) -> list[ObjectID]:
        """Return a list of parents of this commit."""
        self._ensure_parsed()
        return list(self._parents)

    def _set_parents(self, value: list[ObjectID]) -> None:
        """Set a list of parents of this commit."""
        for p in value:
            check_hexsha(p, "invalid parent sha")
        self._ensure_parsed()
        self._parents = [ObjectID(p.lower()) for p in value]
        self._needs_serialization = True

    parents = property(
        _get_parents, _set_parents, doc="Parents of this commit, by their SHA1."
    )

    def _get_message(self) -> bytes:
        self._ensure_parsed()
        return self._message

    def _set_message(self, value: bytes) -> None:
        self._ensure_parsed()
        self._message = value
        self._needs_serialization = True

    message = property(_get_message, _set_message, doc="The commit message")

    author = serializable_property("author", "The name of the author of the commit")

    committer = serializable_property(
        "committer", "The name of the committer of the commit"
    )

    commit_time = serializable_property(
        "commit_time",
        "The timestamp of the commit. As the number of seconds since the epoch.",
    )

    commit_timezone = serializable_property(
        "commit_timezone", "The zone the commit time is in"
    )

    author_time = serializable_property(
        "author_time",
        "The timestamp the commit was written. As the number of seconds since the epoch.",
    )

    author_timezone = serializable_property(
        "author_timezone", "Returns the zone the author time is in."
    )


OBJECT_CLASSES = (
    Commit,
    Tree,
    Blob,
)

_TYPE_MAP: dict[bytes, type[ShaFile]] = {cls.type_name: cls for cls in OBJECT_CLASSES}

_WRONG_OBJECT_ERRORS: dict[type[ShaFile], type[WrongObjectException]] = {
    Commit: NotCommitError,
    Tree: NotTreeError,
    Blob: NotBlobError,
}


def object_class(type_name: bytes) -> type[ShaFile]:
    """Get the object class corresponding to the given type name.

    Args:
      type_name: A type name bytestring.
    Returns: The ShaFile subclass corresponding to the given type.
    Raises:
      ObjectFormatException: if the type name is not a known object type
    """
    try:
        return _TYPE_MAP[type_name]
    except KeyError as exc:
        raise ObjectFormatException(
            f"{type_name[:9]!r} is not a known object type"
        ) from exc


def wrong_object_error(cls: type[ShaFile]) -> type[WrongObjectException]:
    """Return the exception raised when an object is not of class ``cls``."""
    return _WRONG_OBJECT_ERRORS[cls]
