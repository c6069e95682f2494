# errors.py -- errors for gitcas
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

"""gitcas-related exception classes."""

__all__ = [
    "FileFormatException",
    "GitCasError",
    "NotBlobError",
    "NotCommitError",
    "NotGitRepository",
    "NotTreeError",
    "ObjectEncodingError",
    "ObjectFormatException",
    "ObjectIOError",
    "ObjectMissing",
    "WrongObjectException",
]


class GitCasError(Exception):
    """Base class for errors raised by gitcas."""


class ObjectMissing(GitCasError):
    """Indicates that a requested object is not in the object store."""

    def __init__(self, sha: bytes, *args: object, **kwargs: object) -> None:
        """Initialize an ObjectMissing exception.

        Args:
            sha: Hex id of the missing object.
            *args: Additional positional arguments.
            **kwargs: Additional keyword arguments.
        """
        self.sha = sha
        GitCasError.__init__(
            self, f"{sha.decode('ascii', 'replace')} is not in the object store"
        )


class WrongObjectException(GitCasError):
    """Baseclass for all the _ is not a _ exceptions on objects.

    Do not instantiate directly.

    Subclasses should define a type_name attribute that indicates what
    was expected if they were raised.
    """

    type_name: str

    def __init__(self, sha: bytes, *args: object, **kwargs: object) -> None:
        """Initialize a WrongObjectException.

        Args:
            sha: The id of the object that was not of the expected type.
            *args: Additional positional arguments.
            **kwargs: Additional keyword arguments.
        """
        self.sha = sha
        GitCasError.__init__(
            self, f"{sha.decode('ascii', 'replace')} is not a {self.type_name}"
        )


class NotCommitError(WrongObjectException):
    """Indicates that the id requested does not point to a commit."""

    type_name = "commit"


class NotTreeError(WrongObjectException):
    """Indicates that the id requested does not point to a tree."""

    type_name = "tree"


class NotBlobError(WrongObjectException):
    """Indicates that the id requested does not point to a blob."""

    type_name = "blob"


class FileFormatException(GitCasError):
    """Base class for exceptions relating to reading git file formats."""


class ObjectFormatException(FileFormatException):
    """Indicates an error parsing an object."""


class ObjectIOError(GitCasError):
    """Reading or writing an object failed for a reason unrelated to its format."""

    def __init__(self, path: str, error: OSError) -> None:
        """Initialize an ObjectIOError.

        Args:
            path: Path of the file that could not be accessed.
            error: The underlying operating system error.
        """
        self.path = path
        self.error = error
        GitCasError.__init__(self, f"{path}: {error.strerror or error}")


class ObjectEncodingError(GitCasError):
    """Object contents are not valid text where text is required."""

    def __init__(self, sha: bytes, encoding: str) -> None:
        """Initialize an ObjectEncodingError.

        Args:
            sha: Hex id of the object.
            encoding: Encoding the contents failed to decode with.
        """
        self.sha = sha
        self.encoding = encoding
        GitCasError.__init__(
            self,
            f"{sha.decode('ascii', 'replace')} does not contain valid {encoding} text",
        )


class NotGitRepository(GitCasError):
    """Indicates that no repository was found."""
