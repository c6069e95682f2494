# compression.py -- zlib compression of loose objects
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

"""Compression applied to objects at rest."""

__all__ = [
    "compress_chunks",
    "decompress",
]

import zlib
from collections.abc import Iterable, Iterator

from .errors import ObjectFormatException


def compress_chunks(
    chunks: Iterable[bytes], compression_level: int = -1
) -> Iterator[bytes]:
    """Compress a sequence of chunks as a single zlib stream.

    Args:
      chunks: Uncompressed chunks
      compression_level: zlib compression level (-1 for the zlib default)
    Returns: Iterator over compressed chunks
    """
    compobj = zlib.compressobj(compression_level)
    for chunk in chunks:
        yield compobj.compress(chunk)
    yield compobj.flush()


def decompress(data: bytes) -> bytes:
    """Decompress a complete zlib stream.

    Raises:
      ObjectFormatException: if the stream is corrupt, truncated or followed
        by trailing garbage
    """
    dcomp = zlib.decompressobj()
    try:
        dcomped = dcomp.decompress(data)
        dcomped += dcomp.flush()
    except zlib.error as exc:
        raise ObjectFormatException(f"corrupt zlib stream: {exc}") from exc
    if not dcomp.eof:
        raise ObjectFormatException("truncated zlib stream")
    if dcomp.unused_data:
        raise ObjectFormatException("trailing data after zlib stream")
    return dcomped
