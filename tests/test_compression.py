# test_compression.py -- tests for compression.py
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

"""Tests for compression of stored objects."""

import zlib

from gitcas.compression import compress_chunks, decompress
from gitcas.errors import ObjectFormatException

from . import TestCase


class CompressionTests(TestCase):
    """Tests for compress_chunks and decompress."""

    def test_compress_chunks_is_zlib(self) -> None:
        data = b"".join(compress_chunks([b"blob 6\x00", b"hello\n"]))
        self.assertEqual(b"blob 6\x00hello\n", zlib.decompress(data))

    def test_compression_level(self) -> None:
        payload = b"abc" * 1000
        stored = b"".join(compress_chunks([payload], 0))
        packed = b"".join(compress_chunks([payload], 9))
        self.assertGreater(len(stored), len(packed))
        self.assertEqual(payload, decompress(stored))

    def test_decompress(self) -> None:
        self.assertEqual(b"hello", decompress(zlib.compress(b"hello")))

    def test_decompress_empty_input(self) -> None:
        self.assertRaises(ObjectFormatException, decompress, b"")

    def test_decompress_corrupt(self) -> None:
        self.assertRaises(ObjectFormatException, decompress, b"not zlib at all")

    def test_decompress_truncated(self) -> None:
        data = zlib.compress(b"hello world" * 10)
        self.assertRaises(ObjectFormatException, decompress, data[: len(data) // 2])

    def test_decompress_trailing_garbage(self) -> None:
        self.assertRaises(
            ObjectFormatException, decompress, zlib.compress(b"hello") + b"extra"
        )
