# test_cli.py -- tests for cli.py
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

"""Tests for gitcas.cli."""

import io
import logging
import os
import sys

from gitcas import cli
from gitcas.objects import Tree
from gitcas.repo import Repo

from . import TestCase

HELLO_BLOB_ID = "ce013625030ba8dba906f756967f9e9ca394464a"
EMPTY_TREE_ID = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"


class GitCasCliTestCase(TestCase):
    """Base class for CLI tests."""

    def setUp(self) -> None:
        super().setUp()
        self.test_dir = self.make_temp_dir()
        self.repo_path = os.path.join(self.test_dir, "repo")
        os.mkdir(self.repo_path)
        self.repo = Repo.init(self.repo_path)
        self.addCleanup(self.repo.close)
        self.overrideEnv("GIT_AUTHOR_NAME", "Joe Example")
        self.overrideEnv("GIT_AUTHOR_EMAIL", "joe@example.com")
        self.overrideEnv("GIT_COMMITTER_NAME", "Joe Example")
        self.overrideEnv("GIT_COMMITTER_EMAIL", "joe@example.com")
        # cli.main() reconfigures logging; restore it so other tests are unaffected.
        gitcas_logger = logging.getLogger("gitcas")
        original_handlers = list(gitcas_logger.handlers)
        root_logger = logging.getLogger()
        original_root_handlers = list(root_logger.handlers)
        original_root_level = root_logger.level

        def restore_logging() -> None:
            for handler in root_logger.handlers:
                if handler not in original_root_handlers:
                    handler.close()
            gitcas_logger.handlers = original_handlers
            root_logger.handlers = original_root_handlers
            root_logger.level = original_root_level

        self.addCleanup(restore_logging)

    def _run_cli(self, *args: str) -> tuple[int | None, str, str]:
        """Run CLI command and capture output."""
        old_stdout = sys.stdout
        old_stderr = sys.stderr
        old_cwd = os.getcwd()

        try:
            sys.stdout = io.StringIO()
            sys.stderr = io.StringIO()
            os.chdir(self.repo_path)
            result = cli.main(list(args))
            return result, sys.stdout.getvalue(), sys.stderr.getvalue()
        finally:
            sys.stdout = old_stdout
            sys.stderr = old_stderr
            os.chdir(old_cwd)

    def write_file(self, relpath: str, contents: bytes) -> str:
        path = os.path.join(self.repo_path, relpath)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(contents)
        return path


class InitCommandTest(GitCasCliTestCase):
    """Tests for init command."""

    def test_init(self) -> None:
        new_repo_path = os.path.join(self.test_dir, "new_repo")
        result, _stdout, _stderr = self._run_cli("init", new_repo_path)
        self.assertEqual(0, result)
        with open(os.path.join(new_repo_path, ".git", "HEAD"), "rb") as f:
            self.assertEqual(b"ref: refs/heads/master\n", f.read())

    def test_init_existing(self) -> None:
        with self.assertLogs("gitcas.cli", level="ERROR") as cm:
            result, _stdout, _stderr = self._run_cli("init", self.repo_path)
        self.assertEqual(1, result)
        self.assertIn("FileExistsError", cm.output[0])


class HashObjectCommandTest(GitCasCliTestCase):
    """Tests for hash-object command."""

    def test_hash_only(self) -> None:
        self.write_file("hello.txt", b"hello\n")
        result, stdout, _stderr = self._run_cli("hash-object", "hello.txt")
        self.assertEqual(0, result)
        self.assertEqual(HELLO_BLOB_ID + "\n", stdout)
        self.assertNotIn(HELLO_BLOB_ID, self.repo.object_store)

    def test_write(self) -> None:
        self.write_file("hello.txt", b"hello\n")
        result, stdout, _stderr = self._run_cli("hash-object", "-w", "hello.txt")
        self.assertEqual(0, result)
        self.assertEqual(HELLO_BLOB_ID + "\n", stdout)
        self.assertIn(HELLO_BLOB_ID, self.repo.object_store)

    def test_missing_file(self) -> None:
        with self.assertLogs("gitcas.cli", level="ERROR") as cm:
            result, stdout, _stderr = self._run_cli("hash-object", "missing.txt")
        self.assertEqual(1, result)
        self.assertEqual("", stdout)
        self.assertIn("FileNotFoundError", cm.output[0])


class CatFileCommandTest(GitCasCliTestCase):
    """Tests for cat-file command."""

    def test_pretty_blob(self) -> None:
        self.repo.object_store.put(b"blob", b"hello\n")
        result, stdout, _stderr = self._run_cli("cat-file", "-p", HELLO_BLOB_ID)
        self.assertEqual(0, result)
        self.assertEqual("hello\n", stdout)

    def test_pretty_tree(self) -> None:
        self.write_file("hello.txt", b"hello\n")
        tree_id = self.repo.write_tree().decode("ascii")
        result, stdout, _stderr = self._run_cli("cat-file", "-p", tree_id)
        self.assertEqual(0, result)
        self.assertEqual(f"100644 blob {HELLO_BLOB_ID}\thello.txt\n", stdout)

    def test_pretty_commit(self) -> None:
        tree_id = self.repo.write_tree().decode("ascii")
        _result, commit_id, _stderr = self._run_cli(
            "commit-tree", tree_id, "-m", "Initial"
        )
        result, stdout, _stderr = self._run_cli("cat-file", "-p", commit_id.strip())
        self.assertEqual(0, result)
        self.assertTrue(stdout.startswith(f"tree {tree_id}\n"))
        self.assertTrue(stdout.endswith("\n\nInitial\n"))

    def test_pretty_tree_undecodable_name(self) -> None:
        tree = Tree()
        tree.add(b"caf\xe9", 0o100644, HELLO_BLOB_ID.encode("ascii"))
        self.repo.object_store.add_object(tree)
        with self.assertLogs("gitcas.cli", level="ERROR") as cm:
            result, stdout, _stderr = self._run_cli(
                "cat-file", "-p", tree.id.decode("ascii")
            )
        self.assertEqual(1, result)
        self.assertEqual("", stdout)
        self.assertIn("ObjectEncodingError", cm.output[0])

    def test_type_and_size(self) -> None:
        self.repo.object_store.put(b"blob", b"hello\n")
        _result, stdout, _stderr = self._run_cli("cat-file", "-t", HELLO_BLOB_ID)
        self.assertEqual("blob\n", stdout)
        _result, stdout, _stderr = self._run_cli("cat-file", "-s", HELLO_BLOB_ID)
        self.assertEqual("6\n", stdout)

    def test_missing_object(self) -> None:
        with self.assertLogs("gitcas.cli", level="ERROR") as cm:
            result, stdout, _stderr = self._run_cli("cat-file", "-p", HELLO_BLOB_ID)
        self.assertEqual(1, result)
        self.assertEqual("", stdout)
        self.assertEqual(
            [
                "ERROR:gitcas.cli:ObjectMissing: "
                f"{HELLO_BLOB_ID} is not in the object store"
            ],
            cm.output,
        )

    def test_binary_blob(self) -> None:
        sha = self.repo.object_store.put(b"blob", b"\xff\xfe").decode("ascii")
        with self.assertLogs("gitcas.cli", level="ERROR") as cm:
            result, stdout, _stderr = self._run_cli("cat-file", "-p", sha)
        self.assertEqual(1, result)
        self.assertEqual("", stdout)
        self.assertIn("ObjectEncodingError", cm.output[0])

    def test_corrupt_object(self) -> None:
        sha = self.repo.object_store.put(b"blob", b"hello\n")
        path = os.path.join(
            self.repo.object_store.path, sha[:2].decode(), sha[2:].decode()
        )
        os.chmod(path, 0o644)
        with open(path, "wb") as f:
            f.write(b"garbage")
        with self.assertLogs("gitcas.cli", level="ERROR") as cm:
            result, _stdout, _stderr = self._run_cli("cat-file", "-p", HELLO_BLOB_ID)
        self.assertEqual(1, result)
        self.assertIn("ObjectFormatException", cm.output[0])

    def test_requires_mode(self) -> None:
        self.assertRaises(SystemExit, self._run_cli, "cat-file", HELLO_BLOB_ID)


class LsTreeCommandTest(GitCasCliTestCase):
    """Tests for ls-tree command."""

    def setUp(self) -> None:
        super().setUp()
        self.write_file("file.txt", b"hello\n")
        os.mkdir(os.path.join(self.repo_path, "subdir"))
        self.tree_id = self.repo.write_tree().decode("ascii")

    def test_ls_tree(self) -> None:
        result, stdout, _stderr = self._run_cli("ls-tree", self.tree_id)
        self.assertEqual(0, result)
        self.assertEqual(
            f"100644 blob {HELLO_BLOB_ID}\tfile.txt\n"
            f"040000 tree {EMPTY_TREE_ID}\tsubdir\n",
            stdout,
        )

    def test_name_only(self) -> None:
        _result, stdout, _stderr = self._run_cli(
            "ls-tree", "--name-only", self.tree_id
        )
        self.assertEqual("file.txt\nsubdir\n", stdout)

    def test_not_a_tree(self) -> None:
        with self.assertLogs("gitcas.cli", level="ERROR") as cm:
            result, stdout, _stderr = self._run_cli("ls-tree", HELLO_BLOB_ID)
        self.assertEqual(1, result)
        self.assertEqual("", stdout)
        self.assertEqual(
            [f"ERROR:gitcas.cli:NotTreeError: {HELLO_BLOB_ID} is not a tree"],
            cm.output,
        )


class WriteTreeCommandTest(GitCasCliTestCase):
    """Tests for write-tree command."""

    def test_empty(self) -> None:
        result, stdout, _stderr = self._run_cli("write-tree")
        self.assertEqual(0, result)
        self.assertEqual(EMPTY_TREE_ID + "\n", stdout)

    def test_write_tree(self) -> None:
        self.write_file("test.txt", b"test")
        _result, stdout, _stderr = self._run_cli("write-tree")
        tree_id = stdout.strip()
        self.assertEqual(40, len(tree_id))
        self.assertEqual([b"test.txt"], list(self.repo.object_store[tree_id]))


class CommitTreeCommandTest(GitCasCliTestCase):
    """Tests for commit-tree command."""

    def test_commit_tree(self) -> None:
        result, stdout, _stderr = self._run_cli(
            "commit-tree", EMPTY_TREE_ID, "-m", "Initial"
        )
        self.assertEqual(0, result)
        commit = self.repo.object_store[stdout.strip()]
        self.assertEqual(EMPTY_TREE_ID.encode("ascii"), commit.tree)
        self.assertEqual(b"Initial", commit.message)
        self.assertEqual(b"Joe Example <joe@example.com>", commit.author)

    def test_with_parent(self) -> None:
        _result, stdout, _stderr = self._run_cli(
            "commit-tree", EMPTY_TREE_ID, "-m", "First"
        )
        first = stdout.strip()
        _result, stdout, _stderr = self._run_cli(
            "commit-tree", EMPTY_TREE_ID, "-p", first, "-m", "Second"
        )
        commit = self.repo.object_store[stdout.strip()]
        self.assertEqual([first.encode("ascii")], commit.parents)

    def test_requires_message(self) -> None:
        self.assertRaises(SystemExit, self._run_cli, "commit-tree", EMPTY_TREE_ID)

    def test_invalid_tree(self) -> None:
        with self.assertLogs("gitcas.cli", level="ERROR") as cm:
            result, _stdout, _stderr = self._run_cli(
                "commit-tree", "not-a-tree", "-m", "msg"
            )
        self.assertEqual(1, result)
        self.assertIn("ObjectFormatException", cm.output[0])

    def test_invalid_identity(self) -> None:
        self.overrideEnv("GIT_AUTHOR_EMAIL", "joe@example.com>\n")
        with self.assertLogs("gitcas.cli", level="ERROR") as cm:
            result, _stdout, _stderr = self._run_cli(
                "commit-tree", EMPTY_TREE_ID, "-m", "msg"
            )
        self.assertEqual(1, result)
        self.assertIn("InvalidUserIdentity", cm.output[0])


class HelpCommandTest(GitCasCliTestCase):
    """Tests for help command."""

    def test_help_all(self) -> None:
        with self.assertLogs("gitcas.cli", level="INFO") as cm:
            result, _stdout, _stderr = self._run_cli("help", "-a")
        self.assertEqual(0, result)
        output = "\n".join(cm.output)
        for cmd in cli.commands:
            self.assertIn(cmd, output)

    def test_unknown_command(self) -> None:
        with self.assertLogs("gitcas.cli", level="CRITICAL") as cm:
            result, _stdout, _stderr = self._run_cli("frobnicate")
        self.assertEqual(1, result)
        self.assertIn("No such subcommand: frobnicate", cm.output[0])

    def test_no_arguments(self) -> None:
        result, stdout, _stderr = self._run_cli()
        self.assertEqual(1, result)
        self.assertIn("usage: gitcas", stdout)
