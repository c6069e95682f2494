# cli.py -- Command-line interface for gitcas
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

"""Simple command-line interface to gitcas.

This is a small command-line wrapper around the gitcas object store. It
offers the plumbing needed to store files, trees and commits and to read
them back; it is not a replacement for git.
"""

__all__ = [
    "Command",
    "commands",
    "main",
]

import argparse
import logging
import os
import sys
from collections.abc import Sequence

from . import porcelain
from .errors import GitCasError
from .file import FileLocked
from .log_utils import default_logging_config
from .objects import Blob, Tree

logger = logging.getLogger(__name__)


class Command:
    """A gitcas subcommand."""

    def run(self, args: Sequence[str]) -> int | None:
        """Run the command."""
        raise NotImplementedError(self.run)


class cmd_init(Command):
    """Create an empty repository."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the init command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitcas init")
        parser.add_argument(
            "path", nargs="?", default=os.getcwd(), help="Repository path"
        )
        parsed_args = parser.parse_args(args)

        repo = porcelain.init(parsed_args.path)
        repo.close()
        logger.info(
            "Initialized empty Git repository in %s",
            os.path.abspath(repo.controldir()),
        )


class cmd_hash_object(Command):
    """Compute the object id of a file and optionally store it."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the hash-object command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitcas hash-object")
        parser.add_argument(
            "-w",
            dest="write",
            action="store_true",
            help="Write the object into the object store",
        )
        parser.add_argument(
            "-t",
            dest="type",
            default="blob",
            choices=["blob", "tree", "commit"],
            help="Type of object to create",
        )
        parser.add_argument("file", help="File to read the object contents from")
        parsed_args = parser.parse_args(args)
        sha = porcelain.hash_object(
            "." if parsed_args.write else None,
            parsed_args.file,
            write=parsed_args.write,
            object_type=parsed_args.type,
        )
        sys.stdout.write(f"{sha.decode('ascii')}\n")


class cmd_cat_file(Command):
    """Provide content, type or size of a stored object."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the cat-file command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitcas cat-file")
        mode = parser.add_mutually_exclusive_group(required=True)
        mode.add_argument(
            "-p", dest="pretty", action="store_true", help="Pretty-print the object"
        )
        mode.add_argument(
            "-t", dest="type", action="store_true", help="Show the object type"
        )
        mode.add_argument(
            "-s", dest="size", action="store_true", help="Show the object size"
        )
        parser.add_argument("object", help="Id of the object")
        parsed_args = parser.parse_args(args)

        with porcelain.open_repo_closing(".") as repo:
            if parsed_args.type:
                type_name = porcelain.object_type(repo, parsed_args.object)
                sys.stdout.write(f"{type_name.decode('ascii')}\n")
            elif parsed_args.size:
                size = porcelain.object_size(repo, parsed_args.object)
                sys.stdout.write(f"{size}\n")
            else:
                kind = porcelain.object_type(repo, parsed_args.object)
                if kind == Blob.type_name:
                    sys.stdout.write(porcelain.cat_blob(repo, parsed_args.object))
                elif kind == Tree.type_name:
                    porcelain.ls_tree(repo, parsed_args.object, outstream=sys.stdout)
                else:
                    sys.stdout.write(porcelain.cat_commit(repo, parsed_args.object))


class cmd_ls_tree(Command):
    """List the contents of a tree object."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the ls-tree command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitcas ls-tree")
        parser.add_argument(
            "--name-only", action="store_true", help="Only display name."
        )
        parser.add_argument("tree", help="Id of the tree to list")
        parsed_args = parser.parse_args(args)
        porcelain.ls_tree(
            ".",
            parsed_args.tree,
            outstream=sys.stdout,
            name_only=parsed_args.name_only,
        )


class cmd_write_tree(Command):
    """Create a tree object from the working directory."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the write-tree command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitcas write-tree")
        parser.parse_args(args)
        sys.stdout.write("{}\n".format(porcelain.write_tree(".").decode()))


class cmd_commit_tree(Command):
    """Create a new commit object from a tree."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the commit-tree command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitcas commit-tree")
        parser.add_argument("--message", "-m", required=True, help="Commit message")
        parser.add_argument(
            "-p",
            dest="parents",
            action="append",
            default=[],
            help="Id of a parent commit",
        )
        parser.add_argument("tree", help="Tree SHA to commit")
        parsed_args = parser.parse_args(args)
        sha = porcelain.commit_tree(
            ".",
            tree=parsed_args.tree,
            message=parsed_args.message,
            parents=parsed_args.parents,
        )
        sys.stdout.write(f"{sha.decode('ascii')}\n")


class cmd_help(Command):
    """Display help information."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the help command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitcas help")
        parser.add_argument(
            "-a",
            "--all",
            action="store_true",
            help="List all commands.",
        )
        parsed_args = parser.parse_args(args)

        if parsed_args.all:
            logger.info("Available commands:")
            for cmd in sorted(commands):
                logger.info("  %s", cmd)
        else:
            logger.info(
                "gitcas stores files, trees and commits as git objects.\n"
                "\n"
                "For a list of supported commands, see 'gitcas help -a'."
            )


commands: dict[str, type[Command]] = {
    "cat-file": cmd_cat_file,
    "commit-tree": cmd_commit_tree,
    "hash-object": cmd_hash_object,
    "help": cmd_help,
    "init": cmd_init,
    "ls-tree": cmd_ls_tree,
    "write-tree": cmd_write_tree,
}


def main(argv: Sequence[str] | None = None) -> int | None:
    """Main entry point for the gitcas CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(
        prog="gitcas",
        description="Simple command-line interface to gitcas",
    )
    parser.add_argument(
        "command",
        help=f"Command to run. Available: {', '.join(sorted(commands))}",
    )
    if not argv:
        parser.print_help()
        return 1
    parsed_args = parser.parse_args(argv[:1])

    default_logging_config()

    try:
        cmd_kls = commands[parsed_args.command]
    except KeyError:
        logger.fatal("No such subcommand: %s", parsed_args.command)
        return 1
    try:
        ret = cmd_kls().run(argv[1:])
    except FileLocked as e:
        logger.error("%s: %s is locked", type(e).__name__, e.filename)
        return 1
    except (GitCasError, OSError) as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    return ret or 0


def _main() -> None:
    sys.exit(main())


if __name__ == "__main__":
    _main()
