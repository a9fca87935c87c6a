# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# DOKKEN TRANSPORT - COMMAND LINE
# -----------------------------------------------------------------------------
# Thin glue over DokkenTransport for running it by hand:
# - exec INSTANCE COMMAND: run a command and checkpoint the container
# - upload INSTANCE REMOTE LOCAL...: rsync files into the container
# - login INSTANCE: print the interactive login command
# -----------------------------------------------------------------------------

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from src.core.config import CONFIG_PATH, ConfigurationError, load_config
from src.core.connection import DockerExecFailed
from src.core.transport import DokkenTransport
from src.infra.docker_client import RuntimeAdapterError
from src.infra.rsync_client import TransferError

console = Console()


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="dokken",
        description="Run commands in and sync files into kitchen containers",
    )
    ap.add_argument(
        "--config",
        type=Path,
        default=CONFIG_PATH,
        help="Transport configuration YAML",
    )
    sub = ap.add_subparsers(dest="action", required=True)

    p_exec = sub.add_parser("exec", help="Run a command and commit the container")
    p_exec.add_argument("instance", help="Container name")
    p_exec.add_argument("command", help="Command line, split with POSIX shell rules")

    p_upload = sub.add_parser("upload", help="Copy local paths into the container")
    p_upload.add_argument("instance", help="Container name")
    p_upload.add_argument("remote", help="Destination path inside the container")
    p_upload.add_argument("locals", nargs="+", help="Local files or directories")

    p_login = sub.add_parser("login", help="Print the interactive login command")
    p_login.add_argument("instance", help="Container name")

    return ap


def run(args: argparse.Namespace, transport: DokkenTransport) -> int:
    """Dispatch one parsed command. Returns the process exit status."""
    state = {"instance_name": args.instance}

    if args.action == "exec":
        transport.connection(state, lambda conn: conn.execute(args.command))

    elif args.action == "upload":
        state["kitchen_container"] = transport.inspect_container(state)
        transport.connection(state, lambda c: c.upload(args.locals, args.remote))

    elif args.action == "login":
        print(transport.connection(state).login_command())

    return 0


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        transport = DokkenTransport(load_config(args.config))
        try:
            return run(args, transport)
        finally:
            transport.close()
    except DockerExecFailed as e:
        console.print(f"[red][DOKKEN] {escape(str(e))}[/red]")
        return e.exit_code
    except (ConfigurationError, RuntimeAdapterError, TransferError) as e:
        console.print(f"[red][DOKKEN] {escape(str(e))}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
