"""Pre-flight check for the relay's ``.env`` file.

``check`` loads the relay settings from the file and fails on missing
provider credentials or a DynamoDB backend without a table. ``record`` and
``verify`` additionally pin the file's SHA-256 so a rotated client secret
or an edited redirect URI does not slip into a deploy unnoticed::

    python -m scripts.check_env record --env-file .env --hash-file .env.sha256
    python -m scripts.check_env verify --env-file .env --hash-file .env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from oauth_relay.core.config import AppSettings, _load_env_file

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5


class IncompleteConfigurationError(Exception):
    """The settings parse but the selected store cannot be built from them."""


def _sha256(env_file: Path) -> str:
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _load_relay_settings(env_file: Path) -> AppSettings:
    _load_env_file(str(env_file))
    settings = AppSettings(_env_file=env_file)  # type: ignore[call-arg]
    store = settings.store
    if store.backend == "dynamodb" and not store.dynamodb_table_name:
        raise IncompleteConfigurationError(
            "STORE_BACKEND=dynamodb requires DYNAMODB_TABLE_NAME."
        )
    return settings


def _pin(env_file: Path, hash_file: Path) -> int:
    digest = _sha256(env_file)
    hash_file.write_text(f"{digest}\n", encoding="utf-8")
    print(f"Pinned {env_file} at {digest}")
    return EXIT_OK


def _compare(env_file: Path, hash_file: Path) -> int:
    if not hash_file.exists():
        print(f"No pinned digest at {hash_file}; run 'record' first.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    pinned = hash_file.read_text(encoding="utf-8").strip()
    current = _sha256(env_file)
    if pinned != current:
        print(
            f"{env_file} changed since it was pinned "
            f"(pinned {pinned}, now {current}).",
            file=sys.stderr,
        )
        return EXIT_CHECKSUM_ERROR
    print(f"{env_file} matches its pinned digest.")
    return EXIT_OK


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check the relay's .env file.")
    commands = parser.add_subparsers(dest="command", required=True)

    for name, help_text, pinned in (
        ("check", "load the settings only", False),
        ("record", "load the settings and pin the file digest", True),
        ("verify", "load the settings and compare with the pinned digest", True),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("--env-file", type=Path, default=Path(".env"))
        if pinned:
            command.add_argument("--hash-file", type=Path, required=True)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    env_file: Path = args.env_file

    if not env_file.exists():
        print(f"{env_file} not found.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        _load_relay_settings(env_file)
    except ValidationError as exc:
        print(f"Invalid relay settings:\n{exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    except IncompleteConfigurationError as exc:
        print(f"Invalid relay settings: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Could not load relay settings: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    commands: dict[str, Callable[[], int]] = {
        "check": lambda: EXIT_OK,
        "record": lambda: _pin(env_file, args.hash_file),
        "verify": lambda: _compare(env_file, args.hash_file),
    }
    return commands[args.command]()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
