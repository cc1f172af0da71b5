"""Command-line interface for drupal-config-sync.

Every command is non-interactive.  Command output goes to stdout; log
records and error messages go to stderr.  Any ``ConfigSyncError`` (or
invalid input) ends the run with exit code 1 and a one-line message.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from . import __version__
from .config import Config, load_config
from .config_loader import load_hierarchical_config
from .config_schema import build_config
from .errors import ConfigSyncError
from .logger import setup_logging
from .sync.engine import ConfigSynchronizer, sync_project
from .sync.extensions import (
    RECOMMENDED_MODULES,
    check_recommended_modules,
    enable_modules,
    parse_enabled_modules,
    read_extension_config,
)
from .sync.permissions import (
    ALL_PERMISSIONS,
    NO_PERMISSIONS,
    decode_permission,
    expand_short_permissions,
    get_short_permission_names,
)
from .sync.reporter import format_sync_report, report_to_json
from .sync.roles import (
    apply_short_permissions,
    get_role_summary,
    load_role,
    save_role,
)
from .sync.state import ProjectStore
from .validators import validate_entity_type, validate_machine_name

logger = logging.getLogger(__name__)


class CommandError(ConfigSyncError):
    """Invalid command-line input."""


def _require(result: tuple[bool, str]) -> None:
    is_valid, message = result
    if not is_valid:
        raise CommandError(message)


def _config_directory(args: argparse.Namespace, config: Config) -> str:
    directory = getattr(args, "config_dir", None) or config.config_directory
    if not directory:
        raise CommandError(
            "No configuration directory given. Pass CONFIG_DIR, set "
            "DRUPAL_CONFIG_DIR, or add 'sync.config_directory' to config.yml."
        )
    return str(Path(directory).expanduser())


def _synchronizer(config: Config) -> ConfigSynchronizer:
    return ConfigSynchronizer(
        include_base_field_overrides=config.include_base_field_overrides,
        max_parallel_reads=config.max_parallel_reads,
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def cmd_sync(args: argparse.Namespace, config: Config) -> int:
    directory = _config_directory(args, config)
    synchronizer = _synchronizer(config)

    if args.project:
        store = ProjectStore(Path(config.projects_dir).expanduser())
        if store.exists(args.project):
            project = store.load(args.project)
        else:
            logger.info("Creating project record %s", args.project)
            project = {"slug": args.project}
        project["config_directory"] = directory

        summary = await sync_project(project, store, synchronizer)
        if args.json:
            print(json.dumps(summary.model_dump(), indent=2))
        else:
            print(
                f"Saved project {args.project}: {summary.total_bundles} "
                f"bundles, {summary.total_fields} fields"
            )
        return 0

    report = await synchronizer.run(directory)
    if args.json:
        print(json.dumps(report_to_json(report), indent=2))
    else:
        print(format_sync_report(report, verbose=args.verbose))
    return 0


async def cmd_modules(args: argparse.Namespace, config: Config) -> int:
    directory = _config_directory(args, config)

    to_enable = list(args.enable or [])
    if args.recommended:
        to_enable.extend(m for m in RECOMMENDED_MODULES if m not in to_enable)

    if not to_enable:
        status = await check_recommended_modules(directory)
        print(f"Enabled modules: {len(status['enabled_modules'])}")
        if status["missing_modules"]:
            print(
                "Missing recommended modules: "
                + ", ".join(status["missing_modules"])
            )
        else:
            print("All recommended modules are enabled")
        return 0

    for name in to_enable:
        _require(validate_machine_name(name, "Module name"))

    before = set(parse_enabled_modules(await read_extension_config(directory)))
    await enable_modules(directory, to_enable)
    added = [m for m in to_enable if m not in before]
    if added:
        print("Enabled: " + ", ".join(added))
    else:
        print("Nothing to enable")
    return 0


async def cmd_permissions_decode(
    args: argparse.Namespace, config: Config
) -> int:
    for key in args.keys:
        descriptor = decode_permission(key)
        if descriptor is None:
            print(f"{key}\t-")
        else:
            print(
                f"{key}\t{descriptor.entity_type.value}\t"
                f"{descriptor.bundle}\t{descriptor.short_name}"
            )
    return 0


def _check_short_names(entity_type: str, short_names: list[str]) -> None:
    known = get_short_permission_names(entity_type)
    unknown = [
        n
        for n in short_names
        if n not in known and n not in (ALL_PERMISSIONS, NO_PERMISSIONS)
    ]
    if unknown:
        raise CommandError(
            f"Unknown {entity_type} permission(s): {', '.join(unknown)} "
            f"(expected one of: {', '.join(known) or '-'}, "
            f"{ALL_PERMISSIONS}, {NO_PERMISSIONS})"
        )


async def cmd_permissions_encode(
    args: argparse.Namespace, config: Config
) -> int:
    _require(validate_entity_type(args.entity_type))
    _require(validate_machine_name(args.bundle, "Bundle"))
    _check_short_names(args.entity_type, args.short_names)

    for key in expand_short_permissions(
        args.entity_type, args.bundle, args.short_names
    ):
        print(key)
    return 0


async def cmd_role_grant(args: argparse.Namespace, config: Config) -> int:
    directory = _config_directory(args, config)
    _require(validate_machine_name(args.role, "Role"))
    _require(validate_entity_type(args.entity_type))
    _require(validate_machine_name(args.bundle, "Bundle"))
    _check_short_names(args.entity_type, args.short_names)

    role = await load_role(directory, args.role)
    if role is None:
        raise CommandError(f"Role '{args.role}' not found in {directory}")

    role = apply_short_permissions(
        role, args.entity_type, args.bundle, args.short_names
    )
    await save_role(directory, role)

    summary = get_role_summary(role)
    print(
        f"Updated role {role.id}: {summary['total_permissions']} permissions "
        f"({summary['content_permissions']} content)"
    )
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drupal-config-sync",
        description="Index and edit a Drupal configuration export directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Index the export and print a summary
  drupal-config-sync sync config/sync

  # Store the index in a project record
  drupal-config-sync sync config/sync --project intranet

  # Enable the recommended content modules
  drupal-config-sync modules config/sync --recommended

  # Grant editors every permission on the article content type
  drupal-config-sync role grant config/sync editor node article all

The configuration directory may also come from DRUPAL_CONFIG_DIR or
'sync.config_directory' in .drupal_config_sync/config.yml.
        """,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging and detailed output",
    )
    parser.add_argument("--log-file", help="Also write log records to this file")
    parser.add_argument(
        "--debug-format",
        choices=("text", "json"),
        default="text",
        help="Log record format (default: text)",
    )
    parser.add_argument(
        "--projects-dir",
        help="Directory holding project records "
        "(takes precedence over DRUPAL_PROJECTS_DIR and config files)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"drupal-config-sync version {__version__}",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    sync = commands.add_parser("sync", help="Index bundles and fields")
    sync.add_argument("config_dir", nargs="?", metavar="CONFIG_DIR")
    sync.add_argument(
        "--project", metavar="SLUG", help="Save the index in a project record"
    )
    sync.add_argument("--json", action="store_true", help="Print JSON output")
    sync.set_defaults(handler=cmd_sync)

    modules = commands.add_parser("modules", help="Check or enable modules")
    modules.add_argument("config_dir", nargs="?", metavar="CONFIG_DIR")
    modules.add_argument(
        "--enable", nargs="+", metavar="NAME", help="Modules to enable"
    )
    modules.add_argument(
        "--recommended",
        action="store_true",
        help="Enable every recommended content module",
    )
    modules.set_defaults(handler=cmd_modules)

    permissions = commands.add_parser(
        "permissions", help="Translate permission keys"
    )
    perm_commands = permissions.add_subparsers(dest="action", required=True)

    decode = perm_commands.add_parser("decode", help="Decode permission keys")
    decode.add_argument("keys", nargs="+", metavar="KEY")
    decode.set_defaults(handler=cmd_permissions_decode)

    encode = perm_commands.add_parser("encode", help="Encode short names")
    encode.add_argument("entity_type", metavar="ENTITY_TYPE")
    encode.add_argument("bundle", metavar="BUNDLE")
    encode.add_argument("short_names", nargs="+", metavar="SHORT")
    encode.set_defaults(handler=cmd_permissions_encode)

    role = commands.add_parser("role", help="Edit role permissions")
    role_commands = role.add_subparsers(dest="action", required=True)

    grant = role_commands.add_parser(
        "grant", help="Set a role's permissions on one bundle"
    )
    grant.add_argument("config_dir", metavar="CONFIG_DIR")
    grant.add_argument("role", metavar="ROLE")
    grant.add_argument("entity_type", metavar="ENTITY_TYPE")
    grant.add_argument("bundle", metavar="BUNDLE")
    grant.add_argument("short_names", nargs="+", metavar="SHORT")
    grant.set_defaults(handler=cmd_role_grant)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the selected command and return the exit code."""
    args = build_parser().parse_args(argv)

    # .env values must be visible before YAML interpolation and env lookups
    load_dotenv()

    try:
        unified = build_config(load_hierarchical_config())
        config = load_config(
            projects_dir=args.projects_dir,
            yaml_fallbacks=unified.sync.model_dump(),
            logging_fallbacks=unified.logging.model_dump(),
        )
    except (OSError, ValueError) as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        return 1

    setup_logging(
        debug=args.verbose,
        log_file=args.log_file or config.log_file,
        debug_format=args.debug_format,
        level=config.log_level,
    )

    try:
        return asyncio.run(args.handler(args, config))
    except (ConfigSyncError, ValueError, FileNotFoundError) as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
