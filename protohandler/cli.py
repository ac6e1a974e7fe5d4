from __future__ import annotations

import argparse
import json
import sys
from typing import Sequence

from protohandler import __version__
from protohandler.core.config import get_runtime_config
from protohandler.core.errors import ProtoHandlerError, format_error
from protohandler.core.installer import ProtocolInstaller
from protohandler.core.logging import configure_logging
from protohandler.core.paths import DEFAULT_PROTOCOL
from protohandler.core.pipeline import ActivationPipeline
from protohandler.core.settings import SettingsDefaults, SettingsResolver
from protohandler.domain.activation import ActivationRequest


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="protohandler",
        description="Run a script when the OS hands over a custom-scheme URI.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Print version and exit.",
    )
    parser.add_argument(
        "uri",
        nargs="?",
        default="",
        help="The percent-encoded URI supplied by the operating system.",
    )
    parser.add_argument(
        "-i",
        "--install",
        action="store_true",
        help="Install a protocol handler and write default settings.",
    )
    parser.add_argument(
        "-p",
        "--protocol",
        default="",
        help=f"The name of the protocol (default: {DEFAULT_PROTOCOL}).",
    )
    parser.add_argument(
        "-s",
        "--settings",
        default="",
        help="The settings file to use.",
    )
    parser.add_argument(
        "-l",
        "--log",
        default="",
        help="An existing file to log output to.",
    )
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Print resolved runtime config and settings to stdout.",
    )
    return parser


def parse_request(
    parser: argparse.ArgumentParser,
    argv: Sequence[str] | None = None,
) -> tuple[argparse.Namespace, ActivationRequest]:
    args = parser.parse_args(argv)
    activation = [
        flag
        for flag, value in (
            ("uri", args.uri),
            ("--settings", args.settings),
            ("--log", args.log),
        )
        if value
    ]
    installation = [
        flag
        for flag, value in (
            ("--install", args.install),
            ("--protocol", args.protocol),
        )
        if value
    ]
    if activation and installation:
        parser.error(
            f"{', '.join(installation)} cannot be combined with {', '.join(activation)}"
        )
    request = ActivationRequest(
        uri=args.uri,
        install=args.install,
        protocol=args.protocol,
        settings_path=args.settings,
        log_path=args.log,
    )
    return args, request


def handle_print_config(defaults: SettingsDefaults, request: ActivationRequest) -> None:
    resolver = SettingsResolver(defaults)
    settings = resolver.load(request.settings_path or None)
    payload = {
        "runtime": get_runtime_config().model_dump(mode="json"),
        "settings_path": request.settings_path or str(defaults.settings_file),
        "settings": {
            "LogFile": str(settings.log_file),
            "ScriptPath": str(settings.script_path),
        },
    }
    print(json.dumps(payload, indent=2))


def handle_install(defaults: SettingsDefaults, request: ActivationRequest) -> None:
    installer = ProtocolInstaller(defaults, request.protocol)
    for path in installer.run():
        print(f"Wrote {path}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args, request = parse_request(parser, argv)

    config = get_runtime_config()
    configure_logging(level=config.log_level, format_name=config.log_format)
    defaults = SettingsDefaults.for_platform(config.home)

    try:
        if args.print_config:
            handle_print_config(defaults, request)
            return 0

        if request.install:
            handle_install(defaults, request)
            return 0

        if not request.uri:
            parser.print_usage(sys.stderr)
            return 2

        ActivationPipeline(defaults).run(request)
    except ProtoHandlerError as exc:
        message, _severity = format_error(exc)
        raise SystemExit(message) from exc
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
