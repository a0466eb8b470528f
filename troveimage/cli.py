"""Command line options for the guest image launcher."""

import argparse
import logging
from types import MappingProxyType
from typing import List, Mapping, NamedTuple, Sequence
from troveimage.exceptions import (
    MissingArgumentError,
    UnexpectedOptionError,
    UsageError,
)

log = logging.getLogger(__name__)

END_OF_OPTIONS = "--"

SWITCHES = ["-h", "--help", "--debug"]

# (flag, configuration name, metavar, help)
VALUE_OPTIONS = [
    (
        "--workspace",
        "WORKSPACE",
        "DIR",
        "Base directory for sources, images and logs.",
    ),
    (
        "--datastore",
        "SERVICE_TYPE",
        "NAME",
        "Datastore the guest will run. Defaults to mariadb.",
    ),
    ("--distro", "DISTRO", "NAME", "Guest distribution. Defaults to ubuntu."),
    (
        "--distro-release",
        "DIB_RELEASE",
        "NAME",
        "Guest distribution release. Defaults to xenial.",
    ),
    (
        "--controller-ip",
        "CONTROLLER_IP",
        "IP",
        "Controller address. Detected from the default route if not given.",
    ),
    (
        "--extra-elements",
        "EXTRA_ELEMENTS",
        "LIST",
        "Space separated elements to add after the trove elements.",
    ),
    ("--log-dir", "LOG_DIR", "DIR", "Directory for the build log."),
    ("--output", "VM", "PATH", "Path of the image to build."),
]


class Options(NamedTuple):
    """Parsed command line."""

    help: bool = False
    debug: bool = False
    overrides: Mapping[str, str] = MappingProxyType({})
    passthrough: Sequence[str] = ()


def _parser() -> argparse.ArgumentParser:
    """The argument parser. Option values land on configuration names."""

    parser = argparse.ArgumentParser(
        prog="trove-image-build",
        description=(
            "Build a Trove guest image with diskimage-builder. Every setting "
            "can also be given as an environment variable named like the "
            "value in parentheses."
        ),
        epilog=(
            "Arguments after '--' are passed to disk-image-create as they "
            "are."
        ),
        add_help=False,
        allow_abbrev=False,
        exit_on_error=False,
    )

    parser.add_argument(
        "-h", "--help", action="store_true", help="Show this help and exit."
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log debugging information and trace the image builder.",
    )

    for flag, name, metavar, description in VALUE_OPTIONS:
        parser.add_argument(
            flag, dest=name, metavar=metavar, help=f"{description} ({name})"
        )

    return parser


def usage() -> str:
    """Return the help text."""

    return _parser().format_help()


def _flag(token: str) -> str:
    """'--flag=value' -> '--flag'"""

    return token.split("=", 1)[0]


def parse_args(argv: List[str]) -> Options:
    """
    Parse the command line `argv` (without the program name).

    Raises UnexpectedOptionError for unknown options and MissingArgumentError
    for options given without a value, or followed by another option instead
    of a value.
    """

    if END_OF_OPTIONS in argv:
        index = argv.index(END_OF_OPTIONS)
        argv, passthrough = argv[:index], argv[index + 1 :]
    else:
        passthrough = []

    # argparse takes '-1' as a value and '-hx' as '-h x', options never do.
    value_flags = [flag for flag, _, _, _ in VALUE_OPTIONS]
    for index, token in enumerate(argv):
        if token in value_flags:
            following = argv[index + 1] if index + 1 < len(argv) else None
            if following is None or following.startswith("-"):
                raise MissingArgumentError(token)
        elif token.startswith("-") and token not in SWITCHES:
            if "=" not in token or _flag(token) not in value_flags:
                raise UnexpectedOptionError(_flag(token))

    parser = _parser()

    try:
        namespace, extras = parser.parse_known_args(argv)
    except argparse.ArgumentError as err:
        if err.argument_name and "expected one argument" in err.message:
            raise MissingArgumentError(err.argument_name) from err
        raise UsageError(str(err)) from err

    for token in extras:
        if token.startswith("-"):
            raise UnexpectedOptionError(_flag(token))

    args = vars(namespace)
    help_requested = args.pop("help")
    debug = args.pop("debug")

    overrides = {
        name: value for name, value in args.items() if value is not None
    }

    return Options(
        help=help_requested,
        debug=debug,
        overrides=overrides,
        passthrough=extras + passthrough,
    )
