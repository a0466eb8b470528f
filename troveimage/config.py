"""Resolve the build configuration from flags, environment and defaults."""

import getpass
import logging
import os
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterator, List, Tuple
from troveimage.shell import IpRoute
from troveimage._validation import config

log = logging.getLogger(__name__)

QEMU_IMG_OPTIONS = "--qemu-img-options compat=1.1"
DIB_CLOUD_INIT_DATASOURCES = "ConfigDrive"


def escape_path(path: str) -> str:
    """Escape every '/' in `path` for use in a sed replacement."""

    return path.replace("/", "\\/")


def _elements_path(cfg: Dict[str, str]) -> str:
    return ":".join(
        [
            cfg["PATH_DIB_ELEMENTS"],
            os.path.join(cfg["PATH_TRIPLEO_ELEMENTS"], "elements"),
        ]
    )


def _build_name(cfg: Dict[str, str]) -> str:
    return "-".join([cfg["DISTRO"], cfg["DIB_RELEASE"], cfg["SERVICE_TYPE"]])


# Settable fields, in dependency order. Each default is called with the
# fields resolved so far.
_SETTABLE: List[Tuple[str, Callable[[Dict[str, str]], str]]] = [
    ("WORKSPACE", lambda cfg: os.path.expanduser("~/workspace")),
    ("HOST_USERNAME", lambda cfg: getpass.getuser()),
    ("HOST_SCP_USERNAME", lambda cfg: getpass.getuser()),
    ("GUEST_USERNAME", lambda cfg: "ubuntu"),
    ("CONTROLLER_IP", lambda cfg: IpRoute.source_address()),
    ("PATH_TROVE", lambda cfg: os.path.join(cfg["WORKSPACE"], "trove")),
    ("SSH_DIR", lambda cfg: os.path.expanduser("~/.ssh")),
    ("GUEST_LOGDIR", lambda cfg: "/var/log/trove/"),
    (
        "PATH_TRIPLEO_ELEMENTS",
        lambda cfg: os.path.join(cfg["WORKSPACE"], "tripleo-image-elements"),
    ),
    (
        "PATH_DIB_ELEMENTS",
        lambda cfg: os.path.join(
            cfg["PATH_TROVE"], "integration", "scripts", "files", "elements"
        ),
    ),
    ("ELEMENTS_PATH", _elements_path),
    ("DISTRO", lambda cfg: "ubuntu"),
    ("DIB_RELEASE", lambda cfg: "xenial"),
    ("SERVICE_TYPE", lambda cfg: "mariadb"),
    ("EXTRA_ELEMENTS", lambda cfg: ""),
    ("IMAGE_FORMAT", lambda cfg: "qcow2"),
    (
        "VM",
        lambda cfg: os.path.join(
            cfg["WORKSPACE"], "images", _build_name(cfg), _build_name(cfg)
        ),
    ),
    ("LOG_DIR", lambda cfg: os.path.join(cfg["WORKSPACE"], "logs")),
    ("DISK_IMAGE_CREATE", lambda cfg: "disk-image-create"),
]

# Always computed, never read from flags or the environment.
_DERIVED: List[Tuple[str, Callable[[Dict[str, str]], str]]] = [
    ("ESCAPED_PATH_TROVE", lambda cfg: escape_path(cfg["PATH_TROVE"])),
    ("ESCAPED_GUEST_LOGDIR", lambda cfg: escape_path(cfg["GUEST_LOGDIR"])),
    (
        "LOG_FILE",
        lambda cfg: os.path.join(cfg["LOG_DIR"], f"dib-{_build_name(cfg)}.log"),
    ),
    ("QEMU_IMG_OPTIONS", lambda cfg: QEMU_IMG_OPTIONS),
    ("DIB_CLOUD_INIT_DATASOURCES", lambda cfg: DIB_CLOUD_INIT_DATASOURCES),
]

SETTABLE_FIELDS = [name for name, _ in _SETTABLE]


class BuildConfig(Mapping):
    """
    The build configuration contains every variable `disk-image-create` and
    the trove elements need to build a guest image.

    It is a read-only mapping of upper-case variable names to strings. Use
    `BuildConfig.resolve()` to fill it from flags, the environment and
    defaults.
    """

    def __init__(self, cfg: Dict[str, str], check: bool = True):
        """
        Load configuration and validate.

        # Params

          - cfg (dict): See class docstring.
          - check (bool): If true run validation. Only useful in testing.
        """

        self._cfg = dict(cfg)

        if check:
            self._validate()

    @classmethod
    def resolve(
        cls,
        overrides: Dict[str, str] | None = None,
        environ: Mapping | None = None,
        check: bool = True,
    ):
        """
        Resolve every field.

        A field comes from `overrides` (the command line flags) if present,
        then from `environ` if set and not empty, then from its default.

        # Params

          - overrides (dict): Field values given on the command line.
          - environ (Mapping): The environment. Defaults to `os.environ`.
          - check (bool): If true run validation.
        """

        if overrides is None:
            overrides = {}

        if environ is None:
            environ = os.environ

        cfg = {}

        for name, default in _SETTABLE:
            value = overrides.get(name)
            source = "command line"

            if value is None and environ.get(name):
                value = environ[name]
                source = "environment"

            if value is None:
                value = default(cfg)
                source = "default"

            log.debug("%s=%s (%s)", name, value, source)
            cfg[name] = value

        for name, derive in _DERIVED:
            cfg[name] = derive(cfg)

        return cls(cfg=cfg, check=check)

    def _validate(self) -> None:
        """Does JSON object validation."""

        config.check(self._cfg)

    def __getitem__(self, key: str) -> str:
        return self._cfg[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._cfg)

    def __len__(self) -> int:
        return len(self._cfg)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._cfg!r})"

    @property
    def extra_elements(self) -> List[str]:
        """The space separated EXTRA_ELEMENTS as a list."""

        return self._cfg.get("EXTRA_ELEMENTS", "").split()

    @property
    def image_options(self) -> List[str]:
        """QEMU_IMG_OPTIONS as a list of arguments."""

        return self._cfg.get("QEMU_IMG_OPTIONS", "").split()

    def environment(self, base: Mapping | None = None) -> Dict[str, Any]:
        """
        Return the environment for `disk-image-create`: `base` (defaults to
        `os.environ`) with every field of the configuration exported.
        """

        env = dict(os.environ if base is None else base)
        env.update(self._cfg)

        return env
