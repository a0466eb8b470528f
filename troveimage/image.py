"""
This module concerns the guest images that will be built by troveimage.
"""

import logging
import os
import shlex
import sys
import termios
import tty
from typing import List, TextIO
from troveimage.config import BuildConfig
from troveimage.shell import DiskImageCreate

log = logging.getLogger(__name__)

SEPARATOR = "=" * 79


def read_key(stream: TextIO) -> str:
    """
    Read a single keystroke from `stream`, without waiting for a newline when
    `stream` is a terminal. Returns an empty string at end of input.
    """

    if not stream.isatty():
        return stream.read(1)

    fd = stream.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        return os.read(fd, 1).decode("utf-8", errors="replace")
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


class GuestImage:
    """Trove guest image, built by `disk-image-create`."""

    ARCH = "amd64"

    def __init__(
        self,
        cfg: BuildConfig,
        passthrough: List[str] | None = None,
        debug: bool = False,
    ):
        """
        Init.

        # Params

          - cfg (BuildConfig): The resolved build configuration.
          - passthrough (list): Arguments handed to `disk-image-create`
            as they are.
          - debug (bool): Turn on tracing in `disk-image-create`.
        """

        self._cfg = cfg
        self._passthrough = [] if passthrough is None else list(passthrough)
        self._debug = debug

    @property
    def elements(self) -> List[str]:
        """The elements the image is built from, in order."""

        distro = self._cfg["DISTRO"]
        release = self._cfg["DIB_RELEASE"]
        service_type = self._cfg["SERVICE_TYPE"]

        elements = [
            distro,
            "vm",
            "cloud-init-datasources",
            f"{distro}-{release}-guest",
            f"{distro}-{release}-{service_type}",
        ]
        elements.extend(self._cfg.extra_elements)

        return elements

    @property
    def command(self) -> List[str]:
        """The `disk-image-create` command line."""

        return DiskImageCreate.command(
            output=self._cfg["VM"],
            elements=self.elements,
            image_format=self._cfg["IMAGE_FORMAT"],
            arch=self.ARCH,
            image_options=self._cfg.image_options,
            extra_args=self._passthrough,
            executable=self._cfg["DISK_IMAGE_CREATE"],
            trace=self._debug,
        )

    def summary(self) -> str:
        """Every configuration value, then the command that will run."""

        lines = [SEPARATOR]
        lines.extend(f"{name}={value}" for name, value in self._cfg.items())
        lines.append(SEPARATOR)
        lines.append(shlex.join(self.command))

        return "\n".join(lines)

    @staticmethod
    def confirm(
        stdin: TextIO | None = None, stdout: TextIO | None = None
    ) -> bool:
        """Ask whether to build. Only 'y' or 'Y' is a yes."""

        stdin = sys.stdin if stdin is None else stdin
        stdout = sys.stdout if stdout is None else stdout

        stdout.write("Build the image with these settings? [y/N] ")
        stdout.flush()

        answer = read_key(stdin)
        stdout.write("\n")

        return answer.lower() == "y"

    def build(self, stream: TextIO | None = None) -> None:
        """
        Run `disk-image-create`, echoing its output to `stream` and appending
        it to the log file.
        """

        log_dir = self._cfg["LOG_DIR"]
        log_file = self._cfg["LOG_FILE"]

        if not os.path.isdir(log_dir):
            os.makedirs(log_dir)
            log.info("Created log directory %s", log_dir)

        log.info("Building %s, logging to %s", self._cfg["VM"], log_file)
        DiskImageCreate.create(
            self.command,
            log_file=log_file,
            env=self._cfg.environment(),
            stream=stream,
        )
        log.info("Built %s", self._cfg["VM"])
