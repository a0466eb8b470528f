"""Shell commands."""

import logging
import subprocess
import sys
from typing import Dict, List, TextIO
from troveimage.exceptions import BuildError, ControllerIpNotFoundError

log = logging.getLogger(__name__)


class _Shell:
    """Generic _Shell class."""

    @staticmethod
    def run(cmd: List["str"]) -> str:
        """
        Run the command `cmd` and return what's printed to stdout.
        """

        log.debug(cmd)
        result = subprocess.run(
            cmd, capture_output=True, check=True, encoding="utf-8"
        )

        return result.stdout

    @staticmethod
    def tee(
        cmd: List[str],
        log_file: str,
        env: Dict[str, str] | None = None,
        stream: TextIO | None = None,
    ) -> int:
        """
        Run the command `cmd`, copying stdout and stderr to both `stream`
        and `log_file`, and return the exit code.

        # Params

          - cmd (list): The command and its arguments.
          - log_file (str): Path to the log file. Appended to if it exists.
          - env (dict): The complete environment of the command.
          - stream (TextIO): Where output is echoed. Defaults to stdout.
        """

        if stream is None:
            stream = sys.stdout

        log.debug(cmd)
        with open(log_file, mode="a", encoding="utf-8") as log_fd:
            with subprocess.Popen(
                cmd,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
            ) as proc:
                for line in proc.stdout:
                    stream.write(line)
                    stream.flush()
                    log_fd.write(line)

        return proc.returncode


class IpRoute(_Shell):
    """Wraps `ip route` shell command."""

    @staticmethod
    def source_address(destination: str = "8.8.8.8") -> str:
        """
        Returns the local address the host would use to reach `destination`.
        """

        try:
            output = IpRoute.run(["ip", "route", "get", destination])
        except (OSError, subprocess.CalledProcessError) as err:
            raise ControllerIpNotFoundError(
                f"Cannot find a route to {destination}: {err}"
            ) from err

        fields = output.split()
        if "src" in fields:
            index = fields.index("src")
            if index + 1 < len(fields):
                return fields[index + 1]

        raise ControllerIpNotFoundError(
            f"No source address in route to {destination}: {output.strip()}"
        )


class DiskImageCreate(_Shell):
    """Wraps diskimage-builder's `disk-image-create` shell command."""

    @staticmethod
    def command(
        output: str,
        elements: List[str],
        image_format: str = "qcow2",
        arch: str = "amd64",
        image_options: List[str] | None = None,
        extra_args: List[str] | None = None,
        executable: str = "disk-image-create",
        trace: bool = False,
    ) -> List[str]:
        """
        Build the `disk-image-create` command line.

        # Params

          - output (str): Path of the image, without the format suffix.
          - elements (list): Element names, in the order they are applied.
          - image_format (str): Passed to `-t`.
          - arch (str): Passed to `-a`.
          - image_options (list): Extra image options, such as
            `--qemu-img-options`.
          - extra_args (list): Passed verbatim before the element names.
          - executable (str): The program to run.
          - trace (bool): Turn on tracing in the image builder.
        """

        command = [executable, "-a", arch, "-t", image_format, "-o", output]

        if trace:
            command.append("-x")

        command.extend([] if image_options is None else image_options)
        command.extend([] if extra_args is None else extra_args)
        command.extend(elements)

        return command

    @staticmethod
    def create(
        command: List[str],
        log_file: str,
        env: Dict[str, str] | None = None,
        stream: TextIO | None = None,
    ) -> None:
        """
        Run a `disk-image-create` command line, logging to `log_file`.

        Raises BuildError if the command cannot be run or exits non-zero.
        """

        try:
            returncode = DiskImageCreate.tee(
                command, log_file=log_file, env=env, stream=stream
            )
        except FileNotFoundError as err:
            raise BuildError(f"Cannot run {command[0]}: {err}") from err

        if returncode != 0:
            raise BuildError(
                f"{command[0]} failed with exit code {returncode}, "
                f"see {log_file}",
                returncode=returncode,
            )

        log.debug("%s finished successfully", command[0])
