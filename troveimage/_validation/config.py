"""
Validate a resolved build configuration.

# Configuration (dict)

A flat mapping of upper-case variable names to strings. Every value is
exported to the environment of `disk-image-create`, so every value must be a
string.

The following keys are required and checked further:

  - CONTROLLER_IP (str): The address guests use to reach the controller. Must
    be an IPv4 or IPv6 address, or a host name.
  - DISTRO (str): The distribution element, ie 'ubuntu'.
  - DIB_RELEASE (str): The release codename, ie 'xenial'.
  - SERVICE_TYPE (str): The datastore, ie 'mariadb'.
  - IMAGE_FORMAT (str): One of the output formats diskimage-builder supports.
  - VM (str): Path of the image to create.
  - LOG_DIR (str): Where the build log is written.
  - LOG_FILE (str): The build log.
  - ELEMENTS_PATH (str): Colon separated list of element directories.

DISTRO, DIB_RELEASE and SERVICE_TYPE become parts of element names, so they
may only contain letters, digits, '.', '_' and '-'.
"""

from typing import Dict
from jsonschema import FormatChecker, validate
from troveimage._validation.helpers import (
    type_any_of,
    type_dict,
    type_str,
)

IMAGE_FORMATS = [
    "qcow2",
    "raw",
    "vhd",
    "vmdk",
    "tar",
    "docker",
    "squashfs",
    "tgz",
]

ELEMENT_NAME = r"^[A-Za-z0-9._-]+$"

# RFC 1123 host name.
HOSTNAME = (
    r"^(?=.{1,253}$)[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(\.[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$"
)


def check(cfg: Dict) -> None:
    """Check a build configuration."""

    schema = type_dict(
        properties={
            "CONTROLLER_IP": type_any_of(
                type_str(format_name="ipv4"),
                type_str(format_name="ipv6"),
                type_str(pattern=HOSTNAME),
            ),
            "DISTRO": type_str(pattern=ELEMENT_NAME),
            "DIB_RELEASE": type_str(pattern=ELEMENT_NAME),
            "SERVICE_TYPE": type_str(pattern=ELEMENT_NAME),
            "IMAGE_FORMAT": type_str(enum=IMAGE_FORMATS),
            "VM": type_str(min_length=1),
            "LOG_DIR": type_str(min_length=1),
            "LOG_FILE": type_str(min_length=1),
            "ELEMENTS_PATH": type_str(min_length=1),
        },
        required=[
            "CONTROLLER_IP",
            "DISTRO",
            "DIB_RELEASE",
            "SERVICE_TYPE",
            "IMAGE_FORMAT",
            "VM",
            "LOG_DIR",
            "LOG_FILE",
            "ELEMENTS_PATH",
        ],
        additional_properties=type_str(),
    )

    validate(cfg, schema=schema, format_checker=FormatChecker())
