"""Test command line parsing."""

import unittest
from troveimage import cli
from troveimage.exceptions import (
    MissingArgumentError,
    UnexpectedOptionError,
    UsageError,
)


class ParseArgsTest(unittest.TestCase):
    """Test cli.parse_args."""

    def test_no_args(self):
        """Nothing given, nothing overridden."""

        options = cli.parse_args([])

        self.assertFalse(options.help)
        self.assertFalse(options.debug)
        self.assertEqual(options.overrides, {})
        self.assertEqual(options.passthrough, [])

    def test_value_forms(self):
        """'--flag value' and '--flag=value' are the same."""

        for flag, name, _, _ in cli.VALUE_OPTIONS:
            with self.subTest(flag=flag):
                spaced = cli.parse_args([flag, "some-value"])
                joined = cli.parse_args([f"{flag}=some-value"])

                self.assertEqual(spaced, joined)
                self.assertEqual(spaced.overrides, {name: "some-value"})

    def test_all_options(self):
        """Every option lands on its configuration name."""

        options = cli.parse_args(
            [
                "--debug",
                "--workspace",
                "/srv/ws",
                "--datastore",
                "mysql",
                "--distro",
                "fedora",
                "--distro-release=28",
                "--controller-ip",
                "10.0.0.1",
                "--extra-elements",
                "one two",
                "--log-dir",
                "/srv/logs",
                "--output",
                "/srv/out/image",
            ]
        )

        self.assertTrue(options.debug)
        self.assertEqual(
            options.overrides,
            {
                "WORKSPACE": "/srv/ws",
                "SERVICE_TYPE": "mysql",
                "DISTRO": "fedora",
                "DIB_RELEASE": "28",
                "CONTROLLER_IP": "10.0.0.1",
                "EXTRA_ELEMENTS": "one two",
                "LOG_DIR": "/srv/logs",
                "VM": "/srv/out/image",
            },
        )

    def test_help(self):
        """Both help flags."""

        self.assertTrue(cli.parse_args(["-h"]).help)
        self.assertTrue(cli.parse_args(["--help"]).help)

    def test_unexpected_option(self):
        """Unknown options fail with the option in the message."""

        for argv in (
            ["--bogus"],
            ["--bogus=1"],
            ["--distro", "x", "-q"],
            ["-hx"],
            ["-hdebug"],
            ["--debug=1"],
            ["--help=yes"],
            ["-"],
        ):
            with self.subTest(argv=argv):
                with self.assertRaises(UnexpectedOptionError) as ctx:
                    cli.parse_args(argv)

                self.assertIn(argv[-1].split("=")[0], str(ctx.exception))
                self.assertTrue(
                    str(ctx.exception).startswith("Unexpected option: ")
                )

    def test_no_abbreviations(self):
        """Prefixes of options are not options."""

        with self.assertRaises(UnexpectedOptionError):
            cli.parse_args(["--dist", "ubuntu"])

    def test_missing_argument(self):
        """Options without values fail with the option in the message."""

        for argv in (
            ["--distro"],
            ["--datastore", "--debug"],
            ["--output", "-1"],
            ["--debug", "--log-dir"],
            ["--workspace", "--"],
        ):
            with self.subTest(argv=argv):
                with self.assertRaises(MissingArgumentError) as ctx:
                    cli.parse_args(argv)

                self.assertEqual(
                    str(ctx.exception),
                    f"Option requires an argument: {ctx.exception.flag}",
                )
                self.assertIn(ctx.exception.flag, argv)

    def test_missing_argument_is_usage_error(self):
        """Usage errors share a base class."""

        self.assertTrue(issubclass(MissingArgumentError, UsageError))
        self.assertTrue(issubclass(UnexpectedOptionError, UsageError))

    def test_default_options_not_shared(self):
        """Default overrides and pass through values cannot be changed."""

        with self.assertRaises(TypeError):
            cli.Options().overrides["DISTRO"] = "fedora"

        self.assertEqual(dict(cli.Options().overrides), {})
        self.assertEqual(list(cli.Options().passthrough), [])

    def test_end_of_options(self):
        """Everything after '--' is passed through."""

        options = cli.parse_args(
            ["--distro", "ubuntu", "--", "--bogus", "-x", "--distro"]
        )

        self.assertEqual(options.overrides, {"DISTRO": "ubuntu"})
        self.assertEqual(options.passthrough, ["--bogus", "-x", "--distro"])

    def test_value_with_equals(self):
        """Values can start with '-' when joined with '='."""

        options = cli.parse_args(["--extra-elements=-odd"])

        self.assertEqual(options.overrides, {"EXTRA_ELEMENTS": "-odd"})


class UsageTest(unittest.TestCase):
    """Test cli.usage."""

    def test_usage(self):
        """Help lists every option."""

        text = cli.usage()

        self.assertIn("--help", text)
        self.assertIn("--debug", text)
        for flag, name, _, _ in cli.VALUE_OPTIONS:
            self.assertIn(flag, text)
            self.assertIn(name, text)
