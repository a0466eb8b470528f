"""Build Trove guest images with diskimage-builder."""

import logging
import os
import sys
from typing import List
from jsonschema.exceptions import ValidationError
from troveimage import cli
from troveimage.config import BuildConfig
from troveimage.exceptions import UsageError, _TroveImageError
from troveimage.image import GuestImage

log = logging.getLogger(__name__)


def main(argv: List[str] | None = None) -> int:
    """Main."""

    if argv is None:
        argv = sys.argv[1:]

    try:
        options = cli.parse_args(argv)
    except UsageError as err:
        print(f"ERROR: {err}", file=sys.stderr)
        print("Try 'trove-image-build --help'.", file=sys.stderr)
        return 1

    if options.help:
        print(cli.usage())
        return 0

    debug = options.debug or bool(os.environ.get("DIB_DEBUG_TRACE"))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    log.debug("Command line overrides: %s", options.overrides)

    try:
        cfg = BuildConfig.resolve(overrides=options.overrides)
        image = GuestImage(
            cfg, passthrough=options.passthrough, debug=options.debug
        )

        print(image.summary())

        if not image.confirm():
            log.info("Not building.")
            return 0

        image.build()
    except ValidationError as err:
        print(f"ERROR: Invalid configuration: {err.message}", file=sys.stderr)
        return 1
    except (_TroveImageError, OSError) as err:
        print(f"ERROR: {err}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
