#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Short-lived files handed to the engine, and their cleanup."""

import logging
import os
import tempfile

from .errors import ResourceError

LOG = logging.getLogger(__name__)


def acquire(prefix="openssl.", suffix=".config", directory=None):
    """Create a uniquely named, empty file.

    Returns `(path, release)`. `release()` removes the file, a second call
    does nothing. A file that can't be removed is logged, not raised."""
    try:
        fd, path = tempfile.mkstemp(prefix=prefix, suffix=suffix,
                                    dir=directory)
    except OSError as err:
        raise ResourceError("Could not create scratch file: {}".format(err)) \
            from err
    os.close(fd)
    LOG.debug("Acquired scratch file %s", path)

    released = False

    def release():
        nonlocal released
        if released:
            return
        released = True
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
        except OSError as err:
            LOG.warning("Could not remove scratch file %s: %s", path, err)
        else:
            LOG.debug("Released scratch file %s", path)

    return path, release


def write(path, text):
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as err:
        raise ResourceError(
            "Could not write scratch file {}: {}".format(path, err)) from err
