#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
import os
import shutil
import stat
import tempfile
import unittest

import transaction
from sqlalchemy import create_engine

from webid.models import (
    DBSession,
    init_session,
)

from . import fixtures

requires_openssl = unittest.skipUnless(
    shutil.which("openssl"), "openssl binary not on PATH")


class ModelTestCase(unittest.TestCase):
    def setUp(self):
        super(ModelTestCase, self).setUp()
        # Always run in a fresh session, on a fresh database
        DBSession.remove()
        engine = create_engine("sqlite://")
        init_session(engine, create=True)
        with transaction.manager:
            fixtures.ProfileData.initial().save()

    def tearDown(self):
        DBSession.remove()
        super(ModelTestCase, self).tearDown()


class TempDirTestCase(unittest.TestCase):
    def setUp(self):
        super(TempDirTestCase, self).setUp()
        self.tmpdir = tempfile.mkdtemp(prefix="webid-test.")
        self.addCleanup(shutil.rmtree, self.tmpdir, ignore_errors=True)

    def path(self, *names):
        return os.path.join(self.tmpdir, *names)

    def fake_openssl(self, body, name="openssl"):
        """Writes an executable shell script standing in for openssl and
        returns its path."""
        directory = self.path("bin")
        os.makedirs(directory, exist_ok=True)
        script = os.path.join(directory, name)
        with open(script, "w") as f:
            f.write("#!/bin/sh\n" + body)
        mode = os.stat(script).st_mode
        os.chmod(script, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script
