#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Issuing self-signed WebID client certificates.

An issuance writes a generated openssl config to a scratch file, has openssl
create a key and a self-signed certificate from it, and removes the scratch
file again, whatever the outcome. Each issuance is its own Issuance object, so
any number of them can run side by side."""

import concurrent.futures
import enum
import logging
from typing import NamedTuple

from . import certconf, scratch
from .errors import ValidationError
from .openssl import EngineSettings, OpenSSL

LOG = logging.getLogger(__name__)


class Identity(NamedTuple):
    uri: str
    name: str

    @classmethod
    def create(cls, uri, name):
        return cls(uri=certconf.check_uri(uri), name=certconf.check_name(name))


class CertificateMaterial(NamedTuple):
    """Where the key and certificate were written. Owned by the caller."""
    key_path: str
    certificate_path: str


class IssuanceState(enum.Enum):
    PENDING = "pending"
    CONFIG_WRITTEN = "config-written"
    GENERATING = "generating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    RELEASED = "released"


class Issuance(object):
    """A single certificate issuance for `identity`.

    `run()` may only be called once. `history` lists every state visited,
    a run that got past validation always ends in RELEASED."""

    def __init__(self, identity, key_out, cert_out, settings=None,
                 directory=None):
        if settings is None:
            settings = EngineSettings()
        self.identity = identity
        self.material = CertificateMaterial(key_out, cert_out)
        self.settings = settings
        self.directory = directory
        self.config_path = None
        self.result = None
        self.state = IssuanceState.PENDING
        self.history = [IssuanceState.PENDING]

    def _enter(self, state):
        LOG.debug("Issuance for %s: %s -> %s",
                  self.identity.uri, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _validate(self):
        if not self.material.key_path:
            raise ValidationError("Key output path is required")
        if not self.material.certificate_path:
            raise ValidationError("Certificate output path is required")
        self.settings.validate()
        return certconf.synthesize(self.identity.name, self.identity.uri)

    def run(self):
        if self.state is not IssuanceState.PENDING:
            raise RuntimeError("Issuance has already been run")

        config_text = self._validate()
        engine = OpenSSL(self.settings)

        path, release = scratch.acquire(directory=self.directory)
        self.config_path = path
        try:
            scratch.write(path, config_text)
            self._enter(IssuanceState.CONFIG_WRITTEN)
            self._enter(IssuanceState.GENERATING)
            self.result = engine.generate_self_signed_certificate(
                path, self.material.key_path, self.material.certificate_path)
        except Exception:
            self._enter(IssuanceState.FAILED)
            raise
        else:
            self._enter(IssuanceState.SUCCEEDED)
        finally:
            release()
            self._enter(IssuanceState.RELEASED)

        LOG.info("Issued certificate for %s to %s",
                 self.identity.uri, self.material.certificate_path)
        return self.material


def issue_certificate(identity, key_out, cert_out, settings=None):
    """Writes a new key to `key_out` and a self-signed certificate for
    `identity` to `cert_out`. Returns the CertificateMaterial, raises an
    IssuanceError subclass on failure."""
    return Issuance(identity, key_out, cert_out, settings).run()


def issue_many(requests, settings=None, max_workers=16):
    """Issue certificates for several `(identity, key_out, cert_out)`
    requests at once. Returns the finished futures in request order."""
    with concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers) as executor:
        futures = [
            executor.submit(issue_certificate, identity, key_out, cert_out,
                            settings)
            for identity, key_out, cert_out in requests
        ]
    for future in futures:
        exc = future.exception()
        if exc is not None:
            LOG.error("Issuance failed: %s", exc)
    return futures
