#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Wrapper around the openssl command line tool.

Each call spawns its own process and collects everything it prints before
looking at it. The OpenSSL object only carries read-only settings, so one
instance can be shared between threads."""

import logging
import os
import re
import subprocess
from typing import NamedTuple, Optional

from .errors import (
    EngineError,
    EngineTimeoutError,
    ParseError,
    SpawnError,
    ValidationError,
)

LOG = logging.getLogger(__name__)

OPENSSL = "openssl"
DEFAULT_DAYS = 3650
DEFAULT_TIMEOUT = 60

MODULUS = re.compile(r"^Modulus=([0-9A-Fa-f]+)\s*$", re.MULTILINE)
EXPONENT = re.compile(r"^publicExponent:\s+(\d+)\s+\(0x[0-9a-fA-F]+\)",
                      re.MULTILINE)


class ProcessResult(NamedTuple):
    exit_code: int
    stdout: str
    stderr: str


class KeyParameters(NamedTuple):
    """The public half of an RSA key, as published in a WebID profile."""
    modulus: str
    exponent: int


def _positive(value, name, kind=int):
    if isinstance(value, bool) or not isinstance(value, kind) or value <= 0:
        raise ValidationError(
            "{} must be a positive number, not {!r}".format(name, value))
    return value


class EngineSettings(NamedTuple):
    """Where to find openssl and how to run it."""
    command: str = OPENSSL
    lib_directory: Optional[str] = None
    days: int = DEFAULT_DAYS
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_directory(cls, cli_directory=None, lib_directory=None,
                       days=None, timeout=None):
        command = OPENSSL
        if cli_directory:
            command = os.path.join(cli_directory, OPENSSL)
        return cls(
            command=command,
            lib_directory=lib_directory or None,
            days=DEFAULT_DAYS if days is None else days,
            timeout=DEFAULT_TIMEOUT if timeout is None else timeout,
        )

    def validate(self):
        if not isinstance(self.command, str) or not self.command:
            raise ValidationError("No openssl binary configured")
        if self.lib_directory is not None and \
                not isinstance(self.lib_directory, str):
            raise ValidationError(
                "Library directory must be a path, not {!r}"
                .format(self.lib_directory))
        _positive(self.days, "days")
        _positive(self.timeout, "timeout", (int, float))
        return self

    def environment(self):
        """Environment for the child, or None to inherit ours as-is."""
        if not self.lib_directory:
            return None
        env = dict(os.environ)
        env["LD_LIBRARY_PATH"] = self.lib_directory
        return env


def _has_content(path):
    try:
        return os.path.getsize(path) > 0
    except OSError:
        return False


def _require(value, name):
    if not value:
        raise ValidationError("{} is required".format(name))
    return value


class OpenSSL(object):

    def __init__(self, settings=None):
        if settings is None:
            settings = EngineSettings()
        self.settings = settings.validate()

    def run(self, *args):
        """Runs openssl with `args` and returns a ProcessResult once it has
        exited, whatever the exit code."""
        command = [self.settings.command] + [str(arg) for arg in args]
        LOG.debug("Executing command: %s", " ".join(command))
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=self.settings.environment(),
                encoding="utf-8",
                errors="replace",
            )
        except OSError as err:
            LOG.error("Could not start %s: %s", self.settings.command, err)
            raise SpawnError(self.settings.command, err) from err

        with process:
            try:
                stdout, stderr = process.communicate(
                    timeout=self.settings.timeout)
            except subprocess.TimeoutExpired:
                process.kill()
                process.communicate()
                LOG.error("Killed %s after %s seconds",
                          " ".join(command[:2]), self.settings.timeout)
                raise EngineTimeoutError(
                    " ".join(command[:2]), self.settings.timeout) from None

        LOG.debug("OpenSSL completed with exit code %d", process.returncode)
        return ProcessResult(process.returncode, stdout, stderr)

    def _checked(self, message, *args):
        result = self.run(*args)
        if result.exit_code != 0:
            LOG.error("%s: exit code %d: %s",
                      message, result.exit_code, result.stderr.strip())
            raise EngineError(message, result)
        return result

    def version(self):
        return self._checked("Version query failed", "version").stdout.strip()

    def generate_self_signed_certificate(self, config_path, key_out, cert_out,
                                         days=None):
        """Creates a new RSA key at `key_out` and a certificate over it at
        `cert_out`, signed by the key itself. The subject and extensions come
        from the config file at `config_path`."""
        _require(config_path, "Config path")
        _require(key_out, "Key output path")
        _require(cert_out, "Certificate output path")
        if days is None:
            days = self.settings.days
        _positive(days, "days")

        result = self._checked(
            "Certificate generation failed",
            "req", "-x509", "-new", "-batch",
            "-days", days,
            "-config", config_path,
            "-keyout", key_out,
            "-out", cert_out,
        )
        for path in (key_out, cert_out):
            if not _has_content(path):
                LOG.error("openssl exited cleanly but %s is empty", path)
                raise EngineError(
                    "No output written to {}".format(path), result)
        return result

    def _inspect(self, key_path, *flags):
        _require(key_path, "Key path")
        return self._checked(
            "Key inspection failed", "rsa", "-in", key_path, *flags, "-noout")

    def extract_modulus(self, key_path):
        """Hex modulus of the RSA key in `key_path`."""
        result = self._inspect(key_path, "-modulus")
        found = MODULUS.search(result.stdout)
        if not found:
            raise ParseError("No modulus in openssl output", result)
        modulus = found.group(1)
        LOG.debug("Key modulus: %s", modulus)
        return modulus

    def extract_exponent(self, key_path):
        """Public exponent of the RSA key in `key_path`, as an int."""
        result = self._inspect(key_path, "-text")
        found = EXPONENT.search(result.stdout)
        if not found:
            raise ParseError("No public exponent in openssl output", result)
        exponent = int(found.group(1))
        LOG.debug("Key exponent: %d", exponent)
        return exponent

    def key_parameters(self, key_path):
        return KeyParameters(modulus=self.extract_modulus(key_path),
                             exponent=self.extract_exponent(key_path))
