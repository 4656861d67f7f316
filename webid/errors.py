#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Failure kinds raised while issuing certificates or reading key
parameters. Nothing in here is retried, callers decide."""


class IssuanceError(Exception):
    pass


class ValidationError(IssuanceError, ValueError):
    """A required input is missing or malformed. Raised before anything is
    written to disk or spawned."""


class ResourceError(IssuanceError):
    """The scratch config file could not be created or written."""


class SpawnError(IssuanceError):
    """The engine binary could not be started at all."""

    def __init__(self, command, error):
        super().__init__(
            "Could not start {}: {}".format(command, error), command, error)
        self.command = command
        self.error = error


class EngineTimeoutError(IssuanceError):
    def __init__(self, command, timeout):
        super().__init__(
            "{} did not finish within {} seconds".format(command, timeout),
            command, timeout)
        self.command = command
        self.timeout = timeout


class EngineError(IssuanceError):
    """The engine ran, but failed. Output files are not to be trusted."""

    def __init__(self, message, result):
        super().__init__(message, result)
        self.message = message
        self.result = result

    @property
    def exit_code(self):
        return self.result.exit_code

    @property
    def stderr(self):
        return self.result.stderr

    def __str__(self):
        return "{} (exit code {}): {}".format(
            self.message, self.result.exit_code, self.result.stderr.strip())


class ParseError(EngineError):
    """The engine exited cleanly but its output lacked what we asked for."""

    def __str__(self):
        return "{}: {!r}".format(self.message, self.result.stdout[:200])
