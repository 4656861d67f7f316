#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Builds the openssl `req` configuration that puts a WebID into the
subjectAltName of a self-signed client certificate."""

import re
from urllib.parse import urlsplit

from .errors import ValidationError

DEFAULT_BITS = 2048
DEFAULT_MD = "sha256"

# Upper bound from RFC 5280
_UB_CN_LEN = 64

_CONTROL = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s")

OPENSSL_CNF = """\
[ req ]
default_md = {md}
default_bits = {bits}
distinguished_name = req_distinguished_name
encrypt_key = no
string_mask = utf8only
utf8 = yes
x509_extensions = req_ext

[ req_distinguished_name ]
commonName = The agent's name
commonName_default={name}
UID = The WebID
UID_default={uri}

[ req_ext ]
subjectKeyIdentifier = hash
subjectAltName = critical,@subject_alt
basicConstraints = CA:false
extendedKeyUsage = clientAuth
nsCertType = client

[ subject_alt ]
URI.1={uri}
"""


def quote(value, field="value"):
    """Quote a value for the openssl config format.

    Quoting keeps '#' from starting a comment and '$' from being expanded.
    Backslash and double quote are escaped, control characters can't be
    represented on a single line and are refused."""
    if _CONTROL.search(value):
        raise ValidationError(
            "{} contains control characters: {!r}".format(field, value))
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return '"{}"'.format(escaped)


def check_name(name):
    if not name or not name.strip():
        raise ValidationError("A display name is required")
    if len(name) > _UB_CN_LEN:
        raise ValidationError(
            "Display name longer than {} characters".format(_UB_CN_LEN))
    return name


def check_uri(uri):
    if not uri:
        raise ValidationError("A WebID URI is required")
    if _WHITESPACE.search(uri):
        raise ValidationError("WebID contains whitespace: {!r}".format(uri))
    parts = urlsplit(uri)
    if not (parts.scheme and parts.netloc):
        raise ValidationError(
            "WebID must be an absolute URI: {!r}".format(uri))
    return uri


def synthesize(name, uri, bits=DEFAULT_BITS, md=DEFAULT_MD):
    """Returns the config text for `name` and `uri`. Pure, the same input
    always gives the same text."""
    check_name(name)
    check_uri(uri)
    return OPENSSL_CNF.format(
        md=md,
        bits=int(bits),
        name=quote(name, "display name"),
        uri=quote(uri, "WebID"),
    )
