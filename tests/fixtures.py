#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
import datetime
import functools

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from webid import models
from webid.identity import Identity
from webid.openssl import KeyParameters

TED = Identity(uri="https://example.org/ted#me", name="Ted Byrd")

# What `openssl rsa -text -noout` prints, shortened
RSA_TEXT = """\
Private-Key: (2048 bit, 2 primes)
modulus:
    00:c3:5e:9a:41:7f:02:88:1d:aa:b7:10:4e:39:5c:
    d1:2f
publicExponent: 65537 (0x10001)
privateExponent:
    2e:61:aa:03:9b
prime1:
    00:f3:7c
"""


@functools.lru_cache(maxsize=None)
def rsa_key(label="ted"):
    """One key per label, generated once per test run."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def key_parameters(key):
    numbers = key.public_key().public_numbers()
    return KeyParameters(modulus="{:X}".format(numbers.n),
                         exponent=numbers.e)


def self_signed_pem(uri, name="Ted Byrd", key=None, days=30):
    """A self-signed client certificate naming `uri`, like openssl would
    make from our config."""
    if key is None:
        key = rsa_key()
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=days))
        .add_extension(
            x509.SubjectAlternativeName(
                [x509.UniformResourceIdentifier(uri)]),
            critical=True)
        .add_extension(
            x509.BasicConstraints(ca=False, path_length=None), critical=False)
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM)


def key_pem(key):
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption())


class ProfileData(object):
    alias = "ted"
    name = TED.name
    webid = TED.uri
    nick = "teddy"
    image = "https://example.org/ted/avatar.png"

    @classmethod
    def initial(cls):
        """Ted, with one published WebID certificate."""
        profile = models.Profile(cls.alias, cls.name, cls.webid,
                                 nick=cls.nick, image=cls.image)
        record = models.ProfileCertificate(
            profile, self_signed_pem(cls.webid), key_parameters(rsa_key()))
        profile.add_certificate(record)
        return profile

    @classmethod
    def bare(cls, alias="alice"):
        return models.Profile(alias, "Alice Liddell",
                              "https://example.org/{}#me".format(alias))
