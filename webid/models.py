#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Profiles and the certificates published with them."""

import datetime as _datetime

import dateutil.parser
import OpenSSL.crypto as _crypto
import sqlalchemy as _sa
import sqlalchemy.orm as _orm
from cryptography import x509 as _x509
from cryptography.hazmat.primitives.asymmetric import rsa as _rsa
from pyramid.decorator import reify as _reify
from sqlalchemy.ext.orderinglist import ordering_list as _ordering_list
from zope.sqlalchemy import register as _register

from .identity import Identity

X509_V3 = 0x2  # RFC 2459, 4.1.2.1

# Purpose of the certificate that proves the WebID itself
WEBID_PURPOSE = "WebID"


# XXX: probably error prone for cases where things are specified by string
def _fkcolumn(referent, *args, **kwargs):
    refcol = referent.property.columns[0]
    return _sa.Column(refcol.type, _sa.ForeignKey(referent), *args, **kwargs)


DBSession = _orm.scoped_session(_orm.sessionmaker())
_register(DBSession)


class Base(object):
    @_orm.declared_attr
    def __tablename__(cls):
        return cls.__name__.lower()

    id = _sa.Column(_sa.Integer, primary_key=True)

    def save(self):
        DBSession.add(self)
        DBSession.flush()

    @classmethod
    def query(cls):
        return DBSession.query(cls)

    @classmethod
    def all(cls):
        return cls.query().all()


Base = _orm.declarative_base(cls=Base)


def init_session(engine, create=False):
    DBSession.configure(bind=engine)
    if create:
        Base.metadata.create_all(engine)


# Upper bound from RFC 5280
_UB_CN_LEN = 64
_ALIAS_LEN = 64
_PURPOSE_LEN = 32


class Profile(Base):
    alias = _sa.Column(_sa.String(_ALIAS_LEN), unique=True, nullable=False)
    name = _sa.Column(_sa.String(_UB_CN_LEN), nullable=False)
    webid = _sa.Column(_sa.Text, nullable=False)
    nick = _sa.Column(_sa.String(_UB_CN_LEN))
    image = _sa.Column(_sa.Text)
    # certificates[0] is the one that proves the WebID
    certificates = _orm.relationship(
        "ProfileCertificate", backref="profile",
        order_by="ProfileCertificate.position",
        collection_class=_ordering_list("position"),
        cascade="all, delete-orphan")

    def __init__(self, alias, name, webid, nick=None, image=None):
        if not alias:
            raise ValueError("Profiles need an alias")
        # Validates name and uri
        Identity.create(webid, name)
        self.alias = alias
        self.name = name
        self.webid = webid
        self.nick = nick
        self.image = image

    @property
    def identity(self):
        return Identity(uri=self.webid, name=self.name)

    @property
    def primary_certificate(self):
        if self.certificates:
            return self.certificates[0]
        return None

    def add_certificate(self, record, primary=True):
        if primary:
            self.certificates.insert(0, record)
        else:
            self.certificates.append(record)
        return record

    @classmethod
    def by_alias(cls, alias):
        return cls.query().filter_by(alias=alias).one()

    def __str__(self):
        return ("<{0.__class__.__name__} "
                "alias={0.alias!r} webid={0.webid!r}>").format(self)

    def __repr__(self):
        return "<{0.__class__.__name__} id={0.id}>".format(self)


def _subject_alt_uris(cert):
    try:
        ext = cert.extensions.get_extension_for_class(
            _x509.SubjectAlternativeName)
    except _x509.ExtensionNotFound:
        return []
    return ext.value.get_values_for_type(_x509.UniformResourceIdentifier)


class ProfileCertificate(Base):
    position = _sa.Column(_sa.Integer, nullable=False)
    purpose = _sa.Column(_sa.String(_PURPOSE_LEN), nullable=False)
    pem = _sa.Column(_sa.LargeBinary, nullable=False)
    modulus = _sa.Column(_sa.Text, nullable=False)
    exponent = _sa.Column(_sa.Integer, nullable=False)
    not_before = _sa.Column(_sa.DateTime, nullable=False)
    not_after = _sa.Column(_sa.DateTime, nullable=False)
    created = _sa.Column(_sa.DateTime, default=_datetime.datetime.utcnow)
    profile_id = _fkcolumn(Profile.id, nullable=False)

    def __init__(self, profile, pem, key_parameters, purpose=WEBID_PURPOSE):
        """Record the certificate in `pem` for `profile`. The certificate
        must name the profile's WebID and carry the public key described by
        `key_parameters`."""
        self.pem = pem
        self.purpose = purpose
        self.modulus = key_parameters.modulus.upper()
        self.exponent = key_parameters.exponent

        cert = self.cert.to_cryptography()
        if profile.webid not in _subject_alt_uris(cert):
            raise ValueError(
                "Certificate does not name {}".format(profile.webid))

        public_key = cert.public_key()
        if not isinstance(public_key, _rsa.RSAPublicKey):
            raise ValueError("Not an RSA certificate")
        numbers = public_key.public_numbers()
        if numbers.n != int(self.modulus, 16) or numbers.e != self.exponent:
            raise ValueError("Key parameters do not match certificate")

        self.not_before = dateutil.parser.parse(
            self.cert.get_notBefore()).replace(tzinfo=None)
        self.not_after = dateutil.parser.parse(
            self.cert.get_notAfter()).replace(tzinfo=None)

    @classmethod
    def from_files(cls, profile, certfile, key_parameters,
                   purpose=WEBID_PURPOSE):
        with open(certfile, "rb") as f:
            pem = f.read()
        return cls(profile, pem, key_parameters, purpose)

    @_reify
    def cert(self):
        try:
            cert = _crypto.load_certificate(_crypto.FILETYPE_PEM, self.pem)
        except _crypto.Error:
            raise ValueError("invalid PEM certificate")
        if cert.get_version() != X509_V3:
            raise ValueError("Not a x509.v3 certificate")
        return cert

    def __repr__(self):
        return ("<{0.__class__.__name__} id={0.id} "
                "purpose={0.purpose!r}>").format(self)
