#!/bin/env python3
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Admin tool to add profiles and provision their WebID certificates."""

import argparse
import logging
import sys

import transaction
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import NoResultFound

from webid import config, identity, models
from webid.errors import IssuanceError
from webid.openssl import OpenSSL

LOG = logging.getLogger(name="webid.tool")


def cmdline(argv=None):
    """Parse commandline."""
    parser = argparse.ArgumentParser()

    config.add_inifile_argument(parser)
    config.add_db_url_argument(parser)
    config.add_verbosity_argument(parser)
    config.add_openssl_arguments(parser)

    actions = parser.add_mutually_exclusive_group(required=True)
    actions.add_argument(
        "--list",
        help="List profiles and their primary certificate",
        action="store_true",
    )
    actions.add_argument(
        "--add",
        metavar="alias",
        help="Add a profile, needs --name and --uri",
    )
    actions.add_argument(
        "--issue",
        metavar="alias",
        help="Issue and publish a WebID certificate for this profile",
    )
    actions.add_argument(
        "--keyinfo",
        metavar="keyfile",
        help="Print modulus and exponent of an RSA key, do nothing else",
    )

    parser.add_argument("--name", help="Display name of a new profile")
    parser.add_argument("--uri", help="WebID of a new profile")
    parser.add_argument("--nick", help="Nickname of a new profile")
    parser.add_argument("--image", help="Avatar URL of a new profile")
    parser.add_argument("--key-out", help="Where to write the private key")
    parser.add_argument("--cert-out", help="Where to write the certificate")
    parser.add_argument(
        "--purpose",
        default=models.WEBID_PURPOSE,
        help="Purpose recorded with the certificate",
    )

    args = parser.parse_args(argv)
    if args.add and not (args.name and args.uri):
        parser.error("--add requires --name and --uri")
    if args.issue and not (args.key_out and args.cert_out):
        parser.error("--issue requires --key-out and --cert-out")
    return args


def error_out(message, exc=None):
    """Print error message and exit with failure code."""
    LOG.error(message)
    if exc is not None:
        LOG.error(str(exc))
    sys.exit(1)


def print_list():
    """Print profiles with the expiry of their primary certificate."""
    for profile in models.Profile.query().order_by(models.Profile.id):
        cert = profile.primary_certificate
        not_after = "----------" if cert is None else str(cert.not_after)
        print(" ".join((str(profile.id), profile.alias, profile.webid,
                        not_after)))


def profile_add(alias, name, uri, nick=None, image=None):
    with transaction.manager:
        profile = models.Profile(alias, name, uri, nick=nick, image=image)
        profile.save()


def profile_issue(alias, key_out, cert_out, engine_settings,
                  purpose=models.WEBID_PURPOSE):
    """Issue a certificate for the profile at `alias` and publish its key as
    the profile's primary certificate. Returns the KeyParameters."""
    with transaction.manager:
        profile = models.Profile.by_alias(alias)
        material = identity.issue_certificate(
            profile.identity, key_out, cert_out, engine_settings)
        params = OpenSSL(engine_settings).key_parameters(material.key_path)
        try:
            record = models.ProfileCertificate.from_files(
                profile, material.certificate_path, params, purpose)
        except ValueError:
            LOG.warning("Certificate rejected, not publishing %s and %s",
                        material.key_path, material.certificate_path)
            raise
        profile.add_certificate(record)
        profile.save()
    LOG.info("Published key for %s: exponent %d", alias, params.exponent)
    return params


def keyinfo(key_path, engine_settings):
    engine = OpenSSL(engine_settings)
    LOG.debug("Reading %s with %s", key_path, engine.version())
    params = engine.key_parameters(key_path)
    print("modulus", params.modulus)
    print("exponent", params.exponent)
    return params


def main(argv=None):
    """Entrypoint of application."""
    args = cmdline(argv)
    config.setup_logging(args.inifile)
    config.configure_log_level(args)
    settings = config.get_appsettings(args.inifile)

    try:
        engine_settings = config.get_engine_settings(args, settings)
    except ValueError as error:
        error_out("Invalid openssl settings", exc=error)

    if args.keyinfo:
        try:
            keyinfo(args.keyinfo, engine_settings)
        except IssuanceError as error:
            error_out("Could not read key", exc=error)
        return

    try:
        db_url = config.get_db_url(args, settings)
    except ValueError as error:
        error_out("No database configured", exc=error)
    models.init_session(create_engine(db_url))

    if args.list:
        print_list()

    if args.add:
        try:
            profile_add(args.add, args.name, args.uri, args.nick, args.image)
        except (ValueError, IntegrityError) as error:
            error_out("Could not add profile", exc=error)

    if args.issue:
        try:
            profile_issue(args.issue, args.key_out, args.cert_out,
                          engine_settings, args.purpose)
        except NoResultFound:
            error_out("Alias not found")
        except (IssuanceError, ValueError) as error:
            error_out("Issuing certificate failed", exc=error)
