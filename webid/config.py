#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""webid.config collects the settings handling shared by the webid
service and its command line tools: argument > environment > ini-file."""

import argparse
import logging
import os
from logging.config import dictConfig

import pyramid.paster as paster

from .openssl import DEFAULT_DAYS, DEFAULT_TIMEOUT, EngineSettings

ENV_PREFIX = "WEBID_"

LOG_LEVEL = {
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

DEFAULT_LOGGING_CONFIG = {
    "version": 1,
    "formatters": {
        "generic": {
            "format": "%(asctime)s %(levelname)-5.5s [%(name)s][%(threadName)s]"
            "%(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "level": "NOTSET",
            "formatter": "generic",
        },
    },
    "loggers": {
        "": {  # root logger
            "handlers": ["console"],
            "level": "INFO",
        },
        "webid": {
            "level": "DEBUG",
            "qualname": "webid",
        },
        "sqlalchemy": {
            "level": "WARNING",
            "qualname": "sqlalchemy.engine",
        },
    },
}

DEFAULT_APP_SETTINGS = {
    "pyramid.debug_all": False,
    "pyramid.debug_authorization": False,
    "pyramid.debug_notfound": False,
    "pyramid.debug_routematch": False,
    "pyramid.default_locale_name": "en",
    "pyramid.prevent_http_cache": False,
    "pyramid.reload_all": False,
}


def add_inifile_argument(parser, env=None):
    """Adds an argument to the parser for the config-file, defaults to
    WEBID_INI in the environment"""
    if env is None:
        env = os.environ
    default_ini = env.get(ENV_PREFIX + "INI")

    parser.add_argument(
        nargs="?",
        help="Path to a specific .ini-file to use as config",
        dest="inifile",
        default=default_ini,
        type=str,
    )


def add_db_url_argument(parser):
    """Adds an argument for the URL for the database to a given parser"""
    parser.add_argument(
        "--dburl",
        help="URL to the database to use",
        type=str,
    )


def add_verbosity_argument(parser):
    """Adds an argument for verbosity to a given parser, counting the amount of
    'v's and 'verbose' on the commandline"""
    parser.add_argument(
        "-v",
        "--verbose",
        help="Verbosity of root logger, increasing the more 'v's are added",
        action="count",
        default=0,
    )


def add_openssl_arguments(parser):
    """Adds the arguments locating and tuning the openssl binary"""
    parser.add_argument(
        "--openssl-dir",
        help="Directory holding the openssl binary, default is to search PATH",
        type=str,
    )
    parser.add_argument(
        "--openssl-libdir",
        help="Library directory openssl should load its libraries from",
        type=str,
    )
    parser.add_argument(
        "--days",
        help="How many days issued certificates are valid",
        type=int,
    )
    parser.add_argument(
        "--timeout",
        help="Seconds to wait for openssl before giving up",
        type=float,
    )


def _get_config_value(
    arguments: argparse.Namespace,
    variable,
    required=False,
    setting_name=None,
    settings=None,
    default=None,
    env=None,
):
    """Returns what value to use for a given config variable, prefer argument >
    env-variable > config-file, if a value cant be found and default is not
    None, default is returned"""
    result = None
    if setting_name is None:
        setting_name = variable
    if settings is not None:
        result = settings.get(setting_name, result)

    if env is None:
        env = os.environ
    env_var = ENV_PREFIX + variable.upper().replace("-", "_")
    result = env.get(env_var, result)

    arg_value = getattr(arguments, variable, result)
    result = arg_value if arg_value is not None else result

    if result is None:
        result = default

    if required and result is None:
        raise ValueError(
            f"No {variable} could be found as either an argument,"
            f" in the environment variable {env_var} or in the config file",
            variable,
            env_var,
        )
    return result


def get_db_url(arguments=None, settings=None, required=True):
    """Returns URL to use for database, prefer argument > env-variable >
    config-file"""
    return _get_config_value(
        arguments,
        variable="dburl",
        required=required,
        setting_name="sqlalchemy.url",
        settings=settings,
    )


def get_engine_settings(arguments=None, settings=None, env=None):
    """Returns the EngineSettings to run openssl with. Numbers from the
    environment or an ini-file arrive as strings and are converted here."""
    cli_dir = _get_config_value(
        arguments,
        variable="openssl_dir",
        setting_name="openssl.cli_dir",
        settings=settings,
        env=env,
    )
    lib_dir = _get_config_value(
        arguments,
        variable="openssl_libdir",
        setting_name="openssl.lib_dir",
        settings=settings,
        env=env,
    )
    days = _get_config_value(
        arguments,
        variable="days",
        setting_name="openssl.days",
        settings=settings,
        default=DEFAULT_DAYS,
        env=env,
    )
    timeout = _get_config_value(
        arguments,
        variable="timeout",
        setting_name="openssl.timeout",
        settings=settings,
        default=DEFAULT_TIMEOUT,
        env=env,
    )
    try:
        days, timeout = int(days), float(timeout)
    except ValueError as error:
        raise ValueError(f"Invalid days or timeout setting: {error}")
    return EngineSettings.from_directory(
        cli_directory=cli_dir,
        lib_directory=lib_dir,
        days=days,
        timeout=timeout,
    ).validate()


def get_log_level(argument_level, logger=None, env=None):
    """Calculates the highest verbosity(here inverted) from the argument,
    environment and root, capping it to between logging.DEBUG(10)-logging.ERROR(40),
    returning the log level"""

    if env is None:
        env = os.environ
    env_level_name = env.get(ENV_PREFIX + "LOG_LEVEL", "ERROR").upper()
    env_level = LOG_LEVEL[env_level_name]

    if logger is None:
        logger = logging.getLogger()
    current_level = logger.level

    argument_verbosity = logging.ERROR - argument_level * 10  # level steps are 10
    verbosity = min(argument_verbosity, env_level, current_level)
    log_level = (
        verbosity if logging.DEBUG <= verbosity <= logging.ERROR else logging.ERROR
    )
    return log_level


def configure_log_level(arguments: argparse.Namespace, logger=None):
    """Sets the root loggers level to the highest verbosity from the argument,
    environment and config-file"""
    log_level = get_log_level(arguments.verbose)
    if logger is None:
        logger = logging.getLogger()
    logger.setLevel(log_level)


def setup_logging(config_path=None):
    """wrapper for pyramid.paster.setup_logging using file at config.path, if
    no config_path is passed on use dictionary DEFAULT_LOGGING_CONFIG"""
    if config_path:
        paster.setup_logging(config_path)
    else:
        dictConfig(DEFAULT_LOGGING_CONFIG)


def get_appsettings(config_path):
    """wrapper for pyramid.paster.get_appsettings, if a config_path is not
    given then return DEFAULT_APP_SETTINGS"""
    if config_path:
        return paster.get_appsettings(config_path)
    else:
        return DEFAULT_APP_SETTINGS
