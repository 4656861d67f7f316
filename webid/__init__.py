#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
from pyramid.config import Configurator
from sqlalchemy import engine_from_config

from .config import get_db_url
from .models import (
    init_session,
)


def main(global_config, **settings):
    """This function returns a Pyramid WSGI application."""
    settings["sqlalchemy.url"] = get_db_url(settings=settings)
    engine = engine_from_config(settings, "sqlalchemy.")
    init_session(engine)
    config = Configurator(settings=settings)
    config.include("pyramid_tm")
    config.add_route("profile", "/{alias}/profile", request_method="GET")
    config.add_route("settings", "/{alias}/settings", request_method="GET")
    config.add_route("inbox", "/{alias}/inbox", request_method="GET")
    config.add_route("storage", "/{alias}/storage", request_method="GET")
    config.scan()
    return config.make_wsgi_app()
