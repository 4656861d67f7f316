#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :

import json

from pyramid.httpexceptions import (
    HTTPError,
    HTTPNotAcceptable,
    HTTPNotFound,
    HTTPNotImplemented,
    )
from pyramid.response import Response
from pyramid.view import view_config
from sqlalchemy.orm.exc import NoResultFound
from webob.acceptparse import create_accept_header

from .models import Profile
from .profile import to_jsonld, to_turtle

TURTLE = "text/turtle"
JSONLD = "application/ld+json"
# What older clients of the service asked for
JSONLD_LEGACY = "text/ld+json"

OFFERS = (TURTLE, JSONLD, JSONLD_LEGACY)


def negotiate(request, offers=OFFERS):
    """Best of `offers` for the request's Accept header, or None."""
    accept = create_accept_header(request.headers.get("Accept"))
    matches = accept.acceptable_offers(offers)
    if not matches:
        return None
    return matches[0][0]


@view_config(context=HTTPError)
def HTTPErrorToJson(exc, request):
    exc.json_body = {
        "status": exc.code,
        "title": exc.title,
        "detail": exc.detail
    }
    exc.content_type = "application/problem+json"
    request.response = exc
    return request.response


@view_config(route_name="profile", request_method="GET")
def profile_fetch(request):
    alias = request.matchdict["alias"]
    try:
        profile = Profile.by_alias(alias)
    except NoResultFound:
        raise HTTPNotFound
    content_type = negotiate(request)
    if content_type is None:
        raise HTTPNotAcceptable(
            "Available as: {}".format(", ".join(OFFERS)))

    url = request.route_url("profile", alias=alias)
    if content_type == TURTLE:
        body = to_turtle(profile, url)
    else:
        body = json.dumps(to_jsonld(profile, url), indent=2)
    return Response(text=body, content_type=content_type, charset="UTF-8")


# Containers a WebID provider is expected to have, that we don't have yet.
@view_config(route_name="settings")
@view_config(route_name="inbox")
@view_config(route_name="storage")
def not_implemented(request):
    raise HTTPNotImplemented
