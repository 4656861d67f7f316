#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Profile documents for a WebID, as Turtle and JSON-LD.

The published cert:RSAPublicKey entries are what a WebID-TLS verifier
compares against the client certificate it was handed."""

FOAF = "http://xmlns.com/foaf/0.1/"
CERT = "http://www.w3.org/ns/auth/cert#"
XSD = "http://www.w3.org/2001/XMLSchema#"

_TURTLE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def turtle_literal(value):
    return '"{}"'.format("".join(_TURTLE_ESCAPES.get(c, c) for c in value))


def turtle_iri(value):
    for c in '<>"{}|^`\\ ':
        if c in value:
            raise ValueError("Can't write {!r} as an IRI".format(value))
    return "<{}>".format(value)


def _keys(profile):
    return [(cert.modulus, cert.exponent) for cert in profile.certificates]


def to_turtle(profile, document_url):
    lines = [
        "@prefix foaf: <{}> .".format(FOAF),
        "@prefix cert: <{}> .".format(CERT),
        "@prefix xsd: <{}> .".format(XSD),
        "",
        "{} a foaf:PersonalProfileDocument ;".format(turtle_iri(document_url)),
        "    foaf:maker {0} ;".format(turtle_iri(profile.webid)),
        "    foaf:primaryTopic {0} .".format(turtle_iri(profile.webid)),
        "",
        "{} a foaf:Person ;".format(turtle_iri(profile.webid)),
    ]
    statements = ["foaf:name {}".format(turtle_literal(profile.name))]
    if profile.nick:
        statements.append("foaf:nick {}".format(turtle_literal(profile.nick)))
    if profile.image:
        statements.append("foaf:img {}".format(turtle_iri(profile.image)))
    for modulus, exponent in _keys(profile):
        statements.append(
            "cert:key [ a cert:RSAPublicKey ;\n"
            "        cert:modulus \"{}\"^^xsd:hexBinary ;\n"
            "        cert:exponent {:d} ]".format(modulus, exponent))
    lines.append(" ;\n".join("    " + s for s in statements) + " .")
    return "\n".join(lines) + "\n"


def to_jsonld(profile, document_url):
    person = {
        "@id": profile.webid,
        "@type": "foaf:Person",
        "foaf:name": profile.name,
    }
    if profile.nick:
        person["foaf:nick"] = profile.nick
    if profile.image:
        person["foaf:img"] = {"@id": profile.image}
    keys = [
        {
            "@type": "cert:RSAPublicKey",
            "cert:modulus": {"@value": modulus, "@type": "xsd:hexBinary"},
            "cert:exponent": exponent,
        }
        for modulus, exponent in _keys(profile)
    ]
    if keys:
        person["cert:key"] = keys
    return {
        "@context": {"foaf": FOAF, "cert": CERT, "xsd": XSD},
        "@graph": [
            {
                "@id": document_url,
                "@type": "foaf:PersonalProfileDocument",
                "foaf:maker": {"@id": profile.webid},
                "foaf:primaryTopic": {"@id": profile.webid},
            },
            person,
        ],
    }
