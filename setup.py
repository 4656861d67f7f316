from setuptools import setup, find_packages

requires = [
    "pyramid",
    "SQLAlchemy >= 1.4.32",
    "transaction",
    "pyramid_tm",
    "zope.sqlalchemy >= 1.6",
    "waitress",
    "cryptography >= 38",
    "pyOpenSSL >= 22.0.0",
    "python-dateutil",
    # Transient dependency from pyramid->webob,
    # should be fixed in a later release of webob
    "legacy-cgi; python_version >= '3.13'"
]

tests_require = [
    "pytest",
]

setup(
    name="webid",
    version="0.3.0",
    python_requires=">=3.7",
    description="webid",
    long_description="""
webid is a small WebID provider. It issues self-signed X.509 client
certificates that carry a person's WebID in their subjectAltName, and
publishes the certificate's RSA modulus and exponent in that person's profile
document.

A server that is handed such a certificate during a TLS handshake can fetch
the profile the WebID points at and compare the published key with the one in
the certificate (WebID-TLS). No certificate authority is involved: the
profile, not a signature chain, is what vouches for the key.

Keys and certificates are made by the openssl command line tool.
      """,
    classifiers=[
        "Programming Language :: Python",
        "Framework :: Pyramid",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
    ],
    keywords="web wsgi pyramid webid foaf certificates x509 ssl tls",
    packages=find_packages(exclude=["tests"]),
    include_package_data=True,
    zip_safe=False,
    test_suite="tests",
    install_requires=requires,
    extras_require={
        "testing": tests_require,
    },
    entry_points="""\
      [paste.app_factory]
      main = webid:main
      [console_scripts]
      webid_initialize_db = webid.scripts.initializedb:main
      webid_tool = webid.scripts.tool:main
      """,
)
