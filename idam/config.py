"""Flask configuration for the IDAM service."""

import os
import json

SPACE = os.environ.get('SPACE', 'local')
"""Deployment space in which this service is running (e.g. ``int``, ``prod``)."""

OVERRIDE_SPACES = os.environ.get('OVERRIDE_SPACES', 'int,stage,test')
"""
Spaces in which the pre-shared :const:`TEST_USERS` credentials are honoured.

Comma-separated. ``prod`` is never honoured, even if listed here.
"""

AUTHN_PROVIDER = os.environ.get('AUTHN_PROVIDER', 'store')
"""One of ``disabled``, ``store``, ``directory`` or ``federated``."""

CREDENTIAL_PARSING = os.environ.get('CREDENTIAL_PARSING', 'legacy')
"""
How the Authorization header is interpreted.

``legacy`` distinguishes certificate and password flows by the number of
colon-separated parts; ``scheme`` uses the header scheme (``Basic`` or
``PKI``) instead.
"""

BCRYPT_ROUNDS = int(os.environ.get('BCRYPT_ROUNDS', '12'))
DEFAULT_ROLES = os.environ.get('DEFAULT_ROLES', 'user')
"""Comma-separated roles given to new profiles that do not specify any."""

TEST_USERS = os.environ.get('TEST_USERS', '')
"""
Pre-shared ``username:credential`` pairs for integration testing.

Comma-separated. Only used by the directory authenticator, and only in an
override space.
"""

LDAP_URL = os.environ.get('LDAP_URL', 'ldap://localhost:389')
LDAP_USER_DN = os.environ.get('LDAP_USER_DN', 'ou=People,dc=example,dc=com')
LDAP_TIMEOUT = float(os.environ.get('LDAP_TIMEOUT', '5'))

FEDERATED_AUTH_URL = os.environ.get('FEDERATED_AUTH_URL')
FEDERATED_CERT = os.environ.get('FEDERATED_CERT')
"""Path to the client certificate presented to the identity provider."""
FEDERATED_KEY = os.environ.get('FEDERATED_KEY')
FEDERATED_CA = os.environ.get('FEDERATED_CA')
"""CA bundle used to verify the identity provider. Defaults to system CAs."""
FEDERATED_TIMEOUT = float(os.environ.get('FEDERATED_TIMEOUT', '10'))

SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite:///idam.db')
SQLALCHEMY_TRACK_MODIFICATIONS = False
CREATE_DB = bool(int(os.environ.get('CREATE_DB', '0')))

ENDPOINT_POLICY = json.loads(os.environ.get('ENDPOINT_POLICY', '{}'))
"""Mapping of action names to lists of roles allowed to perform them."""

ENDPOINT_POLICY_FILE = os.environ.get('ENDPOINT_POLICY_FILE')
"""Path to a JSON file with the action policy; takes precedence if set."""

THROTTLE_BACKEND = os.environ.get('THROTTLE_BACKEND', 'database')
"""Where throttle counts are kept: ``database`` or ``redis``."""

THROTTLE_CATEGORIES = json.loads(os.environ.get('THROTTLE_CATEGORIES', '{}'))
"""Mapping of action names to throttle categories."""

THROTTLE_LIMITS = json.loads(os.environ.get('THROTTLE_LIMITS', '{}'))
"""Mapping of throttle categories to the number of permitted uses."""

REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = os.environ.get('REDIS_PORT', '6379')
REDIS_DATABASE = os.environ.get('REDIS_DATABASE', '0')
REDIS_FAKE = bool(int(os.environ.get('REDIS_FAKE', '0')))
"""Use the FakeRedis library instead of a redis service.

Useful for testing and development."""

LOGLEVEL = os.environ.get('LOGLEVEL', 'INFO')
