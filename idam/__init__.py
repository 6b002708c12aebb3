"""
Identity and access management service.

The IDAM service is a Flask application that answers three kinds of
questions for the rest of the platform:

- Is this credential valid? (``/authentication``, ``/authn``)
- May this identity perform this action? (``/authz``)
- What is the API key for this identity? (``/key``, ``/v2/key``)

Authentication is delegated to exactly one :class:`.authn.Authenticator`
variant, chosen at startup from the ``AUTHN_PROVIDER`` configuration
parameter. Authorization runs an ordered chain of authorizers (see
:mod:`idam.authz`) over an identity resolved from a username, an API key, or
both. Profiles, API keys and throttle counters are persisted in the identity
store (see :mod:`idam.services.datastore`).
"""
