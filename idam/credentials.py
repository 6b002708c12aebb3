"""
Decoding of credentials presented in the Authorization header.

The header carries either a certificate subject (PKI flow) or a username and
secret (password flow), base64-encoded after a scheme prefix. In ``legacy``
mode the two are told apart by counting colon-separated parts in the decoded
text, which breaks for secrets that contain a colon. ``scheme`` mode uses the
header scheme instead.
"""

from typing import NamedTuple, Optional, Union
import binascii
import logging
from base64 import b64decode

from .exceptions import MalformedCredential

logger = logging.getLogger(__name__)

LEGACY = 'legacy'
SCHEME = 'scheme'

PASSWORD_SCHEMES = {'basic'}
CERTIFICATE_SCHEMES = {'pki', 'cert'}


class PasswordClaim(NamedTuple):
    """A username and secret to be checked by an authenticator."""

    username: str
    secret: str


class CertificateClaim(NamedTuple):
    """The subject of a client certificate."""

    subject: str


Claim = Union[PasswordClaim, CertificateClaim]


def extract(header: Optional[str], mode: str = LEGACY) -> Claim:
    """
    Decode the value of an Authorization header into a claim.

    Parameters
    ----------
    header : str or None
        Raw header value, e.g. ``Basic dXNlcjpzZWNyZXQ=``.
    mode : str
        ``legacy`` or ``scheme``.

    Returns
    -------
    :class:`.PasswordClaim` or :class:`.CertificateClaim`

    Raises
    ------
    :class:`.MalformedCredential`
        Raised if the header is absent or does not decode to a known shape.

    """
    if not header:
        raise MalformedCredential('Authorization header is missing')
    parts = header.split(' ')
    if len(parts) != 2:
        raise MalformedCredential('Authorization header is malformed')
    scheme, payload = parts
    decoded = _decode(payload)

    if mode == SCHEME:
        return _from_scheme(scheme.lower(), decoded)
    if mode != LEGACY:
        raise ValueError(f'Unknown credential parsing mode: {mode}')

    fields = _split(decoded)
    if len(fields) == 1:
        return CertificateClaim(fields[0])
    if len(fields) == 2:
        return PasswordClaim(*fields)
    logger.debug('Decoded credential has %i parts', len(fields))
    raise MalformedCredential('Credential is neither a subject nor a pair')


def _from_scheme(scheme: str, decoded: str) -> Claim:
    if scheme in CERTIFICATE_SCHEMES:
        if not decoded:
            raise MalformedCredential('Certificate subject is empty')
        return CertificateClaim(decoded)
    if scheme in PASSWORD_SCHEMES:
        username, sep, secret = decoded.partition(':')
        if not sep:
            raise MalformedCredential('Basic credential lacks a secret')
        return PasswordClaim(username, secret)
    raise MalformedCredential(f'Unsupported authorization scheme: {scheme}')


def _decode(payload: str) -> str:
    try:
        return b64decode(payload, validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError) as e:
        raise MalformedCredential('Credential is not valid base64') from e


def _split(decoded: str) -> list:
    # Trailing empty fields are dropped, so "user:" is a single part.
    fields = decoded.split(':')
    while fields and fields[-1] == '':
        fields.pop()
    return fields
