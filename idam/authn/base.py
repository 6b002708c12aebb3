"""Base class for authenticators."""

from typing import Any, Mapping, Optional

from ..credentials import Claim, CertificateClaim, PasswordClaim
from ..domain import AuthResponse
from ..exceptions import UnsupportedOperation


class Authenticator(object):
    """Turns a credential claim into an authentication decision."""

    name = 'base'

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'Authenticator':
        """Create an instance from application configuration."""
        return cls()

    def authenticate(self, claim: Claim) -> Optional[AuthResponse]:
        """Dispatch ``claim`` to the flow that handles it."""
        if isinstance(claim, CertificateClaim):
            return self.authenticate_by_certificate(claim.subject)
        if isinstance(claim, PasswordClaim):
            return self.authenticate_by_password(claim.username, claim.secret)
        raise TypeError(f'Not a credential claim: {claim!r}')

    def authenticate_by_password(self, username: str, secret: str) \
            -> Optional[AuthResponse]:
        """Authenticate with a username and secret."""
        raise UnsupportedOperation(
            f'{self.name} authentication does not support passwords'
        )

    def authenticate_by_certificate(self, subject: str) \
            -> Optional[AuthResponse]:
        """Authenticate with the subject of a client certificate."""
        raise UnsupportedOperation(
            f'{self.name} authentication does not support PKI certificates'
        )
