"""Tests for :mod:`idam.credentials`."""

from unittest import TestCase
from base64 import b64encode

from .. import credentials
from ..credentials import CertificateClaim, PasswordClaim
from ..exceptions import MalformedCredential


def header(decoded: str, scheme: str = 'Basic') -> str:
    return f'{scheme} {b64encode(decoded.encode("utf-8")).decode("ascii")}'


class TestLegacyParsing(TestCase):
    """The flow is chosen by the number of colon-separated parts."""

    def test_username_and_secret(self):
        """A pair is a password claim."""
        claim = credentials.extract(header('alice:s3cr3t'))
        self.assertEqual(claim, PasswordClaim('alice', 's3cr3t'))

    def test_subject_only(self):
        """A single part is a certificate claim."""
        claim = credentials.extract(header('CN=alice,O=example'))
        self.assertEqual(claim, CertificateClaim('CN=alice,O=example'))

    def test_trailing_colon(self):
        """Trailing empty fields are ignored."""
        claim = credentials.extract(header('CN=alice:'))
        self.assertIsInstance(claim, CertificateClaim)
        self.assertEqual(claim.subject, 'CN=alice')

    def test_secret_with_colon(self):
        """A secret containing a colon cannot be told apart from noise."""
        with self.assertRaises(MalformedCredential):
            credentials.extract(header('alice:pass:word'))

    def test_scheme_is_ignored(self):
        """Any scheme prefix is accepted."""
        claim = credentials.extract(header('alice:s3cr3t', 'Anything'))
        self.assertEqual(claim, PasswordClaim('alice', 's3cr3t'))


class TestSchemeParsing(TestCase):
    """The flow is chosen by the header scheme."""

    def test_basic(self):
        """Basic splits on the first colon only."""
        claim = credentials.extract(header('alice:pass:word'), 'scheme')
        self.assertEqual(claim, PasswordClaim('alice', 'pass:word'))

    def test_pki(self):
        """The whole PKI payload is the subject."""
        claim = credentials.extract(header('CN=a:b', 'PKI'), 'scheme')
        self.assertEqual(claim, CertificateClaim('CN=a:b'))

    def test_basic_without_secret(self):
        """A Basic credential must include a separator."""
        with self.assertRaises(MalformedCredential):
            credentials.extract(header('alice'), 'scheme')

    def test_unknown_scheme(self):
        """Only known schemes are accepted."""
        with self.assertRaises(MalformedCredential):
            credentials.extract(header('alice:x', 'Bearer'), 'scheme')


class TestMalformedHeaders(TestCase):
    """Headers that cannot be decoded are rejected."""

    def test_missing(self):
        """No header at all."""
        for value in (None, ''):
            with self.assertRaises(MalformedCredential):
                credentials.extract(value)

    def test_wrong_number_of_parts(self):
        """The header must be exactly a scheme and a payload."""
        with self.assertRaises(MalformedCredential):
            credentials.extract('Basic')
        with self.assertRaises(MalformedCredential):
            credentials.extract('Basic abc def')

    def test_not_base64(self):
        """The payload must be base64."""
        with self.assertRaises(MalformedCredential):
            credentials.extract('Basic not*base64!')

    def test_not_utf8(self):
        """The decoded payload must be text."""
        payload = b64encode(b'\xff\xfe\xfd').decode('ascii')
        with self.assertRaises(MalformedCredential):
            credentials.extract(f'Basic {payload}')

    def test_empty_payload(self):
        """An empty credential is neither a subject nor a pair."""
        with self.assertRaises(MalformedCredential):
            credentials.extract(header(':'))

    def test_unknown_mode(self):
        """The parsing mode is a configuration value."""
        with self.assertRaises(ValueError):
            credentials.extract(header('alice:x'), 'sideways')
