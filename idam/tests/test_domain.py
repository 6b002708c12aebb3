"""Tests for :mod:`idam.domain`."""

from unittest import TestCase
from datetime import datetime

from pytz import UTC

from .. import domain


class TestProfileSerialization(TestCase):
    """Profiles are serialized without their credential."""

    def setUp(self):
        self.profile = domain.UserProfile(
            username='alice',
            distinguished_name='CN=alice,O=example',
            roles=frozenset({'user', 'admin'}),
            credential='$2b$04$notarealhash',
            created_on=datetime(2018, 3, 4, 1, 2, 3, tzinfo=UTC),
            last_updated_on=datetime(2018, 3, 5, 1, 2, 3, tzinfo=UTC)
        )

    def test_to_dict(self):
        """The credential is never included."""
        data = domain.profile_to_dict(self.profile)
        self.assertNotIn('credential', data)
        self.assertEqual(data['roles'], ['admin', 'user'])
        self.assertEqual(data['distinguishedName'], 'CN=alice,O=example')
        self.assertEqual(data['createdOn'], '2018-03-04T01:02:03+00:00')

    def test_from_dict(self):
        """Everything but the credential survives serialization."""
        loaded = domain.profile_from_dict(domain.profile_to_dict(self.profile))
        self.assertEqual(loaded, self.profile._replace(credential=None))


class TestParseRoles(TestCase):
    """Roles may be given as a comma-separated string or a list."""

    def test_string(self):
        self.assertEqual(domain.parse_roles(' user, admin ,'),
                         frozenset({'user', 'admin'}))

    def test_list(self):
        self.assertEqual(domain.parse_roles(['user', ' ']),
                         frozenset({'user'}))

    def test_empty(self):
        self.assertEqual(domain.parse_roles(None), frozenset())
        self.assertEqual(domain.parse_roles(''), frozenset())


class TestThrottleRecord(TestCase):
    """Missing categories count as zero."""

    def test_count(self):
        record = domain.ThrottleRecord('alice', {'ingest': 3})
        self.assertEqual(record.count('ingest'), 3)
        self.assertEqual(record.count('search'), 0)

    def test_default_counts_are_read_only(self):
        """Records built without counts do not share a mutable mapping."""
        record = domain.ThrottleRecord('alice')
        with self.assertRaises(TypeError):
            record.counts['ingest'] = 1
        self.assertEqual(domain.ThrottleRecord('bob').count('ingest'), 0)
