"""Tests for :mod:`idam.services.keys`."""

from unittest import mock

from ...domain import UserProfile
from .. import datastore, keys
from .test_datastore import DatastoreTestCase


class TestIssue(DatastoreTestCase):
    """Issuing a key rotates any existing key."""

    def setUp(self):
        super(TestIssue, self).setUp()
        with self.app.app_context():
            datastore.insert_profile(UserProfile('alice', 'CN=alice'))

    def test_rotation(self):
        """After a second issue, only the new key is valid."""
        with self.app.app_context():
            first = keys.issue('alice')
            second = keys.issue('alice')
            self.assertNotEqual(first, second)
            self.assertFalse(keys.validate(first))
            self.assertTrue(keys.validate(second))
            self.assertEqual(keys.lookup_key('alice'), second)
            self.assertEqual(keys.lookup_owner(second), 'alice')

    def test_one_key_per_user(self):
        """Exactly one mapping exists for the user."""
        with self.app.app_context():
            for _ in range(3):
                keys.issue('alice')
            with datastore.transaction() as session:
                count = session.query(datastore.models.DBApiKey) \
                    .filter_by(username='alice').count()
        self.assertEqual(count, 1)

    @mock.patch(f'{keys.__name__}.audit')
    def test_issue_is_audited(self, mock_audit):
        with self.app.app_context():
            keys.issue('alice')
        self.assertEqual(mock_audit.call_args[0][1:3],
                         ('alice', 'generateApiKey'))


class TestRevoke(DatastoreTestCase):
    """Revoked keys no longer validate."""

    def test_revoke(self):
        with self.app.app_context():
            token = keys.issue('alice')
            self.assertEqual(keys.revoke(token), 'alice')
            self.assertFalse(keys.validate(token))
            self.assertIsNone(keys.lookup_key('alice'))

    def test_revoke_unknown(self):
        """Revoking a key that does not exist does nothing."""
        with self.app.app_context():
            token = keys.issue('alice')
            self.assertIsNone(keys.revoke('not-a-key'))
            self.assertTrue(keys.validate(token))

    def test_validate_never_issued(self):
        with self.app.app_context():
            self.assertFalse(keys.validate('never-issued'))
            self.assertFalse(keys.validate(''))
