"""Tests for :mod:`idam.authz.endpoint`."""

from unittest import TestCase
import json
import os
import tempfile

from ...domain import UserProfile
from ...exceptions import ConfigurationError
from ..endpoint import EndpointAuthorizer, load_policy

POLICY = {'deleteUser': ['admin'], 'GET /jobs': ['user', 'admin']}


class TestEndpointAuthorizer(TestCase):
    """A user may act if they hold any role the policy allows."""

    def setUp(self):
        self.authorizer = EndpointAuthorizer(load_policy(POLICY))

    def test_role_missing(self):
        user = UserProfile('alice', roles=frozenset({'user'}))
        response = self.authorizer.authorize(user, 'deleteUser')
        self.assertFalse(response.success)
        self.assertIsNone(response.profile)

    def test_role_present(self):
        admin = UserProfile('bob', roles=frozenset({'admin'}))
        response = self.authorizer.authorize(admin, 'deleteUser')
        self.assertTrue(response.success)
        self.assertEqual(response.profile, admin)

    def test_any_role(self):
        user = UserProfile('alice', roles=frozenset({'user', 'viewer'}))
        self.assertTrue(self.authorizer.authorize(user, 'GET /jobs').success)

    def test_unknown_action(self):
        """Actions that are not in the policy are denied."""
        admin = UserProfile('bob', roles=frozenset({'admin'}))
        response = self.authorizer.authorize(admin, 'launchMissiles')
        self.assertFalse(response.success)

    def test_no_roles(self):
        nobody = UserProfile('carol')
        self.assertFalse(self.authorizer.authorize(nobody, 'GET /jobs')
                         .success)


class TestLoadPolicy(TestCase):
    """The policy is loaded once into a read-only mapping."""

    def test_immutable(self):
        policy = load_policy(POLICY)
        with self.assertRaises(TypeError):
            policy['deleteUser'] = frozenset({'user'})
        self.assertEqual(policy['deleteUser'], frozenset({'admin'}))

    def test_single_role(self):
        """A role may be given as a string rather than a list."""
        self.assertEqual(load_policy({'x': 'admin'})['x'],
                         frozenset({'admin'}))

    def test_from_file(self):
        """A policy file takes precedence over the inline policy."""
        _, path = tempfile.mkstemp(suffix='.json')
        try:
            with open(path, 'w') as f:
                json.dump({'fromFile': ['user']}, f)
            policy = load_policy({'inline': ['user']}, path)
        finally:
            os.remove(path)
        self.assertIn('fromFile', policy)
        self.assertNotIn('inline', policy)

    def test_bad_file(self):
        with self.assertRaises(ConfigurationError):
            load_policy(path='/does/not/exist.json')

    def test_not_a_mapping(self):
        with self.assertRaises(ConfigurationError):
            load_policy(['deleteUser'])
