"""Tests for :mod:`idam.authn.passwords`."""

from unittest import TestCase

from hypothesis import given, settings
from hypothesis import strategies as st

from ..passwords import hash_password, check_password, MAX_PASSWORD_BYTES

# Short enough to stay within the bcrypt limit, even for wide characters.
passwords = st.text(min_size=1, max_size=16)


class TestCheckPassword(TestCase):
    """:func:`.check_password` matches only the password that was hashed."""

    @settings(max_examples=10, deadline=None)
    @given(passwords)
    def test_check_passwords_successful(self, passw):
        encrypted = hash_password(passw, rounds=4)
        self.assertTrue(check_password(passw, encrypted),
                        f"should work for password '{passw}'")

    @settings(max_examples=10, deadline=None)
    @given(passwords, passwords)
    def test_check_passwords_fails(self, passw, npassw):
        encrypted = hash_password(passw, rounds=4)
        if passw != npassw:
            self.assertFalse(check_password(npassw, encrypted),
                             f"should not work for password '{npassw}'")
        else:
            self.assertTrue(check_password(npassw, encrypted),
                            f"should work for password '{passw}'")

    def test_hashes_are_salted(self):
        """The same password hashes differently each time."""
        self.assertNotEqual(hash_password('foo', rounds=4),
                            hash_password('foo', rounds=4))

    def test_empty_password(self):
        """Empty passwords are never hashed, and never match."""
        with self.assertRaises(ValueError):
            hash_password('', rounds=4)
        self.assertFalse(check_password('', hash_password('foo', rounds=4)))

    def test_long_password(self):
        """Passwords beyond the bcrypt limit are refused."""
        too_long = 'x' * (MAX_PASSWORD_BYTES + 1)
        with self.assertRaises(ValueError):
            hash_password(too_long, rounds=4)
        encrypted = hash_password(too_long[:MAX_PASSWORD_BYTES], rounds=4)
        self.assertFalse(check_password(too_long, encrypted))
