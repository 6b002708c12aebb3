"""Tests for :mod:`idam.services.counters`."""

from unittest import TestCase, mock
from threading import Barrier, Thread

import fakeredis
import redis

from ...exceptions import ConfigurationError, Unavailable
from .. import counters
from .test_datastore import DatastoreTestCase


class TestGetCounters(TestCase):
    """The backend is chosen from configuration."""

    def test_database(self):
        self.assertIsInstance(counters.get_counters({}),
                              counters.DatabaseCounters)

    def test_fake_redis(self):
        backend = counters.get_counters({'THROTTLE_BACKEND': 'redis',
                                         'REDIS_FAKE': True})
        self.assertIsInstance(backend, counters.RedisCounters)

    def test_unknown(self):
        with self.assertRaises(ConfigurationError):
            counters.get_counters({'THROTTLE_BACKEND': 'abacus'})

    def test_redis_missing_config(self):
        with self.assertRaises(ConfigurationError):
            counters.get_counters({'THROTTLE_BACKEND': 'redis'})


class TestRedisCounters(TestCase):
    """Counts are kept in one redis hash per user."""

    def setUp(self):
        connection = fakeredis.FakeStrictRedis(server=fakeredis.FakeServer())
        self.counters = counters.RedisCounters(connection)

    def test_increment(self):
        self.assertEqual(self.counters.increment('alice', 'ingest'), 1)
        self.assertEqual(self.counters.increment('alice', 'ingest'), 2)
        self.assertEqual(self.counters.increment('alice', 'search'), 1)
        record = self.counters.get_counts('alice')
        self.assertEqual(record.counts, {'ingest': 2, 'search': 1})

    def test_absent_record(self):
        """A user with no counts has a count of zero in every category."""
        self.assertEqual(self.counters.get_counts('bob').count('ingest'), 0)

    def test_clear(self):
        self.counters.increment('alice', 'ingest')
        self.counters.increment('bob', 'ingest')
        self.counters.clear('alice')
        self.assertEqual(self.counters.get_counts('alice').counts, {})
        self.assertEqual(self.counters.get_counts('bob').count('ingest'), 1)
        self.counters.clear()
        self.assertEqual(self.counters.get_counts('bob').counts, {})

    def test_concurrent_increments(self):
        """No increment is lost when many requests arrive at once."""
        threads = [
            Thread(target=self.counters.increment, args=('alice', 'ingest'))
            for _ in range(20)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(self.counters.get_counts('alice').count('ingest'),
                         20)

    def test_consume(self):
        """A count at its limit is left unchanged."""
        self.assertTrue(self.counters.consume('alice', 'ingest', 2))
        self.assertTrue(self.counters.consume('alice', 'ingest', 2))
        self.assertFalse(self.counters.consume('alice', 'ingest', 2))
        self.assertEqual(self.counters.get_counts('alice').count('ingest'), 2)

    def test_concurrent_consume(self):
        """Requests arriving at once never overrun the limit."""
        admitted = []
        barrier = Barrier(20)

        def consume():
            barrier.wait()
            admitted.append(self.counters.consume('alice', 'ingest', 5))

        threads = [Thread(target=consume) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(admitted.count(True), 5)
        self.assertEqual(self.counters.get_counts('alice').count('ingest'), 5)

    def test_unavailable(self):
        """A connection failure is reported as unavailability."""
        connection = mock.MagicMock()
        connection.hincrby.side_effect = redis.exceptions.ConnectionError
        with self.assertRaises(Unavailable):
            counters.RedisCounters(connection).increment('alice', 'ingest')


class TestDatabaseCounters(DatastoreTestCase):
    """Counts are kept in the identity database."""

    def test_increment_and_clear(self):
        backend = counters.DatabaseCounters()
        with self.app.app_context():
            self.assertEqual(backend.increment('alice', 'ingest'), 1)
            self.assertEqual(backend.get_counts('alice').count('ingest'), 1)
            backend.clear('alice')
            self.assertEqual(backend.get_counts('alice').count('ingest'), 0)

    def test_consume(self):
        """A count at its limit is left unchanged."""
        backend = counters.DatabaseCounters()
        with self.app.app_context():
            self.assertTrue(backend.consume('alice', 'ingest', 2))
            self.assertTrue(backend.consume('alice', 'ingest', 2))
            self.assertFalse(backend.consume('alice', 'ingest', 2))
            self.assertFalse(backend.consume('bob', 'ingest', 0))
            self.assertEqual(backend.get_counts('alice').count('ingest'), 2)
            self.assertEqual(backend.get_counts('bob').counts, {})

    def test_concurrent_consume(self):
        """Requests arriving at once never overrun the limit."""
        backend = counters.DatabaseCounters()
        admitted = []
        errors = []
        barrier = Barrier(20)

        def consume():
            barrier.wait()
            with self.app.app_context():
                try:
                    admitted.append(backend.consume('alice', 'ingest', 5))
                except Exception as e:
                    errors.append(e)

        threads = [Thread(target=consume) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        self.assertEqual(admitted.count(True), 5)
        with self.app.app_context():
            record = backend.get_counts('alice')
        self.assertEqual(record.count('ingest'), 5)
