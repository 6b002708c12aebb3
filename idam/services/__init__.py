"""Integrations with the identity store and throttle counter backends."""
