"""Startup script for the whole pyjabber test suite."""

import unittest
import pyjabber.test

def load_tests(loader, standard_tests, pattern):
    """Load all tests discovered in pyjabber.test."""
    # pylint: disable=W0613
    return pyjabber.test.discover()

unittest.main()
