"""Android runtime helpers.

This package intentionally contains *thin* wrappers around adb so that the
routing code can be exercised with a fake controller in unit tests.
"""
