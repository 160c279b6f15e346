"""Test doubles for the root-s3 test suite."""
