"""Pytest configuration and shared fixtures."""

import os

from hypothesis import settings

if "MERKLE_THREADS" not in os.environ:
    os.environ["MERKLE_THREADS"] = "auto"

# Create a profile named "no_deadline" with deadline disabled.
#
# Thread pool start-up makes the first examples of parallel builds slow.
settings.register_profile("no_deadline", deadline=None)
settings.load_profile("no_deadline")
