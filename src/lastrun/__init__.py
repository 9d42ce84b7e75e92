"""
lastrun - remembers the outcome of the previous test run.

This package provides tools to:
- Persist which tests failed and how long each test took
- Restrict the next run to the previously failed tests
- Inspect or clear the recorded state from the command line
"""

__version__ = "0.1.0"
__author__ = "lastrun Team"

LAST_RUN_FILENAME = ".last-run.json"
