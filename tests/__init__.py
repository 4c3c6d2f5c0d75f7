"""Test suite for QuakePulse.

This package contains hermetic tests following the pytest framework.
Test modules mirror the quakepulse/ package for discoverability.

Testing Philosophy:
    - Use pytest-mock for browser and filesystem isolation
    - Focus coverage on schema detection, parsing and change detection
    - Avoid external dependencies - all I/O is mocked or kept under tmp_path
"""
