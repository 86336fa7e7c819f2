"""Test suite for propresenter_edit.

Organized to mirror the source tree: codec/, processing/ and internals/
subfolders, plus top-level tests for io, the CLI and startup.

Running Tests:
    pytest                                  # Run all tests
    pytest -v                               # Verbose output
    pytest tests/test_cli.py                # Run specific file
    pytest -k "round_trip"                  # Run tests with matching pattern in function name

Notes:
    - Presentations are built in memory with tests/helpers.py; no binary
      fixtures are checked in
    - conftest.py points platformdirs folders (logs, output, configs) at tmp_path
    - Subfolders have no __init__.py, so test file names must be unique
"""
