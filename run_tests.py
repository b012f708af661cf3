#!/usr/bin/env python3
import sys
import os

import pytest


def run_tests():
    """Run the uptime report test suite"""
    # Add project root to path
    root = os.path.abspath(os.path.dirname(__file__))
    sys.path.insert(0, root)

    # Discover and run tests, including the fixture-based ones in conftest
    return pytest.main([os.path.join(root, 'tests'), '-v']) == 0


if __name__ == '__main__':
    success = run_tests()
    sys.exit(0 if success else 1)
