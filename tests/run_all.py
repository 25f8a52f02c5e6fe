"""Run unit and integration suites with deterministic ordering."""
from __future__ import annotations

import sys
import unittest

TEST_MODULES = [
    "tests.unit.test_models",
    "tests.unit.test_resolver",
    "tests.unit.test_rebalancer",
    "tests.unit.test_locks",
    "tests.integration.test_executor",
    "tests.integration.test_processor",
    "tests.integration.test_claims",
    "tests.integration.test_api",
]


def main() -> None:
    loader = unittest.TestLoader()
    suites = [loader.loadTestsFromName(name) for name in TEST_MODULES]
    suite = unittest.TestSuite(suites)
    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)
    if not result.wasSuccessful():
        sys.exit(1)


if __name__ == "__main__":
    main()
