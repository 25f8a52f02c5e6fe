from __future__ import annotations

import threading
import unittest

from waivers import locks
from waivers.locks import waiver_run_lock


class WaiverRunLockTestCase(unittest.TestCase):
    def test_reentrant_in_same_thread(self) -> None:
        with waiver_run_lock("L1", 1):
            with waiver_run_lock("L1", 1, timeout_s=0):
                pass

    def test_other_thread_times_out(self) -> None:
        held = threading.Event()
        release = threading.Event()

        def _hold() -> None:
            with waiver_run_lock("L1", 2):
                held.set()
                release.wait(5)

        t = threading.Thread(target=_hold)
        t.start()
        try:
            self.assertTrue(held.wait(5))
            with self.assertRaises(TimeoutError):
                with waiver_run_lock("L1", 2, timeout_s=0.05):
                    pass
            # Different week, different lock.
            with waiver_run_lock("L1", 3, timeout_s=0.05):
                pass
        finally:
            release.set()
            t.join(5)

    def test_released_keys_are_dropped(self) -> None:
        with waiver_run_lock("L9", 1):
            with waiver_run_lock("L9", 1):
                self.assertIn(("L9", 1), locks._RUN_LOCKS)
            self.assertIn(("L9", 1), locks._RUN_LOCKS)
        self.assertNotIn(("L9", 1), locks._RUN_LOCKS)

    def test_timed_out_waiter_does_not_leak_key(self) -> None:
        held = threading.Event()
        release = threading.Event()

        def _hold() -> None:
            with waiver_run_lock("L9", 2):
                held.set()
                release.wait(5)

        t = threading.Thread(target=_hold)
        t.start()
        try:
            self.assertTrue(held.wait(5))
            with self.assertRaises(TimeoutError):
                with waiver_run_lock("L9", 2, timeout_s=0.01):
                    pass
            self.assertIn(("L9", 2), locks._RUN_LOCKS)
        finally:
            release.set()
            t.join(5)
        self.assertNotIn(("L9", 2), locks._RUN_LOCKS)

    def test_bad_timeout(self) -> None:
        with self.assertRaises(ValueError):
            with waiver_run_lock("L1", 4, timeout_s="soon"):
                pass


if __name__ == "__main__":
    unittest.main()
