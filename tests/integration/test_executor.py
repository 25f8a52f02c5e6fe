from __future__ import annotations

import unittest

from tests.helpers import add_claim, make_repo, pin_clock, remove_tmpdir, seed_league, unpin_clock
from waivers.errors import (
    REASON_DROP_LOCKED,
    REASON_DROP_NOT_ON_ROSTER,
    REASON_INSUFFICIENT_FAAB,
    REASON_PLAYER_UNAVAILABLE,
    REASON_ROSTER_FULL,
    REASON_ROSTER_FULL_NO_DROP,
)
from waivers.executor import execute_claim
from waivers.models import claim_from_row
from waivers.processor import load_league_settings


class ExecutorTestCase(unittest.TestCase):
    def setUp(self) -> None:
        pin_clock()
        self.repo, self.tmpdir = make_repo()
        seed_league(self.repo, waiver_type="FAAB", max_roster_size=3)
        self.settings = load_league_settings(self.repo, "L1")

    def tearDown(self) -> None:
        self.repo.close()
        remove_tmpdir(self.tmpdir)
        unpin_clock()

    def _run(self, claim_id: str, awarded=None):
        row = self.repo.get_claim(claim_id)
        team = self.repo.get_team(row["team_id"])
        c = claim_from_row(row, self.settings, team_priority=int(team["waiver_priority"]))
        return execute_claim(self.repo, c, self.settings, awarded=set() if awarded is None else awarded, week=5)

    def test_success_applies_every_mutation(self) -> None:
        cid = add_claim(self.repo, team_id="T2", player_id="FA1", minutes=0, bid=30, drop="T2_P1")
        awarded: set[str] = set()
        outcome = self._run(cid, awarded)

        self.assertTrue(outcome.successful)
        self.assertEqual(outcome.awarded_bid, 30)
        self.assertEqual(awarded, {"FA1"})

        entry = self.repo.get_roster_entry("L1", "FA1")
        self.assertEqual(entry["team_id"], "T2")
        self.assertEqual(entry["slot"], "BENCH")
        self.assertEqual(entry["acquisition_type"], "waiver")
        self.assertIsNone(self.repo.get_roster_entry("L1", "T2_P1"))
        self.assertEqual(self.repo.get_team("T2")["faab_spent"], 30)

        stored = self.repo.get_claim(cid)
        self.assertEqual(stored["status"], "successful")
        self.assertEqual(stored["awarded_bid"], 30)
        self.assertEqual(stored["awarded_priority"], 2)

        notices = self.repo.list_notifications("owner-T2")
        self.assertEqual(len(notices), 1)
        self.assertEqual(notices[0]["type"], "WAIVER_PROCESSED")
        self.assertIn("Free Agent FA1", notices[0]["message"])
        self.assertIn("$30", notices[0]["message"])

        tx_types = sorted(t["type"] for t in self.repo.list_transactions(claim_id=cid))
        self.assertEqual(tx_types, ["add", "drop"])

    def test_locked_drop_fails_without_mutation(self) -> None:
        self.repo.set_roster_lock("T2", "T2_P1", True)
        cid = add_claim(self.repo, team_id="T2", player_id="FA1", minutes=0, bid=10, drop="T2_P1")
        outcome = self._run(cid)

        self.assertTrue(outcome.failed)
        self.assertEqual(outcome.reason, REASON_DROP_LOCKED)
        self.assertIsNone(self.repo.get_roster_entry("L1", "FA1"))
        self.assertEqual(self.repo.get_roster_entry("L1", "T2_P1")["team_id"], "T2")
        self.assertEqual(self.repo.get_team("T2")["faab_spent"], 0)
        stored = self.repo.get_claim(cid)
        self.assertEqual(stored["status"], "failed")
        self.assertEqual(stored["failure_reason"], REASON_DROP_LOCKED)

        notices = self.repo.list_notifications("owner-T2")
        self.assertEqual([n["type"] for n in notices], ["WAIVER_FAILED"])
        self.assertEqual(self.repo.list_transactions(claim_id=cid), [])

    def test_drop_owned_by_other_team(self) -> None:
        cid = add_claim(self.repo, team_id="T2", player_id="FA1", minutes=0, bid=10, drop="T1_P1")
        outcome = self._run(cid)
        self.assertEqual(outcome.reason, REASON_DROP_NOT_ON_ROSTER)
        self.assertEqual(self.repo.get_roster_entry("L1", "T1_P1")["team_id"], "T1")

    def test_insufficient_budget(self) -> None:
        self.repo.increment_faab_spent("T2", 90)
        cid = add_claim(self.repo, team_id="T2", player_id="FA1", minutes=0, bid=11)
        outcome = self._run(cid)
        self.assertEqual(outcome.reason, REASON_INSUFFICIENT_FAAB)
        self.assertEqual(self.repo.get_team("T2")["faab_spent"], 90)

    def test_bid_equal_to_remaining_budget_succeeds(self) -> None:
        self.repo.increment_faab_spent("T2", 90)
        cid = add_claim(self.repo, team_id="T2", player_id="FA1", minutes=0, bid=10)
        self.assertTrue(self._run(cid).successful)
        self.assertEqual(self.repo.get_team("T2")["faab_spent"], 100)

    def test_full_roster_without_drop(self) -> None:
        self.repo.upsert_player("X", name="Extra")
        self.repo.add_roster_entry("L1", "T2", "X")
        cid = add_claim(self.repo, team_id="T2", player_id="FA1", minutes=0, bid=1)
        self.assertEqual(self._run(cid).reason, REASON_ROSTER_FULL_NO_DROP)

    def test_overfull_roster_with_drop(self) -> None:
        for pid in ("X", "Y"):
            self.repo.upsert_player(pid, name=pid)
            self.repo.add_roster_entry("L1", "T2", pid)
        cid = add_claim(self.repo, team_id="T2", player_id="FA1", minutes=0, bid=1, drop="X")
        self.assertEqual(self._run(cid).reason, REASON_ROSTER_FULL)
        self.assertIsNotNone(self.repo.get_roster_entry("L1", "X"))

    def test_player_already_awarded_this_run(self) -> None:
        cid = add_claim(self.repo, team_id="T2", player_id="FA1", minutes=0, bid=1)
        self.assertEqual(self._run(cid, {"FA1"}).reason, REASON_PLAYER_UNAVAILABLE)

    def test_terminal_claim_is_skipped(self) -> None:
        cid = add_claim(self.repo, team_id="T2", player_id="FA1", minutes=0, bid=5)
        self.assertTrue(self._run(cid).successful)
        row = self.repo.get_claim(cid)
        c = claim_from_row(row, self.settings, team_priority=2)
        outcome = execute_claim(self.repo, c, self.settings, awarded=set(), week=5)
        self.assertTrue(outcome.skipped)
        self.assertEqual(self.repo.get_team("T2")["faab_spent"], 5)


if __name__ == "__main__":
    unittest.main()
