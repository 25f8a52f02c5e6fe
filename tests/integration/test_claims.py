from __future__ import annotations

import unittest

from tests.helpers import at, make_repo, pin_clock, remove_tmpdir, seed_league, unpin_clock
from waivers import cancel_claim, list_claims, submit_claim
from waivers.errors import (
    CLAIM_FORBIDDEN,
    CLAIM_INVALID,
    CLAIM_NOT_FOUND,
    CLAIM_NOT_PENDING,
    LEAGUE_NOT_FOUND,
    PLAYER_NOT_FOUND,
    TEAM_NOT_FOUND,
    WaiverError,
)
from waivers.processor import process_waiver_claims


class _ClaimsCase(unittest.TestCase):
    waiver_type = "FAAB"

    def setUp(self) -> None:
        pin_clock(15)
        self.repo, self.tmpdir = make_repo()
        seed_league(self.repo, waiver_type=self.waiver_type, max_roster_size=3, minimum_bid=1)

    def tearDown(self) -> None:
        self.repo.close()
        remove_tmpdir(self.tmpdir)
        unpin_clock()

    def assertCode(self, code, fn, **kwargs):
        with self.assertRaises(WaiverError) as cm:
            fn(self.repo, **kwargs)
        self.assertEqual(cm.exception.code, code)
        return cm.exception


class FaabSubmitTestCase(_ClaimsCase):
    def test_submit_stores_pending_claim(self) -> None:
        claim = submit_claim(self.repo, league_id="L1", team_id="T2", player_id="FA1", bid_amount=12)
        self.assertEqual(claim["status"], "pending")
        self.assertEqual(claim["faab_bid"], 12)
        self.assertEqual(claim["priority"], 2)
        self.assertEqual(claim["week"], 5)
        self.assertEqual(claim["submitted_at"], at(15))

    def test_unknown_league_team_player(self) -> None:
        self.assertCode(LEAGUE_NOT_FOUND, submit_claim, league_id="L9", team_id="T1", player_id="FA1", bid_amount=1)
        self.assertCode(TEAM_NOT_FOUND, submit_claim, league_id="L1", team_id="T9", player_id="FA1", bid_amount=1)
        self.assertCode(PLAYER_NOT_FOUND, submit_claim, league_id="L1", team_id="T1", player_id="NOBODY", bid_amount=1)

    def test_rostered_player_rejected(self) -> None:
        self.assertCode(CLAIM_INVALID, submit_claim, league_id="L1", team_id="T1", player_id="T2_P1", bid_amount=1)

    def test_bid_below_minimum(self) -> None:
        err = self.assertCode(CLAIM_INVALID, submit_claim, league_id="L1", team_id="T1", player_id="FA1", bid_amount=0)
        self.assertEqual(err.details["minimum_bid"], 1)

    def test_negative_bid(self) -> None:
        self.assertCode(CLAIM_INVALID, submit_claim, league_id="L1", team_id="T1", player_id="FA1", bid_amount=-5)

    def test_pending_bids_count_against_budget(self) -> None:
        submit_claim(self.repo, league_id="L1", team_id="T1", player_id="FA1", bid_amount=70)
        err = self.assertCode(
            CLAIM_INVALID, submit_claim, league_id="L1", team_id="T1", player_id="FA2", bid_amount=31
        )
        self.assertEqual(err.details["available"], 30)
        submit_claim(self.repo, league_id="L1", team_id="T1", player_id="FA2", bid_amount=30)

    def test_duplicate_pending_claim(self) -> None:
        submit_claim(self.repo, league_id="L1", team_id="T1", player_id="FA1", bid_amount=5)
        self.assertCode(CLAIM_INVALID, submit_claim, league_id="L1", team_id="T1", player_id="FA1", bid_amount=6)

    def test_full_roster_requires_drop(self) -> None:
        self.repo.upsert_player("X", name="Extra")
        self.repo.add_roster_entry("L1", "T1", "X")
        self.assertCode(CLAIM_INVALID, submit_claim, league_id="L1", team_id="T1", player_id="FA1", bid_amount=5)
        claim = submit_claim(
            self.repo, league_id="L1", team_id="T1", player_id="FA1", bid_amount=5, drop_player_id="X"
        )
        self.assertEqual(claim["drop_player_id"], "X")

    def test_drop_must_be_owned_and_unlocked(self) -> None:
        self.assertCode(
            CLAIM_INVALID, submit_claim, league_id="L1", team_id="T1", player_id="FA1", bid_amount=5, drop_player_id="T2_P1"
        )
        self.repo.set_roster_lock("T1", "T1_P1", True)
        err = self.assertCode(
            CLAIM_INVALID, submit_claim, league_id="L1", team_id="T1", player_id="FA1", bid_amount=5, drop_player_id="T1_P1"
        )
        self.assertEqual(err.message, "cannot drop locked player")


class PrioritySubmitTestCase(_ClaimsCase):
    waiver_type = "PRIORITY"

    def test_positive_bid_rejected(self) -> None:
        self.assertCode(CLAIM_INVALID, submit_claim, league_id="L1", team_id="T1", player_id="FA1", bid_amount=5)

    def test_claim_without_bid(self) -> None:
        claim = submit_claim(self.repo, league_id="L1", team_id="T3", player_id="FA1")
        self.assertIsNone(claim["faab_bid"])
        self.assertEqual(claim["priority"], 3)


class CancelAndListTestCase(_ClaimsCase):
    def test_owner_cancels_pending_claim(self) -> None:
        claim = submit_claim(self.repo, league_id="L1", team_id="T1", player_id="FA1", bid_amount=5)
        self.assertCode(CLAIM_FORBIDDEN, cancel_claim, claim_id=claim["claim_id"], team_id="T2")
        out = cancel_claim(self.repo, claim["claim_id"], team_id="T1")
        self.assertTrue(out["cancelled"])
        self.assertIsNone(self.repo.get_claim(claim["claim_id"]))
        self.assertCode(CLAIM_NOT_FOUND, cancel_claim, claim_id=claim["claim_id"], team_id="T1")

    def test_processed_claim_cannot_be_cancelled(self) -> None:
        claim = submit_claim(self.repo, league_id="L1", team_id="T1", player_id="FA1", bid_amount=5)
        process_waiver_claims(self.repo, "L1")
        err = self.assertCode(CLAIM_NOT_PENDING, cancel_claim, claim_id=claim["claim_id"], team_id="T1")
        self.assertEqual(err.details["status"], "successful")

    def test_list_claims_filters(self) -> None:
        first = submit_claim(self.repo, league_id="L1", team_id="T1", player_id="FA1", bid_amount=5)
        pin_clock(20)
        second = submit_claim(self.repo, league_id="L1", team_id="T2", player_id="FA2", bid_amount=5)

        ids = [c["claim_id"] for c in list_claims(self.repo, "L1")]
        self.assertEqual(ids, [second["claim_id"], first["claim_id"]])
        only_t1 = list_claims(self.repo, "L1", team_id="T1")
        self.assertEqual([c["claim_id"] for c in only_t1], [first["claim_id"]])
        self.assertEqual(list_claims(self.repo, "L1", status="failed"), [])
        self.assertCode(CLAIM_INVALID, list_claims, league_id="L1", status="bogus")


if __name__ == "__main__":
    unittest.main()
