"""
Unit tests for the ingest pipeline — identity strategies, record builder, ingest.
"""
import re
import time
from datetime import datetime, timezone

import pytest

from app.errors import ValidationError
from app.pipeline import ingest_donation
from app.pipeline.donation_builder import build_donation, generate_donation_id
from app.pipeline.identity import (
    IDENTITY_STRATEGIES,
    extract_identity,
    leading_word_in_name,
    sigil_in_message,
    sigil_in_name,
)
from app.stores import BoundedDonationStore


# =====================================================================
# Strategies
# =====================================================================
class TestSigilInName:
    def test_strips_sigil(self):
        found = sigil_in_name("@Alice hi", "")
        assert found.handle == "Alice"
        assert found.clean_name == "Alice hi"

    def test_sigil_mid_name(self):
        found = sigil_in_name("Big thanks from @Bob_99!", "")
        assert found.handle == "Bob_99"
        assert found.clean_name == "Big thanks from Bob_99!"

    def test_only_first_occurrence_altered(self):
        found = sigil_in_name("@one and @two", "")
        assert found.handle == "one"
        assert found.clean_name == "one and @two"

    def test_trims_result(self):
        assert sigil_in_name("  @Zed  ", "").clean_name == "Zed"

    def test_no_sigil(self):
        assert sigil_in_name("Alice", "") is None

    def test_non_ascii_not_a_handle_word(self):
        assert sigil_in_name("@élan", "") is None


class TestLeadingWordInName:
    def test_matches_first_word(self):
        found = leading_word_in_name("Player_1 from Jakarta", "")
        assert found.handle == "Player_1"
        assert found.clean_name == "Player_1 from Jakarta"

    @pytest.mark.parametrize("name", ["Yo", "A", "ab cdef"])
    def test_short_names_ignored(self, name):
        assert leading_word_in_name(name, "") is None

    def test_too_long(self):
        assert leading_word_in_name("a" * 21, "") is None

    def test_twenty_chars_ok(self):
        assert leading_word_in_name("a" * 20, "").handle == "a" * 20

    def test_punctuation(self):
        assert leading_word_in_name("Bob! hi", "") is None

    def test_blank(self):
        assert leading_word_in_name("   ", "") is None


class TestSigilInMessage:
    def test_found(self):
        found = sigil_in_message("Yo", "thanks @Carol")
        assert found.handle == "Carol"
        assert found.clean_name == "Yo"

    def test_absent(self):
        assert sigil_in_message("Yo", "thanks a lot") is None


def test_strategy_order():
    assert [name for name, _ in IDENTITY_STRATEGIES] == [
        "sigil_in_name",
        "leading_word_in_name",
        "sigil_in_message",
    ]


# =====================================================================
# Extractor
# =====================================================================
class TestExtractIdentity:
    def test_sigil_name(self):
        result = extract_identity("@Alice hi", "")
        assert (result.handle, result.clean_name) == ("Alice", "Alice hi")
        assert result.strategy == "sigil_in_name"

    def test_bare_handle(self):
        result = extract_identity("Bob123", "")
        assert (result.handle, result.clean_name) == ("Bob123", "Bob123")

    def test_message_fallback(self):
        result = extract_identity("Yo", "thanks @Carol")
        assert (result.handle, result.clean_name) == ("Carol", "Yo")
        assert result.strategy == "sigil_in_message"

    def test_nothing_found(self):
        result = extract_identity("!!", "")
        assert result.handle is None
        assert result.clean_name == "!!"
        assert result.strategy is None

    def test_name_beats_message(self):
        assert extract_identity("Dave42", "for @Erin").handle == "Dave42"

    def test_missing_name_uses_default(self):
        result = extract_identity(None, None)
        assert result.clean_name == "Anonim"

    def test_empty_name_uses_custom_default(self):
        result = extract_identity("", "gift for @Frank", default_name="??")
        assert result.handle == "Frank"
        assert result.clean_name == "??"


# =====================================================================
# Builder
# =====================================================================
class TestBuildDonation:
    def test_minimal(self):
        donation = build_donation({"amount_raw": 5000})
        assert donation.amount == 5000
        assert donation.donor_name == "Anonim"
        assert donation.message == ""
        assert donation.processed is False
        assert donation.processed_at is None
        assert donation.created_at.tzinfo is not None

    def test_full(self):
        donation = build_donation(
            {
                "amount_raw": 10000,
                "donator_name": "@Alice hi",
                "message": "semangat!",
                "created_at": "2024-05-01T10:00:00+07:00",
                "type": "donation",
            }
        )
        assert donation.donor_name == "@Alice hi"
        assert donation.clean_donor_name == "Alice hi"
        assert donation.extracted_username == "Alice"
        assert donation.message == "semangat!"
        assert donation.created_at == datetime(2024, 5, 1, 3, 0, tzinfo=timezone.utc)

    def test_float_amount_truncated(self):
        assert build_donation({"amount_raw": 1500.0}).amount == 1500

    def test_zero_amount(self):
        assert build_donation({"amount_raw": 0}).amount == 0

    def test_largest_amount(self):
        assert build_donation({"amount_raw": 2**63 - 1}).amount == 2**63 - 1

    @pytest.mark.parametrize("created_at", ["not a date", "kemarin", ""])
    def test_unreadable_created_at_uses_receive_time(self, created_at):
        before = datetime.now(timezone.utc)
        donation = build_donation({"amount_raw": 10, "created_at": created_at})
        assert donation.created_at >= before
        assert donation.created_at.tzinfo is not None

    @pytest.mark.parametrize(
        "raw",
        [
            {},
            {"amount_raw": None},
            {"amount_raw": "5000"},
            {"amount_raw": True},
            {"amount_raw": -1},
            {"amount_raw": 2**63},
            {"amount_raw": 1e20},
            {"amount_raw": 10, "donator_name": 42},
            None,
            [1, 2],
        ],
    )
    def test_invalid(self, raw):
        with pytest.raises(ValidationError):
            build_donation(raw)

    def test_missing_amount_message(self):
        with pytest.raises(ValidationError) as excinfo:
            build_donation({"donator_name": "x"})
        assert "amount_raw" in excinfo.value.message

    def test_short_sigil_handle_dropped(self):
        donation = build_donation({"amount_raw": 1, "donator_name": "@ab"})
        assert donation.extracted_username is None
        assert donation.clean_donor_name == "ab"


class TestDonationId:
    def test_shape(self):
        now = time.time()
        donation_id = generate_donation_id(now)
        assert re.fullmatch(r"\d+[a-z0-9]{9}", donation_id)
        assert donation_id.startswith(str(int(now * 1000)))

    def test_unique(self):
        ids = {generate_donation_id() for _ in range(1000)}
        assert len(ids) == 1000


# =====================================================================
# Ingest
# =====================================================================
class TestIngest:
    def test_appends_before_returning(self):
        store = BoundedDonationStore(capacity=10)
        result = ingest_donation({"amount_raw": 2500, "donator_name": "Bob123"}, store)
        stored = store.get(result.donation_id)
        assert stored is not None
        assert stored.extracted_username == "Bob123"
        assert result.extracted_username == "Bob123"
        assert result.clean_name == "Bob123"

    def test_invalid_not_stored(self):
        store = BoundedDonationStore(capacity=10)
        with pytest.raises(ValidationError):
            ingest_donation({"message": "hi"}, store)
        assert store.count() == 0
