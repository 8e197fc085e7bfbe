"""Tests for the decoder ring: round trips, signing, fallback, test mode."""

from __future__ import annotations

import re

import pytest

from pakay.config import HashidConfig, derive_for_scope
from pakay.decoder import SIGNING_MARKER, DecoderRing, parse_leading_int, scope_prefix
from pakay.errors import EncodeError, InvalidOption

IDS = [0, 1, 7, 42, 123, 65535, 999_999, 2**40]


def _ring(prefix: str = "u", scope_tag: str = "users", **overrides) -> DecoderRing:
    base = HashidConfig(salt="s1")
    return DecoderRing(derive_for_scope(base, scope_tag, overrides), prefix)


class TestScopePrefix:
    def test_capitals_lowercased(self):
        assert scope_prefix("UserAccount") == "ua"

    def test_single_word(self):
        assert scope_prefix("User") == "u"

    @pytest.mark.parametrize("name", ["users", "Order2", "User_Account", ""])
    def test_rejects_names_without_strippable_prefix(self, name):
        with pytest.raises(InvalidOption):
            scope_prefix(name)

    def test_collisions_are_possible(self):
        assert scope_prefix("UserAccount") == scope_prefix("UnitAudit")


class TestRoundTrip:
    @pytest.mark.parametrize("sign", [True, False])
    def test_default_alphabet(self, sign):
        ring = _ring(sign=sign)
        for n in IDS:
            assert ring.decode(ring.encode(n)) == n

    def test_custom_alphabet_and_length(self):
        alphabet = "abcdefghijklmnopqrstuvwxyz0123456789"
        ring = _ring(alphabet=alphabet, min_length=12)
        for n in IDS:
            token = ring.encode(n)
            assert re.fullmatch(r"u_[a-z0-9]{12,}", token)
            assert ring.decode(token) == n

    def test_min_length_zero(self):
        ring = _ring(min_length=0, sign=False)
        assert ring.decode(ring.encode(5)) == 5

    def test_min_length_pads_never_truncates(self):
        short = _ring(min_length=6).encode(2**40)
        long = _ring(min_length=30).encode(2**40)
        assert len(short.split("_", 1)[1]) >= 6
        assert len(long.split("_", 1)[1]) >= 30


class TestTokenShape:
    def test_default_grammar(self):
        token = _ring().encode(123)
        assert re.fullmatch(r"^[a-z]+_[A-Za-z0-9]+$", token)

    def test_example_end_to_end(self):
        ring = _ring()
        token = ring.encode(123)
        assert re.fullmatch(r"u_[A-Za-z0-9]{6,}", token)
        assert ring.decode(token, fallback=False) == 123
        assert ring.decode("u_000000", fallback=True) == "u_000000"

    def test_deterministic(self):
        assert _ring().encode(99) == _ring().encode(99)

    def test_no_ambiguous_characters(self):
        ring = _ring()
        for n in range(200):
            payload = ring.encode(n).split("_", 1)[1]
            assert not set(payload) & set("iloILO")


class TestAbsence:
    def test_encode_none(self):
        assert _ring().encode(None) is None

    @pytest.mark.parametrize("fallback", [True, False])
    def test_decode_none(self, fallback):
        assert _ring().decode(None, fallback=fallback) is None

    def test_decode_none_in_test_mode(self):
        assert _ring(test_mode=True).decode(None) is None


class TestSequences:
    def test_encode_list(self):
        ring = _ring()
        assert ring.encode([1, 2, 3]) == [ring.encode(1), ring.encode(2), ring.encode(3)]

    def test_encode_keeps_tuple(self):
        ring = _ring()
        assert ring.encode((4, 5)) == (ring.encode(4), ring.encode(5))

    def test_encode_list_with_none(self):
        ring = _ring()
        assert ring.encode([1, None]) == [ring.encode(1), None]

    def test_decode_list_keeps_order(self):
        ring = _ring()
        tokens = ring.encode([30, 10, 20])
        assert ring.decode(tokens) == [30, 10, 20]

    def test_decode_list_mixed(self):
        ring = _ring()
        tokens = [ring.encode(8), "u_000000", None]
        assert ring.decode(tokens, fallback=True) == [8, "u_000000", None]
        assert ring.decode(tokens, fallback=False) == [8, None, None]


class TestFallback:
    @pytest.mark.parametrize("garbage", ["u_000000", "u_", "", "not a token", "u_!!!", "12"])
    def test_malformed_with_fallback(self, garbage):
        assert _ring().decode(garbage, fallback=True) == garbage

    @pytest.mark.parametrize("garbage", ["u_000000", "u_", "", "not a token", "u_!!!"])
    def test_malformed_without_fallback(self, garbage):
        assert _ring().decode(garbage, fallback=False) is None

    def test_raw_int_falls_back_to_itself(self):
        assert _ring().decode(5, fallback=True) == 5

    def test_unsigned_malformed(self):
        assert _ring(sign=False).decode("u_000000", fallback=True) == "u_000000"


class TestSigning:
    def test_unsigned_payload_rejected_by_signed_ring(self):
        unsigned = _ring(sign=False)
        signed = _ring(sign=True)
        token = unsigned.encode(77)
        assert signed.decode(token) is None
        assert signed.decode(token, fallback=True) == token

    def test_signed_token_differs_from_unsigned(self):
        assert _ring(sign=True).encode(77) != _ring(sign=False).encode(77)

    def test_marker_constant(self):
        assert SIGNING_MARKER == 42


class TestCrossScope:
    def test_other_scope_rejects_token(self):
        users = _ring("u", "users")
        orders = _ring("o", "orders")
        for n in (1, 2, 3, 500, 123456):
            token = users.encode(n)
            assert orders.decode(token) is None
            assert orders.decode(token, fallback=True) == token

    def test_other_salt_rejects_token(self):
        a = DecoderRing(derive_for_scope(HashidConfig(salt="alpha"), "users"), "u")
        b = DecoderRing(derive_for_scope(HashidConfig(salt="beta"), "users"), "u")
        assert b.decode(a.encode(321)) is None


class TestEncodeErrors:
    @pytest.mark.parametrize("bad", [-1, 1.5, "12", True])
    def test_rejects_non_integers(self, bad):
        with pytest.raises(EncodeError):
            _ring().encode(bad)

    def test_encode_error_is_value_error(self):
        with pytest.raises(ValueError):
            _ring().encode(-5)


class TestTestMode:
    def test_encode_is_decimal(self):
        assert _ring("x", test_mode=True).encode(7) == "x_7"

    def test_decode(self):
        assert _ring("x", test_mode=True).decode("x_7", fallback=False) == 7

    def test_round_trip_list(self):
        ring = _ring("x", test_mode=True)
        assert ring.decode(ring.encode([1, 2])) == [1, 2]

    def test_garbage_parses_to_zero(self):
        assert _ring("x", test_mode=True).decode("x_abc", fallback=True) == 0

    def test_leading_digits(self):
        assert _ring("x", test_mode=True).decode("x_12abc") == 12


class TestParseLeadingInt:
    @pytest.mark.parametrize(
        "value,expected",
        [("42", 42), ("  7", 7), ("-3", -3), ("12abc", 12), ("abc", 0), ("", 0)],
    )
    def test_parse(self, value, expected):
        assert parse_leading_int(value) == expected
