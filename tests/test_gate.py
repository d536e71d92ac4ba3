"""Tests for the allow-list authorization gate."""

import logging

import pytest

from wolbot.auth.gate import AuthorizationGate


class TestCheck:
    def test_allows_listed_ids(self) -> None:
        gate = AuthorizationGate([111, 222])
        assert gate.check(111) is True
        assert gate.check(222) is True

    def test_denies_unlisted_ids(self) -> None:
        gate = AuthorizationGate([111])
        assert gate.check(333) is False
        assert gate.check(0) is False

    def test_empty_allow_list_denies_everyone(self) -> None:
        assert AuthorizationGate([]).check(111) is False

    def test_denial_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="wolbot.auth.gate"):
            AuthorizationGate([111]).check(999)
        assert "999" in caplog.text

    def test_allowed_set_is_immutable(self) -> None:
        gate = AuthorizationGate([111])
        assert isinstance(gate.allowed, frozenset)
        assert len(gate) == 1


class TestFromConfig:
    def test_list_of_ints(self) -> None:
        gate = AuthorizationGate.from_config([1, 2, 3])
        assert gate.allowed == frozenset({1, 2, 3})

    @pytest.mark.parametrize("value", [None, 123, "123", {"id": 1}])
    def test_non_list_raises(self, value: object) -> None:
        with pytest.raises(ValueError):
            AuthorizationGate.from_config(value)

    @pytest.mark.parametrize("entry", ["123", True, 1.5, None])
    def test_non_int_entry_raises(self, entry: object) -> None:
        with pytest.raises(ValueError):
            AuthorizationGate.from_config([1, entry])
