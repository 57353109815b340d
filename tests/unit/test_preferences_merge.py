"""Partial preference updates merge by presence, never by truthiness."""

import pytest
from pydantic import ValidationError

from evania.users.schemas import PreferencesUpdateRequest
from evania.users.service import UserPreferences, merge_preferences

STORED = UserPreferences(
    theme_color="#112233",
    daily_target=3,
    goals=["sleep", "focus"],
    baseline_mood="calm",
    onboarding_done=True,
    timezone="Europe/Oslo",
)


class TestMergePreferences:
    def test_empty_update_keeps_everything(self):
        assert merge_preferences(STORED, {}) == STORED

    def test_only_present_keys_change(self):
        merged = merge_preferences(STORED, {"theme_color": "#000000"})
        assert merged.theme_color == "#000000"
        assert merged.daily_target == 3
        assert merged.goals == ["sleep", "focus"]
        assert merged.timezone == "Europe/Oslo"

    def test_falsy_values_are_applied(self):
        merged = merge_preferences(STORED, {"onboarding_done": False, "goals": []})
        assert merged.onboarding_done is False
        assert merged.goals == []

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown preference"):
            merge_preferences(STORED, {"total_xp": 9999})

    def test_existing_is_not_mutated(self):
        merge_preferences(STORED, {"goals": ["move"]})
        assert STORED.goals == ["sleep", "focus"]


class TestPreferencesUpdateRequest:
    def test_provided_reports_only_sent_fields(self):
        body = PreferencesUpdateRequest.model_validate({"daily_target": 2, "onboarding_done": False})
        assert body.provided() == {"daily_target": 2, "onboarding_done": False}

    def test_zero_daily_target_is_invalid(self):
        with pytest.raises(ValidationError):
            PreferencesUpdateRequest.model_validate({"daily_target": 0})

    def test_unknown_timezone_is_invalid(self):
        with pytest.raises(ValidationError):
            PreferencesUpdateRequest.model_validate({"timezone": "Mars/Olympus_Mons"})

    def test_explicit_null_is_treated_as_absent(self):
        body = PreferencesUpdateRequest.model_validate({"theme_color": None, "baseline_mood": "happy"})
        assert body.provided() == {"baseline_mood": "happy"}
