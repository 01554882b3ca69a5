from __future__ import annotations

from backend.app.billing import BillingTimelineConfig, load_billing_timeline_config


def test_defaults_when_environment_is_empty():
    config = load_billing_timeline_config({})

    assert config == BillingTimelineConfig()
    assert config.suppress_blocked_transitions is False
    assert config.strict_clears is True


def test_flags_are_parsed_from_environment():
    config = load_billing_timeline_config(
        {
            "BILLING_SUPPRESS_BLOCKED_TRANSITIONS": "yes",
            "BILLING_STRICT_CLEARS": " FALSE ",
        }
    )

    assert config.suppress_blocked_transitions is True
    assert config.strict_clears is False


def test_unrecognized_values_fall_back_to_default():
    config = load_billing_timeline_config({"BILLING_STRICT_CLEARS": "maybe"})

    assert config.strict_clears is True


def test_reads_process_environment_by_default(monkeypatch):
    monkeypatch.setenv("BILLING_SUPPRESS_BLOCKED_TRANSITIONS", "1")
    monkeypatch.setenv("BILLING_STRICT_CLEARS", "off")

    config = load_billing_timeline_config()

    assert config.suppress_blocked_transitions is True
    assert config.strict_clears is False
