# tests/test_rules.py
import pytest

from app.services import rules as R


def test_registry_is_read_only():
    assert len(R.DETECTORS) == len(R.DETECTORS_BY_NAME) == 11
    with pytest.raises(TypeError):
        R.DETECTORS_BY_NAME["new"] = R.DETECTORS[0]
    with pytest.raises(Exception):
        R.DETECTORS[0].threshold = 0


def test_registry_follows_pass_order():
    order = [R.STAGES.index(d.stage) for d in R.DETECTORS]
    assert order == sorted(order)


def test_thresholds_are_literal():
    thresholds = {d.name: d.threshold for d in R.DETECTORS}
    assert thresholds == {
        "excessive_questions": 2,
        "one_word_responses": 3,
        "interrupting": 2,
        "rapid_fire_messages": 1,
        "delayed_responses": 0,
        "personal_details": 1,
        "pushy_behavior": 2,
        "inappropriate_questions": 0,
        "enthusiasm_markers": 2,
        "disengagement": 1,
        "negative_venting": 3,
    }


def test_scan_is_restartable():
    d = R.DETECTORS_BY_NAME["interrupting"]
    text = "But then, however, I actually left."
    first = R.scan(d, text)
    second = R.scan(d, text)
    assert first == second == ["But", "however", "actually"]


def test_one_word_responses_anchor_at_line_end():
    d = R.DETECTORS_BY_NAME["one_word_responses"]
    assert R.scan(d, "are you ok?\nok\nSure.\nno way") == ["ok", "Sure."]
    # only the end of the line is anchored, so trailing words count too
    assert R.scan(d, "that's fine\nI'm fine.\nfine by me") == ["fine", "fine."]


def test_word_boundaries_are_ascii():
    assert R.scan(R.DETECTORS_BY_NAME["one_word_responses"], "éok") == ["ok"]
    assert R.scan(R.DETECTORS_BY_NAME["interrupting"], "ébut, naïvehowever") == ["but"]


def test_excessive_questions_stay_on_one_line():
    d = R.DETECTORS_BY_NAME["excessive_questions"]
    assert R.scan(d, "a? b?\nc?") == []
    assert R.scan(d, "a? b? c?\nd? e? f?") == ["? b? c?", "? e? f?"]


def test_rapid_fire_counts_bursts():
    d = R.DETECTORS_BY_NAME["rapid_fire_messages"]
    assert len(R.scan(d, "hi\nhey\nhello\n\nyo\nsup\nhm\n")) == 2
    assert R.scan(d, "hi\nhey\n") == []


def test_enthusiasm_caps_are_case_sensitive():
    d = R.DETECTORS_BY_NAME["enthusiasm_markers"]
    assert R.scan(d, "the day was fine") == []
    assert R.scan(d, "that was SO GOOD!! I love it") == ["GOOD", "!!", "love"]


def test_detector_fires_strictly_above_threshold():
    d = R.DETECTORS_BY_NAME["interrupting"]
    assert not d.fires(["but", "however"])
    assert d.fires(["but", "however", "actually"])


def test_fixed_examples_replace_matches():
    d = R.DETECTORS_BY_NAME["negative_venting"]
    issue = d.issue(["hate", "awful", "worst", "terrible"])
    assert issue.examples == ["Multiple negative expressions detected"]


def test_risk_only_detector_emits_no_issue():
    d = R.DETECTORS_BY_NAME["inappropriate_questions"]
    assert d.issue(["are you single"]) is None
    f = R.run_detectors("so, are you single?")
    assert f.issues == []
    assert [r.type for r in f.risk_factors] == ["Inappropriate Questions"]


def test_derivation_sees_issues_from_earlier_passes():
    f = R.run_detectors("ok\nyes\nno\nsure\n")
    assert [i.category for i in f.issues] == ["interest"]
    assert f.suggestions == []
    f = R.apply_derivations(f)
    assert [s.title for s in f.suggestions] == ["Ask engaging, open-ended questions"]
