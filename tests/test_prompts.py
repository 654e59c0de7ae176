from qbot.generate.prompts import compose_prompt
from qbot.generate.types import GenerationRequest, Language, Message, ProfileRef, TierLimits


def test_profile_context_and_category():
    req = GenerationRequest(
        message="  Why is the purifier overflowing?  ",
        category="Engine Room Machinery",
        profile=ProfileRef(identity_key="u1", rank="Chief Engineer", vessel="MV Ocean Star"),
    )
    prompt = compose_prompt(req)
    assert "You specialize in Engine Room Machinery" in prompt.system
    assert "User context: Chief Engineer aboard MV Ocean Star" in prompt.system
    assert "Respond in English language only" in prompt.system
    assert prompt.user == "Why is the purifier overflowing?"


def test_defaults_for_unknown_profile():
    prompt = compose_prompt(GenerationRequest(message="hello"))
    assert "User context: Maritime Professional shore-based" in prompt.system


def test_alternate_language():
    prompt = compose_prompt(GenerationRequest(message="merhaba", language=Language.ALTERNATE))
    assert "Respond in Turkish language only" in prompt.system


def test_format_contracts_present():
    system = compose_prompt(GenerationRequest(message="q")).system
    assert "exactly 3-5 bullet points" in system
    assert "Would you also like to know" in system
    assert "a) <first deeper question>?" in system
    assert "b) <second deeper question>?" in system
    assert system.rstrip().endswith("Reply a or b to confirm.")


def test_word_target_only_for_limited_callers():
    req = GenerationRequest(message="q")
    assert "between 50-97 words" in compose_prompt(req, TierLimits(50, 97)).system
    assert "between" not in compose_prompt(req).system


def test_active_rules_are_truncated():
    rules = "R" * 2000
    prompt = compose_prompt(GenerationRequest(message="q", active_rules=rules))
    assert "Active bot documentation guidelines:\n" + "R" * 800 + "\n" in prompt.system
    assert "R" * 801 not in prompt.system

    short = compose_prompt(GenerationRequest(message="q", active_rules=rules), rules_prefix_chars=10)
    assert "R" * 10 + "\n" in short.system
    assert "R" * 11 not in short.system


def test_blank_rules_ignored():
    prompt = compose_prompt(GenerationRequest(message="q", active_rules="   "))
    assert "Active bot documentation" not in prompt.system


def test_history_is_carried():
    history = (Message("user", "first"), Message("assistant", "• reply"))
    prompt = compose_prompt(GenerationRequest(message="second", history=history))
    assert [m.content for m in prompt.history] == ["first", "• reply"]
