"""
Tests for assistant caption derivation
"""
from atelier.services.captions import FALLBACK_SUMMARY, build_caption, summarize_prompt
from atelier.services.catalog import first_profile


def test_single_clause_is_lowercased():
    assert summarize_prompt("Red Lighthouse At Night") == "red lighthouse at night"


def test_first_two_clauses_are_joined():
    prompt = "A submerged city, neon lights; heavy rain. fog"
    assert summarize_prompt(prompt) == "a submerged city and neon lights"


def test_empty_clauses_are_dropped():
    assert summarize_prompt(" , ;. Harbor ,\n boats") == "harbor and boats"


def test_prompt_without_content_uses_fallback():
    assert summarize_prompt(",;.\n") == FALLBACK_SUMMARY


def test_caption_for_original_composition():
    profile = first_profile()
    caption = build_caption("Red lighthouse, stormy sea", profile, used_base=False)
    assert profile.label in caption
    assert "red lighthouse and stormy sea" in caption
    assert "original" in caption


def test_caption_for_transformation():
    profile = first_profile()
    caption = build_caption("Red lighthouse", profile, used_base=True)
    assert profile.label in caption
    assert "preserved the established identity" in caption
