from __future__ import annotations

import json
import os

import pytest

from trendscope.services.prompt_store import PromptCatalog, get_prompt, render_prompt


def test_render_prompt_substitutes_template_values():
    prompt = render_prompt("research_mind.system", top_n=5)

    assert "$top_n" not in prompt
    assert "5" in prompt


def test_list_prompts_are_joined_with_newlines():
    prompt = get_prompt("assistant.system")

    assert "\n" in prompt
    assert prompt.startswith("You are TrendScope AI Assistant")


def test_render_prompt_raises_for_unknown_key():
    with pytest.raises(KeyError):
        render_prompt("missing.prompt.key")


def test_render_prompt_reports_missing_value():
    with pytest.raises(KeyError, match="top_n"):
        render_prompt("research_mind.system")


def test_catalog_rereads_file_after_change(tmp_path):
    path = tmp_path / "prompts.json"
    path.write_text(json.dumps({"greeting": "Hello $name"}), encoding="utf-8")
    catalog = PromptCatalog(path)
    assert catalog.render("greeting", name="Ada") == "Hello Ada"

    path.write_text(json.dumps({"greeting": ["Hi $name", "Welcome back"]}), encoding="utf-8")
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000))

    assert catalog.render("greeting", name="Ada") == "Hi Ada\nWelcome back"


def test_catalog_rejects_non_object_file(tmp_path):
    path = tmp_path / "prompts.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError):
        PromptCatalog(path).get("anything")
