import pytest

from docportal.llm.prompts.registry import PromptTemplate, get_prompt, register, render


def test_analysis_prompt_declares_its_variables():
    prompt = get_prompt("analyze_document", "v1")
    assert prompt.variables == {"title", "document_type", "text"}
    assert prompt.system


def test_render_is_single_pass():
    prompt = PromptTemplate("t", "v1", "A={{a}} B={{b}}")
    assert render(prompt, {"a": "{{b}}", "b": 2}) == "A={{b}} B=2"


def test_missing_variable_raises():
    with pytest.raises(KeyError, match="missing variables"):
        render(get_prompt("analyze_document", "v1"), {"title": "x", "text": "y"})


def test_unknown_version_lists_known_prompts():
    with pytest.raises(KeyError, match="analyze_document@v1"):
        get_prompt("analyze_document", "v9")


def test_duplicate_registration_is_rejected():
    with pytest.raises(ValueError):
        register(PromptTemplate("analyze_document", "v1", "{{text}}"))
