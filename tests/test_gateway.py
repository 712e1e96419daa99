# ===============================================
# tests/test_gateway.py
# Prompt assembly, failure wrapping and structured output
# ===============================================

import pytest

from conftest import StubClient
from studio.generate import (
    ConversationTurn,
    Gateway,
    GenerationFailure,
    GenerationRequest,
    GenerationTimeout,
    Mode,
    ProviderError,
    ProviderTimeout,
)


def test_chat_without_history(gateway, stub_client):
    result = gateway.chat("hello")
    assert stub_client.prompts == ["User: hello"]
    assert result.raw_text == "stub reply"
    assert result.structured is None
    assert result.meta["history_clipped"] is False


def test_chat_history_format(gateway, stub_client):
    history = [ConversationTurn("user", "a"), ConversationTurn("assistant", "b")]
    gateway.chat("c", history)
    assert stub_client.prompts[0] == "Previous conversation:\nuser: a\nassistant: b\n\nUser: c"


def test_history_keeps_most_recent_turns(stub_client):
    gw = Gateway(model_client=stub_client, history_max_turns=2)
    history = [ConversationTurn("user", str(i)) for i in range(5)]
    result = gw.chat("next", history)
    assert stub_client.prompts[0] == "Previous conversation:\nuser: 3\nuser: 4\n\nUser: next"
    assert result.meta["history_clipped"] is True


def test_code_prompt_with_empty_requirements(gateway, stub_client):
    gateway.generate_code("python", "parse a csv", [])
    prompt = stub_client.prompts[0]
    assert "Generate python code" in prompt
    assert "Description: parse a csv" in prompt
    assert "Requirements:\n\n" in prompt
    assert "imports" in prompt


def test_code_prompt_bullets_requirements(gateway, stub_client):
    gateway.generate_code("go", "a server", ["fast", "small"])
    assert "Requirements:\n- fast\n- small\n" in stub_client.prompts[0]


def test_analysis_prompt_lists_five_dimensions(gateway, stub_client):
    gateway.analyze_code("print(1)", "python")
    prompt = stub_client.prompts[0]
    for dim in ("quality", "improvements", "Security", "Performance", "Best practices"):
        assert dim in prompt
    assert "```python\nprint(1)\n```" in prompt


def test_params_come_from_config(gateway, stub_client):
    gateway.generate_project_plan("todo app")
    gateway.analyze_code("x", "js")
    assert stub_client.params[0].max_tokens == 8192
    assert stub_client.params[1].temperature == 0.3


def test_project_plan_extracts_json_from_prose(gateway, stub_client):
    stub_client.reply = 'Sure! {"analysis": "a", "nextSteps": ["ship"]} Hope that helps.'
    result = gateway.generate_project_plan("todo app", "web", ["auth"], {"stack": "next"})
    assert result.structured == {"analysis": "a", "nextSteps": ["ship"]}
    assert result.parse_error is None
    assert "architecture" in result.meta["missing_keys"]
    assert "Build Context: {\n  \"stack\": \"next\"\n}" in stub_client.prompts[0]


def test_project_plan_keeps_raw_text_on_parse_failure(gateway, stub_client):
    stub_client.reply = "Plan: use {braces} loosely }"
    result = gateway.generate_project_plan("todo app")
    assert result.structured is None
    assert result.parse_error
    assert result.raw_text == "Plan: use {braces} loosely }"


def test_provider_error_is_wrapped_with_mode():
    gw = Gateway(model_client=StubClient(error=ProviderError("rate limited", "gemini", status_code=429)))
    with pytest.raises(GenerationFailure) as info:
        gw.generate_component("Nav", "a navbar")
    assert info.value.mode == "component"
    assert info.value.retryable is True
    assert "rate limited" in str(info.value)


def test_unexpected_exception_is_wrapped():
    gw = Gateway(model_client=StubClient(error=KeyError("candidates")))
    with pytest.raises(GenerationFailure) as info:
        gw.chat("hi")
    assert info.value.mode == "chat"
    assert info.value.retryable is False


def test_timeout_has_its_own_kind():
    gw = Gateway(model_client=StubClient(error=ProviderTimeout("slow", "gemini")))
    with pytest.raises(GenerationTimeout) as info:
        gw.generate_database_schema("shop", ["orders"])
    assert info.value.message == "generation timed out"
    assert info.value.mode == "database_schema"


def test_run_dispatches_with_auxiliary_parameters(gateway, stub_client):
    gateway.run(GenerationRequest(
        mode=Mode.JAVA_APP,
        primary_text="inventory service",
        auxiliary_parameters={"appName": "Stock", "features": ["REST", "JPA"], "springBoot": "false"},
    ))
    prompt = stub_client.prompts[0]
    assert "Application: Stock" in prompt
    assert "Features: REST, JPA" in prompt
    assert "Use Spring Boot: false" in prompt


def test_run_api_mode_renders_endpoints(gateway, stub_client):
    gateway.generate_api("users", [{"method": "POST", "path": "/users", "description": "create"}, "GET /users"])
    assert "POST /users - create\nGET /users" in stub_client.prompts[0]


def test_run_project_plan_mode(gateway, stub_client):
    stub_client.reply = '```json\n{"analysis": "x"}\n```'
    result = gateway.run(GenerationRequest(mode=Mode.PROJECT_PLAN, primary_text="blog"))
    assert result.structured == {"analysis": "x"}


def test_project_plan_with_deep_nesting_degrades(gateway, stub_client):
    stub_client.reply = '{"a":' + "[" * 100000 + "]" * 100000 + "}"
    result = gateway.generate_project_plan("todo app")
    assert result.structured is None
    assert result.parse_error == "invalid JSON: nesting too deep"
    assert result.raw_text == stub_client.reply
