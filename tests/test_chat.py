import asyncio

import pytest
from openai import OpenAIError

from app.core.exceptions import ChatProviderError
from app.routers.chat import get_llm_service_dep
from app.services.llm_service import LLMService

from conftest import FakeCompletions, FakeOpenAIClient


def use_llm(app, completions, model="gpt-3.5-turbo"):
    service = LLMService(model=model, client=FakeOpenAIClient(completions))
    app.dependency_overrides[get_llm_service_dep] = lambda: service
    return service


def test_chat_forwards_single_user_message(app, client):
    completions = FakeCompletions(content="Hello! How can I help?")
    use_llm(app, completions)

    response = client.post("/api/gpt", json={"prompt": "hello"})

    assert response.status_code == 200
    assert response.json() == {"response": "Hello! How can I help?"}
    assert completions.calls == [
        {"model": "gpt-3.5-turbo", "messages": [{"role": "user", "content": "hello"}]}
    ]


def test_chat_uses_configured_model(app, client):
    completions = FakeCompletions()
    use_llm(app, completions, model="gpt-4o-mini")

    client.post("/api/gpt", json={"prompt": "What is a P/E ratio?"})

    assert completions.calls[0]["model"] == "gpt-4o-mini"


@pytest.mark.parametrize("kwargs", [{"json": {}}, {"json": {"prompt": ""}}, {}])
def test_chat_requires_prompt(app, client, kwargs):
    completions = FakeCompletions()
    use_llm(app, completions)

    response = client.post("/api/gpt", **kwargs)

    assert response.status_code == 400
    assert response.json() == {"error": "Prompt is required"}
    assert completions.calls == []


def test_chat_provider_failure(app, client):
    use_llm(app, FakeCompletions(error=OpenAIError("rate limited")))

    response = client.post("/api/gpt", json={"prompt": "hello"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to get GPT response"}


def test_chat_service_unavailable(client):
    response = client.post("/api/gpt", json={"prompt": "hello"})

    assert response.status_code == 503
    assert response.json() == {"error": "Chat service unavailable"}


def test_llm_service_wraps_openai_errors():
    service = LLMService(client=FakeOpenAIClient(FakeCompletions(error=OpenAIError("bad key"))))

    with pytest.raises(ChatProviderError):
        asyncio.run(service.complete("hello"))


def test_llm_service_requires_api_key():
    with pytest.raises(ValueError):
        LLMService(api_key=None)
