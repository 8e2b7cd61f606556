import json

import httpx
import pytest

from phuongnam.services.ai import (
    AIProviderError,
    BaseAIProvider,
    ChatMessage,
    ChatService,
    GeminiProvider,
    GenerationOptions,
    GroqProvider,
    MockAIProvider,
    create_chat_service,
)
from phuongnam.services.ai.content import FALLBACK_MENU
from phuongnam.services.ai.gemini import build_prompt
from tests.conftest import make_settings

API = "/api/chat"


class RecordingProvider(BaseAIProvider):
    def __init__(self, reply="Xin chào!"):
        self.reply = reply
        self.calls = []

    @property
    def provider_name(self):
        return "recording"

    @property
    def model(self):
        return "recording-1"

    async def generate(self, messages, system_prompt, options):
        self.calls.append((messages, system_prompt, options))
        return self.reply


def conversation(n):
    return [ChatMessage(role="user" if i % 2 == 0 else "assistant", content=f"msg {i}") for i in range(n)]


# =============================================================================
# HTTP
# =============================================================================

async def test_chat_uses_mock_provider_in_development(client):
    response = await client.post(API, json={"messages": [{"role": "user", "content": "Có món chay không?"}]})
    assert response.status_code == 200

    data = response.json()["data"]
    assert data["provider"] == "mock"
    assert data["fallback"] is False
    assert data["reply"].startswith("[mock]")
    assert "Có món chay không?" in data["reply"]


async def test_chat_validation(client):
    assert (await client.post(API, json={"messages": []})).status_code == 400
    bad_role = {"messages": [{"role": "robot", "content": "hi"}]}
    assert (await client.post(API, json=bad_role)).status_code == 400


async def test_failing_provider_answers_with_fallback(app, client):
    app.state.chat = ChatService(app.state.settings, {"mock": MockAIProvider(failure_rate=1.0)})

    response = await client.post(API, json={"messages": [{"role": "user", "content": "Menu?"}]})
    assert response.status_code == 200

    body = response.json()
    assert body["success"] is True
    assert body["data"]["fallback"] is True
    assert body["data"]["provider"] == "fallback"
    assert body["data"]["reply"] == FALLBACK_MENU
    assert body["error"] == "AI service temporarily unavailable"


async def test_generate_description(client):
    response = await client.post(f"{API}/generate-description", json={"foodName": " Banh Xeo ", "category": "Mon Chinh"})
    data = response.json()["data"]
    assert data["foodName"] == "Banh Xeo"
    assert data["generated"] is True
    assert data["description"].startswith("[mock]")


async def test_generate_description_without_provider(app, client):
    app.state.chat = ChatService(app.state.settings, {})
    data = (await client.post(f"{API}/generate-description", json={"foodName": "Banh Xeo"})).json()["data"]
    assert data["generated"] is False
    assert data["description"] == "Không thể tạo mô tả cho món ăn này."


async def test_status(client):
    data = (await client.get(f"{API}/status")).json()["data"]
    assert data["available"] is True
    assert data["primary"] == "mock"
    assert data["services"]["gemini"]["configured"] is False


async def test_static_endpoints(client):
    info = (await client.get(f"{API}/restaurant-info")).json()["data"]
    assert info["name"] == "Ẩm Thực Phương Nam"

    questions = (await client.get(f"{API}/suggested-questions")).json()["data"]
    assert questions["total"] == len(questions["questions"]) > 0


# =============================================================================
# SERVICE
# =============================================================================

async def test_history_is_trimmed(tmp_path):
    provider = RecordingProvider()
    service = ChatService(make_settings(tmp_path, ai_max_history=4), {"mock": provider})

    result = await service.chat(conversation(10))
    assert result.message == "Xin chào!"

    sent, system_prompt, _ = provider.calls[0]
    assert [m.content for m in sent] == ["msg 6", "msg 7", "msg 8", "msg 9"]
    assert "Phương Nam" in system_prompt


async def test_slow_provider_times_out(tmp_path):
    service = ChatService(
        make_settings(tmp_path, ai_timeout_seconds=0.05),
        {"mock": MockAIProvider(latency=1.0)},
    )
    result = await service.chat(conversation(1))
    assert result.is_fallback
    assert result.error == "AI service timed out"


async def test_no_provider_outside_development(tmp_path):
    service = create_chat_service(make_settings(tmp_path, env_mode="production"))
    assert service.providers == {}

    result = await service.chat(conversation(1))
    assert result.is_fallback
    assert result.error == "AI service not configured"
    assert service.status()["primary"] == "none"


async def test_provider_selection(tmp_path):
    gemini, groq = RecordingProvider("gemini"), RecordingProvider("groq")
    service = ChatService(make_settings(tmp_path), {"gemini": gemini, "groq": groq})

    assert (await service.chat(conversation(1))).message == "gemini"
    assert (await service.chat(conversation(1), use_groq=True)).message == "groq"

    groq_only = ChatService(make_settings(tmp_path), {"groq": groq})
    assert groq_only.choose_provider() is groq


# =============================================================================
# PROVIDERS
# =============================================================================

def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_gemini_prompt_is_a_transcript():
    prompt = build_prompt(
        [ChatMessage("user", "Có phở không?"), ChatMessage("assistant", "Có ạ"), ChatMessage("system", "x")],
        "SYSTEM",
    )
    assert prompt.splitlines() == ["SYSTEM", "", "Khách hàng: Có phở không?", "Trợ lý: Có ạ", "", "Trợ lý: "]


async def test_gemini_provider_parses_candidates():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "Dạ có"}]}}]})

    provider = GeminiProvider("key-123", "gemini-test", client=mock_client(handler))
    text = await provider.generate(conversation(1), "SYSTEM", GenerationOptions())
    await provider.aclose()

    assert text == "Dạ có"
    assert "gemini-test:generateContent" in seen["url"]
    assert "key=key-123" in seen["url"]


async def test_groq_provider_sends_system_prompt_first():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={"choices": [{"message": {"content": "Dạ có"}}]})

    provider = GroqProvider("key-123", "llama-test", client=mock_client(handler))
    text = await provider.generate(conversation(2), "SYSTEM", GenerationOptions(temperature=0.2, max_tokens=50))
    await provider.aclose()

    assert text == "Dạ có"
    assert seen["auth"] == "Bearer key-123"
    assert seen["body"]["messages"][0] == {"role": "system", "content": "SYSTEM"}
    assert seen["body"]["max_tokens"] == 50


@pytest.mark.parametrize(
    "response",
    [httpx.Response(500, text="boom"), httpx.Response(200, json={"choices": []}), httpx.Response(200, text="<html>")],
)
async def test_groq_provider_errors(response):
    provider = GroqProvider("key", "llama-test", client=mock_client(lambda request: response))
    with pytest.raises(AIProviderError):
        await provider.generate(conversation(1), "SYSTEM", GenerationOptions())
    await provider.aclose()
