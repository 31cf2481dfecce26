"""
Tests for POST /api/ai/invoke.

Every upstream is served by the StubUpstream fixture (httpx.MockTransport),
so these verify request shaping, provider selection, the Gemini fallback
chain and error mapping without any network access.
"""

import json

import httpx

from memory_gateway.ai.gateway import PLACEHOLDER_RESPONSE

URL = "/api/ai/invoke"


def chat_reply(content):
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


def gemini_reply(text):
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def gemini_404():
    return httpx.Response(404, json={"error": {"code": 404, "message": "model not found", "status": "NOT_FOUND"}})


# ─── Validation ──────────────────────────────────────────────────────────────

class TestValidation:
    async def test_missing_model(self, client, upstream):
        r = await client.post(URL, json={"prompt": "hi"})
        assert r.status_code == 400
        assert r.json() == {"error": "Missing model parameter"}
        assert upstream.requests == []

    async def test_missing_prompt(self, client, upstream):
        r = await client.post(URL, json={"model": "gpt-4o"})
        assert r.status_code == 400
        assert r.json() == {"error": "Missing prompt parameter"}
        assert upstream.requests == []

    async def test_empty_prompt_counts_as_missing(self, client):
        r = await client.post(URL, json={"model": "gpt-4o", "prompt": ""})
        assert r.status_code == 400

    async def test_missing_body(self, client):
        r = await client.post(URL)
        assert r.status_code == 400
        assert r.json()["error"] == "Missing model parameter"

    async def test_non_string_model(self, client, upstream):
        r = await client.post(URL, json={"model": 5, "prompt": "hi"})
        assert r.status_code == 400
        assert r.json()["error"] == "Invalid model parameter"
        assert upstream.requests == []

    async def test_malformed_json_body(self, client, upstream):
        r = await client.post(URL, content=b"{\"model\": ", headers={"Content-Type": "application/json"})
        assert r.status_code == 500
        assert r.json()["error"] == "Invalid JSON body"
        assert upstream.requests == []

    async def test_unsupported_model_makes_no_call(self, client, settings, upstream):
        settings.openai_api_key = "sk-test"
        r = await client.post(URL, json={"model": "llama-3", "prompt": "hi"})
        assert r.status_code == 400
        assert r.json()["error"].startswith("Unsupported model: llama-3.")
        assert upstream.requests == []


# ─── OpenAI ──────────────────────────────────────────────────────────────────

class TestOpenAI:
    async def test_success_is_trimmed(self, client, settings, upstream):
        settings.openai_api_key = "sk-test"
        upstream.queue(chat_reply(" Hello! "))

        r = await client.post(URL, json={"model": "gpt-4o", "prompt": "hi"})

        assert r.status_code == 200
        assert r.json() == {"response": "Hello!"}

    async def test_request_shape(self, client, settings, upstream):
        settings.openai_api_key = "sk-test"
        upstream.queue(chat_reply("ok"))

        await client.post(URL, json={"model": "gpt-4o", "prompt": "hi"})

        (request,) = upstream.requests
        assert str(request.url) == "https://api.openai.com/v1/chat/completions"
        assert request.headers["authorization"] == "Bearer sk-test"
        assert json.loads(request.content) == {
            "model": "gpt-4o",
            "messages": [{"role": "user", "content": "hi"}],
            "max_tokens": 1000,
        }

    async def test_not_configured(self, client, upstream):
        r = await client.post(URL, json={"model": "gpt-4o", "prompt": "hi"})
        assert r.status_code == 500
        assert r.json() == {
            "error": "OpenAI API key not configured. Please set OPENAI_API_KEY in your .env file."
        }
        assert upstream.requests == []

    async def test_upstream_error_message(self, client, settings, upstream):
        settings.openai_api_key = "sk-test"
        upstream.queue(httpx.Response(401, json={"error": {"message": "Incorrect API key provided"}}))

        r = await client.post(URL, json={"model": "gpt-4o", "prompt": "hi"})

        assert r.status_code == 500
        assert r.json()["error"] == "AI request failed: OpenAI: Incorrect API key provided"

    async def test_unparseable_error_body_uses_status_text(self, client, settings, upstream):
        settings.openai_api_key = "sk-test"
        upstream.queue(httpx.Response(429, text="<html>slow down</html>"))

        r = await client.post(URL, json={"model": "gpt-4o", "prompt": "hi"})

        assert r.status_code == 500
        assert r.json()["error"] == "AI request failed: OpenAI: Too Many Requests"

    async def test_network_failure(self, client, settings, upstream):
        settings.openai_api_key = "sk-test"
        upstream.queue(httpx.ConnectError("connection refused"))

        r = await client.post(URL, json={"model": "gpt-4o", "prompt": "hi"})

        assert r.status_code == 500
        assert r.json()["error"] == "AI request failed: OpenAI: connection refused"

    async def test_empty_text_becomes_placeholder(self, client, settings, upstream):
        settings.openai_api_key = "sk-test"
        upstream.queue(chat_reply("   "))

        r = await client.post(URL, json={"model": "gpt-4o", "prompt": "hi"})

        assert r.status_code == 200
        assert r.json() == {"response": PLACEHOLDER_RESPONSE}

    async def test_details_only_in_development(self, client, settings, upstream):
        settings.openai_api_key = "sk-test"
        upstream.queue(httpx.Response(500, json={}), httpx.Response(500, json={}))

        r = await client.post(URL, json={"model": "gpt-4o", "prompt": "hi"})
        assert "details" not in r.json()

        settings.environment = "development"
        r = await client.post(URL, json={"model": "gpt-4o", "prompt": "hi"})
        assert "Traceback" in r.json()["details"]


# ─── Anthropic ───────────────────────────────────────────────────────────────

class TestAnthropic:
    async def test_success_and_headers(self, client, settings, upstream):
        settings.anthropic_api_key = "ak-test"
        upstream.queue(httpx.Response(200, json={"content": [{"type": "text", "text": "\nBonjour\n"}]}))

        r = await client.post(URL, json={"model": "claude-3-5-sonnet", "prompt": "hi"})

        assert r.json() == {"response": "Bonjour"}
        (request,) = upstream.requests
        assert str(request.url) == "https://api.anthropic.com/v1/messages"
        assert request.headers["x-api-key"] == "ak-test"
        assert request.headers["anthropic-version"] == "2023-06-01"
        assert json.loads(request.content)["max_tokens"] == 1000

    async def test_not_configured_names_variable(self, client):
        r = await client.post(URL, json={"model": "claude-3-opus", "prompt": "hi"})
        assert r.status_code == 500
        assert "ANTHROPIC_API_KEY" in r.json()["error"]

    async def test_empty_content_becomes_placeholder(self, client, settings, upstream):
        settings.anthropic_api_key = "ak-test"
        upstream.queue(httpx.Response(200, json={"content": []}))

        r = await client.post(URL, json={"model": "claude-3-opus", "prompt": "hi"})

        assert r.status_code == 200
        assert r.json()["response"] == PLACEHOLDER_RESPONSE

    async def test_upstream_error(self, client, settings, upstream):
        settings.anthropic_api_key = "ak-test"
        upstream.queue(httpx.Response(400, json={"error": {"type": "invalid_request_error", "message": "bad model"}}))

        r = await client.post(URL, json={"model": "claude-x", "prompt": "hi"})

        assert r.json()["error"] == "AI request failed: Anthropic: bad model"


# ─── xAI ─────────────────────────────────────────────────────────────────────

class TestXAI:
    async def test_bare_grok_maps_to_grok_beta(self, client, settings, upstream):
        settings.xai_api_key = "xai-test"
        upstream.queue(chat_reply("hey"))

        r = await client.post(URL, json={"model": "grok", "prompt": "hi"})

        assert r.json() == {"response": "hey"}
        (request,) = upstream.requests
        assert str(request.url) == "https://api.x.ai/v1/chat/completions"
        assert json.loads(request.content)["model"] == "grok-beta"

    async def test_upstream_error_prefixed_with_grok(self, client, settings, upstream):
        settings.xai_api_key = "xai-test"
        upstream.queue(httpx.Response(403, json={"error": {"message": "no credits"}}))

        r = await client.post(URL, json={"model": "grok-beta", "prompt": "hi"})

        assert r.json()["error"] == "AI request failed: Grok: no credits"

    async def test_not_configured(self, client):
        r = await client.post(URL, json={"model": "grok-beta", "prompt": "hi"})
        assert r.json()["error"].startswith("xAI API key not configured")


# ─── Gemini ──────────────────────────────────────────────────────────────────

class TestGemini:
    async def test_success_on_v1beta(self, client, settings, upstream):
        settings.google_api_key = "g-test"
        upstream.queue(gemini_reply(" Hi there "))

        r = await client.post(URL, json={"model": "gemini-2.5-flash", "prompt": "hi"})

        assert r.json() == {"response": "Hi there"}
        (request,) = upstream.requests
        assert request.url.path == "/v1beta/models/gemini-2.5-flash:generateContent"
        assert request.url.params["key"] == "g-test"
        body = json.loads(request.content)
        assert body["contents"] == [{"parts": [{"text": "hi"}]}]
        assert body["generationConfig"]["maxOutputTokens"] == 1000

    async def test_legacy_name_is_remapped(self, client, settings, upstream):
        settings.google_api_key = "g-test"
        upstream.queue(gemini_reply("ok"))

        await client.post(URL, json={"model": "gemini-1.5-pro", "prompt": "hi"})

        assert upstream.requests[0].url.path == "/v1beta/models/gemini-pro-latest:generateContent"

    async def test_404_retries_on_v1(self, client, settings, upstream):
        settings.google_api_key = "g-test"
        upstream.queue(gemini_404(), gemini_reply("from v1"))

        r = await client.post(URL, json={"model": "gemini-2.5-flash", "prompt": "hi"})

        assert r.json() == {"response": "from v1"}
        assert [req.url.path for req in upstream.requests] == [
            "/v1beta/models/gemini-2.5-flash:generateContent",
            "/v1/models/gemini-2.5-flash:generateContent",
        ]

    async def test_legacy_flash_tries_versioned_id_last(self, client, settings, upstream):
        settings.google_api_key = "g-test"
        upstream.queue(gemini_404(), gemini_404(), gemini_reply("third time"))

        r = await client.post(URL, json={"model": "gemini-1.5-flash", "prompt": "hi"})

        assert r.json() == {"response": "third time"}
        assert upstream.requests[2].url.path == "/v1beta/models/gemini-1.5-flash-002:generateContent"

    async def test_exhausted_chain_reports_model_and_version(self, client, settings, upstream):
        settings.google_api_key = "g-test"
        upstream.queue(gemini_404(), gemini_404())

        r = await client.post(URL, json={"model": "gemini-2.5-flash", "prompt": "hi"})

        assert r.status_code == 500
        error = r.json()["error"]
        assert error.startswith("AI request failed: Gemini API Error: model not found (NOT_FOUND)")
        assert "Status: 404. Model: gemini-2.5-flash. API Version: v1." in error
        assert len(upstream.requests) == 2

    async def test_non_404_does_not_retry(self, client, settings, upstream):
        settings.google_api_key = "g-test"
        upstream.queue(httpx.Response(400, json={"error": {"message": "API key not valid", "status": "INVALID_ARGUMENT"}}))

        r = await client.post(URL, json={"model": "gemini-2.5-flash", "prompt": "hi"})

        assert r.status_code == 500
        assert "API key not valid (INVALID_ARGUMENT)" in r.json()["error"]
        assert "API Version: v1beta." in r.json()["error"]
        assert len(upstream.requests) == 1

    async def test_empty_text_is_an_error(self, client, settings, upstream):
        settings.google_api_key = "g-test"
        upstream.queue(httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": ""}]}}]}))

        r = await client.post(URL, json={"model": "gemini-2.5-flash", "prompt": "hi"})

        assert r.status_code == 500
        assert "Gemini returned an empty response" in r.json()["error"]

    async def test_key_not_leaked_in_network_error(self, client, settings, upstream):
        settings.google_api_key = "g-secret-key"

        def boom(request):
            raise httpx.ConnectError(f"failed to reach {request.url}")

        upstream.handler = boom
        r = await client.post(URL, json={"model": "gemini-2.5-flash", "prompt": "hi"})

        assert r.status_code == 500
        assert "g-secret-key" not in r.json()["error"]


# ─── unified-auto ────────────────────────────────────────────────────────────

class TestUnifiedAuto:
    async def test_uses_gemini_when_google_key_present(self, client, settings, upstream):
        settings.google_api_key = "g-test"
        settings.openai_api_key = "sk-test"
        upstream.queue(gemini_reply("auto"))

        r = await client.post(URL, json={"model": "unified-auto", "prompt": "hi"})

        assert r.json() == {"response": "auto"}
        assert upstream.requests[0].url.path == "/v1beta/models/gemini-flash-latest:generateContent"

    async def test_uses_gpt4o_with_openai_only(self, client, settings, upstream):
        settings.openai_api_key = "sk-test"
        upstream.queue(chat_reply("auto"))

        await client.post(URL, json={"model": "unified-auto", "prompt": "hi"})

        assert json.loads(upstream.requests[0].content)["model"] == "gpt-4o"

    async def test_without_keys_fails_as_openai_not_configured(self, client, upstream):
        r = await client.post(URL, json={"model": "unified-auto", "prompt": "hi"})
        assert r.status_code == 500
        assert "OPENAI_API_KEY" in r.json()["error"]
        assert upstream.requests == []
