from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from fridgechef.core.ai_client import AIClient, normalize_model_id
from fridgechef.schemas import NutritionalInfo

NUTRITION_JSON = '{"calories": 300, "protein": "10g", "carbs": "20g", "fat": "5g", "fiber": "2g", "servings": 2}'


def gemini_client(response=None, error=None):
    """AIClient wired to a fake SDK handle instead of a real genai.Client."""
    client = AIClient(mode="gemini", api_key="")
    generate = AsyncMock(return_value=response, side_effect=error)
    client._client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate)))
    return client, generate


@pytest.mark.parametrize(
    "raw,expected",
    [
        ('model="gemini-2.5-flash"', "gemini-2.5-flash"),
        ("'gemini-2.5-pro'", "gemini-2.5-pro"),
        ("  gemini-2.5-flash ", "gemini-2.5-flash"),
    ],
)
def test_normalize_model_id(raw, expected):
    assert normalize_model_id(raw) == expected


@pytest.mark.asyncio
async def test_unavailable_client_returns_none():
    client = AIClient(mode="mock", api_key="")
    assert client.is_available() is False
    assert await client.describe_image("what is this?", b"img") is None
    assert await client.generate_structured("x", NutritionalInfo) is None
    assert client.last_error == "AI unavailable"


@pytest.mark.asyncio
async def test_describe_image_sends_image_then_prompt():
    client, generate = gemini_client(SimpleNamespace(text="eggs, milk", parsed=None))

    text = await client.describe_image("list the food", b"img", "image/png", model='model="gemini-x"')

    assert text == "eggs, milk"
    kwargs = generate.call_args.kwargs
    assert kwargs["model"] == "gemini-x"
    image_part, prompt = kwargs["contents"]
    assert prompt == "list the food"
    assert image_part.inline_data.mime_type == "image/png"


@pytest.mark.asyncio
async def test_generate_structured_prefers_parsed_value():
    parsed = NutritionalInfo.model_validate_json(NUTRITION_JSON)
    client, generate = gemini_client(SimpleNamespace(text=NUTRITION_JSON, parsed=parsed))

    assert await client.generate_structured("x", NutritionalInfo) is parsed
    config = generate.call_args.kwargs["config"]
    assert config.response_mime_type == "application/json"


@pytest.mark.asyncio
async def test_generate_structured_validates_raw_text():
    client, _ = gemini_client(SimpleNamespace(text=NUTRITION_JSON, parsed=None))
    result = await client.generate_structured("x", NutritionalInfo)
    assert isinstance(result, NutritionalInfo)
    assert result.servings == 2


@pytest.mark.asyncio
async def test_generate_structured_rejects_non_conforming_json():
    client, _ = gemini_client(SimpleNamespace(text='{"calories": 1, "servings": 0}', parsed=None))
    assert await client.generate_structured("x", NutritionalInfo) is None
    assert client.last_error.startswith("ValidationError")


@pytest.mark.asyncio
async def test_sdk_exception_is_recorded():
    client, _ = gemini_client(error=RuntimeError("quota exceeded"))
    assert await client.describe_image("x", b"img") is None
    assert client.last_error == "RuntimeError: quota exceeded"


@pytest.mark.asyncio
async def test_empty_response_is_none():
    client, _ = gemini_client(SimpleNamespace(text="", parsed=None))
    assert await client.describe_image("x", b"img") is None
