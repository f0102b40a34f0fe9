"""
Translation Provider API Implementations

This module contains the HTTP calls for each provider:
- Google Translate (public web endpoint, no key)
- OpenAI compatible chat completions

Each function takes the provider's config section and the texts, and
returns the translated text or raises TranslationError.
"""

from typing import Any, Dict

import httpx

from langdesk.logger import get_logger
from langdesk.provider.exceptions import TranslationError

logger = get_logger(__name__)

DEFAULT_SYSTEM_MESSAGE = "You are a professional translator for a mobile shopping app."

CHAT_TRANSLATION_PROMPT = """Translate the following text from {source_language} to {target_language}.
Keep placeholders such as %s, %d, {{name}} and HTML tags unchanged.
Return only the translated text, without quotes or explanations.

{text}"""


def get_httpx_timeout(timeout_config: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        timeout_config: Either a number (read timeout) or a dict with
            connect, write, read, pool keys

    Returns:
        httpx.Timeout object
    """
    if isinstance(timeout_config, dict):
        return httpx.Timeout(
            connect=timeout_config.get('connect', 10.0),
            write=timeout_config.get('write', 30.0),
            read=timeout_config.get('read', 30.0),
            pool=timeout_config.get('pool', 10.0),
        )
    else:
        timeout_value = float(timeout_config) if timeout_config else 30.0
        return httpx.Timeout(
            connect=10.0,
            write=30.0,
            read=timeout_value,
            pool=10.0,
        )


def handle_http_error(e: httpx.HTTPStatusError, provider: str):
    """Handle HTTP errors with detailed messages."""
    status_code = e.response.status_code
    error_text = "Unknown error"

    try:
        error_json = e.response.json()
        if isinstance(error_json, dict) and "error" in error_json:
            error_detail = error_json["error"]
            if isinstance(error_detail, dict):
                error_text = error_detail.get("message", str(error_detail))
            else:
                error_text = str(error_detail)
    except Exception:
        error_text = e.response.text[:500] if hasattr(e.response, 'text') else "No details"

    raise TranslationError(
        f"{provider} API error ({status_code}): {error_text}",
        code="provider_http_error",
        details={"status_code": status_code},
    )


def parse_google_response(result: Any) -> str:
    """
    Join the translated segments of a translate_a/single response.

    The body looks like [[["Merhaba", "Hello", null, null, 10], ...], null, "en", ...].
    """
    if not isinstance(result, list) or not result or not isinstance(result[0], list):
        raise TranslationError(f"Unexpected Google Translate response format: {str(result)[:200]}")
    parts = [segment[0] for segment in result[0] if isinstance(segment, list) and segment and segment[0]]
    if not parts:
        raise TranslationError("Empty Google Translate response")
    return "".join(parts)


def call_google_translate(provider_config: Dict[str, Any], source_language: str,
                          target_language: str, text: str) -> str:
    """Call the public Google Translate endpoint."""
    api_url = provider_config.get('api_url', 'https://translate.googleapis.com/translate_a/single')
    timeout = provider_config.get('timeout', 30)

    params = {
        "client": "gtx",
        "sl": source_language,
        "tl": target_language,
        "dt": "t",
        "q": text,
    }

    logger.debug(f"  Calling Google Translate ({source_language} -> {target_language}, {len(text)} chars)...")

    try:
        with httpx.Client(timeout=get_httpx_timeout(timeout)) as client:
            response = client.get(api_url, params=params)
            response.raise_for_status()
            return parse_google_response(response.json())

    except httpx.HTTPStatusError as e:
        handle_http_error(e, "Google Translate")
    except httpx.TimeoutException:
        raise TranslationError("Google Translate request timeout", code="provider_timeout")
    except TranslationError:
        raise
    except Exception as e:
        raise TranslationError(f"Google Translate call failed: {e}")


def call_chat_completion(provider_config: Dict[str, Any], source_language: str,
                         target_language: str, text: str) -> str:
    """
    Call an OpenAI compatible chat completions API and return the text response.
    """
    api_key = provider_config.get('api_key', '')
    models = provider_config.get('models') or []
    model = models[0] if models else provider_config.get('model', 'gpt-4o-mini')
    timeout = provider_config.get('timeout', 60)
    api_url = provider_config.get('api_url', 'https://api.openai.com/v1/chat/completions')

    if not api_key or api_key == "YOUR_API_KEY_HERE":
        raise TranslationError("OpenAI API key not configured", code="provider_config_missing")

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json"
    }

    body = {
        "model": model,
        "messages": [
            {"role": "system", "content": provider_config.get('system_message', DEFAULT_SYSTEM_MESSAGE)},
            {"role": "user", "content": CHAT_TRANSLATION_PROMPT.format(
                source_language=source_language,
                target_language=target_language,
                text=text,
            )},
        ],
    }

    logger.debug(f"  Calling chat completions API (model: {model}, {source_language} -> {target_language})...")

    try:
        with httpx.Client(timeout=get_httpx_timeout(timeout)) as client:
            response = client.post(api_url, headers=headers, json=body)
            response.raise_for_status()

            result = response.json()

            if 'choices' in result and len(result['choices']) > 0:
                content = (result['choices'][0]['message'].get('content') or '').strip()
                if content:
                    logger.debug(f"  Received {len(content)} chars from chat completions")
                    return content

            raise TranslationError("No content in chat completions response")

    except httpx.HTTPStatusError as e:
        handle_http_error(e, "OpenAI")
    except httpx.TimeoutException:
        raise TranslationError("OpenAI API request timeout", code="provider_timeout")
    except TranslationError:
        raise
    except Exception as e:
        raise TranslationError(f"OpenAI API call failed: {e}")
