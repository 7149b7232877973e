# app/services/llm.py
import json
import os
import re
import logging
from typing import Any, Dict

import httpx
from anthropic import Anthropic, APIError as AnthropicAPIError
from openai import OpenAI, APIError as OpenAIAPIError
from pydantic import ValidationError

from app.core import config
from app.models.analysis import AnalysisResult, LLMConfig

log = logging.getLogger("llm")


class LLMError(RuntimeError):
    """Any failure of the LLM analysis path; the message is shown to the user as-is."""

class LLMConfigError(LLMError):
    ...

class LLMProviderError(LLMError):
    ...

class LLMResponseError(LLMError):
    ...


SYSTEM = "You are a helpful communication coach. Always respond with valid JSON."

ANALYSIS_PROMPT = (
    "You are an expert communication coach and relationship advisor. Analyze the following "
    "conversation that didn't go well and provide detailed, empathetic feedback.\n\n"
    "Please analyze the conversation for:\n"
    "1. Communication patterns and issues\n"
    "2. Timing and pacing problems\n"
    "3. Boundary violations or inappropriate behavior\n"
    "4. Signs of disinterest or disengagement\n"
    "5. Missed social cues\n"
    "6. Oversharing or undersharing\n"
    "7. Tone and emotional intelligence issues\n\n"
    "Provide your analysis in the following JSON format:\n"
    "{\n"
    '  "overallScore": number (0-100),\n'
    '  "summary": "A compassionate 2-3 sentence summary of what happened",\n'
    '  "issues": [{"category": "communication|timing|boundaries|interest|social-cues|oversharing", '
    '"title": str, "description": str, "severity": "low|medium|high", "examples": [str]}],\n'
    '  "strengths": [str],\n'
    '  "suggestions": [{"category": str, "title": str, "description": str, "actionable": true}],\n'
    '  "riskFactors": [{"type": str, "description": str, "impact": "low|medium|high"}]\n'
    "}\n\n"
    "Be honest but kind. Focus on growth and learning. Avoid being judgmental.\n\n"
    "Conversation to analyze:\n"
)

# grab the outermost {...} span to be resilient to prose or code fences around it
_JSON_FENCE = re.compile(r"\{.*\}", re.DOTALL)


def config_from_env() -> LLMConfig:
    """Server-side default provider, used when a request carries no LLM settings."""
    provider = os.getenv("LLM_PROVIDER", "openai").lower()
    fallback_key = {"openai": "OPENAI_API_KEY", "anthropic": "ANTHROPIC_API_KEY"}.get(provider)
    api_key = os.getenv("LLM_API_KEY") or (os.getenv(fallback_key) if fallback_key else None)
    if not api_key:
        raise LLMConfigError("LLM configuration not found. Please configure your AI settings.")
    try:
        return LLMConfig(
            provider=provider,
            api_key=api_key,
            model=os.getenv("LLM_MODEL") or None,
            endpoint=os.getenv("LLM_ENDPOINT") or None,
        )
    except ValidationError:
        raise LLMConfigError(f"Unsupported LLM provider: {provider}") from None


def _extract_json(text: str) -> Dict[str, Any]:
    try:
        return json.loads(text)
    except Exception:
        pass
    m = _JSON_FENCE.search(text or "")
    if m:
        return json.loads(m.group(0))
    raise ValueError("Model output was not valid JSON")


def _http_client() -> httpx.Client:
    return httpx.Client(timeout=config.LLM_TIMEOUT)


def _provider_message(e: Exception) -> str:
    # OpenAI hands back the inner {"message": ...}; Anthropic the whole {"error": {"message": ...}}
    body = getattr(e, "body", None)
    if isinstance(body, dict):
        inner = body.get("error") if isinstance(body.get("error"), dict) else body
        if inner.get("message"):
            return str(inner["message"])
    return getattr(e, "message", None) or "Unknown error"


def _call_openai(prompt: str, cfg: LLMConfig) -> str:
    with _http_client() as http:
        client = OpenAI(
            api_key=cfg.api_key,
            base_url=cfg.endpoint or None,
            timeout=config.LLM_TIMEOUT,
            max_retries=0,
            http_client=http,
        )
        try:
            resp = client.chat.completions.create(
                model=cfg.model or config.DEFAULT_MODELS["openai"],
                messages=[
                    {"role": "system", "content": SYSTEM},
                    {"role": "user", "content": prompt},
                ],
                temperature=config.LLM_TEMPERATURE,
                max_tokens=config.LLM_MAX_TOKENS,
            )
        except OpenAIAPIError as e:
            raise LLMProviderError(f"OpenAI API error: {_provider_message(e)}") from e
    if not resp.choices:
        raise LLMResponseError("OpenAI reply contained no choices")
    return resp.choices[0].message.content or ""


def _call_anthropic(prompt: str, cfg: LLMConfig) -> str:
    with _http_client() as http:
        client = Anthropic(api_key=cfg.api_key, timeout=config.LLM_TIMEOUT, max_retries=0, http_client=http)
        try:
            resp = client.messages.create(
                model=cfg.model or config.DEFAULT_MODELS["anthropic"],
                max_tokens=config.LLM_MAX_TOKENS,
                messages=[{"role": "user", "content": prompt}],
            )
        except AnthropicAPIError as e:
            raise LLMProviderError(f"Anthropic API error: {_provider_message(e)}") from e
    text = next((b.text for b in (resp.content or []) if getattr(b, "type", None) == "text"), None)
    if text is None:
        raise LLMResponseError("Anthropic reply contained no text block")
    return text


def _call_custom(prompt: str, cfg: LLMConfig) -> str:
    if not cfg.endpoint:
        raise LLMConfigError("Custom API endpoint is required")
    headers = {"Authorization": f"Bearer {cfg.api_key}"}
    try:
        with _http_client() as client:
            response = client.post(cfg.endpoint, json={"prompt": prompt, "model": cfg.model}, headers=headers)
    except httpx.HTTPError as e:
        raise LLMProviderError(f"Custom API error: {e}") from e
    if response.is_error:
        raise LLMProviderError(f"Custom API error: {response.reason_phrase}")
    try:
        data = response.json()
    except ValueError as e:
        raise LLMResponseError("Custom API returned a non-JSON body") from e
    out = (data.get("response") or data.get("content") or data.get("text")) if isinstance(data, dict) else None
    if not isinstance(out, str):
        raise LLMResponseError("Custom API reply had no response/content/text field")
    return out


def _chat(prompt: str, cfg: LLMConfig) -> str:
    """Single round trip to the configured provider."""
    log.info("LLM call provider=%s model=%s", cfg.provider, cfg.model or config.DEFAULT_MODELS.get(cfg.provider))
    if cfg.provider == "openai":
        return _call_openai(prompt, cfg)
    if cfg.provider == "anthropic":
        return _call_anthropic(prompt, cfg)
    if cfg.provider == "custom":
        return _call_custom(prompt, cfg)
    raise LLMConfigError(f"Unsupported LLM provider: {cfg.provider}")


def parse_result(raw: str) -> AnalysisResult:
    """Turn a model reply into an AnalysisResult tagged as `llm`."""
    try:
        data = _extract_json(raw)
    except ValueError as e:
        raise LLMResponseError(f"Could not parse AI response: {e}") from e
    if not isinstance(data, dict):
        raise LLMResponseError("Could not parse AI response: expected a JSON object")

    data = {**data, "analysisMethod": "llm"}
    try:
        result = AnalysisResult.model_validate(data)
    except ValidationError as e:
        raise LLMResponseError(f"AI response did not match the analysis format: {e.error_count()} error(s)") from e
    if not (result.summary or "").strip():
        raise LLMResponseError("AI response did not include a summary")
    return result


def analyze_with_llm(text: str, cfg: LLMConfig) -> AnalysisResult:
    """
    Delegate the analysis to an external model. No retries: any provider,
    transport or parse failure aborts the call with an LLMError.
    """
    prompt = ANALYSIS_PROMPT + text
    try:
        if not (cfg.api_key or "").strip():
            raise LLMConfigError("LLM configuration not found. Please configure your AI settings.")
        raw = _chat(prompt, cfg)
        return parse_result(raw)
    except LLMError as e:
        log.warning("LLM analysis failed provider=%s: %s", cfg.provider, e)
        raise
