# clovet/domain/services/suggestion_svc.py

from __future__ import annotations
from typing import List, Optional, Sequence
import asyncio
import json
import re
import logging
from time import monotonic as _now

from openai import AsyncOpenAI, APIStatusError
from pydantic import ValidationError

from clovet.core.config import Settings
from clovet.domain.models.suggestion import SuggestionResult
from clovet.domain.models.wardrobe import WardrobeFeatureAnalysis
from clovet.domain.services.prompts import system_prompt, user_task

logger = logging.getLogger(__name__)

MAX_TOKENS = 600
OVERLOAD_RETRY_DELAY_S = 1.0


class SuggestionError(Exception):
    """Stylist unavailable or answered with something unusable."""


# Regex to strip code fences (``` or ```json) from LLM output
_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def parse_suggestion(text: str) -> SuggestionResult:
    """
    Pull the JSON object out of an LLM answer and validate it.
    Raises SuggestionError on anything that is not a usable object.
    """
    raw = _CODE_FENCE_RE.sub("", text or "").strip()
    match = _JSON_OBJECT_RE.search(raw)
    if not match:
        raise SuggestionError("No JSON object in suggestion response")
    try:
        parsed = json.loads(match.group(0))
        return SuggestionResult.model_validate(parsed)
    except (json.JSONDecodeError, ValidationError) as e:
        raise SuggestionError(f"Invalid suggestion JSON: {e}") from e


class OpenAISuggestionEngine:
    """
    LLM-backed stylist. Best-effort: every failure surfaces as SuggestionError
    so the caller can switch to rule-based queries.
    """

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None, *, max_retries: int = 1):
        self.settings = settings
        self.max_retries = max_retries
        self._client = client

    @property
    def enabled(self) -> bool:
        return self.settings.llm_configured and not self.settings.DISABLE_EXTERNAL_API

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.settings.OPENAI_API_KEY)
        return self._client

    async def _call_llm(self, messages: List[dict]) -> str:
        model = self.settings.OPENAI_SUGGESTION_MODEL
        t0 = _now()
        resp = await self._get_client().chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=MAX_TOKENS,
            temperature=0.4,
            timeout=self.settings.openai_timeout_s,
            response_format={"type": "json_object"},
        )
        dt = _now() - t0
        u = getattr(resp, "usage", None)
        logger.info(
            f"LLM call model={getattr(resp, 'model', model)} duration={dt:.3f}s "
            f"tokens(total={getattr(u, 'total_tokens', None)})"
        )
        return resp.choices[0].message.content or ""

    async def _call_with_overload_retry(self, messages: List[dict]) -> str:
        try:
            return await self._call_llm(messages)
        except APIStatusError as e:
            if e.status_code not in (502, 503):
                raise
            logger.warning(f"LLM overloaded ({e.status_code}), retrying once")
            await asyncio.sleep(OVERLOAD_RETRY_DELAY_S)
            return await self._call_llm(messages)

    async def suggest(self, analysis: WardrobeFeatureAnalysis, items: Sequence) -> SuggestionResult:
        if not self.settings.llm_configured:
            raise SuggestionError("OpenAI API key not configured")
        if self.settings.DISABLE_EXTERNAL_API:
            raise SuggestionError("External APIs disabled")

        messages = [
            {"role": "system", "content": system_prompt()},
            {"role": "user", "content": user_task(analysis, items)},
        ]
        schema = SuggestionResult.model_json_schema(by_alias=True)

        for attempt in range(self.max_retries + 1):
            try:
                content = await self._call_with_overload_retry(messages)
            except Exception as e:
                raise SuggestionError(f"LLM call failed: {e}") from e
            try:
                return parse_suggestion(content)
            except SuggestionError as e:
                if attempt == self.max_retries:
                    raise
                logger.warning(f"Suggestion response rejected, retrying with schema: {e}")
                messages = messages + [
                    {"role": "system",
                     "content": (
                         "Your previous response did not conform to the required JSON format. "
                         "Return JSON matching this JSON Schema exactly. No prose, no code fences."
                     )},
                    {"role": "user",
                     "content": f"Validation error was:\n{e}\n\nJSON Schema:\n{json.dumps(schema)}"},
                ]
        raise SuggestionError("Unexpected fall-through in suggest")
