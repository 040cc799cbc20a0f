"""Vertex AI Gemini chat assistant for GConnect.

Wraps the ``vertexai`` SDK to answer citizens' questions about Indian
government schemes in English, Hindi or Hinglish.  The model is asked
for a JSON object so the reply can carry structured scheme suggestions
alongside the text.

Failures never reach the caller: once retries are exhausted the
assistant answers with a fixed apology in the user's script.
"""

from __future__ import annotations

import json
import re
import time
from typing import Any, Final

import structlog
import vertexai
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from vertexai.generative_models import (
    Content,
    GenerationConfig,
    GenerativeModel,
    Part,
)

from gconnect.models.chat import ChatReply, SuggestedScheme
from gconnect.models.enums import ChatLanguage
from gconnect.models.user_profile import UserProfile
from gconnect.services.i18n import translate

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

GCONNECT_SYSTEM_PROMPT: Final[str] = """\
You are GConnect Assistant, a helpful AI chatbot for the Indian government \
scheme discovery platform. You help users find and understand government \
schemes in both Hindi and English.

Key responsibilities:
1. Answer questions about government schemes in India
2. Help users understand eligibility criteria
3. Provide application guidance
4. Support both Hindi and English (Hinglish) communication
5. Be culturally sensitive and use appropriate Indian context

User Profile Context: {profile}

Always respond in a friendly, helpful manner. If the user asks in \
Hindi/Hinglish, respond in Hindi. If they ask in English, respond in \
English. Provide practical, actionable information.

Format your response as JSON with the following structure:
{{
  "message": "Your helpful response",
  "schemes": [optional array of {{"name", "description", "eligibility"}} objects],
  "language": "detected language (en/hi/hinglish)"
}}\
"""

_RECOMMENDATION_PROMPT: Final[str] = """\
Based on this user profile, suggest 5 most relevant Indian government schemes:

Profile: {profile}

Respond with a JSON object {{"schemes": [...]}} listing the scheme names \
that would be most beneficial for this user.\
"""

_DEVANAGARI: Final[re.Pattern[str]] = re.compile(r"[\u0900-\u097F]")

_MAX_SUGGESTIONS: Final[int] = 5


def detect_script_language(text: str) -> ChatLanguage:
    """``hi`` when *text* contains Devanagari, otherwise ``en``."""
    return ChatLanguage.HI if _DEVANAGARI.search(text) else ChatLanguage.EN


def fallback_reply(message: str) -> ChatReply:
    """Apology used when the model is unreachable."""
    language = detect_script_language(message)
    return ChatReply(
        message=translate("chatUnavailable", language.value),
        schemes=[],
        language=language,
    )


# ---------------------------------------------------------------------------
# ChatAssistant
# ---------------------------------------------------------------------------


class ChatAssistant:
    """Async interface to Vertex AI Gemini for the scheme assistant.

    Two operations:

    * **process_chat** -- conversational answer with optional scheme list
    * **suggest_scheme_names** -- up to five scheme names for a profile
    """

    def __init__(
        self,
        project_id: str,
        region: str = "asia-south1",
        model_name: str = "gemini-2.0-flash",
    ) -> None:
        self._project_id = project_id
        self._region = region
        self._model_name = model_name
        self._model: GenerativeModel | None = None
        self._initialized = False

    # -- lifecycle ----------------------------------------------------------

    def _initialize(self) -> None:
        """Lazily initialize the Vertex AI SDK and model handle."""
        if self._initialized:
            return
        vertexai.init(project=self._project_id, location=self._region)
        self._model = GenerativeModel(model_name=self._model_name)
        self._initialized = True
        logger.info(
            "llm.initialized",
            project=self._project_id,
            region=self._region,
            model=self._model_name,
        )

    def _get_model(self) -> GenerativeModel:
        self._initialize()
        assert self._model is not None  # noqa: S101
        return self._model

    # -- model call ---------------------------------------------------------

    @retry(
        retry=retry_if_exception_type(Exception),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True,
    )
    async def _generate_json(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_output_tokens: int = 1000,
    ) -> dict[str, Any]:
        """Send one prompt and parse the JSON object the model returns."""
        model = self._get_model()

        contents: list[Content] = []
        if system_prompt:
            # Gemini has no per-call system role; prepend it as a user turn.
            contents.append(Content(role="user", parts=[Part.from_text(system_prompt)]))
        contents.append(Content(role="user", parts=[Part.from_text(prompt)]))

        response = await model.generate_content_async(
            contents=contents,
            generation_config=GenerationConfig(
                temperature=temperature,
                top_p=0.95,
                max_output_tokens=max_output_tokens,
                response_mime_type="application/json",
            ),
        )
        raw_text = (response.text or "").strip()
        parsed = json.loads(raw_text) if raw_text else {}
        if not isinstance(parsed, dict):
            raise ValueError("model returned non-object JSON")
        return parsed

    # -- public API ---------------------------------------------------------

    async def process_chat(
        self,
        message: str,
        profile: UserProfile | None = None,
    ) -> ChatReply:
        """Answer *message*, using *profile* as context when available."""
        start = time.perf_counter()
        profile_context = (
            profile.model_dump_json(exclude_none=True) if profile is not None
            else "No profile available"
        )

        try:
            result = await self._generate_json(
                message,
                system_prompt=GCONNECT_SYSTEM_PROMPT.format(profile=profile_context),
            )
        except Exception:
            logger.error("llm.chat_failed", exc_info=True)
            return fallback_reply(message)

        reply = _parse_chat_result(result, message)
        logger.info(
            "llm.chat",
            message_length=len(message),
            answer_length=len(reply.message),
            schemes=len(reply.schemes),
            language=reply.language.value,
            processing_time_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return reply

    async def suggest_scheme_names(self, profile: UserProfile) -> list[str]:
        """Ask the model for scheme names suited to *profile*; ``[]`` on failure."""
        try:
            result = await self._generate_json(
                _RECOMMENDATION_PROMPT.format(profile=profile.model_dump_json(exclude_none=True)),
                max_output_tokens=500,
            )
        except Exception:
            logger.error("llm.suggestions_failed", exc_info=True)
            return []

        names = result.get("schemes", [])
        if not isinstance(names, list):
            return []
        return [str(name) for name in names if name][:_MAX_SUGGESTIONS]


def _parse_chat_result(result: dict[str, Any], message: str) -> ChatReply:
    """Coerce the model's JSON into a :class:`ChatReply`, tolerating gaps."""
    text = result.get("message")
    if not isinstance(text, str) or not text.strip():
        language = detect_script_language(message)
        text = translate("chatNotUnderstood", language.value)

    schemes: list[SuggestedScheme] = []
    for item in result.get("schemes") or []:
        if isinstance(item, dict) and item.get("name"):
            schemes.append(
                SuggestedScheme(
                    name=str(item["name"]),
                    description=str(item.get("description", "")),
                    eligibility=str(item.get("eligibility", "")),
                )
            )
        elif isinstance(item, str) and item:
            schemes.append(SuggestedScheme(name=item))

    try:
        language = ChatLanguage(str(result.get("language", "en")).lower())
    except ValueError:
        language = ChatLanguage.EN

    return ChatReply(message=text, schemes=schemes, language=language)
