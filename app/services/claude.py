import json
import logging
import re

from anthropic import AsyncAnthropic

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"

_FENCE_RE = re.compile(r"```(?:json)?\s*")


class ClaudeService:
    def __init__(self, api_key: str, model: str = DEFAULT_MODEL):
        self._client = AsyncAnthropic(api_key=api_key)
        self._model = model

    async def analyze(
        self, system_prompt: str, user_prompt: str, temperature: float = 0.3
    ) -> dict | None:
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=1024,
                temperature=temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
            text = response.content[0].text
            return self._try_parse_json(text)
        except Exception:
            logger.exception("Claude API call failed")
            return None

    @staticmethod
    def _try_parse_json(text: str) -> dict | None:
        stripped = _FENCE_RE.sub("", text).strip().rstrip("`")

        try:
            obj = json.loads(stripped)
            if isinstance(obj, dict):
                return obj
        except (json.JSONDecodeError, ValueError):
            pass

        # Fallback: outermost {...} span, nested objects included
        start = text.find("{")
        end = text.rfind("}")
        if start != -1 and end > start:
            try:
                obj = json.loads(text[start:end + 1])
                if isinstance(obj, dict):
                    return obj
            except (json.JSONDecodeError, ValueError):
                pass

        return None
