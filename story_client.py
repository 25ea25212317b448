"""DeepAI text-generation client that turns extracted text into a story."""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict

import requests

logger = logging.getLogger(__name__)

STORY_PROMPT_TEMPLATE = (
    "Create a funny and educational children's story inspired by this text:\n\n{text}"
)


class StoryGenerationError(RuntimeError):
    """Raised when the text-generation service does not return a story."""


class StoryClient:
    """Generate a children's story via DeepAI's text-generator endpoint."""

    BASE_URL = "https://api.deepai.org/api/text-generator"

    def __init__(self, config: Dict[str, Any]) -> None:
        apis_cfg = config.get("apis", {}) if isinstance(config, dict) else {}
        deepai_cfg = apis_cfg.get("deepai", {}) if isinstance(apis_cfg, dict) else {}
        if not isinstance(deepai_cfg, dict):
            deepai_cfg = {}

        key_cfg = str(deepai_cfg.get("api_key") or "").strip()
        env_key = os.getenv("DEEPAI_API_KEY", "").strip()
        self.api_key = key_cfg or env_key or None
        if not self.api_key:
            logger.warning("DeepAI API key missing. Set DEEPAI_API_KEY or apis.deepai.api_key.")

        self.url = str(deepai_cfg.get("url") or self.BASE_URL)
        self.prompt_template = str(deepai_cfg.get("prompt_template") or STORY_PROMPT_TEMPLATE)
        self.timeout_connect = float(deepai_cfg.get("timeout_connect", 10) or 10)
        self.timeout_read = float(deepai_cfg.get("timeout_read", 60) or 60)

    def build_prompt(self, extracted_text: str) -> str:
        return self.prompt_template.format(text=extracted_text)

    def generate(self, extracted_text: str) -> str:
        text = extracted_text.strip()
        if not text:
            raise StoryGenerationError("No extracted text to build a story from.")

        headers = {}
        if self.api_key:
            headers["Api-Key"] = self.api_key

        try:
            start = time.monotonic()
            response = requests.post(
                self.url,
                data={"text": self.build_prompt(text)},
                headers=headers,
                timeout=(self.timeout_connect, self.timeout_read),
            )
            elapsed = time.monotonic() - start
            logger.info("DeepAI response: status=%s elapsed=%.2fs", response.status_code, elapsed)
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("DeepAI request failed: %s", exc)
            raise StoryGenerationError("Failed to generate story.") from exc

        if not isinstance(data, dict):
            raise StoryGenerationError("Failed to generate story.")
        if data.get("err"):
            raise StoryGenerationError(f"DeepAI error: {data['err']}")

        story = str(data.get("output") or "").strip()
        if not story:
            logger.error("DeepAI response missing 'output' field: %s", data)
            raise StoryGenerationError("Failed to generate story.")
        return story
