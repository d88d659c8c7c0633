"""
script_generator.py

Drafts radio ad scripts with OpenAI chat completions.
Also rewrites an over-long script down to the word budget of its ad slot.
"""

from typing import List, Dict

from loguru import logger
from openai import OpenAI, OpenAIError

from adstudio.config import (
    OPENAI_MODEL,
    OPENAI_TEMPERATURE,
    SPEECH_PAUSE_BUFFER,
    SPEECH_WORDS_PER_MINUTE,
)
from adstudio.errors import UpstreamError
from adstudio.services.duration import words_for


class ScriptGenerator:
    """
    Thin wrapper over the chat completions endpoint.
    One instance per request; the API key comes from the secrets store.
    """

    def __init__(
        self,
        api_key: str,
        model: str = OPENAI_MODEL,
        client: OpenAI = None,
        words_per_minute: float = SPEECH_WORDS_PER_MINUTE,
        pause_buffer: float = SPEECH_PAUSE_BUFFER,
    ):
        self.client = client or OpenAI(api_key=api_key)
        self.model = model
        # word budgets must agree with the duration check the flow runs
        self.words_per_minute = words_per_minute
        self.pause_buffer = pause_buffer

    def generate_script(self, brand_name: str, description: str, duration: int) -> str:
        messages = [
            {
                "role": "system",
                "content": (
                    f"You are an expert copywriter specializing in {duration}-second radio advertisements. "
                    "Create compelling, concise scripts that fit within the time limit."
                ),
            },
            {
                "role": "user",
                "content": (
                    f"Create a {duration}-second radio ad script for {brand_name}. "
                    f"Here's the description: {description}"
                ),
            },
        ]
        logger.info(f"🤖 Drafting {duration}s script for {brand_name!r} with {self.model}")
        return self._complete(messages)

    def shorten_script(self, script: str, duration: int, brand_name: str = "") -> str:
        max_words = words_for(duration, self.words_per_minute, self.pause_buffer)
        brand_hint = f" for {brand_name}" if brand_name else ""
        messages = [
            {
                "role": "system",
                "content": (
                    f"You are an expert copywriter specializing in {duration}-second radio advertisements. "
                    "You tighten scripts without losing the brand name or the call to action."
                ),
            },
            {
                "role": "user",
                "content": (
                    f"This radio ad script{brand_hint} runs longer than {duration} seconds. "
                    f"Rewrite it in at most {max_words} words. Return only the script.\n\n{script}"
                ),
            },
        ]
        logger.info(f"✂️ Shortening script to {max_words} words ({duration}s)")
        return self._complete(messages)

    def _complete(self, messages: List[Dict[str, str]]) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=OPENAI_TEMPERATURE,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise UpstreamError(f"OpenAI API error: {e}") from e

        if not response.choices or not response.choices[0].message.content:
            raise UpstreamError("OpenAI returned an empty script")

        logger.info("✅ Successfully generated script")
        return response.choices[0].message.content.strip()
