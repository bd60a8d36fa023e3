"""GroqCategoryClient: LLM-backed category suggestion for statement descriptions.

This module defines the client the classifier cascade calls when no keyword rule matches. It
sends the description and the known category names to a Groq chat-completions model and
reduces the reply to a single category name. Every failure is logged and reported as ``None``
so a flaky API never breaks ingestion.
"""

import re

from kakeibo.classifier.prompts import SYSTEM_PROMPT, USER_PROMPT_LOG_LABEL, USER_PROMPT_TEMPLATE
from kakeibo.core.settings import Settings
from kakeibo.core.utils import get_logger, truncate

MAX_OUTPUT_LOG_LEN = 300

logger = get_logger("kakeibo.classifier.groq")

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL)


def _get_color(color: str) -> str:
    try:
        from colorlog.escape_codes import escape_codes as _codes

        return _codes.get(color, "")
    except ImportError:
        return ""


class GroqCategoryClient:
    """Category classifier backed by a Groq chat-completions client."""

    def __init__(self, llm_client: object, settings: Settings) -> None:
        """Initialize the client with a Groq SDK client and settings."""
        self.llm_client = llm_client
        self.settings = settings

    def classify(self, description: str, categories: list[str]) -> str | None:
        """Ask the model for the best category; returns None on any failure or empty answer."""
        if not categories:
            return None
        yellow = _get_color("yellow")
        green = _get_color("green")
        reset = _get_color("reset")
        logger.info(f"{yellow}PROMPT: {USER_PROMPT_LOG_LABEL}: {description}{reset}")
        user_prompt = USER_PROMPT_TEMPLATE.format(description=description, categories=", ".join(categories))
        try:
            completion = self.llm_client.chat.completions.create(
                model=self.settings.groq_model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.settings.groq_temperature,
                max_completion_tokens=self.settings.groq_max_completion_tokens,
                top_p=self.settings.groq_top_p,
                stream=self.settings.groq_stream,
            )
            raw_output = self._collect_llm_output(completion)
        except Exception:
            logger.exception(f"Groq API call failed for '{description}'")
            return None
        logger.info(f"{green}OUTPUT: {truncate(raw_output, MAX_OUTPUT_LOG_LEN)}{reset}")
        return self.extract_category(raw_output, categories)

    def _collect_llm_output(self, completion: object) -> str:
        """Collect the full text from a streamed or non-streamed completion."""
        if not self.settings.groq_stream:
            return completion.choices[0].message.content or ""
        raw_output = ""
        for chunk in completion:
            raw_output += chunk.choices[0].delta.content or ""
        return raw_output

    @staticmethod
    def extract_category(raw_output: str, categories: list[str]) -> str | None:
        """Reduce model output to a category name.

        Exact matches win, then the longest known category contained in the answer; otherwise the
        cleaned answer is returned as-is and left for the caller to reject.
        """
        text = _THINK_BLOCK.sub("", raw_output).strip().strip("\"'「」。.").strip()
        if not text:
            return None
        text = text.splitlines()[0].strip()
        if text in categories:
            return text
        contained = [name for name in categories if name and name in text]
        if contained:
            return max(contained, key=len)
        return text
