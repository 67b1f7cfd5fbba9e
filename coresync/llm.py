from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from openai import OpenAI


class LanguageModel(Protocol):
    def generate(self, prompt: str, json_mode: bool = False) -> str:
        """Return the model's text reply for a single prompt."""


class OpenAIChatModel:
    """Single-shot prompt completion over the OpenAI chat completions API."""

    def __init__(self, client: OpenAI, model_name: str) -> None:
        self._client = client
        self.model_name = model_name

    @classmethod
    def from_api_key(cls, api_key: str, model_name: str) -> "OpenAIChatModel":
        return cls(OpenAI(api_key=api_key), model_name)

    def generate(self, prompt: str, json_mode: bool = False) -> str:
        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        completion = self._client.chat.completions.create(
            model=self.model_name,
            messages=[{"role": "user", "content": prompt}],
            **kwargs,
        )
        content: Optional[str] = completion.choices[0].message.content
        return (content or "").strip()

    def close(self) -> None:
        self._client.close()
