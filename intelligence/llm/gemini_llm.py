"""
Google Gemini LLM
"""
from typing import List, Optional, Tuple
import logging

from .base import BaseLLM, Message, MessageRole, LLMResponse
from utils.exceptions import LLMError


logger = logging.getLogger(__name__)


class GeminiLLM(BaseLLM):
    """
    Google Gemini implementation

    Models:
    - gemini-2.0-flash (default)
    - gemini-1.5-pro
    - gemini-1.5-flash
    """

    def __init__(
        self,
        model: str = "gemini-2.0-flash",
        api_key: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 8192,
        timeout: float = 120.0,
        **kwargs,
    ):
        super().__init__(model, temperature, max_tokens, timeout, **kwargs)
        self.api_key = api_key

    @property
    def provider(self) -> str:
        return "gemini"

    def _convert_messages(self, messages: List[Message]) -> Tuple[Optional[str], str]:
        """
        Split messages into Gemini's shape.

        Returns:
            (system_instruction, prompt) where the prompt joins the user messages
        """
        system_parts = [msg.content for msg in messages if msg.role == MessageRole.SYSTEM]
        user_parts = [msg.content for msg in messages if msg.role == MessageRole.USER]
        system_instruction = "\n\n".join(system_parts) or None
        return system_instruction, "\n\n".join(user_parts)

    @staticmethod
    def _status_code(exc: Exception) -> Optional[int]:
        code = getattr(exc, "code", None)
        return code if isinstance(code, int) else None

    async def acomplete(
        self,
        messages: List[Message],
        **kwargs,
    ) -> LLMResponse:
        import google.generativeai as genai

        genai.configure(api_key=self.api_key)

        system_instruction, prompt = self._convert_messages(messages)

        generation_config = {
            "temperature": kwargs.get("temperature", self.temperature),
            "max_output_tokens": kwargs.get("max_tokens", self.max_tokens),
        }
        if kwargs.get("response_mime_type"):
            generation_config["response_mime_type"] = kwargs["response_mime_type"]

        model = genai.GenerativeModel(
            model_name=self.model,
            generation_config=generation_config,
            system_instruction=system_instruction,
        )

        try:
            response = await model.generate_content_async(
                prompt,
                request_options={"timeout": self.timeout},
            )
            content = response.text or ""
        except Exception as exc:
            raise LLMError(
                f"gemini request failed: {exc}",
                provider=self.provider,
                status_code=self._status_code(exc),
            ) from exc

        usage = {}
        if getattr(response, "usage_metadata", None):
            usage = {
                "prompt_tokens": response.usage_metadata.prompt_token_count,
                "completion_tokens": response.usage_metadata.candidates_token_count,
                "total_tokens": response.usage_metadata.total_token_count,
            }

        return LLMResponse(
            content=content,
            model=self.model,
            usage=usage,
            finish_reason=response.candidates[0].finish_reason.name if response.candidates else None,
            raw_response=response,
        )
