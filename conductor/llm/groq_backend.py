import os
import requests
import logging

from .backend import LLMBackend
from ..config import DEFAULT_TEMPERATURE
from ..errors import LLMBackendError

logger = logging.getLogger(__name__)

GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"


class GroqBackend(LLMBackend):

    def __init__(
        self,
        model: str = "llama-3.1-8b-instant",
        base_url: str = GROQ_URL,
        timeout_seconds: int = 120,
        api_key: str = None,
    ):
        self.model = model
        self.url = base_url
        self.timeout = timeout_seconds

        self.api_key = api_key or os.getenv("GROQ_API_KEY")

        if not self.api_key:
            raise RuntimeError(
                "GROQ_API_KEY environment variable not set"
            )

    def generate(self, system: str, user: str, temperature: float = DEFAULT_TEMPERATURE) -> str:

        logger.info("[GROQ] model=%s | temperature=%s", self.model, temperature)
        logger.debug("[GROQ] Prompt preview:\n%s", user[:2000])

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": temperature,
        }

        try:
            response = requests.post(
                self.url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=self.timeout,
            )

            response.raise_for_status()

        except requests.Timeout:
            raise TimeoutError("Groq request timed out")

        except requests.RequestException as e:
            raise LLMBackendError(f"Groq request failed: {str(e)}") from e

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise LLMBackendError(f"Unexpected Groq response format: {str(e)}") from e

        logger.debug("[GROQ] Response:\n%s", content)

        return content
