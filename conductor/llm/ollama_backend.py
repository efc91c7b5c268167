import requests
import logging

from .backend import LLMBackend
from ..config import DEFAULT_TEMPERATURE
from ..errors import LLMBackendError

logger = logging.getLogger(__name__)


class OllamaBackend(LLMBackend):
    """
    Ollama chat transport.
    Local model backend.
    """

    def __init__(
        self,
        model: str = "llama3.1",
        base_url: str = "http://localhost:11434/api/chat",
        timeout_seconds: int = 120,
    ):
        self.model = model
        self.url = base_url
        self.timeout = timeout_seconds

    # ---------------------------------------------------------
    # Main Chat Interface
    # ---------------------------------------------------------

    def generate(self, system: str, user: str, temperature: float = DEFAULT_TEMPERATURE) -> str:

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "stream": False,
            "options": {"temperature": temperature},
        }

        logger.debug(
            "[OLLAMA] model=%s | system=%d chars | user=%d chars",
            self.model,
            len(system),
            len(user),
        )

        try:
            response = requests.post(
                self.url,
                json=payload,
                timeout=self.timeout,
                proxies={"http": None, "https": None},
            )

            response.raise_for_status()

        except requests.Timeout:
            raise TimeoutError("Ollama request timed out")

        except requests.RequestException as e:
            raise LLMBackendError(f"Ollama request failed: {str(e)}") from e

        try:
            data = response.json()
            return data["message"]["content"]
        except (KeyError, TypeError, ValueError) as e:
            raise LLMBackendError(
                f"Unexpected Ollama response format: {str(e)}"
            ) from e
