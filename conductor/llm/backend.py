from abc import ABC, abstractmethod

from ..config import DEFAULT_TEMPERATURE


class LLMBackend(ABC):
    """
    Abstract language-model transport.

    Responsible only for:
        • Sending a system + user prompt
        • Returning raw text
        • Handling backend-specific transport

    Failures are reported by raising. There is no streaming contract.
    """

    @property
    def name(self) -> str:
        """Return backend identity."""
        return self.__class__.__name__

    @abstractmethod
    def generate(self, system: str, user: str, temperature: float = DEFAULT_TEMPERATURE) -> str:
        """
        Execute a chat completion and return raw text output.

        Parameters
        ----------
        system : str
            System prompt (role, goal, tool instructions).

        user : str
            User prompt (input, prior outputs, tool results).

        temperature : float
            Sampling temperature.

        Returns
        -------
        str
            Raw model output.
        """
        raise NotImplementedError
