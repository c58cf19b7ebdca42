import os
import requests
from dotenv import load_dotenv

from Errors import UpstreamError

load_dotenv()

class AnswerClient:
    """Client for the remote question answering service."""

    def __init__(self, base_url=None, timeout=30):
        self.base_url = (base_url or os.getenv("ANSWER_SERVICE_URL") or "").rstrip("/")
        if not self.base_url:
            raise ValueError("ANSWER_SERVICE_URL environment variable is required")

        self.timeout = timeout

    def answer(self, question):
        """
        Ask the answering service a question.

        Args:
            question: Original user question

        Returns:
            Answer text

        Raises:
            UpstreamError: On network failure, non-2xx status or a body without an answer
        """
        url = f"{self.base_url}/process_question"

        try:
            response = requests.post(url, json={"question": question}, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"Answer service request failed: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"Answer service returned invalid JSON: {e}") from e

        answer = data.get("answer") if isinstance(data, dict) else None
        if not isinstance(answer, str):
            raise UpstreamError("Answer service response has no answer")

        return answer
