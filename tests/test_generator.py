"""Tests for the LLM generator with the provider SDKs mocked out."""

from unittest.mock import MagicMock, patch

import pytest

from textbook_tutor.errors import MissingCredentialsError
from textbook_tutor.rag.generator import Generator
from textbook_tutor.session import Credentials


def _groq_response(content):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


class TestGroq:
    @patch("textbook_tutor.rag.generator.Groq")
    def test_single_user_message(self, mock_groq):
        client = mock_groq.return_value
        client.chat.completions.create.return_value = _groq_response("Cells are tiny.")

        answer = Generator().generate(
            "FULL PROMPT", "llama-3.1-8b-instant", Credentials(api_key="k", provider="groq")
        )

        assert answer == "Cells are tiny."
        mock_groq.assert_called_once_with(api_key="k", max_retries=0)
        client.chat.completions.create.assert_called_once_with(
            model="llama-3.1-8b-instant",
            messages=[{"role": "user", "content": "FULL PROMPT"}],
        )

    @patch("textbook_tutor.rag.generator.Groq")
    def test_default_model(self, mock_groq):
        mock_groq.return_value.chat.completions.create.return_value = _groq_response("ok")

        Generator().generate("p", None, Credentials(api_key="k", provider="groq"))

        kwargs = mock_groq.return_value.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "llama-3.1-8b-instant"

    @patch("textbook_tutor.rag.generator.Groq")
    def test_content_is_not_post_processed(self, mock_groq):
        mock_groq.return_value.chat.completions.create.return_value = _groq_response("\n  # Title  \n")

        answer = Generator().generate("p", None, Credentials(api_key="k", provider="groq"))
        assert answer == "\n  # Title  \n"

    @patch("textbook_tutor.rag.generator.Groq")
    def test_missing_key_never_calls_sdk(self, mock_groq):
        with pytest.raises(MissingCredentialsError):
            Generator().generate("p", None, Credentials(api_key="", provider="groq"))
        mock_groq.assert_not_called()

    @patch("textbook_tutor.rag.generator.Groq")
    def test_sdk_errors_propagate_after_one_attempt(self, mock_groq):
        create = mock_groq.return_value.chat.completions.create
        create.side_effect = ConnectionError("network down")

        with pytest.raises(ConnectionError, match="network down"):
            Generator().generate("p", None, Credentials(api_key="k", provider="groq"))
        assert create.call_count == 1


class TestOllama:
    @patch("textbook_tutor.rag.generator.ollama.Client")
    def test_uses_local_server(self, mock_client):
        mock_client.return_value.chat.return_value = {"message": {"content": "Local answer"}}

        answer = Generator(ollama_host="http://ollama:11434").generate(
            "FULL PROMPT", None, Credentials(provider="ollama")
        )

        assert answer == "Local answer"
        mock_client.assert_called_once_with(host="http://ollama:11434")
        mock_client.return_value.chat.assert_called_once_with(
            model="llama3.2",
            messages=[{"role": "user", "content": "FULL PROMPT"}],
        )


def test_unknown_provider():
    with pytest.raises(ValueError, match="Unknown LLM provider"):
        Generator().generate("p", None, Credentials(api_key="k", provider="openai"))


def test_credentials_repr_hides_key():
    creds = Credentials(api_key="gsk_secret", provider="groq")
    assert "gsk_secret" not in repr(creds)
    assert "gsk_secret" not in str(creds)
