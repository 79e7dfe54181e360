"""
Generator - Sends a filled prompt to an LLM and returns its answer.

This module handles the generation part of RAG. Two providers are supported:
- groq: hosted chat completions (default); needs an API key
- ollama: a local Ollama server; no key needed

Key Concept:
One call, one attempt. No retries, no streaming, no post-processing. Whatever
the provider SDK raises (auth, rate limit, network) reaches the caller
unchanged, and whatever text it returns is passed back as-is.
"""

import logging

import ollama
from groq import Groq

from textbook_tutor.config import GROQ_MODEL, OLLAMA_BASE_URL, OLLAMA_MODEL
from textbook_tutor.errors import MissingCredentialsError
from textbook_tutor.session import Credentials

logger = logging.getLogger(__name__)

PROVIDERS = ("groq", "ollama")


class Generator:
    """
    Generates answers from fully substituted prompts.

    Example:
        generator = Generator()
        answer = generator.generate(prompt, "llama-3.1-8b-instant", Credentials.from_config())
    """

    def __init__(self, ollama_host: str | None = None):
        """
        Args:
            ollama_host: Base URL of the Ollama server (for the ollama provider)
        """
        self.ollama_host = ollama_host or OLLAMA_BASE_URL

    @staticmethod
    def default_model(provider: str) -> str:
        return OLLAMA_MODEL if provider == "ollama" else GROQ_MODEL

    def generate(
        self,
        prompt: str,
        model_name: str | None,
        credentials: Credentials,
    ) -> str:
        """
        Generate a response for a prompt.

        Args:
            prompt: The fully substituted prompt
            model_name: Provider model name (provider default if None)
            credentials: Provider and API key

        Returns:
            The model's text, unmodified

        Raises:
            MissingCredentialsError: If the hosted provider has no API key
            ValueError: If the provider is unknown
        """
        provider = credentials.provider
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown LLM provider '{provider}'. Choose from: {', '.join(PROVIDERS)}")

        model = model_name or self.default_model(provider)
        logger.info("Generating with %s model %s", provider, model)

        if provider == "groq":
            return self._generate_groq(prompt, model, credentials.api_key)
        return self._generate_ollama(prompt, model)

    def _generate_groq(self, prompt: str, model: str, api_key: str) -> str:
        if not api_key:
            raise MissingCredentialsError(
                "No Groq API key configured on the server. Set GROQ_API_KEY."
            )
        # max_retries=0: the SDK would otherwise retry rate limits on its own
        client = Groq(api_key=api_key, max_retries=0)
        response = client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.choices[0].message.content or ""

    def _generate_ollama(self, prompt: str, model: str) -> str:
        client = ollama.Client(host=self.ollama_host)
        response = client.chat(
            model=model,
            messages=[{"role": "user", "content": prompt}],
        )
        return response['message']['content']
