"""Shared fixtures for the Textbook Tutor test suite."""

import hashlib
import re

import fitz
import numpy as np
import pytest
from fastapi.testclient import TestClient

from textbook_tutor.rag.pipeline import StudyPipeline
from textbook_tutor.rag.retriever import Retriever
from textbook_tutor.session import Credentials

# ---------------------------------------------------------------------------
# Sample textbook content
# ---------------------------------------------------------------------------

SAMPLE_PAGES = [
    (
        "Chapter 1: Cells. All living things are made of cells. A cell is the "
        "smallest unit of life that can carry out every life process. Plant cells "
        "have a rigid cell wall made of cellulose, while animal cells only have a "
        "flexible cell membrane. The nucleus controls the activities of the cell "
        "and holds its genetic material. Mitochondria release energy from food "
        "through respiration, which is why they are called the powerhouse of the cell."
    ),
    (
        "Chapter 2: Photosynthesis. Green plants make their own food through "
        "photosynthesis. Chlorophyll in the chloroplasts absorbs sunlight. Using "
        "that light energy, the plant combines carbon dioxide from the air with "
        "water from the soil to make glucose. Oxygen is released as a by-product. "
        "The rate of photosynthesis depends on light intensity, temperature and "
        "the concentration of carbon dioxide."
    ),
    (
        "Chapter 3: Osmosis. Osmosis is the movement of water molecules across a "
        "partially permeable membrane from a dilute solution to a more concentrated "
        "solution. Root hair cells take in water from the soil by osmosis. If a "
        "plant cell loses too much water it becomes flaccid and the plant wilts. "
        "Diffusion, by contrast, is the spreading of particles of any substance "
        "from an area of high concentration to an area of low concentration."
    ),
]


def make_pdf(pages: list[str]) -> bytes:
    """Build a real PDF in memory with one page per string."""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        page.insert_textbox(fitz.Rect(72, 72, 540, 770), text, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


# ---------------------------------------------------------------------------
# Fakes that never load a model or call an LLM
# ---------------------------------------------------------------------------


class FakeEmbedder:
    """Deterministic bag-of-words embedder: identical text -> identical vector."""

    dimension = 64

    def __init__(self, model_name: str = "fake-embedder"):
        self.model_name = model_name

    def embed(self, text: str) -> list[float]:
        vector = np.zeros(self.dimension)
        vector[0] = 1.0  # never a zero vector
        for word in re.findall(r"\w+", text.lower()):
            digest = hashlib.md5(word.encode()).digest()
            vector[1 + digest[0] % (self.dimension - 1)] += 1.0
        return (vector / np.linalg.norm(vector)).tolist()

    def embed_batch(self, texts: list[str], **_) -> list[list[float]]:
        return [self.embed(text) for text in texts]


class FakeGenerator:
    """Generator that records every prompt instead of calling an LLM."""

    def __init__(self, answer: str = "This is a test answer about cells."):
        self.answer = answer
        self.calls = []

    def generate(self, prompt, model_name, credentials):
        self.calls.append({"prompt": prompt, "model_name": model_name, "credentials": credentials})
        return self.answer


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_pdf() -> bytes:
    """A 3-page biology textbook PDF."""
    return make_pdf(SAMPLE_PAGES)


@pytest.fixture()
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture()
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture()
def credentials() -> Credentials:
    return Credentials(api_key="server-side-key", provider="groq")


@pytest.fixture()
def pipeline(tmp_path, embedder, fake_generator) -> StudyPipeline:
    """StudyPipeline with fake embedder/LLM and indexes under tmp_path."""
    return StudyPipeline(
        retriever=Retriever(embedder=embedder),
        generator=fake_generator,
        vector_store_dir=tmp_path / "vector_stores",
        upload_dir=tmp_path / "uploads",
    )


@pytest.fixture()
def test_client(pipeline, credentials):
    """
    TestClient around the real app with a fake embedder and LLM.

    ChromaDB and pymupdf are real; sentence-transformers and Groq are
    bypassed so tests run without network access or model downloads.
    """
    from textbook_tutor.interfaces.web_app import create_app

    app = create_app(pipeline=pipeline, credentials=credentials)
    yield TestClient(app)
