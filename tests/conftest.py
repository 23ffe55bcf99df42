import json
from pathlib import Path

import pytest

from services.corpus.provider import CorpusProvider


def make_party(pid, name=None, summary="", chunks=None):
    return {
        "id": pid,
        "name": name or pid.upper(),
        "candidate": f"Candidato {pid}",
        "ideology": "Centro",
        "summary": summary,
        "chunks": chunks or [],
    }


@pytest.fixture
def corpus_file(tmp_path: Path):
    def _write(parties):
        path = tmp_path / "parties.json"
        path.write_text(json.dumps({"parties": parties}), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def provider(corpus_file):
    def _build(parties):
        return CorpusProvider(corpus_file(parties))

    return _build
