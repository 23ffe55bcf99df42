import json
import threading

import pytest

from services.corpus.models import Corpus
from services.corpus.provider import CorpusLoadError, CorpusProvider

from conftest import make_party


def test_loads_configured_path(provider):
    prov = provider([make_party("p1", chunks=[{"page": 4, "text": "hola"}])])
    assert not prov.loaded

    corpus = prov.get()
    assert isinstance(corpus, Corpus)
    assert corpus.find("p1").chunks[0].page == 4
    assert corpus.find("missing") is None
    assert prov.loaded


def test_corpus_is_cached(provider, corpus_file):
    prov = provider([make_party("p1")])
    first = prov.get()
    corpus_file([make_party("p2")])  # rewrite on disk
    assert prov.get() is first


def test_concurrent_first_load_returns_one_instance(provider):
    prov = provider([make_party("p1")])
    results = []

    def worker():
        results.append(prov.get())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert all(r is results[0] for r in results)


def test_falls_back_to_working_dir(tmp_path, monkeypatch):
    data = tmp_path / "data"
    data.mkdir()
    (data / "parties.json").write_text(
        json.dumps({"parties": [make_party("wd")]}), encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)

    prov = CorpusProvider(tmp_path / "does-not-exist.json")
    assert prov.resolve() == data / "parties.json"
    assert prov.get().parties[0].id == "wd"


def test_missing_everywhere(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    prov = CorpusProvider(tmp_path / "nope.json")
    with pytest.raises(CorpusLoadError):
        prov.get()
    assert prov.get_optional() is None


def test_invalid_json(tmp_path):
    path = tmp_path / "parties.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(CorpusLoadError):
        CorpusProvider(path).get()


def test_invalid_page(corpus_file):
    path = corpus_file([make_party("p1", chunks=[{"page": 0, "text": "x"}])])
    with pytest.raises(CorpusLoadError):
        CorpusProvider(path).get()


def test_loaded_objects_are_frozen(provider):
    corpus = provider([make_party("p1", chunks=[{"page": 1, "text": "x"}])]).get()
    with pytest.raises(AttributeError):
        corpus.parties[0].summary = "changed"
