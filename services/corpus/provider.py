import json
import logging
import threading
from pathlib import Path
from typing import Callable, List, Optional

from services.corpus.models import Corpus, corpus_from_dict

logger = logging.getLogger(__name__)

DEFAULT_RELATIVE_PATH = Path("data") / "parties.json"
PROJECT_ROOT = Path(__file__).resolve().parents[2]


class CorpusLoadError(Exception):
    """Raised when parties.json cannot be found or parsed."""


class CorpusProvider:
    """
    Loads the party corpus once per process and hands out the same
    immutable Corpus afterwards.

    Lookup order:
      1. the configured path (CORPUS_PATH), when one is given
      2. data/parties.json under the current working directory
      3. data/parties.json under the project root
    """

    def __init__(self, configured_path: Optional[Path] = None):
        self._configured_path = Path(configured_path) if configured_path else None
        self._corpus: Optional[Corpus] = None
        self._lock = threading.Lock()
        self._strategies: List[Callable[[], Optional[Path]]] = [
            self._from_configured_path,
            self._from_working_dir,
            self._from_project_root,
        ]

    # ---------- resolution strategies ----------
    def _from_configured_path(self) -> Optional[Path]:
        return self._configured_path

    def _from_working_dir(self) -> Optional[Path]:
        return Path.cwd() / DEFAULT_RELATIVE_PATH

    def _from_project_root(self) -> Optional[Path]:
        return PROJECT_ROOT / DEFAULT_RELATIVE_PATH

    def candidates(self) -> List[Path]:
        out: List[Path] = []
        for strategy in self._strategies:
            p = strategy()
            if p is not None and p not in out:
                out.append(p)
        return out

    def resolve(self) -> Path:
        for p in self.candidates():
            if p.is_file():
                return p
        raise CorpusLoadError("No se encontró el archivo parties.json")

    # ---------- loading ----------
    @property
    def loaded(self) -> bool:
        return self._corpus is not None

    def get(self) -> Corpus:
        corpus = self._corpus
        if corpus is not None:
            return corpus
        with self._lock:
            if self._corpus is None:
                self._corpus = self._load()
            return self._corpus

    def get_optional(self) -> Optional[Corpus]:
        """Like get(), but returns None instead of raising when the corpus is unavailable."""
        try:
            return self.get()
        except CorpusLoadError as e:
            logger.warning("Corpus unavailable", extra={"error": str(e)})
            return None

    def _load(self) -> Corpus:
        path = self.resolve()
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            corpus = corpus_from_dict(raw)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise CorpusLoadError(f"parties.json inválido en {path}: {e}") from e

        logger.info(
            "Corpus loaded",
            extra={
                "path": str(path),
                "party_count": len(corpus.parties),
                "chunk_count": sum(len(p.chunks) for p in corpus.parties),
            },
        )
        return corpus
