import re
from dataclasses import dataclass
from typing import List, Sequence

from services.corpus.models import Chunk

# Spanish question/exclamation marks plus basic punctuation
_STRIP_CHARS = re.compile(r"[¿?¡!.,;:]")
MIN_TOKEN_LEN = 4  # tokens of 3 chars or fewer act as stop words


@dataclass(frozen=True)
class ScoredChunk:
    chunk: Chunk
    score: int


def tokenize(query: str) -> List[str]:
    cleaned = _STRIP_CHARS.sub("", query.lower())
    return [w for w in cleaned.split() if len(w) >= MIN_TOKEN_LEN]


def score_chunks(query: str, chunks: Sequence[Chunk]) -> List[ScoredChunk]:
    """
    Score every chunk by how often the query tokens occur in it.

    Matching is literal substring counting on lower-cased text, so a token
    also matches inside longer words ("segur" in "seguridad"). Chunks with
    no hits are dropped; the rest are ordered by descending score, keeping
    document order between equal scores.
    """
    tokens = tokenize(query)
    if not tokens:
        return []

    scored: List[ScoredChunk] = []
    for chunk in chunks:
        text = chunk.text.lower()
        score = sum(text.count(tok) for tok in tokens)
        if score > 0:
            scored.append(ScoredChunk(chunk=chunk, score=score))

    # sorted() is stable
    return sorted(scored, key=lambda s: -s.score)


def search_chunks(query: str, chunks: Sequence[Chunk], limit: int) -> List[Chunk]:
    if limit <= 0:
        return []
    return [s.chunk for s in score_chunks(query, chunks)[:limit]]
