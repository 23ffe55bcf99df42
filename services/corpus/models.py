from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Chunk:
    page: int
    text: str


@dataclass(frozen=True)
class Party:
    id: str
    name: str
    candidate: str
    ideology: str
    summary: str
    chunks: Tuple[Chunk, ...] = ()


@dataclass(frozen=True)
class Corpus:
    parties: Tuple[Party, ...]

    def find(self, party_id: str) -> Optional[Party]:
        for party in self.parties:
            if party.id == party_id:
                return party
        return None


def _chunk_from_dict(raw: Dict[str, Any]) -> Chunk:
    page = raw["page"]
    # bool is an int subclass; reject it explicitly
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise ValueError(f"Invalid chunk page: {page!r}")
    return Chunk(page=page, text=str(raw.get("text") or ""))


def party_from_dict(raw: Dict[str, Any]) -> Party:
    if not raw.get("id"):
        raise ValueError("Party without id")
    return Party(
        id=str(raw["id"]),
        name=str(raw.get("name") or raw["id"]),
        candidate=str(raw.get("candidate") or ""),
        ideology=str(raw.get("ideology") or ""),
        summary=str(raw.get("summary") or ""),
        chunks=tuple(_chunk_from_dict(c) for c in raw.get("chunks") or []),
    )


def corpus_from_dict(raw: Dict[str, Any]) -> Corpus:
    """Build an immutable Corpus from the parties.json payload."""
    if not isinstance(raw, dict) or not isinstance(raw.get("parties"), list):
        raise ValueError("Corpus JSON must be an object with a 'parties' list")
    parties = tuple(party_from_dict(p) for p in raw["parties"])
    seen = set()
    for p in parties:
        if p.id in seen:
            raise ValueError(f"Duplicate party id: {p.id}")
        seen.add(p.id)
    return Corpus(parties=parties)
