import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from services.corpus.models import Party
from services.retrieval.search import search_chunks

logger = logging.getLogger(__name__)

NO_CONTEXT_SENTINEL = (
    "No se encontraron secciones específicas relacionadas con la consulta "
    "en los planes de gobierno disponibles."
)

SUMMARY_FALLBACK_CHARS = 400
COMPARISON_SUMMARY_CHARS = 2000
COMPARISON_CHUNK_CHARS = 400
COMPARISON_SAMPLE = slice(10, 20)  # chunks 11-20 in document order
FACTIBILITY_SUMMARY_CHARS = 1000
MAX_CITATIONS = 8

_RULE_WIDE = "═" * 42
_RULE_NARROW = "═" * 24


@dataclass(frozen=True)
class Citation:
    party: str
    party_id: str
    page: int

    def to_dict(self) -> Dict[str, object]:
        return {"party": self.party, "partyId": self.party_id, "page": self.page}


@dataclass(frozen=True)
class AssemblyPolicy:
    per_party_limit: int
    include_summary_fallback: bool
    sample_later_chunks: bool = False


@dataclass
class AssembledContext:
    text: str
    citations: List[Citation] = field(default_factory=list)


SINGLE_PARTY_POLICY = AssemblyPolicy(per_party_limit=12, include_summary_fallback=False)
ALL_PARTIES_POLICY = AssemblyPolicy(per_party_limit=3, include_summary_fallback=True)
COMPARISON_POLICY = AssemblyPolicy(
    per_party_limit=0, include_summary_fallback=False, sample_later_chunks=True
)


def policy_for(party_id: Optional[str]) -> AssemblyPolicy:
    return SINGLE_PARTY_POLICY if party_id else ALL_PARTIES_POLICY


def _search_block(party: Party, chunks) -> str:
    lines = [
        "",
        "",
        _RULE_WIDE,
        f"PLAN DE GOBIERNO: {party.name}",
        f"Candidato presidencial: {party.candidate}",
        f"Ideología: {party.ideology}",
        _RULE_WIDE,
    ]
    out = "\n".join(lines) + "\n"
    for chunk in chunks:
        out += f"[Página {chunk.page}]\n{chunk.text}\n\n"
    return out


def _summary_block(party: Party) -> str:
    return (
        f"\n\n— {party.name} ({party.candidate}) —\n"
        f"{party.summary[:SUMMARY_FALLBACK_CHARS]}\n"
    )


def _comparison_block(party: Party) -> str:
    lines = [
        "",
        "",
        _RULE_NARROW,
        f"PARTIDO: {party.name}",
        f"CANDIDATO: {party.candidate}",
        f"IDEOLOGÍA: {party.ideology}",
        _RULE_NARROW,
    ]
    out = "\n".join(lines) + "\n"
    out += party.summary[:COMPARISON_SUMMARY_CHARS] + "\n"
    for chunk in party.chunks[COMPARISON_SAMPLE]:
        out += f"[Pág. {chunk.page}] {chunk.text[:COMPARISON_CHUNK_CHARS]}\n\n"
    return out


def assemble_context(
    parties: Sequence[Party],
    question: str,
    policy: AssemblyPolicy,
) -> AssembledContext:
    """
    Build the prompt context for the given parties.

    With sample_later_chunks the question is ignored and every party gets a
    fixed structural sample (summary head plus chunks 11-20), none of which
    is cited. Otherwise each party contributes its top-ranked chunks, one
    Citation per chunk, or an uncited summary excerpt when nothing matched
    and the policy allows it.
    """
    text = ""
    citations: List[Citation] = []

    for party in parties:
        if policy.sample_later_chunks:
            text += _comparison_block(party)
            continue

        chunks = search_chunks(question, party.chunks, policy.per_party_limit)
        if chunks:
            text += _search_block(party, chunks)
            citations.extend(
                Citation(party=party.name, party_id=party.id, page=c.page) for c in chunks
            )
        elif policy.include_summary_fallback and party.summary:
            text += _summary_block(party)

    if not text.strip():
        text = NO_CONTEXT_SENTINEL

    logger.info(
        "Context assembled",
        extra={
            "party_count": len(parties),
            "citation_count": len(citations),
            "context_length": len(text),
            "per_party_limit": policy.per_party_limit,
        },
    )
    return AssembledContext(text=text, citations=citations)


def build_factibility_context(party: Optional[Party]) -> str:
    if party is None:
        return ""
    return (
        f"\nEsta propuesta pertenece al plan de gobierno de {party.name} "
        f"({party.candidate}).\nResumen del partido:\n"
        f"{party.summary[:FACTIBILITY_SUMMARY_CHARS]}\n"
    )


def dedupe_citations(
    citations: Sequence[Citation], limit: int = MAX_CITATIONS
) -> List[Citation]:
    seen = set()
    out: List[Citation] = []
    for c in citations:
        key = (c.party_id, c.page)
        if key in seen:
            continue
        seen.add(key)
        out.append(c)
        if len(out) >= limit:
            break
    return out
