from services.corpus.models import Chunk, Party
from services.retrieval.context import (
    ALL_PARTIES_POLICY,
    COMPARISON_POLICY,
    NO_CONTEXT_SENTINEL,
    SINGLE_PARTY_POLICY,
    assemble_context,
    build_factibility_context,
    policy_for,
)


def _party(pid, summary="", chunks=()):
    return Party(
        id=pid,
        name=f"Partido {pid}",
        candidate=f"Candidato {pid}",
        ideology="Centro",
        summary=summary,
        chunks=tuple(chunks),
    )


def test_policy_for_party_filter():
    assert policy_for("p1") is SINGLE_PARTY_POLICY
    assert policy_for(None) is ALL_PARTIES_POLICY
    assert policy_for("") is ALL_PARTIES_POLICY


def test_security_question_cites_match_and_falls_back_to_summary():
    p1 = _party(
        "p1",
        summary="Resumen uno",
        chunks=[Chunk(page=12, text="Plan de seguridad ciudadana: aumentar patrullaje")],
    )
    p2 = _party("p2", summary="S" * 600, chunks=[Chunk(page=3, text="Reforma agraria")])

    ctx = assemble_context([p1, p2], "¿Qué propone sobre seguridad?", ALL_PARTIES_POLICY)

    assert [(c.party_id, c.page) for c in ctx.citations] == [("p1", 12)]
    assert ctx.citations[0].party == "Partido p1"
    assert "PLAN DE GOBIERNO: Partido p1" in ctx.text
    assert "[Página 12]\nPlan de seguridad ciudadana" in ctx.text
    assert "— Partido p2 (Candidato p2) —" in ctx.text
    assert "S" * 400 + "\n" in ctx.text
    assert "S" * 401 not in ctx.text


def test_no_summary_fallback_when_party_requested():
    p = _party("p1", summary="Resumen largo", chunks=[Chunk(page=1, text="agua potable")])
    ctx = assemble_context([p], "¿Qué propone sobre seguridad?", SINGLE_PARTY_POLICY)
    assert ctx.text == NO_CONTEXT_SENTINEL
    assert ctx.citations == []


def test_sentinel_when_nothing_matches():
    ctx = assemble_context([_party("p1"), _party("p2")], "seguridad", ALL_PARTIES_POLICY)
    assert ctx.text == NO_CONTEXT_SENTINEL

    ctx = assemble_context([], "seguridad", ALL_PARTIES_POLICY)
    assert ctx.text == NO_CONTEXT_SENTINEL


def test_per_party_limits():
    chunks = [Chunk(page=i, text=f"educación pública {i}") for i in range(1, 30)]
    parties = [_party("a", chunks=chunks), _party("b", chunks=chunks)]

    broad = assemble_context(parties, "educación", ALL_PARTIES_POLICY)
    assert sum(1 for c in broad.citations if c.party_id == "a") == 3
    assert sum(1 for c in broad.citations if c.party_id == "b") == 3

    single = assemble_context(parties[:1], "educación", SINGLE_PARTY_POLICY)
    assert len(single.citations) == 12


def test_comparison_truncates_summary_and_samples_later_chunks():
    chunks = [Chunk(page=i + 1, text=f"texto {i + 1} " + "x" * 500) for i in range(25)]
    a = _party("a", summary="A" * 2500, chunks=chunks)
    b = _party("b", summary="B" * 2000, chunks=chunks[:12])

    ctx = assemble_context([a, b], "", COMPARISON_POLICY)

    assert "A" * 2000 + "\n" in ctx.text
    assert "A" * 2001 not in ctx.text
    assert "B" * 2000 + "\n" in ctx.text
    assert "PARTIDO: Partido a" in ctx.text
    # chunks 11-20 only, by document order
    assert "[Pág. 10]" not in ctx.text
    assert "[Pág. 11] texto 11" in ctx.text
    assert "[Pág. 20] texto 20" in ctx.text
    assert "[Pág. 21]" not in ctx.text
    assert "x" * 401 not in ctx.text
    # context-only sample
    assert ctx.citations == []


def test_factibility_context():
    assert build_factibility_context(None) == ""
    text = build_factibility_context(_party("p1", summary="R" * 1500))
    assert "Partido p1 (Candidato p1)" in text
    assert "R" * 1000 + "\n" in text
    assert "R" * 1001 not in text
