from services.retrieval.context import Citation, dedupe_citations


def _c(pid, page):
    return Citation(party=pid.upper(), party_id=pid, page=page)


def test_dedupe_keeps_first_occurrence_order():
    cites = [_c("p1", 5), _c("p1", 5), _c("p2", 5), _c("p1", 5)]
    assert dedupe_citations(cites) == [_c("p1", 5), _c("p2", 5)]


def test_dedupe_caps_at_eight():
    cites = [_c("p1", page) for page in range(1, 20)] * 2
    out = dedupe_citations(cites)
    assert len(out) == 8
    assert [c.page for c in out] == list(range(1, 9))


def test_citation_serialization():
    assert _c("p1", 3).to_dict() == {"party": "P1", "partyId": "p1", "page": 3}
