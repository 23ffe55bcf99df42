import argparse
import os
import sys
from pathlib import Path

from services.corpus.provider import CorpusLoadError, CorpusProvider
from services.retrieval.context import assemble_context, dedupe_citations, policy_for
from services.retrieval.search import score_chunks, tokenize

CORPUS_PATH = os.getenv("CORPUS_PATH")


def _provider(args: argparse.Namespace) -> CorpusProvider:
    path = args.corpus or CORPUS_PATH
    return CorpusProvider(Path(path) if path else None)


def _select(corpus, party_id):
    if not party_id:
        return list(corpus.parties)
    return [p for p in corpus.parties if p.id == party_id]


# ---------- CLI ----------
def cmd_parties(args: argparse.Namespace) -> int:
    corpus = _provider(args).get()
    for p in corpus.parties:
        print(f"- {p.id:20s} {p.name} ({p.candidate}) chunks={len(p.chunks)}")
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    corpus = _provider(args).get()
    tokens = tokenize(args.query)
    print(f"→ Query: {args.query}")
    print(f"   tokens: {tokens or '(none)'}")
    if not tokens:
        return 0

    limit = args.limit or policy_for(args.party).per_party_limit
    for party in _select(corpus, args.party):
        ranked = score_chunks(args.query, party.chunks)[:limit]
        if not ranked:
            continue
        print(f"\n{party.name} ({party.id})")
        for s in ranked:
            snippet = s.chunk.text.replace("\n", " ")
            print(f"- score={s.score:3d}  page={s.chunk.page}")
            print(f"  snippet: {snippet[:180]}{'...' if len(snippet)>180 else ''}")
    return 0


def cmd_context(args: argparse.Namespace) -> int:
    corpus = _provider(args).get()
    parties = _select(corpus, args.party)
    ctx = assemble_context(parties, args.query, policy_for(args.party))
    print(ctx.text)
    print("\n→ Citations:")
    for c in dedupe_citations(ctx.citations):
        print(f"- {c.party} ({c.party_id}) p.{c.page}")
    return 0


def main():
    p = argparse.ArgumentParser(description="VotoInformado - Retrieval inspector")
    p.add_argument("--corpus", help="Path to parties.json (defaults to CORPUS_PATH / data/parties.json)")
    sub = p.add_subparsers(dest="cmd")

    pp = sub.add_parser("parties", help="List parties in the corpus")
    pp.set_defaults(func=cmd_parties)

    ss = sub.add_parser("search", help="Show scored chunks for a query")
    ss.add_argument("query")
    ss.add_argument("--party", help="Restrict to one party id")
    ss.add_argument("--limit", type=int, help="Chunks per party (default: 12 with --party, else 3)")
    ss.set_defaults(func=cmd_search)

    cc = sub.add_parser("context", help="Print the assembled prompt context")
    cc.add_argument("query")
    cc.add_argument("--party", help="Restrict to one party id")
    cc.set_defaults(func=cmd_context)

    ns = p.parse_args()
    if not getattr(ns, "func", None):
        p.print_help()
        sys.exit(1)
    try:
        sys.exit(ns.func(ns))
    except CorpusLoadError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
