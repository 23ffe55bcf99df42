import argparse
import csv
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import requests

from services.corpus.provider import CorpusProvider
from services.retrieval.context import assemble_context, dedupe_citations, policy_for


def load_golden_set(csv_path: str) -> List[Dict[str, Any]]:
    """Load the golden set CSV (question, party_id, expected_citations) into a list of dicts."""
    golden_set = []
    with open(csv_path, "r", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for row in reader:
            golden_set.append(row)
    return golden_set


def query_chat_api(
    api_url: str, question: str, party_id: Optional[str] = None
) -> Dict[str, Any]:
    """Query the running API and return the response body."""
    endpoint = f"{api_url}/api/chat"
    payload = {"question": question}
    if party_id:
        payload["partyId"] = party_id

    try:
        response = requests.post(endpoint, json=payload, timeout=60)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        print(f"Error querying API: {e}", file=sys.stderr)
        return {"response": "", "citations": []}


def retrieve_locally(
    provider: CorpusProvider, question: str, party_id: Optional[str] = None
) -> Dict[str, Any]:
    """Run only the retrieval side (no model call) and return an API-shaped body."""
    corpus = provider.get()
    if party_id:
        parties = [p for p in corpus.parties if p.id == party_id]
    else:
        parties = list(corpus.parties)
    ctx = assemble_context(parties, question, policy_for(party_id))
    return {
        "response": "",
        "citations": [c.to_dict() for c in dedupe_citations(ctx.citations)],
    }


def _parse_expected(raw: str) -> Set[str]:
    # format: "party-id:page,party-id:page"
    return set(c.strip() for c in raw.split(",") if c.strip())


def _returned_keys(response: Dict[str, Any]) -> Set[str]:
    out = set()
    for citation in response.get("citations", []):
        party_id = citation.get("partyId", "")
        page = citation.get("page", 0)
        if party_id and page:
            out.add(f"{party_id}:{page}")
    return out


def calculate_citation_metrics(
    golden_set: List[Dict], responses: List[Dict]
) -> Dict[str, float]:
    """
    Citation-based retrieval metrics:
    - Citation Precision: % of returned citations that are in expected_citations
    - Citation Recall: % of expected_citations that were returned
    - Citation F1: harmonic mean of the averaged precision and recall
    - Hit Rate: % of questions with at least one expected citation returned
    """
    total_precision = 0.0
    total_recall = 0.0
    hits = 0
    count = 0

    for golden, response in zip(golden_set, responses):
        expected = _parse_expected(golden.get("expected_citations", "") or "")
        if not expected:
            continue
        returned = _returned_keys(response)

        matched = len(expected & returned)
        total_precision += matched / len(returned) if returned else 0.0
        total_recall += matched / len(expected)
        if matched:
            hits += 1
        count += 1

    if count == 0:
        return {
            "citation_precision": 0.0,
            "citation_recall": 0.0,
            "citation_f1": 0.0,
            "hit_rate": 0.0,
        }

    avg_precision = total_precision / count
    avg_recall = total_recall / count
    f1 = (
        2 * (avg_precision * avg_recall) / (avg_precision + avg_recall)
        if (avg_precision + avg_recall) > 0
        else 0.0
    )

    return {
        "citation_precision": avg_precision,
        "citation_recall": avg_recall,
        "citation_f1": f1,
        "hit_rate": hits / count,
    }


def main():
    parser = argparse.ArgumentParser(description="Evaluate citation retrieval on a golden set")
    parser.add_argument(
        "--golden-set",
        type=str,
        default="evals/golden_set.csv",
        help="Path to golden set CSV file",
    )
    parser.add_argument(
        "--api-url",
        type=str,
        help="Base URL of a running API; when omitted, retrieval runs locally",
    )
    parser.add_argument("--corpus", type=str, help="Path to parties.json for local runs")
    parser.add_argument(
        "--output",
        type=str,
        default="evals/results.json",
        help="Path to save evaluation results JSON",
    )
    args = parser.parse_args()

    print(f"Loading golden set from {args.golden_set}...")
    golden_set = load_golden_set(args.golden_set)
    print(f"Loaded {len(golden_set)} evaluation examples")

    provider = CorpusProvider(Path(args.corpus) if args.corpus else None)
    target = args.api_url or "local retrieval"
    print(f"\nQuerying {target}...")
    responses = []
    for i, item in enumerate(golden_set, 1):
        print(f"  [{i}/{len(golden_set)}] {item['question'][:60]}...")
        party_id = item.get("party_id") or None
        if args.api_url:
            responses.append(query_chat_api(args.api_url, item["question"], party_id))
        else:
            responses.append(retrieve_locally(provider, item["question"], party_id))

    citation_metrics = calculate_citation_metrics(golden_set, responses)
    results = {
        "citation_metrics": citation_metrics,
        "num_examples": len(golden_set),
        "target": target,
    }

    print("\n" + "=" * 60)
    print("EVALUATION RESULTS")
    print("=" * 60)
    for metric, value in citation_metrics.items():
        print(f"  {metric:25s}: {value:.4f}")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(results, f, indent=2, default=str)

    print(f"\nResults saved to {args.output}")
    print("=" * 60)


if __name__ == "__main__":
    main()
