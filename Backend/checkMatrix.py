#!/usr/bin/env python3
"""
checkMatrix.py   –   Stand-alone validator

• Load a ledger CSV that already has an aggregated grid under it (the file
  aggregatePayments.py writes).
• Rebuild the raw debt matrix from the ledger rows.
• Load the grid as a transfer graph.
• Make sure every person nets to the same balance, no pair pays both
  ways, and no A→B→C chain survives next to an A→C transfer.

Run:

    python -m Backend.checkMatrix --csv "Ledger Data/trip.csv"
"""

from __future__ import annotations

import argparse
import sys
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import networkx as nx

from Backend.ledgerMatrix import (
    LedgerError,
    grid_size,
    ledger_matrix,
    money_str,
    parse_money,
    read_ledger,
    read_sheet,
    split_blocks,
)
from Backend.paymentMatrix import (
    Matrix,
    copy_matrix,
    grand_total,
    net_balances,
    subtract_redundancies,
    to_decimal,
)


def transfer_graph(matrix) -> nx.DiGraph:
    """Node per person, weighted edge per positive debt."""
    G = nx.DiGraph()
    G.add_nodes_from(range(len(matrix)))
    for i, row in enumerate(matrix):
        for j, amt in enumerate(row):
            if i != j and amt > 0:
                G.add_edge(i, j, weight=to_decimal(amt))
    return G


def graph_net_balances(G: nx.DiGraph) -> Dict[int, Decimal]:
    """Out-weight minus in-weight per node."""
    net = {n: Decimal("0") for n in G.nodes}
    for u, v, amt in G.edges(data="weight"):
        net[u] += amt
        net[v] -= amt
    return net


def find_triangle(G: nx.DiGraph) -> Optional[Tuple[int, int, int]]:
    for i, j in G.edges:
        for k in G.successors(j):
            if k != i and G.has_edge(i, k):
                return i, j, k
    return None


def read_grid(path: Path) -> Matrix:
    """The labeled grid written below the ledger's first blank row."""
    _, rest = split_blocks(read_sheet(path))
    if rest.empty:
        raise LedgerError("no aggregated grid found below the ledger")
    n = grid_size(rest)
    if n < 0:
        raise LedgerError("rows below the ledger are not an aggregated grid")
    body = rest.iloc[1:]
    return [[parse_money(body.iat[i, j + 1]) for j in range(n)] for i in range(n)]


def check(raw, minimized) -> List[str]:
    """Human-readable problems; empty when *minimized* settles *raw*."""
    if len(raw) != len(minimized):
        return [f"grid is {len(minimized)}x{len(minimized)} but ledger has {len(raw)} people"]

    bad: List[str] = []
    for i, row in enumerate(minimized):
        for j, amt in enumerate(row):
            if amt < 0:
                bad.append(f"{i} → {j} is negative ({money_str(amt)})")

    G = transfer_graph(minimized)
    got = graph_net_balances(G)
    for p, exp in enumerate(net_balances(raw)):
        if got[p] != exp:
            bad.append(f"person {p}: expected net {exp:+}   grid net {got[p]:+}"
                       f"   → diff {got[p] - exp:+}")

    for u, v in G.edges:
        if u < v and G.has_edge(v, u):
            bad.append(f"{u} and {v} still owe each other")

    tri = find_triangle(G)
    if tri is not None:
        i, j, k = tri
        bad.append(f"{i} → {j} → {k} can still be collapsed into {i} → {k}")

    # compare against the netted ledger; refunds can make raw entries negative
    netted = grand_total(subtract_redundancies(copy_matrix(raw)))
    if grand_total(minimized) > netted:
        bad.append(f"grid total ${money_str(grand_total(minimized))} exceeds "
                   f"netted ledger total ${money_str(netted)}")
    return bad


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--csv", required=True, help="Ledger CSV with the aggregated grid below it")
    args = ap.parse_args(argv)

    path = Path(args.csv).expanduser()
    if not path.exists():
        sys.exit(f"ledger not found: {path}")

    try:
        raw = ledger_matrix(read_ledger(path))
        minimized = read_grid(path)
    except LedgerError as e:
        sys.exit(f"ERROR: {e}")

    bad = check(raw, minimized)
    if bad:
        print("⚠️  mismatches:\n")
        for line in bad:
            print(line)
        sys.exit(1)
    print(f"✅  all {len(raw)} people settle to their ledger balance.")


if __name__ == "__main__":
    main()
