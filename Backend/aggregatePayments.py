#!/usr/bin/env python3
"""
Backend/aggregatePayments.py
────────────────────────────
"Generate aggregated payments" in one go:

    read ledger → cancel mutual debts → collapse chains → write grid

The minimized grid lands two rows under the ledger (in place by default,
or in --out).  --transactions also writes a From/To/Amount list.

Run:

    python -m Backend.aggregatePayments --csv "Ledger Data/trip.csv"
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from Backend.ledgerMatrix import (
    LedgerError,
    ledger_matrix,
    money_str,
    read_ledger,
    write_matrix,
    write_transactions,
)
from Backend.paymentMatrix import Matrix, grand_total, minimize, transfers


def aggregate(ledger_path: Path,
              out_path: Optional[Path] = None,
              transactions_path: Optional[Path] = None,
              verbose: bool = False) -> Matrix:
    """
    Read → eliminate → minimize → write.  Returns the minimized matrix.
    Raises LedgerError if the ledger can't be read into a matrix.
    """
    ledger_path = Path(ledger_path)
    df = read_ledger(ledger_path)
    raw = ledger_matrix(df)
    if verbose:
        print(f"People: {len(raw)}   raw total ${money_str(grand_total(raw))}", flush=True)

    matrix = minimize(raw)
    if verbose:
        print(f"Minimized total ${money_str(grand_total(matrix))}"
              f" in {len(transfers(matrix))} transfers", flush=True)

    write_matrix(df, matrix, out_path or ledger_path)
    if transactions_path is not None:
        write_transactions(matrix, transactions_path)
    return matrix


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(
        description="Payment Aggregation — settle a shared-expense ledger with fewer transfers"
    )
    ap.add_argument("--csv", required=True,
                    help="Ledger CSV (\"... owes\" columns plus a \"Who paid\" column)")
    ap.add_argument("--out",
                    help="Write ledger + grid here instead of back into --csv")
    ap.add_argument("--transactions",
                    help="Also write a From/To/Amount CSV of the final transfers")
    ap.add_argument("--quiet", action="store_true",
                    help="No progress prints")
    args = ap.parse_args(argv)

    ledger = Path(args.csv).expanduser()
    if not ledger.exists():
        sys.exit(f"ERROR: ledger not found: {ledger}")
    out = Path(args.out).expanduser() if args.out else ledger
    tx_path = Path(args.transactions).expanduser() if args.transactions else None

    if not args.quiet:
        print(f"Reading ledger: {ledger}", flush=True)
    try:
        matrix = aggregate(ledger, out, tx_path, verbose=not args.quiet)
    except LedgerError as e:
        sys.exit(f"ERROR: {e}")

    if not args.quiet:
        print(f"✅  Wrote {out} ({len(transfers(matrix))} transfers among {len(matrix)} people)")
        if tx_path is not None:
            print(f"✅  Wrote {tx_path}")


if __name__ == "__main__":
    main()
