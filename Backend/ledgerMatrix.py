"""
Backend/ledgerMatrix.py
───────────────────────
Ledger CSV  ⇄  debt matrix.

Ledger layout (one header row, one row per payment):

    Item , Alice owes , Bob owes , Cara owes , Who paid
    Pizza,      10    ,    10    ,    10     ,    2

• Every header containing "owes" is a person; their left-to-right order
  gives the person's index 0..N-1.
• "Who paid" holds the index of the person who paid for that row.
• Each row adds the owes-amounts into matrix[debtor][payer].
• The ledger ends at the first blank row; only a grid written by an
  earlier run may follow it.

Writing appends a labeled grid two rows below the ledger.
"""

from __future__ import annotations

import csv
from decimal import Decimal, InvalidOperation, getcontext
from pathlib import Path
from typing import List, Tuple

import pandas as pd

from Backend.paymentMatrix import Matrix, empty_matrix, to_decimal, transfers

getcontext().prec = 28
CENT = Decimal("0.01")

OWES_TAG = "owes"
PAYER_TAG = "who paid"


class LedgerError(ValueError):
    """The ledger can't be turned into a payment matrix."""

# ───────────────────────── money helpers ────────────────────────────────── #

def parse_money(x) -> Decimal:
    if pd.isna(x):
        return Decimal("0")
    s = str(x).replace("$", "").replace(",", "").strip()
    if not s:
        return Decimal("0")
    try:
        amt = Decimal(s)
    except InvalidOperation:
        raise LedgerError(f"not an amount: {x!r}") from None
    if not amt.is_finite():
        raise LedgerError(f"not an amount: {x!r}")
    return amt


def money_str(x) -> str:
    """Cents when that is exact, otherwise the full value."""
    x = to_decimal(x)
    try:
        q = x.quantize(CENT)
    except InvalidOperation:                  # too many digits for prec
        return str(x)
    return f"{q if q == x else x}"

# ───────────────────────── sheet reading ────────────────────────────────── #

def is_blank(x) -> bool:
    return pd.isna(x) or not str(x).strip()


def _cells(block: pd.DataFrame) -> List[List[str]]:
    return [["" if is_blank(x) else str(x).strip() for x in r]
            for r in block.itertuples(index=False, name=None)]


def read_sheet(path: Path) -> pd.DataFrame:
    """Raw cells of the whole file as text, no header, blank lines kept."""
    try:
        return pd.read_csv(path, header=None, dtype=str, skip_blank_lines=False,
                           keep_default_na=False, encoding="utf-8")
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except pd.errors.ParserError as e:
        raise LedgerError(f"could not parse {path}: {e}") from None


def split_blocks(raw: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """(ledger block, what follows the first blank row minus outer blank rows)."""
    blank = [not any(r) for r in _cells(raw)]
    if True not in blank:
        return raw, raw.iloc[0:0]
    cut = blank.index(True)
    rest = [k for k in range(cut + 1, len(blank)) if not blank[k]]
    if not rest:
        return raw.iloc[:cut], raw.iloc[0:0]
    return raw.iloc[:cut], raw.iloc[rest[0]:rest[-1] + 1]


def grid_size(block: pd.DataFrame) -> int:
    """N when *block* is exactly a grid matrix_grid wrote, otherwise -1."""
    rows = _cells(block)
    if not rows or rows[0][0]:
        return -1
    labels = rows[0][1:]
    n = len([c for c in labels if c])
    if labels[:n] != [str(j) for j in range(n)] or any(labels[n:]):
        return -1
    if len(rows) != n + 1:
        return -1
    for i, r in enumerate(rows[1:]):
        if r[0] != str(i) or any(r[n + 1:]):
            return -1
        try:
            for c in r[1:n + 1]:
                parse_money(c)
        except LedgerError:
            return -1
    return n


def read_ledger(path: Path) -> pd.DataFrame:
    """
    The ledger block with its header row as column names.  Only a grid
    from an earlier run may follow the first blank row; any other rows
    there raise LedgerError so they are neither dropped nor overwritten.
    """
    ledger, rest = split_blocks(read_sheet(path))
    if not rest.empty and grid_size(rest) < 0:
        raise LedgerError("rows after a blank line are not an aggregated grid; "
                          "remove the blank line or move those rows")
    if ledger.empty:
        return pd.DataFrame()
    header = ["" if is_blank(h) else str(h).strip() for h in ledger.iloc[0]]
    rows = ledger.iloc[1:].reset_index(drop=True)
    rows.columns = header
    return rows


def find_columns(header) -> Tuple[List[int], int]:
    """(positions of the "owes" columns, position of "who paid" or -1)."""
    owes_cols, payer_col = [], -1
    for j, name in enumerate(header):
        name = str(name).lower()
        if OWES_TAG in name:
            owes_cols.append(j)
        if PAYER_TAG in name:
            payer_col = j
    return owes_cols, payer_col


def parse_payer(x, n: int, line: int) -> int:
    try:
        amt = parse_money(x)
    except LedgerError:
        amt = None
    if is_blank(x) or amt is None or amt != amt.to_integral_value():
        raise LedgerError(f"row {line}: WHO PAID must be a person index, got {x!r}")
    payer = int(amt)
    if not 0 <= payer < n:
        raise LedgerError(f"row {line}: WHO PAID {payer} is not one of 0..{n - 1}")
    return payer


def ledger_matrix(df: pd.DataFrame) -> Matrix:
    """
    Accumulate the ledger rows into matrix[i][j] = amount i owes j.

    Raises LedgerError when there are no payment rows, no "who paid"
    column, a payer that isn't a person index, or an amount that isn't a
    finite number.
    """
    if df.empty:
        raise LedgerError("no payments found")

    owes_cols, payer_col = find_columns(df.columns)
    if payer_col == -1:
        raise LedgerError("could not find WHO PAID column")

    n = len(owes_cols)
    matrix = empty_matrix(n)
    for r, row in enumerate(df.itertuples(index=False, name=None)):
        line = r + 2                          # 1-based, after the header
        payer = parse_payer(row[payer_col], n, line)
        for debtor, col in enumerate(owes_cols):
            try:
                amt = parse_money(row[col])
            except LedgerError as e:
                raise LedgerError(f"row {line}: {e}") from None
            if debtor != payer:               # the payer's own share is settled
                matrix[debtor][payer] += amt
    return matrix


def read_matrix(path: Path) -> Matrix:
    return ledger_matrix(read_ledger(path))

# ───────────────────────── writing ──────────────────────────────────────── #

def matrix_grid(matrix) -> List[List[str]]:
    """Corner cell + column labels, then one labeled row per person."""
    n = len(matrix)
    grid = [[""] + [str(j) for j in range(n)]]
    for i, row in enumerate(matrix):
        grid.append([str(i)] + [money_str(x) for x in row])
    return grid


def write_matrix(df: pd.DataFrame, matrix, out_path: Path) -> Path:
    """
    Write the ledger block, one blank row, then the grid.  Pointing
    *out_path* at the ledger itself replaces any grid from an earlier run.
    """
    header = [str(c) for c in df.columns]
    rows = [["" if pd.isna(v) else str(v) for v in r]
            for r in df.itertuples(index=False, name=None)]
    grid = matrix_grid(matrix)
    width = max([len(header)] + [len(g) for g in grid])

    def pad(cells):
        return list(cells) + [""] * (width - len(cells))

    out_path = Path(out_path)
    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(pad(header))
        for r in rows:
            w.writerow(pad(r))
        w.writerow(pad([]))
        for g in grid:
            w.writerow(pad(g))
    return out_path


def write_transactions(matrix, out_path: Path) -> Path:
    """From/To/Amount CSV of every transfer left in *matrix*."""
    rows = [{"From": fr, "To": to, "Amount": money_str(amt)}
            for fr, to, amt in transfers(matrix)]
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(rows, columns=["From", "To", "Amount"]).to_csv(out_path, index=False, encoding="utf-8")
    return out_path
