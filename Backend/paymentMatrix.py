"""
Backend/paymentMatrix.py
────────────────────────
Debt-matrix netting.  matrix[i][j] is how much person i owes person j.

• subtract_redundancies – cancels back-and-forth debts between each pair.
• minimize_payments     – collapses A→B→C chains into A→C whenever A→C
                          already exists, repeated until none are left.
• minimize              – both passes on an exact Decimal copy.

Every step keeps each person's net balance (owed minus owed-to) and never
grows the grand total, so the loop always reaches a fixed point.
"""

from __future__ import annotations

from decimal import Decimal, getcontext
from typing import List, Tuple

getcontext().prec = 28
ZERO = Decimal("0")

Matrix = List[List[Decimal]]
Transfer = Tuple[int, int, Decimal]          # (debtor, creditor, amount)

# ───────────────────────── matrix helpers ───────────────────────────────── #

def to_decimal(x) -> Decimal:
    if isinstance(x, Decimal):
        return x
    # str() first so 0.1 stays 0.1 instead of its binary expansion
    return Decimal(str(x))


def empty_matrix(n: int) -> Matrix:
    return [[ZERO] * n for _ in range(n)]


def copy_matrix(matrix) -> Matrix:
    return [[to_decimal(x) for x in row] for row in matrix]


def grand_total(matrix) -> Decimal:
    return sum((to_decimal(x) for row in matrix for x in row), ZERO)


def net_balance(matrix, p: int) -> Decimal:
    """Total owed by *p* minus total owed to *p*."""
    owes = sum((to_decimal(x) for x in matrix[p]), ZERO)
    owed = sum((to_decimal(row[p]) for row in matrix), ZERO)
    return owes - owed


def net_balances(matrix) -> List[Decimal]:
    return [net_balance(matrix, p) for p in range(len(matrix))]


def transfers(matrix) -> List[Transfer]:
    """Every positive entry as (debtor, creditor, amount), row-major."""
    return [(i, j, to_decimal(amt))
            for i, row in enumerate(matrix)
            for j, amt in enumerate(row)
            if i != j and amt > 0]

# ───────────────────────── redundancy pass ──────────────────────────────── #

def subtract_redundancies(matrix):
    """
    Net out mutual debts.  If 0 owes 1 $5 and 1 owes 0 $2, afterwards
    0 owes 1 $3 and 1 owes 0 nothing.  Mutates and returns *matrix*.
    """
    n = len(matrix)
    for i in range(n):
        for j in range(i + 1, n):
            if matrix[i][j] == matrix[j][i]:
                matrix[i][j] = ZERO
                matrix[j][i] = ZERO
            elif matrix[i][j] > matrix[j][i]:
                matrix[i][j] -= matrix[j][i]
                matrix[j][i] = ZERO
            else:
                matrix[j][i] -= matrix[i][j]
                matrix[i][j] = ZERO
    return matrix

# ───────────────────────── transitive pass ──────────────────────────────── #

def _is_triangle(matrix, i: int, j: int, k: int) -> bool:
    return (i != j and j != k and i != k
            and matrix[i][j] > 0 and matrix[j][k] > 0 and matrix[i][k] > 0)


def remaining_payments_to_minimize(matrix) -> bool:
    """True while some i→j, j→k, i→k are all positive."""
    n = len(matrix)
    for i in range(n):
        for j in range(n):
            for k in range(n):
                if _is_triangle(matrix, i, j, k):
                    return True
    return False


def collapse_triangle(matrix, i: int, j: int, k: int):
    """
    Route the i→j→k chain straight to k.  The smaller leg is zeroed, the
    larger one shrinks by the same amount and i→k grows by it.  j's net
    position does not move.  Returns the amount rerouted.
    """
    ij, jk = matrix[i][j], matrix[j][k]
    if ij == jk:
        matrix[i][k] += ij
        matrix[i][j] = ZERO
        matrix[j][k] = ZERO
        return ij
    if ij > jk:
        matrix[i][k] += jk
        matrix[i][j] -= jk
        matrix[j][k] = ZERO
        return jk
    matrix[i][k] += ij
    matrix[j][k] -= ij
    matrix[i][j] = ZERO
    return ij


def minimize_payments(matrix):
    """
    E.g. 0 owes 1 $7, 0 owes 2 $10 and 1 owes 2 $15 becomes
    0 owes 2 $17 and 1 owes 2 $8.  Collapses are applied as soon as they
    are found; a full rescan follows until no triangle is left.
    Mutates and returns *matrix*.
    """
    n = len(matrix)
    while remaining_payments_to_minimize(matrix):
        for i in range(n):
            for j in range(n):
                for k in range(n):
                    if _is_triangle(matrix, i, j, k):
                        collapse_triangle(matrix, i, j, k)
    return matrix

# ─────────────────────────────── entry ──────────────────────────────────── #

def minimize(matrix) -> Matrix:
    """Eliminate then minimize an exact copy of *matrix*; input is untouched."""
    return minimize_payments(subtract_redundancies(copy_matrix(matrix)))
