from decimal import Decimal

import pytest

from Backend.aggregatePayments import aggregate
from Backend.checkMatrix import (
    check,
    find_triangle,
    graph_net_balances,
    main,
    read_grid,
    transfer_graph,
)
from Backend.ledgerMatrix import LedgerError
from Backend.paymentMatrix import minimize

LEDGER = (
    "Item,Alice owes,Bob owes,Cara owes,Who paid\n"
    "Tickets,7,0,0,1\n"
    "Dinner,10,15,0,2\n"
)


def test_transfer_graph_skips_zero_and_diagonal():
    G = transfer_graph([[5, 7, 0], [0, 0, 15], [0, 0, 0]])
    assert sorted(G.nodes) == [0, 1, 2]
    assert sorted(G.edges) == [(0, 1), (1, 2)]
    assert G[1][2]["weight"] == Decimal("15")


def test_graph_net_balances():
    G = transfer_graph([[0, 7, 10], [0, 0, 15], [0, 0, 0]])
    assert graph_net_balances(G) == {0: 17, 1: 8, 2: -25}


def test_find_triangle():
    assert find_triangle(transfer_graph([[0, 7, 10], [0, 0, 15], [0, 0, 0]])) == (0, 1, 2)
    assert find_triangle(transfer_graph([[0, 0, 17], [0, 0, 8], [0, 0, 0]])) is None


def test_check_accepts_minimized_matrix():
    raw = [[0, 7, 10], [3, 0, 15], [1, 0, 0]]
    assert check(raw, minimize(raw)) == []


def test_check_flags_every_problem():
    raw = [[0, 0], [0, 0]]
    bad = check(raw, [[0, 1], [1, 0]])
    assert "0 and 1 still owe each other" in bad
    assert any("exceeds netted ledger total" in b for b in bad)


def test_check_flags_balance_and_triangle():
    raw = [[0, 7, 10], [0, 0, 15], [0, 0, 0]]
    bad = check(raw, [[0, 7, 10], [0, 0, 16], [0, 0, 0]])
    assert any(b.startswith("person 1:") for b in bad)
    assert any(b.startswith("person 2:") for b in bad)
    assert "0 → 1 → 2 can still be collapsed into 0 → 2" in bad


def test_check_flags_negative_and_size():
    assert check([[0, 0], [0, 0]], [[0, -1], [0, 0]])[0] == "0 → 1 is negative (-1.00)"
    assert check([[0]], [[0, 0], [0, 0]]) == ["grid is 2x2 but ledger has 1 people"]


def test_read_grid_after_aggregate(write_ledger):
    path = write_ledger(LEDGER)
    aggregate(path)
    assert read_grid(path) == [[0, 0, 17], [0, 0, 8], [0, 0, 0]]


def test_read_grid_missing(write_ledger):
    with pytest.raises(LedgerError, match="no aggregated grid"):
        read_grid(write_ledger(LEDGER))


def test_main_passes_after_aggregate(write_ledger, capsys):
    path = write_ledger(LEDGER)
    aggregate(path)
    main(["--csv", str(path)])
    assert "✅  all 3 people settle" in capsys.readouterr().out


def test_main_fails_on_unminimized_grid(write_ledger, capsys):
    path = write_ledger(
        LEDGER
        + ",,,,\n"
        + ",0,1,2,\n"
        + "0,0,7,10,\n"
        + "1,0,0,15,\n"
        + "2,0,0,0,\n"
    )
    with pytest.raises(SystemExit) as exc:
        main(["--csv", str(path)])
    assert exc.value.code == 1
    assert "can still be collapsed" in capsys.readouterr().out


def test_main_without_grid(write_ledger):
    with pytest.raises(SystemExit) as exc:
        main(["--csv", str(write_ledger(LEDGER))])
    assert "no aggregated grid" in str(exc.value.code)
