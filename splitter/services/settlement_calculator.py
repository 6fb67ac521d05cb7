"""Net balances and the greedy transfer plan that settles them."""
import math

from splitter.schemas import Bill, Person, Settlement

EPSILON = 0.01


def compute_balances(people: list[Person], bills: list[Bill]) -> dict[int, float]:
    """
    person_id -> net balance (positive = is owed money, negative = owes money).

    Bills without participants are skipped entirely, payer credit included.
    Ids that match no person still accumulate a balance.
    """
    balances: dict[int, float] = {p.id: 0.0 for p in people}
    for bill in bills:
        if not bill.participants:
            continue
        amount = bill.amount_base or bill.amount
        share = amount / len(bill.participants)
        balances[bill.paid_by] = balances.get(bill.paid_by, 0.0) + amount
        for pid in bill.participants:
            balances[pid] = balances.get(pid, 0.0) - share
    return balances


def compute_settlements(people: list[Person], bills: list[Bill]) -> list[Settlement]:
    """
    Returns the transfers that settle everyone up.

    Creditors and debtors are matched greedily in person-id order, so the
    output is deterministic and has at most creditors + debtors - 1 entries.
    """
    names = {p.id: p.name for p in people}
    balances = compute_balances(people, bills)

    debtors = []  # (person_id, amount_owed)
    creditors = []
    for pid, bal in balances.items():
        if bal > EPSILON:
            creditors.append((pid, bal))
        elif bal < -EPSILON:
            debtors.append((pid, -bal))
    creditors.sort(key=lambda x: x[0])
    debtors.sort(key=lambda x: x[0])

    out: list[Settlement] = []
    i, j = 0, 0
    while i < len(creditors) and j < len(debtors):
        cid, c_amount = creditors[i]
        did, d_amount = debtors[j]
        transfer = min(c_amount, d_amount)
        if not math.isfinite(transfer):
            break
        out.append(Settlement(from_=names.get(did, ""), to=names.get(cid, ""), amount=transfer))
        creditors[i] = (cid, c_amount - transfer)
        debtors[j] = (did, d_amount - transfer)
        if creditors[i][1] < EPSILON:
            i += 1
        if debtors[j][1] < EPSILON:
            j += 1
    return out
