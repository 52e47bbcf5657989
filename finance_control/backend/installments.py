"""
Installment projection and card aggregation.

A purchase is anchored on the month it was registered together with the
installment number it was at in that month, so the index for any other
month is plain month arithmetic. Nothing is cached: every total is
recomputed from the full purchase list.
"""

from .months import months_between, add_months, trailing_months, month_label


def installment_index(purchase, month_key) -> int:
    """1-based installment active in month_key (may fall outside [1, total])"""
    return purchase.current_installment_at_start + months_between(purchase.start_month_key, month_key)


def is_active(purchase, month_key) -> bool:
    index = installment_index(purchase, month_key)
    return 1 <= index <= purchase.total_installments


def active_purchases(purchases, month_key):
    return [p for p in purchases if is_active(p, month_key)]


def remaining_installments(purchase, month_key) -> int:
    return max(0, purchase.total_installments - installment_index(purchase, month_key))


def total_value(purchase) -> float:
    return purchase.installment_amount * purchase.total_installments


def last_month_key(purchase) -> str:
    """Month of the final installment"""
    return add_months(purchase.start_month_key, purchase.total_installments - purchase.current_installment_at_start)


def totals_by_card(purchases, month_key):
    totals = {}
    for p in active_purchases(purchases, month_key):
        totals[p.card_id] = totals.get(p.card_id, 0.0) + p.installment_amount
    return totals


def total_all(purchases, month_key) -> float:
    return sum(totals_by_card(purchases, month_key).values())


def monthly_rows(cards, purchases, month_key):
    cards_by_id = {c.id: c for c in cards}
    rows = []
    for p in active_purchases(purchases, month_key):
        rows.append({
            'purchase': p,
            'card': cards_by_id.get(p.card_id),
            'index': installment_index(p, month_key),
            'remaining': remaining_installments(p, month_key),
            'total_value': total_value(p),
        })
    return rows


def trend_series(cards, purchases, month_key, months=6):
    """Per-card installment totals for the trailing `months` months, oldest first"""
    keys = trailing_months(month_key, months)
    series = []
    for card in cards:
        card_purchases = [p for p in purchases if p.card_id == card.id]
        series.append({
            'cardId': card.id,
            'label': card.name,
            'color': card.color,
            'data': [sum(p.installment_amount for p in active_purchases(card_purchases, k)) for k in keys],
        })
    return {
        'months': keys,
        'labels': [month_label(k) for k in keys],
        'series': series,
    }
