def split_by_type(transactions):
    incomes = [t for t in transactions if t.type == 'income']
    expenses = [t for t in transactions if t.type == 'expense']
    return incomes, expenses


def summarize(transactions):
    """Monthly totals; the balance only counts expenses already paid"""
    incomes, expenses = split_by_type(transactions)
    income = sum(t.amount for t in incomes)
    expense = sum(t.amount for t in expenses)
    expense_paid = sum(t.amount for t in expenses if t.paid)
    return {
        'income': income,
        'expense': expense,
        'expense_paid': expense_paid,
        'balance': income - expense_paid,
        'projected_balance': income - expense,
    }


def format_brl(amount: float) -> str:
    """Format number as BRL currency, e.g. R$ 1.234,56"""
    sign = '-' if amount < 0 else ''
    text = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {text}"
