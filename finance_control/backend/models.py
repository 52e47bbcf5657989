import uuid
from dataclasses import dataclass


def new_id():
    return str(uuid.uuid4())


@dataclass
class Transaction:
    type: str  # 'income' or 'expense'
    title: str
    amount: float
    paid: bool = None  # only meaningful for expenses
    id: str = None

    def __post_init__(self):
        if not self.id:
            self.id = new_id()
        if self.paid is None and self.type == 'expense':
            self.paid = False

    def to_dict(self):
        data = {'id': self.id, 'type': self.type, 'title': self.title, 'amount': self.amount}
        if self.paid is not None:
            data['paid'] = self.paid
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id'),
            type=data['type'],
            title=data['title'],
            amount=float(data['amount']),
            paid=data.get('paid')
        )


@dataclass
class Card:
    name: str
    bank: str
    color: str  # hex, e.g. '#820AD1'
    id: str = None

    def __post_init__(self):
        if not self.id:
            self.id = new_id()

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'bank': self.bank, 'color': self.color}

    @classmethod
    def from_dict(cls, data):
        return cls(id=data.get('id'), name=data['name'], bank=data.get('bank', ''), color=data.get('color', ''))


@dataclass
class Purchase:
    card_id: str
    title: str
    start_month_key: str  # YYYY-MM the installment count is anchored on
    total_installments: int
    current_installment_at_start: int
    installment_amount: float
    id: str = None

    def __post_init__(self):
        if not self.id:
            self.id = new_id()

    def to_dict(self):
        # Stored with the camelCase keys of the JSON document
        return {
            'id': self.id,
            'cardId': self.card_id,
            'title': self.title,
            'startMonthKey': self.start_month_key,
            'totalInstallments': self.total_installments,
            'currentInstallmentAtStart': self.current_installment_at_start,
            'installmentAmount': self.installment_amount,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id'),
            card_id=data['cardId'],
            title=data['title'],
            start_month_key=data['startMonthKey'],
            total_installments=int(data['totalInstallments']),
            current_installment_at_start=int(data['currentInstallmentAtStart']),
            installment_amount=float(data['installmentAmount'])
        )
