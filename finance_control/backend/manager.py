import re
import math
import logging
from .storage import create_storage
from .models import Transaction, Card, Purchase
from .errors import ValidationError, NotFoundError
from .banks import bank_color_for, bank_logo_for, DEFAULT_CARD_COLOR
from .months import is_month_key, add_months, current_month_key
from . import installments
from . import ledger

logger = logging.getLogger(__name__)

TRANSACTION_TYPES = ('income', 'expense')

# "1.500" / "12.345.678": dots used as thousands separators
THOUSANDS_RE = re.compile(r'^\d{1,3}(\.\d{3})+$')

HEX_COLOR_RE = re.compile(r'^#[0-9A-Fa-f]{6}$')


def parse_amount(raw) -> float:
    """
    Parse a positive amount typed by the user.
    Accepts numbers and pt-BR strings ("1.234,56", "1.500"), falling back
    to plain float parsing ("12.5").
    """
    if isinstance(raw, bool):
        raise ValidationError("Amount must be a number")
    if isinstance(raw, (int, float)):
        amount = float(raw)
    else:
        text = str(raw or '').replace('R$', '').strip()
        if ',' in text or THOUSANDS_RE.match(text):
            text = text.replace('.', '').replace(',', '.')
        try:
            amount = float(text)
        except ValueError:
            raise ValidationError(f"Invalid amount: {raw!r}")
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    return amount


def parse_count(raw, field) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer")


def require_text(value, field) -> str:
    text = (value or '').strip() if isinstance(value, str) else ''
    if not text:
        raise ValidationError(f"{field} is required")
    return text


def require_month(month_key) -> str:
    if not is_month_key(month_key):
        raise ValidationError(f"Invalid month: {month_key!r} (expected YYYY-MM)")
    return month_key


class FinanceManager:
    def __init__(self, storage=None, backend='json', file_path=None):
        self.storage = storage or create_storage(backend, file_path)

    # Monthly ledger
    def get_monthly(self, month_key):
        return self.storage.get_monthly(require_month(month_key))

    def get_monthly_summary(self, month_key):
        return ledger.summarize(self.get_monthly(month_key))

    def get_available_months(self):
        return self.storage.get_available_months()

    def add_transaction(self, month_key, type, title, amount):
        require_month(month_key)
        if type not in TRANSACTION_TYPES:
            raise ValidationError('Type must be "income" or "expense"')
        transaction = Transaction(
            type=type,
            title=require_text(title, 'Title'),
            amount=parse_amount(amount)
        )
        self.storage.upsert_transaction(month_key, transaction)
        return transaction

    def update_transaction(self, month_key, transaction_id, title, amount):
        """Edit title/amount; type and paid state are kept"""
        existing = self._find_transaction(month_key, transaction_id)
        existing.title = require_text(title, 'Title')
        existing.amount = parse_amount(amount)
        self.storage.upsert_transaction(month_key, existing)
        return existing

    def remove_transaction(self, month_key, transaction_id):
        return self.storage.remove_transaction(require_month(month_key), transaction_id)

    def toggle_paid(self, month_key, transaction_id):
        self._find_transaction(month_key, transaction_id)
        return self.storage.toggle_paid(month_key, transaction_id)

    def replicate_month(self, src_key, dst_key):
        require_month(src_key)
        require_month(dst_key)
        result = self.storage.replicate_month(src_key, dst_key)
        logger.info(f"Replicated {src_key} into {dst_key} ({len(result)} transactions now)")
        return result

    def replicate_to_next_month(self, month_key):
        return self.replicate_month(month_key, add_months(require_month(month_key), 1))

    def clear_month(self, month_key):
        logger.info(f"Clearing month {month_key}")
        return self.storage.clear_month(require_month(month_key))

    def _find_transaction(self, month_key, transaction_id):
        transaction = next((t for t in self.get_monthly(month_key) if t.id == transaction_id), None)
        if not transaction:
            raise NotFoundError(f"Transaction {transaction_id} not found in {month_key}")
        return transaction

    # Cards
    def get_cards(self):
        return self.storage.get_cards()

    def get_card(self, card_id):
        card = next((c for c in self.storage.get_cards() if c.id == card_id), None)
        if not card:
            raise NotFoundError(f"Card {card_id} not found")
        return card

    def save_card(self, name, bank, color=None, card_id=None):
        """Create or update a card; without an explicit color the bank's color is used"""
        name = require_text(name, 'Name')
        bank = require_text(bank, 'Bank')
        if not color:
            color = bank_color_for(bank, DEFAULT_CARD_COLOR)
        elif not isinstance(color, str) or not HEX_COLOR_RE.match(color):
            raise ValidationError(f"Invalid color: {color!r} (expected #RRGGBB)")
        if card_id:
            card = self.get_card(card_id)
            card.name, card.bank, card.color = name, bank, color
        else:
            card = Card(name=name, bank=bank, color=color)
        self.storage.upsert_card(card)
        return card

    def remove_card(self, card_id):
        result = self.storage.remove_card(card_id)
        logger.info(f"Removed card {card_id}, {len(result['purchases'])} purchases remain")
        return result

    @staticmethod
    def card_logo(card):
        return bank_logo_for(card.bank)

    # Purchases
    def get_purchases(self):
        return self.storage.get_purchases()

    def get_purchase(self, purchase_id):
        purchase = next((p for p in self.storage.get_purchases() if p.id == purchase_id), None)
        if not purchase:
            raise NotFoundError(f"Purchase {purchase_id} not found")
        return purchase

    def save_purchase(self, card_id, title, total_installments, current_installment, installment_amount,
                      month_key=None, purchase_id=None):
        """
        Create or update an installment purchase.
        New purchases are anchored on month_key (defaults to the current
        month); edits keep their original anchor.
        """
        if not card_id:
            raise ValidationError("Card is required")
        self.get_card(card_id)
        title = require_text(title, 'Title')
        total = max(1, parse_count(total_installments, 'Total installments'))
        current = max(1, min(parse_count(current_installment, 'Current installment'), total))
        amount = parse_amount(installment_amount)

        if purchase_id:
            purchase = self.get_purchase(purchase_id)
            purchase.card_id = card_id
            purchase.title = title
            purchase.total_installments = total
            purchase.current_installment_at_start = current
            purchase.installment_amount = amount
        else:
            purchase = Purchase(
                card_id=card_id,
                title=title,
                start_month_key=require_month(month_key or current_month_key()),
                total_installments=total,
                current_installment_at_start=current,
                installment_amount=amount
            )
        self.storage.upsert_purchase(purchase)
        return purchase

    def remove_purchase(self, purchase_id):
        return self.storage.remove_purchase(purchase_id)

    # Reporting
    def get_card_report(self, month_key=None):
        """Everything the cards page shows for one month"""
        month_key = require_month(month_key or current_month_key())
        cards = self.storage.get_cards()
        purchases = self.storage.get_purchases()
        return {
            'month': month_key,
            'cards': cards,
            'totals_by_card': installments.totals_by_card(purchases, month_key),
            'total': installments.total_all(purchases, month_key),
            'rows': installments.monthly_rows(cards, purchases, month_key),
            'trend': installments.trend_series(cards, purchases, month_key),
        }
