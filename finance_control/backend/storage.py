import os
import copy
import json
import logging
from .models import Transaction, Card, Purchase, new_id

logger = logging.getLogger(__name__)


def empty_document():
    return {'monthly': {}, 'cards': [], 'purchases': []}


def clamp_purchase(purchase: Purchase) -> Purchase:
    """Keep total >= 1 and the starting installment inside [1, total]"""
    purchase.total_installments = max(1, int(purchase.total_installments))
    purchase.current_installment_at_start = max(1, min(int(purchase.current_installment_at_start), purchase.total_installments))
    return purchase


class BaseStorage:
    """
    Whole-document store: every call reads the full snapshot, mutates it
    and writes it back. There is a single writer (the local user), so no
    locking is done.
    """

    def _read_all(self):
        raise NotImplementedError

    def _write_all(self, data):
        raise NotImplementedError

    def _load(self):
        data = self._read_all()
        if not isinstance(data, dict):
            logger.warning("Stored data is not a JSON object, using empty data")
            return empty_document()
        for section, default in empty_document().items():
            if not isinstance(data.get(section), type(default)):
                if section in data:
                    logger.warning(f"Stored '{section}' has the wrong shape, resetting it")
                data[section] = default
        # Month buckets must be lists too
        for key, items in list(data['monthly'].items()):
            if not isinstance(items, list):
                logger.warning(f"Stored month {key} has the wrong shape, resetting it")
                data['monthly'][key] = []
        return data

    # Monthly ledger
    def get_monthly(self, month_key):
        db = self._load()
        return [Transaction.from_dict(t) for t in db['monthly'].get(month_key, [])]

    def upsert_transaction(self, month_key, transaction: Transaction):
        db = self._load()
        items = list(db['monthly'].get(month_key, []))
        idx = next((i for i, t in enumerate(items) if t.get('id') == transaction.id), None)
        if idx is not None:
            items[idx] = transaction.to_dict()
        else:
            items.append(transaction.to_dict())
        db['monthly'][month_key] = items
        self._write_all(db)
        return [Transaction.from_dict(t) for t in items]

    def remove_transaction(self, month_key, transaction_id):
        db = self._load()
        items = [t for t in db['monthly'].get(month_key, []) if t.get('id') != transaction_id]
        db['monthly'][month_key] = items
        self._write_all(db)
        return [Transaction.from_dict(t) for t in items]

    def toggle_paid(self, month_key, transaction_id):
        db = self._load()
        items = []
        for t in db['monthly'].get(month_key, []):
            if t.get('id') == transaction_id:
                t = dict(t, paid=not t.get('paid', False))
            items.append(t)
        db['monthly'][month_key] = items
        self._write_all(db)
        return [Transaction.from_dict(t) for t in items]

    def replicate_month(self, src_key, dst_key):
        """Append copies of every src transaction (with fresh ids) to dst"""
        db = self._load()
        cloned = [dict(t, id=new_id()) for t in db['monthly'].get(src_key, [])]
        db['monthly'][dst_key] = list(db['monthly'].get(dst_key, [])) + cloned
        self._write_all(db)
        return [Transaction.from_dict(t) for t in db['monthly'][dst_key]]

    def clear_month(self, month_key):
        db = self._load()
        db['monthly'][month_key] = []
        self._write_all(db)
        return []

    def get_available_months(self):
        db = self._load()
        return sorted((k for k, items in db['monthly'].items() if items), reverse=True)

    # Cards
    def get_cards(self):
        return [Card.from_dict(c) for c in self._load()['cards']]

    def upsert_card(self, card: Card):
        db = self._load()
        db['cards'] = self._upsert(db['cards'], card.to_dict())
        self._write_all(db)
        return [Card.from_dict(c) for c in db['cards']]

    def remove_card(self, card_id):
        """Delete a card together with every purchase made on it"""
        db = self._load()
        db['cards'] = [c for c in db['cards'] if c.get('id') != card_id]
        db['purchases'] = [p for p in db['purchases'] if p.get('cardId') != card_id]
        self._write_all(db)
        return {
            'cards': [Card.from_dict(c) for c in db['cards']],
            'purchases': [Purchase.from_dict(p) for p in db['purchases']],
        }

    # Purchases
    def get_purchases(self):
        return [Purchase.from_dict(p) for p in self._load()['purchases']]

    def upsert_purchase(self, purchase: Purchase):
        db = self._load()
        db['purchases'] = self._upsert(db['purchases'], clamp_purchase(purchase).to_dict())
        self._write_all(db)
        return [Purchase.from_dict(p) for p in db['purchases']]

    def remove_purchase(self, purchase_id):
        db = self._load()
        db['purchases'] = [p for p in db['purchases'] if p.get('id') != purchase_id]
        self._write_all(db)
        return [Purchase.from_dict(p) for p in db['purchases']]

    @staticmethod
    def _upsert(items, record):
        items = list(items)
        idx = next((i for i, item in enumerate(items) if item.get('id') == record['id']), None)
        if idx is not None:
            items[idx] = record
        else:
            items.append(record)
        return items


class Storage(BaseStorage):
    """JSON file backend used by the desktop build"""

    def __init__(self, file_path='controle-financeiro.json'):
        self.file_path = file_path

    def ensure_file(self):
        try:
            data_dir = os.path.dirname(os.path.abspath(self.file_path))
            os.makedirs(data_dir, exist_ok=True)
            if not os.path.exists(self.file_path):
                self._write_all(empty_document())
        except OSError as e:
            logger.warning(f"Could not create data file {self.file_path}: {e}")

    def _read_all(self):
        self.ensure_file()
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            # Missing or corrupt file: start over from an empty document
            logger.warning(f"Could not read {self.file_path}, using empty data: {e}")
            return empty_document()

    def _write_all(self, data):
        tmp_path = self.file_path + '.tmp'
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.file_path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Could not write {self.file_path}: {type(e).__name__}: {e}")


class MemoryStorage(BaseStorage):
    """In-process backend; nothing survives a restart"""

    def __init__(self, data=None):
        self._data = copy.deepcopy(data) if data else empty_document()

    def _read_all(self):
        return copy.deepcopy(self._data)

    def _write_all(self, data):
        self._data = copy.deepcopy(data)


def create_storage(backend='json', file_path=None):
    if backend == 'memory':
        return MemoryStorage()
    if backend != 'json':
        raise ValueError(f"Unknown storage backend: {backend}")
    return Storage(file_path or 'controle-financeiro.json')
