import pytest

from finance_control.backend.storage import Storage, MemoryStorage
from finance_control.backend.manager import FinanceManager
from finance_control.backend.models import Purchase


@pytest.fixture
def json_storage(tmp_path):
    return Storage(str(tmp_path / "data" / "controle-financeiro.json"))


@pytest.fixture
def manager():
    return FinanceManager(storage=MemoryStorage())


@pytest.fixture
def client(monkeypatch):
    from finance_control.web import app as web_app
    monkeypatch.setattr(web_app, "manager", FinanceManager(storage=MemoryStorage()))
    web_app.app.config['TESTING'] = True
    return web_app.app.test_client()


def make_purchase(start="2024-01", total=3, current=1, amount=100.0, card_id="c1", **kwargs):
    return Purchase(
        card_id=card_id,
        title=kwargs.pop("title", "Notebook"),
        start_month_key=start,
        total_installments=total,
        current_installment_at_start=current,
        installment_amount=amount,
        **kwargs
    )
