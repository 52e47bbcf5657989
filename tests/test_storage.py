"""
Tests for the whole-document stores.

Both backends share the same contract, so most tests run against each.
"""

import json
import pytest

from finance_control.backend.models import Transaction, Card
from finance_control.backend.storage import (
    MemoryStorage,
    Storage,
    clamp_purchase,
    create_storage,
    empty_document,
)
from conftest import make_purchase


@pytest.fixture(params=["json", "memory"])
def storage(request, tmp_path):
    if request.param == "json":
        return Storage(str(tmp_path / "controle-financeiro.json"))
    return MemoryStorage()


def expense(title="Aluguel", amount=1500.0, **kwargs):
    return Transaction(type="expense", title=title, amount=amount, **kwargs)


def income(title="Salário", amount=5000.0, **kwargs):
    return Transaction(type="income", title=title, amount=amount, **kwargs)


class TestMonthlyLedger:

    def test_empty_month(self, storage):
        assert storage.get_monthly("2024-01") == []

    def test_upsert_novel_id_appends(self, storage):
        storage.upsert_transaction("2024-01", income(id="a"))
        result = storage.upsert_transaction("2024-01", expense(id="b"))
        assert [t.id for t in result] == ["a", "b"]
        assert storage.get_monthly("2024-01") == result

    def test_upsert_existing_id_replaces_in_place(self, storage):
        storage.upsert_transaction("2024-01", income(id="a"))
        storage.upsert_transaction("2024-01", expense(id="b"))
        result = storage.upsert_transaction("2024-01", income(id="a", title="Bônus", amount=700.0))
        assert len(result) == 2
        assert result[0].title == "Bônus"
        assert result[0].amount == 700.0
        assert result[1].id == "b"

    def test_months_are_independent(self, storage):
        storage.upsert_transaction("2024-01", income(id="a"))
        assert storage.get_monthly("2024-02") == []

    def test_remove_transaction(self, storage):
        storage.upsert_transaction("2024-01", income(id="a"))
        storage.upsert_transaction("2024-01", expense(id="b"))
        result = storage.remove_transaction("2024-01", "a")
        assert [t.id for t in result] == ["b"]
        assert storage.remove_transaction("2024-01", "missing") == result

    def test_toggle_paid_twice_restores_value(self, storage):
        storage.upsert_transaction("2024-01", expense(id="b"))
        assert storage.toggle_paid("2024-01", "b")[0].paid is True
        assert storage.toggle_paid("2024-01", "b")[0].paid is False

    def test_toggle_paid_defaults_missing_flag_to_false(self, storage):
        storage.upsert_transaction("2024-01", income(id="a"))
        assert storage.get_monthly("2024-01")[0].paid is None
        assert storage.toggle_paid("2024-01", "a")[0].paid is True

    def test_replicate_appends_clones_with_fresh_ids(self, storage):
        src = [income(id="a"), expense(id="b", paid=True)]
        for t in src:
            storage.upsert_transaction("2024-01", t)
        storage.upsert_transaction("2024-02", expense(id="existing", title="Luz", amount=120.0))

        result = storage.replicate_month("2024-01", "2024-02")

        assert len(result) == 3
        assert result[0].id == "existing"
        for original, clone in zip(src, result[1:]):
            assert clone.id != original.id
            assert (clone.type, clone.title, clone.amount, clone.paid) == \
                (original.type, original.title, original.amount, original.paid)
        # source untouched
        assert storage.get_monthly("2024-01") == src

    def test_replicate_twice_duplicates(self, storage):
        storage.upsert_transaction("2024-01", income(id="a"))
        storage.replicate_month("2024-01", "2024-02")
        result = storage.replicate_month("2024-01", "2024-02")
        assert len(result) == 2
        assert result[0].id != result[1].id

    def test_clear_month(self, storage):
        storage.upsert_transaction("2024-01", income(id="a"))
        storage.upsert_transaction("2024-02", income(id="b"))
        assert storage.clear_month("2024-01") == []
        assert storage.get_monthly("2024-01") == []
        assert len(storage.get_monthly("2024-02")) == 1

    def test_available_months(self, storage):
        storage.upsert_transaction("2024-01", income(id="a"))
        storage.upsert_transaction("2024-03", income(id="b"))
        storage.clear_month("2024-02")
        assert storage.get_available_months() == ["2024-03", "2024-01"]


class TestCardsAndPurchases:

    def test_upsert_card(self, storage):
        storage.upsert_card(Card(id="c1", name="Roxinho", bank="Nubank", color="#820AD1"))
        result = storage.upsert_card(Card(id="c1", name="Ultravioleta", bank="Nubank", color="#820AD1"))
        assert len(result) == 1
        assert result[0].name == "Ultravioleta"

    def test_remove_card_cascades_to_purchases(self, storage):
        storage.upsert_card(Card(id="c1", name="A", bank="Nubank", color="#820AD1"))
        storage.upsert_card(Card(id="c2", name="B", bank="Itaú", color="#EC7000"))
        storage.upsert_purchase(make_purchase(id="p1", card_id="c1"))
        storage.upsert_purchase(make_purchase(id="p2", card_id="c1"))
        storage.upsert_purchase(make_purchase(id="p3", card_id="c2"))

        result = storage.remove_card("c1")

        assert [c.id for c in result["cards"]] == ["c2"]
        assert [p.id for p in result["purchases"]] == ["p3"]
        assert [p.id for p in storage.get_purchases()] == ["p3"]

    def test_upsert_and_remove_purchase(self, storage):
        storage.upsert_purchase(make_purchase(id="p1"))
        result = storage.upsert_purchase(make_purchase(id="p1", title="Celular", amount=80.0))
        assert len(result) == 1
        assert result[0].title == "Celular"
        assert storage.remove_purchase("p1") == []

    def test_upsert_purchase_clamps_installments(self, storage):
        result = storage.upsert_purchase(make_purchase(id="p1", total=3, current=7))
        assert result[0].current_installment_at_start == 3
        result = storage.upsert_purchase(make_purchase(id="p1", total=0, current=0))
        assert result[0].total_installments == 1
        assert result[0].current_installment_at_start == 1

    def test_clamp_purchase_leaves_valid_values(self):
        p = clamp_purchase(make_purchase(total=12, current=5))
        assert (p.total_installments, p.current_installment_at_start) == (12, 5)


class TestJsonFile:

    def test_creates_file_with_empty_document(self, json_storage):
        json_storage.get_cards()
        with open(json_storage.file_path, encoding="utf-8") as f:
            assert json.load(f) == empty_document()

    def test_document_layout_uses_camel_case(self, json_storage):
        json_storage.upsert_transaction("2024-01", expense(id="b", title="Água"))
        json_storage.upsert_purchase(make_purchase(id="p1"))
        with open(json_storage.file_path, encoding="utf-8") as f:
            data = json.load(f)
        assert data["monthly"]["2024-01"] == [
            {"id": "b", "type": "expense", "title": "Água", "amount": 1500.0, "paid": False}
        ]
        assert data["purchases"][0] == {
            "id": "p1",
            "cardId": "c1",
            "title": "Notebook",
            "startMonthKey": "2024-01",
            "totalInstallments": 3,
            "currentInstallmentAtStart": 1,
            "installmentAmount": 100.0,
        }
        assert data["cards"] == []

    def test_data_survives_new_instance(self, json_storage):
        json_storage.upsert_transaction("2024-01", income(id="a"))
        assert Storage(json_storage.file_path).get_monthly("2024-01")[0].id == "a"

    def test_corrupt_file_falls_back_to_empty(self, json_storage):
        json_storage.ensure_file()
        with open(json_storage.file_path, "w", encoding="utf-8") as f:
            f.write("{not json")
        assert json_storage.get_monthly("2024-01") == []
        assert json_storage.get_cards() == []

    @pytest.mark.parametrize("document", [
        {"monthly": None},
        {"monthly": []},
        {"cards": None, "purchases": None},
        {"monthly": {"2024-01": None}, "cards": {}, "purchases": "x"},
        [],
        None,
    ])
    def test_wrong_shape_falls_back_to_empty(self, json_storage, document):
        json_storage.ensure_file()
        with open(json_storage.file_path, "w", encoding="utf-8") as f:
            json.dump(document, f)
        assert json_storage.get_monthly("2024-01") == []
        assert json_storage.get_cards() == []
        assert json_storage.get_purchases() == []
        assert json_storage.get_available_months() == []

    def test_wrong_shape_is_repaired_on_next_write(self, json_storage):
        json_storage.ensure_file()
        with open(json_storage.file_path, "w", encoding="utf-8") as f:
            json.dump({"monthly": None, "cards": None}, f)
        json_storage.upsert_transaction("2024-01", income(id="a"))
        with open(json_storage.file_path, encoding="utf-8") as f:
            data = json.load(f)
        assert data["cards"] == []
        assert data["purchases"] == []
        assert [t["id"] for t in data["monthly"]["2024-01"]] == ["a"]

    def test_no_temp_file_left_behind(self, json_storage, tmp_path):
        json_storage.upsert_transaction("2024-01", income(id="a"))
        leftovers = [p for p in (tmp_path / "data").iterdir() if p.suffix == ".tmp"]
        assert leftovers == []

    def test_write_failure_is_swallowed(self, tmp_path):
        # Parent path is a file, so nothing can be written below it
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        storage = Storage(str(blocker / "controle-financeiro.json"))
        assert storage.upsert_transaction("2024-01", income(id="a"))[0].id == "a"
        assert storage.get_monthly("2024-01") == []


class TestMemoryStorage:

    def test_returned_objects_do_not_alias_state(self):
        storage = MemoryStorage()
        storage.upsert_transaction("2024-01", income(id="a"))
        storage.get_monthly("2024-01")[0].title = "changed"
        assert storage.get_monthly("2024-01")[0].title == "Salário"

    def test_create_storage(self, tmp_path):
        assert isinstance(create_storage("memory"), MemoryStorage)
        assert isinstance(create_storage("json", str(tmp_path / "x.json")), Storage)
        with pytest.raises(ValueError):
            create_storage("sqlite")
