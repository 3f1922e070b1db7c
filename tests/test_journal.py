from pension_backend.engine.journal import SqliteTransferJournal
from pension_backend.engine.rates import FixedRateConverter
from pension_backend.engine.service import RetirementEngine
from pension_backend.engine.state import VaultState

HOLDER = "holder-1"


def test_journal_records_transfers(tmp_path):
    journal = SqliteTransferJournal(str(tmp_path / "ledger" / "transfers.sqlite"))

    assert journal.send(HOLDER, 10 ** 21)
    assert journal.send(HOLDER, 5)
    assert journal.send("other", 7)

    rows = journal.list_transfers(identity=HOLDER)
    assert [row["amount"] for row in rows] == ["5", str(10 ** 21)]
    assert journal.balance_of(HOLDER) == 10 ** 21 + 5
    assert len(journal.list_transfers()) == 3


def test_engine_refund_goes_through_journal(tmp_path, make_params):
    journal = SqliteTransferJournal(str(tmp_path / "transfers.sqlite"))
    engine = RetirementEngine(VaultState(str(tmp_path / "vault.json")), FixedRateConverter(3000 * 10 ** 8), journal)
    engine.create_plan(HOLDER, make_params())
    engine.contribute(HOLDER, 2 * 10 ** 18)
    engine.deactivate_plan(HOLDER)

    engine.reclaim(HOLDER)

    assert journal.balance_of(HOLDER) == 2 * 10 ** 18
