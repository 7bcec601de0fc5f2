"""Tests for transfer submission through the transaction service."""

import threading
import time

import pytest

from riskguard.errors import AccountNotFound, InvalidRequest
from riskguard.models import TransactionCreate
from riskguard.services.transactions import TransactionService
from tests.conftest import DAYTIME, NIGHTTIME, SettableClock, make_payload, ts


class TestPreconditions:
    @pytest.mark.parametrize("amount", [0, -10, float("nan"), float("inf")])
    def test_non_positive_amount(self, service, amount):
        with pytest.raises(InvalidRequest):
            service.create_transaction(make_payload(amount=amount))

    def test_blank_recipient(self, service):
        with pytest.raises(InvalidRequest):
            service.create_transaction(make_payload(recipient="   "))

    def test_internal_without_destination(self, service):
        with pytest.raises(InvalidRequest):
            service.create_transaction(make_payload(transfer_type="internal"))

    def test_unknown_source(self, service):
        with pytest.raises(AccountNotFound):
            service.create_transaction(make_payload(account_id="acc-missing"))

    def test_unknown_destination(self, service):
        with pytest.raises(AccountNotFound):
            service.create_transaction(
                make_payload(transfer_type="internal", destination="acc-missing")
            )

    def test_failed_precondition_writes_nothing(self, service, store):
        with pytest.raises(InvalidRequest):
            service.create_transaction(make_payload(amount=0))
        assert store.get_all_transactions() == []
        assert store.get_security_logs() == []


class TestCreateTransaction:
    def test_allowed_transfer_debits_and_accrues(self, service, store):
        result = service.create_transaction(make_payload(amount=15_200))
        assert result.blocked is False
        assert result.warning is None
        assert result.transaction.status == "COMPLETED"
        account = store.get_account("acc-checking-001")
        assert account.balance == 2_750_000 - 15_200
        assert account.amount_spent_today == 15_200

    def test_internal_transfer_credits_destination(self, service, store):
        result = service.create_transaction(make_payload(
            recipient="Savings",
            amount=100_000,
            transfer_type="internal",
            destination="acc-savings-001",
        ))
        assert result.blocked is False
        assert store.get_account("acc-savings-001").balance == 8_420_000 + 100_000
        assert store.get_account("acc-checking-001").balance == 2_750_000 - 100_000

    def test_blocked_transfer_leaves_balances(self, service, store):
        result = service.create_transaction(make_payload(amount=100, device_id="device-x"))
        assert result.blocked is True
        assert result.transaction.status == "BLOCKED"
        assert result.warning == (
            "Transaction blocked. Reasons: Unknown Recipient, New Device Detected"
        )
        account = store.get_account("acc-checking-001")
        assert account.balance == 2_750_000
        assert account.amount_spent_today == 0

    def test_every_evaluation_persisted_and_logged(self, service, store):
        allowed = service.create_transaction(make_payload())
        blocked = service.create_transaction(make_payload(device_id="device-x"))
        assert len(store.get_transactions("user-001")) == 2
        logs = store.get_security_logs()
        assert {e.transaction_id for e in logs} == {
            allowed.transaction.transaction_id,
            blocked.transaction.transaction_id,
        }

    def test_log_entry_mirrors_decision(self, service, store):
        result = service.create_transaction(make_payload(
            recipient="Unknown Account X-8832", amount=1_200_000, automated=True,
        ))
        entry = store.get_security_logs(transaction_id=result.transaction.transaction_id)[0]
        decision = result.transaction.decision
        # 0.5125 without a burst of prior transfers: under the threshold
        assert result.blocked is False
        assert entry.threat_type == decision.threat_type
        assert entry.risk_score == decision.risk_score
        assert entry.confidence == decision.confidence
        assert entry.label == decision.label
        assert entry.action_taken == decision.action_taken
        assert entry.block_reasons == list(decision.block_reasons)
        assert entry.details == (
            f"External transfer of 1200000 KZT to Unknown Account X-8832 allowed. "
            f"Risk: {decision.risk_score}"
        )

    def test_timestamp_comes_from_clock(self, service, store):
        result = service.create_transaction(make_payload())
        assert result.transaction.timestamp == ts(DAYTIME)
        assert store.get_security_logs()[0].timestamp == ts(DAYTIME)

    def test_daily_spend_accrues_into_later_checks(self, service, clock):
        clock.set("2026-02-07T09:00:00Z")
        first = service.create_transaction(make_payload(recipient="A", amount=1_900_000))
        clock.set("2026-02-07T10:00:00Z")
        second = service.create_transaction(make_payload(recipient="A", amount=200_000))
        assert first.blocked is False
        assert second.blocked is True
        assert "DAILY_LIMIT_EXCEEDED" in [r.code for r in second.transaction.decision.block_reasons]


class TestServerTime:
    def _claiming(self, requested_at, **fields):
        raw = make_payload(**fields).model_dump()
        raw["requested_at"] = requested_at
        return TransactionCreate.model_validate(raw)

    def test_claimed_daytime_does_not_hide_night_transfer(self, store, engine):
        service = TransactionService(store=store, engine=engine, clock=SettableClock(NIGHTTIME))
        result = service.create_transaction(self._claiming(DAYTIME))
        codes = [r.code for r in result.transaction.decision.block_reasons]
        assert "SUSPICIOUS_TIME" in codes
        assert result.blocked is True
        assert result.transaction.timestamp == ts(NIGHTTIME)

    def test_back_dated_burst_still_builds_frequency(self, service):
        results = [
            service.create_transaction(self._claiming(
                f"2026-02-06T{8 + i:02d}:30:00Z",
                recipient="Unknown Account X-8832", amount=150_000, automated=True,
            ))
            for i in range(7)
        ]
        risks = [r.transaction.decision.features.frequency_risk for r in results]
        assert risks == [0.05, 0.05, 0.3, 0.7, 0.7, 0.7, 0.95]
        assert {r.transaction.timestamp for r in results} == {ts(DAYTIME)}

    def test_claimed_time_does_not_change_decision(self, store, engine):
        plain = TransactionService(store=store, engine=engine, clock=SettableClock())
        expected = plain.screen(make_payload(amount=600_000))
        claimed = plain.screen(self._claiming("2026-02-06T20:10:00Z", amount=600_000))
        assert claimed == expected


class TestHistoryDrivenFeatures:
    def test_ransomware_after_burst(self, service, clock):
        """Three quick transfers make the automated fourth look like ransomware."""
        for i, minute in enumerate(["09:11", "09:12", "09:13"]):
            clock.set(f"2026-02-07T{minute}:00Z")
            service.create_transaction(make_payload(recipient=f"Shop {i}", amount=1_000))
        clock.set(DAYTIME)
        result = service.create_transaction(make_payload(
            recipient="Unknown Account X-8832", amount=1_200_000, automated=True,
        ))
        decision = result.transaction.decision
        assert decision.features.frequency_risk == 0.7
        assert decision.features.amount_risk == 0.95
        assert decision.features.automated_behavior_risk == 0.9
        assert decision.threat_type == "automated-ransomware-pattern"
        assert result.blocked is True

    def test_known_recipient_after_completed_transfer(self, service, clock):
        clock.set("2026-02-06T14:30:00Z")
        service.create_transaction(make_payload(recipient="KazTelecom", amount=8_500))
        clock.set(DAYTIME)
        result = service.create_transaction(make_payload(recipient="KazTelecom", amount=8_500))
        assert result.transaction.decision.features.new_recipient_risk == 0.05

    def test_blocked_recipient_stays_unknown(self, service, clock):
        clock.set("2026-02-06T14:30:00Z")
        service.create_transaction(make_payload(recipient="Shady", device_id="device-x"))
        clock.set(DAYTIME)
        result = service.create_transaction(make_payload(recipient="Shady"))
        assert result.transaction.decision.features.new_recipient_risk == 0.5


class TestScreen:
    def test_dry_run_does_not_commit(self, service, store):
        decision = service.screen(make_payload(amount=15_200))
        assert decision.action_taken == "ALLOWED"
        assert store.get_all_transactions() == []
        assert store.get_security_logs() == []
        assert store.get_account("acc-checking-001").balance == 2_750_000

    def test_dry_run_matches_real_evaluation(self, service):
        payload = make_payload(recipient="Unknown Account X-8832", amount=1_200_000, automated=True)
        decision = service.screen(payload)
        result = service.create_transaction(payload)
        assert result.transaction.decision == decision

    def test_dry_run_validates(self, service):
        with pytest.raises(AccountNotFound):
            service.screen(make_payload(account_id="acc-missing"))


class TestAuditFailure:
    def test_log_failure_does_not_lose_decision(self, store, engine, clock, monkeypatch):
        service = TransactionService(store=store, engine=engine, clock=clock)

        def broken(entry):
            raise RuntimeError("log store unavailable")

        monkeypatch.setattr(store, "add_security_log", broken)
        result = service.create_transaction(make_payload())
        assert result.blocked is False
        assert result.transaction.decision.action_taken == "ALLOWED"
        assert len(store.get_transactions("user-001")) == 1


class TestConcurrency:
    def test_parallel_transfers_cannot_overspend(self, service, store):
        """Ten concurrent 300k transfers against a 2M daily limit: at most six pass."""
        results = []
        results_lock = threading.Lock()

        def submit():
            result = service.create_transaction(make_payload(recipient="Landlord", amount=300_000))
            with results_lock:
                results.append(result)

        threads = [threading.Thread(target=submit) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        account = store.get_account("acc-checking-001")
        assert account.amount_spent_today <= account.daily_spend_limit
        allowed = [r for r in results if not r.blocked]
        assert account.amount_spent_today == 300_000 * len(allowed)

    def test_accounts_of_one_user_share_history(self, service, monkeypatch):
        """Transfers from two accounts of one user see each other in history."""
        counts = []
        snapshot = service.history_facts

        def slow_snapshot(*args, **kwargs):
            facts = snapshot(*args, **kwargs)
            counts.append(facts.recent_transaction_count)
            time.sleep(0.05)
            return facts

        monkeypatch.setattr(service, "history_facts", slow_snapshot)
        start = threading.Barrier(2)

        def submit(account_id):
            start.wait()
            service.create_transaction(make_payload(account_id=account_id, amount=10_000))

        threads = [
            threading.Thread(target=submit, args=(account_id,))
            for account_id in ("acc-checking-001", "acc-savings-001")
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(counts) == [0, 1]
