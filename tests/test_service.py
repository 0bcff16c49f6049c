"""
Ledger service tests.
Exercises locking, retries and registration against the in-memory repository.
"""

import gc
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date

import pytest

from conftest import PASSWORD, PIN
from wallet_service.ledger.domain import TransactionType, verify_account
from wallet_service.ledger.errors import (
    AuthenticationFailed,
    ConflictError,
    InsufficientFunds,
    OperationTimeout,
    PartialTransferFailure,
    RecipientNotFound,
    RegistrationError,
    WeakSecret,
)
from wallet_service.repositories.in_memory_account_repository import InMemoryAccountRepository
from wallet_service.services.ledger_service import LedgerService, calculate_age
from wallet_service.services.locks import AccountLockManager


@pytest.fixture
def repository():
    return InMemoryAccountRepository()


@pytest.fixture
def service(repository, ledger):
    return LedgerService(repository, ledger, locks=AccountLockManager(timeout=5))


@pytest.fixture
def open_account(service):
    def factory(phone, balance=None):
        account = service.register(
            name=f"Holder {phone}",
            phone=phone,
            password=PASSWORD,
            pin=PIN,
            dob=date(1990, 5, 17),
        )
        if balance is not None and balance > account.balance:
            service.deposit(account.id, balance - account.balance)
        return service.get_account(account.id)

    return factory


class FlakyRepository(InMemoryAccountRepository):
    """Raises ConflictError on the first `conflicts` saves."""

    def __init__(self, conflicts):
        super().__init__()
        self.conflicts = conflicts
        self.save_calls = 0

    def save(self, account):
        self.save_calls += 1
        if self.save_calls <= self.conflicts:
            raise ConflictError("simulated concurrent write")
        return super().save(account)


class BrokenCommitRepository(InMemoryAccountRepository):
    def __init__(self):
        super().__init__()
        self.transfer_calls = 0

    def save_transfer(self, sender, receiver):
        self.transfer_calls += 1
        raise PartialTransferFailure("commit lost", sender.id, receiver.id)


# ==================== REGISTRATION & LOGIN ====================

def test_register_grants_starting_balance(service):
    account = service.register(
        name="Sita", phone="9800000001", password=PASSWORD, pin=PIN, dob=date(1990, 1, 1)
    )

    assert account.balance == 100
    assert account.opening_balance == 100
    assert account.transactions == ()
    assert account.password_hash != PASSWORD
    assert account.pin_hash != PIN


def test_register_rejects_minor(service):
    today = date.today()
    with pytest.raises(RegistrationError):
        service.register(
            name="Kid", phone="9800000002", password=PASSWORD, pin=PIN,
            dob=date(today.year - 10, 1, 1),
        )


def test_register_rejects_weak_password(service):
    with pytest.raises(WeakSecret):
        service.register(
            name="Weak", phone="9800000003", password="password", pin=PIN, dob=date(1990, 1, 1)
        )


def test_register_rejects_duplicate_phone(service, open_account):
    open_account("9800000004")
    with pytest.raises(RegistrationError):
        open_account("9800000004")


def test_authenticate_does_not_reveal_which_part_failed(service, open_account):
    open_account("9800000005")

    assert service.authenticate("9800000005", PASSWORD).phone == "9800000005"
    with pytest.raises(AuthenticationFailed) as wrong_password:
        service.authenticate("9800000005", "Wrong#123")
    with pytest.raises(AuthenticationFailed) as unknown_phone:
        service.authenticate("9899999999", PASSWORD)

    assert wrong_password.value.detail == unknown_phone.value.detail


def test_calculate_age_respects_birthday():
    assert calculate_age(date(2000, 6, 15), today=date(2018, 6, 14)) == 17
    assert calculate_age(date(2000, 6, 15), today=date(2018, 6, 15)) == 18


# ==================== OPERATIONS ====================

def test_operations_persist_balance_and_history(service, open_account):
    account = open_account("9800000010")

    service.deposit(account.id, 900)
    service.withdraw(account.id, 200, PIN)
    service.top_up(account.id, 50, PIN, "9811111111")
    service.load_wallet(account.id, 40, PIN, "wallet-9")

    stored = service.get_account(account.id)
    assert service.get_balance(account.id) == 100 + 900 - 200 - 50 - 40
    assert [t.type for t in service.get_history(account.id)] == [
        TransactionType.ESEWA,
        TransactionType.TOPUP,
        TransactionType.WITHDRAW,
        TransactionType.DEPOSIT,
    ]
    verify_account(stored)


def test_rejected_operation_leaves_state_unchanged(service, open_account):
    account = open_account("9800000011")

    with pytest.raises(AuthenticationFailed):
        service.withdraw(account.id, 50, "0000")

    stored = service.get_account(account.id)
    assert stored.balance == 100
    assert stored.transactions == ()
    assert stored.version == account.version


def test_transfer_updates_both_accounts(service, open_account):
    sender = open_account("9800000020", balance=1000)
    receiver = open_account("9800000021")

    result = service.transfer(sender.id, receiver.phone, 250, PIN, cross_institution=True)

    assert result.sender.balance == 1000 - 250 - 11
    assert result.receiver.balance == 100 + 250
    assert service.get_history(receiver.id)[0].type is TransactionType.TRANSFER_IN
    assert service.get_history(sender.id)[0].type is TransactionType.TRANSFER_OUT
    verify_account(service.get_account(sender.id))
    verify_account(service.get_account(receiver.id))


def test_transfer_to_unknown_recipient(service, open_account):
    sender = open_account("9800000022", balance=1000)

    with pytest.raises(RecipientNotFound):
        service.transfer(sender.id, "9899999999", 100, PIN)

    stored = service.get_account(sender.id)
    assert stored.balance == 1000
    assert stored.version == sender.version


def test_change_password_then_authenticate(service, open_account):
    account = open_account("9800000030")

    service.change_password(account.id, PASSWORD, "Fresh#Pass9")

    assert service.authenticate(account.phone, "Fresh#Pass9").id == account.id
    with pytest.raises(AuthenticationFailed):
        service.authenticate(account.phone, PASSWORD)


def test_change_password_weak_keeps_old_secret(service, open_account):
    account = open_account("9800000031")

    with pytest.raises(WeakSecret):
        service.change_password(account.id, PASSWORD, "weakpass")

    assert service.authenticate(account.phone, PASSWORD).id == account.id


# ==================== RETRIES ====================

def test_conflict_is_retried(ledger):
    repository = FlakyRepository(conflicts=2)
    service = LedgerService(repository, ledger, locks=AccountLockManager(), max_retries=3)
    account = service.register(
        name="Retry", phone="9800000040", password=PASSWORD, pin=PIN, dob=date(1990, 1, 1)
    )

    updated, entry = service.deposit(account.id, 100)

    assert updated.balance == 200
    assert repository.save_calls == 3
    assert len(service.get_account(account.id).transactions) == 1


def test_conflict_surfaces_after_retries_exhausted(ledger):
    repository = FlakyRepository(conflicts=10)
    service = LedgerService(repository, ledger, locks=AccountLockManager(), max_retries=2)
    account = service.register(
        name="Retry", phone="9800000041", password=PASSWORD, pin=PIN, dob=date(1990, 1, 1)
    )

    with pytest.raises(ConflictError):
        service.deposit(account.id, 100)

    assert repository.save_calls == 3
    assert service.get_balance(account.id) == 100


def test_partial_transfer_failure_is_not_retried(ledger):
    repository = BrokenCommitRepository()
    service = LedgerService(repository, ledger, locks=AccountLockManager(), max_retries=3)
    for phone in ("9800000050", "9800000051"):
        service.register(name=phone, phone=phone, password=PASSWORD, pin=PIN, dob=date(1990, 1, 1))
    sender = repository.get_by_public_identity("9800000050")

    with pytest.raises(PartialTransferFailure) as exc:
        service.transfer(sender.id, "9800000051", 20, PIN)

    assert repository.transfer_calls == 1
    assert exc.value.sender_id == sender.id


# ==================== CONCURRENCY ====================

def test_concurrent_withdraws_cannot_double_spend(service, open_account):
    account = open_account("9800000060", balance=1000)
    barrier = threading.Barrier(2)

    def attempt():
        barrier.wait()
        try:
            service.withdraw(account.id, 600, PIN)
            return "success"
        except InsufficientFunds:
            return "insufficient"

    with ThreadPoolExecutor(max_workers=2) as executor:
        results = [f.result(timeout=30) for f in [executor.submit(attempt) for _ in range(2)]]

    assert sorted(results) == ["insufficient", "success"]
    assert service.get_balance(account.id) == 400


def test_many_concurrent_withdraws(service, open_account):
    account = open_account("9800000061", balance=1000)

    def attempt():
        try:
            service.withdraw(account.id, 100, PIN)
            return True
        except InsufficientFunds:
            return False

    with ThreadPoolExecutor(max_workers=10) as executor:
        futures = [executor.submit(attempt) for _ in range(20)]
        results = [future.result(timeout=30) for future in as_completed(futures)]

    assert sum(results) == 10
    assert service.get_balance(account.id) == 0
    verify_account(service.get_account(account.id))


def test_bidirectional_transfers_do_not_deadlock(service, open_account):
    alice = open_account("9800000070", balance=1000)
    bob = open_account("9800000071", balance=1000)

    def send(sender_id, phone):
        for _ in range(10):
            service.transfer(sender_id, phone, 10, PIN)

    with ThreadPoolExecutor(max_workers=2) as executor:
        futures = [
            executor.submit(send, alice.id, bob.phone),
            executor.submit(send, bob.id, alice.phone),
        ]
        for future in futures:
            future.result(timeout=30)

    assert service.get_balance(alice.id) == 1000
    assert service.get_balance(bob.id) == 1000
    verify_account(service.get_account(alice.id))
    verify_account(service.get_account(bob.id))


def test_lock_timeout_is_retryable_and_changes_nothing(repository, ledger):
    locks = AccountLockManager(timeout=0.05)
    service = LedgerService(repository, ledger, locks=locks)
    account = service.register(
        name="Busy", phone="9800000080", password=PASSWORD, pin=PIN, dob=date(1990, 1, 1)
    )
    held = threading.Event()
    release = threading.Event()

    def hold_lock():
        with locks.hold(account.id):
            held.set()
            release.wait(5)

    holder = threading.Thread(target=hold_lock)
    holder.start()
    held.wait(5)
    try:
        with pytest.raises(OperationTimeout) as exc:
            service.deposit(account.id, 100)
    finally:
        release.set()
        holder.join()

    assert exc.value.retryable
    assert service.get_balance(account.id) == 100


def test_lock_manager_orders_keys():
    locks = AccountLockManager(timeout=1)
    order = []
    original = locks._lock_for

    def recording(key):
        order.append(key)
        return original(key)

    locks._lock_for = recording
    with locks.hold(9, 3, 9):
        pass

    assert order == [3, 9]


def test_lock_manager_forgets_released_locks():
    locks = AccountLockManager(timeout=1)

    with locks.hold(1, 2):
        assert set(locks._locks.keys()) == {1, 2}
    gc.collect()

    assert len(locks._locks) == 0
