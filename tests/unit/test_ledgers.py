from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from chon.db import models, schemas
from chon.services import points_service, wallet_service


def test_points_balance_add_and_deduct():
    balance = models.PlayerPointsBalance(current_balance=10, total_earned=10, total_spent=0)
    balance.add_points(5)
    assert (balance.current_balance, balance.total_earned) == (15, 15)
    balance.deduct_points(15)
    assert (balance.current_balance, balance.total_spent) == (0, 15)
    with pytest.raises(models.InsufficientPointsError):
        balance.deduct_points(1)


def test_points_transaction_labels():
    tx = models.PointsTransaction(type="admin_credit", reference_type="package_purchase")
    assert tx.is_credit() and not tx.is_debit()
    assert tx.type_label == "Admin Credit"
    assert tx.reference_type_label == "Package Purchase"
    assert models.PointsTransaction(type="spend").reference_type_label is None


def test_admin_credit_then_spend_never_goes_negative(db_session, player_factory):
    player = player_factory()
    credit = points_service.record_admin_transaction(
        db_session,
        schemas.PointsTransactionCreate(player_id=player.id, type="admin_credit", amount=30),
    )
    assert (credit.balance_before, credit.balance_after) == (0, 30)
    assert credit.reference_type == "admin_action"

    spend = points_service.record_admin_transaction(
        db_session,
        schemas.PointsTransactionCreate(player_id=player.id, type="spend", amount=50),
    )
    assert (spend.balance_before, spend.balance_after) == (30, 0)

    balance = points_service.player_balance(db_session, player.id)
    assert balance.current_balance == 0
    assert balance.total_earned == 30
    assert balance.total_spent == 50


def test_wallet_balance_guard():
    wallet = models.PlayerWallet(balance=Decimal("10.00"))
    wallet.add_balance("2.50")
    assert wallet.balance == Decimal("12.50")
    with pytest.raises(models.InsufficientFundsError):
        wallet.subtract_balance(Decimal("20"))
    wallet.subtract_balance(Decimal("12.50"))
    assert wallet.balance == Decimal("0.00")


def test_payment_method_fee_and_availability():
    method = models.PaymentMethod(
        name="ZainCash",
        code="zaincash",
        is_active=True,
        supports_deposit=True,
        supports_withdrawal=False,
        min_amount=Decimal("1"),
        max_amount=Decimal("1000"),
        fee_fixed=Decimal("0.50"),
        fee_percentage=Decimal("2.5"),
    )
    assert method.calculate_fee(Decimal("100")) == Decimal("3.00")
    assert method.calculate_total_with_fee(Decimal("100")) == Decimal("103.00")
    assert method.is_available_for("deposit", 50)
    assert not method.is_available_for("withdrawal", 50)
    assert not method.is_available_for("deposit", Decimal("0.5"))
    assert not method.is_available_for("deposit", 5000)


def test_transaction_signed_amount_and_logs():
    prize = models.Transaction(amount=Decimal("20"), transaction_type="prize", status="pending")
    fee = models.Transaction(amount=Decimal("5"), transaction_type="entry_fee", status="pending")
    assert prize.signed_amount() == Decimal("20")
    assert fee.signed_amount() == Decimal("-5")
    fee.mark_failed("card declined")
    assert fee.status == "failed"
    assert [(log.action, log.reason) for log in fee.logs] == [("failed", "card declined")]


def test_transaction_description_uses_payment_method(db_session, player_factory):
    player = player_factory()
    db_session.add(
        models.PaymentMethod(name="Visa", code="visa", fee_fixed=Decimal("1.00"), fee_percentage=Decimal("0"))
    )
    tx = models.Transaction(
        player_id=player.id,
        amount=Decimal("10.00"),
        transaction_type="entry_fee",
        status="pending",
        payment_method="visa",
        payment_details={"last4": "4242"},
    )
    db_session.add(tx)
    db_session.commit()

    described = wallet_service.describe_transaction(db_session, tx)
    assert described["payment_method"] == "Visa ending in 4242"
    assert described["fee_amount"] == "1.00"
    assert described["total_with_fee"] == "11.00"
    assert described["signed_amount"] == "-10.00"


def test_payment_method_display_without_method(db_session, player_factory):
    player = player_factory()
    unknown = models.Transaction(player_id=player.id, amount=1, transaction_type="bonus", payment_method="cash")
    missing = models.Transaction(player_id=player.id, amount=1, transaction_type="bonus")
    assert wallet_service.payment_method_display(db_session, unknown) == "cash"
    assert wallet_service.payment_method_display(db_session, missing) == "N/A"


def test_points_package_pricing():
    package = models.PointsPackage(name="Starter", points_amount=300, price_iqd=1000)
    assert package.formatted_price == "1,000 IQD"
    assert package.price_per_point == 3.33
    assert models.PointsPackage(name="Empty", points_amount=0, price_iqd=500).price_per_point == 0.0


def test_points_balance_has_enough_points():
    balance = models.PlayerPointsBalance(current_balance=20, total_earned=20, total_spent=0)
    assert balance.has_enough_points(20)
    assert not balance.has_enough_points(21)


def _saved_method(db_session, player, method, **fields):
    saved = models.PlayerPaymentMethod(player_id=player.id, payment_method_id=method.id, **fields)
    db_session.add(saved)
    db_session.commit()
    return saved


def test_completing_transaction_stamps_saved_method(db_session, player_factory):
    payer, other = player_factory(), player_factory()
    visa = models.PaymentMethod(name="Visa", code="visa")
    db_session.add(visa)
    db_session.commit()
    mine = _saved_method(db_session, payer, visa, token="tok_payer")
    theirs = _saved_method(db_session, other, visa, token="tok_other")
    tx = models.Transaction(
        player_id=payer.id, amount=Decimal("5.00"), transaction_type="entry_fee", payment_method="visa"
    )
    db_session.add(tx)
    db_session.commit()

    wallet_service.complete_transaction(db_session, tx, "paid")

    db_session.expire_all()
    assert tx.status == "completed"
    assert mine.last_used_at is not None
    assert theirs.last_used_at is None


def test_completing_transaction_without_saved_method():
    tx = models.Transaction(amount=Decimal("5.00"), transaction_type="entry_fee", payment_method="visa")
    tx.mark_completed()
    assert tx.status == "completed"
    assert [log.action for log in tx.logs] == ["completed"]


def test_set_as_default_clears_previous_default(db_session, player_factory):
    player, other = player_factory(), player_factory()
    visa = models.PaymentMethod(name="Visa", code="visa")
    fib = models.PaymentMethod(name="FIB", code="fib")
    db_session.add_all([visa, fib])
    db_session.commit()
    old_default = _saved_method(db_session, player, visa, token="a", is_default=True)
    other_default = _saved_method(db_session, other, visa, token="b", is_default=True)
    new_default = _saved_method(db_session, player, fib, token="c")

    new_default.set_as_default()
    db_session.commit()

    db_session.expire_all()
    assert new_default.is_default is True
    assert old_default.is_default is False
    assert other_default.is_default is True


@pytest.mark.parametrize(
    "nickname, details, expected",
    [
        ("Salary card", {"last4": "4242"}, "Salary card"),
        (None, {"last4": "4242"}, "Visa ending in 4242"),
        (None, {"email": "a@example.com"}, "Visa (a@example.com)"),
        (None, {"account_number": "IQ0012345678"}, "Visa ending in 5678"),
        (None, None, "Visa"),
    ],
)
def test_saved_method_display_name(nickname, details, expected):
    saved = models.PlayerPaymentMethod(nickname=nickname, details=details)
    saved.payment_method = models.PaymentMethod(name="Visa", code="visa")
    assert saved.display_name == expected


def test_saved_method_token_is_unique_per_player_and_method(db_session, player_factory):
    player = player_factory()
    visa = models.PaymentMethod(name="Visa", code="visa")
    db_session.add(visa)
    db_session.commit()
    _saved_method(db_session, player, visa, token="tok")

    db_session.add(models.PlayerPaymentMethod(player_id=player.id, payment_method_id=visa.id, token="tok"))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()
