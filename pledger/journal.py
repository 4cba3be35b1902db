from typing import NamedTuple
from typing import Iterable
from decimal import Decimal
import logging

from pledger import parser
from pledger.parser import Amount, Posting, Transaction, \
    JournalElement, ParseError
from pledger.conversion import Converter, convert_to

logger = logging.getLogger(__name__)

class UnbalancedTransaction(NamedTuple):
    transaction: Transaction
    difference: Decimal

class CheckError(Exception):
    pass

class NonParsableError(CheckError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class TransactionsWithoutValueError(CheckError):
    def __init__(self, transactions: list[Transaction]):
        super().__init__(
            f"{len(transactions)} transaction(s) without any amount.")
        self.transactions = transactions

class UnbalancedTransactionsError(CheckError):
    def __init__(self, unbalanced: list[UnbalancedTransaction]):
        super().__init__(f"{len(unbalanced)} unbalanced transaction(s).")
        self.unbalanced = unbalanced

def transaction_has_value(txn: Transaction) -> bool:
    """Does at least one posting state an amount?"""
    first, second = txn.postings
    return first.amount is not None or second.amount is not None

def effective_amounts(postings: tuple[Posting, Posting]) \
    -> tuple[Amount, Amount]:
    """Amounts used for balancing; a missing amount takes its sibling's."""
    first, second = postings
    first_amount = first.amount if first.amount is not None \
        else second.amount
    second_amount = second.amount if second.amount is not None \
        else first.amount
    assert first_amount is not None and second_amount is not None
    return (first_amount, second_amount)

def check_transaction(txn: Transaction, base_currency: str,
                      convert: Converter = convert_to) \
    -> UnbalancedTransaction | None:
    first, second = effective_amounts(txn.postings)
    first = convert(base_currency, first)
    second = convert(base_currency, second)
    # Postings are compared by magnitude: an elided posting mirrors its
    # sibling and a stated pair is normally written with opposite signs.
    difference = abs(abs(first.quantity) - abs(second.quantity))
    if difference == 0:
        return None
    return UnbalancedTransaction(txn, difference)

def check_transactions(transactions: list[Transaction], base_currency: str,
                       convert: Converter = convert_to) \
    -> list[Transaction]:
    """Check that every transaction has a value and balances.

    All offending transactions are collected before raising, so one run
    reports every problem of a kind. Transactions without any amount are
    reported first; balance is only checked once there are none.
    """
    without_value = [t for t in transactions if not transaction_has_value(t)]
    if without_value:
        for txn in without_value:
            logger.warning(f"Transaction by '{txn.payee}' on "
                           f"{txn.date.date} has no amount.")
        raise TransactionsWithoutValueError(without_value)

    unbalanced = []
    for txn in transactions:
        x = check_transaction(txn, base_currency, convert)
        if x is None:
            continue
        logger.warning(f"Transaction by '{txn.payee}' on {txn.date.date} "
                       f"unbalanced by {x.difference}.")
        unbalanced.append(x)
    if unbalanced:
        raise UnbalancedTransactionsError(unbalanced)
    logger.info(f"{len(transactions)} transactions balanced in "
                f"{base_currency}.")
    return transactions

def get_transactions(elements: Iterable[JournalElement]) \
    -> list[Transaction]:
    return [x for x in elements if isinstance(x, Transaction)]

def validate(elements: Iterable[JournalElement], base_currency: str,
             convert: Converter = convert_to) -> None:
    check_transactions(get_transactions(elements), base_currency, convert)

def check_journal(text: str, base_currency: str,
                  convert: Converter = convert_to) -> list[JournalElement]:
    """Parse and validate a journal, returning its elements.

    A syntax error is raised as NonParsableError so it is never mistaken
    for a balance problem.
    """
    try:
        elements = parser.parse_journal(text)
    except ParseError as e:
        raise NonParsableError(str(e)) from e
    validate(elements, base_currency, convert)
    return elements
