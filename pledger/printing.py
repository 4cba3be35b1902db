from typing import Iterable

from pledger.parser import Account, Amount, ParsedDate, PartialDate, \
    Posting, Transaction, TransactionStatus, AccountDecl, Comment, \
    YearDecl, JournalElement
from pledger.journal import CheckError, NonParsableError, \
    TransactionsWithoutValueError, UnbalancedTransactionsError, \
    UnbalancedTransaction

def account2str(account: Account) -> str:
    return account.full_name()

def amount2str(amount: Amount) -> str:
    # "f" keeps small quantities such as 0.0000001 out of exponent notation.
    return f"{format(amount.quantity, 'f')} {amount.currency}"

def date2str(date: ParsedDate) -> str:
    if isinstance(date, PartialDate):
        return date.date.strftime('%m-%d')
    return date.date.strftime('%Y-%m-%d')

def status2str(status: TransactionStatus) -> str:
    return status.value

def posting2str(posting: Posting) -> str:
    line = account2str(posting.account)
    if posting.amount is not None:
        line += " " + amount2str(posting.amount)
    return line

def transaction2str(txn: Transaction) -> str:
    line = date2str(txn.date) + status2str(txn.status)
    if txn.payee or txn.description:
        line += " " + txn.payee
    if txn.description:
        line += " | " + txn.description
    if txn.tags:
        line += " ;" + ",".join(txn.tags)
    lines = [line] + [posting2str(p) for p in txn.postings]
    return "\n".join(lines)

def element2str(element: JournalElement) -> str:
    if isinstance(element, AccountDecl):
        return "account " + account2str(element.account)
    elif isinstance(element, Comment):
        return "//"
    elif isinstance(element, YearDecl):
        return f"y{element.year}"
    elif isinstance(element, Transaction):
        return transaction2str(element)
    raise TypeError(f"Unsupported type: {type(element)}")

def journal2str(elements: Iterable[JournalElement]) -> str:
    """Render elements as journal text that parses back to them."""
    return "".join(element2str(e) + "\n" for e in elements)

def _transaction_summary(txn: Transaction) -> str:
    return f"- Payee: {txn.payee}, date: {date2str(txn.date)}"

def unbalanced2str(unbalanced: UnbalancedTransaction) -> str:
    return (_transaction_summary(unbalanced.transaction) +
            f". Difference between postings: {unbalanced.difference}")

def check_error2str(error: CheckError) -> str:
    if isinstance(error, NonParsableError):
        return f"There was an error parsing the journal:\n{error.message}"
    elif isinstance(error, TransactionsWithoutValueError):
        lines = ["The following transactions have no values associated "
                 "with them"]
        lines += [_transaction_summary(t) for t in error.transactions]
        return "\n".join(lines)
    elif isinstance(error, UnbalancedTransactionsError):
        lines = ["The following transactions are unbalanced"]
        lines += [unbalanced2str(u) for u in error.unbalanced]
        return "\n".join(lines)
    return str(error)
