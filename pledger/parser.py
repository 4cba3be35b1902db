from typing import Union
from typing import NamedTuple
from typing import Callable
from datetime import date
from decimal import Decimal
from enum import Enum
import functools
import logging
import re

logger = logging.getLogger(__name__)

# Year given to dates written without one ("10-08"). It is a leap year so
# that "02-29" is accepted until the journal year is known.
PLACEHOLDER_YEAR = 2000

class Position(NamedTuple):
    line: int
    column: int

def offset2position(text: str, offset: int) -> Position:
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1)
    return Position(line, column)

class ParseError(Exception):
    def __init__(self, message: str, offset: int = 0,
                 rules: list[str] | None = None,
                 position: Position | None = None,
                 context: str = ""):
        self.message = message
        self.offset = offset
        # Innermost rule first.
        self.rules: list[str] = list(rules) if rules else []
        self.position = position
        self.context = context
        if not position:
            super().__init__(message)
        elif context:
            super().__init__(
                f"{message}\n"
                f"line: {position.line}, column: {position.column}\n"
                f"{context}\n" + (position.column * " ") + "^"
                + self._rules_suffix()
            )
        else:
            super().__init__(
                f"{message}\n"
                f"line: {position.line}, column: {position.column}"
                + self._rules_suffix()
            )

    def _rules_suffix(self) -> str:
        if not self.rules:
            return ""
        return "\nin rule " + " <- ".join(f'"{r}"' for r in self.rules)

    def locate(self, text: str) -> "ParseError":
        """Return a copy of the error rendered against the source text."""
        position = offset2position(text, self.offset)
        lines = text.split("\n")
        try:
            context = lines[position.line - 1].rstrip("\r")
        except IndexError:
            context = ""
        return type(self)(self.message, self.offset, self.rules,
                          position, context)

class FatalParseError(ParseError):
    """A failure no alternative may recover from."""
    pass

def rule(name: str):
    """Record `name` in the rule chain of errors raised by the parser."""
    def decorator(function):
        @functools.wraps(function)
        def wrapper(text: str, begin: int = 0):
            try:
                return function(text, begin)
            except ParseError as e:
                e.rules.append(name)
                raise
        return wrapper
    return decorator

class Account(NamedTuple):
    name: str
    children: tuple[str, ...] = ()

    def full_name(self) -> str:
        return ":".join((self.name,) + tuple(self.children))

class Amount():
    def __init__(self, quantity: Decimal, currency: str):
        if not isinstance(quantity, Decimal):
            raise TypeError(f"Incorrect type: {type(quantity)}.")
        self._quantity = quantity
        self._currency = currency
    @property
    def quantity(self):
        return self._quantity
    @property
    def currency(self):
        return self._currency
    def __hash__(self):
        return hash((self._quantity, self._currency))
    def __eq__(self, other):
        if not isinstance(other, Amount):
            return NotImplemented
        return (self.quantity == other.quantity and
                self.currency == other.currency)
    def __repr__(self):
        return f"Amount({self.quantity}, {self.currency})"

class FullDate(NamedTuple):
    date: date

class PartialDate(NamedTuple):
    date: date

ParsedDate = Union[FullDate, PartialDate]

class TransactionStatus(Enum):
    CLEARED = ""
    PENDING = "!"

class Posting(NamedTuple):
    account: Account
    amount: Amount | None = None

class Transaction(NamedTuple):
    date: ParsedDate
    status: TransactionStatus
    payee: str
    description: str
    tags: tuple[str, ...]
    postings: tuple[Posting, Posting]

class AccountDecl(NamedTuple):
    account: Account

class Comment():
    """A comment line. The content is not kept."""
    def __eq__(self, other):
        if not isinstance(other, Comment):
            return NotImplemented
        return True
    def __hash__(self):
        return hash(Comment)
    def __repr__(self):
        return "Comment()"

class YearDecl(NamedTuple):
    year: int

JournalElement = Union[AccountDecl, Comment, YearDecl, Transaction]

class EmptySection():
    def __eq__(self, other):
        if not isinstance(other, EmptySection):
            return NotImplemented
        return True
    def __hash__(self):
        return hash(EmptySection)
    def __repr__(self):
        return "EmptySection()"

class PayeeOnly(NamedTuple):
    payee: str

class PayeeAndDescription(NamedTuple):
    payee: str
    description: str

PayeeSection = Union[EmptySection, PayeeOnly, PayeeAndDescription]

_SPACE = re.compile(r"[ \t]*")
_MULTISPACE = re.compile(r"\s*")
_LINE_ENDING = re.compile(r"\r?\n")
_ALNUM = re.compile(r"[A-Za-z0-9]+")
_QUANTITY = re.compile(r"-?[0-9]+(\.[0-9]+)?")
_HARD_SPACE = re.compile(r"[ \t]+")
_CURRENCY = re.compile(r"[A-Za-z]+")
_COMMENT = re.compile(r"//[^\n]*\n")
_TAG = re.compile(r"(?:[^\W_]|-)+")
_TEXT = re.compile(r"[^\W_]+(?:[ \t]+[^\W_]+)*")
_YEAR_PREFIX = re.compile(r"[yY]")
_DIGITS = re.compile(r"[0-9]+")
_ACCOUNT_KEYWORD = re.compile(r"account[ \t]+")

# Tried in this order, full dates before partial ones.
_DATE_SEPARATORS = ("-", "/", ".")
_DATE_RUNS = {
    separator: re.compile(r"[0-9" + re.escape(separator) + r"]+")
    for separator in _DATE_SEPARATORS
}

def parse_space(text: str, begin: int = 0) -> tuple[str, int]:
    """Consume horizontal whitespace. Never fails."""
    m = _SPACE.match(text, begin)
    return (m.group(0), m.end())

def parse_multispace(text: str, begin: int = 0) -> tuple[str, int]:
    m = _MULTISPACE.match(text, begin)
    return (m.group(0), m.end())

@rule("line ending")
def parse_line_ending(text: str, begin: int = 0) -> tuple[str, int]:
    m = _LINE_ENDING.match(text, begin)
    if not m:
        raise ParseError("Expected a line ending", begin)
    return (m.group(0), m.end())

def _match_date(token: str, separator: str) -> ParsedDate | None:
    parts = token.split(separator)
    if not all(p.isdigit() for p in parts):
        return None
    try:
        if len(parts) == 3 and len(parts[0]) == 4 \
           and len(parts[1]) <= 2 and len(parts[2]) <= 2:
            return FullDate(date(int(parts[0]), int(parts[1]), int(parts[2])))
        if len(parts) == 2 and len(parts[0]) <= 2 and len(parts[1]) <= 2:
            return PartialDate(
                date(PLACEHOLDER_YEAR, int(parts[0]), int(parts[1])))
    except ValueError:
        return None
    return None

@rule("date")
def parse_date(text: str, begin: int = 0) -> tuple[ParsedDate, int]:
    runs = []
    for separator in _DATE_SEPARATORS:
        m = _DATE_RUNS[separator].match(text, begin)
        if m and separator in m.group(0):
            runs.append((separator, m))
    if not runs:
        raise ParseError("Expected a date", begin)
    for kind in (FullDate, PartialDate):
        for separator, m in runs:
            parsed = _match_date(m.group(0), separator)
            if isinstance(parsed, kind):
                _, consumed = parse_space(text, m.end())
                return (parsed, consumed)
    raise ParseError(f"Invalid date '{runs[0][1].group(0)}'", begin)

@rule("account")
def parse_account(text: str, begin: int = 0) -> tuple[Account, int]:
    m = _ALNUM.match(text, begin)
    if not m:
        raise ParseError("Expected an account name", begin)
    name = m.group(0)
    children = []
    consumed = m.end()
    while consumed < len(text) and text[consumed] == ":":
        m = _ALNUM.match(text, consumed + 1)
        if not m:
            # A trailing ':' is accepted and dropped.
            consumed += 1
            break
        children.append(m.group(0))
        consumed = m.end()
    return (Account(name, tuple(children)), consumed)

@rule("amount")
def parse_amount(text: str, begin: int = 0) -> tuple[Amount, int]:
    m = _QUANTITY.match(text, begin)
    if not m:
        raise ParseError("Expected a quantity", begin)
    quantity = Decimal(m.group(0))
    space = _HARD_SPACE.match(text, m.end())
    if not space:
        raise ParseError("Expected a space between quantity and currency",
                         m.end())
    currency = _CURRENCY.match(text, space.end())
    if not currency:
        raise ParseError("Expected a currency", space.end())
    return (Amount(quantity, currency.group(0)), currency.end())

@rule("comment")
def parse_comment(text: str, begin: int = 0) -> tuple[Comment, int]:
    if not text.startswith("//", begin):
        raise ParseError("Expected a comment", begin)
    m = _COMMENT.match(text, begin)
    if not m:
        raise ParseError("Comment must end with a line ending", len(text))
    return (Comment(), m.end())

@rule("tags")
def parse_tags(text: str, begin: int = 0) -> tuple[tuple[str, ...], int]:
    if not text.startswith(";", begin):
        raise ParseError("Expected ';' before tags", begin)
    m = _TAG.match(text, begin + 1)
    if not m:
        raise ParseError("Expected a tag", begin + 1)
    tags = [m.group(0)]
    consumed = m.end()
    while text.startswith(",", consumed):
        m = _TAG.match(text, consumed + 1)
        if not m:
            break
        tags.append(m.group(0))
        consumed = m.end()
    return (tuple(tags), consumed)

def parse_status(text: str, begin: int = 0) \
    -> tuple[TransactionStatus, int]:
    if text.startswith("!", begin):
        return (TransactionStatus.PENDING, begin + 1)
    return (TransactionStatus.CLEARED, begin)

def parse_payee_section(text: str, begin: int = 0) \
    -> tuple[PayeeSection, int]:
    _, consumed = parse_space(text, begin)
    payee = None
    m = _TEXT.match(text, consumed)
    if m:
        payee = m.group(0)
        consumed = m.end()
    _, after_space = parse_space(text, consumed)
    if not text.startswith("|", after_space):
        if payee is None:
            return (EmptySection(), begin)
        return (PayeeOnly(payee), consumed)
    _, consumed = parse_space(text, after_space + 1)
    description = ""
    m = _TEXT.match(text, consumed)
    if m:
        description = m.group(0)
        consumed = m.end()
    return (PayeeAndDescription(payee or "", description), consumed)

@rule("posting")
def parse_posting(text: str, begin: int = 0) -> tuple[Posting, int]:
    account, consumed = parse_account(text, begin)
    _, consumed = parse_space(text, consumed)
    try:
        amount, consumed = parse_amount(text, consumed)
    except ParseError as e:
        # Something that starts like an amount but is not one is an error,
        # anything else is left for the caller.
        if e.offset > consumed:
            raise
        amount = None
    return (Posting(account, amount), consumed)

@rule("postings")
def parse_postings(text: str, begin: int = 0) \
    -> tuple[tuple[Posting, Posting], int]:
    first, consumed = parse_posting(text, begin)
    _, consumed = parse_line_ending(text, consumed)
    second, consumed = parse_posting(text, consumed)
    if _LINE_ENDING.match(text, consumed):
        _, consumed = parse_line_ending(text, consumed)
    return ((first, second), consumed)

@rule("transaction")
def parse_transaction(text: str, begin: int = 0) -> tuple[Transaction, int]:
    parsed_date, consumed = parse_date(text, begin)
    status, consumed = parse_status(text, consumed)
    section, consumed = parse_payee_section(text, consumed)
    _, consumed = parse_space(text, consumed)
    tags = ()
    if text.startswith(";", consumed):
        tags, consumed = parse_tags(text, consumed)
        _, consumed = parse_space(text, consumed)
    _, consumed = parse_line_ending(text, consumed)
    postings, consumed = parse_postings(text, consumed)
    if isinstance(section, PayeeAndDescription):
        payee, description = section
    elif isinstance(section, PayeeOnly):
        payee, description = section.payee, ""
    else:
        payee, description = "", ""
    return (Transaction(parsed_date, status, payee, description,
                        tags, postings), consumed)

@rule("account declaration")
def parse_account_decl(text: str, begin: int = 0) -> tuple[AccountDecl, int]:
    m = _ACCOUNT_KEYWORD.match(text, begin)
    if not m:
        raise ParseError("Expected 'account' followed by a space", begin)
    account, consumed = parse_account(text, m.end())
    _, consumed = parse_space(text, consumed)
    if consumed < len(text):
        _, consumed = parse_line_ending(text, consumed)
    return (AccountDecl(account), consumed)

@rule("year directive")
def parse_year(text: str, begin: int = 0) -> tuple[YearDecl, int]:
    m = _YEAR_PREFIX.match(text, begin)
    if not m:
        raise ParseError("Expected 'y' or 'Y'", begin)
    digits = _DIGITS.match(text, m.end())
    if not digits:
        raise FatalParseError("Expected a year after 'y'", m.end())
    return (YearDecl(int(digits.group(0))), digits.end())

def parse_alternatives(parsers: list[Callable], text: str, begin: int = 0):
    """Return the result of the first parser that succeeds.

    When all of them fail the failure that got furthest into the text is
    raised. A FatalParseError is raised as soon as it happens.
    """
    deepest = None
    for p in parsers:
        try:
            return p(text, begin)
        except FatalParseError:
            raise
        except ParseError as e:
            if deepest is None or e.offset > deepest.offset:
                deepest = e
    raise deepest

_ELEMENT_PARSERS = [
    parse_account_decl,
    parse_comment,
    parse_year,
    parse_transaction,
]

@rule("journal")
def parse_element(text: str, begin: int = 0) -> tuple[JournalElement, int]:
    try:
        return parse_alternatives(_ELEMENT_PARSERS, text, begin)
    except FatalParseError:
        raise
    except ParseError as e:
        if e.offset > begin:
            raise
    raise ParseError(
        "Expected an account declaration, a comment, a year "
        "or a transaction", begin)

def parse_journal(text: str) -> list[JournalElement]:
    """Parse a whole journal into its elements, in source order.

    Blank lines produce no element. The first failure aborts the parse and
    is raised as a ParseError located against `text`.
    """
    elements: list[JournalElement] = []
    _, consumed = parse_multispace(text, 0)
    try:
        while consumed < len(text):
            element, consumed = parse_element(text, consumed)
            logger.debug(f"Parsed {element!r}.")
            elements.append(element)
            _, consumed = parse_multispace(text, consumed)
    except ParseError as e:
        located = e.locate(text)
        logger.debug(f"Parse failed at offset {e.offset}: {e.message}")
        raise located from None
    logger.info(f"Parsed {len(elements)} journal elements.")
    return elements
