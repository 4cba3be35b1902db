import unittest
from datetime import date
from decimal import Decimal

import pledger.parser as parser
import pledger.printing as printing
import pledger.journal as journal
from pledger.parser import Account, Amount, FullDate, PartialDate, \
    YearDecl, Comment, AccountDecl

class TestPrinting(unittest.TestCase):

    def test_account2str(self):
        self.assertEqual(printing.account2str(Account("cash")), "cash")
        self.assertEqual(
            printing.account2str(Account("assets", ("bank", "2021"))),
            "assets:bank:2021")

    def test_amount2str(self):
        self.assertEqual(printing.amount2str(Amount(Decimal("-4.05"), "USD")),
                         "-4.05 USD")
        self.assertEqual(printing.amount2str(Amount(Decimal("10"), "EUR")),
                         "10 EUR")
        self.assertEqual(
            printing.amount2str(Amount(Decimal("0.0000001"), "BTC")),
            "0.0000001 BTC")

    def test_date2str(self):
        self.assertEqual(printing.date2str(FullDate(date(2021, 1, 2))),
                         "2021-01-02")
        self.assertEqual(printing.date2str(PartialDate(date(2000, 1, 2))),
                         "01-02")

    def test_element2str(self):
        self.assertEqual(printing.element2str(YearDecl(2022)), "y2022")
        self.assertEqual(printing.element2str(Comment()), "//")
        self.assertEqual(
            printing.element2str(AccountDecl(Account("a", ("b",)))),
            "account a:b")
        with self.assertRaises(TypeError):
            printing.element2str("2021-10-08")

    def test_transaction2str(self):
        text = ("10-08! Shop | Groceries ;food,weekly\n"
                "cash -20 EUR\n"
                "expenses:food")
        t, _ = parser.parse_transaction(text)
        self.assertEqual(printing.transaction2str(t), text)
        t, _ = parser.parse_transaction("2021-10-08\ncash 1 EUR\nb\n")
        self.assertEqual(printing.transaction2str(t),
                         "2021-10-08\ncash 1 EUR\nb")

    def test_round_trip(self):
        text = (
            "// Journal for 2021\n"
            "Y2021\n"
            "account assets:bank:\n"
            "2021/10/08 Coffee | Morning ;food,food\n"
            "assets:bank -4.05 USD\n"
            "expenses:food 4.05 USD\n"
            "\n"
            "10.09!   | Weekly shop\n"
            "assets:bank\n"
            "expenses:food 20.10 USD\n"
            "02-29 Leap\n"
            "a 0.0000001 BTC\n"
            "b"
        )
        elements = parser.parse_journal(text)
        rendered = printing.journal2str(elements)
        self.assertEqual(parser.parse_journal(rendered), elements)
        self.assertEqual(printing.journal2str(parser.parse_journal(rendered)),
                         rendered)

    def test_check_error2str(self):
        with self.assertRaises(journal.CheckError) as cm:
            journal.check_journal(
                "2021-10-08 Shop\ncash 10 EUR\nexpenses 20 EUR\n", "EUR")
        self.assertEqual(
            printing.check_error2str(cm.exception),
            "The following transactions are unbalanced\n"
            "- Payee: Shop, date: 2021-10-08. "
            "Difference between postings: 10")
        with self.assertRaises(journal.CheckError) as cm:
            journal.check_journal("10-08 Shop\ncash\nexpenses\n", "EUR")
        self.assertEqual(
            printing.check_error2str(cm.exception),
            "The following transactions have no values associated with them\n"
            "- Payee: Shop, date: 10-08")
        with self.assertRaises(journal.CheckError) as cm:
            journal.check_journal("y", "EUR")
        self.assertTrue(printing.check_error2str(cm.exception).startswith(
            "There was an error parsing the journal:\n"))

if __name__ == "__main__":
    unittest.main()
