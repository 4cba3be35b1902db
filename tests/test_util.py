import contextlib
import io
import os
import tempfile
import unittest

import pledger.check as check
import pledger.debug as debug
from pledger.parser import YearDecl
from pledger.util import FileError, read_content, read_journal

class TestCommands(unittest.TestCase):

    def setUp(self):
        self._dir = tempfile.TemporaryDirectory()
        self.addCleanup(self._dir.cleanup)

    def _write(self, name: str, content: str) -> str:
        path = os.path.join(self._dir.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def _run(self, main, argv):
        out = io.StringIO()
        err = io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(argv)
        return (code, out.getvalue(), err.getvalue())

    def test_read_content(self):
        path = self._write("a.journal", "y2022\n")
        self.assertEqual(read_content(path), "y2022\n")
        self.assertEqual(read_journal(path), [YearDecl(2022)])

    def test_read_content_errors(self):
        with self.assertRaises(FileError) as cm:
            read_content(os.path.join(self._dir.name, "missing.journal"))
        self.assertEqual(cm.exception.kind, FileError.NOT_FOUND)
        self.assertIn("not found", str(cm.exception))
        with self.assertRaises(FileError) as cm:
            read_content(self._dir.name)
        self.assertEqual(cm.exception.kind, FileError.UNKNOWN)

    def test_check_valid(self):
        path = self._write("a.journal",
                           "2021-10-08 Coffee\ncash 4.05 USD\nexpenses:food\n")
        code, out, err = self._run(check.main, [path, "--base-currency", "USD"])
        self.assertEqual(code, 0)
        self.assertEqual(out, "The given journal is a valid file\n")
        self.assertEqual(err, "")

    def test_check_unbalanced(self):
        path = self._write("a.journal",
                           "2021-10-08 Shop\ncash 10 EUR\nexpenses 20 EUR\n")
        code, out, err = self._run(check.main, [path])
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("Difference between postings: 10", err)

    def test_check_non_parsable(self):
        path = self._write("a.journal", "accounttest")
        code, _, err = self._run(check.main, [path])
        self.assertEqual(code, 1)
        self.assertIn("There was an error parsing the journal", err)

    def test_check_missing_file(self):
        path = os.path.join(self._dir.name, "missing.journal")
        code, _, err = self._run(check.main, [path])
        self.assertEqual(code, 2)
        self.assertEqual(err, f'File "{path}" not found\n')

    def test_check_log_file(self):
        path = self._write("a.journal", "y2022\n")
        log = os.path.join(self._dir.name, "check.log")
        code, _, _ = self._run(check.main, [path, "--log-file", log])
        self.assertEqual(code, 0)

    def test_debug(self):
        path = self._write("a.journal",
                           "y2022\n// note\n2021-10-08 Coffee\n"
                           "cash 4.05 USD\nexpenses:food\n")
        code, out, _ = self._run(debug.main, [path])
        self.assertEqual(code, 0)
        self.assertEqual(out,
                         "> y2022\n"
                         "> //\n"
                         "> 2021-10-08 Coffee\n"
                         "  cash 4.05 USD\n"
                         "  expenses:food\n")

    def test_debug_parse_error(self):
        path = self._write("a.journal", "y2022\nyoga\n")
        code, out, err = self._run(debug.main, [path])
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("line: 2, column: 1", err)

if __name__ == "__main__":
    unittest.main()
