"""Unit tests for the character-level tokenizer.

Covers quoting and doubled-quote escaping, embedded delimiters and line
breaks, terminator handling, whitespace trimming, blank-row dropping, BOM
handling and implicit closing of an unterminated quote.
"""

# pylint: disable=missing-class-docstring,missing-function-docstring

from episode_csv.parsing.tokenizer import scan, scan_line, tokenize, tokenize_line

# ===========================================================================
# tokenize tests
# ===========================================================================


class TestTokenizeBasics:

    def test_header_and_rows(self):
        table = tokenize("episode_number,name\n1,Pilot\n2,Second")
        assert table.headers == ["episode_number", "name"]
        assert table.rows == [["1", "Pilot"], ["2", "Second"]]

    def test_empty_input(self):
        table = tokenize("")
        assert table.headers == []
        assert table.rows == []

    def test_header_only(self):
        table = tokenize("episode_number,name\n")
        assert table.headers == ["episode_number", "name"]
        assert table.rows == []

    def test_trailing_delimiter_gives_empty_field(self):
        table = tokenize("a,b,c\n1,2,")
        assert table.rows == [["1", "2", ""]]

    def test_ragged_rows_are_not_fixed_here(self):
        table = tokenize("a,b,c\n1\n1,2,3,4")
        assert table.rows == [["1"], ["1", "2", "3", "4"]]


class TestTokenizeQuoting:

    def test_quoted_delimiter(self):
        table = tokenize('name,overview\n"Hello, World",x')
        assert table.rows == [["Hello, World", "x"]]

    def test_doubled_quote_is_literal(self):
        table = tokenize('name\n"say ""hi"""')
        assert table.rows == [['say "hi"']]

    def test_quote_escaping_with_delimiter(self):
        table = tokenize('h\n"a,b""c"')
        assert table.rows == [['a,b"c']]

    def test_empty_quoted_field(self):
        table = tokenize('a,b\n"",x')
        assert table.rows == [["", "x"]]

    def test_embedded_newline_is_kept_verbatim(self):
        table = tokenize('episode_number,overview\n1,"line one\nline two"')
        assert table.rows == [["1", "line one\nline two"]]

    def test_embedded_crlf_is_kept_verbatim(self):
        table = tokenize('a,b\n1,"x\r\ny"')
        assert table.rows == [["1", "x\r\ny"]]

    def test_collapse_newlines_turns_each_break_into_a_space(self):
        table = tokenize('episode_number,overview\n1,"line one\nline two\r\nthree"', collapse_newlines=True)
        assert table.rows == [["1", "line one line two three"]]

    def test_quoted_whitespace_is_preserved(self):
        table = tokenize('a,b\n"  padded  ",x')
        assert table.rows == [["  padded  ", "x"]]

    def test_whitespace_outside_quotes_is_trimmed(self):
        table = tokenize('a,b\n  "quoted"  , x ')
        assert table.rows == [["quoted", "x"]]


class TestTokenizeLines:

    def test_crlf_terminators(self):
        table = tokenize("a,b\r\n1,2\r\n3,4\r\n")
        assert table.headers == ["a", "b"]
        assert table.rows == [["1", "2"], ["3", "4"]]

    def test_bare_cr_terminator(self):
        table = tokenize("a,b\r1,2")
        assert table.rows == [["1", "2"]]

    def test_blank_lines_dropped(self):
        table = tokenize("a,b\n\n1,2\n   \n3,4\n")
        assert table.rows == [["1", "2"], ["3", "4"]]

    def test_rows_of_empty_fields_dropped(self):
        table = tokenize("a,b\n,\n1,2\n , \n")
        assert table.rows == [["1", "2"]]

    def test_fields_are_trimmed(self):
        table = tokenize(" a , b \n 1 , 2 ")
        assert table.headers == ["a", "b"]
        assert table.rows == [["1", "2"]]

    def test_bom_is_ignored(self):
        table = tokenize("\ufeffepisode_number,name\n1,Pilot")
        assert table.headers == ["episode_number", "name"]


# ===========================================================================
# scan tests
# ===========================================================================


class TestScan:

    def test_well_formed_input_is_not_ambiguous(self):
        result = scan('a,b\n1,"x"')
        assert result.unterminated_quote is False

    def test_unterminated_quote_closed_at_eof(self):
        result = scan('a\n"abc')
        assert result.unterminated_quote is True
        assert result.records == [["a"], ["abc"]]

    def test_unterminated_quote_swallows_rest_of_input(self):
        result = scan('a,b\n1,"abc\n2,def')
        assert result.unterminated_quote is True
        assert result.records == [["a", "b"], ["1", "abc\n2,def"]]


# ===========================================================================
# tokenize_line / scan_line tests
# ===========================================================================


class TestTokenizeLine:

    def test_simple_line(self):
        assert tokenize_line('1,"Pilot, Part 1",2024-01-01') == ["1", "Pilot, Part 1", "2024-01-01"]

    def test_empty_fields_are_counted(self):
        assert tokenize_line(",,") == ["", "", ""]

    def test_empty_line_is_one_empty_field(self):
        assert tokenize_line("") == [""]

    def test_line_breaks_do_not_split(self):
        assert tokenize_line("a\nb,c") == ["a\nb", "c"]

    def test_scan_line_reports_open_quote(self):
        result = scan_line('1,"open field')
        assert result.unterminated_quote is True
        assert result.records == [["1", "open field"]]
