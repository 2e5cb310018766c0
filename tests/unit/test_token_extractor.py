"""Tests for CSRF token extraction."""

import pytest

from ivac_bot.services.booking.token_extractor import extract_token


class TestExtractToken:
    """Tests for extract_token function."""

    def test_meta_tag(self):
        """Test token from the csrf-token meta tag."""
        body = '<html><head><meta name="csrf-token" content="abc123"></head></html>'
        assert extract_token(body) == "abc123"

    def test_hidden_input(self):
        """Test token from a hidden _token input."""
        body = '<form><input type="hidden" name="_token" value="input-tok"></form>'
        assert extract_token(body) == "input-tok"

    def test_inline_script(self):
        """Test token from an inline script assignment."""
        body = "<script>var foo = 1;\nvar csrf_token = 'script-tok';</script>"
        assert extract_token(body) == "script-tok"

    def test_meta_wins_over_input_and_script(self):
        """Test lookup order: meta, then input, then script."""
        body = (
            "<script>var csrf_token = \"script-tok\";</script>"
            '<input name="_token" value="input-tok">'
            '<meta name="csrf-token" content="meta-tok">'
        )
        assert extract_token(body) == "meta-tok"

    def test_input_wins_over_script(self):
        """Test input token takes precedence over a script token."""
        body = (
            '<script>var csrf_token = "script-tok";</script>'
            '<input name="_token" value="input-tok">'
        )
        assert extract_token(body) == "input-tok"

    def test_empty_meta_falls_through(self):
        """Test an empty meta content is ignored."""
        body = '<meta name="csrf-token" content=""><input name="_token" value="input-tok">'
        assert extract_token(body) == "input-tok"

    def test_blank_meta_falls_through_to_input(self):
        """Test a whitespace-only meta content does not shadow a real input token."""
        body = '<meta name="csrf-token" content="  "><input name="_token" value="real-token">'
        assert extract_token(body) == "real-token"

    def test_blank_input_falls_through_to_script(self):
        body = (
            '<input name="_token" value=" ">'
            "<script>var csrf_token = \"script-tok\";</script>"
        )
        assert extract_token(body) == "script-tok"

    def test_surrounding_whitespace_stripped(self):
        body = '<meta name="csrf-token" content="  meta-tok \n">'
        assert extract_token(body) == "meta-tok"

    @pytest.mark.parametrize(
        "body",
        [
            None,
            "",
            "<html><body>No token here</body></html>",
            '<meta name="description" content="abc">',
            '<input name="email" value="x@example.com">',
        ],
    )
    def test_no_token(self, body):
        """Test pages without a token return None."""
        assert extract_token(body) is None

    def test_script_outside_script_tag_ignored(self):
        """Test the script pattern only applies inside <script> elements."""
        body = "<p>var csrf_token = 'not-a-token';</p>"
        assert extract_token(body) is None
