"""
Tests for sanitizer.py - stripping markdown fences from completion replies.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sanitizer import sanitize


class TestSanitize:
    def test_json_fence_removed(self):
        assert sanitize('```json\n{"a":1}\n```') == '{"a":1}'

    def test_plain_json_unchanged(self):
        assert sanitize('{"a":1}') == '{"a":1}'

    def test_bare_fence_removed(self):
        assert sanitize('```\n{"a":1}\n```') == '{"a":1}'

    def test_language_tag_case_insensitive(self):
        assert sanitize('```JSON\n{"a":1}\n```') == '{"a":1}'
        assert sanitize('```Json {"a":1} ```') == '{"a":1}'

    def test_every_fence_removed(self):
        """Fences in the middle of the text are stripped too; prose is left alone."""
        text = 'Here you go:\n```json\n{"a":1}\n```\n```'
        assert sanitize(text) == 'Here you go:\n\n{"a":1}'

    def test_whitespace_trimmed(self):
        assert sanitize('  \n {"a":1} \n\t') == '{"a":1}'

    def test_empty(self):
        assert sanitize("") == ""
        assert sanitize("```") == ""
