"""Unit tests for keyword and regex filters."""

import pytest

from src.core.crawler.filter_matcher import (
    build_combined_text,
    compile_patterns,
    matches_filters,
    matches_keywords,
    matches_patterns,
)


class TestKeywordAxis:

    def test_no_keywords_accepts_everything(self):
        assert matches_keywords([], "anything")
        assert matches_keywords(None, "anything")

    def test_keyword_match_is_case_insensitive_substring(self):
        assert matches_keywords(["RELEASE"], "kubernetes v1.31 release announced")
        assert matches_keywords(["lease"], "Release")

    def test_any_keyword_is_enough(self):
        assert matches_keywords(["security", "release"], "A new release")

    def test_no_keyword_present_rejects(self):
        assert not matches_keywords(["security"], "A new release")

    def test_empty_keyword_matches_any_text(self):
        # An empty string is a substring of every text
        assert matches_keywords([""], "A new release")
        assert matches_keywords(["security", ""], "")
        assert matches_filters([""], [], "Community spotlight", None)


class TestRegexAxis:

    def test_no_patterns_accepts_everything(self):
        assert matches_patterns([], "anything")

    def test_pattern_search_is_case_insensitive(self):
        assert matches_patterns([r"v\d+\.\d+"], "Kubernetes V1.31")
        assert matches_patterns(["^kubernetes"], "KUBERNETES blog")

    def test_malformed_pattern_is_skipped_while_others_still_match(self):
        assert matches_patterns(["(unclosed", "release"], "new release")

    def test_only_malformed_patterns_reject(self):
        assert not matches_patterns(["[broken"], "anything at all")

    def test_compile_patterns_drops_invalid(self):
        compiled = compile_patterns(["ok", "(bad", "fine+"])

        assert [p.pattern for p in compiled] == ["ok", "fine+"]


class TestMatchesFilters:

    def test_combined_text_joins_title_and_body(self):
        assert build_combined_text("Title", "Body") == "Title Body"
        assert build_combined_text(None, None) == " "

    def test_no_filters_accepts(self):
        assert matches_filters([], [], "Title", "Body")

    def test_keyword_found_only_in_body(self):
        assert matches_filters(["gateway"], [], "Deep dive", "How the Gateway API routes")

    def test_both_axes_must_pass(self):
        assert matches_filters(["release"], [r"v1\.\d+"], "v1.31 release", "")
        assert not matches_filters(["release"], [r"v2\.\d+"], "v1.31 release", "")
        assert not matches_filters(["security"], [r"v1\.\d+"], "v1.31 release", "")

    @pytest.mark.parametrize("title,body", [(None, "release notes"), ("release notes", None)])
    def test_missing_title_or_body(self, title, body):
        assert matches_filters(["release"], None, title, body)
