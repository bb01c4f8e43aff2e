"""Unit tests for the attribute filter builder."""

import pytest

from igbo_api.domain.search import (
    EqualsFilter,
    ExistsFilter,
    LengthGreaterThanFilter,
    NotEqualsFilter,
    WordFields,
)
from igbo_api.search.filters import generate_filtering_params


@pytest.mark.unit
class TestGenerateFilteringParams:
    def test_no_flags_means_no_filters(self):
        assert generate_filtering_params({}) == ()
        assert generate_filtering_params(WordFields()) == ()

    def test_standard_igbo_flag(self):
        assert generate_filtering_params({"isStandardIgbo": True}) == (
            EqualsFilter(path="attributes.isStandardIgbo", value=True),
        )

    def test_nsibidi_flag(self):
        assert generate_filtering_params({"nsibidi": True}) == (NotEqualsFilter(path="nsibidi", value=""),)

    def test_pronunciation_flag_requires_existing_long_value(self):
        assert generate_filtering_params({"pronunciation": True}) == (
            ExistsFilter(path="pronunciation"),
            LengthGreaterThanFilter(path="pronunciation", length=10),
        )

    def test_all_flags_keep_a_stable_order(self):
        filters = generate_filtering_params(WordFields(is_standard_igbo=True, nsibidi=True, pronunciation=True))

        assert [predicate.kind for predicate in filters] == ["equals", "not_equals", "exists", "length_greater_than"]

    def test_false_and_unknown_flags_are_ignored(self):
        assert generate_filtering_params({"isStandardIgbo": False, "color": True}) == ()
