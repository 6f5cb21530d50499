"""Tests for the phase taxonomy (sitephase_kernel/domain/phases.py)."""

from sitephase_kernel.domain.phases import (
    BOOTSTRAP_PHASES,
    FINAL,
    FRAMING_CREW,
    PHASE_TAXONOMY,
    PRE_CONSTRUCTION,
    get_phase,
    is_recognized,
    normalize_phase_label,
    ordinal_of,
    percentage_for,
    phase_names,
)


class TestTaxonomyTable:
    def test_percentages_non_decreasing_by_ordinal(self):
        ordered = sorted(PHASE_TAXONOMY, key=lambda p: p.ordinal)
        pcts = [p.target_progress_percentage for p in ordered]
        assert pcts == sorted(pcts)

    def test_percentages_bounded(self):
        assert all(0 <= p.target_progress_percentage <= 100 for p in PHASE_TAXONOMY)

    def test_names_unique(self):
        names = phase_names()
        assert len(names) == len(set(names))

    def test_ordinals_are_table_positions(self):
        assert [p.ordinal for p in PHASE_TAXONOMY] == list(range(len(PHASE_TAXONOMY)))

    def test_final_is_last_at_100(self):
        assert PHASE_TAXONOMY[-1].name == FINAL
        assert percentage_for(FINAL) == 100

    def test_bootstrap_phases_are_first(self):
        first_two = {p.name for p in PHASE_TAXONOMY[:2]}
        assert first_two == set(BOOTSTRAP_PHASES)


class TestLookups:
    def test_known_percentages(self):
        assert percentage_for(FRAMING_CREW) == 10
        assert percentage_for("Insulation") == 45
        assert percentage_for(PRE_CONSTRUCTION) == 5

    def test_unknown_name_is_absent(self):
        assert percentage_for("Landscaping") is None
        assert get_phase("Landscaping") is None
        assert not is_recognized("Landscaping")

    def test_lookup_is_exact_and_case_sensitive(self):
        assert percentage_for("insulation") is None
        assert percentage_for(" Insulation") is None

    def test_empty_and_none(self):
        assert percentage_for(None) is None
        assert percentage_for("") is None
        assert ordinal_of(None) is None

    def test_ordinal_of(self):
        assert ordinal_of(FRAMING_CREW) < ordinal_of("Insulation") < ordinal_of(FINAL)


class TestNormalizeLabel:
    def test_framing_variants(self):
        assert normalize_phase_label("Exterior Framing Crew") == "Framing"

    def test_rough_in(self):
        assert normalize_phase_label("Plumbing Rough In") == "Rough-ins"

    def test_permit(self):
        assert normalize_phase_label("Permit submission") == "Planning & Permits"

    def test_unmatched_passes_through(self):
        assert normalize_phase_label("Paint") == "Paint"
