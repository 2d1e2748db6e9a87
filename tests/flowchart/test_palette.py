import pytest

from flowsketch.flowchart.model import NodeColors, Palette
from flowsketch.flowchart.palette import (
    DEFAULT_PALETTE,
    DOMAIN_PALETTES,
    normalize_palette,
    pick_palette_from_prompt,
)


def _palette_dict(**overrides):
    data = DEFAULT_PALETTE.to_dict()
    data.update(overrides)
    return data


class TestPickPaletteFromPrompt:
    @pytest.mark.parametrize(
        "prompt,expected",
        [
            ("Patient triage in the emergency ward", "Clinical Signal"),
            ("Customer onboarding for a retail bank", "Executive Deck"),
            ("How a student submits coursework", "Classroom Focus"),
            ("Deploy a container to staging", "Clean Blueprint"),
        ],
    )
    def test_keyword_selection(self, prompt, expected):
        assert pick_palette_from_prompt(prompt).name == expected

    def test_first_matching_domain_wins(self):
        # "patient" (clinical) and "business" (executive) both match.
        assert pick_palette_from_prompt("business case for patient intake").name == "Clinical Signal"

    def test_empty_prompt_gets_default(self):
        assert pick_palette_from_prompt("") is DEFAULT_PALETTE


class TestNormalizePalette:
    def test_valid_palette_passes_through(self):
        raw = _palette_dict(name="Night Shift", canvas="#101820")
        palette = normalize_palette(raw)
        assert palette.name == "Night Shift"
        assert palette.canvas == "#101820"

    def test_single_bad_color_replaces_whole_palette(self):
        palette = normalize_palette(_palette_dict(accent="not-a-color", canvas="#000000"))
        assert palette == DEFAULT_PALETTE

    def test_bad_node_color_replaces_whole_palette(self):
        raw = _palette_dict()
        raw["nodeColors"]["decision"] = "orange"
        assert normalize_palette(raw) == DEFAULT_PALETTE

    def test_falls_back_to_supplied_palette(self):
        fallback = DOMAIN_PALETTES[0][1]
        assert normalize_palette({"name": "x"}, fallback) == fallback

    def test_invalid_fallback_gives_default(self):
        assert normalize_palette("teal", {"canvas": "#zzzzzz"}) == DEFAULT_PALETTE

    def test_missing_palette_gives_default(self):
        assert normalize_palette(None) == DEFAULT_PALETTE

    def test_absent_slots_take_default_colors(self):
        palette = normalize_palette({"name": "Sparse", "nodeColors": {"start": "#000000"}})
        assert palette.name == "Sparse"
        assert palette.node_colors.start == "#000000"
        assert palette.node_colors.end == NodeColors().end
        assert palette.panel == DEFAULT_PALETTE.panel

    def test_palette_instance_is_accepted(self):
        palette = Palette(name="Mono", nodeColors=NodeColors())
        assert normalize_palette(palette) is palette


def test_palette_serializes_with_camel_case_keys():
    data = DEFAULT_PALETTE.to_dict()
    assert "mutedText" in data
    assert set(data["nodeColors"]) == {
        "start", "process", "decision", "data", "subprocess", "end", "actor", "document"
    }
