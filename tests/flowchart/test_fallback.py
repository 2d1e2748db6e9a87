from flowsketch.flowchart.fallback import (
    REFINE_RETRY_SUGGESTION,
    fallback_flowchart,
    refined_fallback,
)
from flowsketch.flowchart.model import MAX_SOURCE_PROMPT_LENGTH, MAX_SUMMARY_LENGTH, NodeType
from flowsketch.flowchart.palette import DEFAULT_PALETTE, pick_palette_from_prompt
from flowsketch.flowchart.repair import repair_existing_flowchart, repair_flowchart


class TestFallbackFlowchart:
    def test_template_shape(self):
        document = fallback_flowchart("Map the onboarding flow for new hires", "balanced")
        assert document.node_ids() == [
            "problem-definition",
            "requirements",
            "modeling",
            "review",
            "final-diagram",
        ]
        assert document.nodes[0].type == NodeType.START
        assert document.nodes[-1].type == NodeType.END
        assert len(document.edges) == 5

    def test_review_branches(self):
        document = fallback_flowchart("Map the onboarding flow for new hires", "balanced")
        branches = {(edge.target, edge.label, edge.condition) for edge in document.edges if edge.source == "review"}
        assert branches == {("modeling", "No", "needs improvement"), ("final-diagram", "Yes", "ready")}

    def test_long_prompt_is_excerpted(self):
        prompt = "x" * 200
        details = fallback_flowchart(prompt, "concise").nodes[0].details
        assert details == "x" * 117 + "..."
        assert len(details) == 120

    def test_short_prompt_is_kept_verbatim(self):
        assert fallback_flowchart("Approve expenses", "concise").nodes[0].details == "Approve expenses"

    def test_audience_and_detail_notes(self):
        document = fallback_flowchart("Approve expenses", "detailed", "finance team")
        assert document.nodes[0].notes == "Audience: finance team"
        assert document.nodes[1].notes == "Detail level: detailed"

    def test_no_audience_leaves_notes_empty(self):
        assert fallback_flowchart("Approve expenses", "balanced").nodes[0].notes == ""

    def test_palette_follows_prompt_keywords(self):
        prompt = "Hospital discharge checklist"
        assert fallback_flowchart(prompt, "balanced").palette == pick_palette_from_prompt(prompt)
        assert fallback_flowchart("Release a build", "balanced").palette == DEFAULT_PALETTE

    def test_source_prompt_is_recorded(self):
        assert fallback_flowchart("Release a build", "balanced").source_prompt == "Release a build"


class TestRefinedFallback:
    def test_keeps_structure_and_notes_refinement(self, canonical_flowchart):
        refined = refined_fallback(canonical_flowchart, "add a refund branch")
        assert refined.node_ids() == canonical_flowchart.node_ids()
        assert refined.summary.endswith("Refinement applied: add a refund branch")
        assert refined.rationale != canonical_flowchart.rationale
        assert refined.suggestions[-1] == REFINE_RETRY_SUGGESTION

    def test_does_not_mutate_current(self, canonical_flowchart):
        before = canonical_flowchart.to_dict()
        refined_fallback(canonical_flowchart, "rename steps")
        assert canonical_flowchart.to_dict() == before

    def test_suggestions_stay_within_limit(self, raw_factory):
        from flowsketch.flowchart.repair import repair_flowchart

        raw = raw_factory(suggestions=[f"Suggestion {i}" for i in range(8)])
        refined = refined_fallback(repair_flowchart(raw, "p"), "tweak it")
        assert len(refined.suggestions) == 6


def test_refined_summary_is_capped(raw_factory):
    current = repair_flowchart(raw_factory(summary="s" * 990), "p")
    refined = refined_fallback(current, "Add a refund branch")
    assert len(refined.summary) == MAX_SUMMARY_LENGTH
    assert repair_existing_flowchart(refined.to_dict()).summary == refined.summary


def test_fallback_source_prompt_is_capped():
    document = fallback_flowchart("order process " * 400, "balanced")
    assert len(document.source_prompt) == MAX_SOURCE_PROMPT_LENGTH
    assert repair_existing_flowchart(document.to_dict()).source_prompt == document.source_prompt
