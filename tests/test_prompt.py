"""Tests for router prompt synthesis"""

from block_engine import CandidateDestination, build_prompt


def _candidates():
    return [
        CandidateDestination(
            id="support-agent",
            type="agent",
            title="Support",
            description="Answers customer questions",
            category="blocks",
            config={"systemPrompt": "Handle refunds and billing issues", "model": "claude-sonnet-4-5"},
        ),
        CandidateDestination(
            id="db-writer",
            type="mysql",
            title="Save order",
            config={"table": "orders", "operation": "insert"},
            current_state={"lastRun": "ok"},
        ),
    ]


class TestBuildPrompt:

    def test_prompt_is_byte_identical_for_identical_inputs(self):
        """
        Given: the same instruction and candidates
        When: building the prompt twice, with config keys in a different insertion order
        Then: both prompts are identical
        """
        first = build_prompt("I want my money back", _candidates())
        reordered = _candidates()
        reordered[0].config = {"model": "claude-sonnet-4-5", "systemPrompt": "Handle refunds and billing issues"}
        second = build_prompt("I want my money back", reordered)

        assert first == second

    def test_candidates_are_described_in_order(self):
        prompt = build_prompt("route me", _candidates())

        assert prompt.index("ID: support-agent") < prompt.index("ID: db-writer")
        assert "Type: mysql" in prompt
        assert "Title: Save order" in prompt
        assert "Description: Answers customer questions" in prompt
        assert "Category: blocks" in prompt
        assert '"lastRun": "ok"' in prompt

    def test_system_prompt_of_candidate_is_included_verbatim(self):
        prompt = build_prompt("route me", _candidates())

        assert "System Prompt: Handle refunds and billing issues" in prompt

    def test_instruction_follows_request_heading_and_format_directive_comes_last(self):
        prompt = build_prompt("Customer asks: where is my parcel?", _candidates())

        request_at = prompt.index("## Routing Request\nCustomer asks: where is my parcel?")
        format_at = prompt.index("## Response Format")
        assert prompt.index("## Available Target Blocks") < request_at < format_at
        assert prompt.rstrip().endswith("beyond the ID's own characters.")
        assert "exactly ONE destination" in prompt

    def test_candidate_without_metadata(self):
        prompt = build_prompt("go", [CandidateDestination(id="A")])

        assert "ID: A\nType: \nTitle: \nDescription: \n---" in prompt
