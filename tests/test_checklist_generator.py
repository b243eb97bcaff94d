import json
from unittest.mock import AsyncMock, patch

import pytest

from conftest import llm_reply
from core.checklist_generator import (
    SIMULATED_POOLS,
    build_generate_prompt,
    clamp_prompt_count,
    generate_with_llm,
    parse_generated_items,
    simulate_generation,
)


class TestPrompt:

    @pytest.mark.parametrize("raw,expected", [(None, 6), (1, 3), (8, 8), (40, 12)])
    def test_count_is_clamped(self, raw, expected):
        assert clamp_prompt_count(raw) == expected

    def test_context_line_only_when_given(self):
        template = "{document_type}|{context}|{count}"
        assert build_generate_prompt(template, "Invoice", None, 5) == "Invoice||5"
        assert (
            build_generate_prompt(template, "Invoice", "EU VAT invoices", 5)
            == "Invoice|Additional context: EU VAT invoices\n\n|5"
        )


class TestParse:

    def test_strict_array(self):
        raw = json.dumps(
            [
                {"description": "Parties identified", "criteria": "Both legal names"},
                {"description": "Signatures", "criteria": "Signed by all parties"},
            ]
        )
        items = parse_generated_items(raw)
        assert [i.description for i in items] == ["Parties identified", "Signatures"]

    def test_embedded_array(self):
        raw = 'Here you go:\n[{"description": "Due date", "criteria": "Payment due date stated"}]\nThanks'
        items = parse_generated_items(raw)
        assert len(items) == 1
        assert items[0].criteria == "Payment due date stated"

    def test_incomplete_entries_are_skipped(self):
        raw = json.dumps([{"description": "Only a title"}, {"description": "Ok", "criteria": "Fine"}, "junk"])
        items = parse_generated_items(raw)
        assert [i.description for i in items] == ["Ok"]

    def test_line_pairs(self):
        raw = "- Invoice number present\nCriteria: A unique invoice number is shown\n- Totals\ncriteria - Grand total matches line items"
        items = parse_generated_items(raw)
        assert [(i.description, i.criteria) for i in items] == [
            ("Invoice number present", "A unique invoice number is shown"),
            ("Totals", "Grand total matches line items"),
        ]

    def test_nothing_usable(self):
        assert parse_generated_items("I cannot help with that.") == []


class TestSimulated:

    def test_known_type_pool(self):
        items = simulate_generation("Contract", 4)
        assert items == SIMULATED_POOLS["Contract"][:4]

    def test_unknown_type_falls_back_to_resume(self):
        assert simulate_generation("Passport", 3) == SIMULATED_POOLS["Resume"][:3]

    def test_pool_cycles_and_count_is_bounded(self):
        assert len(simulate_generation("Invoice", 1)) == 3
        items = simulate_generation("Invoice", 20)
        assert len(items) == 12
        assert items[6] == items[0]


class TestLLM:

    @pytest.mark.asyncio
    async def test_generate_parses_reply(self):
        reply = llm_reply('[{"description": "Education", "criteria": "Degree listed"}]')
        chat = AsyncMock(return_value=reply)
        with patch("core.checklist_generator.chat_completion", new=chat):
            items = await generate_with_llm(
                token="dapi123456789",
                api_url="https://llm.test/invocations",
                prompt="p",
                max_tokens=1500,
                temperature=0.2,
                timeout=25,
            )
        assert items[0].description == "Education"
        assert chat.await_args.kwargs["op"] == "ai.generate"
