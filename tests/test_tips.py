#!/usr/bin/env python3
"""Tests for maintenance tips."""

from garage.tips import GENERAL_TIPS, TIPS_BY_KIND, merge_tips, tips_for_kind


class TestTipsForKind:
    def test_known_kinds(self):
        for kind in ("carro", "esportivo", "caminhao"):
            assert tips_for_kind(kind) == TIPS_BY_KIND[kind]

    def test_case_insensitive(self):
        assert tips_for_kind("CAMINHAO") == TIPS_BY_KIND["caminhao"]

    def test_unknown_kind(self):
        assert tips_for_kind("moto") is None

    def test_tips_have_id_and_text(self):
        for tip in GENERAL_TIPS + [t for tips in TIPS_BY_KIND.values() for t in tips]:
            assert isinstance(tip["id"], int)
            assert tip["dica"]


class TestMergeTips:
    def test_concatenates_in_order(self):
        merged = merge_tips(GENERAL_TIPS, TIPS_BY_KIND["carro"])
        assert [t["id"] for t in merged] == [1, 2, 10]

    def test_one_entry_per_id(self):
        merged = merge_tips(
            [{"id": 1, "dica": "a"}, {"id": 2, "dica": "b"}],
            [{"id": 1, "dica": "c"}],
        )
        assert merged == [{"id": 1, "dica": "c"}, {"id": 2, "dica": "b"}]

    def test_empty(self):
        assert merge_tips() == []
        assert merge_tips([], []) == []
