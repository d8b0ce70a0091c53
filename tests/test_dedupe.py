"""
Tests for deduplication.

The phone grouping decides which rows survive; the name+phone and name
groupings are informational only.
"""

from phone_cleaner.models.phone import NormalizedRow, RowStatus
from phone_cleaner.services.dedupe import build_groups, dedupe_rows, ensure_name_normalized


def _row(index, normalized, name=""):
    row = NormalizedRow(
        index=index,
        raw=f"{name} {normalized}",
        name=name,
        phone_raw=normalized,
        status=RowStatus.VALID,
        normalized=normalized,
    )
    return ensure_name_normalized([row])[0]


class TestEnsureNameNormalized:
    def test_sets_casefolded_name(self):
        rows = [NormalizedRow(index=1, raw="", name="  AHMED  Ali", phone_raw="", status=RowStatus.VALID)]
        assert ensure_name_normalized(rows)[0].name_normalized == "ahmed ali"

    def test_missing_name(self):
        rows = [NormalizedRow(index=1, raw="", name="", phone_raw="", status=RowStatus.VALID)]
        assert ensure_name_normalized(rows)[0].name_normalized == ""

    def test_input_untouched(self):
        rows = [NormalizedRow(index=1, raw="", name="Ahmed", phone_raw="", status=RowStatus.VALID)]
        ensure_name_normalized(rows)
        assert rows[0].name_normalized is None


class TestDedupeByPhone:
    def test_lowest_index_kept(self):
        rows = [_row(3, "+966551234567", "A"), _row(1, "+966551234567", "B"), _row(2, "+966551234567", "C")]
        result = dedupe_rows(rows, detect_name_duplicates=False)

        assert [r.index for r in result.unique] == [1]
        assert sorted(r.index for r in result.duplicates) == [2, 3]
        group = result.duplicate_groups_by_phone[0]
        assert group.kept_index == 1
        assert group.key == "+966551234567"
        assert group.canonical_phone == "+966551234567"
        assert [r.index for r in group.items] == [1, 2, 3]

    def test_statuses_and_kept_flags(self):
        rows = [_row(1, "+966551234567"), _row(2, "+966551234567"), _row(3, "+967777123456")]
        result = dedupe_rows(rows, detect_name_duplicates=False)

        assert result.classified[1].status == RowStatus.VALID
        assert result.classified[1].is_kept is True
        assert result.classified[2].status == RowStatus.DUPLICATE
        assert result.classified[2].is_kept is False
        assert result.classified[3].is_kept is True

    def test_singletons_produce_no_group(self):
        rows = [_row(1, "+966551234567"), _row(2, "+967777123456")]
        result = dedupe_rows(rows, detect_name_duplicates=False)
        assert len(result.unique) == 2
        assert result.duplicates == []
        assert result.duplicate_groups_by_phone == []

    def test_group_ids_are_sequential(self):
        rows = [
            _row(1, "+966551234567"),
            _row(2, "+967777123456"),
            _row(3, "+966551234567"),
            _row(4, "+967777123456"),
        ]
        result = dedupe_rows(rows, detect_name_duplicates=False)
        assert [g.id for g in result.duplicate_groups_by_phone] == ["phone_1", "phone_2"]

    def test_every_normalized_value_kept_exactly_once(self):
        rows = [_row(i, f"+96655123456{i % 3}") for i in range(1, 10)]
        result = dedupe_rows(rows, detect_name_duplicates=False)

        kept = [r.normalized for r in result.unique]
        assert len(kept) == len(set(kept)) == 3
        assert len(result.unique) + len(result.duplicates) == len(rows)
        for group in result.duplicate_groups_by_phone:
            assert group.kept_index == min(r.index for r in group.items)

    def test_input_rows_not_mutated(self):
        rows = [_row(1, "+966551234567"), _row(2, "+966551234567")]
        dedupe_rows(rows, detect_name_duplicates=False)
        assert rows[1].status == RowStatus.VALID
        assert rows[1].is_kept is None


class TestInformationalGroups:
    def test_name_phone_groups(self):
        rows = [
            _row(1, "+966551234567", "Ahmed"),
            _row(2, "+966551234567", "AHMED"),
            _row(3, "+966551234567", "Sara"),
        ]
        result = dedupe_rows(rows, detect_name_duplicates=False)
        assert len(result.duplicate_groups_by_name_phone) == 1
        group = result.duplicate_groups_by_name_phone[0]
        assert group.key == "+966551234567__ahmed"
        assert [r.index for r in group.items] == [1, 2]
        assert group.id == "group_1"

    def test_rows_without_name_not_grouped_by_name(self):
        rows = [_row(1, "+966551234567"), _row(2, "+966551234567")]
        result = dedupe_rows(rows, detect_name_duplicates=True)
        assert result.duplicate_groups_by_name_phone == []
        assert result.duplicate_groups_by_name == []

    def test_name_groups_only_when_enabled(self):
        rows = [_row(1, "+966551234567", "Ahmed"), _row(2, "+967777123456", "ahmed")]

        assert dedupe_rows(rows, detect_name_duplicates=False).duplicate_groups_by_name == []

        groups = dedupe_rows(rows, detect_name_duplicates=True).duplicate_groups_by_name
        assert len(groups) == 1
        assert groups[0].key == "ahmed"
        assert groups[0].id == "name_1"
        assert groups[0].kept_index == 1

    def test_name_groups_do_not_demote(self):
        rows = [_row(1, "+966551234567", "Ahmed"), _row(2, "+967777123456", "Ahmed")]
        result = dedupe_rows(rows, detect_name_duplicates=True)
        assert len(result.unique) == 2
        assert result.duplicates == []


class TestBuildGroups:
    def test_rows_without_key_skipped(self):
        rows = [_row(1, "+966551234567"), _row(2, "+966551234567")]
        assert build_groups(rows, lambda r: None, "x") == []

    def test_items_sorted_by_index(self):
        rows = [_row(5, "+966551234567"), _row(2, "+966551234567")]
        group = build_groups(rows, lambda r: r.normalized, "x")[0]
        assert [r.index for r in group.items] == [2, 5]
        assert group.kept_index == 2
        assert group.id == "x_1"
