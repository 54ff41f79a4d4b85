"""Tests for record parsing and serialization."""

from datetime import datetime, timezone

import pytest


class TestFixFromDict:
    def test_camel_case_producer_record(self):
        from models.enums import FixKind, FixStatus, InsertionAnchor
        from models.serialization import fix_from_dict
        fix = fix_from_dict({
            "id": "f1",
            "issueId": "i1",
            "chapterId": "ch-2",
            "chapterNumber": 2,
            "fixType": "paragraph-structure",
            "originalText": "old",
            "fixedText": "new",
            "reason": "Split the run-on paragraph",
            "insertionLocation": "before-anchor-text",
            "isInsertion": True,
            "status": "approved",
        })
        assert fix.issue_id == "i1"
        assert fix.chapter_number == 2
        assert fix.kind == FixKind.PARAGRAPH_STRUCTURE
        assert fix.rationale == "Split the run-on paragraph"
        assert fix.insertion_anchor == InsertionAnchor.BEFORE
        assert fix.is_insertion is True
        assert fix.status == FixStatus.APPROVED

    def test_defaults(self):
        from models.enums import FixKind, FixStatus
        from models.serialization import fix_from_dict
        fix = fix_from_dict({"id": 7, "originalText": "a", "fixedText": "b"})
        assert fix.id == "7"
        assert fix.kind == FixKind.STYLE
        assert fix.status == FixStatus.PENDING
        assert fix.chapter_id is None

    def test_missing_id(self):
        from config.exceptions import RecordParseError
        from models.serialization import fix_from_dict
        with pytest.raises(RecordParseError):
            fix_from_dict({"originalText": "a"})

    def test_unknown_kind(self):
        from config.exceptions import RecordParseError
        from models.serialization import fix_from_dict
        with pytest.raises(RecordParseError, match="fix"):
            fix_from_dict({"id": "f", "fixType": "haiku"})

    def test_to_dict_round_values(self):
        from models.enums import FailureReason
        from models.fix import Fix
        from models.serialization import fix_to_dict
        data = fix_to_dict(Fix(id="f", failure_reason=FailureReason.NOT_FOUND))
        assert data["failure_reason"] == "not_found"
        assert data["kind"] == "style"
        assert data["applied_at"] is None


class TestChapterFromDict:
    def test_epoch_millis_timestamp(self):
        from models.serialization import chapter_from_dict
        chapter = chapter_from_dict({"id": "c", "number": 3, "content": "x", "updatedAt": 0})
        assert chapter.updated_at == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_iso_timestamp_and_snake_case(self):
        from models.serialization import chapter_from_dict
        chapter = chapter_from_dict({
            "id": "c", "chapter_number": "4", "updated_at": "2026-03-01T12:00:00+00:00",
        })
        assert chapter.number == 4
        assert chapter.updated_at.year == 2026
        assert chapter.content == ""

    def test_bad_number(self):
        from config.exceptions import RecordParseError
        from models.serialization import chapter_from_dict
        with pytest.raises(RecordParseError):
            chapter_from_dict({"id": "c", "number": "three"})


class TestIssueFromDict:
    def test_issue_record(self):
        from models.enums import FixKind, IssueSeverity
        from models.serialization import issue_from_dict
        issue = issue_from_dict({
            "id": "i1", "type": "grammar", "severity": "minor", "autoFixable": True, "chapterNumber": 1,
        })
        assert issue.kind == FixKind.GRAMMAR
        assert issue.severity == IssueSeverity.MINOR
        assert issue.auto_fixable is True


class TestBatchResultToDict:
    def test_structure(self, chapters):
        from models.results import BatchFixResult, TransitionReport
        from models.serialization import batch_result_to_dict
        result = BatchFixResult(
            chapters=chapters,
            transition_reports=[TransitionReport(True, 88.0, [], 1, 2)],
            modified_chapter_ids=["ch-1"],
        )
        data = batch_result_to_dict(result)
        assert [c["id"] for c in data["chapters"]] == ["ch-1", "ch-2", "ch-3"]
        assert data["transition_reports"][0]["score"] == 88.0
        assert data["modified_chapter_ids"] == ["ch-1"]
