"""Tests for the fix run summary."""


def _failed(fix_id, reason="not_found", detail=None, chapter_number=1):
    from models.enums import FailureReason, FixKind
    from models.fix import Fix
    return Fix(
        id=fix_id,
        chapter_number=chapter_number,
        kind=FixKind.GRAMMAR,
        original_text="a",
        fixed_text="b",
        failure_reason=FailureReason(reason),
        failure_detail=detail,
    )


class TestFormatFixSummary:
    def test_nothing_happened(self):
        from models.results import BatchFixResult
        from workflow.summary import format_fix_summary
        summary = format_fix_summary(0, BatchFixResult())
        assert summary.summary == "0 issue(s) found."
        assert summary.details is None

    def test_applied_counts(self):
        from models.fix import Fix
        from models.results import BatchFixResult
        from workflow.summary import format_fix_summary
        result = BatchFixResult(
            applied_fixes=[Fix(id="a"), Fix(id="b")],
            modified_chapter_ids=["ch-1"],
        )
        summary = format_fix_summary(5, result, auto_fixed_count=1)
        assert "5 issue(s) found." in summary.summary
        assert "3 fix(es) applied (1 during review, 2 in batch)." in summary.summary
        assert "1 chapter(s) updated." in summary.summary

    def test_failure_details_list_reasons(self):
        from models.results import BatchFixResult
        from workflow.summary import format_fix_summary
        result = BatchFixResult(failed_fixes=[_failed("x", detail="Could not find original text")])
        summary = format_fix_summary(1, result)
        assert "1 fix(es) failed to apply." in summary.summary
        assert "Chapter 1, grammar: Could not find original text" in summary.details

    def test_reason_used_when_no_detail(self):
        from models.results import BatchFixResult
        from workflow.summary import format_fix_summary
        result = BatchFixResult(failed_fixes=[_failed("x", reason="low_confidence_match")])
        assert "low_confidence_match" in format_fix_summary(1, result).details

    def test_fix_failing_twice_counted_once(self):
        from models.results import BatchFixResult
        from workflow.summary import format_fix_summary
        earlier = [_failed("x"), _failed("y")]
        result = BatchFixResult(failed_fixes=[_failed("x"), _failed("z")])
        summary = format_fix_summary(3, result, previously_failed=earlier)
        assert "3 fix(es) failed to apply." in summary.summary
        assert "Failed during review (2):" in summary.details
        assert "Failed in batch (1):" in summary.details
        assert "1 fix(es) failed both" in summary.details

    def test_skipped_fixes_mentioned(self):
        from models.fix import Fix
        from models.results import BatchFixResult
        from workflow.summary import format_fix_summary
        summary = format_fix_summary(2, BatchFixResult(skipped_fixes=[Fix(id="s")]))
        assert "1 fix(es) skipped after cancellation." in summary.summary
