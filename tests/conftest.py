"""Shared pytest fixtures for the fixer test suite."""

import pytest


# ---------------------------------------------------------------------------
# Settings fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path):
    """Return a Settings instance with code defaults and logs under tmp_path."""
    from config.settings import Settings
    return Settings(_env_file=None, log_dir=tmp_path / "logs")


@pytest.fixture(autouse=True)
def cached_settings(settings, monkeypatch):
    """Make get_settings() return the test settings instead of reading .env."""
    monkeypatch.setattr("config.settings._settings_instance", settings)
    return settings


# ---------------------------------------------------------------------------
# Telemetry
# ---------------------------------------------------------------------------

class RecordingTelemetry:
    """Collects every telemetry event for assertions."""

    def __init__(self):
        self.matches = []
        self.not_found = []
        self.applied = []
        self.failed = []
        self.warnings = []

    def on_match(self, snippet, match):
        self.matches.append((snippet, match))

    def on_not_found(self, snippet):
        self.not_found.append(snippet)

    def on_applied(self, chapter, fix):
        self.applied.append((chapter, fix))

    def on_failed(self, chapter, fix):
        self.failed.append((chapter, fix))

    def warn(self, key, message, *args):
        self.warnings.append((key, message % args if args else message))


@pytest.fixture
def telemetry():
    return RecordingTelemetry()


@pytest.fixture
def locator(settings, telemetry):
    from editor.locator import TextLocator
    return TextLocator(settings, telemetry)


@pytest.fixture
def applicator(settings, locator, telemetry):
    from editor.applicator import FixApplicator
    return FixApplicator(settings=settings, locator=locator, telemetry=telemetry)


# ---------------------------------------------------------------------------
# Sample records
# ---------------------------------------------------------------------------

@pytest.fixture
def chapter():
    """Return a small two-paragraph chapter."""
    from models.chapter import Chapter
    return Chapter(
        id="ch-1",
        number=1,
        title="Arrival",
        content="The cat sat on the mat.\n\nThe dog slept by the door.",
    )


@pytest.fixture
def chapters():
    """Return three consecutive chapters."""
    from models.chapter import Chapter
    return [
        Chapter(id="ch-1", number=1, content="Mara reached the harbour at dawn."),
        Chapter(id="ch-2", number=2, content="The ship was late. Nobody waited."),
        Chapter(id="ch-3", number=3, content="By noon the fog had lifted."),
    ]


@pytest.fixture
def make_fix():
    """Factory for replacement fixes owned by chapter 1 unless told otherwise."""
    from models.fix import Fix

    counter = {"n": 0}

    def _make(original_text="", fixed_text="", **kwargs):
        counter["n"] += 1
        kwargs.setdefault("id", f"fix-{counter['n']}")
        kwargs.setdefault("issue_id", f"issue-{counter['n']}")
        kwargs.setdefault("chapter_id", "ch-1")
        kwargs.setdefault("chapter_number", 1)
        return Fix(original_text=original_text, fixed_text=fixed_text, **kwargs)

    return _make
