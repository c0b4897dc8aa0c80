"""Unit tests for the pydantic models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from snapforge.models import (
    Build,
    BuildState,
    BuildStatus,
    InvalidBuildTransitionError,
    PollOutcome,
    PollResult,
    ResourceDescriptor,
    ResourceManifest,
)


class TestResourceDescriptor:
    def test_frozen(self):
        resource = ResourceDescriptor(url="/a.css", sha="abc")
        with pytest.raises(ValidationError):
            resource.url = "/b.css"

    def test_inline_content_is_returned(self):
        resource = ResourceDescriptor(url="/", sha="abc", content=b"<html>", is_root=True)
        assert resource.read_content() == b"<html>"

    def test_local_content_is_read_from_disk(self, tmp_path: Path):
        path = tmp_path / "a.css"
        path.write_bytes(b"body{}")
        resource = ResourceDescriptor(url="/a.css", sha="abc", local_path=path)
        assert resource.read_content() == b"body{}"

    def test_no_content_source_raises(self):
        with pytest.raises(ValueError, match="neither content nor a local path"):
            ResourceDescriptor(url="/a.css", sha="abc").read_content()


class TestResourceManifest:
    def test_mapping_interface(self):
        a = ResourceDescriptor(url="/a.css", sha="aaa")
        b = ResourceDescriptor(url="/b.css", sha="bbb")
        manifest = ResourceManifest({"aaa": a, "bbb": b})

        assert len(manifest) == 2
        assert manifest["aaa"] is a
        assert manifest.get("zzz") is None
        assert list(manifest) == ["aaa", "bbb"]
        assert manifest.resources() == [a, b]

    def test_key_must_match_hash(self):
        with pytest.raises(ValueError, match="does not match"):
            ResourceManifest({"aaa": ResourceDescriptor(url="/a.css", sha="bbb")})

    def test_empty_by_default(self):
        assert len(ResourceManifest()) == 0


class TestBuildTransitions:
    def test_created_to_finalized(self):
        build = Build(id="123")
        finalizing = build.transition(BuildState.FINALIZING)
        finalized = finalizing.transition(BuildState.FINALIZED)

        assert build.state == BuildState.CREATED
        assert finalized.state == BuildState.FINALIZED

    def test_cannot_skip_finalizing(self):
        with pytest.raises(InvalidBuildTransitionError):
            Build(id="123").transition(BuildState.FINALIZED)

    def test_finalized_is_terminal(self):
        build = Build(id="123", state=BuildState.FINALIZED)
        with pytest.raises(InvalidBuildTransitionError, match="finalized"):
            build.transition(BuildState.FINALIZING)


class TestPollResult:
    @pytest.mark.parametrize(
        ("outcome", "passed"),
        [
            (PollOutcome.NO_DIFFS, True),
            (PollOutcome.DIFFS_FOUND, False),
            (PollOutcome.FAILED, False),
        ],
    )
    def test_passed_only_without_diffs(self, outcome: PollOutcome, passed: bool):
        result = PollResult(outcome=outcome, polls=1, status=BuildStatus(state="finished"))
        assert result.passed is passed
