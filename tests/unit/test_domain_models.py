"""
Unit tests for domain models.
"""

import pytest

from thumbd.domain.models import (
    Job,
    JobResult,
    RenditionResult,
    ThumbnailDescription,
    UploadResult,
)


class TestThumbnailDescription:
    """Test ThumbnailDescription model."""

    def test_create_valid_description(self):
        """Test creating valid description with defaults."""
        description = ThumbnailDescription(suffix="small", width=100, height=100)

        assert description.strategy == "bounded"
        assert description.format is None
        assert description.background == "black"

    def test_from_dict(self):
        description = ThumbnailDescription.from_dict({
            "suffix": "wide",
            "width": 320,
            "height": 180,
            "format": "png",
            "strategy": "fill",
            "quality": 70,
        })

        assert description == ThumbnailDescription(
            suffix="wide", width=320, height=180, format="png", strategy="fill", quality=70
        )

    def test_to_dict_omits_defaults(self):
        description = ThumbnailDescription(suffix="s", width=1, height=2)

        assert description.to_dict() == {"suffix": "s", "width": 1, "height": 2}

    def test_path_without_suffix(self):
        description = ThumbnailDescription(suffix="", width=10, height=10, path="custom/out.jpg")

        assert description.path == "custom/out.jpg"

    @pytest.mark.parametrize("kwargs", [
        {"suffix": "", "width": 10, "height": 10},
        {"suffix": "s", "width": 0, "height": 10},
        {"suffix": "s", "width": 10, "height": -5},
        {"suffix": "s", "width": "10", "height": 10},
        {"suffix": "s", "width": True, "height": 10},
        {"suffix": "s", "width": 10, "height": 10, "strategy": "stretch"},
        {"suffix": "s", "width": 10, "height": 10, "quality": 0},
    ])
    def test_validation(self, kwargs):
        """Test invalid descriptions are rejected."""
        with pytest.raises(ValueError):
            ThumbnailDescription(**kwargs)

    def test_from_dict_missing_dimension(self):
        with pytest.raises(ValueError, match="height"):
            ThumbnailDescription.from_dict({"suffix": "s", "width": 10})

    def test_is_immutable(self):
        description = ThumbnailDescription(suffix="s", width=10, height=10)

        with pytest.raises(AttributeError):
            description.width = 20


class TestJob:
    """Test Job model."""

    def test_from_dict_keeps_order(self):
        job = Job.from_dict({
            "original": "a/b.png",
            "descriptions": [
                {"suffix": "one", "width": 1, "height": 1},
                {"suffix": "two", "width": 2, "height": 2},
            ],
        })

        assert [d.suffix for d in job.descriptions] == ["one", "two"]

    def test_descriptions_default_to_empty(self):
        assert Job.from_dict({"original": "a.png"}).descriptions == ()

    def test_round_trip(self):
        data = {"original": "a.png", "descriptions": [{"suffix": "s", "width": 5, "height": 6}]}

        assert Job.from_dict(data).to_dict() == data

    @pytest.mark.parametrize("data", [
        [],
        {},
        {"original": ""},
        {"original": 42},
        {"original": "a.png", "descriptions": {"suffix": "s"}},
    ])
    def test_invalid_job(self, data):
        with pytest.raises(ValueError):
            Job.from_dict(data)


class TestResults:
    """Test result models."""

    def test_job_result_helpers(self):
        result = JobResult(
            success=False,
            original="a.png",
            renditions=[
                RenditionResult(success=True, key="a_s.jpg"),
                RenditionResult(success=False, key="a_l.jpg", stage="upload", error="denied"),
            ],
        )

        assert result.stored_keys == ["a_s.jpg"]
        assert [r.key for r in result.failures] == ["a_l.jpg"]

    def test_upload_result_defaults(self):
        result = UploadResult(success=True, bucket="b", key="k")

        assert result.size_bytes == 0
        assert result.error is None
