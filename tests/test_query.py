# =============================================================================
# tests/test_query.py - Query/Filter Layer Tests
# =============================================================================
# This module contains tests for:
# - Type filtering
# - Free-text search over names and (only with metadata) AI fields
# - Sorting by name and creation time
# - Offset/limit pagination and totals
# =============================================================================

from datetime import timedelta

import pytest

from core.models import AIAnalysis, ReconciledFile
from core.services.query_service import (
    FileQuery,
    apply_query,
    filter_by_type,
    matches_search,
    paginate,
    sort_files,
)
from tests.conftest import NOW


def make_file(
    key: str,
    name: str | None = None,
    file_type: str = "image",
    minutes_old: int = 0,
    analysis: AIAnalysis | None = None,
    has_metadata: bool | None = None,
) -> ReconciledFile:
    if has_metadata is None:
        has_metadata = analysis is not None
    return ReconciledFile(
        id=key,
        name=name or key,
        file_name=key,
        file_type=file_type,
        size=1,
        content_type=f"{file_type}/x",
        status="completed" if has_metadata else "uploaded",
        created_at=NOW - timedelta(minutes=minutes_old),
        download_url=f"https://signed/{key}",
        public_url=f"https://public/{key}",
        has_metadata=has_metadata,
        ai_analysis=analysis,
    )


@pytest.fixture
def library():
    return [
        make_file("k1", "sunset.jpg", "image", minutes_old=30),
        make_file("k2", "x.jpg", "image", minutes_old=20, analysis=AIAnalysis(tags=["Sunset"])),
        make_file("k3", "talk.mp3", "audio", minutes_old=10,
                  analysis=AIAnalysis(transcript="Welcome to the quarterly review")),
        make_file("k4", "clip.mp4", "video", minutes_old=5,
                  analysis=AIAnalysis(topics=["cooking"], extracted_text="RECIPE")),
    ]


# =============================================================================
# Type Filter
# =============================================================================

class TestFilterByType:
    def test_exact_kind(self, library):
        assert [f.id for f in filter_by_type(library, "image")] == ["k1", "k2"]

    @pytest.mark.parametrize("value", [None, "", "all"])
    def test_passthrough(self, library, value):
        assert filter_by_type(library, value) == library

    def test_unknown_kind_matches_nothing(self, library):
        assert filter_by_type(library, "document") == []


# =============================================================================
# Search
# =============================================================================

class TestSearch:
    def test_name_match_without_metadata(self, library):
        assert matches_search(library[0], "sunset")

    def test_tag_match_with_metadata(self, library):
        assert matches_search(library[1], "sunset")

    def test_tag_ignored_without_metadata(self):
        file = make_file("k", "x.jpg", analysis=AIAnalysis(tags=["sunset"]), has_metadata=False)
        assert not matches_search(file, "sunset")

    def test_case_insensitive(self, library):
        assert matches_search(library[0], "SUNSET")

    def test_transcript(self, library):
        assert matches_search(library[2], "quarterly")

    def test_topics_and_extracted_text(self, library):
        assert matches_search(library[3], "cook")
        assert matches_search(library[3], "recipe")

    def test_no_match(self, library):
        assert not any(matches_search(f, "zebra") for f in library)


# =============================================================================
# Sort & Paginate
# =============================================================================

class TestSort:
    def test_default_newest_first(self, library):
        assert [f.id for f in sort_files(library)] == ["k4", "k3", "k2", "k1"]

    def test_oldest_first(self, library):
        assert [f.id for f in sort_files(library, "createdAt", "asc")] == ["k1", "k2", "k3", "k4"]

    def test_by_name_ignores_case(self):
        files = [make_file("a", "beta.png"), make_file("b", "Alpha.png"), make_file("c", "gamma.png")]
        assert [f.name for f in sort_files(files, "name", "asc")] == ["Alpha.png", "beta.png", "gamma.png"]

    def test_by_name_descending(self):
        files = [make_file("a", "beta.png"), make_file("b", "Alpha.png")]
        assert [f.name for f in sort_files(files, "name", "desc")] == ["beta.png", "Alpha.png"]


class TestPaginate:
    def test_slice(self, library):
        assert [f.id for f in paginate(library, 1, 2)] == ["k2", "k3"]

    def test_past_end(self, library):
        assert paginate(library, 10, 5) == []


# =============================================================================
# Full Pipeline
# =============================================================================

class TestApplyQuery:
    def test_defaults(self, library):
        page, total = apply_query(library, FileQuery())

        assert total == 4
        assert [f.id for f in page] == ["k4", "k3", "k2", "k1"]

    def test_second_of_three(self, library):
        query = FileQuery(file_type="all", search_text="", limit=1, offset=1)
        three = library[:3]

        page, total = apply_query(three, query)

        assert total == 3
        assert [f.id for f in page] == ["k2"]

    def test_total_counts_before_pagination(self, library):
        page, total = apply_query(library, FileQuery(search_text="sunset", limit=1))

        assert total == 2
        assert len(page) == 1

    def test_filter_then_search(self, library):
        page, total = apply_query(library, FileQuery(file_type="audio", search_text="sunset"))

        assert total == 0
        assert page == []

    def test_search_then_sort_by_name(self, library):
        page, _ = apply_query(library, FileQuery(search_text="sunset", sort_by="name", sort_order="asc"))
        assert [f.name for f in page] == ["sunset.jpg", "x.jpg"]
