"""
Tests pour MetadataEnricher - construction et enrichissement des entrees.

Couvre:
- La selection du meilleur candidat (plancher, popularite, distance)
- La certification US
- create_film (parsing, sonde, sous-titres)
- La resolution de l'ID TMDB et le remplissage des details
- La degradation non fatale (titre devine, champs vides)
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from cinesync.core.entities import Film, VolumeFile
from cinesync.core.errors import ExternalIdNotFoundError, ProviderUnavailableError
from cinesync.core.ports.api_clients import (
    CastMember,
    CountryReleases,
    Credits,
    CrewMember,
    FilmDetails,
    SearchResult,
)
from cinesync.core.value_objects import MediaInfo, Resolution, VideoTrack
from cinesync.services.enricher import (
    MetadataEnricher,
    select_best_candidate,
    us_classification,
)
from tests.fixtures.filesystem import touch

PHONE_BOOTH_DETAILS = FilmDetails(
    id=1817,
    title="Phone Booth",
    imdb_id="tt0183649",
    original_title="Phone Booth",
    release_date="2002-11-14",
    runtime=81,
    overview="A publicist picks up a ringing phone.",
    genres=("Thriller", "Crime"),
    production_countries=("US",),
)

PHONE_BOOTH_CREDITS = Credits(
    cast=(CastMember(id=72466, character="Stu Shepard"),),
    crew=(
        CrewMember(id=5575, job="Director", department="Directing"),
        CrewMember(id=6586, job="Screenplay", department="Writing"),
        CrewMember(id=6586, job="Story", department="Writing"),
        CrewMember(id=1234, job="Producer", department="Production"),
    ),
)


def _film(name: str = "Phone Booth", year: int = 2002) -> Film:
    return Film(
        guessed_name=name,
        guessed_year=year,
        volume_files=[VolumeFile(path=Path(f"/films/{name}.{year}.mkv"), volume_id="1")],
    )


@pytest.fixture
def enricher(
    mock_media_info_extractor: MagicMock,
    mock_provider: AsyncMock,
    mock_ratings: AsyncMock,
) -> MetadataEnricher:
    return MetadataEnricher(mock_media_info_extractor, mock_provider, mock_ratings)


# ============================================================================
# Selection du candidat
# ============================================================================


class TestSelectBestCandidate:
    """Tests pour select_best_candidate."""

    def test_empty_list(self) -> None:
        assert select_best_candidate("Phone Booth", []) is None

    def test_first_candidate_is_the_floor(self) -> None:
        """Le premier candidat est retenu meme sans popularite ni ressemblance."""
        first = SearchResult(id=1, title="Something Else", popularity=0.0)

        assert select_best_candidate("Phone Booth", [first]) is first

    def test_more_popular_close_candidate_replaces(self) -> None:
        first = SearchResult(id=1, title="Phone Boot", popularity=5.0)
        second = SearchResult(id=2, title="Phone Booth", popularity=10.0)

        assert select_best_candidate("Phone Booth", [first, second]) is second

    def test_order_matters(self) -> None:
        """Dans l'ordre inverse, le candidat le plus populaire reste en tete."""
        first = SearchResult(id=2, title="Phone Booth", popularity=10.0)
        second = SearchResult(id=1, title="Phone Boot", popularity=5.0)

        assert select_best_candidate("Phone Booth", [first, second]) is first

    def test_unrelated_first_candidate_kept_over_less_popular_match(self) -> None:
        first = SearchResult(id=1, title="Zzz", popularity=1.0)
        second = SearchResult(id=2, title="Phone Booth", popularity=0.5)

        assert select_best_candidate("Phone Booth", [first, second]) is first

    def test_distant_title_does_not_replace(self) -> None:
        """Distance 4 >= 11 // 3 : le candidat populaire est ignore."""
        first = SearchResult(id=1, title="Phone Booth", popularity=1.0)
        second = SearchResult(id=2, title="The Phone Booth", popularity=50.0)

        assert select_best_candidate("Phone Booth", [first, second]) is first

    def test_equal_popularity_keeps_first(self) -> None:
        first = SearchResult(id=1, title="Phone Booth", popularity=10.0)
        second = SearchResult(id=2, title="Phone Booth", popularity=10.0)

        assert select_best_candidate("Phone Booth", [first, second]) is first

    def test_distance_is_case_sensitive(self) -> None:
        """Pour un nom court, une casse differente suffit a rejeter le candidat."""
        first = SearchResult(id=1, title="Heat", popularity=1.0)
        second = SearchResult(id=2, title="HEAT", popularity=9.0)

        assert select_best_candidate("Heat", [first, second]) is first


class TestUsClassification:
    """Tests pour us_classification."""

    def test_first_certification_of_first_us_record(self) -> None:
        releases = [
            CountryReleases(country="FR", certifications=("12",)),
            CountryReleases(country="US", certifications=("R", "PG-13")),
            CountryReleases(country="US", certifications=("NC-17",)),
        ]

        assert us_classification(releases) == "R"

    def test_no_us_record(self) -> None:
        assert us_classification([CountryReleases(country="FR", certifications=("12",))]) == ""

    def test_us_record_without_release(self) -> None:
        assert us_classification([CountryReleases(country="US")]) == ""


# ============================================================================
# Construction et enrichissement
# ============================================================================


class TestCreateFilm:
    """Tests pour create_film."""

    @pytest.mark.asyncio
    async def test_builds_unenriched_entry(
        self, enricher: MetadataEnricher, tmp_path: Path
    ) -> None:
        video = touch(tmp_path / "Phone.Booth.2002.1080p.mkv")
        english = tmp_path / "Phone.Booth.2002.1080p.en.srt"
        other = tmp_path / "Other.srt"

        film = await enricher.create_film(video, "1", [english, other])

        assert film.guessed_name == "Phone Booth"
        assert film.guessed_year == 2002
        assert film.guessed_resolution == "1080p"
        assert film.tmdb_id is None
        assert len(film.volume_files) == 1
        assert film.volume_files[0].volume_id == "1"
        assert [s.language for s in film.volume_files[0].subtitles] == ["en"]

    @pytest.mark.asyncio
    async def test_resolution_falls_back_to_probe(
        self,
        enricher: MetadataEnricher,
        mock_media_info_extractor: MagicMock,
        tmp_path: Path,
    ) -> None:
        media_info = MediaInfo(
            video_tracks=(VideoTrack(resolution=Resolution(width=1280, height=536)),)
        )
        mock_media_info_extractor.extract.return_value = media_info

        film = await enricher.create_film(touch(tmp_path / "Heat.1995.mkv"), "1", [])

        assert film.guessed_resolution == "720p"
        assert film.volume_files[0].media_info == media_info

    @pytest.mark.asyncio
    async def test_probe_failure_is_not_fatal(
        self,
        enricher: MetadataEnricher,
        mock_media_info_extractor: MagicMock,
        tmp_path: Path,
    ) -> None:
        mock_media_info_extractor.extract.side_effect = RuntimeError("sonde en panne")

        film = await enricher.create_film(touch(tmp_path / "Heat.1995.mkv"), "1", [])

        assert film.volume_files[0].media_info is None


class TestResolveExternalId:
    """Tests pour resolve_external_id."""

    @pytest.mark.asyncio
    async def test_sets_tmdb_id(self, enricher: MetadataEnricher, mock_provider: AsyncMock) -> None:
        mock_provider.search.return_value = [
            SearchResult(id=1817, title="Phone Booth", popularity=21.8),
        ]
        film = _film()

        assert await enricher.resolve_external_id(film) == 1817
        assert film.tmdb_id == 1817
        mock_provider.search.assert_awaited_once_with("Phone Booth", year=2002)

    @pytest.mark.asyncio
    async def test_zero_year_is_not_sent(
        self, enricher: MetadataEnricher, mock_provider: AsyncMock
    ) -> None:
        mock_provider.search.return_value = [SearchResult(id=603, title="The Matrix")]

        await enricher.resolve_external_id(_film("The Matrix mkv", 0))

        mock_provider.search.assert_awaited_once_with("The Matrix mkv", year=None)

    @pytest.mark.asyncio
    async def test_no_candidate_raises(self, enricher: MetadataEnricher) -> None:
        with pytest.raises(ExternalIdNotFoundError):
            await enricher.resolve_external_id(_film())

    @pytest.mark.asyncio
    async def test_without_provider_raises_unavailable(
        self, mock_media_info_extractor: MagicMock
    ) -> None:
        enricher = MetadataEnricher(mock_media_info_extractor)

        with pytest.raises(ProviderUnavailableError):
            await enricher.resolve_external_id(_film())


class TestFillDetails:
    """Tests pour fill_details."""

    @pytest.fixture(autouse=True)
    def provider_answers(self, mock_provider: AsyncMock, mock_ratings: AsyncMock) -> None:
        mock_provider.get_details.return_value = PHONE_BOOTH_DETAILS
        mock_provider.get_credits.return_value = PHONE_BOOTH_CREDITS
        mock_provider.get_release_dates.return_value = [
            CountryReleases(country="US", certifications=("R",)),
        ]
        mock_ratings.get_imdb_rating.return_value = 7.1
        mock_ratings.get_letterboxd_rating.return_value = 3.3

    @pytest.mark.asyncio
    async def test_fills_every_field(self, enricher: MetadataEnricher) -> None:
        film = _film()
        film.tmdb_id = 1817

        await enricher.fill_details(film)

        assert film.title == "Phone Booth"
        assert film.imdb_id == "tt0183649"
        assert film.year == 2002
        assert film.runtime == 81
        assert film.genres == ["Thriller", "Crime"]
        assert film.countries == ["US"]
        assert film.classification == "R"
        assert film.directors == [5575]
        assert film.writers == [6586]
        assert [(c.name, c.person_tmdb_id) for c in film.cast] == [("Stu Shepard", 72466)]
        assert film.imdb_rating == 7.1
        assert film.letterboxd_rating == 3.3

    @pytest.mark.asyncio
    async def test_unknown_id_raises(
        self, enricher: MetadataEnricher, mock_provider: AsyncMock
    ) -> None:
        mock_provider.get_details.return_value = None
        film = _film()
        film.tmdb_id = 999999

        with pytest.raises(ExternalIdNotFoundError):
            await enricher.fill_details(film)

    @pytest.mark.asyncio
    async def test_credits_failure_leaves_cast_empty(
        self, enricher: MetadataEnricher, mock_provider: AsyncMock
    ) -> None:
        mock_provider.get_credits.side_effect = ProviderUnavailableError("tmdb", "timeout")
        film = _film()
        film.tmdb_id = 1817

        await enricher.fill_details(film)

        assert film.title == "Phone Booth"
        assert film.cast == []
        assert film.directors == []
        assert film.classification == "R"

    @pytest.mark.asyncio
    async def test_ratings_failure_is_not_fatal(
        self, enricher: MetadataEnricher, mock_ratings: AsyncMock
    ) -> None:
        mock_ratings.get_letterboxd_rating.side_effect = ProviderUnavailableError(
            "letterboxd", "HTTP 503"
        )
        film = _film()
        film.tmdb_id = 1817

        await enricher.fill_details(film)

        assert film.imdb_rating == 7.1
        assert film.letterboxd_rating is None


class TestEnrich:
    """Tests pour enrich (jamais en echec)."""

    @pytest.mark.asyncio
    async def test_not_found_keeps_guessed_title(
        self, enricher: MetadataEnricher, mock_provider: AsyncMock
    ) -> None:
        film = await enricher.enrich(_film("Film Maison", 2019))

        assert film.title == "Film Maison"
        assert film.tmdb_id is None
        mock_provider.get_details.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_provider_unavailable_keeps_guessed_title(
        self, enricher: MetadataEnricher, mock_provider: AsyncMock
    ) -> None:
        mock_provider.search.side_effect = ProviderUnavailableError("tmdb", "HTTP 503")

        film = await enricher.enrich(_film())

        assert film.title == "Phone Booth"

    @pytest.mark.asyncio
    async def test_already_resolved_skips_search(
        self, enricher: MetadataEnricher, mock_provider: AsyncMock
    ) -> None:
        mock_provider.get_details.return_value = PHONE_BOOTH_DETAILS
        mock_provider.get_credits.return_value = Credits()
        mock_provider.get_release_dates.return_value = []
        film = _film("Phone Booth mkv", 0)
        film.tmdb_id = 1817

        await enricher.enrich(film)

        mock_provider.search.assert_not_awaited()
        assert film.title == "Phone Booth"

    @pytest.mark.asyncio
    async def test_details_failure_keeps_guessed_title(
        self, enricher: MetadataEnricher, mock_provider: AsyncMock
    ) -> None:
        mock_provider.search.return_value = [SearchResult(id=1817, title="Phone Booth")]
        mock_provider.get_details.side_effect = ProviderUnavailableError("tmdb", "timeout")

        film = await enricher.enrich(_film())

        assert film.tmdb_id == 1817
        assert film.title == "Phone Booth"
