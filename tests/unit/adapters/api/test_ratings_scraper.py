"""
Tests unitaires pour RatingsScraper.

Les pages IMDb et Letterboxd sont simulees avec respx ; les tests
verifient l'extraction par selecteur CSS et la traduction des erreurs.
"""

import httpx
import pytest
import respx

from cinesync.adapters.api.ratings_scraper import RatingsScraper, _parse_rating
from cinesync.core.errors import ProviderUnavailableError

IMDB_PAGE = """
<html><body>
  <div data-testid="hero-rating-bar__aggregate-rating__score"><span>7,1</span><span>/10</span></div>
</body></html>
"""

LETTERBOXD_SEARCH_PAGE = """
<html><body><div id="content"><div><div><section><ul>
  <li><div data-target-link="/film/phone-booth/"></div></li>
  <li><div data-target-link="/film/other/"></div></li>
</ul></section></div></div></div></body></html>
"""

LETTERBOXD_HISTOGRAM = """
<section><a class="tooltip display-rating" href="/film/phone-booth/ratings/">3.3</a></section>
"""

LETTERBOXD_FILM_PAGE = """
<html><body>
  <a href="https://www.themoviedb.org/movie/1817/" data-track-action="TMDb">TMDb</a>
</body></html>
"""


@pytest.fixture
def scraper() -> RatingsScraper:
    return RatingsScraper(timeout=5.0)


class TestParseRating:
    """Tests pour _parse_rating."""

    def test_parses_comma_decimal(self) -> None:
        assert _parse_rating("7,8") == 7.8

    def test_parses_dot_decimal_with_suffix(self) -> None:
        assert _parse_rating("3.9 out of 5") == 3.9

    def test_empty_returns_none(self) -> None:
        assert _parse_rating("") is None
        assert _parse_rating(None) is None
        assert _parse_rating("N/A") is None


class TestImdbRating:
    """Tests pour get_imdb_rating."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_reads_rating_from_title_page(self, scraper: RatingsScraper) -> None:
        """La note est lue via le selecteur de secours."""
        respx.get("https://www.imdb.com/title/tt0183649/").mock(
            return_value=httpx.Response(200, text=IMDB_PAGE)
        )

        assert await scraper.get_imdb_rating("tt0183649") == 7.1

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_element_returns_none(self, scraper: RatingsScraper) -> None:
        respx.get("https://www.imdb.com/title/tt0183649/").mock(
            return_value=httpx.Response(200, text="<html></html>")
        )

        assert await scraper.get_imdb_rating("tt0183649") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_raises_unavailable(self, scraper: RatingsScraper) -> None:
        respx.get("https://www.imdb.com/title/tt0183649/").mock(
            return_value=httpx.Response(500)
        )

        with pytest.raises(ProviderUnavailableError) as exc_info:
            await scraper.get_imdb_rating("tt0183649")
        assert exc_info.value.source == "imdb"


class TestLetterboxdRating:
    """Tests pour get_letterboxd_rating."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_then_histogram(self, scraper: RatingsScraper) -> None:
        """Le premier resultat de recherche mene au fragment d'histogramme."""
        respx.get("https://letterboxd.com/search/films/tt0183649/").mock(
            return_value=httpx.Response(200, text=LETTERBOXD_SEARCH_PAGE)
        )
        histogram = respx.get(
            "https://letterboxd.com/csi/film/phone-booth/rating-histogram/"
        ).mock(return_value=httpx.Response(200, text=LETTERBOXD_HISTOGRAM))

        assert await scraper.get_letterboxd_rating("tt0183649") == 3.3
        assert histogram.called

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_search_result_returns_none(self, scraper: RatingsScraper) -> None:
        respx.get("https://letterboxd.com/search/films/tt0000000/").mock(
            return_value=httpx.Response(200, text="<html></html>")
        )

        assert await scraper.get_letterboxd_rating("tt0000000") is None


class TestTmdbIdFromLetterboxd:
    """Tests pour get_tmdb_id_from_letterboxd."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_reads_tmdb_anchor(self, scraper: RatingsScraper) -> None:
        respx.get("https://letterboxd.com/film/phone-booth/").mock(
            return_value=httpx.Response(200, text=LETTERBOXD_FILM_PAGE)
        )

        tmdb_id = await scraper.get_tmdb_id_from_letterboxd(
            "https://letterboxd.com/film/phone-booth/"
        )

        assert tmdb_id == 1817

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_anchor_returns_none(self, scraper: RatingsScraper) -> None:
        respx.get("https://letterboxd.com/film/unknown/").mock(
            return_value=httpx.Response(200, text="<html></html>")
        )

        assert await scraper.get_tmdb_id_from_letterboxd(
            "https://letterboxd.com/film/unknown/"
        ) is None
