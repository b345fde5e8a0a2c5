"""Test similar-movie resolution."""

import pytest


def ids(movies):
    return [movie.id for movie in movies]


@pytest.mark.asyncio
async def test_similar_to_inception(similarity_resolver):
    """Test shared genre within five years, ranked by rating."""
    movies = await similarity_resolver.similar("m01")

    assert ids(movies) == ["m07", "m02", "m09", "m03"]


@pytest.mark.asyncio
async def test_source_is_excluded(similarity_resolver):
    """Test that the source movie never appears in its own results."""
    movies = await similarity_resolver.similar("m01", limit=20)

    assert "m01" not in ids(movies)


@pytest.mark.asyncio
async def test_year_window(similarity_resolver, sample_movies):
    """Test that every result is within five years and shares a genre."""
    source = next(m for m in sample_movies if m.id == "m07")

    movies = await similarity_resolver.similar("m07", limit=20)

    assert movies
    for movie in movies:
        assert abs(movie.year - source.year) <= 5
        assert set(movie.genres) & {g.value for g in source.genres}


@pytest.mark.asyncio
async def test_limit(similarity_resolver):
    """Test that the requested limit is honored."""
    movies = await similarity_resolver.similar("m01", limit=2)

    assert ids(movies) == ["m07", "m02"]


@pytest.mark.asyncio
async def test_limit_is_capped(similarity_resolver):
    """Test that huge limits are clamped instead of rejected."""
    movies = await similarity_resolver.similar("m01", limit=500)

    assert len(movies) <= 20


@pytest.mark.asyncio
async def test_unknown_source(similarity_resolver):
    """Test that an unknown source yields no results."""
    assert await similarity_resolver.similar("missing") == []


@pytest.mark.asyncio
async def test_source_without_genres(similarity_resolver):
    """Test that a source with no genres yields no results."""
    assert await similarity_resolver.similar("m12") == []
