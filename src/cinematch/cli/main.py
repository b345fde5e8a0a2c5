"""Main CLI entry point."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Awaitable, List, Optional, Tuple, TypeVar

import click

from .. import __version__
from ..config import ConfigManager
from ..core.interfaces import (
    ICatalogService,
    IChatOrchestrator,
    IMovieStore,
    ISimilarityResolver,
    IUserStore,
    IWatchlistService,
)
from ..core.models import (
    ChatRequest,
    ConversationTurn,
    FilterInput,
    MovieSummary,
    Role,
)
from ..core.services.criteria_compiler import BROWSE_CAP, compile_criteria
from ..core.services.mood_mapper import DEFAULT_MOOD, supported_moods
from ..infrastructure import Container, setup_logging
from ..utils import CineMatchError, ConfigurationError, describe_error

T = TypeVar("T")

EXIT_WORDS = {"exit", "quit", ":q"}


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--user", "-u", envvar="CINEMATCH_USER", help="Identified user id")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.version_option(version=__version__, prog_name="cinematch")
@click.pass_context
def cli(
    ctx: click.Context, config: Optional[Path], verbose: bool, user: Optional[str], as_json: bool
) -> None:
    """CineMatch - Conversational movie recommendations."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config
    ctx.obj["user"] = user
    ctx.obj["json"] = as_json

    # init writes the file and validate checks it before loading
    if ctx.invoked_subcommand in ("init", "validate"):
        return

    _load_application(ctx)


@cli.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=Path.cwd() / "config" / "config.yaml",
    help="Output path for configuration file",
)
def init(output: Path) -> None:
    """Initialize configuration file."""
    try:
        if output.exists():
            if not click.confirm(f"Configuration file {output} already exists. Overwrite?"):
                return

        output.parent.mkdir(parents=True, exist_ok=True)

        ConfigManager.create_default_config(output)
        click.echo(f"Configuration file created at: {output}")
        click.echo("Please edit the configuration file with your API key and data paths.")

    except Exception as e:
        click.echo(f"Failed to create configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate configuration and data files."""
    config_manager = ConfigManager(ctx.obj["config_path"])
    try:
        config_file = config_manager.config_file
    except FileNotFoundError as e:
        click.echo(f"✗ {e}", err=True)
        click.echo("Validation failed", err=True)
        sys.exit(1)

    if not config_manager.validate_config_file(config_file):
        click.echo(f"✗ Configuration file {config_file} is invalid", err=True)
        click.echo("Validation failed", err=True)
        sys.exit(1)
    click.echo(f"✓ Configuration file {config_file}")

    container = _load_application(ctx, config_manager)
    errors = _run(_validate_setup(container))
    if errors:
        for error in errors:
            click.echo(f"✗ {error}", err=True)
        click.echo("Validation failed", err=True)
        sys.exit(1)
    click.echo("All prerequisites validated successfully")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show system status and configuration."""
    config = ctx.obj["config"]
    container = ctx.obj["container"]

    click.echo("CineMatch Status")
    click.echo("=" * 40)

    click.echo(f"LLM Provider: {config.llm.provider}")
    click.echo(f"LLM Model: {config.llm.model}")
    click.echo(f"API Key Configured: {'✓' if _api_key_configured(config.llm.api_key) else '✗'}")
    click.echo(f"Catalog: {config.store.catalog_path}")
    click.echo(f"Users: {config.store.users_path}")
    click.echo(f"Chat Context Window: {config.chat.context_window}")

    try:
        total = asyncio.run(_catalog_size(container))
        click.echo(f"Catalog Status: ✓ {total} movies")
    except CineMatchError as e:
        click.echo(f"Catalog Status: ✗ {describe_error(e)}")


@cli.command()
@click.option("--genre", "-g", "genres", multiple=True, help="Genre filter (repeatable)")
@click.option("--year", type=int, help="Exact release year")
@click.option("--year-from", type=int, help="Earliest release year")
@click.option("--year-to", type=int, help="Latest release year")
@click.option("--director", "directors", multiple=True, help="Director name fragment")
@click.option("--actor", "actors", multiple=True, help="Actor name fragment")
@click.option("--min-rating", type=float, help="Minimum rating (0-10)")
@click.option("--search", "-s", help="Free-text search")
@click.option("--mood", help="Mood label")
@click.option("--sort-by", help="rating, popularity, year, title, imdb_rating or relevance")
@click.option("--sort-order", help="asc or desc")
@click.option("--limit", "-n", type=int, help=f"Page size (max {BROWSE_CAP})")
@click.option("--page", "-p", type=int, default=1, show_default=True, help="Page number")
@click.pass_context
def browse(
    ctx: click.Context,
    genres: Tuple[str, ...],
    year: Optional[int],
    year_from: Optional[int],
    year_to: Optional[int],
    directors: Tuple[str, ...],
    actors: Tuple[str, ...],
    min_rating: Optional[float],
    search: Optional[str],
    mood: Optional[str],
    sort_by: Optional[str],
    sort_order: Optional[str],
    limit: Optional[int],
    page: int,
) -> None:
    """Browse the catalog with filters and pagination."""
    catalog = ctx.obj["container"].get(ICatalogService)
    filters = FilterInput(
        genres=list(genres) or None,
        year=year,
        year_from=year_from,
        year_to=year_to,
        directors=list(directors) or None,
        actors=list(actors) or None,
        min_rating=min_rating,
        search=search,
        mood=mood,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        page=page,
    )

    result = _run(catalog.browse(filters))
    if _emit_json(ctx, result):
        return

    _echo_movies(result.movies)
    p = result.pagination
    click.echo("")
    click.echo(f"Page {p.current_page} of {p.total_pages} ({p.total_movies} movies)")


@cli.command()
@click.argument("movie_id")
@click.pass_context
def show(ctx: click.Context, movie_id: str) -> None:
    """Show details for one movie."""
    catalog = ctx.obj["container"].get(ICatalogService)

    detail = _run(catalog.get_movie(movie_id, ctx.obj["user"]))
    if _emit_json(ctx, detail):
        return

    movie = detail.movie
    click.echo(f"{movie.title} ({movie.year})")
    click.echo("=" * 40)
    click.echo(f"Genres: {', '.join(g.value for g in movie.genres) or '-'}")
    click.echo(f"Director: {', '.join(movie.all_directors) or '-'}")
    if movie.cast:
        click.echo(f"Cast: {', '.join(movie.cast[:5])}")
    if movie.rating is not None:
        click.echo(f"Rating: {movie.rating}")
    if movie.formatted_runtime:
        click.echo(f"Runtime: {movie.formatted_runtime}")
    click.echo("")
    click.echo(movie.plot)

    if detail.user_data is not None:
        data = detail.user_data
        click.echo("")
        click.echo(f"In watchlist: {'✓' if data.in_watchlist else '✗'}")
        click.echo(f"Watched: {'✓' if data.watched else '✗'}")
        if data.user_rating is not None:
            click.echo(f"Your rating: {data.user_rating}/5")


@cli.command()
@click.argument("movie_id")
@click.option("--limit", "-n", type=int, help="Number of movies")
@click.pass_context
def similar(ctx: click.Context, movie_id: str, limit: Optional[int]) -> None:
    """Find movies similar to a given movie."""
    resolver = ctx.obj["container"].get(ISimilarityResolver)

    movies = _run(resolver.similar(movie_id, limit))
    if _emit_json(ctx, {"movies": movies}):
        return
    if not movies:
        click.echo("No similar movies found.")
        return
    _echo_movies(movies)


@cli.command(
    help=(
        "Recommend movies for a MOOD.\n\n"
        f"Known moods: {', '.join(supported_moods())}. "
        f"Unknown moods fall back to {DEFAULT_MOOD.value}."
    )
)
@click.argument("mood")
@click.option("--limit", "-n", type=int, help="Number of movies")
@click.pass_context
def mood(ctx: click.Context, mood: str, limit: Optional[int]) -> None:
    catalog = ctx.obj["container"].get(ICatalogService)

    result = _run(catalog.recommend_by_mood(mood, limit))
    if _emit_json(ctx, result):
        return

    click.echo(f"Movies for a {result.mood} mood:")
    _echo_movies(result.movies)


@cli.command()
@click.argument("message", required=False)
@click.pass_context
def chat(ctx: click.Context, message: Optional[str]) -> None:
    """Chat with the assistant. Without MESSAGE, starts an interactive session."""
    orchestrator = ctx.obj["container"].get(IChatOrchestrator)
    config = ctx.obj["config"]
    user_id = ctx.obj["user"]

    if message:
        result = _run(orchestrator.chat(ChatRequest(message=message), user_id))
        if _emit_json(ctx, result):
            return
        click.echo(result.response)
        if result.movies:
            click.echo("")
            _echo_movies(result.movies)
        return

    click.echo(f"Chatting with {config.chat.assistant_name}. Type 'exit' to leave.")
    try:
        asyncio.run(_interactive_chat(orchestrator, user_id, config.chat.context_window))
    except KeyboardInterrupt:
        click.echo("\nGoodbye.")


@cli.command()
@click.argument("question")
@click.pass_context
def ask(ctx: click.Context, question: str) -> None:
    """Ask a single movie question."""
    orchestrator = ctx.obj["container"].get(IChatOrchestrator)

    answer = _run(orchestrator.ask(question))
    if _emit_json(ctx, {"answer": answer, "question": question}):
        return
    click.echo(answer)


@cli.group()
def watchlist() -> None:
    """Manage your watchlist."""
    pass


@watchlist.command("add")
@click.argument("movie_id")
@click.pass_context
def watchlist_add(ctx: click.Context, movie_id: str) -> None:
    """Add a movie to your watchlist."""
    service = ctx.obj["container"].get(IWatchlistService)

    _run(service.add(_require_user(ctx), movie_id))
    click.echo("Movie added to watchlist")


@watchlist.command("remove")
@click.argument("movie_id")
@click.pass_context
def watchlist_remove(ctx: click.Context, movie_id: str) -> None:
    """Remove a movie from your watchlist."""
    service = ctx.obj["container"].get(IWatchlistService)

    _run(service.remove(_require_user(ctx), movie_id))
    click.echo("Movie removed from watchlist")


@watchlist.command("list")
@click.pass_context
def watchlist_list(ctx: click.Context) -> None:
    """List your watchlist."""
    service = ctx.obj["container"].get(IWatchlistService)

    items = _run(service.list_watchlist(_require_user(ctx)))
    if _emit_json(ctx, {"watchlist": items}):
        return
    if not items:
        click.echo("Your watchlist is empty.")
        return
    for item in items:
        click.echo(f"{_format_movie(item.movie)}  (added {item.added_at:%Y-%m-%d})")


@cli.command()
@click.argument("movie_id")
@click.option("--rating", "-r", type=int, help="Your rating (1-5)")
@click.pass_context
def watched(ctx: click.Context, movie_id: str, rating: Optional[int]) -> None:
    """Mark a movie as watched."""
    service = ctx.obj["container"].get(IWatchlistService)

    _run(service.mark_watched(_require_user(ctx), movie_id, rating))
    click.echo("Movie marked as watched")


@cli.command()
@click.pass_context
def history(ctx: click.Context) -> None:
    """Show your watch history."""
    service = ctx.obj["container"].get(IWatchlistService)

    items = _run(service.list_history(_require_user(ctx)))
    if _emit_json(ctx, {"watch_history": items}):
        return
    if not items:
        click.echo("No watched movies yet.")
        return
    for item in items:
        rated = f", rated {item.rating}/5" if item.rating is not None else ""
        click.echo(f"{_format_movie(item.movie)}  (watched {item.watched_at:%Y-%m-%d}{rated})")


def _load_application(
    ctx: click.Context, config_manager: Optional[ConfigManager] = None
) -> Container:
    """Load configuration, set up logging and wire the services into ctx.obj."""
    try:
        config_manager = config_manager or ConfigManager(ctx.obj["config_path"])
        app_config = config_manager.load_config()

        setup_logging(app_config.logging, verbose=ctx.obj["verbose"])

        container = Container(config_manager)
        container.configure_default_services()

    except (ConfigurationError, FileNotFoundError, ValueError) as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Initialization error: {e}", err=True)
        sys.exit(1)

    ctx.obj["config"] = app_config
    ctx.obj["container"] = container
    return container


def _run(coro: Awaitable[T]) -> T:
    """Run a coroutine, reporting application errors and exiting on failure."""
    try:
        return asyncio.run(coro)  # type: ignore
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user.")
        sys.exit(1)
    except CineMatchError as e:
        click.echo(f"Error: {describe_error(e)}", err=True)
        sys.exit(1)


def _require_user(ctx: click.Context) -> str:
    user_id = ctx.obj["user"]
    if not user_id:
        raise click.UsageError("This command needs --user or CINEMATCH_USER")
    return user_id


def _emit_json(ctx: click.Context, data: Any) -> bool:
    """Print data as JSON when --json is set."""
    if not ctx.obj["json"]:
        return False
    click.echo(json.dumps(_to_jsonable(data), indent=2))
    return True


def _to_jsonable(data: Any) -> Any:
    if hasattr(data, "model_dump"):
        return data.model_dump(mode="json")
    if isinstance(data, dict):
        return {key: _to_jsonable(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_to_jsonable(item) for item in data]
    return data


def _format_movie(movie: MovieSummary) -> str:
    rating = f"★ {movie.rating}" if movie.rating is not None else "unrated"
    return f"[{movie.id}] {movie.title} ({movie.year}) - {rating}"


def _echo_movies(movies: List[MovieSummary]) -> None:
    if not movies:
        click.echo("No movies found.")
        return
    for movie in movies:
        click.echo(_format_movie(movie))
        if movie.genres:
            click.echo(f"    {', '.join(movie.genres)}")


async def _interactive_chat(
    orchestrator: IChatOrchestrator, user_id: Optional[str], context_window: int
) -> None:
    """Run a chat session, echoing the trailing turns back on every message."""
    turns: List[ConversationTurn] = []

    while True:
        try:
            message = await asyncio.to_thread(click.prompt, "You", prompt_suffix="> ")
        except click.Abort:
            click.echo("")
            return
        message = message.strip()
        if message.lower() in EXIT_WORDS:
            return
        if not message:
            continue

        request = ChatRequest(message=message, context=turns[-context_window:])
        try:
            result = await orchestrator.chat(request, user_id)
        except CineMatchError as e:
            click.echo(f"Error: {describe_error(e)}", err=True)
            continue

        click.echo(result.response)
        if result.movies:
            _echo_movies(result.movies)
        click.echo("")

        turns.append(ConversationTurn(role=Role.USER, content=message))
        turns.append(ConversationTurn(role=Role.ASSISTANT, content=result.response))


async def _validate_setup(container: Container) -> List[str]:
    """Check the LLM key and data files."""
    errors = []
    config = container.get_config()

    if not _api_key_configured(config.llm.api_key):
        errors.append(f"No API key configured for {config.llm.provider}")

    try:
        total = await _catalog_size(container)
        if total == 0:
            errors.append(f"Movie catalog {config.store.catalog_path} is empty")
    except CineMatchError as e:
        errors.append(f"Movie catalog unavailable: {e}")

    try:
        await container.get(IUserStore).get("")
    except CineMatchError as e:
        errors.append(f"User store unavailable: {e}")

    return errors


async def _catalog_size(container: Container) -> int:
    store = container.get(IMovieStore)
    criteria = compile_criteria(FilterInput(), cap=BROWSE_CAP, default_limit=BROWSE_CAP)
    return await store.count(criteria)


def _api_key_configured(api_key: str) -> bool:
    return bool(api_key) and not api_key.startswith("${")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
