"""
MovieFinder CLI - Command Line Interface
Browse and search the movie catalog from a terminal through a discovery session
"""

import argparse
import asyncio
import sys

from moviefinder.config import DiscoveryConfig, get_settings
from moviefinder.core.logging import configure_logging
from moviefinder.services.catalog import MovieSummary
from moviefinder.services.discovery import DiscoverySession
from moviefinder.state import ViewState


def format_movie(index: int, movie: MovieSummary) -> str:
    rating = f"{movie.vote_average:.1f}" if movie.vote_average is not None else "N/A"
    year = movie.release_year or "N/A"
    language = movie.original_language or "?"
    return f"{index:3d}. {movie.title} ({year}) ⭐ {rating} • {language}"


def print_view(view: ViewState, start: int = 0) -> None:
    for i, movie in enumerate(view.movies[start:], start + 1):
        print(format_movie(i, movie))
    if view.error_message:
        print(f"\n❌ {view.error_message}")


async def search_command(session: DiscoverySession, args: argparse.Namespace) -> int:
    """Search (or browse popular titles) and scroll through extra pages"""
    term = " ".join(args.term)
    label = f"'{term}'" if term.strip() else "popular movies"
    print(f"🔎 Searching {label}...\n")

    if term.strip():
        session.set_search_term(term)
        await session.debouncer.flush()
    else:
        await session.pagination.on_query_change("")

    print_view(session.view)
    for _ in range(args.pages - 1):
        shown = len(session.view.movies)
        if not await session.on_sentinel_visible():
            break
        print_view(session.view, start=shown)

    view = session.view
    if view.is_degraded:
        print("\n⚠️  Showing fallback picks; live results were unavailable.")
    elif view.has_more:
        print(f"\n📄 Page {view.page} of {view.total_pages} (use --pages for more)")
    return 1 if view.error_message and not view.movies else 0


async def details_command(session: DiscoverySession, args: argparse.Namespace) -> int:
    """Show the detail view for one movie"""
    await session.select_movie(MovieSummary(id=args.movie_id, title=f"#{args.movie_id}"))
    detail = session.detail

    if detail.error or detail.details is None:
        print(f"❌ {detail.error or 'No details available'}")
        return 1

    movie = detail.details
    print(f"🎬 {movie.title}")
    facts = [movie.release_year, movie.runtime_label]
    if movie.vote_average is not None:
        facts.append(f"⭐ {movie.vote_average:.1f}")
    print("   " + " • ".join(fact for fact in facts if fact))
    if movie.genres:
        print("   Genres: " + ", ".join(genre.name for genre in movie.genres))
    if movie.overview:
        print(f"\n{movie.overview}")
    if movie.cast:
        print("\nCast:")
        for person in movie.top_cast():
            role = f" as {person.character}" if person.character else ""
            print(f"   - {person.name}{role}")
    if movie.trailer:
        print(f"\n▶️  Trailer: {movie.trailer.embed_url}")
    return 0


async def trending_command(session: DiscoverySession, args: argparse.Namespace) -> int:
    """List the most searched terms"""
    await session.load_trending()
    if not session.view.trending:
        print("No trending searches yet.")
        return 0
    print("🔥 Trending searches\n")
    for i, item in enumerate(session.view.trending, 1):
        print(f"{i}. {item.search_term} → {item.title} ({item.count} searches)")
    return 0


COMMANDS = {
    "search": search_command,
    "details": details_command,
    "trending": trending_command,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="moviefinder",
        description="Find movies you'll enjoy without the hassle",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Search movies (no term = popular)")
    search.add_argument("term", nargs="*", help="Search text")
    search.add_argument("--pages", type=int, default=1, help="Pages to load (default: 1)")

    details = subparsers.add_parser("details", help="Show details for a movie ID")
    details.add_argument("movie_id", type=int, help="TMDB movie ID")

    subparsers.add_parser("trending", help="Show trending searches")
    return parser


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    config = DiscoveryConfig.from_settings(settings)
    async with DiscoverySession(config) as session:
        return await COMMANDS[args.command](session, args)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "search" and args.pages < 1:
        print("❌ --pages must be at least 1")
        return 2
    configure_logging(get_settings())
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
