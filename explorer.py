#!/usr/bin/env python3
"""Library Explorer CLI - browse books and posts from the content store."""
import argparse
import asyncio
import csv
import sys
import json
from tabulate import tabulate
from ebook_library.assets import AssetUrlResolver
from ebook_library.async_client import AsyncContentStoreClient
from ebook_library.client import ContentStoreClient
from ebook_library.config import Config
from ebook_library.filtering import apply_query, related, split_featured, summarize
from ebook_library.models import CATEGORY_CHOICES, BookDetails, PostDetails, QueryState, SortKey
from ebook_library.queries import QueryTag, kind_for
from ebook_library.transform import Transformer
import logging

logger = logging.getLogger(__name__)

LIST_TAGS = {"books": QueryTag.BOOKS, "posts": QueryTag.POSTS}
SINGLE_TAGS = {"books": QueryTag.BOOK, "posts": QueryTag.POST}


def make_client(config: Config) -> ContentStoreClient:
    return ContentStoreClient(
        project_id=config.SANITY_PROJECT_ID,
        dataset=config.SANITY_DATASET,
        api_version=config.SANITY_API_VERSION,
        token=config.SANITY_TOKEN,
        use_cdn=config.SANITY_USE_CDN,
        timeout=config.DEFAULT_TIMEOUT
    )


def make_async_client(config: Config) -> AsyncContentStoreClient:
    return AsyncContentStoreClient(
        project_id=config.SANITY_PROJECT_ID,
        dataset=config.SANITY_DATASET,
        api_version=config.SANITY_API_VERSION,
        token=config.SANITY_TOKEN,
        use_cdn=config.SANITY_USE_CDN,
        timeout=config.DEFAULT_TIMEOUT
    )


def make_transformer(config: Config) -> Transformer:
    resolver = AssetUrlResolver(config.SANITY_PROJECT_ID, config.SANITY_DATASET)
    return Transformer(resolver, config)


def query_state(args) -> QueryState:
    return QueryState(search=args.search, category=args.category, sort=args.sort)


async def fetch_raw_async(tag: QueryTag, config: Config):
    async with make_async_client(config) as client:
        return await client.fetch_list(tag)


def load_records(args, config: Config):
    """Fetch and transform the full list for the requested content type."""
    tag = LIST_TAGS[args.content]
    logger.info(f"Querying {config.QUERY_URL}")

    if args.use_async:
        raws = asyncio.run(fetch_raw_async(tag, config))
    else:
        with make_client(config) as client:
            raws = client.fetch_list(tag)

    return make_transformer(config).to_records(raws, kind_for(tag))


def list_content(args, config: Config):
    """List books or posts with search, category filter and sort."""
    records = load_records(args, config)
    state = query_state(args)
    if args.clear_filters:
        state = state.reset()
    shown = apply_query(records, state)

    if args.featured_only:
        shown, _ = split_featured(shown)

    if not shown:
        print_empty_state(args.content, has_any=bool(records))
        return

    display_records(shown, args.format)
    if args.format != "json":
        print("\n" + summarize(len(shown), len(records), args.content))


def print_empty_state(noun: str, has_any: bool):
    if has_any:
        print(f"\nNo {noun} found. Try adjusting your search terms or filters, or use --clear-filters.\n")
    else:
        print(f"\nNo {noun} are available in the library yet. Check back later!\n")


def _clip(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


def display_records(records, format_type: str):
    """Display records in specified format."""
    if format_type == "table":
        headers = ["Title", "Author", "Published", "Category", "Tags", "Featured"]
        rows = [
            [
                _clip(record.title, 50),
                _clip(record.author, 30),
                record.published_str,
                record.category,
                _clip(record.tags_str, 30),
                "*" if record.featured else ""
            ]
            for record in records
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps([record.to_dict() for record in records], indent=2))

    elif format_type == "compact":
        for i, record in enumerate(records, 1):
            print(f"{i}. {record.title} - {record.author}")


def show_content(args, config: Config) -> int:
    """Show the detail view of one book or post."""
    tag = SINGLE_TAGS[args.content]
    transformer = make_transformer(config)

    with make_client(config) as client:
        raw = client.fetch_one(tag, args.slug)

        if raw is None:
            print(f"\nNot found: no {args.content[:-1]} with slug '{args.slug}'.\n")
            return 1

        record = transformer.to_record(raw, kind_for(tag))

        others = []
        if tag is QueryTag.POST:
            posts = transformer.to_records(client.fetch_list(QueryTag.POSTS), kind_for(QueryTag.POSTS))
            others = related(posts, record.id)

    rows = [
        ["Title", record.title],
        ["Author", record.author],
        ["Published", record.published_str],
        ["Category", record.category],
        ["Tags", record.tags_str],
        ["Cover", record.cover_url],
        ["Link", record.route],
    ]
    if isinstance(record.details, BookDetails):
        rows.append(["Format", record.details.file_format])
        if record.details.pages > 0:
            rows.append(["Pages", record.details.pages])
        if record.details.file_url:
            rows.append(["File", record.details.file_url])
    elif isinstance(record.details, PostDetails):
        rows.append(["Read time", record.details.read_time])

    print("\n" + tabulate(rows, tablefmt="plain"))
    if record.description:
        print("\n" + record.description)

    if others:
        print("\nRelated articles:")
        display_records(others, "compact")
    print()
    return 0


async def fetch_featured(config: Config):
    async with make_async_client(config) as client:
        return await client.fetch_many([QueryTag.FEATURED_BOOKS, QueryTag.FEATURED_POSTS])


def show_featured(args, config: Config):
    """Show featured books and posts, fetched in parallel."""
    results = asyncio.run(fetch_featured(config))
    transformer = make_transformer(config)

    for tag, noun in ((QueryTag.FEATURED_BOOKS, "books"), (QueryTag.FEATURED_POSTS, "posts")):
        records = transformer.to_records(results.get(tag, []), kind_for(tag))
        print(f"\nFeatured {noun}")
        if records:
            display_records(records, args.format)
        else:
            print(f"No featured {noun} yet. Check back soon!")


def export_data(args, config: Config):
    """Export the filtered listing."""
    records = apply_query(load_records(args, config), query_state(args))

    if args.format == "json":
        data = [record.to_dict() for record in records]

        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            logger.info(f"Exported {len(records)} {args.content} to {args.output}")
        else:
            print(json.dumps(data, indent=2))

    elif args.format == "csv":
        output_file = args.output or f"{args.content}_export.csv"
        with open(output_file, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(["ID", "Title", "Author", "Published", "Category", "Tags", "Featured", "Link"])

            for record in records:
                writer.writerow([
                    record.id,
                    record.title,
                    record.author,
                    record.published_at.isoformat(),
                    record.category,
                    record.tags_str,
                    record.featured,
                    record.route
                ])

        logger.info(f"Exported {len(records)} {args.content} to {output_file}")


def add_query_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("content", choices=sorted(LIST_TAGS), help="Content type")
    parser.add_argument("--search", default="", help="Match title, author or tags")
    parser.add_argument("--category", choices=CATEGORY_CHOICES, default="All", help="Category filter")
    parser.add_argument("--sort", choices=[k.value for k in SortKey], default="newest", help="Sort order")
    parser.add_argument("--async", dest="use_async", action="store_true", help="Use async client")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Library Explorer - browse the eBook library and blog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Newest books
  %(prog)s list books

  # Search posts in a category, sorted by title
  %(prog)s list posts --search python --category Technology --sort title

  # Book detail page
  %(prog)s show books intro-to-ml

  # Export data
  %(prog)s export books --format csv --output books.csv
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # List command
    list_parser = subparsers.add_parser("list", help="List books or posts")
    add_query_arguments(list_parser)
    list_parser.add_argument("--featured-only", action="store_true", help="Only featured items")
    list_parser.add_argument("--clear-filters", action="store_true", help="Ignore --search and --category")
    list_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    # Show command
    show_parser = subparsers.add_parser("show", help="Show one book or post")
    show_parser.add_argument("content", choices=sorted(SINGLE_TAGS), help="Content type")
    show_parser.add_argument("slug", help="Slug of the item")

    # Featured command
    featured_parser = subparsers.add_parser("featured", help="Show featured books and posts")
    featured_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    # Export command
    export_parser = subparsers.add_parser("export", help="Export a listing")
    add_query_arguments(export_parser)
    export_parser.add_argument("--format", choices=["json", "csv"], default="json", help="Export format")
    export_parser.add_argument("--output", help="Output file (default: stdout for JSON)")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()

    # Configure logging
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        if args.command == "list":
            list_content(args, config)
        elif args.command == "show":
            sys.exit(show_content(args, config))
        elif args.command == "featured":
            show_featured(args, config)
        elif args.command == "export":
            export_data(args, config)

    except KeyboardInterrupt:
        logger.info("\nInterrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
