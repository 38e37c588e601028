#!/usr/bin/env python3
"""
Command line entry point for the site indexer.
"""

import asyncio
import argparse
import dataclasses
import logging
import os
import sys
from pathlib import Path
from typing import List

from site_indexer import WebsiteIndexerApp, ConfigError, __version__
from site_indexer.models import WebSearchResult
from site_indexer.utils.config import Config, load_config, domains_from_seeds
from site_indexer.utils.logger import setup_logging


logger = logging.getLogger("site_indexer.cli")


def build_config(args) -> Config:
    """Config file values, overridden by command line flags."""
    if args.config and Path(args.config).exists():
        config = load_config(args.config)
    elif args.config != 'config.yaml':
        raise ConfigError(f"Configuration file not found: {args.config}")
    else:
        config = Config()

    overrides = {
        'max_depth': args.max_depth,
        'max_pages': args.max_pages,
        'max_concurrent_requests': args.concurrent,
    }
    if args.delay is not None:
        overrides['delay_between_requests'] = args.delay / 1000.0
    if args.domains:
        overrides['allowed_domains'] = [d.strip() for d in args.domains.split(',') if d.strip()]

    crawler = dataclasses.replace(
        config.crawler, **{k: v for k, v in overrides.items() if v is not None}
    )
    if not crawler.allowed_domains:
        crawler.allowed_domains = sorted(domains_from_seeds(args.urls))
    if not crawler.cookie:
        crawler.cookie = os.environ.get('AUTH_COOKIE') or None

    return dataclasses.replace(config, crawler=crawler)


def print_results(query: str, results: List[WebSearchResult]):
    if not results:
        print(f"No results found for '{query}'")
        return

    for position, result in enumerate(results, 1):
        page = result.web_page
        print(f"{position}. {page.title}")
        print(f"   URL: {page.url}")
        print(f"   Score: {result.score:.3f} | Matches: {result.match_count}")
        if result.fuzzy_matches:
            corrections = ', '.join(f"{k} -> {v}" for k, v in result.fuzzy_matches.items())
            print(f"   Corrections: {corrections}")
        if result.snippet:
            print(f"   {result.snippet[:150]}...")
    print(f"Found {len(results)} result(s)")


def run_query(app: WebsiteIndexerApp, query: str, max_results: int, fuzzy: bool):
    results = app.search(query, max_results, fuzzy)
    print_results(query, results)
    if not results and fuzzy:
        suggestions = app.get_suggestions(query)
        if suggestions:
            print(f"Did you mean: {', '.join(suggestions)}")


def print_stats(app: WebsiteIndexerApp):
    print("=== Index Statistics ===")
    for key, value in app.get_stats().items():
        print(f"{key}: {value}")


def interactive_loop(app: WebsiteIndexerApp, max_results: int, fuzzy: bool):
    print("Commands: search <query>, suggest <term>, stats, exit")
    while True:
        try:
            line = input("\n> ").strip()
        except EOFError:
            break

        if not line:
            continue
        command, _, rest = line.partition(' ')
        if command in ('exit', 'quit'):
            print("Goodbye!")
            break
        elif command == 'stats':
            print_stats(app)
        elif command == 'search':
            if rest.strip():
                run_query(app, rest.strip(), max_results, fuzzy)
            else:
                print("Empty query")
        elif command == 'suggest':
            print(', '.join(app.get_suggestions(rest.strip())) or "No suggestions")
        else:
            print(f"Unknown command: {line}")


async def run(args) -> int:
    config = build_config(args)
    setup_logging(config.logging)

    app = WebsiteIndexerApp()
    if config.monitoring.metrics_enabled:
        app.monitor.metrics.prometheus_port = config.monitoring.prometheus_port
        app.monitor.metrics.start_prometheus_server()

    logger.info(f"Seed URLs: {args.urls}")
    logger.info(f"Max depth: {config.crawler.max_depth}, max pages: {config.crawler.max_pages}, "
                f"delay: {config.crawler.delay_between_requests}s, "
                f"concurrent: {config.crawler.max_concurrent_requests}")
    logger.info(f"Allowed domains: {config.crawler.allowed_domains}")

    await app.index_website(args.urls, config.crawler)

    max_results = args.max_results or config.search.max_results
    fuzzy = config.search.fuzzy_enabled and not args.no_fuzzy

    if args.command == 'interactive':
        interactive_loop(app, max_results, fuzzy)
    else:
        print_stats(app)
        for query in args.query or []:
            run_query(app, query, max_results, fuzzy)
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Website indexer: crawl a site and search it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py index https://example.com --max-pages 50 -q "pricing"
  python main.py interactive https://example.com --max-depth 1
        """
    )
    parser.add_argument('--version', action='version', version=f'Site Indexer {__version__}')

    subparsers = parser.add_subparsers(dest='command', required=True)
    for name, help_text in (('index', 'Crawl, index and optionally run queries'),
                            ('interactive', 'Crawl, index, then open a search prompt')):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('urls', nargs='+', help='Seed URLs')
        sub.add_argument('--config', default='config.yaml',
                         help='Path to configuration file (default: config.yaml)')
        sub.add_argument('--max-depth', type=int, help='Maximum crawl depth')
        sub.add_argument('--max-pages', type=int, help='Maximum pages to crawl')
        sub.add_argument('--delay', type=int, help='Delay between requests in ms')
        sub.add_argument('--concurrent', type=int, help='Max concurrent requests')
        sub.add_argument('--domains', help='Allowed domains (comma-separated)')
        sub.add_argument('--max-results', type=int, help='Maximum results per query')
        sub.add_argument('--no-fuzzy', action='store_true', help='Disable fuzzy matching')
        if name == 'index':
            sub.add_argument('-q', '--query', action='append', help='Query to run after indexing')

    args = parser.parse_args()

    try:
        return asyncio.run(run(args))
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return 2
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 1


if __name__ == '__main__':
    sys.exit(main())
