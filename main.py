# main.py
# Command line entry point for SuperFacts
# =======================================

"""
Runs the site backend from the command line.

Commands:
- serve: start the HTTP API with uvicorn
- collect: run one collection pass over the RSS catalogue
- init-ads: seed the sample ad inventory
- sources: list the configured feeds, optionally for one category
- recategorize: re-run categorization over stored articles
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from config.settings import logging_settings, validate_config
from config.sources import ALL_SOURCES, get_sources_by_category, validate_sources
from config.version import PROJECT_VERSION
from src.services import SiteServices, build_services
from src.utils.logger import setup_logging
from superfacts.config_manager import ConfigError, load_config


def _build_services(config_path: Optional[str]) -> SiteServices:
    config = load_config(Path(config_path) if config_path else None)
    validate_config(config)
    services = build_services(config)
    setup_logging(logging_settings(config)).log_system_startup(PROJECT_VERSION, services.summary())
    return services


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from src.serving import create_app

    services = _build_services(args.config)
    host = args.host or services.config.server.host
    port = args.port or services.config.server.port
    print(f"🚀 SuperFacts API on http://{host}:{port}")
    uvicorn.run(create_app(services), host=host, port=port)
    return 0


def cmd_collect(args: argparse.Namespace) -> int:
    services = _build_services(args.config)
    if args.category:
        services.collector.sources = get_sources_by_category(args.category)
        if not services.collector.sources:
            print(f"❌ No source for category {args.category!r}")
            return 1

    print(f"🔄 Collecting {len(services.collector.sources)} sources...")
    result = services.collector.collect_news()
    failed = [
        source_id
        for source_id, source_result in result.source_results.items()
        if not source_result.get("success")
    ]
    print(f"  • New articles: {result.new_articles}")
    print(f"  • Stored articles: {result.total_articles}")
    if failed:
        print(f"  • Failed sources: {', '.join(failed)}")
    for article in result.articles[: args.show]:
        print(f"    - [{article.category}] {article.title[:80]}")
    return 0


def cmd_init_ads(args: argparse.Namespace) -> int:
    services = _build_services(args.config)
    created = services.ad_manager.create_sample_ads()
    print(f"✅ {created} sample ads ready ({len(services.ad_manager.get_ads())} in inventory)")
    return 0


def cmd_sources(args: argparse.Namespace) -> int:
    sources = get_sources_by_category(args.category) if args.category else ALL_SOURCES
    validate_sources(sources)
    for source_id, source in sources.items():
        print(f"{source_id:<24} {source['category']:<14} {source['name']:<28} {source['url']}")
    print(f"\n{len(sources)} sources")
    return 0


def cmd_recategorize(args: argparse.Namespace) -> int:
    services = _build_services(args.config)
    report = services.collector.recategorize()
    print(f"🏷️  {report['changed']} of {report['total']} articles updated")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SuperFacts news site backend")
    parser.add_argument("--config", help="Path to config.toml (defaults to ./config.toml)")
    parser.add_argument("--version", action="version", version=PROJECT_VERSION)
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Start the HTTP API")
    serve.add_argument("--host", help="Bind address (server.host by default)")
    serve.add_argument("--port", type=int, help="Port (server.port by default)")
    serve.set_defaults(handler=cmd_serve)

    collect = subparsers.add_parser("collect", help="Run one collection pass")
    collect.add_argument("--category", help="Only collect sources of this fallback category")
    collect.add_argument(
        "--show", type=int, default=10, help="Number of new titles to print"
    )
    collect.set_defaults(handler=cmd_collect)

    init_ads = subparsers.add_parser("init-ads", help="Seed the sample ad inventory")
    init_ads.set_defaults(handler=cmd_init_ads)

    sources = subparsers.add_parser("sources", help="List configured RSS sources")
    sources.add_argument("--category", help="Filter by fallback category")
    sources.set_defaults(handler=cmd_sources)

    recategorize = subparsers.add_parser(
        "recategorize", help="Re-run categorization over stored articles"
    )
    recategorize.set_defaults(handler=cmd_recategorize)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.handler(args)
    except ConfigError as exc:
        print(f"❌ Configuration error: {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\n⚠️  Interrupted")
        return 1


if __name__ == "__main__":
    sys.exit(main())
