"""
Command-line interface for aawire.
"""
import sys
import json
import argparse
import logging
from dataclasses import replace
from typing import Dict, List, Optional

import requests
from dotenv import load_dotenv

from aawire.config import Config
from aawire.core.article import Article
from aawire.core.crawler import Crawler
from aawire.exceptions import AgencyError, AuthenticationError, NoDataFoundError
from aawire.utils.http import RateLimiter
from aawire.utils.text import title_case

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def parse_args(argv: Optional[List[str]] = None):
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="Fetch news articles from the news-wire API")
    parser.add_argument("--config", help="Path to a YAML or JSON config file")
    parser.add_argument("--filter", action="append", default=[], metavar="KEY=VALUE",
                        help="Search filter override, may be repeated")
    parser.add_argument("--limit", type=int, help="Maximum number of search results")
    parser.add_argument("--output", help="Write articles to this file instead of stdout")
    parser.add_argument("--summarize", action="store_true",
                        help="Build a summary from the body when the document has no abstract")
    parser.add_argument("--title-case", action="store_true", help="Convert titles to Title Case")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def configure_logging(verbose: bool = False, log_file: Optional[str] = None):
    """
    Configure logging for the command-line run.

    Args:
        verbose: Log at DEBUG instead of INFO
        log_file: Optional file to write logs to
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def parse_filters(pairs: List[str], limit: Optional[int] = None) -> Dict[str, str]:
    """
    Turn KEY=VALUE arguments into a filter mapping.

    Args:
        pairs: KEY=VALUE strings
        limit: Optional result limit

    Returns:
        Filter overrides
    """
    filters = {}
    for pair in pairs:
        key, sep, value = pair.partition('=')
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Invalid filter {pair!r}, expected KEY=VALUE")
        filters[key.strip()] = value.strip()
    if limit is not None:
        filters['limit'] = str(limit)
    return filters


def build_crawler(config: Config) -> Crawler:
    """
    Create a Crawler from configuration.

    Args:
        config: Loaded configuration

    Returns:
        Configured Crawler
    """
    return Crawler(
        config.crawler_parameters(),
        rate_limiter=RateLimiter(delay=float(config.get('pacing.delay', 0.3))),
        base_url=config.get('api.url'),
        summary_length=int(config.get('summary.length', 150)),
        timeout=float(config.get('pacing.timeout', 60)),
        filters=config.search_filters(),
    )


def post_process(crawler: Crawler, articles: List[Article], summarize: bool = False,
                 titles: bool = False) -> List[Article]:
    """
    Apply optional summary and title clean-up to crawled articles.

    Args:
        crawler: Crawler whose summary length is used
        articles: Crawled articles
        summarize: Fill empty summaries from the article body
        titles: Convert titles to Title Case

    Returns:
        The processed articles
    """
    processed = []
    for article in articles:
        if summarize and not article.summary.strip():
            article = replace(article, summary=crawler.create_summary(article.content))
        if titles:
            article = replace(article, title=title_case(article.title))
        processed.append(article)
    return processed


def write_articles(articles: List[Article], output: Optional[str] = None):
    """
    Write articles as a JSON array.

    Args:
        articles: Articles to write
        output: File path, stdout when omitted
    """
    text = json.dumps([article.to_dict() for article in articles], ensure_ascii=False, indent=2)
    if output:
        with open(output, 'w', encoding='utf-8') as f:
            f.write(text + '\n')
        logger.info(f"Wrote {len(articles)} articles to {output}")
    else:
        sys.stdout.write(text + '\n')


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the command-line script.
    """
    load_dotenv()
    args = parse_args(argv)
    configure_logging(args.verbose, args.log_file)

    try:
        overrides = parse_filters(args.filter, args.limit)
        config = Config(args.config)
        with build_crawler(config) as crawler:
            logger.info("Starting crawl")
            try:
                articles = crawler.crawl(overrides)
            except NoDataFoundError as e:
                logger.warning(f"No articles to fetch: {e}")
                articles = []

            articles = post_process(crawler, articles, args.summarize, args.title_case)
        write_articles(articles, args.output)
        return 0
    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        return 130
    except argparse.ArgumentTypeError as e:
        logger.error(str(e))
        return 2
    except AuthenticationError as e:
        logger.error(f"Authentication failed, check AAWIRE_API__USERNAME and AAWIRE_API__PASSWORD: {e}")
        return 1
    except (AgencyError, requests.RequestException) as e:
        logger.error(f"Crawl failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
