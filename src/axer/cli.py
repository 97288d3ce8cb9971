"""Command-line interface for axer using Click."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import urlparse

import click
import httpx

from axer import __version__
from axer.config import ClientConfig
from axer.http.client import RequestClient
from axer.http.download import DownloadManager

# Setup logging - default to WARNING to avoid interfering with progress bars
# INFO and DEBUG logs are only shown when --verbose is used
logging.basicConfig(
    level=logging.WARNING,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _parse_pairs(pairs: Tuple[str, ...]) -> dict:
    """Turn ('a=1', 'b=2') into {'a': '1', 'b': '2'}."""
    parsed = {}
    for pair in pairs:
        if '=' not in pair:
            raise click.BadParameter(f"Expected key=value, got '{pair}'")
        key, value = pair.split('=', 1)
        parsed[key] = value
    return parsed


def _run(coro):
    """Run a coroutine, turning HTTP and file errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
        click.echo(f"✗ Failed: {e}", err=True)
        sys.exit(1)


def _echo_response(response: httpx.Response):
    click.echo(f"Status: {response.status_code}")
    click.echo(f"URL: {response.url}")
    if response.history:
        click.echo(f"Redirects: {len(response.history)}")
    click.echo()
    click.echo(response.text)


@click.group(invoke_without_command=True)
@click.option('--version', '-v', is_flag=True, help='Show version and exit')
@click.option('--cookie-file', '-c', help='Cookie jar file (Netscape format), created if missing')
@click.option('--header-file', help='Path to header file')
@click.option('--timeout', default=20000, help='Request timeout in milliseconds')
@click.option('--user-agent', '-U', help='Custom user agent')
@click.option('--proxy', help='HTTP/HTTPS proxy')
@click.option('--no-ssl-verify', is_flag=True, help='Disable SSL verification')
@click.option('--no-redirects', is_flag=True, help='Do not follow redirects')
@click.option('--verbose', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(
    ctx,
    version: bool,
    cookie_file: Optional[str],
    header_file: Optional[str],
    timeout: int,
    user_agent: Optional[str],
    proxy: Optional[str],
    no_ssl_verify: bool,
    no_redirects: bool,
    verbose: bool,
):
    """axer - GET, POST and download with a persistent cookie jar."""
    if version:
        click.echo(f"axer version {__version__}")
        ctx.exit()

    # If no subcommand, show help
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return

    if verbose:
        logging.getLogger().setLevel(logging.INFO)
        logging.getLogger('axer').setLevel(logging.INFO)
        # Also enable httpx logging
        logging.getLogger('httpx').setLevel(logging.INFO)

    overrides = {
        'header_file': header_file,
        'timeout': timeout,
        'proxy': proxy,
        'verify_ssl': not no_ssl_verify,
        'follow_redirects': not no_redirects,
    }
    if user_agent:
        overrides['user_agent'] = user_agent

    ctx.obj = {
        'cookie_file': cookie_file,
        'config': ClientConfig().merge(overrides),
    }


def _make_client(ctx) -> RequestClient:
    return RequestClient(ctx.obj['cookie_file'], ctx.obj['config'])


@cli.command()
@click.argument('url')
@click.option('--param', '-p', 'params', multiple=True, help='Query parameter as key=value')
@click.pass_context
def get(ctx, url: str, params: Tuple[str, ...]):
    """Send a GET request and print the response.

    Example:
        axer get https://example.com/search -p q=books
    """
    query = _parse_pairs(params) if params else None

    async def run():
        async with _make_client(ctx) as client:
            return await client.get(url, query)

    _echo_response(_run(run()))


@cli.command()
@click.argument('url')
@click.option('--field', '-d', 'fields', multiple=True, help='Form field as key=value')
@click.option('--data', help='Raw x-www-form-urlencoded body')
@click.pass_context
def post(ctx, url: str, fields: Tuple[str, ...], data: Optional[str]):
    """Send a POST form and print the response.

    Example:
        axer -c cookies.txt post https://example.com/login -d user=me -d pass=secret
    """
    if fields and data:
        raise click.UsageError("Use either --field or --data, not both")
    form = _parse_pairs(fields) if fields else data

    async def run():
        async with _make_client(ctx) as client:
            return await client.post(url, form)

    _echo_response(_run(run()))


@cli.command()
@click.argument('url')
@click.argument('path', type=click.Path(dir_okay=False))
@click.pass_context
def download(ctx, url: str, path: str):
    """Download URL to PATH unless PATH already exists.

    Example:
        axer download https://example.com/a.pdf downloads/a.pdf
    """
    async def run():
        async with _make_client(ctx) as client:
            return await client.download(url, path)

    _run(run())
    click.echo(f"✓ Saved {url} -> {path}")


@cli.command()
@click.argument('file', type=click.Path(exists=True))
@click.option('--output', '-o', default='./downloads', help='Output directory')
@click.option('--concurrent', '-n', default=4, help='Max concurrent downloads')
@click.option('--no-progress', is_flag=True, help='Hide the progress bar')
@click.pass_context
def batch(ctx, file: str, output: str, concurrent: int, no_progress: bool):
    """Download every URL listed in FILE into the output directory.

    The file should contain one URL per line. Files are named after the
    last segment of the URL path.

    Example:
        axer batch urls.txt -o ./downloads -n 8
    """
    urls = []
    with open(file, 'r') as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#'):
                urls.append(line)

    if not urls:
        click.echo("No URLs found in file", err=True)
        sys.exit(1)

    click.echo(f"Found {len(urls)} URLs to download")

    # One URL per destination file
    destinations = {}
    for url in urls:
        dest = Path(output) / (Path(urlparse(url).path).name or 'index.html')
        if dest in destinations:
            logger.warning(f"Skipping {url}: {dest} is already the destination of {destinations[dest]}")
            continue
        destinations[dest] = url

    async def run():
        async with _make_client(ctx) as client:
            manager = DownloadManager(client, max_workers=concurrent, show_progress=not no_progress)
            for dest, url in destinations.items():
                manager.add_task(url, dest)
            return await manager.execute()

    successful = _run(run())
    failed = len(destinations) - successful
    click.echo(f"\nComplete: {successful} successful, {failed} failed")
    skipped = len(urls) - len(destinations)
    if skipped:
        click.echo(f"Skipped {skipped} URL(s) with a duplicate destination")
    if failed:
        sys.exit(1)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == '__main__':
    main()
