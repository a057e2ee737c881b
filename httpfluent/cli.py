from __future__ import annotations

import contextlib
import json
import mimetypes
import os
import sys

import click
import httpx

from ._client_builder import HttpClientBuilder
from ._content import StringContent
from ._exceptions import HttpFluentError
from ._file_response import HttpFileResponse
from ._urls import UrlBuilder

# ---------------------------------------------------------------------------
# Rich output helpers (graceful fallback when rich is not installed)
# ---------------------------------------------------------------------------

try:
    from rich.console import Console
    from rich.syntax import Syntax
    from rich.text import Text

    HAS_RICH = True
except ImportError:  # pragma: no cover
    HAS_RICH = False


def _status_color(status_code: int) -> str:
    """Return a rich color name based on HTTP status category."""
    if status_code < 200:
        return "cyan"
    elif status_code < 300:
        return "green"
    elif status_code < 400:
        return "yellow"
    elif status_code < 500:
        return "red"
    else:
        return "bold red"


def is_binary_content(content: bytes) -> bool:
    return b"\0" in content


def is_binary_content_type(content_type: str) -> bool:
    text_types = (
        "text/",
        "application/json",
        "application/xml",
        "application/javascript",
        "application/x-www-form-urlencoded",
    )
    ct = content_type.lower().split(";")[0].strip()
    return not any(ct.startswith(t) for t in text_types) and ct != ""


def _render_body(response: httpx.Response) -> tuple[str, str] | None:
    """Return ``(kind, text)`` for the response body, or ``None`` when empty."""
    content = response.content
    if not content:
        return None
    content_type = response.headers.get("content-type", "")
    if is_binary_content_type(content_type) or is_binary_content(content):
        return "binary", f"<{len(content)} bytes of binary data>"
    text = response.text
    if "json" in content_type:
        try:
            return "json", json.dumps(json.loads(text), indent=4, ensure_ascii=False)
        except (json.JSONDecodeError, TypeError):
            pass
    return "text", text


def format_response_plain(response: httpx.Response) -> str:
    status_line = f"{response.http_version} {response.status_code} {response.reason_phrase}"
    lines: list[str] = [status_line.rstrip()]
    lines.extend(f"{key}: {value}" for key, value in response.headers.items())
    lines.append("")

    body = _render_body(response)
    if body is not None:
        lines.append(body[1])
    return "\n".join(lines)


def print_response_rich(console: Console, response: httpx.Response) -> None:
    """Pretty-print a response using rich."""
    color = _status_color(response.status_code)

    status_line = Text()
    status_line.append(f"{response.http_version} ", style="bold dim")
    status_line.append(f"{response.status_code}", style=f"bold {color}")
    if response.reason_phrase:
        status_line.append(f" {response.reason_phrase}", style=color)
    console.print(status_line)

    for key, value in response.headers.items():
        header_text = Text()
        header_text.append(f"{key}", style="dim cyan")
        header_text.append(": ", style="dim")
        header_text.append(value)
        console.print(header_text)

    console.print()

    body = _render_body(response)
    if body is None:
        return
    kind, text = body
    if kind == "binary":
        console.print(f"[dim]{text}[/dim]")
    elif kind == "json":
        console.print(Syntax(text, "json", theme="monokai"))
    else:
        console.print(text)


# ---------------------------------------------------------------------------
# Option parsing helpers
# ---------------------------------------------------------------------------


def parse_header(header: str) -> tuple[str, str]:
    """Parse a 'Key: Value' header string."""
    if ":" not in header:
        raise click.BadParameter(
            f"Invalid header format: '{header}'. Expected 'Key: Value'."
        )
    key, _, value = header.partition(":")
    return key.strip(), value.strip()


def parse_pair(pair: str, option: str) -> tuple[str, str]:
    """Parse a 'key=value' option value."""
    if "=" not in pair:
        raise click.BadParameter(
            f"Invalid {option} format: '{pair}'. Expected 'key=value'."
        )
    key, _, value = pair.partition("=")
    return key, value


# ---------------------------------------------------------------------------
# CLI command
# ---------------------------------------------------------------------------


@click.command(help="Build an HTTP request fluently and send it.")
@click.argument("url")
@click.option("-m", "--method", default="GET", help="HTTP method.")
@click.option(
    "-H",
    "--header",
    "headers",
    multiple=True,
    help='Add a header, e.g. -H "Accept: application/json".',
)
@click.option(
    "-p", "--param", "params", multiple=True, help="Add a query parameter, e.g. -p page=2."
)
@click.option(
    "-t",
    "--token",
    "tokens",
    multiple=True,
    help="Replace a path placeholder, e.g. -t '{id}=42'.",
)
@click.option("--api-version", default=None, help="Pin the api-version query parameter.")
@click.option("--bearer", default=None, help="Send a bearer token.")
@click.option(
    "-j", "--json-data", "json_body", default=None, help="JSON data to send."
)
@click.option(
    "-c", "--content", default=None, help="Content to send in the request body."
)
@click.option(
    "-f", "--form", "form_fields", multiple=True, help="Add a multipart field, e.g. -f name=value."
)
@click.option(
    "-F", "--file", "files", multiple=True, help="Add a multipart file, e.g. -F upload=./a.txt."
)
@click.option("--download", default=None, help="Download to file.")
@click.option(
    "--no-color", is_flag=True, default=False, help="Disable colored output."
)
def main(
    url: str,
    method: str,
    headers: tuple[str, ...],
    params: tuple[str, ...],
    tokens: tuple[str, ...],
    api_version: str | None,
    bearer: str | None,
    json_body: str | None,
    content: str | None,
    form_fields: tuple[str, ...],
    files: tuple[str, ...],
    download: str | None,
    no_color: bool,
) -> None:
    use_rich = HAS_RICH and not no_color and sys.stdout.isatty()

    try:
        url_builder = UrlBuilder.create(url)
        for token in tokens:
            placeholder, value = parse_pair(token, "token")
            url_builder.replace_token(placeholder, value)
        for param in params:
            key, value = parse_pair(param, "param")
            url_builder.set_query_param(key, value)

        request = url_builder.to_request().with_http_method(method)
        for header in headers:
            request.with_header(*parse_header(header))

        if json_body is not None:
            try:
                body = json.loads(json_body)
            except json.JSONDecodeError as exc:
                raise click.BadParameter(f"Invalid JSON data: {exc}") from exc
            request.with_content_json(body)
        elif content is not None:
            request.with_content(StringContent(content))

        with contextlib.ExitStack() as stack:
            if form_fields or files:
                multipart = request.with_multipart_form_content()
                for field in form_fields:
                    multipart.with_string(*parse_pair(field, "form"))
                for file_option in files:
                    name, path = parse_pair(file_option, "file")
                    stream = stack.enter_context(open(path, "rb"))
                    content_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
                    multipart.with_file(name, stream, os.path.basename(path), content_type)

            builder = HttpClientBuilder()
            if bearer is not None:
                builder.add_bearer_token(bearer)
            if api_version is not None:
                builder.add_api_version(api_version)

            client = stack.enter_context(builder.build())
            if download is not None:
                response = client.send(request.build(client), stream=True)
                with HttpFileResponse.from_response(response) as file:
                    with open(download, "wb") as f:
                        f.write(file.stream.read())
                _echo_download(use_rich, download, file.status_code)
                if file.status_code >= 300:
                    sys.exit(1)
                return

            response = request.send(client)

        if use_rich:
            print_response_rich(Console(), response)
        else:
            click.echo(format_response_plain(response))

        if response.status_code >= 300:
            sys.exit(1)

    except (httpx.HTTPError, HttpFluentError) as exc:
        if use_rich:
            console = Console(stderr=True)
            console.print(f"[bold red]{type(exc).__name__}[/bold red]: {exc}")
        else:
            click.echo(f"{type(exc).__name__}: {exc}", err=True)
        sys.exit(1)


def _echo_download(use_rich: bool, path: str, status_code: int) -> None:
    size = os.path.getsize(path)
    if use_rich:
        Console().print(
            f"[green]✓[/green] Downloaded [bold]{size:,}[/bold] bytes "
            f"to [cyan]{path}[/cyan] ({status_code})"
        )
    else:
        click.echo(f"Downloaded {size:,} bytes to {path} ({status_code})")
