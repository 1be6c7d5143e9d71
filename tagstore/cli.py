"""
Командная строка Tag Store: теги для файлов по хешу их содержимого.

Примеры:
    tagstore add-file-tags photo.jpg holiday beach
    tagstore get-file-tags photo.jpg
    tagstore --json get-files-tags *.jpg
    tagstore copy-tags photo.jpg photo-edited.jpg

Адрес сервера и ключ - из TAGSTORE_SERVER_URL / TAGSTORE_API_KEY
или ~/.config/tagstore/.env.
"""

import asyncio
import hashlib
import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import httpx
import typer
from rich.console import Console

from .client import TagStoreClient, TagStoreClientError
from .core.exceptions import InvalidTagError
from .services.validation import validate_tags

app = typer.Typer(help="Attach tags to files by the hash of their content.", no_args_is_help=True)
console = Console()
err_console = Console(stderr=True)

# BLAKE2b-512: 64-байтный дайджест
HASH_DIGEST_SIZE = 64
READ_CHUNK_SIZE = 8192


def hash_file(path: Path) -> bytes:
    """Хеш содержимого файла (BLAKE2b-512), файл читается кусками по 8 КиБ."""
    state = hashlib.blake2b(digest_size=HASH_DIGEST_SIZE)
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(READ_CHUNK_SIZE), b""):
            state.update(chunk)
    return state.digest()


def make_client() -> TagStoreClient:
    return TagStoreClient.from_settings()


def _run(action: Callable[[TagStoreClient], Awaitable[Any]]) -> Any:
    """Выполнить действие с клиентом; ошибки сервера и сети -> сообщение и код 1."""

    async def with_client() -> Any:
        async with make_client() as client:
            return await action(client)

    try:
        return asyncio.run(with_client())
    except TagStoreClientError as e:
        err_console.print(f"[red]Error while doing rpc call: {e}[/red]")
        raise typer.Exit(1)
    except httpx.TransportError as e:
        err_console.print(f"[red]Can't connect to tag store: {e}[/red]")
        raise typer.Exit(1)


def _hash_or_exit(path: Path) -> bytes:
    try:
        return hash_file(path)
    except OSError as e:
        err_console.print(f"[red]Can't hash file {path}: {e}[/red]")
        raise typer.Exit(1)


def _check_tags(tags: list[str]) -> list[str]:
    try:
        return validate_tags(tags)
    except InvalidTagError as e:
        err_console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)


def _print_file_tags(tags: list[str], as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(tags, ensure_ascii=False))
        return
    for tag in tags:
        typer.echo(tag)


def _print_files_tags(tag_map: dict[str, list[str]], as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(tag_map, ensure_ascii=False))
        return
    for file, tags in tag_map.items():
        console.print(f"[bold]{file}:[/bold]", highlight=False)
        for tag in tags:
            typer.echo(tag)


@app.callback()
def main(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", "-j", help="Print results as JSON"),
):
    """Tag Store client."""
    ctx.obj = {"json": json_output}


@app.command("add-file-tags")
def add_file_tags(
    file: Path = typer.Argument(..., help="File whose content gets the tags"),
    tags: list[str] = typer.Argument(..., help="Tags to add (space-separated)"),
):
    """Add tags to a file's content hash"""
    names = _check_tags(tags)
    digest = _hash_or_exit(file)
    _run(lambda client: client.add_tags_to_hash(digest, names))


@app.command("get-file-tags")
def get_file_tags(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="File to look up"),
):
    """Show tags of a file"""
    digest = _hash_or_exit(file)
    tags = _run(lambda client: client.get_tags(digest))
    _print_file_tags(tags, ctx.obj["json"])


@app.command("get-files-tags")
def get_files_tags(
    ctx: typer.Context,
    files: list[Path] = typer.Argument(..., help="Files to look up"),
):
    """Show tags of many files (one request). Unreadable files are reported and skipped"""
    hashed: list[tuple[str, bytes]] = []
    for file in files:
        try:
            hashed.append((str(file), hash_file(file)))
        except OSError as e:
            err_console.print(f"[red]Can't hash file {file}: {e}[/red]")

    tag_lists: list[list[str]] = []
    if hashed:
        tag_lists = _run(lambda client: client.get_multiple_tags([d for _, d in hashed]))

    tag_map = {file: tags for (file, _), tags in zip(hashed, tag_lists)}
    _print_files_tags(tag_map, ctx.obj["json"])


@app.command("copy-tags")
def copy_tags(
    src: Path = typer.Argument(..., help="File to copy tags from"),
    dest: Path = typer.Argument(..., help="File to copy tags to"),
):
    """Copy tags from one file's content to another's (merge, not replace)"""
    src_digest = _hash_or_exit(src)
    dest_digest = _hash_or_exit(dest)
    _run(lambda client: client.copy_tags(src_digest, dest_digest))


if __name__ == "__main__":
    app()
