"""Command-line interface for bzpath."""

import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from bzpath.base import Bzip2Error, PathConflictStrategy
from bzpath.config import CompressionMethodConfig
from bzpath.method import Bzip2CompressionMethod

app = typer.Typer(
    name="bzpath",
    help="Compress files and directories with bzip2",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


LevelOption = Annotated[
    Optional[int],
    typer.Option("--level", "-l", min=1, max=9, help="Block size for string compression (1-9)"),
]
ChunkSizeOption = Annotated[
    Optional[int],
    typer.Option("--chunk-size", min=1, help="Bytes moved per read/write when streaming"),
]
ConflictOption = Annotated[
    Optional[PathConflictStrategy],
    typer.Option("--on-conflict", help="What to do when the destination already exists"),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Compress files and directories with bzip2."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _build_method(
    level: Optional[int] = None,
    chunk_size: Optional[int] = None,
    on_conflict: Optional[PathConflictStrategy] = None,
) -> Bzip2CompressionMethod:
    try:
        config = CompressionMethodConfig.from_environment().with_overrides(
            compression_level=level,
            chunk_size=chunk_size,
            conflict_strategy=on_conflict,
        )
        return Bzip2CompressionMethod(config=config)
    except Bzip2Error as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _fail(error: Exception) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {error}")
    if error.__cause__ is not None:
        err_console.print(f"  Caused by: {error.__cause__!r}")
    raise typer.Exit(1)


@app.command(name="compress")
def compress_cmd(
    path: Annotated[Path, typer.Argument(help="File or directory to compress")],
    chunk_size: ChunkSizeOption = None,
    on_conflict: ConflictOption = None,
) -> None:
    """Compress a file into NAME.bz2 or a directory into NAME.tar.bz2."""
    method = _build_method(chunk_size=chunk_size, on_conflict=on_conflict)
    try:
        compressed = method.compress_path(path)
    except Bzip2Error as e:
        _fail(e)
    console.print(f"Compressed [bold]{path}[/bold] -> [green]{compressed}[/green]")


@app.command(name="uncompress")
def uncompress_cmd(
    path: Annotated[Path, typer.Argument(help="NAME.bz2 file or NAME.tar.bz2 archive")],
    chunk_size: ChunkSizeOption = None,
    on_conflict: ConflictOption = None,
) -> None:
    """Uncompress a .bz2 file or a .tar.bz2 directory archive."""
    method = _build_method(chunk_size=chunk_size, on_conflict=on_conflict)
    try:
        restored = method.uncompress_path(path)
    except Bzip2Error as e:
        _fail(e)
    console.print(f"Uncompressed [bold]{path}[/bold] -> [green]{restored}[/green]")


@app.command(name="compress-string")
def compress_string_cmd(
    text: Annotated[str, typer.Argument(help="Text to compress (UTF-8)")],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="File to write the compressed bytes to"),
    ],
    level: LevelOption = None,
) -> None:
    """Compress a string in memory and write the result to a file."""
    method = _build_method(level=level)
    data = text.encode("utf-8")
    try:
        compressed = method.compress_string(data)
    except Bzip2Error as e:
        _fail(e)
    output.write_bytes(compressed)

    table = Table(show_header=False, box=None)
    table.add_row("Original", f"{len(data):,} bytes")
    table.add_row("Compressed", f"{len(compressed):,} bytes")
    table.add_row("Level", str(method.config.compression_level))
    table.add_row("Written to", str(output))
    console.print(table)


@app.command(name="uncompress-string")
def uncompress_string_cmd(
    file: Annotated[Path, typer.Argument(help="File holding a compressed string")],
) -> None:
    """Uncompress a string written by compress-string and print it."""
    if not file.is_file():
        err_console.print(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)

    method = _build_method()
    try:
        data = method.uncompress_string(file.read_bytes())
    except Bzip2Error as e:
        _fail(e)
    console.print(data.decode("utf-8", errors="replace"), markup=False, highlight=False)


if __name__ == "__main__":
    app()
