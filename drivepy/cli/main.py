"""Drive CLI - Main commands."""
import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

app = typer.Typer(
    name="drive",
    help="Drive cloud storage CLI",
    add_completion=False
)
console = Console()

TOKEN_ENVVAR = "DRIVE_ACCESS_TOKEN"


def token_option():
    return typer.Option(
        ..., "--token", "-t",
        envvar=TOKEN_ENVVAR,
        help=f"OAuth access token (or set {TOKEN_ENVVAR})",
        show_default=False
    )


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


@app.command()
def ls(
    folder: str = typer.Argument("root", help="Folder id to list"),
    mime_type: Optional[str] = typer.Option(None, "--type", help="Only files of this MIME type (wildcards allowed)"),
    extension: Optional[str] = typer.Option(None, "--ext", help="Only files with this extension"),
    page_size: int = typer.Option(100, "--page-size", help="Results per page"),
    token: str = token_option(),
):
    """List files in a folder."""
    from drivepy import DriveClient

    async def list_files():
        async with DriveClient(token) as drive:
            result = await drive.list(
                folder=folder,
                mime_type=mime_type,
                file_extension=extension,
                page_size=page_size
            )

        table = Table()
        table.add_column("Type", style="cyan")
        table.add_column("Name")
        table.add_column("MIME type", style="dim")
        table.add_column("Id", style="dim")

        for item in result.get('files', []):
            is_folder = item.get('mimeType') == DriveClient.FOLDER_MIME_TYPE
            table.add_row("D" if is_folder else "F", item.get('name', ''), item.get('mimeType', ''), item.get('id', ''))

        console.print(table)
        if result.get('nextPageToken'):
            console.print(f"[dim]More results available (page token {result['nextPageToken']})[/dim]")

    run_async(list_files())


@app.command()
def search(
    query: str = typer.Argument(..., help="Query in the files API query language"),
    page_size: int = typer.Option(100, "--page-size", help="Results per page"),
    token: str = token_option(),
):
    """Search files with a raw query."""
    from drivepy import DriveClient

    async def do_search():
        async with DriveClient(token) as drive:
            result = await drive.search(
                query=query,
                fields=DriveClient.DEFAULT_LIST_FIELDS,
                page_size=page_size
            )
        for item in result.get('files', []):
            console.print(f"{item.get('id')}  {item.get('name')}")

    run_async(do_search())


@app.command()
def upload(
    file_path: Path = typer.Argument(..., help="Local file to upload", exists=True, dir_okay=False),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Remote file name"),
    content_type: Optional[str] = typer.Option(None, "--content-type", "-c", help="Declared MIME type"),
    file_id: Optional[str] = typer.Option(None, "--replace", "-r", help="Replace the content of this file id"),
    chunk_size: int = typer.Option(8 * 1024 * 1024, "--chunk-size", help="Bytes per request (0 sends everything at once)"),
    max_retries: Optional[int] = typer.Option(None, "--max-retries", help="Give up after this many consecutive transient failures"),
    deadline: Optional[float] = typer.Option(None, "--deadline", help="Give up retrying after this many seconds"),
    token: str = token_option(),
):
    """Upload a file with the resumable protocol."""
    from drivepy import DriveClient, FilePayload, UploadError, UploadOptions
    from drivepy.core.upload.models import UploadProgress

    async def do_upload():
        payload = FilePayload(file_path, content_type=content_type, name=name)
        options = UploadOptions(
            chunk_size=chunk_size,
            max_retries=max_retries,
            deadline=deadline
        )

        async with DriveClient(token) as drive:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=console
            ) as progress:
                task = progress.add_task(f"Uploading {payload.name}", total=payload.size or 1)

                def on_progress(p: UploadProgress):
                    progress.update(task, completed=p.uploaded_bytes)

                try:
                    result = await drive.upload(
                        payload,
                        file_id=file_id,
                        options=options,
                        on_progress=on_progress
                    )
                except UploadError as e:
                    console.print(f"[red]Upload failed: {e}[/red]")
                    raise typer.Exit(1)
                progress.update(task, completed=payload.size or 1)

        console.print(f"[green]Uploaded:[/green] {payload.name}")
        if result.file_id:
            console.print(f"Id: {result.file_id}")
        console.print(f"Size: {result.file_size:,} bytes")
        if result.retries:
            console.print(f"[yellow]Recovered from {result.retries} transient failures[/yellow]")

    run_async(do_upload())


@app.command()
def info(
    file_id: str = typer.Argument(..., help="File id"),
    token: str = token_option(),
):
    """Show file metadata."""
    from drivepy import DriveClient

    async def show_info():
        async with DriveClient(token) as drive:
            file = await drive.read(file_id, info_only=True)

        console.print(f"[bold]Name:[/bold] {file.get('name')}")
        console.print(f"[bold]Id:[/bold] {file.get('id')}")
        console.print(f"[bold]Type:[/bold] {file.get('mimeType')}")
        if file.get('parents'):
            console.print(f"[bold]Parents:[/bold] {', '.join(file['parents'])}")
        if file.get('description'):
            console.print(f"[bold]Description:[/bold] {file['description']}")
        if file.get('properties'):
            console.print(f"[bold]Properties:[/bold] {json.dumps(file['properties'])}")

    run_async(show_info())


@app.command()
def cat(
    file_id: str = typer.Argument(..., help="File id"),
    token: str = token_option(),
):
    """Print file content."""
    from drivepy import DriveClient

    async def show_content():
        async with DriveClient(token) as drive:
            file = await drive.read(file_id)
        content = file.get('content')
        if isinstance(content, (dict, list)):
            console.print_json(json.dumps(content))
        elif content is not None:
            console.print(content, markup=False)

    run_async(show_content())


@app.command()
def rm(
    file_id: str = typer.Argument(..., help="File id"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
    token: str = token_option(),
):
    """Delete a file permanently."""
    from drivepy import DriveClient

    if not force and not typer.confirm(f"Delete {file_id} permanently?"):
        raise typer.Exit(0)

    async def do_delete():
        async with DriveClient(token) as drive:
            await drive.delete(file_id)
        console.print(f"[green]Deleted:[/green] {file_id}")

    run_async(do_delete())


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
