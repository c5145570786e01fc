"""CLI command implementations"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdpost.config import Settings, load_config
from mdpost.core.bridge.sync import normalize_body
from mdpost.core.frontmatter import format_value, parse_value
from mdpost.core.metadata import generate_meta_description, new_post, new_post_path, validate_metadata
from mdpost.core.render import render, render_document
from mdpost.core.session import DocumentSession
from mdpost.core.utils.diff import diff_summary
from mdpost.errors import MdpostError
from mdpost.storage.assets import save_asset
from mdpost.storage.store import FileStore


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _open(store: FileStore, path: str, settings: Settings) -> DocumentSession:
    """Read path from the store into a fresh session."""
    session = DocumentSession(image_route=settings.image_route)
    try:
        session.open_document(store.read(path), path=path)
    except MdpostError as e:
        _fail(f"Cannot open {path}", e)
    return session


def _save(store: FileStore, session: DocumentSession) -> None:
    try:
        store.write(session.path, session.current_stored_text())
    except MdpostError as e:
        _fail(f"Cannot save {session.path}", e)
    session.mark_saved()


RootOption = Annotated[Optional[str], typer.Option("--root", help="Content root directory")]


def show_cmd(
    path: Annotated[str, typer.Argument(help="Document path relative to the content root")],
    as_json: Annotated[bool, typer.Option("--json", help="Print metadata and body as JSON")] = False,
    root: RootOption = None,
    ):
    """Show a document's metadata and a body summary."""
    settings = _settings(overrides={"content_root": root})
    session = _open(FileStore(Path(settings.content_root)), path, settings)
    if as_json:
        typer.echo(json.dumps({"metadata": session.metadata, "body": session.body_text}, indent=2))
        return
    for key, value in session.metadata.items():
        typer.echo(f"{key}: {format_value(value)}")
    body = session.body_text
    typer.echo(f"body: {len(body.splitlines())} line(s), {len(body)} char(s)")


def render_cmd(
    path: Annotated[str, typer.Argument(help="Document path relative to the content root")],
    body_only: Annotated[bool, typer.Option("--body-only", help="Render the file as a bare body, no frontmatter")] = False,
    out: Annotated[Optional[Path], typer.Option("--out", help="Write the HTML fragment here instead of stdout")] = None,
    root: RootOption = None,
    ):
    """Render a document's body to a sanitized HTML preview."""
    settings = _settings(overrides={"content_root": root})
    store = FileStore(Path(settings.content_root))
    try:
        text = store.read(path)
    except MdpostError as e:
        _fail(f"Cannot open {path}", e)

    if body_only:
        html = render(text, path, settings.image_route, settings.render_preset)
    else:
        html = render_document(text, path, settings.image_route, settings.render_preset).html

    if out:
        out.write_text(html, encoding="utf-8")
        typer.echo(f"  {path} -> {out}")
    else:
        typer.echo(html, nl=False)


def set_cmd(
    path: Annotated[str, typer.Argument(help="Document path relative to the content root")],
    key: Annotated[str, typer.Argument(help="Metadata key")],
    value: Annotated[str, typer.Argument(help='Value, parsed like a header line (e.g. true, ["a", "b"])')],
    root: RootOption = None,
    ):
    """Set one metadata field and save the document."""
    settings = _settings(overrides={"content_root": root})
    store = FileStore(Path(settings.content_root))
    session = _open(store, path, settings)
    try:
        session.set_metadata_field(key, parse_value(value))
    except ValueError as e:
        _fail(str(e))
    _save(store, session)
    typer.echo(f"{key}: {format_value(session.metadata[key.strip()])}")


def unset_cmd(
    path: Annotated[str, typer.Argument(help="Document path relative to the content root")],
    key: Annotated[str, typer.Argument(help="Metadata key")],
    root: RootOption = None,
    ):
    """Remove one metadata field and save the document."""
    settings = _settings(overrides={"content_root": root})
    store = FileStore(Path(settings.content_root))
    session = _open(store, path, settings)
    if key not in session.metadata:
        _fail(f"No field '{key}' in {path}")
    session.remove_metadata_field(key)
    _save(store, session)
    typer.echo(f"Removed {key}")


def normalize_cmd(
    path: Annotated[str, typer.Argument(help="Document path relative to the content root")],
    check: Annotated[bool, typer.Option("--check", help="Exit 1 if the body is not in canonical form; don't write")] = False,
    show_diff: Annotated[bool, typer.Option("--diff", help="Print a unified diff of the change")] = False,
    root: RootOption = None,
    ):
    """Rewrite the body in the canonical form produced by the structural editor."""
    settings = _settings(overrides={"content_root": root})
    store = FileStore(Path(settings.content_root))
    session = _open(store, path, settings)
    body = session.body_text
    # Keep the blank lines that separate the body from the header.
    canonical = body[:len(body) - len(body.lstrip("\n"))] + normalize_body(body)
    if canonical == body:
        typer.echo(f"{path}: already canonical")
        return

    original = session.current_stored_text()
    session.set_body_from_text(canonical)
    stats = diff_summary(original, session.current_stored_text())
    if show_diff:
        typer.echo(session.unsaved_diff(), nl=False)
    typer.echo(f"{path}: {stats['added']} added, {stats['deleted']} deleted")
    if check:
        raise typer.Exit(1)
    _save(store, session)


def validate_cmd(
    path: Annotated[str, typer.Argument(help="Document path relative to the content root")],
    root: RootOption = None,
    ):
    """Check the reserved metadata fields of a document."""
    settings = _settings(overrides={"content_root": root})
    session = _open(FileStore(Path(settings.content_root)), path, settings)
    errors = validate_metadata(session.metadata, settings.meta_description_length)
    if errors:
        for error in errors:
            typer.echo(f"  {error}", err=True)
        _fail(f"{path} has {len(errors)} problem(s)")
    typer.echo(f"{path}: ok")


def new_cmd(
    file_name: Annotated[str, typer.Argument(help="File name for the new post, e.g. my-post.md")],
    title: Annotated[Optional[str], typer.Option("--title", help="Post title")] = None,
    root: RootOption = None,
    ):
    """Create a new post from the default template under blog/YYYY/MM/<slug>/."""
    settings = _settings(overrides={"content_root": root})
    store = FileStore(Path(settings.content_root))
    path = new_post_path(file_name)
    if store.resolve(path).exists():
        _fail(f"{path} already exists")
    try:
        store.write(path, new_post(title or ""))
    except MdpostError as e:
        _fail(f"Cannot create {path}", e)
    typer.echo(path)


def describe_cmd(
    path: Annotated[str, typer.Argument(help="Document path relative to the content root")],
    write: Annotated[bool, typer.Option("--write", help="Store the result as metaDescription")] = False,
    root: RootOption = None,
    ):
    """Generate a meta description from the body."""
    settings = _settings(overrides={"content_root": root})
    store = FileStore(Path(settings.content_root))
    session = _open(store, path, settings)
    description = generate_meta_description(session.body_text, settings.meta_description_length)
    typer.echo(description)
    if write:
        session.set_metadata_field("metaDescription", description)
        _save(store, session)


def add_image_cmd(
    path: Annotated[str, typer.Argument(help="Document path relative to the content root")],
    image: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="Image file to upload")],
    alt: Annotated[str, typer.Option("--alt", help="Alt text")] = "",
    featured: Annotated[bool, typer.Option("--featured", help="Use as featuredImage instead of inserting into the body")] = False,
    root: RootOption = None,
    ):
    """Copy an image next to the document and reference it from the post."""
    settings = _settings(overrides={"content_root": root})
    store = FileStore(Path(settings.content_root))
    session = _open(store, path, settings)
    try:
        asset = save_asset(
            store, path, image.name, image.read_bytes(),
            settings.image_route, settings.images_dir,
        )
    except (MdpostError, ValueError) as e:
        _fail("Upload failed", e)

    if featured:
        session.set_metadata_field("featuredImage", asset.storage_reference)
    else:
        session.insert_image(asset, alt=alt)
    _save(store, session)
    typer.echo(asset.storage_reference)
