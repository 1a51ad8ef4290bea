"""CLI command implementations"""

import json
from datetime import timedelta
from pathlib import Path
from typing import Annotated, Optional
from uuid import UUID

import typer
import uvicorn
from sqlmodel import Session, SQLModel

from blockpress.config import Settings, load_config
from blockpress.core.compose import markdown_to_document
from blockpress.core.errors import BlockpressError
from blockpress.core.media import ingest
from blockpress.core.models import AccessTier
from blockpress.core.render import excerpt, render, to_html
from blockpress.core.tiers import parse_tier
from blockpress.crud.database import init_db, make_engine
from blockpress.crud.posts import change_tier, get_post, list_posts, load_document, save_post
from blockpress.crud.profiles import reader_plan, upsert_profile
from blockpress.crud.sessions import SessionIdentities, issue_session
from blockpress.logs import configure_logging
from blockpress.storage.local import from_settings
from blockpress.web.app import create_app


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings.log_level)
    return settings


def _engine(settings: Settings):
    engine = make_engine(settings.db_url)
    init_db(engine)
    return engine


def _post_id(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        _fail(f"Not a post id: {value}")


def _read_document(path: Path, preset: str) -> tuple[dict, dict]:
    """Return (frontmatter, document dict) from a .json document or a markdown file."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return {}, json.loads(text)
    frontmatter, document = markdown_to_document(text, preset)
    return frontmatter, document.dump()


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        SQLModel.metadata.drop_all(engine)
        typer.echo("Existing data cleared.")
    init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def login_cmd(
    user: Annotated[str, typer.Argument(help="User id to issue a session for")],
    plan: Annotated[Optional[str], typer.Option("--plan", help="Set the reader plan (free|paid)")] = None,
    ):
    """Issue a session token (creates the profile if missing)."""
    settings = _settings()
    engine = _engine(settings)
    try:
        with Session(engine) as session:
            upsert_profile(session, user, plan=parse_tier(plan) if plan else None)
            auth = issue_session(session, user, timedelta(hours=settings.session_ttl_hours))
            token = auth.token
            session.commit()
    except BlockpressError as e:
        _fail(str(e))
    typer.echo(token)


def upload_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="Image to upload")],
    token: Annotated[Optional[str], typer.Option("--token", envvar="BLOCKPRESS_TOKEN", help="Session token from `login`")] = None,
    tier: Annotated[str, typer.Option("--tier", help="free or paid")] = AccessTier.free.value,
    ):
    """Store an image in the tier's namespace and print the URL to embed (requires a session)."""
    settings = _settings()
    identity = SessionIdentities(_engine(settings)).authenticate(token)
    try:
        reference = ingest(path.read_bytes(), path.name, identity, tier, from_settings(settings), settings)
    except BlockpressError as e:
        _fail(str(e))
    typer.echo(reference.url)


def publish_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="Document JSON or markdown file")],
    user: Annotated[str, typer.Option("--user", help="Author id")],
    title: Annotated[Optional[str], typer.Option("--title", help="Post title (default: frontmatter title)")] = None,
    tier: Annotated[Optional[str], typer.Option("--tier", help="free or paid (default: frontmatter tier, else free)")] = None,
    post_id: Annotated[Optional[str], typer.Option("--post-id", help="Update this post instead of creating one")] = None,
    ):
    """Validate and save a post; prints '<status>: <post id>'."""
    settings = _settings()
    engine = _engine(settings)
    try:
        frontmatter, document = _read_document(path, settings.parser_config)
    except (ValueError, OSError) as e:
        _fail(f"Cannot read {path}", e)

    try:
        with Session(engine) as session:
            post, status = save_post(
                session,
                author_id=user,
                title=title or str(frontmatter.get("title") or ""),
                tier=tier or frontmatter.get("tier") or AccessTier.free.value,
                document=document,
                post_id=_post_id(post_id) if post_id else None,
            )
            saved_id = post.id
            session.commit()
    except BlockpressError as e:
        _fail(str(e))
    typer.echo(f"{status}: {saved_id}")


def tier_cmd(
    post_id: Annotated[str, typer.Argument(help="Post id")],
    tier: Annotated[str, typer.Argument(help="New tier: free or paid")],
    user: Annotated[str, typer.Option("--user", help="Author id")],
    ):
    """Change a post's tier. Images already embedded keep their URLs."""
    settings = _settings()
    engine = _engine(settings)
    try:
        with Session(engine) as session:
            post = change_tier(session, _post_id(post_id), user, tier)
            new_tier = post.tier
            session.commit()
    except BlockpressError as e:
        _fail(str(e))
    typer.echo(f"{post_id} -> {AccessTier(new_tier).value}")


def render_cmd(
    post_id: Annotated[str, typer.Argument(help="Post id")],
    out: Annotated[Optional[Path], typer.Option("--out", help="Write HTML here instead of stdout")] = None,
    ):
    """Render a stored post to an HTML fragment."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        post = get_post(session, _post_id(post_id))
        if post is None:
            _fail(f"Post {post_id} not found")
        html = to_html(render(load_document(post)))
    if out:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(html + "\n", encoding="utf-8")
        typer.echo(f"  {post_id} -> {out}")
    else:
        typer.echo(html)


def list_cmd(
    plan: Annotated[Optional[str], typer.Option("--plan", help="Reader plan to list for (free|paid)")] = None,
    user: Annotated[Optional[str], typer.Option("--user", help="List as this reader (uses their plan)")] = None,
    ):
    """List posts visible to a reader, newest first."""
    settings = _settings()
    engine = _engine(settings)
    try:
        with Session(engine) as session:
            if plan:
                reader = parse_tier(plan)
            elif user:
                reader = reader_plan(session, user)
            else:
                reader = AccessTier.free
            posts = list_posts(session, reader)
            lines = [
                f"{p.id}  [{AccessTier(p.tier).value}]  {p.title}  - {excerpt(load_document(p), 60)}"
                for p in posts
            ]
    except BlockpressError as e:
        _fail(str(e))
    if not lines:
        typer.echo("No posts found for this access level.")
        raise typer.Exit(1)
    for line in lines:
        typer.echo(line)


def serve_cmd(
    host: Annotated[str, typer.Option("--host", help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", help="Bind port")] = 8000,
    ):
    """Run the image proxy and upload endpoints with uvicorn."""
    settings = _settings()
    engine = _engine(settings)
    app = create_app(settings, from_settings(settings), SessionIdentities(engine))
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())
