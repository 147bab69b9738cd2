"""Time Capsule CLI.

The unlock check is an access-control convenience, not a cryptographic delay
function; a holder of the file and password can always decrypt early by
bypassing the check in a modified client.
"""

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from .capsule import CapsuleCodec, CapsuleError, DecryptionError, TimeLockedError
from .capsule.store import CapsuleStore
from .config import Settings, get_settings
from .logging_config import setup_colored_logging
from .utils import format_duration, parse_date, utcnow

logger = logging.getLogger(__name__)

RULER = "=" * 50
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx, verbose):
    """A time capsule for your messages.

    Encrypt content that can only be decrypted after a specific date. The
    date check is a convenience, not a cryptographic guarantee: anyone with
    the file and the password can decrypt early with a modified client.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_colored_logging(verbose)


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as e:
        click.echo(f"Error loading settings: {e}", err=True)
        sys.exit(1)


def _read_content(message: str | None, file: Path | None) -> bytes:
    if message is not None and file is not None:
        raise click.UsageError("Cannot specify both --message and --file")
    if message is not None:
        return message.encode("utf-8")
    if file is not None:
        try:
            return file.read_bytes()
        except OSError as e:
            raise click.FileError(str(file), hint=e.strerror or str(e)) from e

    click.echo("Enter your message (press Ctrl+D when done):", err=True)
    return click.get_text_stream("stdin").read().strip().encode("utf-8")


@cli.command()
@click.option("-m", "--message", help="Message to lock (or use --file to read from file)")
@click.option("-f", "--file", "file", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="File to read message from")
@click.option("-d", "--date", "date_str", required=True, help='Unlock date (e.g. "2030-12-25", "2030-12-25 15:30:00"), UTC')
@click.option("-l", "--label", help="Optional label for the message")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Output file (defaults to storage directory)")
def lock(message, file, date_str, label, output):
    """Lock a message until a specific date."""
    content = _read_content(message, file)

    try:
        unlock_at = parse_date(date_str)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--date") from e

    if unlock_at <= utcnow():
        raise click.BadParameter("Unlock date must be in the future", param_hint="--date")

    settings = _load_settings()

    password = click.prompt(
        "Enter password to encrypt the message",
        hide_input=True,
        confirmation_prompt=True,
        default="",
        show_default=False,
    )
    if len(password.strip()) < settings.min_password_length:
        if settings.min_password_length == 1:
            click.echo("Error: Password cannot be empty", err=True)
        else:
            click.echo(f"Error: Password must be at least {settings.min_password_length} characters", err=True)
        sys.exit(1)

    codec = CapsuleCodec(settings.kdf)
    store = CapsuleStore(settings)

    try:
        record = codec.seal(content, password, unlock_at, label=label)
        path = store.save(record, output)
    except CapsuleError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    logger.info(f"[CLI] Locked capsule {record.id}")

    click.echo("Message locked successfully!")
    click.echo(f"Message ID: {record.id}")
    click.echo(f"Saved to: {path}")
    click.echo(f"Unlock date: {unlock_at.strftime(TIMESTAMP_FORMAT)}")
    click.echo(f"Time remaining: {format_duration(unlock_at - utcnow())}")


@cli.command()
@click.option("-i", "--id", "record_id", help="Message ID")
@click.option("-f", "--file", "file", type=click.Path(dir_okay=False, path_type=Path), help="File path to unlock")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Write decrypted bytes to this file")
def unlock(record_id, file, output):
    """Try to unlock a message."""
    if file is None and record_id is None:
        raise click.UsageError("Must specify either --id or --file")

    settings = _load_settings()
    store = CapsuleStore(settings)

    try:
        record = store.load(file if file is not None else record_id)
    except CapsuleError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not record.is_ready():
        _echo_locked(record.unlock_at, record.unlock_at - utcnow())
        return

    password = click.prompt("Enter password to decrypt the message", hide_input=True, default="", show_default=False)
    # Opening uses the KDF parameters stored in the record
    codec = CapsuleCodec()

    try:
        content = codec.open(record, password)
    except TimeLockedError as e:
        _echo_locked(e.unlock_at, e.remaining)
        return
    except DecryptionError as e:
        click.echo(f"Failed to unlock message: {e}", err=True)
        sys.exit(1)
    except CapsuleError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if output is not None:
        try:
            output.write_bytes(content)
        except OSError as e:
            click.echo(f"Error: Failed to write {output}: {e}", err=True)
            sys.exit(1)
        click.echo("Message unlocked successfully!")
        click.echo(f"Content written to: {output}")
        return

    click.echo("Message unlocked successfully!")
    click.echo("Content:")
    click.echo(RULER)
    click.echo(content.decode("utf-8", errors="replace"))
    click.echo(RULER)


def _echo_locked(unlock_at, remaining):
    click.echo("Message is still locked!")
    click.echo(f"Unlock date: {unlock_at.strftime(TIMESTAMP_FORMAT)}")
    click.echo(f"Time remaining: {format_duration(remaining)}")


@cli.command("list")
def list_command():
    """List all locked messages."""
    store = CapsuleStore(_load_settings())
    summaries = store.list()

    if not summaries:
        click.echo("No locked messages found")
        return

    now = utcnow()
    click.echo("Locked Messages:")
    click.echo("=" * 80)
    for summary in summaries:
        status = "READY" if summary.is_ready(now) else "LOCKED"
        label = summary.label or "(no label)"
        click.echo(
            f"ID: {summary.id} | {status:<6} | {summary.unlock_at.strftime('%Y-%m-%d %H:%M UTC')} | {label}"
        )


@cli.command()
def check():
    """Check if any messages are ready to unlock."""
    store = CapsuleStore(_load_settings())
    now = utcnow()
    ready = [s for s in store.list() if s.is_ready(now)]

    if not ready:
        click.echo("No messages are ready to unlock yet")
        return

    click.echo(f"{len(ready)} message(s) are ready to unlock:")
    for summary in ready:
        click.echo(f"  {summary.id}: {summary.label or '(no label)'}")
    click.echo("")
    click.echo("Use 'timecapsule unlock --id <ID>' to unlock them")


@cli.command()
@click.option("-i", "--id", "record_id", required=True, help="Message ID")
@click.option("-y", "--yes", is_flag=True, help="Delete without confirmation")
def delete(record_id, yes):
    """Delete a stored message."""
    store = CapsuleStore(_load_settings())

    if not yes:
        click.confirm(f"Delete message {record_id}?", abort=True)

    try:
        path = store.delete(record_id)
    except CapsuleError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Deleted: {path}")


if __name__ == "__main__":
    cli()
