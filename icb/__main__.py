"""Command-line ICB client."""

import sys
from pathlib import Path

import click
import structlog
from dotenv import load_dotenv
from pydantic import ValidationError

from . import __version__
from .config import ConnectionConfig, LoggingConfig, load_config
from .models.packet import Message, PacketType
from .network import ICBConnectionError, PacketError, connect
from .utils.logging import setup_logging


logger = structlog.get_logger()


def _pad(fields: list[str], count: int) -> list[str]:
    return (fields + [""] * count)[:count]


def format_message(message: Message) -> str | None:
    """Render a received message as a line of text, or None to hide it."""
    packet_type = message.packet_type
    fields = message.fields

    if packet_type in (PacketType.PING, PacketType.PONG):
        return None
    if packet_type is PacketType.LOGIN_OK:
        return "[=Login=] Logged in"
    if packet_type is PacketType.OPEN:
        nick, text = _pad(fields, 2)
        return f"<{nick}> {text}"
    if packet_type is PacketType.PERSONAL:
        nick, text = _pad(fields, 2)
        return f"*{nick}* {text}"
    if packet_type is PacketType.STATUS:
        category, text = _pad(fields, 2)
        return f"[={category}=] {text}"
    if packet_type is PacketType.ERROR:
        return f"[=Error=] {' '.join(fields)}"
    if packet_type is PacketType.ALERT:
        return f"[=Alert=] {' '.join(fields)}"
    if packet_type is PacketType.BEEP:
        (nick,) = _pad(fields, 1)
        return f"[=Beep=] {nick} beeps you"
    if packet_type is PacketType.EXIT:
        return "[=Exit=] Server closed the session"
    if packet_type is PacketType.PROTOCOL:
        level, host_id, server_id = _pad(fields, 3)
        return f"[=Protocol=] {host_id} {server_id} (level {level})".rstrip()
    if packet_type is PacketType.COMMAND_OUTPUT:
        (output_type,) = _pad(fields, 1)
        # "ec" marks the end of a command's output
        if output_type == "ec":
            return None
        return " ".join(fields[1:])

    return f"[{message.type}] {' '.join(fields)}"


@click.command()
@click.option(
    "-c",
    "--config",
    type=click.Path(dir_okay=False, path_type=Path),
    default="icb.yaml",
    help="Path to configuration file (ignored if missing)",
)
@click.option(
    "-e",
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=".env",
    help="Path to environment file (ignored if missing)",
)
@click.option("--host", help="Server address")
@click.option("--port", type=int, help="Server port")
@click.option("-u", "--user", help="Login name")
@click.option("-n", "--nick", help="Nickname")
@click.option("-g", "--group", help="Group to join on login")
@click.option("--password", help="Login password")
@click.option("-m", "--message", "messages", multiple=True, help="Open message to send after login")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Override log level from config",
)
@click.option("--dry-run", is_flag=True, help="Validate configuration without connecting")
@click.version_option(version=__version__)
def main(
    config: Path,
    env_file: Path,
    host: str | None,
    port: int | None,
    user: str | None,
    nick: str | None,
    group: str | None,
    password: str | None,
    messages: tuple[str, ...],
    debug: bool,
    log_level: str | None,
    dry_run: bool,
) -> None:
    """Log into an ICB server and print its messages until the session ends."""
    if env_file.exists():
        load_dotenv(env_file)

    try:
        if config.exists():
            settings = load_config(config)
            options = settings.connection.model_dump()
            logging_config = settings.logging
        else:
            options = {}
            logging_config = LoggingConfig()

        overrides = {
            "host": host,
            "port": port,
            "user": user,
            "nick": nick,
            "group": group,
            "passwd": password,
        }
        if user and not nick and options.get("nick") == options.get("user"):
            # Nickname was derived from the old login name
            options.pop("nick", None)
        options.update({key: value for key, value in overrides.items() if value is not None})
        connection_config = ConnectionConfig(**options)
    except (ValueError, ValidationError) as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    setup_logging(
        level=log_level or ("DEBUG" if debug else logging_config.level),
        format_type=logging_config.format,
        log_file=logging_config.file if not dry_run else None,
    )

    logger.info(
        "Starting ICB client",
        version=__version__,
        host=connection_config.host,
        port=connection_config.port,
        user=connection_config.user,
    )

    if dry_run:
        logger.info("Configuration validated successfully")
        click.echo("Configuration is valid!")
        sys.exit(0)

    try:
        connection = connect(connection_config, logger=logger)
    except ICBConnectionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    with connection:
        try:
            for text in messages:
                connection.send_open(text)

            for message in connection:
                line = format_message(message)
                if line is not None:
                    click.echo(line)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        except (ICBConnectionError, PacketError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    logger.info("ICB client stopped", stats=connection.stats)


if __name__ == "__main__":
    main()
