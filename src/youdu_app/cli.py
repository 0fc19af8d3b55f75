"""Command-line interface for the Youdu app SDK."""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from . import __version__
from .api import ExLink, MpNews, ReceivedMessage, YouduClient
from .callback import CallbackServer
from .core import YouduConfig, get_logger, setup_logging
from .errors import YouduError

logger = get_logger("cli")

console = Console()


def load_config(args: argparse.Namespace) -> YouduConfig:
    """Load configuration from ``--config`` when it exists, else from the environment."""
    path = Path(args.config) if args.config else None
    if path is not None and path.exists():
        config = YouduConfig.load(path)
    else:
        config = YouduConfig()  # type: ignore[call-arg]
    if getattr(args, "log_level", None):
        config.logging = config.logging.model_copy(update={"level": args.log_level})
    return config


def _receivers(args: argparse.Namespace) -> dict[str, str]:
    return {"to_user": args.to_user or "", "to_dept": args.to_dept or ""}


def cmd_token(client: YouduClient, args: argparse.Namespace) -> int:
    token, expire = client.get_token()
    console.print(f"[green]Access token:[/] {token} (expires in {expire}s)")
    return 0


def cmd_send_text(client: YouduClient, args: argparse.Namespace) -> int:
    client.get_token()
    client.send_text(args.content, **_receivers(args))
    console.print("[green]Text message sent.[/]")
    return 0


def cmd_send_image(client: YouduClient, args: argparse.Namespace) -> int:
    client.get_token()
    if args.media_id:
        client.send_image(args.media_id, **_receivers(args))
    else:
        media_id = client.send_image_path(args.path, **_receivers(args))
        console.print(f"Uploaded image: {media_id}")
    console.print("[green]Image message sent.[/]")
    return 0


def cmd_send_file(client: YouduClient, args: argparse.Namespace) -> int:
    client.get_token()
    if args.media_id:
        client.send_file(args.media_id, **_receivers(args))
    else:
        media_id = client.send_file_path(args.path, name=args.name, **_receivers(args))
        console.print(f"Uploaded file: {media_id}")
    console.print("[green]File message sent.[/]")
    return 0


def cmd_send_mpnews(client: YouduClient, args: argparse.Namespace) -> int:
    client.get_token()
    article = MpNews(
        title=args.title,
        media_id=args.media_id or "",
        digest=args.digest,
        content=args.content,
        url=args.url,
        show_front=1 if args.show_front else 0,
        path=args.image or "",
    )
    client.send_mpnews([article], **_receivers(args))
    console.print("[green]MpNews message sent.[/]")
    return 0


def cmd_send_exlink(client: YouduClient, args: argparse.Namespace) -> int:
    client.get_token()
    link = ExLink(
        title=args.title,
        url=args.url,
        digest=args.digest,
        media_id=args.media_id or "",
        path=args.image or "",
    )
    client.send_exlink([link], **_receivers(args))
    console.print("[green]ExLink message sent.[/]")
    return 0


def cmd_upload(client: YouduClient, args: argparse.Namespace) -> int:
    client.get_token()
    if args.type == "image":
        media_id = client.upload_image(args.path, args.name)
    else:
        media_id = client.upload_file(args.path, args.name)
    console.print(f"[green]Uploaded![/] Media id: {media_id}")
    return 0


def cmd_download(client: YouduClient, args: argparse.Namespace) -> int:
    client.get_token()
    target = client.download_to(args.media_id, args.output)
    console.print(f"[green]Saved to[/] {target}")
    return 0


def cmd_search(client: YouduClient, args: argparse.Namespace) -> int:
    client.get_token()
    name, size = client.search_file(args.media_id)
    console.print(f"{name} ({size} bytes)")
    return 0


def cmd_user(client: YouduClient, args: argparse.Namespace) -> int:
    client.get_token()
    user = client.get_user(args.user_id)

    table = Table(title=f"User {user.user_id or args.user_id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Name", user.name)
    table.add_row("Gender", str(user.gender))
    table.add_row("Mobile", user.mobile)
    table.add_row("Phone", user.phone)
    table.add_row("Email", user.email)
    table.add_row("Departments", ", ".join(str(d) for d in user.dept))
    console.print(table)
    return 0


def _print_message(message: ReceivedMessage) -> None:
    console.print(
        f"[cyan]{message.package_id}[/] {message.msg_type or '?'} "
        f"from {message.from_user or '?'}: {message.content}"
    )


def cmd_serve(client: YouduClient, args: argparse.Namespace, config: YouduConfig) -> int:
    callback = config.callback.model_copy(
        update={
            key: value
            for key, value in {"host": args.host, "port": args.port, "path": args.path}.items()
            if value is not None
        }
    )
    server = CallbackServer(client.codec, handler=_print_message, config=callback)
    server.serve_forever()
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="youdu-app",
        description="Youdu application API command line client",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Configuration file (YAML or JSON). Falls back to YOUDU_APP_* variables.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override log level",
    )

    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("token", help="Acquire an access token")

    def add_receivers(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("-u", "--to-user", default="", help="Receivers, joined by '|'")
        sub.add_argument("-d", "--to-dept", default="", help="Departments, joined by '|'")

    send_text = subparsers.add_parser("send-text", help="Send a text message")
    add_receivers(send_text)
    send_text.add_argument("content", help="Message text")

    send_image = subparsers.add_parser("send-image", help="Send an image message")
    add_receivers(send_image)
    send_image.add_argument("path", nargs="?", help="Local image to upload and send")
    send_image.add_argument("--media-id", help="Send an already uploaded image")

    send_file = subparsers.add_parser("send-file", help="Send a file message")
    add_receivers(send_file)
    send_file.add_argument("path", nargs="?", help="Local file to upload and send")
    send_file.add_argument("--name", help="File name shown to receivers")
    send_file.add_argument("--media-id", help="Send an already uploaded file")

    send_mpnews = subparsers.add_parser("send-mpnews", help="Send a single-article mpnews message")
    add_receivers(send_mpnews)
    send_mpnews.add_argument("title")
    send_mpnews.add_argument("--content", default="")
    send_mpnews.add_argument("--digest", default="")
    send_mpnews.add_argument("--url", default="")
    send_mpnews.add_argument("--media-id", help="Cover image media id")
    send_mpnews.add_argument("--image", help="Local cover image, uploaded when no media id")
    send_mpnews.add_argument("--show-front", action="store_true")

    send_exlink = subparsers.add_parser("send-exlink", help="Send a single external link")
    add_receivers(send_exlink)
    send_exlink.add_argument("title")
    send_exlink.add_argument("url")
    send_exlink.add_argument("--digest", default="")
    send_exlink.add_argument("--media-id", help="Cover image media id")
    send_exlink.add_argument("--image", help="Local cover image, uploaded when no media id")

    upload = subparsers.add_parser("upload", help="Upload a file or image")
    upload.add_argument("type", choices=["file", "image"])
    upload.add_argument("path")
    upload.add_argument("--name", help="Name shown to receivers")

    download = subparsers.add_parser("download", help="Download media to a file")
    download.add_argument("media_id")
    download.add_argument("output")

    search = subparsers.add_parser("search", help="Show name and size of a media file")
    search.add_argument("media_id")

    user = subparsers.add_parser("user", help="Look up a user")
    user.add_argument("user_id")

    serve = subparsers.add_parser("serve", help="Run the callback receiver")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--path", default=None, help="Callback path")

    return parser


HANDLERS: dict[str, Callable[[YouduClient, argparse.Namespace], int]] = {
    "token": cmd_token,
    "send-text": cmd_send_text,
    "send-image": cmd_send_image,
    "send-file": cmd_send_file,
    "send-mpnews": cmd_send_mpnews,
    "send-exlink": cmd_send_exlink,
    "upload": cmd_upload,
    "download": cmd_download,
    "search": cmd_search,
    "user": cmd_user,
}


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point.

    Args:
        argv: Optional sequence of CLI arguments (without the program name).

    Returns:
        Process exit code. 0 for success.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command in ("send-image", "send-file") and not (args.path or args.media_id):
        parser.error(f"{args.command} needs a path or --media-id")

    try:
        config = load_config(args)
    except (YouduError, ValidationError) as exc:
        console.print(f"[red]Configuration error:[/] {exc}")
        return 1

    setup_logging(config.logging)

    try:
        with YouduClient.from_config(config) as client:
            if args.command == "serve":
                return cmd_serve(client, args, config)
            return HANDLERS[args.command](client, args)
    except (YouduError, ValueError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        console.print(f"[red]Error:[/] {exc}")
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
