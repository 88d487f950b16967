import argparse
import json
import sys
from typing import List, Optional

import requests

from funcli import __version__
from funcli.client import ApiError, FundamentoClient
from funcli.config import Config, ConfigError, MAX_UPLOAD_WORKERS, clear_api_key, save_api_key
from funcli.constants import SOURCE_FORMATS
from funcli.importer import ConsoleReporter, ImportSessionError, ImportSessionManager
from funcli.importer.models import SessionStatus
from funcli.logger import LogLevel, logger


def _make_client(args) -> FundamentoClient:
    return FundamentoClient(Config(api_key=args.token, base_url=args.base_url))


def _print_json(data) -> None:
    logger.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _print_document_tree(documents, level=0):
    indent = "  " * level
    for doc in documents:
        logger.echo(f"{indent}{doc.get('title')} ({doc.get('npi') or doc.get('id')})")
        if doc.get("children"):
            _print_document_tree(doc["children"], level + 1)


# ----------------------------------------------------------------------
# import
# ----------------------------------------------------------------------

def cmd_import(args) -> int:
    with _make_client(args) as client:
        manager = ImportSessionManager(
            client,
            reporter=ConsoleReporter(),
            concurrency=getattr(args, "concurrency", MAX_UPLOAD_WORKERS),
            ignore=getattr(args, "ignore", None) or [],
        )

        if args.import_command == "start":
            logger.header(f"Import {args.directory} -> {args.space}", icon="🚀")
            session = manager.start(args.space, args.directory,
                                    source_format=args.format, session_file=args.session_file)
            return 1 if session.status == SessionStatus.FAILED.value else 0
        if args.import_command == "status":
            manager.status(args.session_id)
        elif args.import_command == "cancel":
            manager.cancel(args.session_id)
        elif args.import_command == "retry":
            manager.retry(args.session_id)
        elif args.import_command == "log":
            manager.log(args.session_id, failed_only=args.failed_only, as_json=args.json)
    return 0


# ----------------------------------------------------------------------
# spaces / documents
# ----------------------------------------------------------------------

def cmd_spaces(args) -> int:
    with _make_client(args) as client:
        if args.spaces_command == "list":
            for space in client.list_spaces():
                count = len(space.get("documents") or [])
                suffix = f"  └─ {count} documents" if count else ""
                logger.echo(f"{space.get('name')} ({space.get('npi') or space.get('id')}){suffix}")
        elif args.spaces_command == "get":
            space = client.get_space(args.space_id)
            if args.json:
                _print_json(space)
            else:
                logger.rule(f"{space.get('name')} ({space.get('npi') or space.get('id')})")
                if space.get("documents"):
                    _print_document_tree(space["documents"])
                else:
                    logger.echo("No documents")
    return 0


def cmd_documents(args) -> int:
    with _make_client(args) as client:
        if args.documents_command == "list":
            documents = client.list_documents(args.space_id)
            if args.json:
                _print_json(documents)
            else:
                for doc in documents:
                    logger.echo(f"{doc.get('title')} ({doc.get('npi') or doc.get('id')})")
        elif args.documents_command == "get":
            document = client.get_document(args.document_id, args.format)
            if args.format == "json":
                _print_json(document)
            else:
                logger.echo(document)
    return 0


# ----------------------------------------------------------------------
# token
# ----------------------------------------------------------------------

def cmd_token(args) -> int:
    if args.token_command == "set":
        save_api_key(args.api_key)
        logger.success("API key stored in the system keyring")
    elif args.token_command == "clear":
        if clear_api_key():
            logger.success("API key removed from the system keyring")
        else:
            logger.info("No API key was stored")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="funcli",
        description="funcli: command-line client for Fundamento",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="""
Examples:
  1. Import a folder (re-run the same command to resume an interrupted import):
     funcli import start <space> ./notes
     funcli import start <space> ./vault --format obsidian --ignore "*.tmp" --ignore drafts

  2. Inspect or control an import session:
     funcli import status <session-id>
     funcli import log <session-id> --failed-only
     funcli import retry <session-id>
     funcli import cancel <session-id>

  3. Browse content:
     funcli spaces list
     funcli documents get <document-id> --format json
"""
    )
    parser.add_argument("--version", action="version", version=f"funcli {__version__}")
    parser.add_argument("-t", "--token", help="API token (overrides FUNDAMENTO_API_KEY and the keyring)")
    parser.add_argument("-u", "--base-url", help="Base URL (default: https://fundamento.cloud)")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command")

    # import
    import_parser = subparsers.add_parser("import", help="Bulk import a directory")
    import_sub = import_parser.add_subparsers(dest="import_command")
    import_parser.set_defaults(func=cmd_import, subparser=import_parser, sub_attr="import_command")

    start = import_sub.add_parser("start", help="Start or resume importing a directory")
    start.add_argument("space", help="Target space id")
    start.add_argument("directory", help="Local directory to import")
    start.add_argument("--format", choices=SOURCE_FORMATS, help="Source format (auto-detected by default)")
    start.add_argument("--session-file", help="Session file path (default: <directory>/.fundamento-session.json)")
    start.add_argument("--ignore", action="append", default=[], metavar="PATTERN",
                       help="Skip files and folders matching PATTERN (* = any characters); repeatable")
    start.add_argument("--concurrency", type=_positive_int, default=MAX_UPLOAD_WORKERS,
                       help=f"Parallel uploads (default: {MAX_UPLOAD_WORKERS})")

    for name, help_text in (("status", "Show import session status"),
                            ("cancel", "Cancel an import session"),
                            ("retry", "Retry failed files of an import session")):
        sub = import_sub.add_parser(name, help=help_text)
        sub.add_argument("session_id")

    log = import_sub.add_parser("log", help="Show per-file results of an import session")
    log.add_argument("session_id")
    log.add_argument("--failed-only", action="store_true", help="Only show failed files")
    log.add_argument("--json", action="store_true", help="Output as JSON")

    # spaces
    spaces_parser = subparsers.add_parser("spaces", help="Browse spaces")
    spaces_sub = spaces_parser.add_subparsers(dest="spaces_command")
    spaces_parser.set_defaults(func=cmd_spaces, subparser=spaces_parser, sub_attr="spaces_command")
    spaces_sub.add_parser("list", help="List all available spaces")
    space_get = spaces_sub.add_parser("get", help="Show a space and its document tree")
    space_get.add_argument("space_id")
    space_get.add_argument("-j", "--json", action="store_true", help="Output as JSON")

    # documents
    documents_parser = subparsers.add_parser("documents", help="Browse documents")
    documents_sub = documents_parser.add_subparsers(dest="documents_command")
    documents_parser.set_defaults(func=cmd_documents, subparser=documents_parser, sub_attr="documents_command")
    doc_list = documents_sub.add_parser("list", help="List documents in a space")
    doc_list.add_argument("space_id")
    doc_list.add_argument("-j", "--json", action="store_true", help="Output as JSON")
    doc_get = documents_sub.add_parser("get", help="Print a document")
    doc_get.add_argument("document_id")
    doc_get.add_argument("-f", "--format", choices=("markdown", "json"), default="markdown")

    # token
    token_parser = subparsers.add_parser("token", help="Manage the API key stored in the system keyring")
    token_sub = token_parser.add_subparsers(dest="token_command")
    token_parser.set_defaults(func=cmd_token, subparser=token_parser, sub_attr="token_command")
    token_set = token_sub.add_parser("set", help="Store an API key")
    token_set.add_argument("api_key")
    token_sub.add_parser("clear", help="Remove the stored API key")

    return parser


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def run(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logger.set_level(LogLevel.DEBUG)

    if not args.command:
        parser.print_help()
        return 0
    if not getattr(args, args.sub_attr, None):
        args.subparser.print_help()
        return 0

    try:
        return args.func(args)
    except (ApiError, ImportSessionError, ConfigError) as e:
        logger.error(str(e))
        return 1
    except requests.exceptions.RequestException as e:
        logger.error(f"Network error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted. Run the same `funcli import start` command again to resume.")
        return 130


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
