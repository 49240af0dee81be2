"""CLI command that imports a Project Gutenberg work by its numeric id."""

from __future__ import annotations

import argparse
import json
import logging
import os

from dotenv import load_dotenv

load_dotenv()

from novira.external.config import GutenbergSettings
from novira.external.fetcher import ArchiveFetchError
from novira.external.gutenberg import GutenbergImporter, GutenbergImportError
from novira.footnotes.config import FootnoteSettings
from novira.footnotes.service import FootnotePassError
from novira.imports.service import BookImportService
from novira.storage.repository import BookRepository

DEFAULT_DB_PATH = ".novira.db"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Download and import a Project Gutenberg HTML edition")
    parser.add_argument("--work-id", type=int, required=True, help="Project Gutenberg ebook number")
    parser.add_argument("--title", default=None, help="Book title (defaults to the first chapter title)")
    parser.add_argument("--author", default=None, help="Book author")
    parser.add_argument(
        "--db-path",
        default=os.getenv("NOVIRA_DB_PATH", DEFAULT_DB_PATH),
        help="SQLite database path",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    payload: dict[str, object] = {"work_id": args.work_id}
    if args.work_id < 1:
        payload["error"] = "--work-id must be a positive integer"
        print(json.dumps(payload, ensure_ascii=True, indent=2))
        return 1

    importer = GutenbergImporter(GutenbergSettings.from_env())
    with BookRepository(args.db_path) as repository:
        service = BookImportService(
            repository,
            gutenberg_importer=importer,
            footnote_settings=FootnoteSettings.from_env(),
        )
        try:
            outcome = service.import_gutenberg(args.work_id, title=args.title, author=args.author)
        except (ArchiveFetchError, GutenbergImportError, FootnotePassError) as exc:
            payload["error"] = str(exc)
            print(json.dumps(payload, ensure_ascii=True, indent=2))
            return 1

    payload.update(outcome.to_dict())
    print(json.dumps(payload, ensure_ascii=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
