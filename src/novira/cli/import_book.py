"""CLI command that imports one HTML, RTF or DOCX file into the book database."""

from __future__ import annotations

import argparse
import json
import logging
import mimetypes
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from novira.footnotes.config import FootnoteSettings
from novira.footnotes.service import FootnotePassError
from novira.imports.service import BookImportService
from novira.ingestion.ingestor import IngestionError
from novira.storage.repository import BookRepository

DEFAULT_DB_PATH = ".novira.db"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import a book file and run the footnote pass")
    parser.add_argument("--path", required=True, help="HTML, RTF or DOCX file")
    parser.add_argument("--title", default=None, help="Book title (defaults to the file name)")
    parser.add_argument("--author", default=None, help="Book author")
    parser.add_argument(
        "--db-path",
        default=os.getenv("NOVIRA_DB_PATH", DEFAULT_DB_PATH),
        help="SQLite database path",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    source_path = Path(args.path)
    payload: dict[str, object] = {"path": str(source_path)}
    if not source_path.is_file():
        payload["error"] = f"File not found: {source_path}"
        print(json.dumps(payload, ensure_ascii=True, indent=2))
        return 1

    content_type, _ = mimetypes.guess_type(source_path.name)
    with BookRepository(args.db_path) as repository:
        service = BookImportService(repository, footnote_settings=FootnoteSettings.from_env())
        try:
            outcome = service.import_upload(
                source_path.read_bytes(),
                source_path.name,
                content_type,
                title=args.title,
                author=args.author,
            )
        except (IngestionError, FootnotePassError) as exc:
            payload["error"] = str(exc)
            print(json.dumps(payload, ensure_ascii=True, indent=2))
            return 1

    payload.update(outcome.to_dict())
    print(json.dumps(payload, ensure_ascii=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
