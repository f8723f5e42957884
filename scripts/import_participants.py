"""Register participants from a plain-text file.

One participant per line, ``draw_number,name,group``; blank lines are
skipped, malformed or duplicate lines are counted as failures.

Usage:
  python scripts/import_participants.py participants.txt
  python scripts/import_participants.py participants.txt --database-url sqlite:///./drawroom.db
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from collections.abc import Sequence

from dotenv import load_dotenv
from tqdm import tqdm

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from drawroom.config import resolve_database_url
from drawroom.db import create_app_engine, create_session_factory
from drawroom.models.base import Base
from drawroom.services.participant_service import ParticipantService


logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import participants from a text file")
    parser.add_argument("path", type=pathlib.Path)
    parser.add_argument("--database-url", dest="database_url", type=str, default=None)
    parser.add_argument("--encoding", dest="encoding", type=str, default="utf-8")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    load_dotenv()

    if not args.path.is_file():
        raise SystemExit(f"File not found: {args.path}")

    lines = args.path.read_text(encoding=args.encoding).splitlines()

    engine = create_app_engine(args.database_url or resolve_database_url())
    Base.metadata.create_all(bind=engine)
    session_factory = create_session_factory(engine)

    service = ParticipantService()
    with session_factory.begin() as session:
        summary = service.import_lines(session, tqdm(lines, desc="participants", unit="line"))

    logger.info("Added %s participants, %s failed", summary.added, summary.failed)
    return 0 if summary.failed == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
