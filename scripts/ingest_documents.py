"""
Bulk document ingestion script

Index every supported file in a directory for one user
Usage: python scripts/ingest_documents.py <user_id> <directory>
"""

import mimetypes
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.database.base import Base
from app.database.session import SessionLocal, engine
from app.exceptions import DocQAException
from app.rag.extractor import EXTENSION_KINDS
from app.services.ingestion_service import get_ingestion_service
from app.utils.logger import setup_logging
import logging

setup_logging()
logger = logging.getLogger(__name__)


def main(argv=None):
    """Main function to ingest a directory of documents"""
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 2:
        print(__doc__)
        return 2

    user_id, directory = argv
    root = Path(directory)
    if not root.is_dir():
        logger.error(f"Not a directory: {root}")
        return 2

    files = sorted(p for p in root.iterdir() if p.is_file() and p.suffix.lower() in EXTENSION_KINDS)
    logger.info("=" * 60)
    logger.info(f"Ingesting {len(files)} files from {root} for user {user_id}")
    logger.info("=" * 60)

    Base.metadata.create_all(bind=engine)
    ingestion = get_ingestion_service()

    results = []
    db = SessionLocal()
    try:
        for i, path in enumerate(files, 1):
            logger.info(f"[{i}/{len(files)}] Processing: {path.name}")
            mime_type, _ = mimetypes.guess_type(path.name)
            try:
                result = ingestion.ingest_file(db, path.read_bytes(), path.name, mime_type, user_id)
                logger.info(f"  Created {result.chunks_created} chunks ({result.document_id})")
                results.append((path.name, None))
            except DocQAException as e:
                logger.error(f"  Failed: {e.code}: {e.message} ({e.details})")
                results.append((path.name, e.code))
    finally:
        db.close()

    failed = [(name, code) for name, code in results if code]
    logger.info("=" * 60)
    logger.info(f"Successfully processed: {len(results) - len(failed)}/{len(files)} files")
    for name, code in failed:
        logger.warning(f"  - {name}: {code}")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
