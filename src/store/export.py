"""JSONL export of scraped game listings."""
import logging
from pathlib import Path
from typing import Iterable

import aiofiles
import orjson
from pydantic import BaseModel

from src.config import EXPORT_DIR

logger = logging.getLogger(__name__)


class JsonlExporter:
    """Writes one JSONL file per channel and run."""

    def __init__(self, export_dir: Path = EXPORT_DIR):
        self.export_dir = export_dir
        self.export_dir.mkdir(parents=True, exist_ok=True)

    def _get_export_file(self, channel: str, run_id: str) -> Path:
        return self.export_dir / f"{channel}_{run_id}.jsonl"

    async def write_records(self, records: Iterable[BaseModel], channel: str, run_id: str) -> Path:
        """Append records to the channel export file and return its path."""
        export_file = self._get_export_file(channel, run_id)
        count = 0
        async with aiofiles.open(export_file, "ab") as f:
            for record in records:
                await f.write(orjson.dumps(record.model_dump(mode="json")) + b"\n")
                count += 1
        logger.info(f"[EXPORT] {count} records -> {export_file.name}")
        return export_file

    async def read_records(self, export_file: Path) -> list[dict]:
        """Read all records from an export file."""
        if not export_file.exists():
            return []

        records = []
        async with aiofiles.open(export_file, "rb") as f:
            async for line in f:
                if not line.strip():
                    continue
                try:
                    records.append(orjson.loads(line))
                except orjson.JSONDecodeError as e:
                    logger.warning(f"Error reading export line: {e}")
                    continue
        return records
