from typing import Any, Dict, Optional

from ..aggregator import JoinedRow
from ..config import Config
from ..core.result import Absent, Present
from ..core.sample import Sample
from ..summary import SummaryResult
from ..tools import Tool
from .collection import Collection


class Db:
    _COLLECTIONS = ["samples", "fusions"]
    samples: Collection
    fusions: Collection

    def __init__(self, config: Config, client: Any = None) -> None:
        self.config = config

        if config.use_mongodb:
            if client is None:
                from pymongo import MongoClient

                client = MongoClient(
                    config.mongodb_host,
                    int(config.mongodb_port),
                    username=config.mongodb_username,
                    password=config.mongodb_password,
                    authSource=config.mongodb_database,
                )
            self.db = client[config.mongodb_database]
        else:
            self.db = None

        for collection_name in Db._COLLECTIONS:
            setattr(self, collection_name, Collection(self, collection_name))

    def store_sample(self, sample: Sample) -> Optional[Dict[str, Any]]:
        if self.db is None:
            return None

        return self.samples.find_or_insert(
            {"name": sample.identifier},
            {"reads": list(sample.reads), "end_type": sample.end_type.name.lower()},
        )

    def store_fusions(
        self, row: JoinedRow, summary: Optional[SummaryResult], date: str
    ) -> Optional[Dict[str, Any]]:
        """Store the outcome of every tool for a sample.

        Returns the stored sample, or `None` if the database is disabled.
        """
        sample = self.store_sample(row.sample)
        if not sample:
            return None

        for tool in Tool:
            result = row[tool]
            new_data: Dict[str, Any]
            if isinstance(result, Present):
                new_data = {
                    "status": "present",
                    "filename": result.filename,
                    "records": result.record_count(),
                }
            else:
                assert isinstance(result, Absent)
                new_data = {"status": result.reason.value, "records": None}

            if summary is not None:
                new_data["in_summary"] = tool in summary.tools

            self.fusions.find_or_insert(
                {"sample": sample["_id"], "tool": tool.value, "date": date}, new_data
            )

        return sample
