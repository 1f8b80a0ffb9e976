"""The module for the abstraction of a MongoDB collection."""
from typing import TYPE_CHECKING, Any, Dict, Optional, cast

if TYPE_CHECKING:
    from .db import Db


class Collection:
    """A thin helper around a MongoDB collection.

    When the database is disabled in the configuration every operation
    does nothing and returns `None`.
    """

    def __init__(self, db: "Db", collection_name: str) -> None:
        """Create a new instance of the class.

        Args:
            db: an instance of `Db`.
            collection_name: the name of the collection in the database.
        """
        self.collection_name = collection_name
        if db.db is not None:
            self.collection = db.db[collection_name]
        else:
            self.collection = None

    def find_or_insert(
        self, data: Dict[Any, Any], new_data: Optional[Dict[Any, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """Find an element and insert it if not found.

        The element matching `data` is updated with `new_data`, or it is
        created with the content of both if it does not exist.

        Returns:
            The content in the database, after the eventual insertion.
            `None` if the MongoDB cannot be used.

        """
        if self.collection is None:
            return None

        from pymongo import ReturnDocument

        set_data = dict(data)
        if new_data is not None:
            set_data.update(new_data)
        retval = self.collection.find_one_and_update(
            data, {"$set": set_data}, upsert=True, return_document=ReturnDocument.AFTER
        )
        return cast(Optional[Dict[str, Any]], retval)

