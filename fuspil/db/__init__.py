"""A package to store the results of the runs into a MongoDB.

The database is optional, and it is used only when `use_mongodb` is set
in the configuration and `pymongo` is installed.

There are 2 modules available:
* db: the main database helper, with the serialization of samples and
      tool results;
* collection: the abstraction layer for the collections of the DB.
"""
__all__ = ["db", "collection"]

from .db import Db
