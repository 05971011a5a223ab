"""Multilingual course content trees and their translation round trip."""

from coursetree.core.schema.index import SchemaIndex
from coursetree.core.tree.data import CourseData
from coursetree.core.tree.language import Language
from coursetree.errors import CourseTreeError, FormatError, StructuralError
from coursetree.filesystem import LocalFileSystem
from coursetree.protocols import CodecProtocol, FileSystemProtocol, SchemaIndexProtocol

__version__ = "0.1.0"

__all__ = [
    "CodecProtocol",
    "CourseData",
    "CourseTreeError",
    "FileSystemProtocol",
    "FormatError",
    "Language",
    "LocalFileSystem",
    "SchemaIndex",
    "SchemaIndexProtocol",
    "StructuralError",
]
