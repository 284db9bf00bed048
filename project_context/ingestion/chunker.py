import logging
import os
from pathlib import Path
from typing import List, Optional

from langchain_core.documents import Document
from langchain_text_splitters import RecursiveCharacterTextSplitter

logger = logging.getLogger(__name__)

# Class and method boundaries for the languages discovery usually targets
SEPARATORS = [
    "\nclass ",
    "\npublic class ",
    "\ninterface ",
    "\n    public ",
    "\n    private ",
    "\n    protected ",
    "\ndef ",
    "\n\n",
    "\n",
]


def read_source(path: str) -> Optional[str]:
    """Read a source file as text, or return None if it cannot be read."""
    p = Path(path)
    try:
        return p.read_text(encoding='utf-8')
    except UnicodeDecodeError:
        try:
            return p.read_text(encoding='latin-1')
        except Exception as e:
            logger.warning("⚠️  Skipping unreadable file %s: %s", path, e)
            return None
    except OSError as e:
        logger.warning("⚠️  Skipping unreadable file %s: %s", path, e)
        return None


class SemanticChunker:
    """Split source files into chunks along declaration boundaries"""

    def __init__(self, chunk_size: int = 2000, chunk_overlap: int = 200):
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.splitter = RecursiveCharacterTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            separators=SEPARATORS,
        )

    def chunk_file(self, file_path: str, root: Optional[str] = None) -> List[Document]:
        text = read_source(file_path)
        if not text:
            return []

        try:
            relative_path = os.path.relpath(file_path, root) if root else file_path
        except ValueError:
            relative_path = file_path

        documents = []
        for index, chunk in enumerate(self.splitter.split_text(text)):
            documents.append(Document(
                page_content=chunk,
                metadata={
                    'file_path': file_path,
                    'relative_path': relative_path,
                    'chunk_index': index,
                },
            ))
        return documents

    def chunk_files(self, file_paths: List[str], root: Optional[str] = None) -> List[Document]:
        logger.info("✂️  Chunking %d files...", len(file_paths))
        chunked = [doc for path in file_paths for doc in self.chunk_file(path, root)]
        logger.info("✅ Created %d chunks", len(chunked))
        return chunked
