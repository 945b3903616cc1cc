"""Document life-cycle management for text editors: files, drafts, backups and bookmarks."""

__version__ = "0.1.0"
__all__ = ["bookmark", "storage", "documentmanager"]