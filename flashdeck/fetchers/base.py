"""Base fetcher class."""

from abc import ABC, abstractmethod


class BaseFetcher(ABC):
    """
    Abstract base class for media fetchers.
    
    Provides lifecycle management and async context manager support.
    Subclasses implement fetch() and optionally override close().
    """
    
    @abstractmethod
    async def fetch(self, source: str, output_path: str) -> bool:
        """
        Produce a media file from ``source`` and save it to ``output_path``.
        
        Returns:
            True if successful, False otherwise
        """
        pass
    
    async def close(self) -> None:
        """Close any open resources."""
        pass
    
    async def __aenter__(self) -> "BaseFetcher":
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
