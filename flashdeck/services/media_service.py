"""
Media Service - per-card pronunciation clips, images and optional enrichment.

Speech and translation are optional collaborators: when missing or failing
the feature degrades and callers get None, never an exception.
"""

from pathlib import Path
from typing import Callable, Optional

from ..config import Config
from ..fetchers import BaseFetcher, PronunciationFetcher
from ..models.card import Card
from ..utils.logger import setup_logger
from ..utils.paths import MediaPathGenerator

logger = setup_logger(__name__)

# (text, source_language, target_language) -> suggestion
Translator = Callable[[str, str, str], Optional[str]]


class MediaService:
    """
    Service for card media files.
    
    Usage:
        media = MediaService()
        if not media.audio_exists(card.id):
            await media.generate_pronunciation(card)
    """
    
    def __init__(
        self,
        media_dir: Optional[str] = None,
        fetcher: Optional[BaseFetcher] = None,
        translator: Optional[Translator] = None
    ):
        """
        Initialize media service.
        
        Args:
            media_dir: Directory for media files (defaults to Config.MEDIA_DIR)
            fetcher: Pronunciation fetcher (lazily an Edge TTS fetcher)
            translator: Optional translation suggestion callable
        """
        self.media_dir = MediaPathGenerator.media_dir(media_dir)
        self.media_dir.mkdir(parents=True, exist_ok=True)
        self._fetcher = fetcher
        self.translator = translator
    
    @property
    def fetcher(self) -> BaseFetcher:
        """Lazy-load pronunciation fetcher."""
        if self._fetcher is None:
            self._fetcher = PronunciationFetcher()
        return self._fetcher
    
    async def close(self) -> None:
        if self._fetcher:
            await self._fetcher.close()
            self._fetcher = None
    
    async def __aenter__(self):
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
    
    # ==================== Audio ====================
    
    def audio_path(self, card_id: str) -> Path:
        return self.media_dir / MediaPathGenerator.audio_word(card_id)
    
    def audio_exists(self, card_id: str) -> bool:
        """Check if a card has a non-empty pronunciation clip."""
        path = self.audio_path(card_id)
        return path.exists() and path.stat().st_size > 0
    
    def delete_audio(self, card_id: str) -> bool:
        path = self.audio_path(card_id)
        if not path.exists():
            return False
        path.unlink()
        return True
    
    async def generate_pronunciation(self, card: Card, force: bool = False) -> Optional[Path]:
        """
        Create the pronunciation clip for a card's word.
        
        Args:
            card: Card to speak
            force: Regenerate even if a clip exists
            
        Returns:
            Path to the clip, or None if speech is unavailable
        """
        output_path = self.audio_path(card.id)
        if not force and self.audio_exists(card.id):
            return output_path
        
        try:
            success = await self.fetcher.fetch(card.word, str(output_path))
        except Exception as e:
            logger.warning("Speech unavailable for %r: %s", card.word, e)
            return None
        return output_path if success else None
    
    # ==================== Images ====================
    
    def save_image(self, card_id: str, data: bytes, extension: str = ".jpg") -> str:
        """
        Store picked image bytes for a card.
        
        Returns:
            File name to keep in ``Card.image_filename``
        """
        filename = MediaPathGenerator.image(card_id, extension)
        (self.media_dir / filename).write_bytes(data)
        return filename
    
    def image_path(self, filename: str) -> Optional[Path]:
        if not filename:
            return None
        path = self.media_dir / filename
        return path if path.exists() else None
    
    # ==================== Translation ====================
    
    def suggest_translation(self, text: str, source: Optional[str] = None, target: str = "EN") -> Optional[str]:
        """
        Ask the translator for a definition suggestion.
        
        Returns:
            Suggested text, or None when no translator is set or it fails
        """
        if self.translator is None or not text:
            return None
        try:
            suggestion = self.translator(text, source or Config.CURRENT_LANG, target)
        except Exception as e:
            logger.warning("Translation failed for %r: %s", text, e)
            return None
        return suggestion.strip() if suggestion else None
