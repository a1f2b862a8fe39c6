"""
Media path generation utilities - Single source of truth for file naming.
"""

from pathlib import Path
from typing import Optional

from ..config import Config


class MediaPathGenerator:
    """
    Centralized media file name generator.
    
    Audio clips and images are keyed by card id, so a card keeps its media
    across edits of its text.
    """
    
    AUDIO_EXT = ".mp3"
    IMAGE_EXT = ".jpg"
    
    @classmethod
    def media_dir(cls, base: Optional[str] = None) -> Path:
        """Get media directory path."""
        return Path(base or Config.MEDIA_DIR)
    
    @classmethod
    def audio_word(cls, card_id: str, voice_id: Optional[str] = None) -> str:
        """
        Generate filename for a card's pronunciation clip.
        
        Args:
            card_id: Unique card identifier
            voice_id: Voice identifier (defaults to Config.VOICE_ID)
            
        Returns:
            Filename like "_word_abc123_FENNA.mp3"
        """
        vid = voice_id or Config.VOICE_ID
        return f"_word_{card_id}_{vid}{cls.AUDIO_EXT}"
    
    @classmethod
    def image(cls, card_id: str, extension: Optional[str] = None) -> str:
        """
        Generate filename for a card image.
        
        Returns:
            Filename like "_img_abc123.jpg"
        """
        ext = extension or cls.IMAGE_EXT
        if not ext.startswith("."):
            ext = f".{ext}"
        return f"_img_{card_id}{ext}"
