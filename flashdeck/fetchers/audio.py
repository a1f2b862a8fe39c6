"""Pronunciation audio via Edge TTS."""

import os
import random
import uuid
from typing import List, Optional

import edge_tts

from ..config import Config
from ..utils.logger import setup_logger
from ..utils.parsing import TextParser
from .base import BaseFetcher

logger = setup_logger(__name__)

# Clips smaller than this are treated as failed synthesis
MIN_AUDIO_BYTES = 100


class PronunciationFetcher(BaseFetcher):
    """Synthesize a spoken word with Edge TTS."""
    
    def __init__(self, voices: Optional[List[str]] = None, rng: Optional[random.Random] = None):
        """
        Initialize pronunciation fetcher.
        
        Args:
            voices: Voices to pick from (defaults to the current language's voices)
            rng: Random source for voice selection
        """
        self.available_voices = voices or Config.settings.get("available_voices", [Config.VOICE])
        self._rng = rng or random.Random()
    
    def get_random_voice(self) -> str:
        return self._rng.choice(self.available_voices)
    
    async def fetch(self, source: str, output_path: str, volume: str = "+0%") -> bool:
        """
        Generate an MP3 for ``source``.
        
        Uses atomic write pattern: write to temp file, then rename.
        
        Args:
            source: Text to speak
            output_path: Path to save MP3
            volume: Volume adjustment (e.g., "+0%", "+40%")
            
        Returns:
            True if successful, False otherwise
        """
        text = TextParser.clean_for_tts(source)
        if not text:
            return False
        
        temp_path = None
        try:
            directory = os.path.dirname(output_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            temp_path = f"{output_path}.{uuid.uuid4().hex[:8]}.tmp"
            
            communicate = edge_tts.Communicate(text, self.get_random_voice(), volume=volume)
            await communicate.save(temp_path)
            
            if os.path.exists(temp_path) and os.path.getsize(temp_path) > MIN_AUDIO_BYTES:
                os.replace(temp_path, output_path)
                temp_path = None
                return True
            return False
        
        except Exception as e:
            # edge-tts surfaces network and service errors with assorted types
            logger.warning("Error generating audio for %r: %s", text[:30], str(e)[:80])
            return False
        
        finally:
            if temp_path and os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass
