from scriptreel.providers.arcads import ArcadsProvider
from scriptreel.providers.base import VideoProvider, normalize_status
from scriptreel.providers.wav2lip import Wav2LipProvider


def default_providers():
    return {
        ArcadsProvider.name: ArcadsProvider(),
        Wav2LipProvider.name: Wav2LipProvider(),
    }


__all__ = ["ArcadsProvider", "Wav2LipProvider", "VideoProvider", "normalize_status", "default_providers"]
