"""Audio producers feeding PCM16 frames into a detection session."""

from .producer import AudioDataReceiver, AudioProducer

__all__ = ["AudioDataReceiver", "AudioProducer"]
