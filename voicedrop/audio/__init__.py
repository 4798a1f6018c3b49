"""Audio module - Capture and playback of raw PCM."""

# Lazy imports to avoid loading numpy/sounddevice on module load
# Use: from voicedrop.audio.recorder import AudioRecorder
# Use: from voicedrop.audio.player import AudioPlayer
