"""VoiceDrop - anonymous store-and-forward voice messages."""
