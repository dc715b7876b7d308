"""Coil spring forming process simulator: phase timeline, axis keyframes and playback."""
